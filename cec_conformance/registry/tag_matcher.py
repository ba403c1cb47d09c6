# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Tag selection using Robot Framework tag pattern semantics.

Operator patterns are resolved against the feature area tags once, before
any bus traffic, producing a ``Tag`` filter. An area runs if all of its tags
are in the filter.

Tag Pattern Syntax (from Robot Framework):
    - Simple tags: 'core', 'deck-control'
    - Wildcards: 'timer*', 'osd-?isplay'
    - AND: 'coreANDdeck-control' or 'core&deck-control'
    - OR: 'coreORrouting-control'
    - NOT: 'timer*NOTtimer-programming'
    - Patterns are case-insensitive and ignore underscores

Usage:
    >>> matcher = TagMatcher(include=['core', 'deck*'], exclude=['tuner-control'])
    >>> matcher.should_include(['deck-control'])  # True
    >>> matcher.resolve()                         # Tag.CORE | Tag.DECK_CONTROL
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from robot.model import TagPatterns

from cec_conformance.core.errors import OperatorInputError
from cec_conformance.registry.registry import ALL_TAGS, Tag

logger = logging.getLogger(__name__)


class TagMatcher:
    """Matches tags against include/exclude patterns.

    A tag is selected if it matches any include pattern (or no include
    pattern was given) and matches no exclude pattern.

    Attributes:
        include_patterns: TagPatterns object for include matching.
        exclude_patterns: TagPatterns object for exclude matching.
    """

    def __init__(
        self,
        include: Sequence[str] | None = None,
        exclude: Sequence[str] | None = None,
    ) -> None:
        self._include_list = list(include) if include else []
        self._exclude_list = list(exclude) if exclude else []

        self.include_patterns = (
            TagPatterns(self._include_list) if self._include_list else None
        )
        self.exclude_patterns = (
            TagPatterns(self._exclude_list) if self._exclude_list else None
        )

    @property
    def has_filters(self) -> bool:
        return bool(self._include_list or self._exclude_list)

    def should_include(self, tags: Sequence[str] | None) -> bool:
        """Determine if an item with the given tag labels is selected.

        Args:
            tags: Tag labels of the item. Can be None or empty.

        Returns:
            True if the item should be included.
        """
        tags_list = list(tags) if tags else []

        if self.exclude_patterns and self.exclude_patterns.match(tags_list):
            return False

        if not self.include_patterns:
            return True

        return bool(self.include_patterns.match(tags_list))

    def resolve(self, universe: Tag = ALL_TAGS) -> Tag:
        """Resolve the patterns to the set of selected tags.

        Raises:
            OperatorInputError: If include patterns were given but select no tag.
        """
        selected = Tag(0)
        for tag in Tag.members():
            if tag & universe and self.should_include([tag.label]):
                selected |= tag

        if self._include_list and not selected:
            known = ", ".join(tag.label for tag in Tag.members())
            raise OperatorInputError(
                f"No tag matches {self._include_list}. Known tags: {known}"
            )
        logger.debug(f"{self!r} selected {selected!r}")
        return selected

    def __repr__(self) -> str:
        return f"TagMatcher(include={self._include_list}, exclude={self._exclude_list})"
