# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Catalogue of test areas and test cases plus the operator's expected results."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import IntFlag
from functools import reduce
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from cec_conformance.core.errors import DuplicateTestCaseError, OperatorInputError
from cec_conformance.core.types import Verdict
from cec_conformance.utils.strings import safename

if TYPE_CHECKING:
    from cec_conformance.engine import Engine

logger = logging.getLogger(__name__)


class Tag(IntFlag):
    """Protocol feature areas used for selective execution."""

    CORE = 1 << 0
    POWER_STATUS = 1 << 1
    SYSTEM_INFORMATION = 1 << 2
    VENDOR_SPECIFIC_COMMANDS = 1 << 3
    DEVICE_OSD_TRANSFER = 1 << 4
    OSD_DISPLAY = 1 << 5
    REMOTE_CONTROL_PASSTHROUGH = 1 << 6
    DEVICE_MENU_CONTROL = 1 << 7
    DECK_CONTROL = 1 << 8
    TUNER_CONTROL = 1 << 9
    ONE_TOUCH_RECORD = 1 << 10
    TIMER_PROGRAMMING = 1 << 11
    CAP_DISCOVERY_CONTROL = 1 << 12
    ROUTING_CONTROL = 1 << 13

    @property
    def label(self) -> str:
        """Command line name, e.g. ``power-status``."""
        assert self.name is not None
        return self.name.lower().replace("_", "-")

    @classmethod
    def members(cls) -> list["Tag"]:
        return [tag for tag in cls if tag.name is not None and tag.value]


ALL_TAGS = reduce(lambda acc, tag: acc | tag, Tag.members(), Tag(0))

# (engine, local logical address, target logical address, interactive) -> Verdict
CaseBody = Callable[["Engine", int, int, bool], Verdict]


@dataclass(frozen=True)
class TestCase:
    """A named protocol check.

    Attributes:
        name: Display name; unique within the catalogue by its safe name
        la_mask: Logical addresses (roles) for which the case is meaningful
        body: The case implementation
        for_cec20: Only run when both the remote and the adapter speak CEC 2.0
        in_standby: The remote is expected to be in standby while running
    """

    __test__ = False

    name: str
    la_mask: int
    body: CaseBody
    for_cec20: bool = False
    in_standby: bool = False

    @property
    def safe_name(self) -> str:
        return safename(self.name)

    def applies_to(self, la: int) -> bool:
        return bool(self.la_mask & (1 << la))


@dataclass(frozen=True)
class TestArea:
    __test__ = False

    name: str
    tags: Tag
    cases: tuple[TestCase, ...]

    def selected_by(self, tag_filter: Tag) -> bool:
        """An area runs only if all of its tags are selected."""
        return (self.tags & tag_filter) == self.tags


@dataclass(frozen=True)
class ExpectedResult:
    verdict: Verdict
    no_warnings: bool = False


class TestRegistry:
    """Ordered catalogue of test areas.

    Case names are keyed by their safe name. Registering the same body twice
    under one name (a case shared by two areas) is allowed; two different
    bodies under one name are rejected.
    """

    __test__ = False

    def __init__(self, areas: Iterable[TestArea] = ()) -> None:
        self._areas: list[TestArea] = []
        self._bodies: dict[str, CaseBody] = {}
        self._expected: dict[str, ExpectedResult] = {}
        for area in areas:
            self.register(area)

    def register(self, area: TestArea) -> None:
        """Add an area to the catalogue.

        Raises:
            DuplicateTestCaseError: If a case name is already taken by a
                different body.
        """
        for case in area.cases:
            existing = self._bodies.get(case.safe_name)
            if existing is not None and existing is not case.body:
                raise DuplicateTestCaseError(
                    f"Duplicate test case name, but different tests: {case.name}"
                )
        for case in area.cases:
            self._bodies[case.safe_name] = case.body
        self._areas.append(area)
        logger.debug(f"Registered area '{area.name}' with {len(area.cases)} case(s)")

    @property
    def areas(self) -> list[TestArea]:
        return list(self._areas)

    def list_test_names(self) -> list[tuple[str, str]]:
        """All (area name, case safe name) pairs in catalogue order."""
        return [(area.name, case.safe_name) for area in self._areas for case in area.cases]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and safename(name) in self._bodies

    def select(self, tag_filter: Tag) -> list[TestArea]:
        return [area for area in self._areas if area.selected_by(tag_filter)]

    def set_expected_result(self, name: str, token: str, no_warnings: bool = False) -> None:
        """Record the verdict the operator expects for a case.

        Args:
            name: Case name in any spelling that normalizes to a known safe name
            token: Verdict code or name, see ``Verdict.parse``
            no_warnings: Additionally require the case to emit no warnings

        Raises:
            OperatorInputError: If the name is unknown or the token unparsable.
        """
        key = safename(name)
        if key not in self._bodies:
            raise OperatorInputError(f"Unknown test case: {name}")
        self._expected[key] = ExpectedResult(Verdict.parse(token), no_warnings)

    def set_expected_assignment(self, assignment: str, no_warnings: bool = False) -> None:
        """Parse a ``name=verdict`` command line assignment."""
        name, sep, token = assignment.partition("=")
        if not sep or not name.strip() or not token.strip():
            raise OperatorInputError(f"Expected result must be given as 'name=verdict', got '{assignment}'")
        self.set_expected_result(name.strip(), token, no_warnings)

    def load_expected_results(self, path: Path) -> None:
        """Load expectations from a YAML file.

        Format::

            expected:
              give-cec-version: ok
              set-osd-name:
                verdict: ok-presumed
                no_warnings: true

        Raises:
            OperatorInputError: If the file cannot be parsed or has an
                unexpected structure.
        """
        try:
            with open(path) as file:
                data = yaml.safe_load(file) or {}
        except (OSError, yaml.YAMLError) as e:
            raise OperatorInputError(f"Cannot read expected results from {path}: {e}") from e

        entries = data.get("expected") if isinstance(data, dict) else None
        if not isinstance(entries, dict):
            raise OperatorInputError(f"{path}: top-level 'expected' mapping is missing")

        for name, value in entries.items():
            self._load_entry(str(name), value, path)
        logger.info(f"Loaded {len(entries)} expected result(s) from {path}")

    def _load_entry(self, name: str, value: Any, path: Path) -> None:
        if isinstance(value, dict):
            if "verdict" not in value:
                raise OperatorInputError(f"{path}: entry '{name}' has no 'verdict'")
            self.set_expected_result(name, str(value["verdict"]), bool(value.get("no_warnings", False)))
        else:
            self.set_expected_result(name, str(value))

    def expected_for(self, name: str) -> ExpectedResult | None:
        return self._expected.get(safename(name))
