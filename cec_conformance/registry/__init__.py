"""Test case catalogue and tag selection."""

from cec_conformance.registry.registry import (
    ALL_TAGS,
    ExpectedResult,
    Tag,
    TestArea,
    TestCase,
    TestRegistry,
)
from cec_conformance.registry.tag_matcher import TagMatcher

__all__ = [
    "ALL_TAGS",
    "ExpectedResult",
    "Tag",
    "TagMatcher",
    "TestArea",
    "TestCase",
    "TestRegistry",
]
