# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Tests for the test case catalogue and expected results."""

from pathlib import Path

import pytest

from cec_conformance.core.errors import DuplicateTestCaseError, OperatorInputError
from cec_conformance.core.types import Verdict
from cec_conformance.registry import ExpectedResult, Tag, TestArea, TestCase, TestRegistry
from cec_conformance.scenarios import default_areas


def _ok(engine, local, target, interactive) -> Verdict:
    return Verdict.PASS


def _fail(engine, local, target, interactive) -> Verdict:
    return Verdict.FAIL


ALL_ADDRESSES = 0x7FFF


class TestTestCase:
    def test_safe_name(self) -> None:
        case = TestCase("Give OSD Name / Set", ALL_ADDRESSES, _ok)

        assert case.safe_name == "give-osd-name-set"

    def test_applies_to(self) -> None:
        case = TestCase("TV only", 1 << 0, _ok)

        assert case.applies_to(0)
        assert not case.applies_to(4)


class TestTestArea:
    def test_selected_only_when_all_tags_are_selected(self) -> None:
        area = TestArea("Routing", Tag.ROUTING_CONTROL | Tag.CORE, ())

        assert area.selected_by(Tag.ROUTING_CONTROL | Tag.CORE | Tag.DECK_CONTROL)
        assert not area.selected_by(Tag.ROUTING_CONTROL)


class TestRegistration:
    def setup_method(self) -> None:
        self.registry = TestRegistry()

    def test_duplicate_name_with_different_body_is_rejected(self) -> None:
        self.registry.register(TestArea("A", Tag.CORE, (TestCase("Check", ALL_ADDRESSES, _ok),)))

        with pytest.raises(DuplicateTestCaseError, match="Check"):
            self.registry.register(TestArea("B", Tag.CORE, (TestCase("check", ALL_ADDRESSES, _fail),)))

    def test_shared_case_is_allowed(self) -> None:
        shared = TestCase("Shared", ALL_ADDRESSES, _ok)

        self.registry.register(TestArea("A", Tag.CORE, (shared,)))
        self.registry.register(TestArea("B", Tag.POWER_STATUS, (shared,)))

        assert [area.name for area in self.registry.areas] == ["A", "B"]

    def test_list_test_names(self) -> None:
        self.registry.register(
            TestArea(
                "Core",
                Tag.CORE,
                (TestCase("First Case", ALL_ADDRESSES, _ok), TestCase("Second", ALL_ADDRESSES, _fail)),
            )
        )

        assert self.registry.list_test_names() == [("Core", "first-case"), ("Core", "second")]
        assert "First Case" in self.registry
        assert "first_case" in self.registry
        assert "third" not in self.registry

    def test_select_by_tags(self) -> None:
        self.registry.register(TestArea("Core", Tag.CORE, ()))
        self.registry.register(TestArea("Deck", Tag.DECK_CONTROL, ()))

        selected = self.registry.select(Tag.DECK_CONTROL)

        assert [area.name for area in selected] == ["Deck"]


class TestExpectedResults:
    def setup_method(self) -> None:
        self.registry = TestRegistry(
            [TestArea("Core", Tag.CORE, (TestCase("Give CEC Version", ALL_ADDRESSES, _ok),))]
        )

    def test_assignment(self) -> None:
        self.registry.set_expected_assignment("give-cec-version=fail")

        assert self.registry.expected_for("Give CEC Version") == ExpectedResult(Verdict.FAIL)

    def test_assignment_by_code_with_no_warnings(self) -> None:
        self.registry.set_expected_assignment("give-cec-version=0", no_warnings=True)

        assert self.registry.expected_for("give-cec-version") == ExpectedResult(Verdict.PASS, True)

    @pytest.mark.parametrize("assignment", ["give-cec-version", "=ok", "give-cec-version="])
    def test_malformed_assignment(self, assignment: str) -> None:
        with pytest.raises(OperatorInputError, match="name=verdict"):
            self.registry.set_expected_assignment(assignment)

    def test_unknown_case(self) -> None:
        with pytest.raises(OperatorInputError, match="Unknown test case"):
            self.registry.set_expected_assignment("no-such-case=ok")

    def test_unknown_verdict(self) -> None:
        with pytest.raises(OperatorInputError):
            self.registry.set_expected_assignment("give-cec-version=sometimes")

    def test_no_expectation(self) -> None:
        assert self.registry.expected_for("give-cec-version") is None

    def test_load_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "expected.yaml"
        path.write_text(
            "expected:\n"
            "  give-cec-version:\n"
            "    verdict: ok-presumed\n"
            "    no_warnings: true\n"
        )

        self.registry.load_expected_results(path)

        assert self.registry.expected_for("give-cec-version") == ExpectedResult(Verdict.OK_PRESUMED, True)

    def test_load_yaml_short_form(self, tmp_path: Path) -> None:
        path = tmp_path / "expected.yaml"
        path.write_text("expected:\n  Give CEC Version: ok-not-supported\n")

        self.registry.load_expected_results(path)

        expected = self.registry.expected_for("give-cec-version")
        assert expected is not None
        assert expected.verdict == Verdict.OK_NOT_SUPPORTED
        assert expected.no_warnings is False

    @pytest.mark.parametrize(
        "content,message",
        [
            ("- just\n- a list\n", "'expected' mapping is missing"),
            ("expected: [1, 2]\n", "'expected' mapping is missing"),
            ("expected:\n  give-cec-version:\n    no_warnings: true\n", "has no 'verdict'"),
            ("expected: {unclosed\n", "Cannot read"),
        ],
    )
    def test_load_yaml_errors(self, tmp_path: Path, content: str, message: str) -> None:
        path = tmp_path / "expected.yaml"
        path.write_text(content)

        with pytest.raises(OperatorInputError, match=message):
            self.registry.load_expected_results(path)

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OperatorInputError, match="Cannot read"):
            self.registry.load_expected_results(tmp_path / "missing.yaml")


class TestDefaultCatalogue:
    """The shipped catalogue registers without name clashes."""

    def test_builds(self) -> None:
        registry = TestRegistry(default_areas())

        assert len(registry.areas) == len(default_areas())
        assert "feature-aborts-unknown-messages" in registry
        assert "recognized-unrecognized-message-consistency" in registry

    def test_post_test_checks_run_last(self) -> None:
        areas = default_areas()

        assert areas[-1].cases[-1].safe_name == "recognized-unrecognized-message-consistency"
