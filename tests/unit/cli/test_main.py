# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Tests for main.py options that do not depend on the run outcome."""

from unittest.mock import Mock, patch

import pytest
from typer.testing import CliRunner

import cec_conformance.cli.main
from cec_conformance.cli.main import app
from cec_conformance.core.types import RunReport
from cec_conformance.registry.registry import Tag
from cec_conformance.utils.logging import VerbosityLevel

CONFORMANT = "tests.mocks.fake_bus:ConformantBus"


def idle_orchestrator() -> Mock:
    orchestrator = Mock()
    orchestrator.run.return_value = iter([])
    orchestrator.report = RunReport()
    return orchestrator


class TestListTests:
    def setup_method(self) -> None:
        self.runner = CliRunner()

    def test_lists_areas_and_safe_names(self) -> None:
        result = self.runner.invoke(app, ["--list-tests"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Core:"
        assert lines[1] == "\tfeature-aborts-unknown-messages"
        assert "Post-test checks:" in lines
        assert lines[-1] == "\trecognized-unrecognized-message-consistency"

    def test_needs_no_transport(self) -> None:
        """Listing happens before the bus adapter is opened."""
        result = self.runner.invoke(app, ["--list-tests", "--transport", "tests.mocks.no_such_module:Bus"])

        assert result.exit_code == 0

    def test_version(self) -> None:
        result = self.runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert result.output.startswith("cec-conformance, version ")


class TestVerbosity:
    @pytest.mark.parametrize(
        "cli_args,expected_level",
        [
            ([], VerbosityLevel.WARNING),
            (["--verbosity", "DEBUG"], VerbosityLevel.DEBUG),
            (["-v", "INFO"], VerbosityLevel.INFO),
            (["-v", "ERROR"], VerbosityLevel.ERROR),
        ],
    )
    @patch("cec_conformance.cli.main.configure_logging")
    def test_verbosity_level(
        self, mock_configure_logging: Mock, cli_args: list[str], expected_level: VerbosityLevel
    ) -> None:
        result = CliRunner().invoke(app, ["--list-tests"] + cli_args)

        assert result.exit_code == 0, f"CLI failed: {result.output}"
        mock_configure_logging.assert_called_once_with(expected_level, cec_conformance.cli.main.error_handler)

    def test_debug_shows_bus_traffic(self) -> None:
        result = CliRunner().invoke(app, ["--transport", CONFORMANT, "-t", "0", "-i", "core", "-v", "DEBUG"])

        assert result.exit_code == 0
        assert "DEBUG - TX " in result.output


class TestRunOptions:
    """Options are handed to the engine and orchestrator unchanged."""

    def setup_method(self) -> None:
        self.runner = CliRunner()

    @patch("cec_conformance.cli.main.Orchestrator")
    def test_defaults(self, mock_orchestrator_cls: Mock) -> None:
        orchestrator = idle_orchestrator()
        mock_orchestrator_cls.return_value = orchestrator

        result = self.runner.invoke(app, ["--transport", CONFORMANT])

        assert result.exit_code == 0, f"CLI failed: {result.output}"
        assert mock_orchestrator_cls.call_args.kwargs["strict_applicability"] is False
        targets, tags, interactive = orchestrator.run.call_args.args
        assert targets is None
        assert interactive is False
        assert Tag.CORE in tags and Tag.ROUTING_CONTROL in tags

    @patch("cec_conformance.cli.main.Orchestrator")
    def test_skip_inapplicable(self, mock_orchestrator_cls: Mock) -> None:
        mock_orchestrator_cls.return_value = idle_orchestrator()

        self.runner.invoke(app, ["--transport", CONFORMANT, "--skip-inapplicable"])

        assert mock_orchestrator_cls.call_args.kwargs["strict_applicability"] is True

    @patch("cec_conformance.cli.main.Orchestrator")
    def test_targets_and_tags(self, mock_orchestrator_cls: Mock) -> None:
        orchestrator = idle_orchestrator()
        mock_orchestrator_cls.return_value = orchestrator

        self.runner.invoke(
            app, ["--transport", CONFORMANT, "-t", "0", "-t", "8", "-i", "deck*", "-e", "routing-control"]
        )

        targets, tags, _ = orchestrator.run.call_args.args
        assert targets == [0, 8]
        assert tags == Tag.DECK_CONTROL

    def test_target_out_of_range(self) -> None:
        result = self.runner.invoke(app, ["--transport", CONFORMANT, "-t", "15"])

        assert result.exit_code != 0

    @patch("cec_conformance.cli.main.Orchestrator")
    @patch("cec_conformance.cli.main.Engine")
    def test_interactive_installs_prompter(self, mock_engine_cls: Mock, mock_orchestrator_cls: Mock) -> None:
        mock_orchestrator_cls.return_value = idle_orchestrator()

        self.runner.invoke(app, ["--transport", CONFORMANT, "--interactive", "--long-timeout", "30"])

        kwargs = mock_engine_cls.call_args.kwargs
        assert kwargs["prompter"] is cec_conformance.cli.main.confirm
        assert kwargs["long_timeout_s"] == 30

    @patch("cec_conformance.cli.main.Orchestrator")
    @patch("cec_conformance.cli.main.Engine")
    def test_non_interactive_has_no_prompter(self, mock_engine_cls: Mock, mock_orchestrator_cls: Mock) -> None:
        mock_orchestrator_cls.return_value = idle_orchestrator()

        self.runner.invoke(app, ["--transport", CONFORMANT])

        assert mock_engine_cls.call_args.kwargs["prompter"] is None

    @patch("cec_conformance.cli.main.Orchestrator")
    def test_transport_from_environment(self, mock_orchestrator_cls: Mock) -> None:
        mock_orchestrator_cls.return_value = idle_orchestrator()

        result = self.runner.invoke(app, [], env={"CEC_TEST_TRANSPORT": CONFORMANT})

        assert result.exit_code == 0, f"CLI failed: {result.output}"
        mock_orchestrator_cls.assert_called_once()
