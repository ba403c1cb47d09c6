# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

import logging
from pathlib import Path
from typing import NoReturn

import errorhandler
import typer
from typing_extensions import Annotated

import cec_conformance
from cec_conformance.bus.transport import load_transport
from cec_conformance.core.constants import DEFAULT_LONG_TIMEOUT_S, EXIT_ERROR
from cec_conformance.core.errors import OperatorInputError, TransportError
from cec_conformance.core.protocol import la_name
from cec_conformance.core.types import RunReport
from cec_conformance.engine import Engine
from cec_conformance.orchestrator import Orchestrator
from cec_conformance.registry.registry import TestRegistry
from cec_conformance.registry.tag_matcher import TagMatcher
from cec_conformance.scenarios import default_areas
from cec_conformance.utils.logging import VerbosityLevel, configure_logging
from cec_conformance.utils.terminal import terminal

app = typer.Typer(add_completion=False)

logger = logging.getLogger(__name__)

error_handler = errorhandler.ErrorHandler()


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cec-conformance, version {cec_conformance.__version__}")
        raise typer.Exit()


Verbosity = Annotated[
    VerbosityLevel,
    typer.Option(
        "-v",
        "--verbosity",
        help="Verbosity level.",
        envvar="CEC_TEST_VERBOSITY",
        is_eager=True,
    ),
]


TransportSpec = Annotated[
    str | None,
    typer.Option(
        "--transport",
        help="Bus adapter driver as 'module:Class'.",
        envvar="CEC_TEST_TRANSPORT",
    ),
]


Device = Annotated[
    str | None,
    typer.Option(
        "-D",
        "--device",
        help="Device passed to the bus adapter driver (e.g. /dev/cec0).",
        envvar="CEC_TEST_DEVICE",
    ),
]


Target = Annotated[
    list[int],
    typer.Option(
        "-t",
        "--target",
        help="Remote logical address to test. Defaults to all discovered devices.",
        envvar="CEC_TEST_TARGET",
        min=0,
        max=14,
    ),
]


Include = Annotated[
    list[str],
    typer.Option(
        "-i",
        "--include",
        help="Selects the test areas by tag (include).",
        envvar="CEC_TEST_INCLUDE",
    ),
]


Exclude = Annotated[
    list[str],
    typer.Option(
        "-e",
        "--exclude",
        help="Selects the test areas by tag (exclude).",
        envvar="CEC_TEST_EXCLUDE",
    ),
]


Expect = Annotated[
    list[str],
    typer.Option(
        "--expect",
        help="Expected result of a test case as 'name=verdict'.",
    ),
]


ExpectNoWarnings = Annotated[
    list[str],
    typer.Option(
        "--expect-no-warnings",
        help="Like --expect, and the test case must not emit warnings.",
    ),
]


ExpectedResults = Annotated[
    Path | None,
    typer.Option(
        "--expected-results",
        exists=True,
        dir_okay=False,
        file_okay=True,
        help="Path to a YAML file with expected results.",
        envvar="CEC_TEST_EXPECTED_RESULTS",
    ),
]


Interactive = Annotated[
    bool,
    typer.Option(
        "--interactive",
        help="Ask the operator to confirm what the device does.",
        envvar="CEC_TEST_INTERACTIVE",
    ),
]


LongTimeout = Annotated[
    float,
    typer.Option(
        "--long-timeout",
        help="Timeout in seconds for wake from standby and deck seeks.",
        envvar="CEC_TEST_LONG_TIMEOUT",
        min=1,
    ),
]


SkipInapplicable = Annotated[
    bool,
    typer.Option(
        "--skip-inapplicable",
        help="Do not run test cases on device roles they do not apply to.",
        envvar="CEC_TEST_SKIP_INAPPLICABLE",
    ),
]


ListTests = Annotated[
    bool,
    typer.Option(
        "--list-tests",
        help="List the test areas and test case names and exit.",
    ),
]


Version = Annotated[
    bool,
    typer.Option(
        "--version",
        callback=version_callback,
        help="Display version number.",
        is_eager=True,
    ),
]


def _fatal(message: str) -> NoReturn:
    typer.echo(terminal.error(f"Error: {message}"), err=True)
    raise typer.Exit(EXIT_ERROR)


def list_tests(registry: TestRegistry) -> None:
    current = None
    for area, name in registry.list_test_names():
        if area != current:
            typer.echo(f"{area}:")
            current = area
        typer.echo(f"\t{name}")


def confirm(question: str) -> bool:
    return typer.confirm(question, default=False)


def print_summary(report: RunReport) -> None:
    typer.echo(
        terminal.header(
            f"Total: {report.total}, Passed: {report.passed}, "
            f"Failed: {report.failed}, Not applicable: {report.skipped}"
        )
    )
    for target in report.critical_targets:
        typer.echo(terminal.error(f"Testing {la_name(target)} was aborted after a critical failure"))
    for target in report.skipped_targets:
        typer.echo(terminal.warning(f"{la_name(target)} was not tested"))


@app.command()
def main(
    transport: TransportSpec = None,
    device: Device = None,
    target: Target = [],
    include: Include = [],
    exclude: Exclude = [],
    expect: Expect = [],
    expect_no_warnings: ExpectNoWarnings = [],
    expected_results: ExpectedResults = None,
    interactive: Interactive = False,
    long_timeout: LongTimeout = DEFAULT_LONG_TIMEOUT_S,
    skip_inapplicable: SkipInapplicable = False,
    list_tests_: ListTests = False,
    verbosity: Verbosity = VerbosityLevel.WARNING,
    version: Version = False,
) -> None:
    """A CLI tool to test HDMI-CEC devices for protocol conformance."""
    configure_logging(verbosity, error_handler)

    registry = TestRegistry(default_areas())
    if list_tests_:
        list_tests(registry)
        raise typer.Exit(0)

    # Operator input is validated before any bus traffic
    try:
        for assignment in expect:
            registry.set_expected_assignment(assignment)
        for assignment in expect_no_warnings:
            registry.set_expected_assignment(assignment, no_warnings=True)
        if expected_results is not None:
            registry.load_expected_results(expected_results)
        tags = TagMatcher(include, exclude).resolve()
    except OperatorInputError as e:
        _fatal(str(e))

    if transport is None:
        _fatal("No bus adapter given, use --transport module:Class")

    try:
        bus = load_transport(transport, **({"device": device} if device else {}))
    except TransportError as e:
        _fatal(str(e))

    engine = Engine(bus, prompter=confirm if interactive else None, long_timeout_s=long_timeout)
    orchestrator = Orchestrator(engine, registry, strict_applicability=skip_inapplicable)

    current_target = None
    current_area = None
    try:
        for result in orchestrator.run(target or None, tags, interactive):
            if result.target != current_target:
                current_target = result.target
                current_area = None
                typer.echo(terminal.header(f"Remote LA {result.target} ({la_name(result.target)})"))
            if result.area != current_area:
                current_area = result.area
                typer.echo(f"  {result.area}:")
            if result.is_printed:
                typer.echo(terminal.result_line(result))
    except TransportError as e:
        logger.error(f"Bus adapter failed: {e}")
        orchestrator.report.errors.append(str(e))

    print_summary(orchestrator.report)
    exit(orchestrator.report)


def exit(report: RunReport) -> None:
    if report.exit_code:
        raise typer.Exit(report.exit_code)
    if error_handler.fired:
        raise typer.Exit(1)
    raise typer.Exit(0)
