# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Conformance run orchestration.

This module provides the Orchestrator class that walks targets x areas x
cases, enforces the per-target preconditions, turns exceptions raised by
case bodies into verdicts and reconciles each verdict with the operator's
expected results.
"""

import logging
from collections.abc import Iterable, Iterator
from enum import Enum

from cec_conformance.bus import codec
from cec_conformance.core.errors import (
    BusPresenceViolation,
    CecError,
    ProtocolViolation,
    TransportError,
)
from cec_conformance.core.protocol import la_name
from cec_conformance.core.types import CaseResult, ReportStatus, RunReport, Verdict
from cec_conformance.device.discovery import discover
from cec_conformance.device.power import PowerGate, PowerState
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import (
    ALL_TAGS,
    ExpectedResult,
    Tag,
    TestArea,
    TestCase,
    TestRegistry,
)

logger = logging.getLogger(__name__)


class TargetState(Enum):
    """Progress of one remote logical address through the run."""

    NOT_STARTED = "not_started"
    DISCOVERED = "discovered"
    ENSURING_POWERED = "ensuring_powered"
    RUNNING = "running"
    DONE = "done"
    ABORTED_CRITICAL = "aborted_critical"
    SKIPPED = "skipped"


def reconcile(
    verdict: Verdict, warnings: int, expected: ExpectedResult | None
) -> ReportStatus:
    """Decide how a verdict is reported given the operator's expectation.

    Args:
        verdict: The verdict the case produced
        warnings: Warnings emitted while the case ran
        expected: The expectation for the case, if one was set

    Returns:
        The report status for the result line.
    """
    if expected is None:
        return ReportStatus.AS_OBSERVED
    if verdict != expected.verdict:
        return ReportStatus.EXPECTATION_MISMATCH
    if warnings and expected.no_warnings:
        return ReportStatus.UNEXPECTED_WARNINGS
    if verdict == Verdict.FAIL:
        return ReportStatus.EXPECTED_FAIL
    return ReportStatus.AS_OBSERVED


class Orchestrator:
    """Runs the selected catalogue against each target, one case at a time.

    Targets are processed sequentially, never in parallel: the bus is a
    shared half-duplex medium and at most one request may be outstanding.
    """

    def __init__(
        self,
        engine: Engine,
        registry: TestRegistry,
        strict_applicability: bool = False,
    ):
        """Initialize the orchestrator.

        Args:
            engine: Execution context with the transport and the device table
            registry: Catalogue holding the areas and expected results
            strict_applicability: Do not run cases on targets outside their
                applicability mask (reported as N/A) instead of running them
                and reporting any verdict as OK (Unexpected)
        """
        self.engine = engine
        self.registry = registry
        self.strict_applicability = strict_applicability
        self.states: dict[int, TargetState] = {}
        self.report = RunReport()

    def _set_state(self, target: int, state: TargetState) -> None:
        logger.debug(f"{la_name(target)}: {self.states.get(target, TargetState.NOT_STARTED).value} -> {state.value}")
        self.states[target] = state

    def run(
        self,
        targets: Iterable[int] | None = None,
        tags: Tag = ALL_TAGS,
        interactive: bool = False,
    ) -> Iterator[CaseResult]:
        """Run the catalogue and yield every case result as it is produced.

        Args:
            targets: Logical addresses to test; all discovered remotes if None
            tags: Feature areas to run; an area runs if all its tags are selected
            interactive: Whether the operator is available for questions

        Raises:
            TransportError: If the adapter holds no logical address to send from.
        """
        local = self.engine.local_address
        if local is None:
            raise TransportError("The adapter has not claimed a logical address")

        present = discover(self.engine, local)
        for la in present:
            self._set_state(la, TargetState.DISCOVERED)

        selected = present if targets is None else list(targets)
        areas = self.registry.select(tags)
        for target in selected:
            if not self.engine.devices.is_present(target):
                logger.warning(f"{la_name(target)} did not answer polling, skipping")
                self._set_state(target, TargetState.SKIPPED)
                self.report.skipped_targets.append(target)
                continue
            yield from self._run_target(local, target, areas, interactive)

    def _run_target(
        self, local: int, target: int, areas: list[TestArea], interactive: bool
    ) -> Iterator[CaseResult]:
        logger.info(
            f"testing CEC local LA {local} ({la_name(local)}) to remote LA {target} ({la_name(target)})"
        )
        self._set_state(target, TargetState.ENSURING_POWERED)
        power = PowerGate(self.engine, local).ensure_on(target, interactive)
        if power == PowerState.STANDBY:
            self.engine.announce(
                "The remote device is in standby. It should be powered on when testing. Aborting."
            )
            self._set_state(target, TargetState.SKIPPED)
            self.report.skipped_targets.append(target)
            return

        # Make sure the remote device knows the initiator's primary device type
        self.engine.send(
            codec.report_physical_addr(local, self.engine.phys_addr, self.engine.prim_devtype)
        )

        self._set_state(target, TargetState.RUNNING)
        for area in areas:
            logger.info(f"{area.name}:")
            for case in area.cases:
                if not self._case_enabled(case, target):
                    continue
                results = self.run_case(area, case, local, target, interactive)
                for result in results:
                    self.report.add(result)
                    yield result
                if results[0].verdict == Verdict.FAIL_CRITICAL:
                    self._set_state(target, TargetState.ABORTED_CRITICAL)
                    self.report.critical_targets.append(target)
                    return
        self._set_state(target, TargetState.DONE)

    def _case_enabled(self, case: TestCase, target: int) -> bool:
        if case.for_cec20 and not (self.engine.device(target).is_cec20 and self.engine.has_cec20):
            return False
        if case.in_standby and not self.engine.holds_logical_addresses:
            return False
        return True

    def run_case(
        self, area: TestArea, case: TestCase, local: int, target: int, interactive: bool
    ) -> list[CaseResult]:
        """Run one case against one target.

        Returns:
            The case result, followed by one FAIL result per cleanup step
            that failed while the case ran.
        """
        engine = self.engine
        engine.in_standby = case.in_standby
        engine.exchange.drain()
        warnings_before = engine.warnings
        cleanups_before = len(engine.cleanup_failures)
        message = None

        applicable = case.applies_to(target)
        if not applicable and self.strict_applicability:
            verdict = Verdict.NOT_APPLICABLE
        else:
            try:
                verdict = case.body(engine, local, target, interactive)
            except BusPresenceViolation as e:
                verdict, message = Verdict.FAIL_CRITICAL, str(e)
            except ProtocolViolation as e:
                verdict, message = Verdict.FAIL, str(e)
            except CecError as e:
                verdict, message = Verdict.FAIL, f"{type(e).__name__}: {e}"
            except Exception as e:
                # A broken case or driver fails this case only
                logger.exception(f"Unexpected error in {case.name}")
                verdict, message = Verdict.FAIL, f"{type(e).__name__}: {e}"
            if message:
                logger.warning(f"{case.name}: {message}")

        if not applicable and verdict != Verdict.NOT_APPLICABLE:
            verdict = Verdict.OK_UNEXPECTED

        warnings = engine.warnings - warnings_before
        expected = self.registry.expected_for(case.name)
        result = CaseResult(
            area=area.name,
            name=case.name,
            target=target,
            verdict=verdict,
            status=reconcile(verdict, warnings, expected),
            expected=expected.verdict if expected else None,
            warnings=warnings,
            message=message,
        )

        results = [result]
        for failure in engine.cleanup_failures[cleanups_before:]:
            results.append(
                CaseResult(
                    area=area.name,
                    name=f"{case.name} (cleanup)",
                    target=target,
                    verdict=Verdict.FAIL,
                    message=failure,
                )
            )
        return results

    def execute(
        self,
        targets: Iterable[int] | None = None,
        tags: Tag = ALL_TAGS,
        interactive: bool = False,
    ) -> RunReport:
        """Run to completion and return the aggregated report."""
        for _ in self.run(targets, tags, interactive):
            pass
        return self.report
