# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Unit tests for the conformance run orchestrator."""

import pytest

from cec_conformance.core.errors import (
    BusPresenceViolation,
    ProtocolViolation,
    TransportError,
)
from cec_conformance.core.models import Frame
from cec_conformance.core.protocol import (
    AddressMask,
    CecVersion,
    LogicalAddress,
    Opcode,
    PowerStatus,
    PrimaryDeviceType,
)
from cec_conformance.core.types import ReportStatus, Verdict
from cec_conformance.engine import Engine
from cec_conformance.orchestrator import Orchestrator, TargetState, reconcile
from cec_conformance.registry.registry import ExpectedResult, Tag, TestArea, TestCase, TestRegistry
from tests.mocks.fake_bus import FakeBus, FakeClock, FakeDevice, UnclaimedBus

TV = LogicalAddress.TV
PLAYER = LogicalAddress.PLAYBACK_2


def passing(engine, local, target, interactive):
    return Verdict.PASS


def presumed(engine, local, target, interactive):
    return Verdict.OK_PRESUMED


def failing(engine, local, target, interactive):
    raise ProtocolViolation("Device said no")


def critical(engine, local, target, interactive):
    raise BusPresenceViolation("Device vanished")


def transport_broken(engine, local, target, interactive):
    raise TransportError("adapter unplugged")


def buggy(engine, local, target, interactive):
    raise ValueError("bad operand table")


def warning(engine, local, target, interactive):
    engine.warn("Odd but allowed")
    return Verdict.PASS


def not_applicable(engine, local, target, interactive):
    return Verdict.NOT_APPLICABLE


def area_of(*cases: TestCase, tags: Tag = Tag.CORE) -> TestArea:
    return TestArea("Test area", tags, cases)


class TestReconcile:
    """Reconciliation of a verdict with the operator's expectation."""

    @pytest.mark.parametrize(
        "verdict,warnings,expected,status",
        [
            (Verdict.PASS, 0, None, ReportStatus.AS_OBSERVED),
            (Verdict.FAIL, 3, None, ReportStatus.AS_OBSERVED),
            (Verdict.PASS, 0, ExpectedResult(Verdict.PASS), ReportStatus.AS_OBSERVED),
            (Verdict.FAIL, 0, ExpectedResult(Verdict.FAIL), ReportStatus.EXPECTED_FAIL),
            (Verdict.PASS, 0, ExpectedResult(Verdict.OK_PRESUMED), ReportStatus.EXPECTATION_MISMATCH),
            (Verdict.FAIL, 0, ExpectedResult(Verdict.PASS), ReportStatus.EXPECTATION_MISMATCH),
            (Verdict.PASS, 2, ExpectedResult(Verdict.PASS), ReportStatus.AS_OBSERVED),
            (Verdict.PASS, 2, ExpectedResult(Verdict.PASS, no_warnings=True), ReportStatus.UNEXPECTED_WARNINGS),
            (Verdict.PASS, 0, ExpectedResult(Verdict.PASS, no_warnings=True), ReportStatus.AS_OBSERVED),
        ],
    )
    def test_reconcile(
        self, verdict: Verdict, warnings: int, expected: ExpectedResult | None, status: ReportStatus
    ) -> None:
        assert reconcile(verdict, warnings, expected) == status


class TestRunCase:
    """Verdict handling for a single case."""

    def setup_method(self) -> None:
        self.area = area_of(TestCase("Anything", AddressMask.ALL, passing))

    def _orchestrator(self, engine: Engine, strict: bool = False) -> Orchestrator:
        return Orchestrator(engine, TestRegistry([self.area]), strict_applicability=strict)

    def test_returned_verdict(self, engine: Engine) -> None:
        case = TestCase("Presumed", AddressMask.ALL, presumed)

        (result,) = self._orchestrator(engine).run_case(self.area, case, 4, TV, False)

        assert result.verdict == Verdict.OK_PRESUMED
        assert result.status == ReportStatus.AS_OBSERVED
        assert result.message is None

    def test_protocol_violation_is_fail(self, engine: Engine, caplog: pytest.LogCaptureFixture) -> None:
        case = TestCase("Failing", AddressMask.ALL, failing)

        (result,) = self._orchestrator(engine).run_case(self.area, case, 4, TV, False)

        assert result.verdict == Verdict.FAIL
        assert result.message == "Device said no"
        assert "Failing: Device said no" in caplog.text

    def test_bus_presence_violation_is_critical(self, engine: Engine) -> None:
        case = TestCase("Critical", AddressMask.ALL, critical)

        (result,) = self._orchestrator(engine).run_case(self.area, case, 4, TV, False)

        assert result.verdict == Verdict.FAIL_CRITICAL

    def test_other_engine_errors_fail(self, engine: Engine) -> None:
        case = TestCase("Broken", AddressMask.ALL, transport_broken)

        (result,) = self._orchestrator(engine).run_case(self.area, case, 4, TV, False)

        assert result.verdict == Verdict.FAIL
        assert result.message == "TransportError: adapter unplugged"

    def test_unexpected_exception_fails_the_case(self, engine: Engine, caplog: pytest.LogCaptureFixture) -> None:
        case = TestCase("Buggy", AddressMask.ALL, buggy)

        (result,) = self._orchestrator(engine).run_case(self.area, case, 4, TV, False)

        assert result.verdict == Verdict.FAIL
        assert result.message == "ValueError: bad operand table"
        assert "Unexpected error in Buggy" in caplog.text
        assert "Traceback" in caplog.text

    def test_warnings_are_counted_per_case(self, engine: Engine) -> None:
        engine.warn("before the case")
        case = TestCase("Warning", AddressMask.ALL, warning)

        (result,) = self._orchestrator(engine).run_case(self.area, case, 4, TV, False)

        assert result.warnings == 1

    def test_out_of_mask_verdict_is_unexpected(self, engine: Engine) -> None:
        case = TestCase("TV only", AddressMask.TV, passing)

        (result,) = self._orchestrator(engine).run_case(self.area, case, 4, PLAYER, False)

        assert result.verdict == Verdict.OK_UNEXPECTED

    def test_out_of_mask_failure_is_unexpected(self, engine: Engine) -> None:
        case = TestCase("TV only", AddressMask.TV, failing)

        (result,) = self._orchestrator(engine).run_case(self.area, case, 4, PLAYER, False)

        assert result.verdict == Verdict.OK_UNEXPECTED
        assert result.message == "Device said no"

    def test_out_of_mask_not_applicable_stays(self, engine: Engine) -> None:
        case = TestCase("TV only", AddressMask.TV, not_applicable)

        (result,) = self._orchestrator(engine).run_case(self.area, case, 4, PLAYER, False)

        assert result.verdict == Verdict.NOT_APPLICABLE
        assert not result.is_printed

    def test_strict_applicability_does_not_run(self, engine: Engine) -> None:
        calls: list[int] = []

        def body(engine, local, target, interactive):
            calls.append(target)
            return Verdict.PASS

        case = TestCase("TV only", AddressMask.TV, body)

        (result,) = self._orchestrator(engine, strict=True).run_case(self.area, case, 4, PLAYER, False)

        assert result.verdict == Verdict.NOT_APPLICABLE
        assert calls == []

    def test_standby_flag_follows_case(self, engine: Engine) -> None:
        seen: list[bool] = []

        def body(engine, local, target, interactive):
            seen.append(engine.in_standby)
            return Verdict.PASS

        orchestrator = self._orchestrator(engine)
        orchestrator.run_case(self.area, TestCase("Standby", AddressMask.ALL, body, in_standby=True), 4, TV, False)
        orchestrator.run_case(self.area, TestCase("Awake", AddressMask.ALL, body), 4, TV, False)

        assert seen == [True, False]

    def test_leftover_frames_are_drained(self, engine: Engine) -> None:
        seen: list[int] = []

        def body(engine, local, target, interactive):
            seen.append(len(engine.exchange.unsolicited))
            return Verdict.PASS

        engine.exchange.unsolicited.append(Frame(source=TV, destination=4, opcode=Opcode.ACTIVE_SOURCE))

        self._orchestrator(engine).run_case(self.area, TestCase("Drain", AddressMask.ALL, body), 4, TV, False)

        assert seen == [0]

    def test_cleanup_failure_adds_result(self, engine: Engine) -> None:
        def body(engine, local, target, interactive):
            engine.report_cleanup_failure("Timer could not be cleared")
            return Verdict.PASS

        area = area_of(TestCase("Set timer", AddressMask.ALL, body))

        results = self._orchestrator(engine).run_case(area, area.cases[0], 4, TV, False)

        assert [r.verdict for r in results] == [Verdict.PASS, Verdict.FAIL]
        assert results[1].name == "Set timer (cleanup)"
        assert results[1].message == "Timer could not be cleared"
        assert results[1].is_reported_failure

    def test_expected_failure(self, engine: Engine) -> None:
        case = TestCase("Failing", AddressMask.ALL, failing)
        registry = TestRegistry([area_of(case)])
        registry.set_expected_result("failing", "fail")

        (result,) = Orchestrator(engine, registry).run_case(self.area, case, 4, TV, False)

        assert result.status == ReportStatus.EXPECTED_FAIL
        assert result.expected == Verdict.FAIL
        assert not result.is_reported_failure
        assert result.render() == "OK (Expected Failure)"

    def test_expectation_mismatch(self, engine: Engine) -> None:
        case = TestCase("Presumed", AddressMask.ALL, presumed)
        registry = TestRegistry([area_of(case)])
        registry.set_expected_result("presumed", "ok")

        (result,) = Orchestrator(engine, registry).run_case(self.area, case, 4, TV, False)

        assert result.status == ReportStatus.EXPECTATION_MISMATCH
        assert result.render() == "FAIL (Expected 'OK', got 'OK (Presumed)')"


class TestRun:
    """Whole runs over the fake bus."""

    def test_runs_every_case_for_each_target(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV, phys_addr=0x0000, prim_type=PrimaryDeviceType.TV))
        bus.add(FakeDevice(PLAYER, phys_addr=0x2000))
        area = area_of(
            TestCase("First", AddressMask.ALL, passing),
            TestCase("Second", AddressMask.ALL, presumed),
        )
        orchestrator = Orchestrator(engine, TestRegistry([area]))

        report = orchestrator.execute()

        assert [(r.target, r.name) for r in report.results] == [
            (TV, "First"),
            (TV, "Second"),
            (PLAYER, "First"),
            (PLAYER, "Second"),
        ]
        assert report.exit_code == 0
        assert orchestrator.states[TV] == TargetState.DONE
        assert orchestrator.states[PLAYER] == TargetState.DONE

    def test_announces_own_physical_address(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV))

        Orchestrator(engine, TestRegistry([area_of(TestCase("Only", AddressMask.ALL, passing))])).execute()

        assert Opcode.REPORT_PHYSICAL_ADDR in bus.sent_opcodes()

    def test_results_are_streamed(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV))
        orchestrator = Orchestrator(engine, TestRegistry([area_of(TestCase("Only", AddressMask.ALL, passing))]))

        results = orchestrator.run(targets=[TV])
        first = next(results)

        assert first.name == "Only"
        assert orchestrator.report.results == [first]

    def test_unexpected_exception_does_not_stop_the_run(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV))
        area = area_of(
            TestCase("Buggy", AddressMask.ALL, buggy),
            TestCase("After", AddressMask.ALL, passing),
        )
        orchestrator = Orchestrator(engine, TestRegistry([area]))

        report = orchestrator.execute(targets=[TV])

        assert [(r.name, r.verdict) for r in report.results] == [
            ("Buggy", Verdict.FAIL),
            ("After", Verdict.PASS),
        ]
        assert orchestrator.states[TV] == TargetState.DONE
        assert report.exit_code == 1

    def test_critical_failure_aborts_target(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV))
        bus.add(FakeDevice(PLAYER))
        calls: list[int] = []

        def after(engine, local, target, interactive):
            calls.append(target)
            return Verdict.PASS

        area = area_of(
            TestCase("Critical", AddressMask.TV, critical),
            TestCase("After", AddressMask.ALL, after),
        )
        orchestrator = Orchestrator(engine, TestRegistry([area]))

        report = orchestrator.execute()

        assert calls == [PLAYER]
        assert report.critical_targets == [TV]
        assert orchestrator.states[TV] == TargetState.ABORTED_CRITICAL
        assert report.exit_code == 1

    def test_cec20_cases_need_both_sides(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV, cec_version=CecVersion.V2_0))
        bus.add(FakeDevice(PLAYER, cec_version=CecVersion.V1_4))
        area = area_of(TestCase("New feature", AddressMask.ALL, passing, for_cec20=True))

        report = Orchestrator(engine, TestRegistry([area])).execute()

        assert [r.target for r in report.results] == [TV]

    def test_area_selection_by_tag(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV))
        registry = TestRegistry(
            [
                TestArea("Core", Tag.CORE, (TestCase("Core case", AddressMask.ALL, passing),)),
                TestArea("Routing", Tag.ROUTING_CONTROL, (TestCase("Routing case", AddressMask.ALL, passing),)),
            ]
        )

        report = Orchestrator(engine, registry).execute(tags=Tag.ROUTING_CONTROL)

        assert [r.name for r in report.results] == ["Routing case"]

    def test_absent_target_is_skipped(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV))
        orchestrator = Orchestrator(engine, TestRegistry([area_of(TestCase("Only", AddressMask.ALL, passing))]))

        report = orchestrator.execute(targets=[PLAYER])

        assert report.results == []
        assert report.skipped_targets == [PLAYER]
        assert orchestrator.states[PLAYER] == TargetState.SKIPPED

    def test_target_in_standby_is_skipped(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV, power_status=PowerStatus.STANDBY))
        orchestrator = Orchestrator(engine, TestRegistry([area_of(TestCase("Only", AddressMask.ALL, passing))]))

        report = orchestrator.execute()

        assert report.results == []
        assert report.skipped_targets == [TV]
        assert orchestrator.states[TV] == TargetState.SKIPPED

    def test_operator_switches_target_on(self, bus: FakeBus, clock: FakeClock) -> None:
        tv = bus.add(FakeDevice(TV, power_status=PowerStatus.STANDBY))

        def prompter(question: str) -> bool:
            tv.power_status = PowerStatus.ON
            return True

        engine = Engine(bus, prompter=prompter, long_timeout_s=10, sleep=clock.sleep, clock=clock)
        area = area_of(TestCase("Only", AddressMask.ALL, passing))

        report = Orchestrator(engine, TestRegistry([area])).execute(interactive=True)

        assert [r.verdict for r in report.results] == [Verdict.PASS]

    def test_adapter_without_logical_address(self, clock: FakeClock) -> None:
        engine = Engine(UnclaimedBus(), sleep=clock.sleep, clock=clock)
        orchestrator = Orchestrator(engine, TestRegistry())

        with pytest.raises(TransportError, match="not claimed"):
            orchestrator.execute()

    def test_empty_bus(self, engine: Engine) -> None:
        report = Orchestrator(engine, TestRegistry([area_of(TestCase("Only", AddressMask.ALL, passing))])).execute()

        assert report.total == 0
        assert report.exit_code == 0
