# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Timer Programming feature.

Timers are placed relative to the engine's current time so that they never
lie in the past. Timers created only to provoke an error or an overlap
warning are cleared again at the end of the case; a failed clear is
reported separately and does not replace the case verdict.
"""

import logging
from datetime import timedelta

from cec_conformance.bus import codec
from cec_conformance.bus.codec import AnalogueService, DigitalServiceId, TimerStatus
from cec_conformance.bus.exchange import ExchangeOutcome
from cec_conformance.core.classification import (
    abort_reason,
    is_abort,
    refused,
    timed_out,
    timed_out_or_abort,
    unrecognized_op,
)
from cec_conformance.core.constants import RECORD_REPLY_TIMEOUT_MS
from cec_conformance.core.errors import ProtocolViolation
from cec_conformance.core.models import Frame, TimerEntry
from cec_conformance.core.protocol import (
    EVERY_DAY,
    AbortReason,
    AddressMask,
    AnalogueBroadcastType,
    ChannelNumberFormat,
    MediaInfo,
    ProgrammedError,
    ProgrammedInfo,
    RecordingSequence,
    ServiceIdMethod,
    TimerClearedStatus,
)
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import fail_if, transmit
from cec_conformance.scenarios.timers import (
    TimerSchedule,
    days_ahead,
    invalid_february_day,
    next_february_year,
    timer_at,
    timer_on,
)

logger = logging.getLogger(__name__)

RECORDER_MASK = AddressMask.RECORD | AddressMask.BACKUP

# 479.25 MHz in units of 62.5 kHz
TIMER_FREQUENCY = 7668

_VALID_CLEARED_STATUSES = frozenset(s.value for s in TimerClearedStatus)


def analogue_timer_service(engine: Engine, target: int) -> AnalogueService:
    device = engine.device(target)
    return AnalogueService(AnalogueBroadcastType.CABLE, TIMER_FREQUENCY, device.bcast_sys_analog_or_default())


def digital_timer_service(engine: Engine, target: int) -> DigitalServiceId:
    device = engine.device(target)
    return DigitalServiceId(
        service_id_method=ServiceIdMethod.BY_CHANNEL,
        dig_bcast_system=device.bcast_sys_digital_or_default(),
        channel_number_fmt=ChannelNumberFormat.ONE_PART,
        minor=1,
    )


def timer_status_is_valid(status: TimerStatus) -> bool:
    if status.media_info > MediaInfo.NO_MEDIA:
        return False
    if status.programmed:
        return ProgrammedInfo.ENOUGH_SPACE <= status.prog_info <= ProgrammedInfo.MIGHT_NOT_BE_ENOUGH_SPACE
    return (
        ProgrammedError.NO_FREE_TIMER <= status.prog_error <= ProgrammedError.CLOCK_FAILURE
        or status.prog_error == ProgrammedError.DUPLICATE
    )


def _reply(outcome: ExchangeOutcome) -> Frame:
    if outcome.reply is None:
        raise ProtocolViolation(f"{outcome.request} was not answered")
    return outcome.reply


def _timer_status(outcome: ExchangeOutcome) -> TimerStatus:
    status = codec.decode_timer_status(_reply(outcome))
    fail_if(not timer_status_is_valid(status), f"Invalid Timer Status {status}")
    return status


def _cleared_status(outcome: ExchangeOutcome) -> int:
    status = codec.decode_timer_cleared_status(_reply(outcome))
    fail_if(status not in _VALID_CLEARED_STATUSES, f"Invalid Timer Cleared Status 0x{status:02x}")
    return status


def _set_timer_verdict(outcome: ExchangeOutcome) -> Verdict:
    fail_if(timed_out(outcome), f"{outcome.request} timed out")
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED
    _timer_status(outcome)
    return Verdict.PASS


def _clear_timer_verdict(outcome: ExchangeOutcome) -> Verdict:
    fail_if(timed_out(outcome), f"{outcome.request} timed out")
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED
    _cleared_status(outcome)
    return Verdict.PASS


def _analogue_timer_entry(engine: Engine) -> TimerEntry:
    # Tomorrow at the current time, for 2h30, every day
    return timer_at(days_ahead(engine.now(), 1), 2, 30, EVERY_DAY)


def _digital_timer_entry(engine: Engine) -> TimerEntry:
    return timer_at(days_ahead(engine.now(), 2), 4, 30)


def _ext_timer_entry(engine: Engine) -> TimerEntry:
    return timer_at(days_ahead(engine.now(), 3), 6, 30)


def timer_prog_set_analog_timer(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    request = codec.set_analogue_timer(
        local, target, _analogue_timer_entry(engine), analogue_timer_service(engine, target)
    )
    return _set_timer_verdict(transmit(engine, request, timeout_ms=RECORD_REPLY_TIMEOUT_MS))


def timer_prog_set_digital_timer(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    request = codec.set_digital_timer(
        local, target, _digital_timer_entry(engine), digital_timer_service(engine, target)
    )
    return _set_timer_verdict(transmit(engine, request, timeout_ms=RECORD_REPLY_TIMEOUT_MS))


def timer_prog_set_ext_timer(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    request = codec.set_ext_timer(local, target, _ext_timer_entry(engine), engine.phys_addr)
    return _set_timer_verdict(transmit(engine, request, timeout_ms=RECORD_REPLY_TIMEOUT_MS))


def timer_prog_clear_analog_timer(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    request = codec.clear_analogue_timer(
        local, target, _analogue_timer_entry(engine), analogue_timer_service(engine, target)
    )
    return _clear_timer_verdict(transmit(engine, request, timeout_ms=RECORD_REPLY_TIMEOUT_MS))


def timer_prog_clear_digital_timer(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    request = codec.clear_digital_timer(
        local, target, _digital_timer_entry(engine), digital_timer_service(engine, target)
    )
    return _clear_timer_verdict(transmit(engine, request, timeout_ms=RECORD_REPLY_TIMEOUT_MS))


def timer_prog_clear_ext_timer(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    request = codec.clear_ext_timer(local, target, _ext_timer_entry(engine), engine.phys_addr)
    return _clear_timer_verdict(transmit(engine, request, timeout_ms=RECORD_REPLY_TIMEOUT_MS))


def timer_prog_set_prog_title(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    outcome = transmit(engine, codec.set_timer_program_title(local, target, "Super-Hans II"))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    return Verdict.OK_PRESUMED


def set_analogue_timer(engine: Engine, local: int, target: int, entry: TimerEntry) -> ExchangeOutcome:
    request = codec.set_analogue_timer(local, target, entry, analogue_timer_service(engine, target))
    return transmit(engine, request, timeout_ms=RECORD_REPLY_TIMEOUT_MS)


def send_timer_error(engine: Engine, local: int, target: int, entry: TimerEntry) -> None:
    """Submit a timer the device must reject."""
    outcome = set_analogue_timer(engine, local, target, entry)
    fail_if(timed_out(outcome), f"Set Analogue Timer {entry} timed out")
    if is_abort(outcome):
        fail_if(
            abort_reason(outcome) != AbortReason.INVALID_OPERAND,
            f"Timer {entry} was aborted with {abort_reason(outcome)!r}, expected Invalid Operand",
        )
        return
    status = _timer_status(outcome)
    fail_if(not status.has_error, f"Invalid timer {entry} was accepted")


def clear_timer(engine: Engine, local: int, target: int, entry: TimerEntry) -> None:
    request = codec.clear_analogue_timer(local, target, entry, analogue_timer_service(engine, target))
    outcome = transmit(engine, request, timeout_ms=RECORD_REPLY_TIMEOUT_MS)
    fail_if(timed_out_or_abort(outcome), f"Clear Analogue Timer {entry} was not answered")
    status = _cleared_status(outcome)
    fail_if(
        status != TimerClearedStatus.CLEARED,
        f"Timer {entry} was not cleared (status 0x{status:02x})",
    )


def clear_timers(engine: Engine, local: int, target: int, entries: list[TimerEntry]) -> None:
    """Clear every timer in ``entries``; failures are reported as cleanup failures."""
    for entry in entries:
        try:
            clear_timer(engine, local, target, entry)
        except ProtocolViolation as exc:
            engine.report_cleanup_failure(str(exc))


def invalid_timers(engine: Engine) -> list[TimerEntry]:
    """Timers whose fields are out of range, in submission order."""
    today = engine.now().date()
    february_year = next_february_year(today)
    return [
        TimerEntry(31, 11, 6, 0, 1, 0),
        TimerEntry(32, 12, 6, 0, 1, 0),
        TimerEntry(0, 1, 6, 0, 1, 0),
        TimerEntry(5, 0, 6, 0, 1, 0),
        TimerEntry(5, 13, 6, 0, 1, 0),
        TimerEntry(5, 8, 24, 0, 1, 0),
        TimerEntry(5, 8, 0, 60, 1, 0),
        TimerEntry(5, 8, 6, 0, 0, 0),
        TimerEntry(5, 8, 6, 0, 1, 0, 0xFF),
        TimerEntry(invalid_february_day(february_year), 2, 6, 0, 1, 0),
    ]


def timer_errors(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    entries = invalid_timers(engine)
    # Field range errors, except the last two which follow the duplicate check
    for entry in entries[:-2]:
        send_timer_error(engine, local, target, entry)

    # A duplicate of an accepted timer must be rejected
    duplicate = timer_at(engine.now() + timedelta(hours=2), 1, 0)
    outcome = set_analogue_timer(engine, local, target, duplicate)
    fail_if(timed_out_or_abort(outcome), "Set Analogue Timer was not accepted")
    status = codec.decode_timer_status(_reply(outcome))
    created = [duplicate] if status.programmed else []
    try:
        fail_if(not timer_status_is_valid(status), f"Invalid Timer Status {status}")
        fail_if(status.has_error, f"Timer {duplicate} was rejected")
        send_timer_error(engine, local, target, duplicate)
    finally:
        clear_timers(engine, local, target, created)

    for entry in entries[-2:]:
        send_timer_error(engine, local, target, entry)
    return Verdict.PASS


def overlap_sequence(engine: Engine) -> list[TimerEntry]:
    """Timers submitted by the overlap case: three disjoint, then five overlapping ones."""
    tomorrow = days_ahead(engine.now(), 1).date()
    sunday = RecordingSequence.SUNDAY
    return [
        timer_on(tomorrow, 8, 0, 2, 0),
        # Adjacent on either side of the first timer
        timer_on(tomorrow, 10, 0, 0, 15),
        timer_on(tomorrow, 7, 45, 0, 15),
        # Tail end, front end, same start, same end, covering all
        timer_on(tomorrow, 9, 0, 2, 0, sunday),
        timer_on(tomorrow, 7, 0, 1, 30, sunday),
        timer_on(tomorrow, 8, 0, 0, 30, sunday),
        timer_on(tomorrow, 9, 30, 0, 30, sunday),
        timer_on(tomorrow, 6, 0, 6, 0, sunday),
    ]


def timer_overlap_warning(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    entries = overlap_sequence(engine)
    schedule = TimerSchedule(today=engine.now().date())

    try:
        for index, entry in enumerate(entries):
            outcome = set_analogue_timer(engine, local, target, entry)
            if index == 0 and unrecognized_op(outcome):
                return Verdict.OK_NOT_SUPPORTED
            fail_if(timed_out_or_abort(outcome), f"Set Analogue Timer {entry} was not accepted")
            status = codec.decode_timer_status(_reply(outcome))
            expected = schedule.overlaps(entry)
            # Recorded before validation so that the finally clause clears it
            if status.programmed:
                schedule.accept(entry)
            fail_if(not timer_status_is_valid(status), f"Invalid Timer Status {status}")
            fail_if(status.has_error, f"Timer {entry} was rejected with error 0x{status.prog_error:x}")
            logger.debug(f"Timer {entry}: overlap expected={expected} reported={status.overlap_warning}")
            if expected:
                fail_if(not status.overlap_warning, f"Overlapping timer {entry} had no overlap warning")
            else:
                fail_if(status.overlap_warning, f"Timer {entry} was flagged as overlapping")
    finally:
        clear_timers(engine, local, target, schedule.accepted)
    return Verdict.PASS


AREA = TestArea(
    "Timer Programming feature",
    Tag.TIMER_PROGRAMMING,
    (
        TestCase("Set Analogue Timer", RECORDER_MASK, timer_prog_set_analog_timer),
        TestCase("Set Digital Timer", RECORDER_MASK, timer_prog_set_digital_timer),
        TestCase("Set Timer Program Title", RECORDER_MASK, timer_prog_set_prog_title),
        TestCase("Set External Timer", RECORDER_MASK, timer_prog_set_ext_timer),
        TestCase("Clear Analogue Timer", RECORDER_MASK, timer_prog_clear_analog_timer),
        TestCase("Clear Digital Timer", RECORDER_MASK, timer_prog_clear_digital_timer),
        TestCase("Clear External Timer", RECORDER_MASK, timer_prog_clear_ext_timer),
        TestCase("Set Timers with Errors", RECORDER_MASK, timer_errors),
        TestCase("Set Overlapping Timers", RECORDER_MASK, timer_overlap_warning),
    ),
)
