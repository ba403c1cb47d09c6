# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""One Touch Record feature: record source validation."""

from cec_conformance.bus import codec
from cec_conformance.bus.codec import AnalogueService, DigitalServiceId, RecordSource
from cec_conformance.core.classification import (
    is_abort,
    refused,
    timed_out,
    timed_out_or_abort,
    unrecognized_op,
)
from cec_conformance.core.constants import RECORD_REPLY_TIMEOUT_MS
from cec_conformance.core.protocol import (
    RECORD_ERROR_STATUSES,
    AddressMask,
    AnalogueBroadcastType,
    BroadcastSystem,
    ChannelNumberFormat,
    DigitalBroadcastSystem,
    PrimaryDeviceType,
    RecordSourceType,
    RecordStatus,
    ServiceIdMethod,
)
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import (
    expect_invalid_operand,
    fail,
    fail_if,
    fail_on_test_v2,
    transmit,
)

RECORDER_MASK = AddressMask.RECORD | AddressMask.BACKUP


def _analogue_frequency(khz: int) -> int:
    """Frequency operand in units of 62.5 kHz."""
    return (khz * 10) // 625


# Sources every recorder is asked to record, with the status naming success
RECORD_SOURCES = (
    (
        RecordSource(
            RecordSourceType.DIGITAL,
            digital=DigitalServiceId(
                ServiceIdMethod.BY_DIGITAL_ID,
                DigitalBroadcastSystem.ARIB_BS,
                transport_id=1032,
                service_id=30203,
                orig_network_id=1,
            ),
        ),
        RecordStatus.DIG_SERVICE,
    ),
    (
        RecordSource(
            RecordSourceType.DIGITAL,
            digital=DigitalServiceId(
                ServiceIdMethod.BY_CHANNEL,
                DigitalBroadcastSystem.ATSC_T,
                channel_number_fmt=ChannelNumberFormat.TWO_PART,
                major=4,
                minor=1,
            ),
        ),
        RecordStatus.DIG_SERVICE,
    ),
    (
        RecordSource(
            RecordSourceType.DIGITAL,
            digital=DigitalServiceId(
                ServiceIdMethod.BY_DIGITAL_ID,
                DigitalBroadcastSystem.DVB_T,
                transport_id=1004,
                service_id=1040,
                orig_network_id=8945,
            ),
        ),
        RecordStatus.DIG_SERVICE,
    ),
    (
        RecordSource(
            RecordSourceType.ANALOGUE,
            analogue=AnalogueService(
                AnalogueBroadcastType.CABLE, _analogue_frequency(471250), BroadcastSystem.PAL_BG
            ),
        ),
        RecordStatus.ANA_SERVICE,
    ),
    (
        RecordSource(
            RecordSourceType.ANALOGUE,
            analogue=AnalogueService(
                AnalogueBroadcastType.SATELLITE, _analogue_frequency(551250), BroadcastSystem.SECAM_BG
            ),
        ),
        RecordStatus.ANA_SERVICE,
    ),
    (
        RecordSource(
            RecordSourceType.ANALOGUE,
            analogue=AnalogueService(
                AnalogueBroadcastType.TERRESTRIAL, _analogue_frequency(185250), BroadcastSystem.PAL_DK
            ),
        ),
        RecordStatus.ANA_SERVICE,
    ),
    (RecordSource(RecordSourceType.EXT_PLUG, plug=1), RecordStatus.EXT_INPUT),
    (RecordSource(RecordSourceType.EXT_PHYS_ADDR), RecordStatus.EXT_INPUT),
)

# Malformed sources that must be aborted with Invalid Operand
INVALID_RECORD_SOURCES = (
    RecordSource(0),
    RecordSource(6),
    RecordSource(
        RecordSourceType.DIGITAL,
        digital=DigitalServiceId(
            ServiceIdMethod.BY_CHANNEL,
            0x7F,
            channel_number_fmt=ChannelNumberFormat.ONE_PART,
            minor=30203,
        ),
    ),
    RecordSource(
        RecordSourceType.DIGITAL,
        digital=DigitalServiceId(
            ServiceIdMethod.BY_CHANNEL,
            DigitalBroadcastSystem.ARIB_BS,
            channel_number_fmt=0,
            minor=30609,
        ),
    ),
    RecordSource(
        RecordSourceType.ANALOGUE,
        analogue=AnalogueService(0xFF, _analogue_frequency(519250), BroadcastSystem.PAL_BG),
    ),
    RecordSource(
        RecordSourceType.ANALOGUE,
        analogue=AnalogueService(AnalogueBroadcastType.SATELLITE, _analogue_frequency(703250), 0xFF),
    ),
    RecordSource(
        RecordSourceType.ANALOGUE,
        analogue=AnalogueService(AnalogueBroadcastType.TERRESTRIAL, 0, BroadcastSystem.NTSC_M),
    ),
    RecordSource(
        RecordSourceType.ANALOGUE,
        analogue=AnalogueService(AnalogueBroadcastType.CABLE, 0xFFFF, BroadcastSystem.SECAM_L),
    ),
    RecordSource(RecordSourceType.EXT_PLUG, plug=0),
)

_DIGITAL_SYSTEMS = frozenset(s.value for s in DigitalBroadcastSystem)


def rec_status_is_a_valid_error_status(status: int) -> bool:
    """True if the Record Status reports a failed attempt to start recording."""
    return status in RECORD_ERROR_STATUSES


def _check_record_status(status: int, success: RecordStatus, source: RecordSource) -> None:
    if status == success:
        return
    fail_if(
        not rec_status_is_a_valid_error_status(status),
        f"Record Status 0x{status:02x} is neither {success.name} nor an error for source type {source.type}",
    )


def one_touch_rec_on_send(engine: Engine, local: int, target: int, source: RecordSource) -> int:
    """Stop any recording, then Record On ``source``; returns the Record Status."""
    transmit(engine, codec.record_off(local, target, reply=False))
    # The device may need several seconds to answer accurately
    outcome = transmit(engine, codec.record_on(local, target, source), timeout_ms=RECORD_REPLY_TIMEOUT_MS)
    fail_if(timed_out_or_abort(outcome), f"Record On for source type {source.type} was not answered")
    assert outcome.reply is not None
    return codec.decode_record_status(outcome.reply)


def validate_record_source(source: RecordSource) -> None:
    """Range checks on the source a TV asks to record from."""
    fail_if(
        not RecordSourceType.OWN <= source.type <= RecordSourceType.EXT_PHYS_ADDR,
        f"Invalid record source type {source.type}",
    )
    if source.type == RecordSourceType.DIGITAL:
        assert source.digital is not None
        if source.digital.dig_bcast_system not in _DIGITAL_SYSTEMS:
            fail("Invalid digital service broadcast system operand.")
        if source.digital.service_id_method == ServiceIdMethod.BY_CHANNEL:
            fail_if(
                source.digital.channel_number_fmt
                not in (ChannelNumberFormat.ONE_PART, ChannelNumberFormat.TWO_PART),
                f"Invalid channel number format {source.digital.channel_number_fmt}",
            )
    if source.type == RecordSourceType.ANALOGUE:
        assert source.analogue is not None
        analogue = source.analogue
        fail_if(
            analogue.bcast_type > AnalogueBroadcastType.TERRESTRIAL,
            f"Invalid analogue broadcast type {analogue.bcast_type}",
        )
        fail_if(
            analogue.bcast_system > BroadcastSystem.PAL_DK and analogue.bcast_system != BroadcastSystem.OTHER,
            f"Invalid analogue broadcast system {analogue.bcast_system}",
        )
        fail_if(analogue.frequency in (0, 0xFFFF), f"Invalid analogue frequency {analogue.frequency}")
    if source.type == RecordSourceType.EXT_PLUG:
        fail_if(source.plug == 0, "External plug 0 is invalid")


def one_touch_rec_tv_screen(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = transmit(engine, codec.record_tv_screen(local, target))
    fail_on_test_v2(
        engine,
        device.cec_version,
        device.has_rec_tv is True and unrecognized_op(outcome),
        "Record TV Screen is announced in Device Features but not supported",
    )
    fail_on_test_v2(
        engine,
        device.cec_version,
        device.has_rec_tv is False and not unrecognized_op(outcome),
        "Record TV Screen is not announced in Device Features but was answered",
    )
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED
    # Only a recording device may ask the TV what to record
    if not engine.is_recording_device:
        fail_if(not timed_out(outcome), "Record TV Screen from a non-recording device was answered")
        return Verdict.PASS
    fail_if(timed_out(outcome), "Record TV Screen timed out")

    assert outcome.reply is not None
    validate_record_source(codec.decode_record_on(outcome.reply))
    return Verdict.PASS


def one_touch_rec_on(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    own = RecordSource(RecordSourceType.OWN)
    outcome = transmit(engine, codec.record_on(local, target, own), timeout_ms=RECORD_REPLY_TIMEOUT_MS)
    fail_if(timed_out(outcome), "Record On timed out")
    if unrecognized_op(outcome):
        fail_if(device.prim_type == PrimaryDeviceType.RECORD, "Recording device does not support Record On")
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED

    assert outcome.reply is not None
    _check_record_status(codec.decode_record_status(outcome.reply), RecordStatus.CUR_SRC, own)

    for source, success in RECORD_SOURCES:
        status = one_touch_rec_on_send(engine, local, target, source)
        _check_record_status(status, success, source)
    return Verdict.PASS


def one_touch_rec_on_invalid(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    first, *rest = INVALID_RECORD_SOURCES
    outcome = transmit(engine, codec.record_on(local, target, first))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    expect_invalid_operand(outcome, f"Record On with source type {first.type}")

    for source in rest:
        outcome = transmit(engine, codec.record_on(local, target, source))
        expect_invalid_operand(outcome, f"Record On with invalid source {source}")
    return Verdict.PASS


def one_touch_rec_off(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = transmit(engine, codec.record_off(local, target), timeout_ms=RECORD_REPLY_TIMEOUT_MS)
    if unrecognized_op(outcome):
        fail_if(device.prim_type == PrimaryDeviceType.RECORD, "Recording device does not support Record Off")
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome) or timed_out(outcome):
        return Verdict.OK_PRESUMED

    assert outcome.reply is not None
    status = codec.decode_record_status(outcome.reply)
    fail_if(
        status not in (RecordStatus.TERMINATED_OK, RecordStatus.ALREADY_TERM),
        f"Record Off answered with Record Status 0x{status:02x}",
    )
    return Verdict.PASS


AREA = TestArea(
    "One Touch Record feature",
    Tag.ONE_TOUCH_RECORD,
    (
        TestCase("Record TV Screen", AddressMask.TV, one_touch_rec_tv_screen),
        TestCase("Record On", RECORDER_MASK, one_touch_rec_on),
        TestCase("Record On Invalid Operand", RECORDER_MASK, one_touch_rec_on_invalid),
        TestCase("Record Off", RECORDER_MASK, one_touch_rec_off),
    ),
)
