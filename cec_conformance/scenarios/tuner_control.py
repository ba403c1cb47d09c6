# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Tuner Control feature: channel scan and reselect.

The tuner is stepped forward until it reports the first captured service
again (the service list wrapped) or refuses to step further (no wrap).
Every captured service is then selected again and must be reported back
unchanged.
"""

import logging

from cec_conformance.bus import codec
from cec_conformance.bus.codec import AnalogueService, DigitalServiceId, TunerDeviceInfo
from cec_conformance.core.classification import (
    abort_reason,
    is_abort,
    timed_out,
    timed_out_or_abort,
    unrecognized_op,
)
from cec_conformance.core.protocol import (
    AbortReason,
    AddressMask,
    AnalogueBroadcastType,
    BroadcastSystem,
    ChannelNumberFormat,
    DigitalBroadcastSystem,
    ServiceIdMethod,
    has_role,
)
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import expect_invalid_operand, fail, fail_if, transmit

logger = logging.getLogger(__name__)

TUNER_MASK = AddressMask.TV | AddressMask.TUNER

INVALID_ANALOGUE_SERVICE = AnalogueService(bcast_type=3, frequency=16000, bcast_system=9)
INVALID_DIGITAL_SERVICE = DigitalServiceId(
    service_id_method=ServiceIdMethod.BY_DIGITAL_ID,
    dig_bcast_system=DigitalBroadcastSystem.DVB_S2,
)

_ANALOGUE_SYSTEMS = frozenset(s.value for s in BroadcastSystem if s != BroadcastSystem.OTHER)
_DIGITAL_SYSTEMS = frozenset(s.value for s in DigitalBroadcastSystem)


def describe_service(info: TunerDeviceInfo) -> str:
    if info.analogue is not None:
        service = info.analogue
        return f"Analog Channel {service.frequency_mhz:.2f} MHz (system {service.bcast_system}, type {service.bcast_type})"
    assert info.digital is not None
    digital = info.digital
    if digital.service_id_method == ServiceIdMethod.BY_CHANNEL:
        if digital.channel_number_fmt == ChannelNumberFormat.ONE_PART:
            return f"Digital Channel {digital.minor}"
        return f"Digital Channel {digital.major}.{digital.minor}"
    if digital.is_atsc:
        return f"Digital TSID: {digital.transport_id}, Program Number: {digital.program_number}"
    return (
        f"Digital TSID: {digital.transport_id}, SID: {digital.service_id}, "
        f"ONID: {digital.orig_network_id}"
    )


def validate_service(engine: Engine, info: TunerDeviceInfo) -> None:
    """Range checks on a reported tuner service descriptor."""
    logger.info(describe_service(info))
    if info.analogue is not None:
        service = info.analogue
        fail_if(
            service.bcast_system not in _ANALOGUE_SYSTEMS,
            f"Invalid analogue broadcast system {service.bcast_system}",
        )
        fail_if(
            service.bcast_type > AnalogueBroadcastType.TERRESTRIAL,
            f"Invalid analogue broadcast type {service.bcast_type}",
        )
        fail_if(service.frequency == 0, "Analogue frequency is zero")
        return

    assert info.digital is not None
    digital = info.digital
    if digital.service_id_method == ServiceIdMethod.BY_CHANNEL:
        fail_if(
            digital.channel_number_fmt not in (ChannelNumberFormat.ONE_PART, ChannelNumberFormat.TWO_PART),
            f"Invalid channel number format {digital.channel_number_fmt}",
        )
        return
    if digital.dig_bcast_system not in _DIGITAL_SYSTEMS:
        fail(f"Invalid digital broadcast system {digital.dig_bcast_system}")
    if DigitalBroadcastSystem(digital.dig_bcast_system).is_generic:
        engine.warn_once("generic digital broadcast systems should not be used")


def query_tuner(engine: Engine, local: int, target: int) -> TunerDeviceInfo:
    outcome = transmit(engine, codec.give_tuner_device_status(local, target))
    fail_if(timed_out_or_abort(outcome), "Give Tuner Device Status was not answered")
    assert outcome.reply is not None
    return codec.decode_tuner_device_status(outcome.reply)


def scan_channels(engine: Engine, local: int, target: int, first: TunerDeviceInfo) -> list[TunerDeviceInfo]:
    """Step through the service list; returns the distinct services seen."""
    captured = [first]
    while True:
        outcome = transmit(engine, codec.tuner_step_increment(local, target))
        if is_abort(outcome):
            fail_if(unrecognized_op(outcome), "Tuner Step Increment is not supported by a tuner")
            if abort_reason(outcome) == AbortReason.REFUSED:
                engine.warn("Tuner step increment does not wrap.")
            else:
                engine.warn("Tuner at end of service list did not receive feature abort refused.")
            break
        info = query_tuner(engine, local, target)
        if info == first:
            break
        if info in captured:
            engine.warn(f"Tuner returned to {describe_service(info)} without wrapping to the first service")
            break
        validate_service(engine, info)
        captured.append(info)
    return captured


def tuner_ctl_test(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    has_tuner = has_role(target, TUNER_MASK)
    outcome = transmit(engine, codec.give_tuner_device_status(local, target))
    fail_if(not has_tuner and not timed_out_or_abort(outcome), "Device without a tuner reported a tuner status")
    if not has_tuner:
        return Verdict.OK_NOT_SUPPORTED
    if timed_out(outcome) or unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if is_abort(outcome):
        return Verdict.OK_REFUSED

    assert outcome.reply is not None
    first = codec.decode_tuner_device_status(outcome.reply)
    validate_service(engine, first)

    engine.info("Start Channel Scan")
    services = scan_channels(engine, local, target, first)
    engine.info(f"Finished Channel Scan: {len(services)} service(s)")

    engine.info("Start Channel Test")
    for service in services:
        engine.info(f"Select {describe_service(service)}")
        outcome = transmit(engine, codec.select_service(local, target, service))
        fail_if(is_abort(outcome), f"Selecting {describe_service(service)} was Feature Aborted")
        current = query_tuner(engine, local, target)
        if current != service:
            fail(f"Selected {describe_service(service)} but tuner reports {describe_service(current)}")
    engine.info("Finished Channel Test")

    engine.info("Select invalid analog channel")
    outcome = transmit(engine, codec.select_analogue_service(local, target, INVALID_ANALOGUE_SERVICE))
    expect_invalid_operand(outcome, "Select Analogue Service with an invalid service")

    engine.info("Select invalid digital channel")
    outcome = transmit(engine, codec.select_digital_service(local, target, INVALID_DIGITAL_SERVICE))
    expect_invalid_operand(outcome, "Select Digital Service with an invalid service")
    return Verdict.PASS


AREA = TestArea(
    "Tuner Control feature",
    Tag.TUNER_CONTROL,
    (TestCase("Tuner Control", TUNER_MASK, tuner_ctl_test),),
)
