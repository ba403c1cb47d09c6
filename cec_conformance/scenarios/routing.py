# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Routing Control feature.

Active Source runs before Request Active Source: once the adapter has
claimed to be the active source, nobody else may answer the request.
"""

from cec_conformance.bus import codec
from cec_conformance.bus.transport import BusMode
from cec_conformance.core.classification import refused, timed_out, unrecognized_op
from cec_conformance.core.constants import INACTIVE_SOURCE_WAIT_MS
from cec_conformance.core.protocol import AddressMask, LogicalAddress, Opcode, is_tv
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import (
    fail,
    fail_if,
    fail_on_test_v2,
    operator_info,
    transmit,
)

INACTIVE_SOURCE_FOLLOW_UPS = (Opcode.INACTIVE_SOURCE, Opcode.ACTIVE_SOURCE, Opcode.SET_STREAM_PATH)


def routing_control_active_source(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    operator_info(engine, interactive, "Please switch the TV to another source.")
    transmit(engine, codec.active_source(local, engine.phys_addr))
    fail_if(interactive and not engine.ask("Did the TV switch to this source?"), "TV did not switch to this source")
    if interactive:
        return Verdict.PASS
    return Verdict.OK_PRESUMED


def routing_control_req_active_source(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    outcome = transmit(engine, codec.request_active_source(local))
    fail_if(not timed_out(outcome), "Request Active Source was answered although this adapter is the active source")
    return Verdict.PASS


def routing_control_inactive_source(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    operator_info(engine, interactive, "Please make sure that the TV is currently viewing this source.")
    outcome = transmit(engine, codec.inactive_source(local, target, engine.phys_addr), mode=BusMode.FOLLOWER)
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED

    # The TV may take a moment to act on Inactive Source
    response = engine.exchange.wait_for(
        LogicalAddress.TV, INACTIVE_SOURCE_FOLLOW_UPS, INACTIVE_SOURCE_WAIT_MS, BusMode.FOLLOWER
    )
    if local == LogicalAddress.TV:
        # Inactive Source must be ignored by everything but a TV
        if response is not None:
            fail("Unexpected reply to Inactive Source")
        return Verdict.PASS

    if response is None:
        engine.warn("Expected Active Source or Set Stream Path reply to Inactive Source")
    fail_if(
        interactive and not engine.ask("Did the TV switch away from or stop showing this source?"),
        "TV kept showing this source",
    )
    return Verdict.PASS


def routing_control_set_stream_path(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    fail_if(device.phys_addr is None, f"Physical address of {device.name} is unknown")
    assert device.phys_addr is not None
    target_is_tv = is_tv(target, device.prim_type)

    # A source has to send Active Source, even if it must wake up first
    if target_is_tv:
        operator_info(engine, interactive, "Please ensure that the device is in standby.")
    engine.announce(
        f"Sending Set Stream Path and waiting for reply. This may take up to {engine.long_timeout_s} s."
    )
    outcome = transmit(
        engine,
        codec.set_stream_path(local, device.phys_addr),
        timeout_ms=int(engine.long_timeout_s * 1000),
    )
    if timed_out(outcome) and target_is_tv:
        return Verdict.OK_NOT_SUPPORTED
    if timed_out(outcome) and not device.is_cec20:
        engine.warn("Device did not respond to Set Stream Path.")
        return Verdict.OK_NOT_SUPPORTED
    fail_on_test_v2(engine, device.cec_version, timed_out(outcome), "Set Stream Path was not answered")

    assert outcome.reply is not None
    phys_addr = codec.decode_active_source(outcome.reply)
    fail_if(phys_addr != device.phys_addr, "Active Source names a different physical address")
    if target_is_tv:
        fail_if(interactive and not engine.ask("Did the device go out of standby?"), "TV stayed in standby")

    if interactive or device.is_cec20:
        return Verdict.PASS
    return Verdict.OK_PRESUMED


AREA = TestArea(
    "Routing Control feature",
    Tag.ROUTING_CONTROL,
    (
        TestCase("Active Source", AddressMask.TV, routing_control_active_source),
        TestCase("Request Active Source", AddressMask.ALL, routing_control_req_active_source),
        TestCase("Inactive Source", AddressMask.TV, routing_control_inactive_source),
        TestCase("Set Stream Path", AddressMask.ALL, routing_control_set_stream_path),
    ),
)
