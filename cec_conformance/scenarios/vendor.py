# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Vendor Specific Commands feature."""

from cec_conformance.bus import codec
from cec_conformance.core.classification import is_abort, refused, timed_out, unrecognized_op
from cec_conformance.core.protocol import AddressMask
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import fail_if, fail_or_warn


def vendor_specific_commands_id(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = engine.send(codec.give_device_vendor_id(local, target))
    if not outcome.tx_ok or timed_out(outcome):
        return fail_or_warn(engine, "Give Device Vendor ID timed out")
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED

    assert outcome.reply is not None
    vendor_id = codec.decode_vendor_id(outcome.reply)
    if device.vendor_id is None:
        device.vendor_id = vendor_id
    fail_if(device.vendor_id != vendor_id, f"Vendor ID 0x{vendor_id:06x} differs from discovery")
    return Verdict.PASS


AREA = TestArea(
    "Vendor Specific Commands feature",
    Tag.VENDOR_SPECIFIC_COMMANDS,
    (TestCase("Give Device Vendor ID", AddressMask.ALL, vendor_specific_commands_id),),
)
