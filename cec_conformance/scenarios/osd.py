# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Device OSD Transfer and OSD String features.

The OSD String cases only give a definite verdict in interactive mode,
where the operator confirms what appeared on screen.
"""

from cec_conformance.bus import codec
from cec_conformance.core.classification import is_abort, refused, timed_out, unrecognized_op
from cec_conformance.core.constants import (
    OSD_CLEAR_TIMEOUT_MS,
    OSD_CLEAR_WAIT_S,
    OSD_UNTIL_CLEARED_WAIT_S,
)
from cec_conformance.core.protocol import AddressMask, DeviceFeature, DisplayControl, is_tv
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import (
    fail_if,
    fail_on_test_v2,
    fail_or_warn,
    operator_info,
    transmit,
)

# Set OSD String carries at most 13 characters
OSD_STRING_MAX = 13


def device_osd_transfer_set(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = transmit(engine, codec.set_osd_name(local, target, "Whatever"))
    if unrecognized_op(outcome):
        if is_tv(target, device.prim_type) and device.is_cec20:
            engine.warn("TV feature aborted Set OSD Name")
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    return Verdict.OK_PRESUMED


def device_osd_transfer_give(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = engine.send(codec.give_osd_name(local, target))
    if not outcome.tx_ok or timed_out(outcome):
        return fail_or_warn(engine, "Give OSD Name timed out")
    fail_if(
        not is_tv(target, device.prim_type) and unrecognized_op(outcome),
        "Give OSD Name is mandatory for devices other than TVs",
    )
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED

    assert outcome.reply is not None
    name = codec.decode_osd_name(outcome.reply)
    fail_if(not name, "Empty OSD name")
    fail_if("\x00" in name, "OSD name contains NUL characters")
    if device.osd_name is None:
        device.osd_name = name
    fail_if(device.osd_name != name, f"OSD name '{name}' differs from '{device.osd_name}'")
    return Verdict.PASS


def osd_string_set_default(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    text = f"Rept {target:x} from {local:x}"
    unsuitable = False

    operator_info(engine, interactive, f'You should see "{text}" appear on the screen')
    outcome = transmit(engine, codec.set_osd_string(local, target, DisplayControl.DEFAULT, text))
    # Mandatory for CEC 2.0 TVs that announce it in their Device Features
    fail_on_test_v2(
        engine,
        device.cec_version,
        unrecognized_op(outcome) and device.has_feature(DeviceFeature.HAS_SET_OSD_STRING) is True,
        "Set OSD String is announced in Device Features but not supported",
    )
    if unrecognized_op(outcome):
        device.has_osd = False
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        device.has_osd = False
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        engine.warn("The device is in an unsuitable state or cannot display the complete message.")
        unsuitable = True
    device.has_osd = True
    if not interactive:
        return Verdict.OK_PRESUMED

    # Wait for the string to time out on the remote display
    operator_info(
        engine, interactive, f"Waiting {OSD_CLEAR_WAIT_S}s for OSD string to be cleared on the remote device"
    )
    engine.sleep(OSD_CLEAR_WAIT_S)
    fail_if(
        not unsuitable and not engine.ask("Did the string appear and then disappear?"),
        "Operator did not see the OSD string appear and disappear",
    )
    return Verdict.PASS


def osd_string_set_until_clear(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    if not device.supports_osd():
        return Verdict.NOT_APPLICABLE

    text = "Appears 1 sec"
    # Use the longest string the message can carry
    fail_if(len(text) != OSD_STRING_MAX)
    unsuitable = False

    operator_info(
        engine, interactive, f'You should see "{text}" appear on the screen for approximately three seconds.'
    )
    outcome = transmit(engine, codec.set_osd_string(local, target, DisplayControl.UNTIL_CLEARED, text))
    if is_abort(outcome) and not unrecognized_op(outcome):
        engine.warn("The device is in an unsuitable state or cannot display the complete message.")
        unsuitable = True
    engine.sleep(OSD_UNTIL_CLEARED_WAIT_S)

    outcome = transmit(
        engine, codec.set_osd_string(local, target, DisplayControl.CLEAR, ""), timeout_ms=OSD_CLEAR_TIMEOUT_MS
    )
    fail_if(is_abort(outcome), "Clearing the OSD string was Feature Aborted")
    if not interactive:
        return Verdict.OK_PRESUMED
    fail_if(not unsuitable and not engine.ask("Did the string appear?"), "Operator did not see the OSD string")
    return Verdict.PASS


def osd_string_invalid(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    if not device.supports_osd():
        return Verdict.NOT_APPLICABLE

    # Reserved Display Control value
    operator_info(engine, interactive, "You should observe no change on the on screen display")
    outcome = transmit(engine, codec.set_osd_string(local, target, 0xFF, ""))
    fail_if(not is_abort(outcome), "Invalid Display Control was not Feature Aborted")
    fail_if(interactive and engine.ask("Did the display change?"), "Display changed on an invalid Set OSD String")
    return Verdict.PASS


TRANSFER_AREA = TestArea(
    "Device OSD Transfer feature",
    Tag.DEVICE_OSD_TRANSFER,
    (
        TestCase("Set OSD Name", AddressMask.ALL, device_osd_transfer_set),
        TestCase("Give OSD Name", AddressMask.ALL, device_osd_transfer_give),
    ),
)

STRING_AREA = TestArea(
    "OSD String feature",
    Tag.OSD_DISPLAY,
    (
        TestCase("Set OSD String with default timeout", AddressMask.TV, osd_string_set_default),
        TestCase("Set OSD String with no timeout", AddressMask.TV, osd_string_set_until_clear),
        TestCase("Set OSD String with invalid operand", AddressMask.TV, osd_string_invalid),
    ),
)
