# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Remote Control Passthrough and Device Menu Control features.

Device Menu Control reuses the passthrough cases: a menu is navigated with
User Control Pressed/Released.
"""

from cec_conformance.bus import codec
from cec_conformance.core.classification import is_abort, refused, unrecognized_op
from cec_conformance.core.protocol import AddressMask, MenuRequest, UiCommand, has_role
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import fail_on_test_v2, transmit


def rc_passthrough_user_ctrl_pressed(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    # The key is not important here
    outcome = transmit(engine, codec.user_control_pressed(local, target, UiCommand.VOLUME_UP))
    if unrecognized_op(outcome):
        device.has_remote_control_passthrough = False
    # Mandatory for everything but the unregistered address
    fail_on_test_v2(
        engine,
        device.cec_version,
        unrecognized_op(outcome) and not has_role(target, AddressMask.UNREGISTERED),
        "User Control Pressed is mandatory as of CEC 2.0",
    )
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    return Verdict.OK_PRESUMED


def rc_passthrough_user_ctrl_released(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    if device.has_remote_control_passthrough is False:
        return Verdict.OK_NOT_SUPPORTED

    outcome = transmit(engine, codec.user_control_released(local, target))
    fail_on_test_v2(
        engine,
        device.cec_version,
        is_abort(outcome) and not has_role(target, AddressMask.UNREGISTERED),
        "User Control Released was Feature Aborted",
    )
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    device.has_remote_control_passthrough = True
    return Verdict.OK_PRESUMED


def dev_menu_ctl_request(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = transmit(engine, codec.menu_request(local, target, MenuRequest.QUERY))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED
    if device.is_cec20:
        engine.warn("The Device Menu Control feature is deprecated in CEC 2.0")
    return Verdict.PASS


PASSTHROUGH_AREA = TestArea(
    "Remote Control Passthrough feature",
    Tag.REMOTE_CONTROL_PASSTHROUGH,
    (
        TestCase("User Control Pressed", AddressMask.ALL, rc_passthrough_user_ctrl_pressed),
        TestCase("User Control Released", AddressMask.ALL, rc_passthrough_user_ctrl_released),
    ),
)

MENU_AREA = TestArea(
    "Device Menu Control feature",
    Tag.DEVICE_MENU_CONTROL,
    (
        TestCase("Menu Request", AddressMask.ALL & ~AddressMask.TV, dev_menu_ctl_request),
        TestCase("User Control Pressed", AddressMask.ALL, rc_passthrough_user_ctrl_pressed),
        TestCase("User Control Released", AddressMask.ALL, rc_passthrough_user_ctrl_released),
    ),
)
