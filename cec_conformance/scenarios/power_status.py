# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Give Device Power Status feature."""

from cec_conformance.bus import codec
from cec_conformance.core.classification import is_abort, refused, timed_out, unrecognized_op
from cec_conformance.core.protocol import AddressMask, PowerStatus
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import fail_if, fail_on_test_v2, fail_or_warn


def power_status_give(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = engine.send(codec.give_device_power_status(local, target))
    if not outcome.tx_ok or timed_out(outcome):
        return fail_or_warn(engine, "Give Device Power Status timed out")
    if unrecognized_op(outcome):
        fail_on_test_v2(
            engine, device.cec_version, True, "Give Device Power Status is mandatory as of CEC 2.0"
        )
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED

    assert outcome.reply is not None
    status = codec.decode_power_status(outcome.reply)
    fail_if(
        status not in {s.value for s in PowerStatus},
        f"Invalid power status {status}",
    )
    if not engine.in_standby:
        fail_if(status != PowerStatus.ON, f"Device reports power status {status} while expected to be on")
    return Verdict.PASS


AREA = TestArea(
    "Give Device Power Status feature",
    Tag.POWER_STATUS,
    (TestCase("Give Device Power Status", AddressMask.ALL, power_status_give),),
)
