# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Core behaviour: Feature Abort handling."""

from cec_conformance.bus import codec
from cec_conformance.core.classification import abort_reason, is_abort, timed_out
from cec_conformance.core.protocol import BROADCAST, AbortReason, AddressMask, Opcode
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import fail_if, fail_or_warn, transmit


def core_unknown(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    # 0xfe is unused up to and including CEC 2.0
    outcome = engine.send(codec.unknown_opcode(local, target))
    if not outcome.tx_ok or outcome.reply is None:
        return fail_or_warn(engine, "Unknown Opcode timed out")
    fail_if(not is_abort(outcome), "Unknown opcode was not Feature Aborted")
    assert outcome.reply is not None
    fail_if(abort_reason(outcome) != AbortReason.UNRECOGNIZED_OPCODE, "Abort reason is not Unrecognized Opcode")
    fail_if(outcome.reply.operand(0) != codec.UNKNOWN_OPCODE, "Feature Abort names the wrong opcode")

    # Broadcast unknown opcodes must be ignored
    outcome = transmit(engine, codec.unknown_opcode(local, BROADCAST).expecting(Opcode.FEATURE_ABORT))
    fail_if(not timed_out(outcome), "Broadcast unknown opcode was answered")
    return Verdict.PASS


def core_abort(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    """The Abort message is always answered with Feature Abort, any reason."""
    outcome = engine.send(codec.abort(local, target))
    if not outcome.tx_ok or outcome.reply is None:
        return fail_or_warn(engine, "Abort timed out")
    fail_if(not is_abort(outcome), "Abort message was not Feature Aborted")
    return Verdict.PASS


AREA = TestArea(
    "Core",
    Tag.CORE,
    (
        TestCase("Feature aborts unknown messages", AddressMask.ALL, core_unknown),
        TestCase("Feature aborts Abort message", AddressMask.ALL, core_abort),
    ),
)
