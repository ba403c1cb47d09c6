# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Response classification for request/reply exchanges.

This module turns the raw outcome of one exchange (transmit status, reply
frame or silence) into a structured classification that scenario code
matches on. It never raises; judging whether a classification is a
protocol violation is left to the scenarios.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from cec_conformance.core.models import Frame
from cec_conformance.core.protocol import AbortReason, Opcode

if TYPE_CHECKING:
    from cec_conformance.bus.exchange import ExchangeOutcome


class ReplyKind(Enum):
    """Classification of a single exchange."""

    NONE = "none"
    TIMED_OUT = "timed_out"
    ABORTED = "aborted"
    OK = "ok"
    NOT_SENT = "not_sent"


@dataclass(frozen=True)
class Classification:
    kind: ReplyKind
    reason: AbortReason | None = None
    reply: Frame | None = None

    @property
    def payload(self) -> bytes:
        return self.reply.operands if self.reply is not None else b""


def _abort_reason(reply: Frame) -> AbortReason:
    try:
        return AbortReason(reply.operand(1, AbortReason.OTHER))
    except ValueError:
        return AbortReason.OTHER


def classify(outcome: "ExchangeOutcome") -> Classification:
    """Classify an exchange outcome.

    Evaluation order:
    1. Transmit not acknowledged -> NOT_SENT
    2. No reply and no reply expected -> NONE
    3. No reply although one was expected -> TIMED_OUT
    4. Feature Abort -> ABORTED with its reason
    5. Anything else -> OK carrying the reply

    Args:
        outcome: The exchange outcome to classify.

    Returns:
        The classification of the outcome.
    """
    if not outcome.tx_ok:
        return Classification(ReplyKind.NOT_SENT)

    reply = outcome.reply
    if reply is None:
        if outcome.request.reply is None:
            return Classification(ReplyKind.NONE)
        return Classification(ReplyKind.TIMED_OUT)

    if reply.opcode == Opcode.FEATURE_ABORT:
        return Classification(ReplyKind.ABORTED, _abort_reason(reply), reply)

    return Classification(ReplyKind.OK, reply=reply)


def abort_reason(outcome: "ExchangeOutcome") -> AbortReason | None:
    return classify(outcome).reason


def is_abort(outcome: "ExchangeOutcome") -> bool:
    return classify(outcome).kind == ReplyKind.ABORTED


def unrecognized_op(outcome: "ExchangeOutcome") -> bool:
    return abort_reason(outcome) == AbortReason.UNRECOGNIZED_OPCODE


def refused(outcome: "ExchangeOutcome") -> bool:
    return abort_reason(outcome) == AbortReason.REFUSED


def incorrect_mode(outcome: "ExchangeOutcome") -> bool:
    return abort_reason(outcome) == AbortReason.INCORRECT_MODE


def invalid_operand(outcome: "ExchangeOutcome") -> bool:
    return abort_reason(outcome) == AbortReason.INVALID_OPERAND


def timed_out(outcome: "ExchangeOutcome") -> bool:
    return classify(outcome).kind == ReplyKind.TIMED_OUT


def timed_out_or_abort(outcome: "ExchangeOutcome") -> bool:
    return classify(outcome).kind in (ReplyKind.TIMED_OUT, ReplyKind.ABORTED)


def replied(outcome: "ExchangeOutcome") -> bool:
    """True if the expected reply arrived (not an abort)."""
    return classify(outcome).kind == ReplyKind.OK
