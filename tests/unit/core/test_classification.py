# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Tests for response classification of exchange outcomes."""

from cec_conformance.bus import codec
from cec_conformance.bus.exchange import ExchangeOutcome
from cec_conformance.core.classification import (
    ReplyKind,
    abort_reason,
    classify,
    incorrect_mode,
    invalid_operand,
    is_abort,
    refused,
    replied,
    timed_out,
    timed_out_or_abort,
    unrecognized_op,
)
from cec_conformance.core.models import Frame
from cec_conformance.core.protocol import AbortReason, Opcode, PowerStatus

REQUEST = codec.give_device_power_status(4, 0)
NO_REPLY_REQUEST = codec.user_control_released(4, 0)


def _abort(reason: int) -> Frame:
    return codec.feature_abort(0, 4, Opcode.GIVE_DEVICE_POWER_STATUS, reason)


class TestClassify:
    """Tests for classify() evaluation order."""

    def test_not_sent_wins_over_everything(self) -> None:
        """A transmit that was not acknowledged is NOT_SENT even if a reply is attached."""
        outcome = ExchangeOutcome(REQUEST, tx_ok=False, reply=_abort(AbortReason.REFUSED))

        assert classify(outcome).kind == ReplyKind.NOT_SENT

    def test_silence_without_expected_reply_is_none(self) -> None:
        outcome = ExchangeOutcome(NO_REPLY_REQUEST, tx_ok=True)

        assert classify(outcome).kind == ReplyKind.NONE
        assert not timed_out(outcome)

    def test_silence_with_expected_reply_times_out(self) -> None:
        outcome = ExchangeOutcome(REQUEST, tx_ok=True)

        assert classify(outcome).kind == ReplyKind.TIMED_OUT
        assert timed_out(outcome)
        assert timed_out_or_abort(outcome)
        assert outcome.timed_out

    def test_feature_abort_carries_reason(self) -> None:
        outcome = ExchangeOutcome(REQUEST, tx_ok=True, reply=_abort(AbortReason.INCORRECT_MODE))
        classification = classify(outcome)

        assert classification.kind == ReplyKind.ABORTED
        assert classification.reason == AbortReason.INCORRECT_MODE
        assert classification.payload == bytes((Opcode.GIVE_DEVICE_POWER_STATUS, AbortReason.INCORRECT_MODE))

    def test_unknown_abort_reason_maps_to_other(self) -> None:
        outcome = ExchangeOutcome(REQUEST, tx_ok=True, reply=_abort(0x42))

        assert abort_reason(outcome) == AbortReason.OTHER

    def test_reply_is_ok(self) -> None:
        reply = codec.report_power_status(0, 4, PowerStatus.ON)
        outcome = ExchangeOutcome(REQUEST, tx_ok=True, reply=reply)

        assert classify(outcome).kind == ReplyKind.OK
        assert classify(outcome).reply == reply
        assert replied(outcome)
        assert not is_abort(outcome)
        assert abort_reason(outcome) is None


class TestAbortPredicates:
    """Each predicate matches exactly one abort reason."""

    def test_predicates(self) -> None:
        cases = {
            AbortReason.UNRECOGNIZED_OPCODE: unrecognized_op,
            AbortReason.REFUSED: refused,
            AbortReason.INCORRECT_MODE: incorrect_mode,
            AbortReason.INVALID_OPERAND: invalid_operand,
        }
        for reason, predicate in cases.items():
            outcome = ExchangeOutcome(REQUEST, tx_ok=True, reply=_abort(reason))
            assert predicate(outcome), reason
            for other_reason, other in cases.items():
                if other_reason != reason:
                    assert not other(outcome), (reason, other_reason)

    def test_predicates_false_on_timeout(self) -> None:
        outcome = ExchangeOutcome(REQUEST, tx_ok=True)

        assert not unrecognized_op(outcome)
        assert not refused(outcome)
        assert not is_abort(outcome)
