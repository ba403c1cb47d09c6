# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Deck Control feature.

The sequencing cases assume the deck holds media unless it reports
otherwise. Seek operations complete asynchronously, so after Skip
Forward/Reverse the deck status is polled once per second until it leaves
the seeking state or the long timeout expires.
"""

from cec_conformance.bus import codec
from cec_conformance.core.classification import (
    incorrect_mode,
    is_abort,
    refused,
    timed_out,
    timed_out_or_abort,
    unrecognized_op,
)
from cec_conformance.core.constants import DECK_POLL_INTERVAL_S
from cec_conformance.core.protocol import (
    AddressMask,
    DeckControlMode,
    DeckInfo,
    Opcode,
    PlayMode,
    StatusRequest,
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

DECK_MASK = AddressMask.PLAYBACK | AddressMask.RECORD

# Play mode sent -> deck status expected afterwards
PLAY_MODE_TRANSITIONS = (
    (PlayMode.PLAY_STILL, DeckInfo.STILL),
    (PlayMode.PLAY_REV, DeckInfo.PLAY_REV),
    (PlayMode.FAST_FWD_MIN, DeckInfo.FAST_FWD),
    (PlayMode.FAST_REV_MIN, DeckInfo.FAST_REV),
    (PlayMode.FAST_FWD_MED, DeckInfo.FAST_FWD),
    (PlayMode.FAST_REV_MED, DeckInfo.FAST_REV),
    (PlayMode.FAST_FWD_MAX, DeckInfo.FAST_FWD),
    (PlayMode.FAST_REV_MAX, DeckInfo.FAST_REV),
    (PlayMode.SLOW_FWD_MIN, DeckInfo.SLOW),
    (PlayMode.SLOW_REV_MIN, DeckInfo.SLOW_REV),
    (PlayMode.SLOW_FWD_MED, DeckInfo.SLOW),
    (PlayMode.SLOW_REV_MED, DeckInfo.SLOW_REV),
    (PlayMode.SLOW_FWD_MAX, DeckInfo.SLOW),
    (PlayMode.SLOW_REV_MAX, DeckInfo.SLOW_REV),
)


def _valid_deck_info(info: int) -> bool:
    return DeckInfo.PLAY <= info <= DeckInfo.OTHER


def deck_status_get(engine: Engine, local: int, target: int) -> int:
    """Query the current deck status; no answer is a failure."""
    outcome = transmit(engine, codec.give_deck_status(local, target, StatusRequest.ONCE))
    fail_if(timed_out_or_abort(outcome), "Give Deck Status was not answered")
    assert outcome.reply is not None
    return codec.decode_deck_status(outcome.reply)


def _settle(engine: Engine, local: int, target: int, transitional: DeckInfo) -> int:
    """Deck status once the deck has left ``transitional``, or at the deadline."""
    latest = deck_status_get(engine, local, target)
    if latest != transitional:
        return latest

    def settled() -> bool:
        nonlocal latest
        latest = deck_status_get(engine, local, target)
        return latest != transitional

    engine.await_condition(settled, DECK_POLL_INTERVAL_S)
    return latest


def _check_capability(engine: Engine, target: int, aborted: bool, not_recognized: bool) -> None:
    device = engine.device(target)
    fail_on_test_v2(
        engine,
        device.cec_version,
        device.has_deck_ctl is True and aborted,
        "Deck control is announced in Device Features but the message was Feature Aborted",
    )
    fail_on_test_v2(
        engine,
        device.cec_version,
        device.has_deck_ctl is False and not not_recognized,
        "Deck control is not announced in Device Features but the message was accepted",
    )


def _incorrect_mode_verdict(engine: Engine, status: int, operation: str) -> Verdict:
    """Incorrect Mode is only conformant for a deck without media."""
    if status != DeckInfo.NO_MEDIA:
        fail(f"Deck has media but aborted {operation} with Incorrect Mode")
    engine.info(f"{operation}: no media.")
    return Verdict.PASS


def check_play_mode(engine: Engine, local: int, target: int, mode: PlayMode, expected: DeckInfo) -> None:
    outcome = transmit(engine, codec.play(local, target, mode))
    fail_if(is_abort(outcome), f"Play {mode.name} was Feature Aborted")
    status = deck_status_get(engine, local, target)
    fail_if(
        status != expected,
        f"Deck status 0x{status:02x} after Play {mode.name}, expected {expected.name}",
    )


def deck_ctl_give_status(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    outcome = transmit(engine, codec.give_deck_status(local, target, StatusRequest.ONCE))
    fail_if(timed_out(outcome), "Give Deck Status timed out")
    _check_capability(engine, target, is_abort(outcome), unrecognized_op(outcome))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED

    assert outcome.reply is not None
    info = codec.decode_deck_status(outcome.reply)
    fail_if(not _valid_deck_info(info), f"Invalid deck info 0x{info:02x}")

    outcome = transmit(engine, codec.give_deck_status(local, target, StatusRequest.ON))
    fail_if(timed_out(outcome), "Give Deck Status (On) timed out")
    assert outcome.reply is not None
    info = codec.decode_deck_status(outcome.reply)
    fail_if(not _valid_deck_info(info), f"Invalid deck info 0x{info:02x}")

    # No reply is expected once reporting is turned off
    outcome = transmit(
        engine,
        codec.give_deck_status(local, target, StatusRequest.OFF).expecting(Opcode.DECK_STATUS),
    )
    fail_if(not timed_out(outcome), "Deck kept reporting its status after Status Request Off")
    return Verdict.PASS


def deck_ctl_give_status_invalid(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    outcome = transmit(engine, codec.give_deck_status(local, target, 0))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    expect_invalid_operand(outcome, "Give Deck Status with status request 0")

    outcome = transmit(engine, codec.give_deck_status(local, target, 4))
    expect_invalid_operand(outcome, "Give Deck Status with status request 4")
    return Verdict.PASS


def deck_ctl_deck_ctl(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    outcome = transmit(engine, codec.deck_control(local, target, DeckControlMode.STOP))
    _check_capability(engine, target, unrecognized_op(outcome), unrecognized_op(outcome))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    status = deck_status_get(engine, local, target)
    if is_abort(outcome):
        fail_if(not incorrect_mode(outcome), "Stop was Feature Aborted")
        return _incorrect_mode_verdict(engine, status, "Stop")
    fail_if(
        status not in (DeckInfo.STOP, DeckInfo.NO_MEDIA),
        f"Deck status 0x{status:02x} after Stop",
    )

    outcome = transmit(engine, codec.deck_control(local, target, DeckControlMode.SKIP_FWD))
    # Without media Skip Forward must be refused, even if Stop was not
    if incorrect_mode(outcome):
        status = deck_status_get(engine, local, target)
        fail_if(status != DeckInfo.NO_MEDIA, "Deck has media but aborted Skip Forward with Incorrect Mode")
        return Verdict.PASS
    fail_if(is_abort(outcome), "Skip Forward was Feature Aborted")
    status = _settle(engine, local, target, DeckInfo.SKIP_FWD)
    fail_if(status != DeckInfo.PLAY, f"Deck status 0x{status:02x} after Skip Forward")

    outcome = transmit(engine, codec.deck_control(local, target, DeckControlMode.SKIP_REV))
    fail_if(is_abort(outcome), "Skip Reverse was Feature Aborted")
    status = _settle(engine, local, target, DeckInfo.SKIP_REV)
    fail_if(status != DeckInfo.PLAY, f"Deck status 0x{status:02x} after Skip Reverse")

    outcome = transmit(engine, codec.deck_control(local, target, DeckControlMode.EJECT))
    fail_if(is_abort(outcome), "Eject was Feature Aborted")
    status = deck_status_get(engine, local, target)
    fail_if(status != DeckInfo.NO_MEDIA, f"Deck status 0x{status:02x} after Eject")
    return Verdict.PASS


def deck_ctl_deck_ctl_invalid(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    outcome = transmit(engine, codec.deck_control(local, target, 0))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    expect_invalid_operand(outcome, "Deck Control mode 0")

    outcome = transmit(engine, codec.deck_control(local, target, 5))
    expect_invalid_operand(outcome, "Deck Control mode 5")
    return Verdict.PASS


def deck_ctl_play(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    outcome = transmit(engine, codec.play(local, target, PlayMode.PLAY_FWD))
    _check_capability(engine, target, unrecognized_op(outcome), unrecognized_op(outcome))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    status = deck_status_get(engine, local, target)
    if is_abort(outcome):
        fail_if(not incorrect_mode(outcome), "Play was Feature Aborted")
        return _incorrect_mode_verdict(engine, status, "Play")
    fail_if(status != DeckInfo.PLAY, f"Deck status 0x{status:02x} after Play Forward")

    for mode, expected in PLAY_MODE_TRANSITIONS:
        check_play_mode(engine, local, target, mode, expected)

    transmit(engine, codec.deck_control(local, target, DeckControlMode.STOP))
    return Verdict.PASS


def deck_ctl_play_invalid(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    outcome = transmit(engine, codec.play(local, target, 0))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    expect_invalid_operand(outcome, "Play mode 0")

    for mode in (4, 0x26):
        outcome = transmit(engine, codec.play(local, target, mode))
        expect_invalid_operand(outcome, f"Play mode 0x{mode:02x}")
    return Verdict.PASS


AREA = TestArea(
    "Deck Control feature",
    Tag.DECK_CONTROL,
    (
        TestCase("Give Deck Status", DECK_MASK, deck_ctl_give_status),
        TestCase("Give Deck Status Invalid Operand", DECK_MASK, deck_ctl_give_status_invalid),
        TestCase("Deck Control", DECK_MASK, deck_ctl_deck_ctl),
        TestCase("Deck Control Invalid Operand", DECK_MASK, deck_ctl_deck_ctl_invalid),
        TestCase("Play", DECK_MASK, deck_ctl_play),
        TestCase("Play Invalid Operand", DECK_MASK, deck_ctl_play_invalid),
    ),
)
