# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Assertion helpers shared by the case bodies.

A case body returns a verdict when it finishes normally and raises
``ProtocolViolation`` as soon as the device contradicts the protocol. The
orchestrator turns the exception into FAIL.
"""

import inspect
from typing import NoReturn

from cec_conformance.bus.exchange import ExchangeOutcome
from cec_conformance.bus.transport import BusMode
from cec_conformance.core.classification import abort_reason, is_abort
from cec_conformance.core.constants import DEFAULT_REPLY_TIMEOUT_MS
from cec_conformance.core.errors import BusPresenceViolation, ProtocolViolation
from cec_conformance.core.models import Frame
from cec_conformance.core.protocol import AbortReason, CecVersion, la_name, opcode_name
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine


def _caller() -> str:
    frame = inspect.currentframe()
    try:
        outer = frame.f_back.f_back if frame and frame.f_back else None
        if outer is None:
            return "?"
        return f"{outer.f_code.co_name}:{outer.f_lineno}"
    finally:
        del frame


def fail(message: str) -> NoReturn:
    raise ProtocolViolation(message)


def fail_if(condition: bool, message: str | None = None) -> None:
    """Raise ProtocolViolation when ``condition`` holds."""
    if condition:
        raise ProtocolViolation(message or f"check failed at {_caller()}")


def fail_critical(message: str) -> NoReturn:
    raise BusPresenceViolation(message)


def fail_on_test_v2(engine: Engine, version: int | None, condition: bool, message: str | None = None) -> None:
    """Hard failure for CEC 2.0 devices, warning for older ones.

    An unknown version counts as pre-2.0.
    """
    if not condition:
        return
    text = message or f"check failed at {_caller()}"
    if version is not None and version >= CecVersion.V2_0:
        raise ProtocolViolation(text)
    engine.warn(text)


def fail_or_warn(engine: Engine, message: str) -> Verdict:
    """Failure while the remote is expected to be awake, warning in standby."""
    if engine.in_standby:
        engine.warn(message)
        return Verdict.PASS
    raise ProtocolViolation(message)


def transmit(
    engine: Engine,
    request: Frame,
    timeout_ms: int = DEFAULT_REPLY_TIMEOUT_MS,
    mode: BusMode = BusMode.INITIATOR,
) -> ExchangeOutcome:
    """Exchange ``request``; a transmit the bus did not acknowledge is a failure."""
    outcome = engine.send(request, timeout_ms=timeout_ms, mode=mode)
    fail_if(
        not outcome.tx_ok,
        f"{opcode_name(request.opcode)} to {la_name(request.destination)} was not acknowledged",
    )
    return outcome


def expect_invalid_operand(outcome: ExchangeOutcome, what: str) -> None:
    """Require Feature Abort [Invalid Operand] in answer to a malformed request."""
    fail_if(not is_abort(outcome), f"{what} was not Feature Aborted")
    reason = abort_reason(outcome)
    fail_if(
        reason != AbortReason.INVALID_OPERAND,
        f"{what} was aborted with {reason.name if reason else None}, expected INVALID_OPERAND",
    )


def operator_info(engine: Engine, interactive: bool, message: str) -> None:
    """Instruction for the operator; only shown in interactive runs."""
    if interactive:
        engine.announce(message)
