# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Request/reply exchange over the bus.

There is at most one outstanding request at any time. A reply is matched to
its request by addressing and opcode only (the protocol has no sequence
numbers), so every frame that arrives during the wait and does not match is
set aside in ``Exchange.unsolicited`` for scenarios that care about it.
"""

import logging
import time
from collections.abc import Callable, Collection
from dataclasses import dataclass

from cec_conformance.bus.transport import BusMode, Transport, TxStatus
from cec_conformance.core.classification import Classification, ReplyKind, classify
from cec_conformance.core.constants import DEFAULT_REPLY_TIMEOUT_MS, REPLY_WARN_THRESHOLD_MS
from cec_conformance.core.models import Frame
from cec_conformance.core.protocol import AbortReason, Opcode, la_name, opcode_name
from cec_conformance.device.model import RemoteDeviceTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExchangeOutcome:
    """What happened to one request.

    Attributes:
        request: The frame that was sent
        tx_ok: The frame was acknowledged on the bus
        reply: Correlated reply, if any arrived in time
        elapsed_ms: Time from transmit to reply (or to giving up)
    """

    request: Frame
    tx_ok: bool
    reply: Frame | None = None
    elapsed_ms: float = 0.0

    @property
    def timed_out(self) -> bool:
        return self.tx_ok and self.reply is None and self.request.reply is not None

    @property
    def classification(self) -> Classification:
        return classify(self)

    @property
    def kind(self) -> ReplyKind:
        return self.classification.kind


def correlates(request: Frame, frame: Frame) -> bool:
    """True if ``frame`` answers ``request``.

    Directed requests only accept frames from their destination: either the
    expected reply opcode or a Feature Abort naming the request opcode.
    Broadcast requests accept the expected reply from any source.
    """
    if request.is_broadcast:
        return request.reply is not None and frame.opcode == request.reply
    if frame.source != request.destination:
        return False
    if request.reply is not None and frame.opcode == request.reply:
        return True
    return frame.opcode == Opcode.FEATURE_ABORT and frame.operand(0) == request.opcode


class Exchange:
    """Sends requests and waits for correlated replies.

    Every reply updates the remote device model: a Feature Abort
    [Unrecognized Opcode] marks the request opcode as unrecognized, any other
    reply marks it as recognized.
    """

    def __init__(
        self,
        transport: Transport,
        devices: RemoteDeviceTable,
        clock: Callable[[], float] = time.monotonic,
        on_warning: Callable[[str], None] | None = None,
    ) -> None:
        self.transport = transport
        self.devices = devices
        self.clock = clock
        self.on_warning = on_warning
        self.unsolicited: list[Frame] = []

    def _elapsed_ms(self, start: float) -> float:
        return (self.clock() - start) * 1000.0

    def exchange(
        self,
        request: Frame,
        timeout_ms: int = DEFAULT_REPLY_TIMEOUT_MS,
        mode: BusMode = BusMode.INITIATOR,
    ) -> ExchangeOutcome:
        """Send ``request`` and wait for its reply.

        Broadcast requests without an expected reply return right after the
        transmit. Directed requests without an expected reply still wait up
        to ``timeout_ms`` for a Feature Abort; silence is accepted for them.

        Args:
            request: Frame to send
            timeout_ms: Reply window
            mode: Adapter role while the exchange is in flight

        Returns:
            The exchange outcome; transport errors are reported via
            ``tx_ok=False``, never raised.
        """
        self.transport.set_mode(mode)
        start = self.clock()
        status = self.transport.send(request)
        logger.debug(f"TX {request} -> {status.value}")
        if status != TxStatus.ACK:
            return ExchangeOutcome(request, tx_ok=False, elapsed_ms=self._elapsed_ms(start))

        if request.is_poll or (request.is_broadcast and request.reply is None):
            return ExchangeOutcome(request, tx_ok=True, elapsed_ms=self._elapsed_ms(start))

        reply = self._await_reply(request, start, timeout_ms)
        elapsed = self._elapsed_ms(start)
        if reply is not None:
            self._record(request, reply)
            if elapsed > REPLY_WARN_THRESHOLD_MS:
                self._warn(
                    f"Reply to {opcode_name(request.opcode)} from "
                    f"{la_name(reply.source)} took {elapsed:.0f} ms"
                )
        return ExchangeOutcome(request, tx_ok=True, reply=reply, elapsed_ms=elapsed)

    def _await_reply(self, request: Frame, start: float, timeout_ms: int) -> Frame | None:
        while True:
            remaining = timeout_ms - self._elapsed_ms(start)
            if remaining <= 0:
                return None
            frame = self.transport.receive(int(remaining))
            if frame is None:
                return None
            logger.debug(f"RX {frame}")
            if correlates(request, frame):
                return frame
            self.unsolicited.append(frame)

    def _record(self, request: Frame, reply: Frame) -> None:
        if request.is_broadcast or request.opcode is None:
            return
        if reply.opcode == Opcode.FEATURE_ABORT and reply.operand(1) == AbortReason.UNRECOGNIZED_OPCODE:
            self.devices.record_unrecognized(request.destination, request.opcode)
        else:
            self.devices.record_recognized(request.destination, request.opcode)

    def _warn(self, message: str) -> None:
        logger.warning(message)
        if self.on_warning is not None:
            self.on_warning(message)

    def poll(self, local: int, target: int) -> bool:
        """Send a polling message and report whether it was acknowledged."""
        self.transport.set_mode(BusMode.INITIATOR)
        status = self.transport.send(Frame(source=local, destination=target))
        logger.debug(f"Poll {la_name(target)} -> {status.value}")
        return status == TxStatus.ACK

    def listen(
        self,
        until_ms: int,
        idle_ms: int,
        mode: BusMode = BusMode.BOTH,
        predicate: Callable[[Frame], bool] | None = None,
    ) -> list[Frame]:
        """Collect frames until ``idle_ms`` pass without one, or ``until_ms`` in total.

        Frames rejected by ``predicate`` go to ``unsolicited``.
        """
        self.transport.set_mode(mode)
        start = self.clock()
        collected: list[Frame] = []
        while True:
            remaining = until_ms - self._elapsed_ms(start)
            if remaining <= 0:
                break
            frame = self.transport.receive(int(min(idle_ms, remaining)))
            if frame is None:
                break
            logger.debug(f"RX {frame}")
            if predicate is None or predicate(frame):
                collected.append(frame)
            else:
                self.unsolicited.append(frame)
        return collected

    def wait_for(
        self,
        source: int,
        opcodes: Collection[int],
        timeout_ms: int,
        mode: BusMode = BusMode.INITIATOR,
    ) -> Frame | None:
        """Wait for a frame from ``source`` carrying one of ``opcodes``.

        Frames already set aside as unsolicited are checked first.
        """
        for index, frame in enumerate(self.unsolicited):
            if frame.source == source and frame.opcode in opcodes:
                return self.unsolicited.pop(index)

        self.transport.set_mode(mode)
        start = self.clock()
        while True:
            remaining = timeout_ms - self._elapsed_ms(start)
            if remaining <= 0:
                return None
            frame = self.transport.receive(int(remaining))
            if frame is None:
                return None
            logger.debug(f"RX {frame}")
            if frame.source == source and frame.opcode in opcodes:
                return frame
            self.unsolicited.append(frame)

    def drain(self) -> None:
        """Forget frames left over from earlier exchanges."""
        self.unsolicited.clear()
