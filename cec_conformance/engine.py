# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Execution context handed to every test case body."""

import logging
import time
from collections.abc import Callable
from datetime import datetime

from cec_conformance.bus.exchange import Exchange, ExchangeOutcome
from cec_conformance.bus.polling import await_condition
from cec_conformance.bus.transport import BusMode, Transport
from cec_conformance.core.constants import DEFAULT_LONG_TIMEOUT_S, DEFAULT_REPLY_TIMEOUT_MS
from cec_conformance.core.models import Frame
from cec_conformance.core.protocol import PrimaryDeviceType
from cec_conformance.device.model import RemoteDevice, RemoteDeviceTable

logger = logging.getLogger(__name__)

# Asks the operator a yes/no question
Prompter = Callable[[str], bool]


def _lowest_address(mask: int) -> int | None:
    for la in range(16):
        if mask & (1 << la):
            return la
    return None


class Engine:
    """Shared state of one conformance run.

    Holds the exchange primitive, the remote device table and the local
    adapter's identity. Case bodies report warnings through ``warn`` so the
    orchestrator can count them per case, and reach the operator through
    ``ask``.
    """

    def __init__(
        self,
        transport: Transport,
        devices: RemoteDeviceTable | None = None,
        prompter: Prompter | None = None,
        long_timeout_s: float = DEFAULT_LONG_TIMEOUT_S,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.transport = transport
        self.devices = devices if devices is not None else RemoteDeviceTable()
        self.exchange = Exchange(transport, self.devices, clock=clock, on_warning=self._count_warning)
        self.prompter = prompter
        self.long_timeout_s = long_timeout_s
        self.sleep = sleep
        self.clock = clock
        self.now = now
        self.warnings = 0
        self.in_standby = False
        self.cleanup_failures: list[str] = []
        self._warned_once: set[str] = set()

    @property
    def phys_addr(self) -> int:
        return self.transport.physical_address

    @property
    def prim_devtype(self) -> int:
        return self.transport.device_type

    @property
    def has_cec20(self) -> bool:
        return self.transport.supports_cec20

    @property
    def local_address(self) -> int | None:
        """Lowest logical address claimed by the adapter, if any."""
        return _lowest_address(self.transport.logical_address_mask())

    @property
    def holds_logical_addresses(self) -> bool:
        return self.transport.logical_address_mask() != 0

    @property
    def is_recording_device(self) -> bool:
        return self.prim_devtype == PrimaryDeviceType.RECORD

    def device(self, la: int) -> RemoteDevice:
        return self.devices.get(la)

    def send(
        self,
        request: Frame,
        timeout_ms: int = DEFAULT_REPLY_TIMEOUT_MS,
        mode: BusMode = BusMode.INITIATOR,
    ) -> ExchangeOutcome:
        return self.exchange.exchange(request, timeout_ms=timeout_ms, mode=mode)

    def poll(self, local: int, target: int) -> bool:
        return self.exchange.poll(local, target)

    def await_condition(
        self,
        predicate: Callable[[], bool],
        poll_interval_s: float,
        deadline_s: float | None = None,
    ) -> bool:
        """Bounded wait using the engine's clock; defaults to the long timeout."""
        return await_condition(
            predicate,
            poll_interval_s,
            self.long_timeout_s if deadline_s is None else deadline_s,
            sleep=self.sleep,
            clock=self.clock,
        )

    def _count_warning(self, message: str) -> None:
        self.warnings += 1

    def warn(self, message: str) -> None:
        self.warnings += 1
        logger.warning(message)

    def warn_once(self, message: str) -> None:
        if message in self._warned_once:
            return
        self._warned_once.add(message)
        self.warn(message)

    def info(self, message: str) -> None:
        logger.info(message)

    def announce(self, message: str) -> None:
        logger.warning(f">>> {message}")

    def ask(self, question: str) -> bool:
        """Ask the operator; without a prompter the answer is always no."""
        if self.prompter is None:
            return False
        return self.prompter(question)

    def report_cleanup_failure(self, message: str) -> None:
        """Record a failed cleanup step; reported as an extra FAIL line."""
        logger.warning(f"Cleanup failed: {message}")
        self.cleanup_failures.append(message)
