# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Power precondition checked before a remote device is tested."""

import logging
from enum import Enum
from typing import TYPE_CHECKING

from cec_conformance.bus import codec
from cec_conformance.core.classification import replied
from cec_conformance.core.constants import POWER_ON_POLL_INTERVAL_S
from cec_conformance.core.protocol import PowerStatus

if TYPE_CHECKING:
    from cec_conformance.engine import Engine

logger = logging.getLogger(__name__)


class PowerState(Enum):
    """Outcome of the power precondition.

    ON: The device reported power status On
    UNKNOWN: The device does not answer Give Device Power Status; assumed on
    STANDBY: The device stayed in standby (or never reached On)
    """

    ON = "on"
    UNKNOWN = "unknown"
    STANDBY = "standby"


class PowerGate:
    """Makes sure a remote device is powered on before it is tested.

    In interactive runs the operator is asked to switch the device on and
    the power status is then polled once per second up to the engine's long
    timeout.
    """

    def __init__(self, engine: "Engine", local: int) -> None:
        self.engine = engine
        self.local = local

    def query(self, la: int) -> int | None:
        """Current power status, or None if the device does not report one."""
        outcome = self.engine.send(codec.give_device_power_status(self.local, la))
        if not replied(outcome):
            return None
        assert outcome.reply is not None
        return codec.decode_power_status(outcome.reply)

    def ensure_on(self, la: int, interactive: bool) -> PowerState:
        device = self.engine.device(la)
        status = self.query(la)
        if status is None:
            device.has_power_status = False
            device.in_standby = False
            self.engine.announce("The device didn't support Give Device Power Status.")
            self.engine.announce("Assuming that the device is powered on.")
            return PowerState.UNKNOWN

        device.has_power_status = True
        if status == PowerStatus.ON:
            device.in_standby = False
            return PowerState.ON

        device.in_standby = True
        logger.info(f"{device.name} reports power status {status}")
        if not interactive:
            return PowerState.STANDBY

        if not self.engine.ask(f"Please turn on {device.name}. Is it switching on?"):
            return PowerState.STANDBY

        def powered_on() -> bool:
            return self.query(la) == PowerStatus.ON

        if not self.engine.await_condition(powered_on, POWER_ON_POLL_INTERVAL_S):
            return PowerState.STANDBY
        device.in_standby = False
        return PowerState.ON
