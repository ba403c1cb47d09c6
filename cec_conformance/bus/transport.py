# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Bus driver interface.

The engine never touches the physical bus. Everything it needs from the
adapter goes through the ``Transport`` protocol below; concrete drivers are
supplied by the operator as an import path.
"""

import importlib
import logging
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from cec_conformance.core.errors import TransportError
from cec_conformance.core.models import Frame

logger = logging.getLogger(__name__)


class TxStatus(Enum):
    """Result of transmitting one frame."""

    ACK = "ack"
    NACK = "nack"
    ERROR = "error"


class BusMode(Enum):
    """Which role the adapter plays while an exchange is in flight.

    INITIATOR: Only send; incoming frames are delivered to the engine
    FOLLOWER: The adapter answers core messages on its own
    BOTH: Initiator that also lets the engine see follower traffic
    """

    INITIATOR = "initiator"
    FOLLOWER = "follower"
    BOTH = "both"


@runtime_checkable
class Transport(Protocol):
    """What the engine requires from a bus adapter driver."""

    def send(self, frame: Frame) -> TxStatus:
        """Transmit a frame and return whether it was acknowledged."""
        ...

    def receive(self, timeout_ms: int) -> Frame | None:
        """Return the next received frame or None once ``timeout_ms`` elapses."""
        ...

    def set_mode(self, mode: BusMode) -> None: ...

    def logical_address_mask(self) -> int:
        """Bitmask of logical addresses claimed by the adapter."""
        ...

    @property
    def physical_address(self) -> int: ...

    @property
    def device_type(self) -> int: ...

    @property
    def supports_cec20(self) -> bool: ...


def load_transport(import_path: str, **kwargs: Any) -> Transport:
    """Instantiate a transport from an operator-supplied import path.

    Args:
        import_path: ``"package.module:ClassName"``
        **kwargs: Passed to the transport constructor (e.g. ``device``)

    Returns:
        The instantiated transport.

    Raises:
        TransportError: If the path is malformed, cannot be imported, or the
            object does not satisfy the Transport protocol.
    """
    module_name, sep, attr = import_path.partition(":")
    if not sep or not module_name or not attr:
        raise TransportError(f"Transport must be given as 'module:Class', got '{import_path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise TransportError(f"Cannot import transport module '{module_name}': {e}") from e

    try:
        factory = getattr(module, attr)
    except AttributeError:
        raise TransportError(f"Module '{module_name}' has no attribute '{attr}'") from None

    try:
        transport = factory(**kwargs)
    except Exception as e:
        raise TransportError(f"Failed to open transport '{import_path}': {e}") from e

    if not isinstance(transport, Transport):
        raise TransportError(f"'{import_path}' does not implement the Transport interface")

    logger.debug(f"Loaded transport {import_path} with {kwargs}")
    return transport
