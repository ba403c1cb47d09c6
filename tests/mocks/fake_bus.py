# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""In-memory bus with scripted remote devices.

``FakeBus`` implements the Transport interface without any hardware: every
frame the engine sends is handed to the ``FakeDevice`` at its destination
(or to all devices for broadcasts), and whatever the device answers is
queued for ``receive``. Time never passes on the fake bus; tests that need
the clock to move use ``FakeClock``.

Usage:
    bus = FakeBus()
    tv = bus.add(FakeDevice(0, phys_addr=0x0000, prim_type=PrimaryDeviceType.TV))
    tv.abort(Opcode.GIVE_OSD_NAME, AbortReason.REFUSED)
    engine = Engine(bus)
"""

from collections import deque
from collections.abc import Callable, Iterable

from cec_conformance.bus import codec
from cec_conformance.bus.transport import BusMode, TxStatus
from cec_conformance.core.models import Frame
from cec_conformance.core.protocol import (
    AbortReason,
    CecVersion,
    LogicalAddress,
    Opcode,
    PowerStatus,
    PrimaryDeviceType,
    address_bit,
)

# frame -> reply frame(s), or None for silence
Responder = Callable[[Frame], "Frame | Iterable[Frame] | None"]


class FakeClock:
    """Monotonic clock that only advances when ``sleep`` is called."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeDevice:
    """A remote device answering from a table of per-opcode responders.

    Out of the box it answers the system information requests with its
    attributes, aborts Abort with Refused and aborts every other directed
    opcode as unrecognized. Broadcasts without a responder are ignored.
    """

    def __init__(
        self,
        la: int,
        phys_addr: int = 0x1100,
        prim_type: int = PrimaryDeviceType.PLAYBACK,
        cec_version: int = CecVersion.V1_4,
        vendor_id: int = 0x000C03,
        osd_name: str = "Fake Device",
        power_status: int = PowerStatus.ON,
    ) -> None:
        self.la = la
        self.phys_addr = phys_addr
        self.prim_type = prim_type
        self.cec_version = cec_version
        self.vendor_id = vendor_id
        self.osd_name = osd_name
        self.power_status = power_status
        self.received: list[Frame] = []
        self.handlers: dict[int, Responder] = {}

        self.on(Opcode.GIVE_PHYSICAL_ADDR, lambda f: codec.report_physical_addr(self.la, self.phys_addr, self.prim_type))
        self.on(Opcode.GET_CEC_VERSION, lambda f: codec.cec_version(self.la, f.source, self.cec_version))
        self.on(Opcode.GIVE_DEVICE_VENDOR_ID, lambda f: codec.device_vendor_id(self.la, self.vendor_id))
        self.on(Opcode.GIVE_OSD_NAME, lambda f: codec.set_osd_name(self.la, f.source, self.osd_name))
        self.on(
            Opcode.GIVE_DEVICE_POWER_STATUS,
            lambda f: codec.report_power_status(self.la, f.source, self.power_status),
        )
        self.abort(Opcode.ABORT, AbortReason.REFUSED)

    def on(self, opcode: int, responder: Responder) -> None:
        self.handlers[int(opcode)] = responder

    def reply(self, opcode: int, *frames: Frame) -> None:
        """Answer ``opcode`` with fixed frames."""
        self.on(opcode, lambda f: list(frames))

    def abort(self, opcode: int, reason: int = AbortReason.UNRECOGNIZED_OPCODE) -> None:
        self.on(opcode, lambda f: codec.feature_abort(self.la, f.source, opcode, reason))

    def ignore(self, opcode: int) -> None:
        self.on(opcode, lambda f: None)

    def accept(self, opcode: int) -> None:
        """Take ``opcode`` without answering (no reply expected)."""
        self.ignore(opcode)

    def handle(self, frame: Frame) -> list[Frame]:
        self.received.append(frame)
        assert frame.opcode is not None
        responder = self.handlers.get(frame.opcode)
        if responder is None:
            if frame.is_broadcast:
                return []
            return [
                codec.feature_abort(self.la, frame.source, frame.opcode, AbortReason.UNRECOGNIZED_OPCODE)
            ]
        result = responder(frame)
        if result is None:
            return []
        if isinstance(result, Frame):
            return [result]
        return list(result)

    def received_opcodes(self) -> list[int | None]:
        return [frame.opcode for frame in self.received]


class FakeBus:
    """Transport whose remote devices live in memory."""

    def __init__(
        self,
        local_la: int = LogicalAddress.PLAYBACK_1,
        phys_addr: int = 0x1000,
        device_type: int = PrimaryDeviceType.PLAYBACK,
        cec20: bool = True,
        claimed: bool = True,
    ) -> None:
        self.local_la = local_la
        self._phys_addr = phys_addr
        self._device_type = device_type
        self._cec20 = cec20
        self.claimed_mask = address_bit(local_la) if claimed else 0
        self.devices: dict[int, FakeDevice] = {}
        self.sent: list[Frame] = []
        self.modes: list[BusMode] = []
        self.pending: deque[Frame] = deque()
        self.nack_next = 0

    def add(self, device: FakeDevice) -> FakeDevice:
        self.devices[device.la] = device
        return device

    def inject(self, *frames: Frame) -> None:
        """Queue frames as if they had arrived unprompted."""
        self.pending.extend(frames)

    def send(self, frame: Frame) -> TxStatus:
        self.sent.append(frame)
        if self.nack_next:
            self.nack_next -= 1
            return TxStatus.NACK
        if frame.is_poll:
            return TxStatus.ACK if frame.destination in self.devices else TxStatus.NACK
        if frame.is_broadcast:
            for device in self.devices.values():
                self.pending.extend(device.handle(frame))
            return TxStatus.ACK
        device = self.devices.get(frame.destination)
        if device is None:
            return TxStatus.NACK
        self.pending.extend(device.handle(frame))
        return TxStatus.ACK

    def receive(self, timeout_ms: int) -> Frame | None:
        if self.pending:
            return self.pending.popleft()
        return None

    def set_mode(self, mode: BusMode) -> None:
        self.modes.append(mode)

    def logical_address_mask(self) -> int:
        return self.claimed_mask

    @property
    def physical_address(self) -> int:
        return self._phys_addr

    @property
    def device_type(self) -> int:
        return self._device_type

    @property
    def supports_cec20(self) -> bool:
        return self._cec20

    def sent_opcodes(self, destination: int | None = None) -> list[int | None]:
        return [
            frame.opcode
            for frame in self.sent
            if destination is None or frame.destination == destination
        ]


class ConformantBus(FakeBus):
    """Adapter at Playback 1 with a well-behaved TV at logical address 0.

    Loadable from the command line as ``tests.mocks.fake_bus:ConformantBus``.
    """

    def __init__(self, device: str | None = None) -> None:
        super().__init__()
        self.device_path = device
        self.add(
            FakeDevice(
                LogicalAddress.TV,
                phys_addr=0x0000,
                prim_type=PrimaryDeviceType.TV,
                osd_name="Fake TV",
            )
        )


class SilentBus(FakeBus):
    """Adapter with nothing else on the bus."""

    def __init__(self, device: str | None = None) -> None:
        super().__init__()


class UnclaimedBus(FakeBus):
    """Adapter that never claimed a logical address."""

    def __init__(self, device: str | None = None) -> None:
        super().__init__(claimed=False)


class NotATransport:
    def __init__(self, device: str | None = None) -> None:
        self.device = device
