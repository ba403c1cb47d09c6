# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Per-peer state accumulated while testing remote devices.

Every attribute a test case discovers is cached here so that later cases
can read it. Discovered attributes start as ``None`` ("unknown"); readers
use the ``*_or_default`` helpers, which never turn an unknown value into a
negative answer.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from cec_conformance.core.protocol import (
    AnalogueBroadcastType,
    BroadcastSystem,
    CecVersion,
    DeviceFeature,
    DigitalBroadcastSystem,
    address_bit,
    la_name,
)

logger = logging.getLogger(__name__)

OPCODE_COUNT = 256


def _opcode_table() -> list[bool]:
    return [False] * OPCODE_COUNT


@dataclass
class RemoteDevice:
    """Everything known about one remote logical address.

    Attributes:
        address: Logical address of the remote device
        phys_addr: Reported physical address
        prim_type: Primary device type from Report Physical Address
        cec_version: Reported CEC version
        menu_language: Three-letter ISO 639-2 menu language
        vendor_id: 24-bit IEEE OUI
        osd_name: OSD name
        rc_profile: Remote control profile byte from Report Features
        dev_features: Device features byte from Report Features
        all_device_types: All device types byte from Report Features
        has_deck_ctl: Device accepts Deck Control messages
        has_rec_tv: Device accepts Record TV Screen
        has_osd: Device can display Set OSD String
        has_remote_control_passthrough: Device accepts User Control Pressed
        has_power_status: Device answers Give Device Power Status
        bcast_type_analog: Default analogue broadcast type for tuner tests
        bcast_sys_analog: Default analogue broadcast system for tuner tests
        bcast_sys_digital: Default digital broadcast system for tuner tests
        in_standby: Device is expected to be in standby for the current case
        recognized_op: Opcodes the device answered with anything but
            Feature Abort [Unrecognized Opcode]
        unrecognized_op: Opcodes the device aborted as unrecognized
    """

    address: int
    phys_addr: int | None = None
    prim_type: int | None = None
    cec_version: int | None = None
    menu_language: str | None = None
    vendor_id: int | None = None
    osd_name: str | None = None
    rc_profile: int | None = None
    dev_features: int | None = None
    all_device_types: int | None = None
    has_deck_ctl: bool | None = None
    has_rec_tv: bool | None = None
    has_osd: bool | None = None
    has_remote_control_passthrough: bool | None = None
    has_power_status: bool | None = None
    bcast_type_analog: int | None = None
    bcast_sys_analog: int | None = None
    bcast_sys_digital: int | None = None
    in_standby: bool = False
    recognized_op: list[bool] = field(default_factory=_opcode_table)
    unrecognized_op: list[bool] = field(default_factory=_opcode_table)

    @property
    def name(self) -> str:
        return la_name(self.address)

    def cec_version_or_default(self, default: int = CecVersion.V1_4) -> int:
        return self.cec_version if self.cec_version is not None else default

    @property
    def is_cec20(self) -> bool:
        """True only when the device has declared CEC 2.0 or later."""
        return self.cec_version is not None and self.cec_version >= CecVersion.V2_0

    def has_feature(self, feature: DeviceFeature) -> bool | None:
        """Device feature bit, or None while Report Features was never seen."""
        if self.dev_features is None:
            return None
        return bool(self.dev_features & feature)

    def supports_deck_control(self) -> bool:
        """Deck control is assumed unless the device said otherwise."""
        return self.has_deck_ctl is not False

    def supports_record_tv_screen(self) -> bool:
        return self.has_rec_tv is not False

    def supports_osd(self) -> bool:
        return self.has_osd is not False

    def bcast_type_analog_or_default(self) -> int:
        if self.bcast_type_analog is None:
            return AnalogueBroadcastType.TERRESTRIAL
        return self.bcast_type_analog

    def bcast_sys_analog_or_default(self) -> int:
        if self.bcast_sys_analog is None:
            return BroadcastSystem.PAL_BG
        return self.bcast_sys_analog

    def bcast_sys_digital_or_default(self) -> int:
        if self.bcast_sys_digital is None:
            return DigitalBroadcastSystem.DVB_T
        return self.bcast_sys_digital

    def conflicting_opcodes(self) -> list[int]:
        """Opcodes that were both accepted and aborted as unrecognized."""
        return [
            opcode
            for opcode in range(OPCODE_COUNT)
            if self.recognized_op[opcode] and self.unrecognized_op[opcode]
        ]


class RemoteDeviceTable:
    """The remote device models of one run, keyed by logical address."""

    def __init__(self) -> None:
        self._devices: dict[int, RemoteDevice] = {}
        self.remote_mask = 0

    def get(self, address: int) -> RemoteDevice:
        """Return the model for ``address``, creating an empty one on first access."""
        device = self._devices.get(address)
        if device is None:
            device = RemoteDevice(address=address)
            self._devices[address] = device
        return device

    def mark_present(self, address: int) -> RemoteDevice:
        self.remote_mask |= address_bit(address)
        return self.get(address)

    def is_present(self, address: int) -> bool:
        return bool(self.remote_mask & address_bit(address))

    def record_recognized(self, address: int, opcode: int) -> None:
        self.get(address).recognized_op[opcode & 0xFF] = True

    def record_unrecognized(self, address: int, opcode: int) -> None:
        device = self.get(address)
        device.unrecognized_op[opcode & 0xFF] = True
        logger.debug(f"{device.name} reported opcode 0x{opcode:02x} as unrecognized")

    def conflicting_opcodes(self, address: int) -> list[int]:
        return self.get(address).conflicting_opcodes()

    @property
    def addresses(self) -> list[int]:
        """Present addresses in ascending order."""
        return [la for la in range(16) if self.is_present(la)]

    def __contains__(self, address: object) -> bool:
        return address in self._devices

    def __iter__(self) -> Iterator[RemoteDevice]:
        return iter(self._devices[la] for la in sorted(self._devices))

    def __len__(self) -> int:
        return len(self._devices)
