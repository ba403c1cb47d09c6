# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Bus frame model shared by the exchange layer, codec and scenarios."""

from dataclasses import dataclass, replace

from cec_conformance.core.protocol import BROADCAST, opcode_name


@dataclass(frozen=True)
class Frame:
    """A single CEC message.

    Attributes:
        source: Initiator logical address
        destination: Follower logical address (15 for broadcast)
        opcode: Message opcode, None for a polling frame
        operands: Operand payload
        reply: Opcode of the reply the initiator waits for, if any
    """

    source: int
    destination: int
    opcode: int | None = None
    operands: bytes = b""
    reply: int | None = None

    @property
    def is_broadcast(self) -> bool:
        return self.destination == BROADCAST

    @property
    def is_poll(self) -> bool:
        return self.opcode is None

    def operand(self, index: int, default: int = 0) -> int:
        """Operand byte at ``index`` or ``default`` when the frame is short."""
        if index < len(self.operands):
            return self.operands[index]
        return default

    def expecting(self, reply: int | None) -> "Frame":
        """Copy of this frame waiting for a different reply opcode."""
        return replace(self, reply=reply)

    def __str__(self) -> str:
        payload = " ".join(f"{b:02x}" for b in self.operands)
        return f"{self.source:x}->{self.destination:x}: {opcode_name(self.opcode)} [{payload}]"


@dataclass(frozen=True)
class TimerEntry:
    """A recording timer as carried by the Set/Clear Timer messages.

    Attributes:
        day: Day of month (1-31)
        month: Month (1-12)
        start_hour: Start hour (0-23)
        start_minute: Start minute (0-59)
        duration_hours: Recording duration, hours part
        duration_minutes: Recording duration, minutes part (0-59)
        recording_sequence: Weekday recurrence mask, 0 for a single recording
    """

    day: int
    month: int
    start_hour: int
    start_minute: int
    duration_hours: int
    duration_minutes: int
    recording_sequence: int = 0

    @property
    def duration(self) -> int:
        """Duration in minutes."""
        return self.duration_hours * 60 + self.duration_minutes

    @property
    def start_of_day(self) -> int:
        """Start as minutes after midnight."""
        return self.start_hour * 60 + self.start_minute

    @property
    def is_recurring(self) -> bool:
        return self.recording_sequence != 0

    def __str__(self) -> str:
        text = (
            f"{self.day:02d}/{self.month:02d} {self.start_hour:02d}:{self.start_minute:02d} "
            f"for {self.duration_hours}h{self.duration_minutes:02d}m"
        )
        if self.is_recurring:
            text += f" (repeat 0x{self.recording_sequence:02x})"
        return text
