# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""HDMI-CEC protocol vocabulary.

Each protocol sub-domain (opcodes, abort reasons, deck info, broadcast
systems, ...) is a closed enum so that scenario code matches on named
members instead of raw bytes.
"""

from enum import IntEnum, IntFlag

BROADCAST = 0xF
UNREGISTERED = 0xF
INVALID_PHYSICAL_ADDRESS = 0xFFFF


class LogicalAddress(IntEnum):
    TV = 0
    RECORD_1 = 1
    RECORD_2 = 2
    TUNER_1 = 3
    PLAYBACK_1 = 4
    AUDIOSYSTEM = 5
    TUNER_2 = 6
    TUNER_3 = 7
    PLAYBACK_2 = 8
    RECORD_3 = 9
    TUNER_4 = 10
    PLAYBACK_3 = 11
    BACKUP_1 = 12
    BACKUP_2 = 13
    SPECIFIC = 14
    UNREGISTERED = 15


class AddressMask(IntFlag):
    """Role bitmasks over the 16 logical addresses."""

    TV = 1 << 0
    RECORD = (1 << 1) | (1 << 2) | (1 << 9)
    TUNER = (1 << 3) | (1 << 6) | (1 << 7) | (1 << 10)
    PLAYBACK = (1 << 4) | (1 << 8) | (1 << 11)
    AUDIOSYSTEM = 1 << 5
    BACKUP = (1 << 12) | (1 << 13)
    SPECIFIC = 1 << 14
    UNREGISTERED = 1 << 15
    ALL = 0xFFFF


def address_bit(la: int) -> int:
    return 1 << la


def has_role(la: int, mask: int) -> bool:
    """True if logical address ``la`` belongs to ``mask``."""
    return bool(address_bit(la) & mask)


def la_name(la: int) -> str:
    names = {
        0: "TV",
        1: "Recording Device 1",
        2: "Recording Device 2",
        3: "Tuner 1",
        4: "Playback Device 1",
        5: "Audio System",
        6: "Tuner 2",
        7: "Tuner 3",
        8: "Playback Device 2",
        9: "Recording Device 3",
        10: "Tuner 4",
        11: "Playback Device 3",
        12: "Backup 1",
        13: "Backup 2",
        14: "Specific",
        15: "Unregistered",
    }
    return names.get(la, "Unknown")


class Opcode(IntEnum):
    FEATURE_ABORT = 0x00
    IMAGE_VIEW_ON = 0x04
    TUNER_STEP_INCREMENT = 0x05
    TUNER_STEP_DECREMENT = 0x06
    TUNER_DEVICE_STATUS = 0x07
    GIVE_TUNER_DEVICE_STATUS = 0x08
    RECORD_ON = 0x09
    RECORD_STATUS = 0x0A
    RECORD_OFF = 0x0B
    TEXT_VIEW_ON = 0x0D
    RECORD_TV_SCREEN = 0x0F
    GIVE_DECK_STATUS = 0x1A
    DECK_STATUS = 0x1B
    SET_MENU_LANGUAGE = 0x32
    CLEAR_ANALOGUE_TIMER = 0x33
    SET_ANALOGUE_TIMER = 0x34
    TIMER_STATUS = 0x35
    STANDBY = 0x36
    PLAY = 0x41
    DECK_CONTROL = 0x42
    TIMER_CLEARED_STATUS = 0x43
    USER_CONTROL_PRESSED = 0x44
    USER_CONTROL_RELEASED = 0x45
    GIVE_OSD_NAME = 0x46
    SET_OSD_NAME = 0x47
    SET_OSD_STRING = 0x64
    SET_TIMER_PROGRAM_TITLE = 0x67
    ROUTING_CHANGE = 0x80
    ROUTING_INFORMATION = 0x81
    ACTIVE_SOURCE = 0x82
    GIVE_PHYSICAL_ADDR = 0x83
    REPORT_PHYSICAL_ADDR = 0x84
    REQUEST_ACTIVE_SOURCE = 0x85
    SET_STREAM_PATH = 0x86
    DEVICE_VENDOR_ID = 0x87
    VENDOR_COMMAND = 0x89
    GIVE_DEVICE_VENDOR_ID = 0x8C
    MENU_REQUEST = 0x8D
    MENU_STATUS = 0x8E
    GIVE_DEVICE_POWER_STATUS = 0x8F
    REPORT_POWER_STATUS = 0x90
    GET_MENU_LANGUAGE = 0x91
    SELECT_ANALOGUE_SERVICE = 0x92
    SELECT_DIGITAL_SERVICE = 0x93
    SET_DIGITAL_TIMER = 0x97
    CLEAR_DIGITAL_TIMER = 0x99
    INACTIVE_SOURCE = 0x9D
    CEC_VERSION = 0x9E
    GET_CEC_VERSION = 0x9F
    CLEAR_EXT_TIMER = 0xA1
    SET_EXT_TIMER = 0xA2
    GIVE_FEATURES = 0xA5
    REPORT_FEATURES = 0xA6
    CDC_MESSAGE = 0xF8
    ABORT = 0xFF


def opcode_name(opcode: int | None) -> str:
    if opcode is None:
        return "Poll"
    try:
        return Opcode(opcode).name.replace("_", " ").title()
    except ValueError:
        return f"0x{opcode:02x}"


class CdcOpcode(IntEnum):
    HEC_INQUIRE_STATE = 0x00
    HEC_REPORT_STATE = 0x01
    HEC_SET_STATE_ADJACENT = 0x02
    HEC_SET_STATE = 0x03
    HEC_REQUEST_DEACTIVATION = 0x04
    HEC_NOTIFY_ALIVE = 0x05
    HEC_DISCOVER = 0x06


class AbortReason(IntEnum):
    UNRECOGNIZED_OPCODE = 0
    INCORRECT_MODE = 1
    NO_SOURCE = 2
    INVALID_OPERAND = 3
    REFUSED = 4
    UNDETERMINED = 5
    OTHER = 0xFF


class CecVersion(IntEnum):
    V1_3A = 4
    V1_4 = 5
    V2_0 = 6


class PrimaryDeviceType(IntEnum):
    TV = 0
    RECORD = 1
    TUNER = 3
    PLAYBACK = 4
    AUDIOSYSTEM = 5
    SWITCH = 6
    PROCESSOR = 7


class AllDeviceTypes(IntFlag):
    SWITCH = 0x04
    AUDIOSYSTEM = 0x08
    PLAYBACK = 0x10
    TUNER = 0x20
    RECORD = 0x40
    TV = 0x80


class DeviceFeature(IntFlag):
    SOURCE_HAS_ARC_RX = 0x02
    SINK_HAS_ARC_TX = 0x04
    HAS_SET_AUDIO_RATE = 0x08
    HAS_DECK_CONTROL = 0x10
    HAS_SET_OSD_STRING = 0x20
    HAS_RECORD_TV_SCREEN = 0x40


class PowerStatus(IntEnum):
    ON = 0
    STANDBY = 1
    IN_TRANSITION_STANDBY_TO_ON = 2
    IN_TRANSITION_ON_TO_STANDBY = 3


class StatusRequest(IntEnum):
    ON = 1
    OFF = 2
    ONCE = 3


class DeckInfo(IntEnum):
    PLAY = 0x11
    RECORD = 0x12
    PLAY_REV = 0x13
    STILL = 0x14
    SLOW = 0x15
    SLOW_REV = 0x16
    FAST_FWD = 0x17
    FAST_REV = 0x18
    NO_MEDIA = 0x19
    STOP = 0x1A
    SKIP_FWD = 0x1B
    SKIP_REV = 0x1C
    INDEX_SEARCH_FWD = 0x1D
    INDEX_SEARCH_REV = 0x1E
    OTHER = 0x1F


class DeckControlMode(IntEnum):
    SKIP_FWD = 1
    SKIP_REV = 2
    STOP = 3
    EJECT = 4


class PlayMode(IntEnum):
    FAST_FWD_MIN = 0x05
    FAST_FWD_MED = 0x06
    FAST_FWD_MAX = 0x07
    FAST_REV_MIN = 0x09
    FAST_REV_MED = 0x0A
    FAST_REV_MAX = 0x0B
    SLOW_FWD_MIN = 0x15
    SLOW_FWD_MED = 0x16
    SLOW_FWD_MAX = 0x17
    SLOW_REV_MIN = 0x19
    SLOW_REV_MED = 0x1A
    SLOW_REV_MAX = 0x1B
    PLAY_REV = 0x20
    PLAY_FWD = 0x24
    PLAY_STILL = 0x25


class UiCommand(IntEnum):
    VOLUME_UP = 0x41


class DisplayControl(IntEnum):
    DEFAULT = 0x00
    UNTIL_CLEARED = 0x40
    CLEAR = 0x80


class MenuRequest(IntEnum):
    ACTIVATE = 0
    DEACTIVATE = 1
    QUERY = 2


class AnalogueBroadcastType(IntEnum):
    CABLE = 0
    SATELLITE = 1
    TERRESTRIAL = 2


class BroadcastSystem(IntEnum):
    PAL_BG = 0x00
    SECAM_LQ = 0x01
    PAL_M = 0x02
    NTSC_M = 0x03
    PAL_I = 0x04
    SECAM_DK = 0x05
    SECAM_BG = 0x06
    SECAM_L = 0x07
    PAL_DK = 0x08
    OTHER = 0x1F


class DigitalBroadcastSystem(IntEnum):
    ARIB_GEN = 0x00
    ATSC_GEN = 0x01
    DVB_GEN = 0x02
    ARIB_BS = 0x08
    ARIB_CS = 0x09
    ARIB_T = 0x0A
    ATSC_CABLE = 0x10
    ATSC_SAT = 0x11
    ATSC_T = 0x12
    DVB_C = 0x18
    DVB_S = 0x19
    DVB_S2 = 0x1A
    DVB_T = 0x1B

    @property
    def family(self) -> str:
        if self.name.startswith("ARIB"):
            return "ARIB"
        if self.name.startswith("ATSC"):
            return "ATSC"
        return "DVB"

    @property
    def is_generic(self) -> bool:
        return self.name.endswith("_GEN")


class ServiceIdMethod(IntEnum):
    BY_DIGITAL_ID = 0
    BY_CHANNEL = 1


class ChannelNumberFormat(IntEnum):
    ONE_PART = 1
    TWO_PART = 2


class RecordSourceType(IntEnum):
    OWN = 1
    DIGITAL = 2
    ANALOGUE = 3
    EXT_PLUG = 4
    EXT_PHYS_ADDR = 5


class RecordStatus(IntEnum):
    CUR_SRC = 0x01
    DIG_SERVICE = 0x02
    ANA_SERVICE = 0x03
    EXT_INPUT = 0x04
    NO_DIG_SERVICE = 0x05
    NO_ANA_SERVICE = 0x06
    NO_SERVICE = 0x07
    INVALID_EXT_PLUG = 0x09
    INVALID_EXT_PHYS_ADDR = 0x0A
    UNSUP_CA = 0x0B
    NO_CA_ENTITLEMENTS = 0x0C
    CANT_COPY_SRC = 0x0D
    NO_MORE_COPIES = 0x0E
    NO_MEDIA = 0x10
    PLAYING = 0x11
    ALREADY_RECORDING = 0x12
    MEDIA_PROT = 0x13
    NO_SIGNAL = 0x14
    MEDIA_PROBLEM = 0x15
    NO_SPACE = 0x16
    PARENTAL_LOCK = 0x17
    TERMINATED_OK = 0x1A
    ALREADY_TERM = 0x1B
    OTHER = 0x1F


# Record Status values that report a failed attempt to start recording
RECORD_ERROR_STATUSES = frozenset(
    {
        RecordStatus.NO_DIG_SERVICE,
        RecordStatus.NO_ANA_SERVICE,
        RecordStatus.NO_SERVICE,
        RecordStatus.INVALID_EXT_PLUG,
        RecordStatus.INVALID_EXT_PHYS_ADDR,
        RecordStatus.UNSUP_CA,
        RecordStatus.NO_CA_ENTITLEMENTS,
        RecordStatus.CANT_COPY_SRC,
        RecordStatus.NO_MORE_COPIES,
        RecordStatus.NO_MEDIA,
        RecordStatus.PLAYING,
        RecordStatus.ALREADY_RECORDING,
        RecordStatus.MEDIA_PROT,
        RecordStatus.NO_SIGNAL,
        RecordStatus.MEDIA_PROBLEM,
        RecordStatus.NO_SPACE,
        RecordStatus.PARENTAL_LOCK,
        RecordStatus.OTHER,
    }
)


class RecordingSequence(IntFlag):
    ONCE_ONLY = 0x00
    SUNDAY = 0x01
    MONDAY = 0x02
    TUESDAY = 0x04
    WEDNESDAY = 0x08
    THURSDAY = 0x10
    FRIDAY = 0x20
    SATURDAY = 0x40


EVERY_DAY = 0x7F


class MediaInfo(IntEnum):
    UNPROTECTED = 0
    PROTECTED = 1
    NO_MEDIA = 2


class ProgrammedInfo(IntEnum):
    ENOUGH_SPACE = 0x08
    NOT_ENOUGH_SPACE = 0x09
    NO_MEDIA_INFO = 0x0A
    MIGHT_NOT_BE_ENOUGH_SPACE = 0x0B


class ProgrammedError(IntEnum):
    NO_FREE_TIMER = 0x01
    DATE_OUT_OF_RANGE = 0x02
    REC_SEQ_ERROR = 0x03
    INV_EXT_PLUG = 0x04
    INV_EXT_PHYS_ADDR = 0x05
    CA_UNSUPP = 0x06
    INSUF_CA_ENTITLEMENTS = 0x07
    RESOLUTION_UNSUPP = 0x08
    PARENTAL_LOCK = 0x09
    CLOCK_FAILURE = 0x0A
    DUPLICATE = 0x0E


class TimerClearedStatus(IntEnum):
    NOT_CLEARED_RECORDING = 0x00
    NOT_CLEARED_NO_MATCHING = 0x01
    NOT_CLEARED_NO_INFO = 0x02
    CLEARED = 0x80


class ExternalSourceSpecifier(IntEnum):
    PLUG = 4
    PHYS_ADDR = 5


class HecFunctionState(IntEnum):
    NOT_SUPPORTED = 0
    INACTIVE = 1
    ACTIVE = 2
    ACTIVATION_FIELD = 3


class HostFunctionState(IntEnum):
    NOT_SUPPORTED = 0
    INACTIVE = 1
    ACTIVE = 2


class EncFunctionState(IntEnum):
    EXT_CON_NOT_SUPPORTED = 0
    EXT_CON_INACTIVE = 1
    EXT_CON_ACTIVE = 2


class CdcErrorCode(IntEnum):
    NONE = 0
    CAP_UNSUPPORTED = 1
    WRONG_STATE = 2
    OTHER = 3


def is_tv(la: int, primary_type: int | None) -> bool:
    """A TV either owns address 0 or claims Specific with a TV device type."""
    if has_role(la, AddressMask.TV):
        return True
    return has_role(la, AddressMask.SPECIFIC) and primary_type == PrimaryDeviceType.TV


def format_physical_address(pa: int) -> str:
    return f"{pa >> 12:x}.{(pa >> 8) & 0xF:x}.{(pa >> 4) & 0xF:x}.{pa & 0xF:x}"
