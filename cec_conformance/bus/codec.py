# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Message encoders and decoders for the opcodes used by the scenarios.

The codec is trusted to be correct: it packs and unpacks operand bytes but
never judges whether a value is in range. Range checks belong to the
scenarios.
"""

from dataclasses import dataclass

from cec_conformance.core.models import Frame, TimerEntry
from cec_conformance.core.protocol import (
    BROADCAST,
    AbortReason,
    CdcOpcode,
    DigitalBroadcastSystem,
    ExternalSourceSpecifier,
    Opcode,
    ProgrammedError,
    ProgrammedInfo,
    RecordSourceType,
    ServiceIdMethod,
    StatusRequest,
)

UNKNOWN_OPCODE = 0xFE

_ATSC_SYSTEMS = frozenset(
    {
        DigitalBroadcastSystem.ATSC_GEN,
        DigitalBroadcastSystem.ATSC_CABLE,
        DigitalBroadcastSystem.ATSC_SAT,
        DigitalBroadcastSystem.ATSC_T,
    }
)


def bin2bcd(value: int) -> int:
    return ((value // 10) << 4) | (value % 10)


def bcd2bin(value: int) -> int:
    return (value >> 4) * 10 + (value & 0xF)


def _u16(value: int) -> bytes:
    return bytes(((value >> 8) & 0xFF, value & 0xFF))


def _read_u16(data: bytes, offset: int) -> int:
    if offset + 1 >= len(data):
        return 0
    return (data[offset] << 8) | data[offset + 1]


# ---------------------------------------------------------------------------
# Structured operands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeatureAbort:
    opcode: int
    reason: AbortReason
    raw_reason: int


@dataclass(frozen=True)
class ReportFeatures:
    cec_version: int
    all_device_types: int
    rc_profile: int | None
    device_features: int | None


@dataclass(frozen=True)
class DigitalServiceId:
    """Digital Service Identification operand.

    Fields that do not apply to the chosen method/system stay zero so that
    two descriptors compare equal exactly when their wire encoding does.
    """

    service_id_method: int
    dig_bcast_system: int
    transport_id: int = 0
    service_id: int = 0
    orig_network_id: int = 0
    program_number: int = 0
    channel_number_fmt: int = 0
    major: int = 0
    minor: int = 0

    @property
    def is_atsc(self) -> bool:
        return self.dig_bcast_system in _ATSC_SYSTEMS


@dataclass(frozen=True)
class AnalogueService:
    bcast_type: int
    frequency: int
    bcast_system: int

    @property
    def frequency_mhz(self) -> float:
        return self.frequency * 625 / 10000.0


@dataclass(frozen=True)
class TunerDeviceInfo:
    """Tuner Device Status operand: a captured service descriptor."""

    rec_flag: bool = False
    display_info: int = 0
    analogue: AnalogueService | None = None
    digital: DigitalServiceId | None = None

    @property
    def is_analogue(self) -> bool:
        return self.analogue is not None


@dataclass(frozen=True)
class RecordSource:
    type: int
    digital: DigitalServiceId | None = None
    analogue: AnalogueService | None = None
    plug: int = 0
    phys_addr: int = 0


@dataclass(frozen=True)
class TimerStatus:
    overlap_warning: bool
    media_info: int
    programmed: bool
    prog_info: int
    prog_error: int
    duration_hours: int = 0
    duration_minutes: int = 0

    @property
    def has_error(self) -> bool:
        return bool(self.prog_error)


@dataclass(frozen=True)
class CdcHecReport:
    phys_addr: int
    target_phys_addr: int
    hec_func_state: int
    host_func_state: int
    enc_func_state: int
    cdc_errcode: int
    hec_field: int | None


# ---------------------------------------------------------------------------
# Operand encoders
# ---------------------------------------------------------------------------


def encode_digital_service(service: DigitalServiceId) -> bytes:
    head = bytes((((service.service_id_method & 1) << 7) | (service.dig_bcast_system & 0x7F),))
    if service.service_id_method == ServiceIdMethod.BY_CHANNEL:
        channel = ((service.channel_number_fmt & 0x3F) << 10) | (service.major & 0x3FF)
        return head + _u16(channel) + _u16(service.minor) + b"\x00\x00"
    if service.is_atsc:
        return head + _u16(service.transport_id) + _u16(service.program_number) + b"\x00\x00"
    return (
        head
        + _u16(service.transport_id)
        + _u16(service.service_id)
        + _u16(service.orig_network_id)
    )


def decode_digital_service(data: bytes) -> DigitalServiceId:
    head = data[0] if data else 0
    method = head >> 7
    system = head & 0x7F
    if method == ServiceIdMethod.BY_CHANNEL:
        channel = _read_u16(data, 1)
        return DigitalServiceId(
            service_id_method=method,
            dig_bcast_system=system,
            channel_number_fmt=channel >> 10,
            major=channel & 0x3FF,
            minor=_read_u16(data, 3),
        )
    if system in _ATSC_SYSTEMS:
        return DigitalServiceId(
            service_id_method=method,
            dig_bcast_system=system,
            transport_id=_read_u16(data, 1),
            program_number=_read_u16(data, 3),
        )
    return DigitalServiceId(
        service_id_method=method,
        dig_bcast_system=system,
        transport_id=_read_u16(data, 1),
        service_id=_read_u16(data, 3),
        orig_network_id=_read_u16(data, 5),
    )


def encode_analogue_service(service: AnalogueService) -> bytes:
    return bytes((service.bcast_type & 0xFF,)) + _u16(service.frequency) + bytes(
        (service.bcast_system & 0xFF,)
    )


def decode_analogue_service(data: bytes) -> AnalogueService:
    return AnalogueService(
        bcast_type=data[0] if data else 0,
        frequency=_read_u16(data, 1),
        bcast_system=data[3] if len(data) > 3 else 0,
    )


def encode_record_source(source: RecordSource) -> bytes:
    head = bytes((source.type & 0xFF,))
    if source.type == RecordSourceType.DIGITAL and source.digital is not None:
        return head + encode_digital_service(source.digital)
    if source.type == RecordSourceType.ANALOGUE and source.analogue is not None:
        return head + encode_analogue_service(source.analogue)
    if source.type == RecordSourceType.EXT_PLUG:
        return head + bytes((source.plug & 0xFF,))
    if source.type == RecordSourceType.EXT_PHYS_ADDR:
        return head + _u16(source.phys_addr)
    return head


def decode_record_source(data: bytes) -> RecordSource:
    kind = data[0] if data else 0
    body = data[1:]
    if kind == RecordSourceType.DIGITAL:
        return RecordSource(type=kind, digital=decode_digital_service(body))
    if kind == RecordSourceType.ANALOGUE:
        return RecordSource(type=kind, analogue=decode_analogue_service(body))
    if kind == RecordSourceType.EXT_PLUG:
        return RecordSource(type=kind, plug=body[0] if body else 0)
    if kind == RecordSourceType.EXT_PHYS_ADDR:
        return RecordSource(type=kind, phys_addr=_read_u16(body, 0))
    return RecordSource(type=kind)


def encode_timer(timer: TimerEntry) -> bytes:
    return bytes(
        (
            timer.day & 0xFF,
            timer.month & 0xFF,
            bin2bcd(timer.start_hour) & 0xFF,
            bin2bcd(timer.start_minute) & 0xFF,
            bin2bcd(timer.duration_hours) & 0xFF,
            bin2bcd(timer.duration_minutes) & 0xFF,
            timer.recording_sequence & 0xFF,
        )
    )


def decode_timer(frame: Frame) -> TimerEntry:
    data = frame.operands
    return TimerEntry(
        day=frame.operand(0),
        month=frame.operand(1),
        start_hour=bcd2bin(frame.operand(2)),
        start_minute=bcd2bin(frame.operand(3)),
        duration_hours=bcd2bin(frame.operand(4)),
        duration_minutes=bcd2bin(frame.operand(5)),
        recording_sequence=data[6] if len(data) > 6 else 0,
    )


def encode_timer_status(status: TimerStatus) -> bytes:
    low = status.prog_info if status.programmed else status.prog_error
    head = (
        (int(status.overlap_warning) << 7)
        | ((status.media_info & 0x3) << 5)
        | (int(status.programmed) << 4)
        | (low & 0xF)
    )
    data = bytes((head,))
    if _timer_status_has_duration(status):
        data += bytes((bin2bcd(status.duration_hours), bin2bcd(status.duration_minutes)))
    return data


def _timer_status_has_duration(status: TimerStatus) -> bool:
    if status.programmed:
        return status.prog_info in (
            ProgrammedInfo.NOT_ENOUGH_SPACE,
            ProgrammedInfo.MIGHT_NOT_BE_ENOUGH_SPACE,
        )
    return status.prog_error == ProgrammedError.DUPLICATE


# ---------------------------------------------------------------------------
# Frame builders
# ---------------------------------------------------------------------------


def _frame(
    me: int, la: int, opcode: int, operands: bytes = b"", reply: int | None = None
) -> Frame:
    return Frame(source=me, destination=la, opcode=opcode, operands=operands, reply=reply)


def _reply_if(wanted: bool, opcode: Opcode) -> int | None:
    return int(opcode) if wanted else None


def poll(me: int, la: int) -> Frame:
    return Frame(source=me, destination=la)


def unknown_opcode(me: int, la: int) -> Frame:
    return _frame(me, la, UNKNOWN_OPCODE)


def feature_abort(me: int, la: int, opcode: int, reason: int) -> Frame:
    return _frame(me, la, Opcode.FEATURE_ABORT, bytes((opcode & 0xFF, reason & 0xFF)))


def abort(me: int, la: int) -> Frame:
    return _frame(me, la, Opcode.ABORT)


def give_physical_addr(me: int, la: int, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.GIVE_PHYSICAL_ADDR, reply=_reply_if(reply, Opcode.REPORT_PHYSICAL_ADDR))


def report_physical_addr(me: int, phys_addr: int, prim_type: int) -> Frame:
    return _frame(me, BROADCAST, Opcode.REPORT_PHYSICAL_ADDR, _u16(phys_addr) + bytes((prim_type,)))


def get_cec_version(me: int, la: int, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.GET_CEC_VERSION, reply=_reply_if(reply, Opcode.CEC_VERSION))


def cec_version(me: int, la: int, version: int) -> Frame:
    return _frame(me, la, Opcode.CEC_VERSION, bytes((version,)))


def get_menu_language(me: int, la: int, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.GET_MENU_LANGUAGE, reply=_reply_if(reply, Opcode.SET_MENU_LANGUAGE))


def set_menu_language(me: int, la: int, language: str) -> Frame:
    return _frame(me, la, Opcode.SET_MENU_LANGUAGE, language.encode("ascii")[:3])


def give_features(me: int, la: int, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.GIVE_FEATURES, reply=_reply_if(reply, Opcode.REPORT_FEATURES))


def report_features(me: int, features: ReportFeatures) -> Frame:
    data = bytes((features.cec_version, features.all_device_types))
    if features.rc_profile is not None:
        data += bytes((features.rc_profile & 0x7F,))
    if features.device_features is not None:
        data += bytes((features.device_features & 0x7F,))
    return _frame(me, BROADCAST, Opcode.REPORT_FEATURES, data)


def give_device_vendor_id(me: int, la: int, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.GIVE_DEVICE_VENDOR_ID, reply=_reply_if(reply, Opcode.DEVICE_VENDOR_ID))


def device_vendor_id(me: int, vendor_id: int) -> Frame:
    data = bytes(((vendor_id >> 16) & 0xFF, (vendor_id >> 8) & 0xFF, vendor_id & 0xFF))
    return _frame(me, BROADCAST, Opcode.DEVICE_VENDOR_ID, data)


def give_osd_name(me: int, la: int, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.GIVE_OSD_NAME, reply=_reply_if(reply, Opcode.SET_OSD_NAME))


def set_osd_name(me: int, la: int, name: str) -> Frame:
    return _frame(me, la, Opcode.SET_OSD_NAME, name.encode("ascii")[:14])


def set_osd_string(me: int, la: int, display_control: int, text: str) -> Frame:
    return _frame(me, la, Opcode.SET_OSD_STRING, bytes((display_control & 0xFF,)) + text.encode("ascii")[:13])


def give_device_power_status(me: int, la: int, reply: bool = True) -> Frame:
    return _frame(
        me, la, Opcode.GIVE_DEVICE_POWER_STATUS, reply=_reply_if(reply, Opcode.REPORT_POWER_STATUS)
    )


def report_power_status(me: int, la: int, status: int) -> Frame:
    return _frame(me, la, Opcode.REPORT_POWER_STATUS, bytes((status,)))


def active_source(me: int, phys_addr: int) -> Frame:
    return _frame(me, BROADCAST, Opcode.ACTIVE_SOURCE, _u16(phys_addr))


def inactive_source(me: int, la: int, phys_addr: int) -> Frame:
    return _frame(me, la, Opcode.INACTIVE_SOURCE, _u16(phys_addr))


def request_active_source(me: int, reply: bool = True) -> Frame:
    return _frame(me, BROADCAST, Opcode.REQUEST_ACTIVE_SOURCE, reply=_reply_if(reply, Opcode.ACTIVE_SOURCE))


def set_stream_path(me: int, phys_addr: int, reply: bool = True) -> Frame:
    return _frame(
        me, BROADCAST, Opcode.SET_STREAM_PATH, _u16(phys_addr), reply=_reply_if(reply, Opcode.ACTIVE_SOURCE)
    )


def user_control_pressed(me: int, la: int, ui_command: int) -> Frame:
    return _frame(me, la, Opcode.USER_CONTROL_PRESSED, bytes((ui_command,)))


def user_control_released(me: int, la: int) -> Frame:
    return _frame(me, la, Opcode.USER_CONTROL_RELEASED)


def menu_request(me: int, la: int, request_type: int, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.MENU_REQUEST, bytes((request_type,)), reply=_reply_if(reply, Opcode.MENU_STATUS))


def give_deck_status(me: int, la: int, status_request: int, reply: bool = True) -> Frame:
    return _frame(
        me, la, Opcode.GIVE_DECK_STATUS, bytes((status_request & 0xFF,)), reply=_reply_if(reply, Opcode.DECK_STATUS)
    )


def deck_status(me: int, la: int, info: int) -> Frame:
    return _frame(me, la, Opcode.DECK_STATUS, bytes((info,)))


def deck_control(me: int, la: int, mode: int) -> Frame:
    return _frame(me, la, Opcode.DECK_CONTROL, bytes((mode & 0xFF,)))


def play(me: int, la: int, mode: int) -> Frame:
    return _frame(me, la, Opcode.PLAY, bytes((mode & 0xFF,)))


def give_tuner_device_status(
    me: int, la: int, status_request: int = StatusRequest.ONCE, reply: bool = True
) -> Frame:
    return _frame(
        me,
        la,
        Opcode.GIVE_TUNER_DEVICE_STATUS,
        bytes((status_request,)),
        reply=_reply_if(reply, Opcode.TUNER_DEVICE_STATUS),
    )


def tuner_device_status(me: int, la: int, info: TunerDeviceInfo) -> Frame:
    head = bytes(((int(info.rec_flag) << 7) | (info.display_info & 0x7F),))
    if info.analogue is not None:
        body = encode_analogue_service(info.analogue)
    elif info.digital is not None:
        body = encode_digital_service(info.digital)
    else:
        body = b""
    return _frame(me, la, Opcode.TUNER_DEVICE_STATUS, head + body)


def tuner_step_increment(me: int, la: int) -> Frame:
    return _frame(me, la, Opcode.TUNER_STEP_INCREMENT)


def select_analogue_service(me: int, la: int, service: AnalogueService) -> Frame:
    return _frame(me, la, Opcode.SELECT_ANALOGUE_SERVICE, encode_analogue_service(service))


def select_digital_service(me: int, la: int, service: DigitalServiceId) -> Frame:
    return _frame(me, la, Opcode.SELECT_DIGITAL_SERVICE, encode_digital_service(service))


def select_service(me: int, la: int, info: TunerDeviceInfo) -> Frame:
    if info.analogue is not None:
        return select_analogue_service(me, la, info.analogue)
    assert info.digital is not None
    return select_digital_service(me, la, info.digital)


def record_tv_screen(me: int, la: int, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.RECORD_TV_SCREEN, reply=_reply_if(reply, Opcode.RECORD_ON))


def record_on(me: int, la: int, source: RecordSource, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.RECORD_ON, encode_record_source(source), reply=_reply_if(reply, Opcode.RECORD_STATUS))


def record_off(me: int, la: int, reply: bool = True) -> Frame:
    return _frame(me, la, Opcode.RECORD_OFF, reply=_reply_if(reply, Opcode.RECORD_STATUS))


def record_status(me: int, la: int, status: int) -> Frame:
    return _frame(me, la, Opcode.RECORD_STATUS, bytes((status,)))


def set_analogue_timer(me: int, la: int, timer: TimerEntry, service: AnalogueService, reply: bool = True) -> Frame:
    return _frame(
        me,
        la,
        Opcode.SET_ANALOGUE_TIMER,
        encode_timer(timer) + encode_analogue_service(service),
        reply=_reply_if(reply, Opcode.TIMER_STATUS),
    )


def clear_analogue_timer(me: int, la: int, timer: TimerEntry, service: AnalogueService, reply: bool = True) -> Frame:
    return _frame(
        me,
        la,
        Opcode.CLEAR_ANALOGUE_TIMER,
        encode_timer(timer) + encode_analogue_service(service),
        reply=_reply_if(reply, Opcode.TIMER_CLEARED_STATUS),
    )


def set_digital_timer(me: int, la: int, timer: TimerEntry, service: DigitalServiceId, reply: bool = True) -> Frame:
    return _frame(
        me,
        la,
        Opcode.SET_DIGITAL_TIMER,
        encode_timer(timer) + encode_digital_service(service),
        reply=_reply_if(reply, Opcode.TIMER_STATUS),
    )


def clear_digital_timer(me: int, la: int, timer: TimerEntry, service: DigitalServiceId, reply: bool = True) -> Frame:
    return _frame(
        me,
        la,
        Opcode.CLEAR_DIGITAL_TIMER,
        encode_timer(timer) + encode_digital_service(service),
        reply=_reply_if(reply, Opcode.TIMER_CLEARED_STATUS),
    )


def _external_source(specifier: int, plug: int, phys_addr: int) -> bytes:
    return bytes((specifier, plug)) + _u16(phys_addr)


def set_ext_timer(
    me: int,
    la: int,
    timer: TimerEntry,
    phys_addr: int,
    specifier: int = ExternalSourceSpecifier.PHYS_ADDR,
    plug: int = 0,
    reply: bool = True,
) -> Frame:
    return _frame(
        me,
        la,
        Opcode.SET_EXT_TIMER,
        encode_timer(timer) + _external_source(specifier, plug, phys_addr),
        reply=_reply_if(reply, Opcode.TIMER_STATUS),
    )


def clear_ext_timer(
    me: int,
    la: int,
    timer: TimerEntry,
    phys_addr: int,
    specifier: int = ExternalSourceSpecifier.PHYS_ADDR,
    plug: int = 0,
    reply: bool = True,
) -> Frame:
    return _frame(
        me,
        la,
        Opcode.CLEAR_EXT_TIMER,
        encode_timer(timer) + _external_source(specifier, plug, phys_addr),
        reply=_reply_if(reply, Opcode.TIMER_CLEARED_STATUS),
    )


def timer_status(me: int, la: int, status: TimerStatus) -> Frame:
    return _frame(me, la, Opcode.TIMER_STATUS, encode_timer_status(status))


def timer_cleared_status(me: int, la: int, status: int) -> Frame:
    return _frame(me, la, Opcode.TIMER_CLEARED_STATUS, bytes((status,)))


def set_timer_program_title(me: int, la: int, title: str) -> Frame:
    return _frame(me, la, Opcode.SET_TIMER_PROGRAM_TITLE, title.encode("ascii")[:14])


def cdc_hec_discover(me: int, phys_addr: int) -> Frame:
    return _frame(me, BROADCAST, Opcode.CDC_MESSAGE, _u16(phys_addr) + bytes((CdcOpcode.HEC_DISCOVER,)))


def cdc_hec_report_state(me: int, report: CdcHecReport) -> Frame:
    states = (
        ((report.hec_func_state & 0x3) << 6)
        | ((report.host_func_state & 0x3) << 4)
        | ((report.enc_func_state & 0x3) << 2)
        | (report.cdc_errcode & 0x3)
    )
    data = (
        _u16(report.phys_addr)
        + bytes((CdcOpcode.HEC_REPORT_STATE,))
        + _u16(report.target_phys_addr)
        + bytes((states,))
    )
    if report.hec_field is not None:
        data += _u16(report.hec_field)
    return _frame(me, BROADCAST, Opcode.CDC_MESSAGE, data)


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def decode_feature_abort(frame: Frame) -> FeatureAbort:
    raw = frame.operand(1, AbortReason.OTHER)
    try:
        reason = AbortReason(raw)
    except ValueError:
        reason = AbortReason.OTHER
    return FeatureAbort(opcode=frame.operand(0), reason=reason, raw_reason=raw)


def decode_physical_addr(frame: Frame) -> tuple[int, int]:
    return _read_u16(frame.operands, 0), frame.operand(2)


def decode_cec_version(frame: Frame) -> int:
    return frame.operand(0)


def decode_menu_language(frame: Frame) -> str:
    return frame.operands[:3].decode("ascii", errors="replace")


def decode_report_features(frame: Frame) -> ReportFeatures:
    data = frame.operands
    offset = 2
    rc_profile = None
    device_features = None
    # Both fields are extensible: bit 7 set means another byte follows
    if offset < len(data):
        rc_profile = data[offset] & 0x7F
        while offset < len(data) and data[offset] & 0x80:
            offset += 1
        offset += 1
    if offset < len(data):
        device_features = data[offset] & 0x7F
    return ReportFeatures(
        cec_version=frame.operand(0),
        all_device_types=frame.operand(1),
        rc_profile=rc_profile,
        device_features=device_features,
    )


def decode_vendor_id(frame: Frame) -> int:
    return (frame.operand(0) << 16) | (frame.operand(1) << 8) | frame.operand(2)


def decode_osd_name(frame: Frame) -> str:
    return frame.operands[:14].decode("ascii", errors="replace")


def decode_osd_string(frame: Frame) -> tuple[int, str]:
    return frame.operand(0), frame.operands[1:].decode("ascii", errors="replace")


def decode_power_status(frame: Frame) -> int:
    return frame.operand(0)


def decode_active_source(frame: Frame) -> int:
    return _read_u16(frame.operands, 0)


def decode_deck_status(frame: Frame) -> int:
    return frame.operand(0)


def decode_tuner_device_status(frame: Frame) -> TunerDeviceInfo:
    head = frame.operand(0)
    body = frame.operands[1:]
    rec_flag = bool(head >> 7)
    display_info = head & 0x7F
    # An analogue descriptor is 4 bytes, a digital one 7
    if len(body) < 7:
        return TunerDeviceInfo(rec_flag, display_info, analogue=decode_analogue_service(body))
    return TunerDeviceInfo(rec_flag, display_info, digital=decode_digital_service(body))


def decode_analogue_selection(frame: Frame) -> AnalogueService:
    return decode_analogue_service(frame.operands)


def decode_digital_selection(frame: Frame) -> DigitalServiceId:
    return decode_digital_service(frame.operands)


def decode_record_on(frame: Frame) -> RecordSource:
    return decode_record_source(frame.operands)


def decode_record_status(frame: Frame) -> int:
    return frame.operand(0)


def decode_timer_status(frame: Frame) -> TimerStatus:
    head = frame.operand(0)
    programmed = bool((head >> 4) & 1)
    status = TimerStatus(
        overlap_warning=bool(head >> 7),
        media_info=(head >> 5) & 0x3,
        programmed=programmed,
        prog_info=head & 0xF if programmed else 0,
        prog_error=0 if programmed else head & 0xF,
    )
    if _timer_status_has_duration(status):
        return TimerStatus(
            overlap_warning=status.overlap_warning,
            media_info=status.media_info,
            programmed=status.programmed,
            prog_info=status.prog_info,
            prog_error=status.prog_error,
            duration_hours=bcd2bin(frame.operand(1)),
            duration_minutes=bcd2bin(frame.operand(2)),
        )
    return status


def decode_timer_cleared_status(frame: Frame) -> int:
    return frame.operand(0)


def decode_timer_analogue_service(frame: Frame) -> AnalogueService:
    return decode_analogue_service(frame.operands[7:])


def decode_cdc_opcode(frame: Frame) -> int | None:
    if frame.opcode != Opcode.CDC_MESSAGE or len(frame.operands) < 3:
        return None
    return frame.operands[2]


def decode_cdc_hec_report(frame: Frame) -> CdcHecReport:
    data = frame.operands
    states = frame.operand(5)
    return CdcHecReport(
        phys_addr=_read_u16(data, 0),
        target_phys_addr=_read_u16(data, 3),
        hec_func_state=states >> 6,
        host_func_state=(states >> 4) & 0x3,
        enc_func_state=(states >> 2) & 0x3,
        cdc_errcode=states & 0x3,
        hec_field=_read_u16(data, 6) if len(data) >= 8 else None,
    )
