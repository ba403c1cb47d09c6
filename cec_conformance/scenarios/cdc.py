# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Capability Discovery and Control feature: HEC discovery."""

import logging

from cec_conformance.bus import codec
from cec_conformance.bus.codec import CdcHecReport
from cec_conformance.bus.transport import BusMode
from cec_conformance.core.constants import HEC_DISCOVERY_IDLE_MS, HEC_DISCOVERY_WINDOW_MS
from cec_conformance.core.models import Frame
from cec_conformance.core.protocol import (
    AddressMask,
    CdcErrorCode,
    CdcOpcode,
    EncFunctionState,
    HecFunctionState,
    HostFunctionState,
    Opcode,
    format_physical_address,
    la_name,
)
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import fail, transmit

logger = logging.getLogger(__name__)


def _state_name(enum_type: type, value: int) -> str:
    try:
        return enum_type(value).name
    except ValueError:
        return "UNKNOWN"


def hec_support_field(field: int) -> str:
    """Render the HEC Support Field: bit 14 is the output, bits 13..0 inputs 1..14."""
    if not field:
        return "None"
    ports = []
    if field & (1 << 14):
        ports.append("out")
    ports.extend(f"in{14 - bit}" for bit in range(13, -1, -1) if field & (1 << bit))
    return ", ".join(ports)


def log_hec_report(source: int, report: CdcHecReport) -> None:
    logger.info(f"Received CDC HEC State report from {la_name(source)}:")
    logger.info(f"  Physical address        : {format_physical_address(report.phys_addr)}")
    logger.info(f"  Target physical address : {format_physical_address(report.target_phys_addr)}")
    logger.info(f"  HEC Functionality State : {_state_name(HecFunctionState, report.hec_func_state)}")
    logger.info(f"  Host Functionality State: {_state_name(HostFunctionState, report.host_func_state)}")
    logger.info(f"  ENC Functionality State : {_state_name(EncFunctionState, report.enc_func_state)}")
    logger.info(f"  CDC Error Code          : {_state_name(CdcErrorCode, report.cdc_errcode)}")
    if report.hec_field is not None:
        logger.info(f"  HEC Support Field       : {hec_support_field(report.hec_field)}")


def _is_hec_report(frame: Frame) -> bool:
    return codec.decode_cdc_opcode(frame) == CdcOpcode.HEC_REPORT_STATE


def cdc_hec_discover(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    transmit(engine, codec.cdc_hec_discover(local, engine.phys_addr), mode=BusMode.BOTH)

    # Every report extends the window by up to a second, five seconds at most
    frames = engine.exchange.listen(HEC_DISCOVERY_WINDOW_MS, HEC_DISCOVERY_IDLE_MS, BusMode.BOTH)

    has_cdc = False
    for frame in frames:
        if frame.opcode == Opcode.FEATURE_ABORT:
            if frame.source == target:
                fail("Device replied Feature Abort to broadcast message")
            engine.warn(f"{la_name(frame.source)} replied Feature Abort to broadcast message")
            continue
        if not _is_hec_report(frame):
            continue
        report = codec.decode_cdc_hec_report(frame)
        if report.target_phys_addr != engine.phys_addr:
            continue
        if report.phys_addr == device.phys_addr:
            has_cdc = True
        log_hec_report(frame.source, report)

    if has_cdc:
        return Verdict.PASS
    return Verdict.OK_NOT_SUPPORTED


AREA = TestArea(
    "Capability Discovery and Control feature",
    Tag.CAP_DISCOVERY_CONTROL,
    (TestCase("CDC_HEC_Discover", AddressMask.ALL, cdc_hec_discover),),
)
