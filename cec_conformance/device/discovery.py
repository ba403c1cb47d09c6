# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Discovery of the remote devices present on the bus.

Every logical address the adapter does not hold itself is polled. For each
address that acknowledges, the basic system information is read into the
remote device model so that the test cases start from a known state.
"""

import logging
from typing import TYPE_CHECKING

from cec_conformance.bus import codec
from cec_conformance.core.classification import replied
from cec_conformance.core.protocol import (
    BROADCAST,
    CecVersion,
    DeviceFeature,
    address_bit,
    format_physical_address,
    is_tv,
    la_name,
)
from cec_conformance.device.model import RemoteDevice

if TYPE_CHECKING:
    from cec_conformance.engine import Engine

logger = logging.getLogger(__name__)


def poll_remotes(engine: "Engine", local: int) -> list[int]:
    """Poll every logical address except the broadcast address and our own.

    Returns:
        The acknowledging addresses in ascending order.
    """
    own = engine.transport.logical_address_mask()
    present = []
    for la in range(BROADCAST):
        if own & address_bit(la):
            continue
        if engine.poll(local, la):
            engine.devices.mark_present(la)
            present.append(la)
    logger.info(f"Found {len(present)} remote device(s): {', '.join(la_name(la) for la in present) or 'none'}")
    return present


def query_remote(engine: "Engine", local: int, la: int) -> RemoteDevice:
    """Read physical address, version, vendor, features, OSD name and menu language."""
    device = engine.device(la)

    outcome = engine.send(codec.give_physical_addr(local, la))
    if replied(outcome):
        assert outcome.reply is not None
        device.phys_addr, device.prim_type = codec.decode_physical_addr(outcome.reply)

    outcome = engine.send(codec.get_cec_version(local, la))
    if replied(outcome):
        assert outcome.reply is not None
        device.cec_version = codec.decode_cec_version(outcome.reply)

    outcome = engine.send(codec.give_device_vendor_id(local, la))
    if replied(outcome):
        assert outcome.reply is not None
        device.vendor_id = codec.decode_vendor_id(outcome.reply)

    if device.is_cec20:
        outcome = engine.send(codec.give_features(local, la))
        if replied(outcome):
            assert outcome.reply is not None
            features = codec.decode_report_features(outcome.reply)
            device.rc_profile = features.rc_profile
            device.dev_features = features.device_features
            device.all_device_types = features.all_device_types
            if features.device_features is not None:
                device.has_deck_ctl = bool(features.device_features & DeviceFeature.HAS_DECK_CONTROL)
                device.has_rec_tv = bool(features.device_features & DeviceFeature.HAS_RECORD_TV_SCREEN)

    outcome = engine.send(codec.give_osd_name(local, la))
    if replied(outcome):
        assert outcome.reply is not None
        device.osd_name = codec.decode_osd_name(outcome.reply)

    # Only TVs are expected to have a menu language
    if is_tv(la, device.prim_type):
        outcome = engine.send(codec.get_menu_language(local, la))
        if replied(outcome):
            assert outcome.reply is not None
            device.menu_language = codec.decode_menu_language(outcome.reply)

    describe_remote(device)
    return device


def describe_remote(device: RemoteDevice) -> None:
    logger.info(f"{device.name}:")
    if device.phys_addr is not None:
        logger.info(f"  Physical Address : {format_physical_address(device.phys_addr)}")
    if device.cec_version is not None:
        try:
            version = CecVersion(device.cec_version).name
        except ValueError:
            version = f"0x{device.cec_version:02x}"
        logger.info(f"  CEC Version      : {version}")
    if device.vendor_id is not None:
        logger.info(f"  Vendor ID        : 0x{device.vendor_id:06x}")
    if device.osd_name is not None:
        logger.info(f"  OSD Name         : '{device.osd_name}'")
    if device.menu_language is not None:
        logger.info(f"  Menu Language    : {device.menu_language}")


def discover(engine: "Engine", local: int) -> list[int]:
    """Poll the bus and query every device found.

    Returns:
        The present logical addresses in ascending order.
    """
    present = poll_remotes(engine, local)
    for la in present:
        query_remote(engine, local, la)
    return present
