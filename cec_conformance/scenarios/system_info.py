# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""System Information feature.

Most of these attributes were already read during discovery; the cases
query them again and require the device to answer consistently.
"""

from cec_conformance.bus import codec
from cec_conformance.core.classification import (
    is_abort,
    refused,
    timed_out,
    timed_out_or_abort,
    unrecognized_op,
)
from cec_conformance.core.protocol import (
    AddressMask,
    CecVersion,
    DeviceFeature,
    has_role,
    is_tv,
    la_name,
)
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.registry.registry import Tag, TestArea, TestCase
from cec_conformance.scenarios.checks import (
    fail,
    fail_critical,
    fail_if,
    fail_or_warn,
    transmit,
)


def system_info_polling(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    acked = engine.poll(local, target)
    if engine.devices.is_present(target):
        if not acked:
            fail_critical(f"Polling a valid remote LA ({la_name(target)}) failed")
        return Verdict.PASS
    if acked:
        fail_critical(f"Polling an invalid remote LA ({la_name(target)}) was successful")
    return Verdict.OK_NOT_SUPPORTED


def system_info_phys_addr(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = engine.send(codec.give_physical_addr(local, target))
    if not outcome.tx_ok or timed_out_or_abort(outcome):
        if engine.in_standby:
            engine.warn("Give Physical Addr timed out")
            return Verdict.PASS
        fail_critical("Give Physical Addr timed out")

    assert outcome.reply is not None
    phys_addr, prim_type = codec.decode_physical_addr(outcome.reply)
    if device.phys_addr is None:
        device.phys_addr = phys_addr
    if device.prim_type is None:
        device.prim_type = prim_type
    fail_if(device.phys_addr != phys_addr, "Physical address changed since discovery")
    fail_if(device.prim_type != prim_type, "Primary device type changed since discovery")
    return Verdict.PASS


def system_info_version(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = engine.send(codec.get_cec_version(local, target))
    if not outcome.tx_ok or timed_out(outcome):
        return fail_or_warn(engine, "Get CEC Version timed out")
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED

    assert outcome.reply is not None
    version = codec.decode_cec_version(outcome.reply)
    # Needs to be kept in sync with newer CEC versions
    fail_if(
        not CecVersion.V1_3A <= version <= CecVersion.V2_0,
        f"Invalid CEC version {version}",
    )
    if device.cec_version is None:
        device.cec_version = version
    fail_if(device.cec_version != version, "CEC version changed since discovery")
    return Verdict.PASS


def system_info_get_menu_lang(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    outcome = engine.send(codec.get_menu_language(local, target))
    if not outcome.tx_ok or timed_out(outcome):
        return fail_or_warn(engine, "Get Menu Language timed out")

    tv = is_tv(target, device.prim_type)
    # Devices other than TVs shall Feature Abort [Unrecognized Opcode]
    fail_if(not tv and not unrecognized_op(outcome), "Non-TV device answered Get Menu Language")
    if unrecognized_op(outcome):
        if tv:
            engine.warn("TV did not respond to Get Menu Language.")
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    if is_abort(outcome):
        return Verdict.OK_PRESUMED

    assert outcome.reply is not None
    language = codec.decode_menu_language(outcome.reply)
    if device.menu_language is None:
        device.menu_language = language
    fail_if(device.menu_language != language, "Menu language changed since discovery")
    return Verdict.PASS


def system_info_set_menu_lang(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    outcome = transmit(engine, codec.set_menu_language(local, target, "eng"))
    if unrecognized_op(outcome):
        return Verdict.OK_NOT_SUPPORTED
    if refused(outcome):
        return Verdict.OK_REFUSED
    return Verdict.OK_PRESUMED


def system_info_give_features(engine: Engine, local: int, target: int, interactive: bool) -> Verdict:
    device = engine.device(target)
    version = device.cec_version_or_default()
    outcome = engine.send(codec.give_features(local, target))
    if not outcome.tx_ok or timed_out(outcome):
        return fail_or_warn(engine, "Give Features timed out")
    if unrecognized_op(outcome):
        if version < CecVersion.V2_0:
            return Verdict.OK_NOT_SUPPORTED
        fail("Give Features is mandatory as of CEC 2.0")
    if refused(outcome):
        return Verdict.OK_REFUSED
    if version < CecVersion.V2_0:
        engine.info("Device has CEC Version < 2.0 but supports Give Features.")

    assert outcome.reply is not None
    features = codec.decode_report_features(outcome.reply)
    fail_if(
        features.rc_profile is None or features.device_features is None,
        "Report Features lacks RC Profile or Device Features",
    )
    assert features.device_features is not None
    dev_features = features.device_features
    engine.info(f"All Device Types: 0x{features.all_device_types:02x}")
    engine.info(f"RC Profile: 0x{features.rc_profile:02x}")
    engine.info(f"Device Features: 0x{dev_features:02x}")

    playback = has_role(target, AddressMask.PLAYBACK)
    record = has_role(target, AddressMask.RECORD)
    tuner = has_role(target, AddressMask.TUNER)
    tv = has_role(target, AddressMask.TV)
    if not (playback or record or tuner) and dev_features & DeviceFeature.HAS_SET_AUDIO_RATE:
        fail("Only Playback, Recording or Tuner devices shall set the Set Audio Rate bit")
    if not (playback or record) and dev_features & DeviceFeature.HAS_DECK_CONTROL:
        fail("Only Playback and Recording devices shall set the Supports Deck Control bit")
    if not tv and dev_features & DeviceFeature.HAS_RECORD_TV_SCREEN:
        fail("Only TVs shall set the Record TV Screen bit")
    if playback and dev_features & DeviceFeature.SINK_HAS_ARC_TX:
        fail("A Playback device cannot set the Sink Supports ARC Tx bit")
    if tv and dev_features & DeviceFeature.SOURCE_HAS_ARC_RX:
        fail("A TV cannot set the Source Supports ARC Rx bit")

    if device.dev_features is None:
        device.cec_version = features.cec_version if device.cec_version is None else device.cec_version
        device.rc_profile = features.rc_profile
        device.dev_features = dev_features
        device.all_device_types = features.all_device_types
    fail_if(features.cec_version != device.cec_version, "CEC version differs from Get CEC Version")
    fail_if(device.rc_profile != features.rc_profile, "RC Profile changed since discovery")
    fail_if(device.dev_features != dev_features, "Device Features changed since discovery")
    fail_if(device.all_device_types != features.all_device_types, "All Device Types changed since discovery")
    if device.has_deck_ctl is None:
        device.has_deck_ctl = bool(dev_features & DeviceFeature.HAS_DECK_CONTROL)
    if device.has_rec_tv is None:
        device.has_rec_tv = bool(dev_features & DeviceFeature.HAS_RECORD_TV_SCREEN)
    return Verdict.PASS


AREA = TestArea(
    "System Information feature",
    Tag.SYSTEM_INFORMATION,
    (
        TestCase("Polling Message", AddressMask.ALL, system_info_polling),
        TestCase("Give Physical Address", AddressMask.ALL, system_info_phys_addr),
        TestCase("Give CEC Version", AddressMask.ALL, system_info_version),
        TestCase("Get Menu Language", AddressMask.ALL, system_info_get_menu_lang),
        TestCase("Set Menu Language", AddressMask.ALL, system_info_set_menu_lang),
        TestCase("Give Device Features", AddressMask.ALL, system_info_give_features),
    ),
)
