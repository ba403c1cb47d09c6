# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Tests for the recognized/unrecognized opcode consistency check."""

import pytest

from cec_conformance.bus import codec
from cec_conformance.core.errors import ProtocolViolation
from cec_conformance.core.protocol import LogicalAddress, Opcode
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.scenarios import post_test
from tests.mocks.fake_bus import FakeBus, FakeDevice

LOCAL = LogicalAddress.PLAYBACK_1
TV = LogicalAddress.TV


class TestRecognizedConsistency:
    def test_consistent_device(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV))
        engine.send(codec.give_osd_name(LOCAL, TV))
        engine.send(codec.give_device_power_status(LOCAL, TV))

        assert post_test.post_test_check_recognized(engine, LOCAL, TV, False) == Verdict.PASS

    def test_opcode_answered_then_aborted(
        self, bus: FakeBus, engine: Engine, caplog: pytest.LogCaptureFixture
    ) -> None:
        tv = bus.add(FakeDevice(TV))
        engine.send(codec.give_osd_name(LOCAL, TV))
        tv.abort(Opcode.GIVE_OSD_NAME)
        engine.send(codec.give_osd_name(LOCAL, TV))

        with pytest.raises(ProtocolViolation, match="1 opcode"):
            post_test.post_test_check_recognized(engine, LOCAL, TV, False)
        assert "both recognized by" in caplog.text

    def test_other_devices_do_not_count(self, bus: FakeBus, engine: Engine) -> None:
        engine.devices.record_recognized(LogicalAddress.PLAYBACK_2, Opcode.GIVE_OSD_NAME)
        engine.devices.record_unrecognized(LogicalAddress.PLAYBACK_2, Opcode.GIVE_OSD_NAME)

        assert post_test.post_test_check_recognized(engine, LOCAL, TV, False) == Verdict.PASS
