# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt

"""Tests for the Routing Control cases."""

import pytest

from cec_conformance.bus import codec
from cec_conformance.bus.transport import BusMode
from cec_conformance.core.errors import ProtocolViolation
from cec_conformance.core.protocol import CecVersion, LogicalAddress, Opcode, PrimaryDeviceType
from cec_conformance.core.types import Verdict
from cec_conformance.engine import Engine
from cec_conformance.scenarios import routing
from tests.mocks.fake_bus import FakeBus, FakeClock, FakeDevice

LOCAL = LogicalAddress.PLAYBACK_1
TV = LogicalAddress.TV
PLAYER = LogicalAddress.PLAYBACK_2


class TestActiveSource:
    def test_presumed_when_not_interactive(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV, prim_type=PrimaryDeviceType.TV))

        assert routing.routing_control_active_source(engine, LOCAL, TV, False) == Verdict.OK_PRESUMED
        assert bus.sent[-1].opcode == Opcode.ACTIVE_SOURCE
        assert bus.sent[-1].is_broadcast

    def test_operator_confirms(self, bus: FakeBus, clock: FakeClock) -> None:
        bus.add(FakeDevice(TV, prim_type=PrimaryDeviceType.TV))
        engine = Engine(bus, prompter=lambda question: True, sleep=clock.sleep, clock=clock)

        assert routing.routing_control_active_source(engine, LOCAL, TV, True) == Verdict.PASS

    def test_operator_denies(self, bus: FakeBus, clock: FakeClock) -> None:
        bus.add(FakeDevice(TV, prim_type=PrimaryDeviceType.TV))
        engine = Engine(bus, prompter=lambda question: False, sleep=clock.sleep, clock=clock)

        with pytest.raises(ProtocolViolation, match="did not switch"):
            routing.routing_control_active_source(engine, LOCAL, TV, True)


class TestRequestActiveSource:
    def test_nobody_answers(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV))

        assert routing.routing_control_req_active_source(engine, LOCAL, TV, False) == Verdict.PASS

    def test_answer_while_adapter_is_active_fails(self, bus: FakeBus, engine: Engine) -> None:
        tv = bus.add(FakeDevice(TV))
        tv.on(Opcode.REQUEST_ACTIVE_SOURCE, lambda f: codec.active_source(TV, 0x0000))

        with pytest.raises(ProtocolViolation, match="active source"):
            routing.routing_control_req_active_source(engine, LOCAL, TV, False)


class TestInactiveSource:
    def test_tv_switches_path(self, bus: FakeBus, engine: Engine) -> None:
        tv = bus.add(FakeDevice(TV, prim_type=PrimaryDeviceType.TV))
        tv.on(Opcode.INACTIVE_SOURCE, lambda f: codec.set_stream_path(TV, 0x2000))

        assert routing.routing_control_inactive_source(engine, LOCAL, TV, False) == Verdict.PASS
        assert engine.warnings == 0
        assert BusMode.FOLLOWER in bus.modes

    def test_no_follow_up_warns(self, bus: FakeBus, engine: Engine) -> None:
        tv = bus.add(FakeDevice(TV, prim_type=PrimaryDeviceType.TV))
        tv.accept(Opcode.INACTIVE_SOURCE)

        assert routing.routing_control_inactive_source(engine, LOCAL, TV, False) == Verdict.PASS
        assert engine.warnings == 1

    def test_not_supported(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV, prim_type=PrimaryDeviceType.TV))

        assert routing.routing_control_inactive_source(engine, LOCAL, TV, False) == Verdict.OK_NOT_SUPPORTED


class TestSetStreamPath:
    def _source(self, bus: FakeBus, engine: Engine, cec_version: int = CecVersion.V1_4) -> FakeDevice:
        player = bus.add(FakeDevice(PLAYER, phys_addr=0x2000, cec_version=cec_version))
        device = engine.device(PLAYER)
        device.phys_addr = 0x2000
        device.prim_type = PrimaryDeviceType.PLAYBACK
        device.cec_version = cec_version
        return player

    def test_source_becomes_active(self, bus: FakeBus, engine: Engine) -> None:
        player = self._source(bus, engine, CecVersion.V2_0)
        player.on(Opcode.SET_STREAM_PATH, lambda f: codec.active_source(PLAYER, 0x2000))

        assert routing.routing_control_set_stream_path(engine, LOCAL, PLAYER, False) == Verdict.PASS

    def test_pre_cec20_answer_is_presumed(self, bus: FakeBus, engine: Engine) -> None:
        player = self._source(bus, engine)
        player.on(Opcode.SET_STREAM_PATH, lambda f: codec.active_source(PLAYER, 0x2000))

        assert routing.routing_control_set_stream_path(engine, LOCAL, PLAYER, False) == Verdict.OK_PRESUMED

    def test_wrong_physical_address(self, bus: FakeBus, engine: Engine) -> None:
        player = self._source(bus, engine, CecVersion.V2_0)
        player.on(Opcode.SET_STREAM_PATH, lambda f: codec.active_source(PLAYER, 0x3000))

        with pytest.raises(ProtocolViolation, match="different physical address"):
            routing.routing_control_set_stream_path(engine, LOCAL, PLAYER, False)

    def test_silent_pre_cec20_source_warns(self, bus: FakeBus, engine: Engine) -> None:
        self._source(bus, engine)

        assert routing.routing_control_set_stream_path(engine, LOCAL, PLAYER, False) == Verdict.OK_NOT_SUPPORTED
        assert engine.warnings == 1

    def test_silent_cec20_source_fails(self, bus: FakeBus, engine: Engine) -> None:
        self._source(bus, engine, CecVersion.V2_0)

        with pytest.raises(ProtocolViolation, match="not answered"):
            routing.routing_control_set_stream_path(engine, LOCAL, PLAYER, False)

    def test_silent_tv_is_not_supported(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(TV, phys_addr=0x0000, prim_type=PrimaryDeviceType.TV))
        engine.device(TV).phys_addr = 0x0000

        assert routing.routing_control_set_stream_path(engine, LOCAL, TV, False) == Verdict.OK_NOT_SUPPORTED

    def test_unknown_physical_address(self, bus: FakeBus, engine: Engine) -> None:
        bus.add(FakeDevice(PLAYER))

        with pytest.raises(ProtocolViolation, match="unknown"):
            routing.routing_control_set_stream_path(engine, LOCAL, PLAYER, False)
