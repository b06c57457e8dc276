import pytest

from bus_sim.core.device import DeviceRegistry
from bus_sim.core.enums import PacketPhase
from bus_sim.core.lifecycle import PacketLifecycleEngine
from bus_sim.core.packet import lerp


@pytest.fixture
def registry():
    registry = DeviceRegistry()
    registry.reset(6)
    return registry


@pytest.fixture
def events():
    return []


@pytest.fixture
def completed():
    return []


@pytest.fixture
def engine(registry, events, completed):
    return PacketLifecycleEngine(
        registry,
        lambda category, message: events.append(message),
        completed.append,
        bus_y=300,
        increment=0.02,
    )


def advance(engine, ticks):
    for _ in range(ticks):
        engine.update()


def test_lerp_clamps():
    assert lerp(150, 300, 0.5) == 225
    assert lerp(150, 300, 1.5) == 300
    assert lerp(450, 300, -1) == 450


def test_create_packet_starts_at_sender(engine, registry, events):
    sender = registry.get(2)
    packet = engine.create_packet(sender, 1)
    assert packet.phase is PacketPhase.DESCENDING
    assert packet.progress == 0
    assert (packet.x, packet.y) == (300, 450)
    assert events == ["Device 2 created new packet"]
    assert engine.has_transmission(1)


def test_progress_resets_once_per_phase(engine, registry):
    packet = engine.create_packet(registry.get(1), 1)
    history = []
    for _ in range(149):
        engine.update()
        history.append((packet.phase, packet.progress))

    transitions = 0
    for (prev_phase, prev_progress), (phase, progress) in zip(history, history[1:]):
        if phase is prev_phase:
            assert progress > prev_progress
        else:
            transitions += 1
            assert progress == 0
    assert transitions == 2
    assert history[48] == (PacketPhase.DESCENDING, 0.98)
    assert history[49] == (PacketPhase.BROADCASTING, 0.0)
    assert history[99] == (PacketPhase.ASCENDING, 0.0)


def test_phase_boundaries_log_events(engine, registry, events):
    engine.create_packet(registry.get(1), 1)
    advance(engine, 49)
    assert "Packet from Device 1 reached the bus" not in events
    engine.update()
    assert events[-1] == "Packet from Device 1 reached the bus"
    advance(engine, 50)
    assert events[-1] == "Packet from Device 1 broadcasting on bus"


def test_descending_interpolates_towards_bus(engine, registry):
    packet = engine.create_packet(registry.get(1), 1)
    advance(engine, 25)
    assert packet.y == pytest.approx(225)
    advance(engine, 30)
    assert packet.y == 300


def test_ascending_fans_out_to_working_receivers(engine, registry):
    registry.mark_failed(registry.get(5))
    packet = engine.create_packet(registry.get(1), 1)
    advance(engine, 125)
    assert packet.phase is PacketPhase.ASCENDING
    receivers = {device_id: (x, y) for device_id, x, y in packet.receiver_positions}
    assert set(receivers) == {2, 3, 4, 6}
    assert receivers[2] == (300, pytest.approx(375))
    assert receivers[3] == (450, pytest.approx(225))


def test_completion_after_three_phases(engine, registry, completed):
    sender = registry.get(1)
    engine.create_packet(sender, 1)
    advance(engine, 149)
    assert completed == []
    assert len(engine) == 1
    engine.update()
    assert completed == [sender]
    assert len(engine) == 0


def test_packet_of_failed_sender_keeps_moving(engine, registry):
    sender = registry.get(1)
    packet = engine.create_packet(sender, 1)
    advance(engine, 10)
    registry.mark_failed(sender)
    advance(engine, 10)
    assert engine.packets == [packet]
    assert packet.progress == pytest.approx(0.4)


def test_collision_artifact_does_not_complete(engine, registry, events, completed):
    engine.create_packet(registry.get(1), 7, is_collision=True)
    assert events == []
    assert not engine.has_transmission(7)
    advance(engine, 150)
    assert completed == []
    assert len(engine) == 0


def test_clear_drops_everything(engine, registry):
    engine.create_packet(registry.get(1), 1)
    engine.create_packet(registry.get(2), 2, is_collision=True)
    assert engine.clear() == 2
    assert engine.packets == []
    assert not engine.has_transmission(1)
