import pytest

from bus_sim.config import SimulationConfig
from bus_sim.core.collision import CollisionEvent
from bus_sim.core.enums import DeviceStatus, LogCategory
from bus_sim.core.simulator import BusSimulator


def test_collision_event_grows_and_fades():
    event = CollisionEvent(450, 300)
    assert event.step(2, 5)
    assert (event.size, event.alpha) == (12, 250)


def test_collision_event_disappears_at_zero_alpha(simulator):
    simulator.collision_engine.create_collision(100, 300)
    for _ in range(50):
        simulator.collision_engine.update()
    assert len(simulator.collisions) == 1
    assert simulator.collisions[0].alpha == 5
    simulator.collision_engine.update()
    assert simulator.collisions == []


def test_collision_aborts_transmission(simulator, rng):
    rng.picks = [3]
    simulator.start_transmission()
    simulator.run(20)
    sender = simulator.registry.get(3)

    event = simulator.simulate_collision(sender)

    assert simulator.packets == []
    assert not simulator.bus.busy
    assert sender.stats.collisions == 1
    assert sender.status is DeviceStatus.IDLE
    assert simulator.active_transmission is None
    assert (event.x, event.y) == (450, 300)
    assert simulator.log.messages()[-2:] == [
        "Collision detected! Device 3's transmission failed",
        "Total collisions for Device 3: 1",
    ]
    assert simulator.log.latest(2)[1].category is LogCategory.ERROR


def test_collision_clears_every_packet(simulator, rng):
    rng.picks = [1]
    simulator.start_transmission()
    simulator.lifecycle.create_packet(simulator.registry.get(2), 99, is_collision=True)
    simulator.simulate_collision(simulator.registry.get(1))
    assert simulator.packets == []


def test_collision_without_sender_picks_working_device(simulator, rng):
    simulator.registry.mark_failed(simulator.registry.get(1))
    rng.picks = [4]
    simulator.simulate_collision()
    assert simulator.registry.get(4).stats.collisions == 1
    assert sum(d.stats.collisions for d in simulator.devices) == 1


def test_collision_with_no_working_devices_is_noop(simulator):
    for device in simulator.devices:
        simulator.registry.mark_failed(device)
    before = len(simulator.log)
    assert simulator.simulate_collision() is None
    assert simulator.collisions == []
    assert len(simulator.log) == before


def test_collision_counter_accumulates(simulator):
    sender = simulator.registry.get(2)
    simulator.simulate_collision(sender)
    simulator.simulate_collision(sender)
    assert sender.stats.collisions == 2
    assert simulator.log.messages()[-1] == "Total collisions for Device 2: 2"


def test_collision_animation_does_not_block_new_transmission(simulator, rng):
    simulator.simulate_collision(simulator.registry.get(1))
    rng.picks = [2]
    packet = simulator.start_transmission()
    simulator.run(10)
    assert packet is not None
    assert simulator.packets == [packet]
    assert len(simulator.collisions) == 1


@pytest.fixture
def colliding(rng):
    return BusSimulator(SimulationConfig(collision_probability=1.0), rng=rng)


def test_deferred_collision_fires_after_one_second(colliding, rng):
    rng.picks = [2]
    colliding.start_transmission()
    sender = colliding.registry.get(2)

    colliding.run(30)
    assert len(colliding.packets) == 1
    assert sender.stats.collisions == 0

    colliding.tick()
    assert colliding.packets == []
    assert sender.stats.collisions == 1
    assert not colliding.bus.busy
    assert sender.status is DeviceStatus.IDLE
    assert len(colliding.collisions) == 1


def test_deferred_collision_is_stale_after_reset(colliding):
    colliding.start_transmission()
    colliding.run(5)
    colliding.reset()
    colliding.run(40)
    assert all(d.stats.collisions == 0 for d in colliding.devices)
    assert colliding.collisions == []
    assert not any("Collision detected" in m for m in colliding.log.messages())


def test_deferred_collision_is_stale_after_completion(rng):
    simulator = BusSimulator(
        SimulationConfig(collision_probability=1.0, collision_delay=6.0), rng=rng
    )
    simulator.start_transmission()
    simulator.run(200)
    sender = simulator.registry.get(1)
    assert sender.stats.sent == 1
    assert sender.stats.collisions == 0


def test_deferred_collision_is_stale_for_superseded_transmission(colliding, rng):
    rng.picks = [1, 2]
    colliding.start_transmission()
    colliding.run(10)
    first = colliding.registry.get(1)
    colliding.simulate_collision(first)
    colliding.start_transmission()
    second = colliding.registry.get(2)

    colliding.run(21)
    assert first.stats.collisions == 1
    assert second.stats.collisions == 0
    assert second.is_sending
    assert len(colliding.packets) == 1

    colliding.run(10)
    assert second.stats.collisions == 1
    assert colliding.packets == []


def test_deferred_collision_is_stale_after_bus_failure(colliding):
    colliding.start_transmission()
    colliding.run(5)
    colliding.inject_bus_failure()
    colliding.run(40)
    assert all(d.stats.collisions == 0 for d in colliding.devices)


def test_collision_releases_owner_of_aborted_transmission(simulator, rng):
    rng.picks = [2]
    simulator.start_transmission()
    simulator.simulate_collision(simulator.registry.get(5))
    assert simulator.registry.get(2).status is DeviceStatus.IDLE
    assert simulator.registry.get(2).stats.collisions == 0
    assert simulator.registry.get(5).stats.collisions == 1
