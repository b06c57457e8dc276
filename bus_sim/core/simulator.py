"""Bus network simulator class.

This module defines the BusSimulator class, which owns the whole simulation
state and exposes the tick, action and query surfaces used by renderers and
user interfaces.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import simpy

from bus_sim.config import SimulationConfig
from bus_sim.core.bus import BusChannel
from bus_sim.core.collision import CollisionEngine, CollisionEvent
from bus_sim.core.device import Device, DeviceRegistry
from bus_sim.core.enums import LogCategory
from bus_sim.core.event_log import EventLog
from bus_sim.core.lifecycle import PacketLifecycleEngine
from bus_sim.core.packet import Packet
from bus_sim.utils.rng import SimulationRNG

logger = logging.getLogger(__name__)


class BusSimulator:
    """Shared-medium network simulation.

    Every action is synchronous and never raises for domain reasons: an action
    whose precondition does not hold is a no-op that writes a diagnostic to
    the event log.

    Simulation time is kept by a SimPy environment advanced one unit per tick.
    Deferred collisions are SimPy processes on that clock.

    Attributes:
        config: Simulation constants.
        env: SimPy environment; ``env.now`` equals the number of ticks so far.
        rng: Random source for every random decision.
        log: Event log sink.
        registry: Devices attached to the bus.
        bus: Shared medium.
        lifecycle: In-flight packets.
        collision_engine: Collision effects and collision events.
        transmission_seq: Id of the most recently started transmission.
        active_transmission: Id of the transmission on the bus, if any.
        hooks: Callbacks keyed by event type.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[SimulationRNG] = None,
        log: Optional[EventLog] = None,
    ) -> None:
        """Initialize the simulator and reset it to its starting state.

        Args:
            config: Simulation constants; defaults reproduce the classic setup.
            rng: Random source; defaults to one seeded from ``config.seed``.
            log: Event log sink; defaults to one holding ``config.log_capacity`` entries.
        """
        self.config = config or SimulationConfig()
        self.env = simpy.Environment()
        self.rng = rng if rng is not None else SimulationRNG(self.config.seed)
        self.log = log if log is not None else EventLog(self.config.log_capacity)

        self.registry = DeviceRegistry(
            margin=self.config.device_margin,
            spacing=self.config.device_spacing,
            upper_row_y=self.config.upper_row_y,
            lower_row_y=self.config.lower_row_y,
        )
        self.bus = BusChannel()
        self.lifecycle = PacketLifecycleEngine(
            self.registry,
            self.emit,
            self.complete_transmission,
            bus_y=self.config.bus_y,
            increment=self.config.progress_increment,
        )
        self.collision_engine = CollisionEngine(
            self.bus,
            self.lifecycle,
            self.emit,
            bus_y=self.config.bus_y,
            start_size=self.config.collision_start_size,
            growth=self.config.collision_growth,
            start_alpha=self.config.collision_start_alpha,
            fade=self.config.collision_fade,
        )

        self.transmission_seq = 0
        self.active_transmission: Optional[int] = None
        self.transmissions_started = 0
        self.transmissions_completed = 0

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "transmission_started": [],  # sender, packet
            "transmission_completed": [],  # sender, recipient count
            "collision": [],  # sender, collision event
            "device_failed": [],  # device
            "bus_failed": [],  # number of packets dropped
            "reset": [],
            "tick": [],  # tick number
        }

        self.reset()

    @property
    def ticks(self) -> int:
        """Number of ticks simulated so far."""
        return int(self.env.now)

    @property
    def devices(self) -> List[Device]:
        return self.registry.devices

    @property
    def packets(self) -> List[Packet]:
        return self.lifecycle.packets

    @property
    def collisions(self) -> List[CollisionEvent]:
        return self.collision_engine.collisions

    def emit(self, category: LogCategory, message: str) -> None:
        """Write an event log entry stamped with the current tick."""
        self.log.write(category, message, self.ticks)

    def tick(self) -> None:
        """Advance the simulation by one frame.

        Deferred collisions that are due fire first, then packets advance one
        step, then collision events animate.
        """
        self.env.run(until=self.env.now + 1)
        self.lifecycle.update()
        self.collision_engine.update()
        self.call_hooks("tick", self.ticks)

    def run(self, ticks: int) -> Dict[str, Any]:
        """Run the simulation for a number of ticks.

        Args:
            ticks: Number of ticks to simulate.

        Returns:
            Dictionary of calculated metrics.
        """
        for _ in range(ticks):
            self.tick()
        return self.calculate_metrics()

    def start_transmission(self) -> Optional[Packet]:
        """Let a random working device start a transmission.

        Returns:
            The packet put on the bus, or None if no transmission could start.
        """
        if self.bus.failed:
            self.emit(LogCategory.ERROR, "Cannot start - bus has failed")
            return None

        working = self.registry.working_devices()
        if not working:
            self.emit(LogCategory.ERROR, "No working devices available")
            return None

        if not self.bus.can_transmit():
            self.emit(LogCategory.WARNING, "Cannot start - bus is busy")
            return None

        sender = self.rng.choice(working)
        self.transmission_seq += 1
        transmission_id = self.transmission_seq

        sender.start_sending()
        self.bus.set_busy(True)
        self.active_transmission = transmission_id
        self.transmissions_started += 1

        packet = self.lifecycle.create_packet(sender, transmission_id)
        self.emit(LogCategory.INFO, f"Device {sender.id} starting transmission")

        if self.rng.chance(self.config.collision_probability):
            self.env.process(self._deferred_collision(sender, transmission_id))

        self.call_hooks("transmission_started", sender, packet)
        return packet

    def _deferred_collision(self, sender: Device, transmission_id: int):
        yield self.env.timeout(self.config.collision_delay_ticks)
        if not self._is_current(sender, transmission_id):
            logger.debug(
                "Ignoring stale collision for transmission %d of device %d",
                transmission_id,
                sender.id,
            )
            return
        self.simulate_collision(sender)

    def _is_current(self, sender: Device, transmission_id: int) -> bool:
        return (
            self.active_transmission == transmission_id
            and sender.is_sending
            and self.bus.busy
            and self.lifecycle.has_transmission(transmission_id)
        )

    def simulate_collision(self, sender: Optional[Device] = None) -> Optional[CollisionEvent]:
        """Corrupt the medium, aborting every in-flight transmission.

        Args:
            sender: Device charged with the collision; random working device if omitted.

        Returns:
            The collision event, or None if no working device exists.
        """
        if sender is None:
            working = self.registry.working_devices()
            if not working:
                return None
            sender = self.rng.choice(working)

        event = self.collision_engine.simulate_collision(sender)
        self.active_transmission = None
        self.call_hooks("collision", sender, event)
        return event

    def complete_transmission(self, sender: Device) -> int:
        """Deliver sender's transmission to every other working device.

        Args:
            sender: Device whose transmission finished.

        Returns:
            Number of devices that received the transmission.
        """
        receivers = self.registry.receivers_of(sender)
        for device in receivers:
            device.stats.received += 1
        sender.stats.sent += 1
        sender.release()
        self.bus.set_busy(False)
        self.active_transmission = None
        self.transmissions_completed += 1

        self.emit(LogCategory.SUCCESS, f"Device {sender.id} completed transmission")
        self.emit(LogCategory.INFO, f"Stats for Device {sender.id}:")
        self.emit(LogCategory.INFO, f"   - Total packets sent: {sender.stats.sent}")
        self.emit(
            LogCategory.INFO,
            f"   - Successfully received by {len(receivers)} device(s)",
        )
        self.call_hooks("transmission_completed", sender, len(receivers))
        return len(receivers)

    def inject_device_failure(self) -> Optional[Device]:
        """Fail a random working device.

        Returns:
            The device that failed, or None if every device had already failed.
        """
        working = self.registry.working_devices()
        if not working:
            self.emit(LogCategory.ERROR, "All devices have failed")
            return None

        device = self.rng.choice(working)
        was_sending = device.is_sending
        self.registry.mark_failed(device)

        self.emit(LogCategory.WARNING, f"Device {device.id} has failed")
        self.emit(LogCategory.INFO, f"{len(working) - 1} working device(s) remaining")

        if was_sending:
            self.lifecycle.clear()
            self.bus.set_busy(False)
            self.active_transmission = None
            self.emit(
                LogCategory.ERROR,
                f"Ongoing transmission from Device {device.id} terminated due to failure",
            )

        self.call_hooks("device_failed", device)
        return device

    def inject_bus_failure(self) -> bool:
        """Take the backbone down, terminating any transmission on it.

        Returns:
            True if the bus newly failed, False if it had already failed.
        """
        if not self.bus.fail():
            self.emit(LogCategory.WARNING, "Bus already failed")
            return False

        dropped = self.lifecycle.clear()
        for device in self.registry.working_devices():
            if device.is_sending:
                device.release()
        self.bus.set_busy(False)
        self.active_transmission = None

        self.emit(LogCategory.ERROR, "Bus backbone has failed")
        self.emit(LogCategory.ERROR, "All ongoing transmissions terminated")
        self.emit(
            LogCategory.INFO,
            f"{len(self.registry.working_devices())} device(s) disconnected from network",
        )
        self.call_hooks("bus_failed", dropped)
        return True

    def reset(self) -> None:
        """Restore the starting state: fresh devices, idle bus, nothing in flight.

        Deferred collisions scheduled before the reset become stale and fire as no-ops.
        """
        self.registry.reset(self.config.device_count)
        self.lifecycle.clear()
        self.collision_engine.clear()
        self.bus.reset()
        self.active_transmission = None
        self.transmissions_started = 0
        self.transmissions_completed = 0

        self.emit(LogCategory.INFO, "Simulation reset")
        self.emit(LogCategory.INFO, f"{len(self.registry)} devices initialized")
        self.emit(LogCategory.SUCCESS, "Bus backbone active")
        self.call_hooks("reset")

    def device_details(self, device_id: int) -> Dict[str, Any]:
        """Get the tooltip details of a device.

        Args:
            device_id: Id of the device.

        Returns:
            Dictionary with id, status and counters.
        """
        device = self.registry.get(device_id)
        if device is None:
            raise ValueError(f"Unknown device id: {device_id}")
        return {
            "id": device.id,
            "status": device.status.value,
            "sent": device.stats.sent,
            "received": device.stats.received,
            "collisions": device.stats.collisions,
        }

    def snapshot(self) -> Dict[str, Any]:
        """Get a read-only view of the current state for rendering.

        Returns:
            Dictionary describing devices, bus, packets and collision events.
        """
        return {
            "tick": self.ticks,
            "bus": {
                "status": self.bus.status.value,
                "busy": self.bus.busy,
                "failed": self.bus.failed,
                "y": self.config.bus_y,
            },
            "devices": [
                {
                    "id": device.id,
                    "x": device.x,
                    "y": device.y,
                    "status": device.status.value,
                    "failed": device.failed,
                    "stats": {
                        "sent": device.stats.sent,
                        "received": device.stats.received,
                        "collisions": device.stats.collisions,
                    },
                }
                for device in self.registry
            ],
            "packets": [
                {
                    "id": packet.id,
                    "sender": packet.sender.id,
                    "phase": packet.phase.value,
                    "progress": packet.progress,
                    "x": packet.x,
                    "y": packet.y,
                    "is_collision": packet.is_collision,
                    "receivers": list(packet.receiver_positions),
                }
                for packet in self.lifecycle.packets
            ],
            "collisions": [
                {"x": event.x, "y": event.y, "size": event.size, "alpha": event.alpha}
                for event in self.collision_engine.collisions
            ],
        }

    def calculate_metrics(self) -> Dict[str, Any]:
        """Calculate summary metrics of the run so far.

        Returns:
            Dictionary of calculated metrics.
        """
        devices = self.registry.devices
        started = self.transmissions_started
        return {
            "ticks": self.ticks,
            "elapsed_time": self.ticks / self.config.frame_rate,
            "transmissions_started": started,
            "transmissions_completed": self.transmissions_completed,
            "total_sent": sum(d.stats.sent for d in devices),
            "total_received": sum(d.stats.received for d in devices),
            "total_collisions": sum(d.stats.collisions for d in devices),
            "success_rate": self.transmissions_completed / started if started else 0.0,
            "working_devices": len(self.registry.working_devices()),
            "bus_status": self.bus.status.value,
            "per_device": {
                d.id: {
                    "status": d.status.value,
                    "sent": d.stats.sent,
                    "received": d.stats.received,
                    "collisions": d.stats.collisions,
                }
                for d in devices
            },
        }

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback function for a specific event type.

        Args:
            event_type: The type of event to register for.
            callback: The function to call when the event occurs.
        """
        if event_type not in self.hooks:
            raise ValueError(f"Unknown hook type: {event_type}")
        self.hooks[event_type].append(callback)

    def call_hooks(self, event_type: str, *args: Any, **kwargs: Any) -> None:
        """Call all registered callbacks for the given event type.

        Args:
            event_type: The type of event that occurred.
            *args, **kwargs: Arguments to pass to the callback functions.
        """
        for callback in self.hooks.get(event_type, []):
            callback(*args, **kwargs)

    def __repr__(self) -> str:
        working = len(self.registry.working_devices())
        return f"BusSimulator(tick={self.ticks}, {working}/{len(self.registry)} working, {self.bus!r})"
