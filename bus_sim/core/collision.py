"""Collision engine for bus network simulation.

A collision corrupts the shared medium: every in-flight packet is dropped, the
bus is released and the triggering sender goes back to idle. Collisions are not
pairwise; only the triggering sender is charged with one.

Collision events are cosmetic rings that grow and fade out on their own. They
carry no transmission state.
"""

from dataclasses import dataclass
from typing import Callable, List

from bus_sim.core.bus import BusChannel
from bus_sim.core.device import Device
from bus_sim.core.enums import LogCategory
from bus_sim.core.lifecycle import PacketLifecycleEngine


@dataclass
class CollisionEvent:
    """A fading collision marker.

    Attributes:
        x: Horizontal position.
        y: Vertical position.
        size: Current diameter.
        alpha: Current intensity; the event disappears at zero.
    """

    x: float
    y: float
    size: float = 10
    alpha: float = 255

    def step(self, growth: float, fade: float) -> bool:
        """Animate one tick.

        Args:
            growth: Size added.
            fade: Intensity removed.

        Returns:
            True while the event is still visible.
        """
        self.size += growth
        self.alpha -= fade
        return self.alpha > 0


class CollisionEngine:
    """Applies collisions and animates collision events.

    Attributes:
        collisions: Visible collision events.
    """

    def __init__(
        self,
        bus: BusChannel,
        lifecycle: PacketLifecycleEngine,
        emit: Callable[[LogCategory, str], None],
        bus_y: float = 300,
        start_size: float = 10,
        growth: float = 2,
        start_alpha: float = 255,
        fade: float = 5,
    ) -> None:
        self.bus = bus
        self.lifecycle = lifecycle
        self.emit = emit
        self.bus_y = bus_y
        self.start_size = start_size
        self.growth = growth
        self.start_alpha = start_alpha
        self.fade = fade
        self.collisions: List[CollisionEvent] = []

    def simulate_collision(self, sender: Device) -> CollisionEvent:
        """Abort the transmission on the bus and charge sender with a collision.

        Args:
            sender: Device whose transmission collided.

        Returns:
            The new collision event.
        """
        sender.stats.collisions += 1
        event = self.create_collision(sender.x, self.bus_y)
        owners = {packet.sender for packet in self.lifecycle.packets}
        self.lifecycle.clear()
        self.bus.set_busy(False)
        for owner in owners | {sender}:
            owner.release()

        self.emit(
            LogCategory.ERROR,
            f"Collision detected! Device {sender.id}'s transmission failed",
        )
        self.emit(
            LogCategory.INFO,
            f"Total collisions for Device {sender.id}: {sender.stats.collisions}",
        )
        return event

    def create_collision(self, x: float, y: float) -> CollisionEvent:
        """Add a collision marker at the given position."""
        event = CollisionEvent(x, y, self.start_size, self.start_alpha)
        self.collisions.append(event)
        return event

    def update(self) -> None:
        """Animate every collision event and drop the ones that faded out."""
        self.collisions = [
            event for event in self.collisions if event.step(self.growth, self.fade)
        ]

    def clear(self) -> None:
        self.collisions = []
