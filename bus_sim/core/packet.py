"""Packet class for bus network simulation.

This module defines the Packet class, which represents one transmission
attempt traversing the shared bus.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from bus_sim.core.device import Device
from bus_sim.core.enums import PacketPhase


def lerp(start: float, stop: float, amount: float) -> float:
    """Linearly interpolate between two coordinates.

    Args:
        start: Coordinate at amount 0.
        stop: Coordinate at amount 1.
        amount: Interpolation fraction, clamped to [0, 1].

    Returns:
        The interpolated coordinate.
    """
    amount = float(np.clip(amount, 0.0, 1.0))
    return start + (stop - start) * amount


@dataclass(eq=False)
class Packet:
    """Represents an in-flight transmission.

    Attributes:
        sender: Device that owns the transmission.
        transmission_id: Sequence number of the transmission that created the packet.
        is_collision: Whether the packet is a collision artifact rather than a transmission.
        id: Unique identifier for the packet.
        x: Horizontal render position.
        y: Vertical render position.
        phase: Current lifecycle phase.
        progress: Progress within the current phase, in [0, 1].
        receiver_positions: (device id, x, y) of each fan-out copy while ascending.
    """

    sender: Device
    transmission_id: int
    is_collision: bool = False
    id: int = field(init=False)
    x: float = field(init=False)
    y: float = field(init=False)
    phase: PacketPhase = PacketPhase.DESCENDING
    progress: float = 0.0
    receiver_positions: List[Tuple[int, float, float]] = field(default_factory=list)

    _id_counter: int = field(default=0, init=False, repr=False)

    def __post_init__(self):
        """Initialize derived attributes after initialization."""
        type(self)._id_counter += 1
        self.id = type(self)._id_counter
        self.x, self.y = self.sender.anchor

    def advance(self, increment: float) -> bool:
        """Add one tick of progress.

        Args:
            increment: Progress added per tick.

        Returns:
            True if the current phase has finished.
        """
        # Rounded so that a whole number of increments lands exactly on 1.0.
        self.progress = round(min(self.progress + increment, 1.0), 9)
        return self.progress >= 1.0

    def enter_phase(self, phase: PacketPhase) -> None:
        """Move to the next phase and restart progress.

        Args:
            phase: The phase to enter.
        """
        self.phase = phase
        self.progress = 0.0

    def __repr__(self) -> str:
        return (
            f"Packet({self.id}, sender={self.sender.id}, "
            f"{self.phase.value}, {self.progress:.2f})"
        )
