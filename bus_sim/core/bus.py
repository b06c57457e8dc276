"""Bus channel for network simulation.

This module defines the BusChannel class, the single shared medium every
device transmits on.
"""

from bus_sim.core.enums import BusStatus


class BusChannel:
    """Represents the shared backbone.

    Attributes:
        busy: Whether a transmission currently occupies the medium.
        failed: Whether the backbone is down. Stays set until reset.
    """

    def __init__(self) -> None:
        """Initialize an idle, working bus."""
        self.busy = False
        self.failed = False

    def fail(self) -> bool:
        """Take the backbone down.

        Returns:
            True if the bus newly failed, False if it had already failed.
        """
        if self.failed:
            return False
        self.failed = True
        return True

    def set_busy(self, busy: bool) -> None:
        """Mark the medium as occupied or free.

        Args:
            busy: New occupancy flag.
        """
        self.busy = busy

    def can_transmit(self) -> bool:
        """Whether a new transmission may claim the medium."""
        return not self.failed and not self.busy

    def reset(self) -> None:
        """Clear both flags."""
        self.busy = False
        self.failed = False

    @property
    def status(self) -> BusStatus:
        """Display state of the bus; a failed bus reports failed even while busy."""
        if self.failed:
            return BusStatus.FAILED
        if self.busy:
            return BusStatus.BUSY
        return BusStatus.IDLE

    def __repr__(self) -> str:
        return f"BusChannel({self.status.value})"
