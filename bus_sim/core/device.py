"""Device classes for bus network simulation.

This module defines the Device class, which represents one station attached
to the shared bus, and the DeviceRegistry that owns the fixed device set.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from bus_sim.core.enums import DeviceStatus


@dataclass
class DeviceStats:
    """Per-device counters. Counters only ever increase.

    Attributes:
        sent: Transmissions this device completed.
        received: Transmissions this device received from other senders.
        collisions: Transmissions of this device aborted by a collision.
    """

    sent: int = 0
    received: int = 0
    collisions: int = 0


@dataclass(eq=False)
class Device:
    """Represents a network station attached to the bus.

    Attributes:
        id: Unique identifier, stable for the lifetime of the registry.
        x: Horizontal anchor used by renderers.
        y: Vertical anchor used by renderers.
        status: Current device state.
        failed: Whether the device is permanently out of service.
        stats: Transmission counters.
    """

    id: int
    x: float
    y: float
    status: DeviceStatus = DeviceStatus.IDLE
    failed: bool = False
    stats: DeviceStats = field(default_factory=DeviceStats)

    @property
    def is_sending(self) -> bool:
        """Whether the device currently owns a transmission."""
        return self.status is DeviceStatus.SENDING

    def start_sending(self) -> None:
        """Mark the device as the owner of a transmission."""
        if not self.failed:
            self.status = DeviceStatus.SENDING

    def release(self) -> None:
        """Return the device to idle. Failed devices stay failed."""
        if not self.failed:
            self.status = DeviceStatus.IDLE

    def mark_failed(self) -> None:
        """Take the device out of service. Safe to repeat."""
        self.failed = True
        self.status = DeviceStatus.FAILED

    @property
    def anchor(self) -> Tuple[float, float]:
        """Renderer position of the device."""
        return self.x, self.y

    def __repr__(self) -> str:
        """Return string representation of the device.

        Returns:
            String representation of the device.
        """
        return f"Device({self.id}, {self.status.value})"


class DeviceRegistry:
    """Owns the fixed set of devices attached to the bus.

    Attributes:
        devices: Devices in id order.
    """

    def __init__(
        self,
        margin: float = 150,
        spacing: float = 150,
        upper_row_y: float = 150,
        lower_row_y: float = 450,
    ) -> None:
        """Initialize an empty registry.

        Args:
            margin: X coordinate of the first device.
            spacing: Horizontal distance between neighbouring devices.
            upper_row_y: Y coordinate of even-indexed devices.
            lower_row_y: Y coordinate of odd-indexed devices.
        """
        self.margin = margin
        self.spacing = spacing
        self.upper_row_y = upper_row_y
        self.lower_row_y = lower_row_y
        self.devices: List[Device] = []

    def reset(self, count: int = 6) -> List[Device]:
        """Replace all devices with fresh idle ones.

        Args:
            count: Number of devices to create.

        Returns:
            The new device list.
        """
        self.devices = [
            Device(
                id=index + 1,
                x=self.margin + index * self.spacing,
                y=self.upper_row_y if index % 2 == 0 else self.lower_row_y,
            )
            for index in range(count)
        ]
        return self.devices

    def working_devices(self) -> List[Device]:
        """Get the devices that have not failed.

        Returns:
            Non-failed devices in id order; empty when every device failed.
        """
        return [device for device in self.devices if not device.failed]

    def receivers_of(self, sender: Device) -> List[Device]:
        """Get the working devices that hear a transmission from sender."""
        return [device for device in self.working_devices() if device is not sender]

    def mark_failed(self, device: Device) -> None:
        """Take a device out of service.

        Args:
            device: The device to fail. Callers check ``device.failed`` first
                when they need to report a new failure.
        """
        device.mark_failed()

    def get(self, device_id: int) -> Optional[Device]:
        """Look up a device by id.

        Args:
            device_id: Id of the device.

        Returns:
            The device, or None if no device has that id.
        """
        for device in self.devices:
            if device.id == device_id:
                return device
        return None

    def __iter__(self) -> Iterator[Device]:
        return iter(self.devices)

    def __len__(self) -> int:
        return len(self.devices)
