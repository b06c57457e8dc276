"""Enumerations for bus network simulation.

This module defines enumerations used throughout the bus simulator.
"""

from enum import Enum


class DeviceStatus(Enum):
    """Enum for the state of a network device.

    Attributes:
        IDLE: Device is attached and not transmitting.
        SENDING: Device currently owns the bus.
        FAILED: Device is permanently out of service.
    """

    IDLE = "idle"
    SENDING = "sending"
    FAILED = "failed"


class BusStatus(Enum):
    """Enum for the display state of the shared bus."""

    IDLE = "idle"
    BUSY = "busy"
    FAILED = "failed"


class PacketPhase(Enum):
    """Enum for the phases of a transmission.

    Attributes:
        DESCENDING: Packet travels from the sender down to the bus line.
        BROADCASTING: Packet dwells on the bus line.
        ASCENDING: Packet fans out from the bus to every receiver.
    """

    DESCENDING = "descending"
    BROADCASTING = "broadcasting"
    ASCENDING = "ascending"


class LogCategory(Enum):
    """Enum for event log entry categories."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
