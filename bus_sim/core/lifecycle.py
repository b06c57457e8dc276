"""Packet lifecycle engine for bus network simulation.

Each tick moves every in-flight packet through its three phases:

1. descending: from the sender's anchor down to the bus line,
2. broadcasting: held on the bus line,
3. ascending: fanned out from the bus line up to every working receiver.

Finishing the ascending phase completes the transmission. Packets owned by a
sender that has since failed are left alone here; failure handling clears them.
"""

from typing import Callable, List

from bus_sim.core.device import Device, DeviceRegistry
from bus_sim.core.enums import LogCategory, PacketPhase
from bus_sim.core.packet import Packet, lerp

EmitFunc = Callable[[LogCategory, str], None]
CompleteFunc = Callable[[Device], object]


class PacketLifecycleEngine:
    """Advances in-flight packets and owns the active packet set.

    Attributes:
        registry: Devices that packets are sent to.
        bus_y: Vertical position of the bus line.
        increment: Progress added to every packet per tick.
        packets: Packets currently in flight.
    """

    def __init__(
        self,
        registry: DeviceRegistry,
        emit: EmitFunc,
        on_complete: CompleteFunc,
        bus_y: float = 300,
        increment: float = 0.02,
    ) -> None:
        """Initialize the engine.

        Args:
            registry: Device registry used to find receivers.
            emit: Callback writing an event log entry.
            on_complete: Called with the sender when a transmission finishes.
            bus_y: Vertical position of the bus line.
            increment: Progress added per tick.
        """
        self.registry = registry
        self.emit = emit
        self.on_complete = on_complete
        self.bus_y = bus_y
        self.increment = increment
        self.packets: List[Packet] = []

    def create_packet(
        self, sender: Device, transmission_id: int, is_collision: bool = False
    ) -> Packet:
        """Put a new packet on its way down to the bus.

        The caller makes sure no other transmission is in flight.

        Args:
            sender: Device sending the packet.
            transmission_id: Sequence number of the transmission.
            is_collision: Whether the packet is a collision artifact.

        Returns:
            The created packet.
        """
        packet = Packet(sender, transmission_id, is_collision)
        self.packets.append(packet)
        if not is_collision:
            self.emit(LogCategory.INFO, f"Device {sender.id} created new packet")
        return packet

    def update(self) -> None:
        """Advance every packet by one tick."""
        for packet in list(self.packets):
            self._step(packet)

    def _step(self, packet: Packet) -> None:
        finished = packet.advance(self.increment)
        sender = packet.sender

        if packet.phase is PacketPhase.DESCENDING:
            packet.y = lerp(sender.y, self.bus_y, packet.progress)
            if finished:
                packet.enter_phase(PacketPhase.BROADCASTING)
                self.emit(LogCategory.INFO, f"Packet from Device {sender.id} reached the bus")

        elif packet.phase is PacketPhase.BROADCASTING:
            packet.y = self.bus_y
            if finished:
                packet.enter_phase(PacketPhase.ASCENDING)
                self.emit(
                    LogCategory.INFO, f"Packet from Device {sender.id} broadcasting on bus"
                )

        elif packet.phase is PacketPhase.ASCENDING:
            packet.receiver_positions = [
                (device.id, device.x, lerp(self.bus_y, device.y, packet.progress))
                for device in self.registry.receivers_of(sender)
            ]
            if finished:
                self.packets.remove(packet)
                if not packet.is_collision:
                    self.on_complete(sender)

    def has_transmission(self, transmission_id: int) -> bool:
        """Whether a packet of the given transmission is still in flight."""
        return any(
            packet.transmission_id == transmission_id and not packet.is_collision
            for packet in self.packets
        )

    def clear(self) -> int:
        """Drop every in-flight packet.

        Returns:
            Number of packets dropped.
        """
        count = len(self.packets)
        self.packets = []
        return count

    def __len__(self) -> int:
        return len(self.packets)
