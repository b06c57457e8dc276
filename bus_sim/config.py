"""Configuration settings for the bus network simulator."""

from dataclasses import dataclass


@dataclass
class SimulationConfig:
    """Fixed constants of a simulation run.

    Attributes:
        device_count: Number of devices created on reset.
        progress_increment: Phase progress added on every tick.
        collision_probability: Chance that a new transmission will collide.
        collision_delay: Seconds between transmission start and its collision.
        frame_rate: Ticks per simulated second.
        log_capacity: Number of event log entries kept by the sink.
        canvas_width: Width of the rendering coordinate space.
        canvas_height: Height of the rendering coordinate space.
        device_margin: X coordinate of the first device.
        device_spacing: Horizontal distance between neighbouring devices.
        upper_row_y: Y coordinate of even-indexed devices.
        lower_row_y: Y coordinate of odd-indexed devices.
        collision_start_size: Initial diameter of a collision ring.
        collision_growth: Size added to a collision ring per tick.
        collision_start_alpha: Initial intensity of a collision ring.
        collision_fade: Intensity removed from a collision ring per tick.
        seed: Seed for the default random source.
    """

    device_count: int = 6
    progress_increment: float = 0.02
    collision_probability: float = 0.3
    collision_delay: float = 1.0
    frame_rate: int = 30
    log_capacity: int = 50
    canvas_width: float = 1000
    canvas_height: float = 600
    device_margin: float = 150
    device_spacing: float = 150
    upper_row_y: float = 150
    lower_row_y: float = 450
    collision_start_size: float = 10
    collision_growth: float = 2
    collision_start_alpha: float = 255
    collision_fade: float = 5
    seed: int = 42

    def __post_init__(self):
        """Validate the configuration."""
        if self.device_count <= 0:
            raise ValueError(f"device_count must be positive, got {self.device_count}")
        if not 0 < self.progress_increment <= 1:
            raise ValueError(
                f"progress_increment must be in (0, 1], got {self.progress_increment}"
            )
        if not 0 <= self.collision_probability <= 1:
            raise ValueError(
                f"collision_probability must be in [0, 1], got {self.collision_probability}"
            )
        if self.frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive, got {self.frame_rate}")
        if self.log_capacity <= 0:
            raise ValueError(f"log_capacity must be positive, got {self.log_capacity}")
        if self.collision_fade <= 0:
            raise ValueError(f"collision_fade must be positive, got {self.collision_fade}")

    @property
    def bus_y(self) -> float:
        """Y coordinate of the bus line."""
        return self.canvas_height / 2

    @property
    def collision_delay_ticks(self) -> int:
        """Deferred collision delay expressed in ticks."""
        return max(1, round(self.collision_delay * self.frame_rate))
