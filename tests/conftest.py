"""Shared fixtures for the bus simulator tests."""

import matplotlib

matplotlib.use("Agg")

import pytest

from bus_sim.config import SimulationConfig
from bus_sim.core.simulator import BusSimulator
from bus_sim.utils.rng import SimulationRNG


class ScriptedRNG(SimulationRNG):
    """Random source returning predetermined draws and picks.

    ``draws`` feed ``random()``; ``picks`` are device ids that ``choice()``
    selects in order. Once a script runs out, draws default to 0.99 (never
    below a probability under 1) and picks default to the first item.
    """

    def __init__(self, draws=None, picks=None):
        super().__init__(0)
        self.draws = list(draws or [])
        self.picks = list(picks or [])

    def random(self):
        if self.draws:
            return self.draws.pop(0)
        return 0.99

    def choice(self, items):
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        if self.picks:
            wanted = self.picks.pop(0)
            for item in items:
                if item.id == wanted:
                    return item
            raise AssertionError(f"device {wanted} is not among the choices")
        return items[0]


@pytest.fixture
def rng():
    return ScriptedRNG()


@pytest.fixture
def quiet_config():
    """Configuration with random collisions disabled."""
    return SimulationConfig(collision_probability=0.0)


@pytest.fixture
def simulator(quiet_config, rng):
    return BusSimulator(quiet_config, rng=rng)
