"""Seedable random source for the bus simulator.

Every random decision of the simulation (sender selection, failure targets,
collision draws) goes through one of these objects, so a run is reproducible
from its seed and tests can substitute a scripted source.
"""

from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class SimulationRNG:
    """
    A pseudo-random number generator based on a Linear Congruential Generator (LCG).
    Supports random floats in [0, 1), probability draws, and uniform selection from a sequence.
    """

    # Linear Congruential Generator (LCG) algorithm parameters
    MULTIPLIER = 1664525
    INCREMENT = 1013904223
    MODULUS = 2**32

    def __init__(self, seed: int = 0):
        """
        Initialize the generator with a seed value.

        Args:
            seed (int): The initial seed value for the generator.
        """
        self.seed(seed)

    def seed(self, seed: Optional[int]) -> None:
        """
        Restart the sequence from a seed.

        Args:
            seed (int): The new seed, or None for zero.
        """
        self.state = (seed or 0) % self.MODULUS

    def random(self) -> float:
        """
        Generate a pseudo-random float between 0 and 1.

        Returns:
            float: A pseudo-random number in the range [0, 1).
        """
        self.state = (self.MULTIPLIER * self.state + self.INCREMENT) % self.MODULUS
        return self.state / self.MODULUS

    def chance(self, probability: float) -> bool:
        """
        Draw once and report whether the draw fell below the probability.

        Args:
            probability (float): Probability of returning True.

        Returns:
            bool: True with the given probability.
        """
        return self.random() < probability

    def choice(self, items: Sequence[T]) -> T:
        """
        Select a random item from a non-empty sequence.

        Args:
            items (Sequence): The items to choose from.

        Returns:
            Any: A randomly selected item.

        Raises:
            ValueError: If the input sequence is empty.
        """
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        index = int(self.random() * len(items))
        return items[index]
