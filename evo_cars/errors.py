"""
Exception hierarchy for evo_cars.
"""
from typing import List, Optional


class EvoCarsError(Exception):
    """Base for all evo_cars exceptions."""

    pass


class ConfigError(EvoCarsError):
    """Invalid configuration values."""

    pass


class InvalidGenomeError(EvoCarsError):
    """Genome of the wrong length or shape."""

    pass


class EvolutionError(EvoCarsError):
    """Evolution process failures."""

    pass


class DegenerateSelectionError(EvolutionError):
    """Selection could not fill the parent pool.

    `selected` holds the population indices chosen before the failure so the
    caller can keep them and complete the pool another way. `used` holds every
    index the policy consumed, including tournament losers.
    """

    def __init__(self, message: str, selected: Optional[List[int]] = None,
                 used: Optional[List[int]] = None):
        super().__init__(message)
        self.selected = list(selected or [])
        self.used = sorted(set(self.selected) | set(used or []))


class CrossoverRepairExhaustedError(EvolutionError):
    """No valid pair of children found within the retry budget."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class PhysicsError(EvoCarsError):
    """The physics world could not build or run a vehicle."""

    pass
