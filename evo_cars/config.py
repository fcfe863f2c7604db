"""
Run configuration for the evolution engine.
"""
from dataclasses import dataclass
from enum import Enum

from .errors import ConfigError


class SelectionPolicy(str, Enum):
    ROULETTE = "roulette"
    TOURNAMENT = "tournament"


@dataclass
class EvolutionConfig:
    population_size: int = 20
    mutation_rate: float = 0.2
    mutation_effect: float = 0.5
    selection: SelectionPolicy = SelectionPolicy.ROULETTE
    track_length: int = 300
    seed: int = 7
    # retry budgets for the bounded loops in selection and crossover
    max_selection_attempts: int = 10_000
    max_crossover_attempts: int = 1000

    def __post_init__(self) -> None:
        try:
            self.selection = SelectionPolicy(self.selection)
        except ValueError:
            raise ConfigError(f"unknown selection policy {self.selection!r}") from None
        if self.population_size < 2 or self.population_size % 2:
            raise ConfigError(f"population_size must be an even integer >= 2, got {self.population_size}")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigError(f"mutation_rate must be in [0, 1], got {self.mutation_rate}")
        if not 0.0 <= self.mutation_effect <= 1.0:
            raise ConfigError(f"mutation_effect must be in [0, 1], got {self.mutation_effect}")
        if int(self.track_length) != self.track_length or self.track_length <= 0:
            raise ConfigError(f"track_length must be a positive integer, got {self.track_length}")
        if self.max_selection_attempts < 1 or self.max_crossover_attempts < 1:
            raise ConfigError("retry budgets must be >= 1")

    @property
    def parent_count(self) -> int:
        return self.population_size // 2
