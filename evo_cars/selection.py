"""
Parent selection: roulette wheel and pairwise tournament.

Both policies sample individuals without replacement and return population
indices. Every retry loop is bounded; when a policy cannot fill the pool it
raises DegenerateSelectionError carrying what it picked so far.
"""
from abc import ABC, abstractmethod
from typing import List, Sequence
import numpy as np

from .config import SelectionPolicy
from .errors import DegenerateSelectionError
from .genome import ScoredGenome


class ParentSelector(ABC):
    """Chooses `count` distinct parents from a scored population."""

    def __init__(self, max_attempts: int = 10_000):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts

    @abstractmethod
    def select_indices(self, population: Sequence[ScoredGenome], count: int,
                       rng: np.random.Generator) -> List[int]:
        """Return `count` distinct indices into `population`."""

    def select(self, population: Sequence[ScoredGenome], count: int,
               rng: np.random.Generator) -> List[np.ndarray]:
        return [population[i].genome for i in self.select_indices(population, count, rng)]


class RouletteSelector(ParentSelector):
    """Fitness-proportional selection on a 0..100 cumulative ladder."""

    def select_indices(self, population, count, rng):
        fitness = np.array([p.fitness for p in population], dtype=np.float64)
        total = float(fitness.sum())
        if not total > 0.0:
            raise DegenerateSelectionError(
                f"roulette needs positive total fitness, got {total}")

        wheel = np.cumsum(100.0 * fitness / total)
        selected = np.zeros(len(population), dtype=bool)
        parents: List[int] = []
        for _ in range(self.max_attempts):
            if len(parents) >= count:
                return parents
            u = float(rng.uniform(0.0, 100.0))
            # index 0 owns [0, wheel[0]], index i owns (wheel[i-1], wheel[i]]
            i = int(np.searchsorted(wheel, u, side="left"))
            if i >= len(wheel) or selected[i]:
                continue
            selected[i] = True
            parents.append(i)
        if len(parents) >= count:
            return parents
        raise DegenerateSelectionError(
            f"roulette filled {len(parents)}/{count} parents in {self.max_attempts} draws",
            selected=parents,
        )


class TournamentSelector(ParentSelector):
    """Head-to-head duels; the winner breeds and both duelists are used up."""

    def select_indices(self, population, count, rng):
        n = len(population)
        fitness = [p.fitness for p in population]
        selected = [False] * n
        parents: List[int] = []
        for _ in range(self.max_attempts):
            if len(parents) >= count:
                return parents
            free = [i for i in range(n) if not selected[i]]
            if len(free) < 2 or len({fitness[i] for i in free}) < 2:
                break  # no decisive duel left
            a, b = (int(v) for v in rng.integers(0, n, size=2))
            if a == b or selected[a] or selected[b]:
                continue
            if fitness[a] == fitness[b]:
                continue  # tie: nobody is consumed
            winner = a if fitness[a] > fitness[b] else b
            parents.append(winner)
            selected[a] = selected[b] = True
        if len(parents) >= count:
            return parents
        raise DegenerateSelectionError(
            f"tournament filled {len(parents)}/{count} parents before running out of duels",
            selected=parents,
            used=[i for i in range(n) if selected[i]],
        )


def uniform_fill(population: Sequence[ScoredGenome], chosen: Sequence[int], count: int,
                 rng: np.random.Generator, used: Sequence[int] = ()) -> List[int]:
    """Complete `chosen` to `count` distinct indices by uniform sampling.

    Indices in `used` (consumed by the failed policy) are drawn only once the
    untouched individuals run out.
    """
    chosen = list(chosen)[:count]
    taken = set(chosen)
    consumed = set(used) - taken
    fresh = [i for i in range(len(population)) if i not in taken and i not in consumed]
    for rest in (fresh, sorted(consumed)):
        need = min(count - len(chosen), len(rest))
        if need > 0:
            picks = rng.choice(np.array(rest, dtype=int), size=need, replace=False)
            chosen.extend(int(i) for i in picks)
    return chosen


def make_selector(policy: SelectionPolicy, max_attempts: int = 10_000) -> ParentSelector:
    policy = SelectionPolicy(policy)
    if policy is SelectionPolicy.ROULETTE:
        return RouletteSelector(max_attempts)
    return TournamentSelector(max_attempts)
