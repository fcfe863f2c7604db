"""
Evolution helpers: two-point crossover with chassis repair, and mutation.
"""
from typing import List, Sequence, Tuple
import numpy as np
from loguru import logger

from .errors import CrossoverRepairExhaustedError
from .genome import GENOME_LENGTH, chassis_is_valid, chassis_vertices

# Cuts only fall on gene-pair boundaries: point p splits before gene p - 1.
CROSSOVER_POINTS = np.arange(1, GENOME_LENGTH, 2)


def crossover(parent0: np.ndarray, parent1: np.ndarray, rng: np.random.Generator,
              max_attempts: int = 1000) -> Tuple[np.ndarray, np.ndarray]:
    """Two-point crossover, redrawing the cut points until both children have a
    non-degenerate chassis.

    Termination is only probabilistic, hence the attempt budget.
    """
    for _ in range(max_attempts):
        a, b = np.sort(rng.choice(CROSSOVER_POINTS, size=2, replace=False))
        lo, hi = int(a) - 1, int(b) - 1
        child0 = parent0.copy()
        child1 = parent1.copy()
        child0[lo:hi] = parent1[lo:hi]
        child1[lo:hi] = parent0[lo:hi]
        if chassis_is_valid(chassis_vertices(child0)) and chassis_is_valid(chassis_vertices(child1)):
            return child0, child1
    raise CrossoverRepairExhaustedError(
        f"no valid children after {max_attempts} crossover attempts", attempts=max_attempts)


def breed(parents: Sequence[np.ndarray], population_size: int, rng: np.random.Generator,
          max_attempts: int = 1000) -> List[np.ndarray]:
    """Produce `population_size` children from the parent pool in two passes.

    Each pass shuffles the pool and crosses consecutive pairs. An odd leftover is
    paired with the first parent of the same pass.
    """
    if not parents:
        raise ValueError("breed needs at least one parent")
    children: List[np.ndarray] = []
    for _ in range(2):
        pool = [parents[i] for i in rng.permutation(len(parents))]
        if len(pool) % 2:
            pool.append(pool[0])
        for j in range(0, len(pool), 2):
            p0, p1 = pool[j], pool[j + 1]
            try:
                children.extend(crossover(p0, p1, rng, max_attempts))
            except CrossoverRepairExhaustedError as e:
                logger.warning("Crossover repair gave up ({}); copying parents", e)
                children.extend([p0.copy(), p1.copy()])
    return children[:population_size]


def mutate(genome: np.ndarray, rng: np.random.Generator, rate: float, effect: float) -> np.ndarray:
    """Per-gene uniform perturbation in [-effect, effect] with probability `rate`.

    Genes are not clamped back into their generation ranges.
    """
    v = genome.copy()
    if rate <= 0.0:
        return v
    mask = rng.random(v.shape) <= rate
    v[mask] += rng.uniform(-effect, effect, size=int(mask.sum()))
    return v


def mutate_all(children: Sequence[np.ndarray], rng: np.random.Generator,
               rate: float, effect: float) -> List[np.ndarray]:
    return [mutate(c, rng, rate, effect) for c in children]
