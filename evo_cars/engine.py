"""
EvolutionEngine: evaluates one car at a time, one physics tick per call, and
breeds the next generation when every slot has been scored.

The engine owns all run state (genomes, scores, counters, rng) and talks to
the physics world only through create_vehicle / destroy_vehicle / step.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import math
import numpy as np
from loguru import logger

from .config import EvolutionConfig
from .errors import DegenerateSelectionError, PhysicsError
from .evo import breed, mutate_all
from .genome import ScoredGenome, check_genome, decode, rectangular_to_polar, random_genome
from .individual import MAX_HEALTH, Individual
from .selection import make_selector, uniform_fill


@dataclass
class GenerationStats:
    generation: int
    best: float
    mean: float
    worst: float
    selection_fallback: bool = False


@dataclass
class Telemetry:
    """Read-only snapshot for renderers."""
    generation: int
    car_number: int
    cars_generated: int
    fitness: float
    best_fitness: float
    health: int = 0
    position: Tuple[float, float] = (0.0, 0.0)
    angle: float = 0.0
    chassis: List[Tuple[float, float]] = field(default_factory=list)
    wheels: List[Tuple[float, float, float]] = field(default_factory=list)  # x, y, radius


class EvolutionEngine:
    def __init__(self, config: EvolutionConfig, world, rng: Optional[np.random.Generator] = None,
                 max_health: int = MAX_HEALTH):
        self.config = config
        self.world = world
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.max_health = max_health
        self.selector = make_selector(config.selection, config.max_selection_attempts)

        self.genomes: List[np.ndarray] = []
        self.scored: List[ScoredGenome] = []
        self.history: List[GenerationStats] = []
        self.generation = 0
        self.slot = 0
        self.cars_generated = 0
        self.best_fitness = 0.0
        self.current: Optional[Individual] = None
        self._seed_population()

    # ---------- lifecycle ----------
    def _seed_population(self) -> None:
        # generation 0 comes from random phenotypes, stored encoded like every later one
        self.genomes = [random_genome(self.rng) for _ in range(self.config.population_size)]
        self.scored = []

    def reset(self, genomes: Optional[List[np.ndarray]] = None) -> None:
        """Abort the run: free the live car and start over from generation 0."""
        if self.current is not None:
            self.current.kill(self.world)
            self.current = None
        self.generation = 0
        self.slot = 0
        self.cars_generated = 0
        self.best_fitness = 0.0
        self.history = []
        if genomes is None:
            self._seed_population()
        else:
            self.load_population(genomes)

    def load_population(self, genomes: List[np.ndarray]) -> None:
        """Replace the genomes still waiting for evaluation in this generation."""
        if len(genomes) != self.config.population_size:
            raise ValueError(f"expected {self.config.population_size} genomes, got {len(genomes)}")
        self.genomes = [check_genome(g).copy() for g in genomes]
        self.scored = []

    def _spawn(self) -> bool:
        genome = self.genomes[self.slot]
        phenotype = decode(genome, self.rng)
        try:
            bodies = self.world.create_vehicle(phenotype)
        except PhysicsError as e:
            logger.warning("Car {} of generation {} failed to spawn: {}", self.slot, self.generation, e)
            self._record(genome, 0.0, ticks=0)
            return False
        self.current = Individual(genome=genome, phenotype=phenotype, bodies=bodies,
                                  track_length=self.config.track_length, max_health=self.max_health)
        return True

    # ---------- ticking ----------
    def tick(self) -> bool:
        """One physics step for the live car. Returns True if a car died on this tick."""
        if self.current is None and not self._spawn():
            return True
        self.world.step()
        car = self.current
        if not car.check_death():
            return False
        car.kill(self.world)
        self.current = None
        self._record(car.genome, car.fitness, ticks=car.ticks)
        return True

    def run_generation(self, max_ticks: Optional[int] = None) -> GenerationStats:
        """Tick until the current generation has been bred."""
        start = self.generation
        ticks = 0
        while self.generation == start:
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                raise RuntimeError(f"generation {start} not finished after {max_ticks} ticks")
        return self.history[-1]

    def _record(self, genome: np.ndarray, fitness: float, ticks: int) -> None:
        logger.debug("Gen {} car {} died after {} ticks, fitness {:.2f}",
                     self.generation, self.slot, ticks, fitness)
        self.scored.append(ScoredGenome(genome=genome, fitness=float(fitness)))
        self.best_fitness = max(self.best_fitness, float(fitness))
        self.cars_generated += 1
        self.slot += 1
        if self.slot == self.config.population_size:
            self._next_generation()

    # ---------- breeding ----------
    def _select_parents(self) -> Tuple[List[np.ndarray], bool]:
        count = self.config.parent_count
        try:
            idx = self.selector.select_indices(self.scored, count, self.rng)
            fallback = False
        except DegenerateSelectionError as e:
            logger.warning("Selection degenerate in generation {} ({}); filling uniformly", self.generation, e)
            idx = uniform_fill(self.scored, e.selected, count, self.rng, used=e.used)
            fallback = True
        return [self.scored[i].genome for i in idx], fallback

    def _next_generation(self) -> None:
        fitness = np.array([s.fitness for s in self.scored])
        parents, fallback = self._select_parents()
        children = breed(parents, self.config.population_size, self.rng,
                         self.config.max_crossover_attempts)
        children = mutate_all(children, self.rng, self.config.mutation_rate, self.config.mutation_effect)

        stats = GenerationStats(generation=self.generation, best=float(fitness.max()),
                                mean=float(fitness.mean()), worst=float(fitness.min()),
                                selection_fallback=fallback)
        self.history.append(stats)
        logger.info("Generation {} done: best {:.2f} mean {:.2f} worst {:.2f}",
                    stats.generation, stats.best, stats.mean, stats.worst)

        self.genomes = children
        self.scored = []
        self.slot = 0
        self.generation += 1

    # ---------- presentation ----------
    def telemetry(self) -> Telemetry:
        t = Telemetry(generation=self.generation, car_number=self.slot + 1,
                      cars_generated=self.cars_generated, fitness=0.0,
                      best_fitness=self.best_fitness)
        car = self.current
        if car is None or car.bodies is None:
            return t
        chassis = car.bodies.chassis
        x, y = (float(v) for v in chassis.position)
        angle = float(chassis.angle)
        c, s = math.cos(angle), math.sin(angle)
        ring = sorted(car.phenotype.vertices, key=lambda v: rectangular_to_polar(v)[1])
        t.fitness = car.fitness
        t.health = car.health
        t.position = (x, y)
        t.angle = angle
        t.chassis = [(x + c * vx - s * vy, y + s * vx + c * vy) for vx, vy in ring]
        t.wheels = [(float(w.position[0]), float(w.position[1]), r)
                    for w, r in zip(car.bodies.wheels, car.bodies.wheel_radii)]
        return t
