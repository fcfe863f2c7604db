"""
Individual: one vehicle's physics trial, from spawn to death.

Health counts down while the car makes no forward progress and is reset
whenever it moves right or bounces. The trial ends when health runs out or the
chassis leaves the track; fitness is the furthest x reached.
"""
from dataclasses import dataclass
from typing import Any
import numpy as np

from .genome import Phenotype

FPS = 60
MAX_HEALTH = FPS          # one nominal second of stalling
PROGRESS_EPS = 0.01       # min x gain that counts as progress
VELOCITY_EPS = 0.01


@dataclass
class Individual:
    genome: np.ndarray
    phenotype: Phenotype
    bodies: Any                       # world.VehicleBodies, or None once killed
    track_length: float
    max_health: int = MAX_HEALTH

    health: int = 0
    max_x: float = 0.0
    max_y: float = 0.0
    min_y: float = 0.0
    alive: bool = True
    ticks: int = 0

    def __post_init__(self) -> None:
        self.health = self.max_health

    @property
    def fitness(self) -> float:
        return min(self.max_x, float(self.track_length))

    def check_death(self) -> bool:
        """Read the chassis state for this tick and return True once dead."""
        if not self.alive:
            return True
        x, y = self.bodies.chassis.position
        vx, vy = self.bodies.chassis.velocity
        return self.observe(float(x), float(y), float(vx), float(vy))

    def observe(self, x: float, y: float, vx: float, vy: float) -> bool:
        """Advance the health state machine by one tick. Rule order matters."""
        if not self.alive:
            return True
        self.ticks += 1

        self.max_y = max(self.max_y, y)
        self.min_y = min(self.min_y, y)

        # out of bounds
        if x < 0.0:
            self.alive = False
            return True
        if x > self.track_length:
            self.max_x = float(self.track_length)
            self.alive = False
            return True

        # bouncing keeps the car alive even without horizontal progress
        if abs(vy) > VELOCITY_EPS:
            self.health = self.max_health

        if x > self.max_x + PROGRESS_EPS:
            self.health = self.max_health
            self.max_x = x
            return False

        self.health -= 1
        if abs(vx) < VELOCITY_EPS:
            self.health -= 1  # stalled horizontally
        if x > self.max_x:
            self.max_x = x
        if self.health <= 0:
            self.alive = False
            return True
        return False

    def kill(self, world) -> None:
        """Release physics bodies. Safe to call more than once."""
        self.alive = False
        if self.bodies is None:
            return
        bodies, self.bodies = self.bodies, None
        world.destroy_vehicle(bodies)
