"""
Genome layout, vehicle definitions and the codec between them.

A genome is a flat float vector of GENOME_LENGTH genes:
  [0, 16)   8 chassis vertices as (magnitude, angle) polar pairs, in vertex order
  [16, 22)  3 wheels as (radius, vertex index) pairs; index -1 = no wheel

Decoding never sorts vertices. Angular ordering is only applied when the
physics world builds the chassis shapes.
"""
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple
import math
import numpy as np

from .errors import InvalidGenomeError

NUM_VERTICES = 8
NUM_WHEELS = 3
CHASSIS_GENES = NUM_VERTICES * 2
GENOME_LENGTH = CHASSIS_GENES + NUM_WHEELS * 2

# chassis generation ranges
MIN_ANGLE, MAX_ANGLE = 0.0, 2.0 * math.pi
MIN_MAGNITUDE, MAX_MAGNITUDE = 0.1, 1.0

# wheel generation ranges
MIN_WHEEL_RADIUS, MAX_WHEEL_RADIUS = 0.1, 0.3
RANDOM_WHEEL_DENSITY = (50.0, 100.0)
DECODED_WHEEL_DENSITY = (50.0, 75.0)
NO_WHEEL = -1
WHEEL_VERTEX_POOL = (NO_WHEEL,) * NUM_WHEELS + tuple(range(NUM_VERTICES))

# Box2D linear slop; vertices closer than half of it (squared) make zero-area shapes
LINEAR_SLOP = 0.005
DEGENERACY_EPSILON = 0.5 * LINEAR_SLOP

Point = Tuple[float, float]


@dataclass(frozen=True)
class WheelSpec:
    radius: float
    density: float
    vertex: int

    @property
    def attached(self) -> bool:
        return self.vertex != NO_WHEEL


@dataclass
class Phenotype:
    """Decoded vehicle: chassis vertices around the body origin plus wheels."""
    vertices: List[Point] = field(default_factory=list)
    wheels: List[WheelSpec] = field(default_factory=list)


@dataclass
class ScoredGenome:
    genome: np.ndarray
    fitness: float


# ---------- geometry ----------

def polar_to_rectangular(magnitude: float, angle: float) -> Point:
    return (magnitude * math.cos(angle), magnitude * math.sin(angle))


def rectangular_to_polar(point: Sequence[float]) -> Tuple[float, float]:
    x, y = point
    return (math.hypot(x, y), math.atan2(y, x))


def squared_distance(a: Sequence[float], b: Sequence[float]) -> float:
    return (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2


# ---------- validation ----------

def is_valid(point: Point, points: Sequence[Point]) -> bool:
    """False if `point` sits within the degeneracy epsilon of any other point.

    The point itself (same object) may appear in `points` and is skipped.
    """
    for other in points:
        if other is point:
            continue
        if squared_distance(point, other) < DEGENERACY_EPSILON:
            return False
    return True


def chassis_is_valid(vertices: Sequence[Point]) -> bool:
    for i, v in enumerate(vertices):
        if not is_valid(v, [o for j, o in enumerate(vertices) if j != i]):
            return False
    return True


def chassis_vertices(genome: np.ndarray) -> List[Point]:
    """Rectangular chassis vertices from the first CHASSIS_GENES genes."""
    return [polar_to_rectangular(float(genome[k]), float(genome[k + 1]))
            for k in range(0, CHASSIS_GENES, 2)]


# ---------- codec ----------

def check_genome(genome: np.ndarray) -> np.ndarray:
    arr = np.asarray(genome, dtype=np.float64)
    if arr.shape != (GENOME_LENGTH,):
        raise InvalidGenomeError(
            f"genome must have exactly {GENOME_LENGTH} genes, got shape {arr.shape}"
        )
    return arr


def decode(genome: np.ndarray, rng: np.random.Generator) -> Phenotype:
    """Genome -> phenotype. Wheel density is not inherited; it is drawn fresh."""
    g = check_genome(genome)
    wheels = []
    for w in range(NUM_WHEELS):
        base = CHASSIS_GENES + 2 * w
        wheels.append(WheelSpec(
            radius=float(g[base]),
            density=float(rng.uniform(*DECODED_WHEEL_DENSITY)),
            vertex=int(g[base + 1]),
        ))
    return Phenotype(vertices=chassis_vertices(g), wheels=wheels)


def encode(phenotype: Phenotype) -> np.ndarray:
    if len(phenotype.vertices) != NUM_VERTICES or len(phenotype.wheels) != NUM_WHEELS:
        raise InvalidGenomeError(
            f"phenotype needs {NUM_VERTICES} vertices and {NUM_WHEELS} wheels, "
            f"got {len(phenotype.vertices)} and {len(phenotype.wheels)}"
        )
    genome = np.zeros(GENOME_LENGTH, dtype=np.float64)
    for i, v in enumerate(phenotype.vertices):
        genome[2 * i], genome[2 * i + 1] = rectangular_to_polar(v)
    for w, wheel in enumerate(phenotype.wheels):
        genome[CHASSIS_GENES + 2 * w] = wheel.radius
        genome[CHASSIS_GENES + 2 * w + 1] = wheel.vertex
    return genome


# ---------- random generation ----------

def random_phenotype(rng: np.random.Generator) -> Phenotype:
    vertices: List[Point] = []
    for _ in range(NUM_VERTICES):
        while True:
            angle = float(rng.uniform(MIN_ANGLE, MAX_ANGLE))
            magnitude = float(rng.uniform(MIN_MAGNITUDE, MAX_MAGNITUDE))
            point = polar_to_rectangular(magnitude, angle)
            if is_valid(point, vertices):
                break
        vertices.append(point)

    # sampling without replacement keeps two wheels off the same vertex
    left = list(WHEEL_VERTEX_POOL)
    wheels = []
    for _ in range(NUM_WHEELS):
        vertex = left.pop(int(rng.integers(0, len(left))))
        wheels.append(WheelSpec(
            radius=float(rng.uniform(MIN_WHEEL_RADIUS, MAX_WHEEL_RADIUS)),
            density=float(rng.uniform(*RANDOM_WHEEL_DENSITY)),
            vertex=int(vertex),
        ))
    return Phenotype(vertices=vertices, wheels=wheels)


def random_genome(rng: np.random.Generator) -> np.ndarray:
    return encode(random_phenotype(rng))
