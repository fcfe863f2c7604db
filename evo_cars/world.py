"""
World: pymunk physics space holding the track and the one car under test.

Track: a chain of 1.0 x 0.2 tiles starting at (0, -0.5). The first few tiles
are flat for a fair start; the rest get alternating random slopes, or a
user-supplied list of tile angles ("custom map").

Cars: a chassis made of triangles fanned from the body origin through the
angle-sorted vertices, and motor-driven wheels pinned to chosen vertices.
All car shapes share a collision group so parts never collide with each other.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import math
import numpy as np
import pymunk

from .errors import PhysicsError
from .genome import NUM_VERTICES, Phenotype, rectangular_to_polar

TILE_LENGTH = 1.0
TILE_HEIGHT = 0.2
TRACK_START = (0.0, -0.5)
FLAT_START_TILES = 4

CHASSIS_DENSITY_RANGE = (100.0, 300.0)
CHASSIS_FRICTION = 10.0
WHEEL_FRICTION = 1.0
ELASTICITY = 0.2
GROUND_FRICTION = 0.5
MOTOR_SPEED = 20.0
CAR_GROUP = 1
MIN_TRIANGLE_AREA = 1e-9


@dataclass
class WorldConfig:
    fps: int = 60
    gravity: Tuple[float, float] = (0.0, -9.81)
    iterations: int = 8
    track_length: int = 300
    seed: int = 7
    spawn: Tuple[float, float] = (1.0, 2.0)
    custom_track: Optional[List[float]] = None   # tile angles in radians


@dataclass
class VehicleBodies:
    chassis: pymunk.Body
    wheels: List[pymunk.Body] = field(default_factory=list)
    wheel_radii: List[float] = field(default_factory=list)
    joints: List[pymunk.Constraint] = field(default_factory=list)


def _rotate(points, angle: float) -> List[Tuple[float, float]]:
    c, s = math.cos(angle), math.sin(angle)
    return [(c * x - s * y, s * x + c * y) for x, y in points]


def random_track_angles(n_tiles: int, rng: np.random.Generator,
                        flat_tiles: int = FLAT_START_TILES) -> List[float]:
    angles = [0.0] * min(flat_tiles, n_tiles)
    for i in range(n_tiles - len(angles)):
        angles.append(float(rng.uniform(-10.0, 8.0)) * 8.0 / 100.0 * (-1) ** i)
    return angles


class World:
    def __init__(self, cfg: WorldConfig):
        self.cfg = cfg
        self.rng = np.random.default_rng(cfg.seed)
        self.tick = 0
        self.dt = 1.0 / cfg.fps

        self.space = pymunk.Space()
        self.space.gravity = cfg.gravity
        self.space.iterations = cfg.iterations

        # one density for every chassis in this world
        self.chassis_density = float(self.rng.uniform(*CHASSIS_DENSITY_RANGE))

        if cfg.custom_track is not None:
            angles = [float(a) for a in cfg.custom_track]
            self.track_length = len(angles)
        else:
            angles = random_track_angles(cfg.track_length, self.rng)
            self.track_length = cfg.track_length
        self.tiles: List[List[Tuple[float, float]]] = []
        self._build_track(angles)

    # ---------- track ----------
    def _build_track(self, angles: List[float]) -> None:
        if not angles:
            raise PhysicsError("track needs at least one tile")
        corners = [(0.0, 0.0), (0.0, -TILE_HEIGHT), (TILE_LENGTH, -TILE_HEIGHT), (TILE_LENGTH, 0.0)]
        px, py = TRACK_START
        ground = self.space.static_body
        for angle in angles:
            rotated = _rotate(corners, angle)
            verts = [(px + x, py + y) for x, y in rotated]
            tile = pymunk.Poly(ground, verts)
            tile.friction = GROUND_FRICTION
            self.space.add(tile)
            self.tiles.append(verts)
            # next tile starts at this tile's top-right corner
            px, py = verts[3]

    # ---------- cars ----------
    def create_vehicle(self, phenotype: Phenotype) -> VehicleBodies:
        """Build chassis, wheels and motor joints for one phenotype."""
        self._check_buildable(phenotype)

        chassis = pymunk.Body()
        chassis.position = self.cfg.spawn
        chassis_shapes = self._chassis_shapes(chassis, phenotype.vertices)
        if not chassis_shapes:
            raise PhysicsError("chassis has no non-degenerate triangle")
        self.space.add(chassis, *chassis_shapes)
        bodies = VehicleBodies(chassis=chassis)

        car_mass = sum(s.mass for s in chassis_shapes)
        for spec in phenotype.wheels:
            if not spec.attached:
                continue
            anchor = phenotype.vertices[spec.vertex]
            wheel = pymunk.Body()
            wheel.position = chassis.local_to_world(anchor)
            circle = pymunk.Circle(wheel, spec.radius)
            circle.density = spec.density
            circle.friction = WHEEL_FRICTION
            circle.elasticity = ELASTICITY
            circle.filter = pymunk.ShapeFilter(group=CAR_GROUP)
            self.space.add(wheel, circle)
            car_mass += circle.mass

            pivot = pymunk.PivotJoint(chassis, wheel, anchor, (0.0, 0.0))
            motor = pymunk.SimpleMotor(chassis, wheel, MOTOR_SPEED)
            motor.max_force = car_mass * -self.cfg.gravity[1] / spec.radius
            self.space.add(pivot, motor)

            bodies.wheels.append(wheel)
            bodies.wheel_radii.append(spec.radius)
            bodies.joints.extend([pivot, motor])
        return bodies

    def _check_buildable(self, phenotype: Phenotype) -> None:
        if len(phenotype.vertices) != NUM_VERTICES:
            raise PhysicsError(f"chassis needs {NUM_VERTICES} vertices, got {len(phenotype.vertices)}")
        for spec in phenotype.wheels:
            if not spec.attached:
                continue
            if not 0 <= spec.vertex < NUM_VERTICES:
                raise PhysicsError(f"wheel vertex index {spec.vertex} out of range")
            if not spec.radius > 0.0 or not spec.density > 0.0:
                raise PhysicsError(f"wheel radius/density must be positive, got {spec.radius}/{spec.density}")

    def _chassis_shapes(self, body: pymunk.Body, vertices) -> List[pymunk.Poly]:
        # angle-sorted ring so the fan triangles do not overlap
        ring = sorted(vertices, key=lambda v: rectangular_to_polar(v)[1])
        shapes = []
        for k in range(len(ring)):
            a, b = ring[k - 1], ring[k]
            if abs(a[0] * b[1] - a[1] * b[0]) * 0.5 < MIN_TRIANGLE_AREA:
                continue
            tri = pymunk.Poly(body, [a, b, (0.0, 0.0)])
            tri.density = self.chassis_density
            tri.friction = CHASSIS_FRICTION
            tri.elasticity = ELASTICITY
            tri.filter = pymunk.ShapeFilter(group=CAR_GROUP)
            shapes.append(tri)
        return shapes

    def destroy_vehicle(self, bodies: VehicleBodies) -> None:
        """Remove joints, then wheels, then the chassis."""
        for joint in bodies.joints:
            self.space.remove(joint)
        for wheel in bodies.wheels:
            self.space.remove(wheel, *wheel.shapes)
        self.space.remove(bodies.chassis, *bodies.chassis.shapes)

    # ---------- dynamics ----------
    def step(self) -> None:
        self.space.step(self.dt)
        self.tick += 1

    def body_count(self) -> int:
        return len(self.space.bodies)
