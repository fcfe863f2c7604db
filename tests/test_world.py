import math

import numpy as np
import pytest

from evo_cars.config import EvolutionConfig
from evo_cars.engine import EvolutionEngine
from evo_cars.errors import PhysicsError
from evo_cars.genome import NO_WHEEL, Phenotype, WheelSpec, polar_to_rectangular, random_phenotype
from evo_cars.world import FLAT_START_TILES, World, WorldConfig, random_track_angles


def _octagon(wheels):
    vertices = [polar_to_rectangular(0.6, k * math.pi / 4) for k in range(8)]
    return Phenotype(vertices=vertices, wheels=wheels)


def test_random_track_starts_flat(rng):
    angles = random_track_angles(20, rng)
    assert len(angles) == 20
    assert angles[:FLAT_START_TILES] == [0.0] * FLAT_START_TILES
    assert all(abs(a) <= 0.8 for a in angles)


def test_tiles_are_chained():
    world = World(WorldConfig(track_length=12, seed=1))
    assert len(world.tiles) == 12
    for prev, nxt in zip(world.tiles, world.tiles[1:]):
        assert nxt[0] == pytest.approx(prev[3])


def test_custom_track_sets_length():
    world = World(WorldConfig(custom_track=[0.0, 0.1, -0.1, 0.0, 0.2]))
    assert world.track_length == 5
    assert len(world.tiles) == 5


def test_vehicle_lifecycle_adds_and_removes_everything():
    world = World(WorldConfig(track_length=20))
    wheels = [WheelSpec(0.2, 60.0, 3), WheelSpec(0.25, 60.0, 6), WheelSpec(0.2, 60.0, NO_WHEEL)]
    bodies = world.create_vehicle(_octagon(wheels))
    assert len(bodies.wheels) == 2
    assert len(bodies.joints) == 4      # pivot + motor per wheel
    assert world.body_count() == 3
    for _ in range(30):
        world.step()
    assert world.tick == 30
    world.destroy_vehicle(bodies)
    assert world.body_count() == 0
    assert len(world.space.constraints) == 0


def test_car_falls_under_gravity():
    world = World(WorldConfig(track_length=20))
    bodies = world.create_vehicle(_octagon([WheelSpec(0.2, 60.0, NO_WHEEL)] * 3))
    y0 = bodies.chassis.position.y
    for _ in range(10):
        world.step()
    assert bodies.chassis.position.y < y0
    assert bodies.chassis.velocity.y < 0


def test_bad_wheel_vertex_is_a_physics_error():
    world = World(WorldConfig(track_length=20))
    with pytest.raises(PhysicsError):
        world.create_vehicle(_octagon([WheelSpec(0.2, 60.0, 9)] * 3))
    with pytest.raises(PhysicsError):
        world.create_vehicle(_octagon([WheelSpec(-0.2, 60.0, 1)] * 3))
    # nothing leaked into the space
    assert world.body_count() == 0


def test_engine_drives_real_physics():
    cfg = EvolutionConfig(population_size=4, track_length=30, seed=5)
    world = World(WorldConfig(track_length=30, seed=5))
    engine = EvolutionEngine(cfg, world, rng=np.random.default_rng(5))
    for _ in range(300):
        engine.tick()
        t = engine.telemetry()
        assert 0.0 <= t.best_fitness <= 30.0
        # the live car is the only thing in the space
        assert world.body_count() == (1 + len(t.wheels) if engine.current is not None else 0)
    engine.reset()
    assert world.body_count() == 0


def test_random_phenotypes_build(rng):
    world = World(WorldConfig(track_length=20))
    for _ in range(10):
        bodies = world.create_vehicle(random_phenotype(rng))
        world.step()
        world.destroy_vehicle(bodies)
    assert world.body_count() == 0
