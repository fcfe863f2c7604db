import numpy as np
import pytest

from evo_cars.config import EvolutionConfig
from evo_cars.engine import EvolutionEngine
from evo_cars.errors import InvalidGenomeError
from evo_cars.genome import GENOME_LENGTH, random_genome

from fakes import StationaryWorld


def _engine(world, population_size=4, selection="roulette", seed=3):
    cfg = EvolutionConfig(population_size=population_size, track_length=10,
                          selection=selection, seed=seed)
    return EvolutionEngine(cfg, world)


def test_first_generation_is_encoded_random_population():
    engine = _engine(StationaryWorld())
    assert len(engine.genomes) == 4
    assert all(g.shape == (GENOME_LENGTH,) for g in engine.genomes)
    assert engine.generation == 0 and engine.slot == 0


def test_stationary_population_end_to_end(rng):
    world = StationaryWorld(track_length=10)
    engine = _engine(world)
    same = random_genome(rng)
    engine.load_population([same.copy() for _ in range(4)])

    deaths = []
    for t in range(1, 4 * 30 + 1):
        if engine.tick():
            deaths.append(t)

    # stalled cars lose two health per tick and die after 30 ticks each
    assert deaths == [30, 60, 90, 120]
    assert engine.generation == 1
    assert engine.slot == 0
    assert len(engine.genomes) == 4
    assert engine.cars_generated == 4
    stats = engine.history[-1]
    assert stats.best == pytest.approx(0.0)
    # all-zero fitness makes roulette degenerate; the engine falls back to uniform
    assert stats.selection_fallback
    # every car was released exactly once
    assert world.live == 0 and len(world.destroyed) == 4


def test_tournament_run_survives_tied_population():
    engine = _engine(StationaryWorld(), selection="tournament")
    stats = engine.run_generation(max_ticks=10_000)
    assert stats.generation == 0
    assert stats.selection_fallback
    assert len(engine.genomes) == 4


def test_only_one_car_exists_at_a_time():
    world = StationaryWorld()
    engine = _engine(world, population_size=6)
    for _ in range(400):
        engine.tick()
        assert world.live <= 1


def test_physics_failure_scores_zero_and_continues():
    world = StationaryWorld(fail_spawns=1)
    engine = _engine(world)
    assert engine.tick()           # the failed spawn counts as an immediate death
    assert engine.slot == 1
    assert engine.scored[0].fitness == 0.0
    assert engine.current is None
    assert not engine.tick()       # next slot spawns normally
    assert engine.current is not None


def test_reset_releases_live_car_and_counters():
    world = StationaryWorld()
    engine = _engine(world)
    engine.run_generation(max_ticks=10_000)
    engine.tick()
    assert engine.current is not None
    engine.reset()
    assert engine.current is None
    assert world.live == 0
    assert (engine.generation, engine.slot, engine.cars_generated) == (0, 0, 0)
    assert engine.history == []
    assert len(engine.genomes) == 4


def test_load_population_checks_size():
    engine = _engine(StationaryWorld())
    with pytest.raises(ValueError):
        engine.load_population([np.zeros(GENOME_LENGTH)])


def test_load_population_rejects_bad_genome_before_replacing():
    engine = _engine(StationaryWorld())
    before = [g.copy() for g in engine.genomes]
    genomes = [np.zeros(GENOME_LENGTH) for _ in range(3)] + [np.zeros(GENOME_LENGTH - 1)]
    with pytest.raises(InvalidGenomeError):
        engine.load_population(genomes)
    assert all(np.array_equal(a, b) for a, b in zip(engine.genomes, before))


def test_identical_stationary_cars_are_each_released_once(rng):
    world = StationaryWorld()
    engine = _engine(world)
    same = random_genome(rng)
    engine.load_population([same.copy() for _ in range(4)])
    for _ in range(60):
        engine.tick()
    assert len(world.destroyed) == 2
    assert world.destroyed[0] is not world.destroyed[1]


def test_telemetry_tracks_current_car():
    world = StationaryWorld(spawn_x=2.0)
    engine = _engine(world)
    t = engine.telemetry()
    assert t.generation == 0 and t.car_number == 1 and t.chassis == []
    engine.tick()
    t = engine.telemetry()
    assert t.position == (2.0, 0.0)
    assert len(t.chassis) == 8
    assert t.fitness == pytest.approx(2.0)
