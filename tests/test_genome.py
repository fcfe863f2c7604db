import math

import numpy as np
import pytest

from evo_cars.errors import InvalidGenomeError
from evo_cars.genome import (
    DECODED_WHEEL_DENSITY,
    DEGENERACY_EPSILON,
    GENOME_LENGTH,
    NO_WHEEL,
    NUM_VERTICES,
    Phenotype,
    WheelSpec,
    chassis_is_valid,
    decode,
    encode,
    is_valid,
    polar_to_rectangular,
    random_genome,
    random_phenotype,
    rectangular_to_polar,
)


def test_polar_rectangular_conversions_agree():
    x, y = polar_to_rectangular(2.0, math.pi / 2)
    assert x == pytest.approx(0.0, abs=1e-12)
    assert y == pytest.approx(2.0)
    mag, ang = rectangular_to_polar((-1.0, 0.0))
    assert mag == pytest.approx(1.0)
    assert ang == pytest.approx(math.pi)


def test_decode_encode_round_trip_keeps_order(rng):
    for _ in range(20):
        p = random_phenotype(rng)
        back = decode(encode(p), rng)
        assert len(back.vertices) == NUM_VERTICES
        for a, b in zip(p.vertices, back.vertices):
            assert a == pytest.approx(b, abs=1e-9)
        assert [w.vertex for w in back.wheels] == [w.vertex for w in p.wheels]
        assert [w.radius for w in back.wheels] == pytest.approx([w.radius for w in p.wheels])


def test_decode_draws_density_fresh(rng):
    p = random_phenotype(rng)
    back = decode(encode(p), rng)
    lo, hi = DECODED_WHEEL_DENSITY
    assert all(lo <= w.density <= hi for w in back.wheels)


def test_decode_rejects_wrong_length(rng):
    with pytest.raises(InvalidGenomeError):
        decode(np.zeros(GENOME_LENGTH - 1), rng)
    with pytest.raises(InvalidGenomeError):
        decode(np.zeros(GENOME_LENGTH + 1), rng)


def test_decode_is_total_over_finite_genes(rng):
    for _ in range(50):
        genome = rng.uniform(-1e6, 1e6, size=GENOME_LENGTH)
        p = decode(genome, rng)
        assert len(p.wheels) == 3


def test_wheel_vertex_truncates_toward_zero(rng):
    genome = random_genome(rng)
    genome[17], genome[19], genome[21] = 3.9, -1.0, -0.5
    vertices = [w.vertex for w in decode(genome, rng).wheels]
    assert vertices == [3, -1, 0]


def test_encode_rejects_incomplete_phenotype():
    with pytest.raises(InvalidGenomeError):
        encode(Phenotype(vertices=[(1.0, 0.0)], wheels=[]))


def test_random_phenotype_wheels_use_distinct_vertices(rng):
    for _ in range(100):
        p = random_phenotype(rng)
        attached = [w.vertex for w in p.wheels if w.vertex != NO_WHEEL]
        assert len(attached) == len(set(attached))
        assert all(-1 <= w.vertex < NUM_VERTICES for w in p.wheels)
        assert all(0.1 <= w.radius <= 0.3 for w in p.wheels)
        assert chassis_is_valid(p.vertices)


def test_is_valid_threshold():
    origin = (0.0, 0.0)
    close = (math.sqrt(DEGENERACY_EPSILON) * 0.5, 0.0)
    far = (math.sqrt(DEGENERACY_EPSILON) * 2.0, 0.0)
    assert not is_valid(close, [origin])
    assert is_valid(far, [origin])


def test_single_point_set_is_valid():
    p = (0.3, 0.4)
    assert is_valid(p, [p])
    assert chassis_is_valid([p])


def test_chassis_with_coincident_vertices_is_invalid():
    vertices = [polar_to_rectangular(0.5, k * math.pi / 4) for k in range(NUM_VERTICES)]
    assert chassis_is_valid(vertices)
    vertices[5] = (vertices[2][0] + 1e-4, vertices[2][1])
    assert not chassis_is_valid(vertices)


def test_wheel_spec_attached():
    assert WheelSpec(radius=0.2, density=60.0, vertex=3).attached
    assert not WheelSpec(radius=0.2, density=60.0, vertex=NO_WHEEL).attached
