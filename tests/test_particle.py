"""Tests for the particle arena and its fixed group partition."""

import numpy as np
import pytest

from particle import ParticleSystem
from utils import ConfigurationError, validate_simulation_params


@pytest.fixture
def particles(small_params):
    return ParticleSystem.random(validate_simulation_params(small_params))


class TestRandomLayout:

    def test_shapes_and_dtypes(self, particles):
        assert particles.positions.shape == (120, 2)
        assert particles.velocities.shape == (120, 2)
        assert particles.positions.dtype == np.float64
        assert particles.types.dtype == np.int32
        assert len(particles) == 120

    def test_positions_inside_world_and_velocities_zero(self, particles):
        assert np.all(np.abs(particles.positions) <= 250.0)
        assert not particles.velocities.any()

    def test_groups_partition_the_arena(self, particles):
        all_indices = np.concatenate([particles.indices(n) for n in particles.group_names])
        np.testing.assert_array_equal(np.sort(all_indices), np.arange(120))
        for type_id, name in enumerate(particles.group_names):
            assert np.all(particles.types[particles.indices(name)] == type_id)

    def test_groups_are_contiguous_in_config_order(self, particles):
        np.testing.assert_array_equal(particles.indices("yellow"), np.arange(0, 40))
        np.testing.assert_array_equal(particles.indices("red"), np.arange(40, 80))
        np.testing.assert_array_equal(particles.indices("green"), np.arange(80, 120))

    def test_same_seed_gives_same_layout(self, small_params):
        settings = validate_simulation_params(small_params)
        a = ParticleSystem.random(settings)
        b = ParticleSystem.random(settings)
        np.testing.assert_array_equal(a.positions, b.positions)

    def test_three_dimensional_layout(self, small_params):
        small_params["dimensions"] = 3
        particles = ParticleSystem.random(validate_simulation_params(small_params))
        assert particles.positions.shape == (120, 3)
        assert particles.dimensions == 3

    def test_per_group_counts(self, small_params):
        small_params["particles_per_group"] = {"yellow": 1, "red": 2, "green": 3}
        particles = ParticleSystem.random(validate_simulation_params(small_params))
        assert [len(particles.indices(n)) for n in particles.group_names] == [1, 2, 3]


class TestRenderState:

    def test_views_are_read_only(self, particles):
        positions, types = particles.render_state()
        with pytest.raises(ValueError):
            positions[0, 0] = 1.0
        with pytest.raises(ValueError):
            types[0] = 2
        # The simulation itself can still write.
        particles.positions[0, 0] = 1.0
        assert positions[0, 0] == 1.0

    def test_order_is_stable(self, particles):
        _, first = particles.render_state()
        _, second = particles.render_state()
        np.testing.assert_array_equal(first, second)


def test_particle_accessor_returns_detached_copy(particles):
    p = particles.particle(45)
    assert p.group == "red"
    assert p.index == 45
    p.position[0] = 999.0
    assert particles.positions[45, 0] != 999.0


def test_unknown_group_lookup_raises(particles):
    with pytest.raises(KeyError):
        particles.indices("blue")


@pytest.mark.parametrize("names, blocks", [
    ([], []),
    (["a"], [np.empty((0, 2))]),
    (["a", "b"], [np.zeros((1, 2)), np.zeros((1, 3))]),
    (["a"], [np.array([[300.0, 0.0]])]),
    (["a", "b"], [np.zeros((1, 2))]),
])
def test_invalid_layouts_fail_fast(names, blocks):
    with pytest.raises(ConfigurationError):
        ParticleSystem(names, blocks, 250.0)
