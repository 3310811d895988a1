"""
Shared pytest fixtures for the particle life tests.

The fixtures build small, hand-placed worlds so individual tests can
check exact numbers without going through config files.
"""

from __future__ import annotations

import pathlib
import sys
from typing import Any, Dict

import numpy as np
import pytest

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from particle import ParticleSystem  # noqa: E402
from rules import RuleTable  # noqa: E402
from simulation import Simulation  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> pathlib.Path:
    """Return repository root directory."""
    return REPO_ROOT


@pytest.fixture
def small_params() -> Dict[str, Any]:
    """Raw simulation parameters for a small, seeded 2-D world."""
    return {
        "seed": 7,
        "dimensions": 2,
        "world_size": 500,
        "particles_per_group": 40,
        "interaction_radius": 80,
        "damping": 0.5,
        "groups": ["yellow", "red", "green"],
        "rules": [
            ["red", "red", 0.1],
            ["yellow", "red", 0.15],
            ["green", "green", -0.7],
            ["green", "red", -0.2],
            ["red", "green", -0.1],
            ["yellow", "yellow", 0.1],
        ],
    }


@pytest.fixture
def make_simulation():
    """Factory building a Simulation from explicit per-group positions."""

    def _make(layout, rules, radius=100.0, damping=0.5, half_extent=250.0, snapshot=False):
        names = list(layout)
        particles = ParticleSystem(names, [np.asarray(layout[n], dtype=float) for n in names], half_extent)
        table = RuleTable(rules, names)
        params = {
            "interaction_radius": radius,
            "damping": damping,
            "half_extent": half_extent,
            "snapshot_targets": snapshot,
        }
        return Simulation(particles, table, params)

    return _make
