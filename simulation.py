# simulation.py
"""
Handles the core simulation logic and physics calculations.

This module defines the Simulation class, which is responsible for
advancing the state of the particle system by one tick. A tick applies
every rule of the RuleTable in order; each rule computes inter-particle
forces from a source group toward a target group, then damps velocities,
moves the source particles and reflects them off the world walls.
"""
import logging
import math
import numpy as np
from typing import Dict, Any
from numba import jit, prange

from constants import NEAR_FIELD_DIST_SQ
from particle import ParticleSystem
from rules import RuleTable
from utils import config_error, validate_simulation_params

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, particles: ParticleSystem, rules: RuleTable,
#              params: Dict[str, Any]):
#     - Inputs:
#       - particles: An initialized ParticleSystem object.
#       - rules: The ordered RuleTable to apply every tick.
#       - params: Validated simulation parameters.
#         - "interaction_radius": float
#         - "damping": float in (0, 1]
#         - "half_extent": float
#         - "snapshot_targets": bool
#     - Outputs: None
#     - Side Effects: Stores references to particles and rules and builds
#       the per-tick rule schedule from the fixed group index arrays.
#
#   - tick(self) -> None:
#     - Inputs: None (operates on internal state).
#     - Outputs: None
#     - Side Effects: Modifies the state of the internal ParticleSystem
#       object (positions and velocities) in place.
#     - Invariants: Particle count remains constant. Every coordinate lies
#       in [-H, H] afterwards. No wall-clock time is involved; the same
#       state and rules always produce the same next state.


@jit(nopython=True)
def net_force(position, reference_positions, target_indices, g, radius_sq, out):
    """
    Numba-jitted net force on one particle from every particle of a target group.

    The force law is g / distance along the displacement vector, so each
    neighbour inside the cutoff contributes a push or pull of magnitude |g|.
    Pairs with squared distance <= NEAR_FIELD_DIST_SQ (including the
    particle itself) or >= radius_sq are ignored.
    """
    dim = position.shape[0]
    for k in range(dim):
        out[k] = 0.0

    for b in range(target_indices.shape[0]):
        j = target_indices[b]
        dist_sq = 0.0
        for k in range(dim):
            d = position[k] - reference_positions[j, k]
            dist_sq += d * d

        if dist_sq > NEAR_FIELD_DIST_SQ and dist_sq < radius_sq:
            f = g / np.sqrt(dist_sq)
            for k in range(dim):
                out[k] += f * (position[k] - reference_positions[j, k])


@jit(nopython=True)
def integrate(position, velocity, force, damping):
    """Damps the sum of old velocity and force, then advances the position."""
    for k in range(position.shape[0]):
        velocity[k] = (velocity[k] + force[k]) * damping
        position[k] += velocity[k]


@jit(nopython=True)
def reflect(position, velocity, half_extent):
    """
    Bounces a particle off the walls of the [-H, H] box.

    The overshoot past the wall is clamped away rather than mirrored, so
    the bounce is not exactly energy-conserving.
    """
    for k in range(position.shape[0]):
        if position[k] <= -half_extent or position[k] >= half_extent:
            velocity[k] *= -1.0
            position[k] = max(-half_extent, min(half_extent, position[k]))


@jit(nopython=True)
def _apply_rule_numba(positions, velocities, source_indices, target_indices,
                      g, radius_sq, damping, half_extent):
    """
    Applies one rule sequentially, writing each particle back immediately.

    Particles later in the source list see the already-moved earlier ones
    whenever the source and target groups overlap.
    """
    force = np.empty(positions.shape[1])
    for a in range(source_indices.shape[0]):
        i = source_indices[a]
        net_force(positions[i], positions, target_indices, g, radius_sq, force)
        integrate(positions[i], velocities[i], force, damping)
        reflect(positions[i], velocities[i], half_extent)


@jit(nopython=True, parallel=True)
def _apply_rule_snapshot_numba(positions, velocities, source_indices, target_indices,
                               snapshot, g, radius_sq, damping, half_extent):
    """
    Parallel variant of _apply_rule_numba reading targets from a snapshot.

    Every source particle sees the target group as it was before the rule
    started, which removes the intra-rule order dependence.
    """
    for a in prange(source_indices.shape[0]):
        i = source_indices[a]
        force = np.empty(positions.shape[1])
        net_force(snapshot[i], snapshot, target_indices, g, radius_sq, force)
        integrate(positions[i], velocities[i], force, damping)
        reflect(positions[i], velocities[i], half_extent)


class Simulation:
    """
    Runs the ordered rule table against the particle system, one tick at a time.
    """
    def __init__(self, particles: ParticleSystem, rules: RuleTable, params: Dict[str, Any]):
        """
        Initializes the simulation environment.

        Args:
            particles (ParticleSystem): The particle system to simulate.
            rules (RuleTable): Interaction rules, applied in order.
            params (Dict[str, Any]): Validated simulation parameters.
        """
        self.particles = particles
        self.rules = rules
        self.radius = float(params['interaction_radius'])
        self.damping = float(params['damping'])
        self.half_extent = float(params['half_extent'])
        self.snapshot_targets = params.get('snapshot_targets', False)

        # Pre-calculate the squared cutoff to avoid sqrt in the hot loop
        self.radius_sq = self.radius ** 2

        if not isinstance(self.snapshot_targets, bool):
            raise config_error(
                f"'snapshot_targets' must be true or false, got {self.snapshot_targets!r}."
            )
        # NaN and inf must fail these checks.
        if not (math.isfinite(self.radius) and self.radius > 0
                and math.isfinite(self.half_extent) and self.half_extent > 0
                and 0 < self.damping <= 1):
            raise config_error(
                f"radius ({self.radius}) and half extent ({self.half_extent}) must be "
                f"positive and damping ({self.damping}) must lie in (0, 1]."
            )
        if self.half_extent != particles.half_extent:
            raise config_error(
                f"half extent {self.half_extent} does not match the particle "
                f"system's {particles.half_extent}."
            )
        unknown = rules.groups - set(particles.group_names)
        if unknown:
            raise config_error(f"rules reference groups with no particles: {sorted(unknown)}.")

        # The group index arrays are fixed, so the schedule is built once.
        self._schedule = [
            (particles.indices(rule.source), particles.indices(rule.target), rule.g)
            for rule in rules
        ]
        self.tick_count = 0

        if self.snapshot_targets:
            logging.warning(
                "Snapshot mode enabled: target positions are frozen per rule and "
                "source particles are updated in parallel. Results will differ "
                "from the sequential in-place ordering."
            )
        logging.info("Simulation logic initialized and configuration validated.")
        logging.info(
            f"Interaction radius {self.radius:.1f}, damping {self.damping:.2f}, "
            f"world half extent {self.half_extent:.1f}, {len(self._schedule)} rules per tick."
        )

    def apply_rule(self, source: str, target: str, g: float) -> None:
        """
        Moves every particle of `source` under the pull of `target` with strength g.
        """
        self._apply(self.particles.indices(source), self.particles.indices(target), g)

    def _apply(self, source_indices: np.ndarray, target_indices: np.ndarray, g: float) -> None:
        p = self.particles
        if self.snapshot_targets:
            _apply_rule_snapshot_numba(
                p.positions, p.velocities, source_indices, target_indices,
                p.positions.copy(), g, self.radius_sq, self.damping, self.half_extent
            )
        else:
            _apply_rule_numba(
                p.positions, p.velocities, source_indices, target_indices,
                g, self.radius_sq, self.damping, self.half_extent
            )

    def tick(self) -> None:
        """
        Executes one tick: every rule once, in table order.
        """
        for source_indices, target_indices, g in self._schedule:
            self._apply(source_indices, target_indices, g)
        self.tick_count += 1

    def net_force(self, index: int, target: str, g: float) -> np.ndarray:
        """Returns the force group `target` would exert on particle `index`."""
        p = self.particles
        force = np.empty(p.dimensions)
        net_force(p.positions[index], p.positions, p.indices(target), g, self.radius_sq, force)
        return force

    def render_state(self):
        return self.particles.render_state()

    def average_speed(self) -> float:
        return float(np.mean(np.linalg.norm(self.particles.velocities, axis=1)))


def create_simulation(params: Dict[str, Any]) -> Simulation:
    """
    Builds a ready-to-run simulation from raw `simulation_parameters`.

    Everything is validated before any particle is allocated.
    """
    settings = validate_simulation_params(params)
    rules = RuleTable.from_params(settings)
    particles = ParticleSystem.random(settings)
    return Simulation(particles, rules, settings)


def tick(state: Simulation) -> None:
    """Advances `state` by one tick in place."""
    state.tick()
