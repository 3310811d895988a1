# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the ParticleSystem class, which is responsible for
initializing and storing particle data (position, velocity, group) in
efficient NumPy arrays, partitioned into fixed per-group index lists.
"""
import logging
import numpy as np
from typing import Dict, Any, List, NamedTuple, Sequence, Tuple

from utils import config_error

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, group_names: Sequence[str],
#              group_positions: Sequence[np.ndarray], half_extent: float):
#     - Inputs:
#       - group_names: Ordered, unique group names.
#       - group_positions: One (n_g, D) array of initial positions per group,
#         in the same order as group_names.
#       - half_extent: H, the world spans [-H, H] on every axis.
#     - Outputs: None
#     - Side Effects: Initializes internal NumPy arrays for particle state.
#     - Invariants:
#       - self.positions is a NumPy array of shape (N, D) of dtype float64.
#       - self.velocities is a NumPy array of shape (N, D) of dtype float64,
#         all zero at creation.
#       - self.types is a NumPy array of shape (N,) of dtype int32, never
#         modified after creation.
#       - self.group_indices partitions range(N) exactly; each group's
#         particles are contiguous and in group_names order.
#
#   - render_state(self) -> Tuple[np.ndarray, np.ndarray]:
#     - Outputs: Read-only views of positions (N, D) and types (N,), in
#       stable arena order. Callers copy what they need.


class Particle(NamedTuple):
    index: int
    position: np.ndarray
    velocity: np.ndarray
    group: str


class ParticleSystem:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, group_names: Sequence[str], group_positions: Sequence[np.ndarray],
                 half_extent: float):
        """
        Initializes the particle system from explicit per-group positions.

        Args:
            group_names (Sequence[str]): Names of the groups, in order.
            group_positions (Sequence[np.ndarray]): Initial positions per group.
            half_extent (float): Half the side length of the world cube.
        """
        if not group_names:
            raise config_error("a particle system needs at least one group.")
        if len(group_names) != len(group_positions):
            raise config_error(
                f"{len(group_names)} groups named but {len(group_positions)} "
                f"position blocks given."
            )

        blocks = [np.array(block, dtype=np.float64, ndmin=2) for block in group_positions]
        dimensions = blocks[0].shape[1]
        if dimensions == 0:
            raise config_error("particle positions need at least one coordinate.")
        for name, block in zip(group_names, blocks):
            if block.ndim != 2 or block.shape[1] != dimensions:
                raise config_error(
                    f"group '{name}' positions have shape {block.shape}; "
                    f"expected (n, {dimensions})."
                )
            if block.shape[0] == 0:
                raise config_error(f"group '{name}' has no particles.")
            if np.any(np.abs(block) > half_extent):
                raise config_error(f"group '{name}' has particles outside [-H, H].")

        self.group_names: List[str] = list(group_names)
        self.half_extent = float(half_extent)
        self.dimensions = dimensions

        self.positions = np.concatenate(blocks)
        self.velocities = np.zeros_like(self.positions)
        self.particle_count = self.positions.shape[0]

        self.types = np.empty(self.particle_count, dtype=np.int32)
        self.group_indices: Dict[str, np.ndarray] = {}
        start = 0
        for type_id, (name, block) in enumerate(zip(self.group_names, blocks)):
            stop = start + block.shape[0]
            self.types[start:stop] = type_id
            self.group_indices[name] = np.arange(start, stop, dtype=np.int64)
            start = stop

        logging.info(
            f"ParticleSystem initialized with {self.particle_count} "
            f"particles in {len(self.group_names)} groups ({self.dimensions}-D)."
        )
        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Velocities shape: {self.velocities.shape}, "
            f"Types shape: {self.types.shape}"
        )

    @classmethod
    def random(cls, params: Dict[str, Any]) -> "ParticleSystem":
        """
        Creates particles at uniformly random positions with zero velocity.

        Args:
            params (Dict[str, Any]): Validated simulation parameters.
                - "groups": List[str]
                - "particles_per_group": Dict[str, int]
                - "dimensions": int
                - "half_extent": float
                - "seed": Optional[int]
        """
        half_extent = params['half_extent']
        dimensions = params['dimensions']

        # All randomness is controlled by a single master seed.
        rng = np.random.default_rng(params['seed'])
        blocks = [
            rng.uniform(-half_extent, half_extent,
                        size=(params['particles_per_group'][name], dimensions))
            for name in params['groups']
        ]
        logging.debug(f"Random initial layout drawn with seed {params['seed']}.")
        return cls(params['groups'], blocks, half_extent)

    def indices(self, group: str) -> np.ndarray:
        """Returns the fixed arena indices of a group's particles."""
        try:
            return self.group_indices[group]
        except KeyError:
            raise KeyError(f"Unknown particle group: {group!r}") from None

    def particle(self, index: int) -> Particle:
        """Returns a detached copy of one particle's state."""
        return Particle(
            index=index,
            position=self.positions[index].copy(),
            velocity=self.velocities[index].copy(),
            group=self.group_names[self.types[index]],
        )

    def render_state(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Returns read-only views of every particle's position and group tag.

        The order is the arena order and never changes, so a presentation
        layer can upload straight into a fixed-size render buffer.
        """
        positions = self.positions.view()
        positions.flags.writeable = False
        types = self.types.view()
        types.flags.writeable = False
        return positions, types

    def __len__(self) -> int:
        return self.particle_count
