# visualization.py
"""
Handles the visualization of the particle simulation using Pygame.

The Visualizer only reads Simulation.render_state(); it never writes to
particle state, so anything that goes wrong on the rendering side cannot
disturb the simulation.
"""
import logging
import pygame
import numpy as np
from constants import (
    BACKGROUND_COLOR, DEFAULT_PARTICLE_RADIUS, DEPTH_MAX_ALPHA, DEPTH_MIN_ALPHA,
    FPS, GROUP_COLORS, MOTION_BLUR_ALPHA, PARTICLE_HALO_ALPHA, PARTICLE_HALO_RATIO,
    VIBRANT_COLORS, VIEW_MARGIN, WINDOW_SIZE
)
from typing import Dict, List, Optional, Sequence, Tuple

# Forward reference for type hinting to avoid circular import
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from simulation import Simulation


# --- Data Contracts ---
#
# world_to_screen(positions, half_extent, width, height) -> np.ndarray:
#   - Inputs:
#     - positions: (N, D) array of world coordinates, D >= 2.
#     - half_extent: H of the simulated world.
#     - width, height: Size of the target surface in pixels.
#   - Outputs: (N, 2) int array of pixel coordinates. The world's x axis
#     maps left-to-right, the y axis bottom-to-top, centered, with a
#     VIEW_MARGIN border around the walls.
#
# class Visualizer:
#   - __init__(self, group_names: Sequence[str], half_extent: float,
#              dimensions: int, colors: Optional[dict] = None,
#              window_size: Optional[Tuple[int, int]] = None):
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - draw(self, simulation: "Simulation") -> bool:
#     - Outputs:
#       - bool: False if the user has quit, True otherwise.
#     - Side Effects: Renders particles to the screen and handles Pygame
#       events. Does not modify the simulation.


def world_to_screen(positions: np.ndarray, half_extent: float, width: int, height: int) -> np.ndarray:
    """Maps world x/y coordinates to pixel coordinates on a surface."""
    scale = min(width, height) / (2.0 * half_extent * VIEW_MARGIN)
    screen = np.empty((positions.shape[0], 2), dtype=np.int32)
    screen[:, 0] = np.rint(width / 2.0 + positions[:, 0] * scale)
    screen[:, 1] = np.rint(height / 2.0 - positions[:, 1] * scale)
    return screen


def depth_alpha(depth: np.ndarray, half_extent: float) -> np.ndarray:
    """Halo alpha per particle; particles nearer the viewer (+z) glow brighter."""
    near = (np.clip(depth, -half_extent, half_extent) + half_extent) / (2.0 * half_extent)
    return (DEPTH_MIN_ALPHA + near * (DEPTH_MAX_ALPHA - DEPTH_MIN_ALPHA)).astype(np.int32)


class Visualizer:
    """
    Renders the particle system state into a Pygame window.
    """
    def __init__(self, group_names: Sequence[str], half_extent: float, dimensions: int,
                 colors: Optional[Dict[str, list]] = None,
                 window_size: Optional[Tuple[int, int]] = None):
        """
        Initializes Pygame and the display window.
        """
        if dimensions < 2:
            raise ValueError(f"Cannot display a {dimensions}-D world; need at least 2 axes.")

        pygame.init()

        self.width, self.height = window_size or WINDOW_SIZE
        self.screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption(f"Particle Life ({dimensions}-D)")
        self.clock = pygame.time.Clock()

        self.half_extent = half_extent
        self.dimensions = dimensions

        # Surface for the motion blur effect. Blitted over the previous
        # frame each tick to leave fading trails.
        self.blur_surface = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        self.blur_surface.fill((BACKGROUND_COLOR[0], BACKGROUND_COLOR[1], BACKGROUND_COLOR[2], MOTION_BLUR_ALPHA))
        self.screen.fill(BACKGROUND_COLOR)

        self.colors = self._initialize_colors(group_names, colors)

        # --- Pre-render Halos for Performance ---
        self.halo_surfaces = self._pre_render_halos()

        logging.info(f"Visualizer initialized with Pygame display ({self.width}x{self.height}).")

    def _initialize_colors(self, group_names: Sequence[str],
                           config_colors: Optional[Dict[str, list]]) -> List[pygame.Color]:
        """Resolves a colour per group: config first, then named defaults, then the vibrant palette."""
        config_colors = config_colors or {}
        final_colors = []
        for i, name in enumerate(group_names):
            rgb = config_colors.get(name, GROUP_COLORS.get(name))
            try:
                color = pygame.Color(rgb) if rgb is not None else None
            except (ValueError, TypeError) as e:
                logging.error(f"Could not parse colour {rgb!r} for group '{name}': {e}.")
                color = None
            if color is None:
                color = pygame.Color(VIBRANT_COLORS[i % len(VIBRANT_COLORS)])
                logging.warning(f"No usable colour for group '{name}'. Using {tuple(color)[:3]}.")
            final_colors.append(color)
        return final_colors

    def draw(self, simulation: "Simulation") -> bool:
        """
        Draws all particles and handles events.

        Returns:
            bool: False if the simulation should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False

        # 1. Fade the previous frame to leave short trails.
        self.screen.blit(self.blur_surface, (0, 0))

        # 2. Copy out what we need; the simulation arrays stay untouched.
        positions, types = simulation.render_state()
        screen_pos = world_to_screen(positions, self.half_extent, self.width, self.height)
        if self.dimensions >= 3:
            alphas = depth_alpha(positions[:, 2], self.half_extent)
            # Painter's order: far particles first.
            order = np.argsort(positions[:, 2], kind='stable')
        else:
            alphas = None
            order = range(len(types))

        halo_radius = int(DEFAULT_PARTICLE_RADIUS * PARTICLE_HALO_RATIO)
        for i in order:
            x, y = int(screen_pos[i, 0]), int(screen_pos[i, 1])
            color_index = types[i] % len(self.colors)
            halo_surf = self.halo_surfaces[color_index]
            if alphas is not None:
                halo_surf.set_alpha(int(alphas[i]))

            self.screen.blit(halo_surf, (x - halo_radius, y - halo_radius))
            pygame.draw.circle(self.screen, self.colors[color_index], (x, y), DEFAULT_PARTICLE_RADIUS)

        pygame.display.flip()
        self.clock.tick(FPS)
        return True

    def _pre_render_halos(self) -> list:
        """
        Pre-renders halo surfaces for each group color to improve performance.
        """
        logging.debug("Pre-rendering particle halo surfaces...")
        halo_radius = int(DEFAULT_PARTICLE_RADIUS * PARTICLE_HALO_RATIO)
        diameter = halo_radius * 2
        surfaces = []
        for color in self.colors:
            halo_surf = pygame.Surface((diameter, diameter), pygame.SRCALPHA)
            halo_color = pygame.Color(color.r, color.g, color.b, PARTICLE_HALO_ALPHA)
            pygame.draw.circle(
                halo_surf,
                halo_color,
                (halo_radius, halo_radius),
                halo_radius
            )
            surfaces.append(halo_surf)
        logging.debug(f"Finished pre-rendering {len(surfaces)} halo surfaces.")
        return surfaces

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()
