# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They are fundamental to the application's framework, such as rendering
properties, default window sizes, or core physics settings that are not
part of the experimental configuration.
"""

# --- Physics ---
# Pairs closer than this (squared distance) exert no force. Guards the
# self-pair and coincident particles against division blow-up.
NEAR_FIELD_DIST_SQ = 0.001

# Interaction cutoff used when the config omits `interaction_radius`.
# The 2-D and 3-D variants were tuned separately; keep them independent.
DEFAULT_INTERACTION_RADIUS = {2: 80.0, 3: 100.0}

DEFAULT_WORLD_SIZE = 500.0
DEFAULT_DAMPING = 0.5
DEFAULT_PARTICLES_PER_GROUP = 1000
DEFAULT_GROUPS = ["yellow", "red", "green"]

# Applied in this exact order every tick.
DEFAULT_RULES = [
    ["red", "red", 0.1],
    ["yellow", "red", 0.15],
    ["green", "green", -0.7],
    ["green", "red", -0.2],
    ["red", "green", -0.1],
    ["yellow", "yellow", 0.1],
]

# Visualization settings
WINDOW_SIZE = (900, 900)
FPS = 60
BACKGROUND_COLOR = (0, 0, 0)
DEFAULT_PARTICLE_RADIUS = 2
# The view is slightly larger than the world so walls stay visible.
VIEW_MARGIN = 1.1

# --- Visual Appeal Enhancements ---
# Alpha value for the motion blur effect (0-255). Lower is a longer trail.
MOTION_BLUR_ALPHA = 90
# Ratio of the halo size to the particle radius. e.g., 2 means halo is 2x bigger.
PARTICLE_HALO_RATIO = 2
# Alpha value for the particle halo (0-255).
PARTICLE_HALO_ALPHA = 40

# --- Depth Shading (3-D only) ---
# Halo alpha for particles at the far wall and at the near wall.
DEPTH_MIN_ALPHA = 10
DEPTH_MAX_ALPHA = 110

# Render colours for the named groups. Groups without an entry here or in
# the config fall back to VIBRANT_COLORS.
GROUP_COLORS = {
    "yellow": (255, 255, 0),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
}

# A curated list of vibrant default colors for particles, used if the
# config file does not provide a color for a group.
VIBRANT_COLORS = [
    (255, 0, 102),   # Hot Pink
    (0, 255, 255),   # Cyan
    (255, 204, 0),   # Gold
    (0, 255, 102),   # Bright Green
    (204, 0, 255),   # Purple
    (255, 102, 0)    # Orange
]
