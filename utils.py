# utils.py
"""
Utility functions for the simulation framework.

This module provides helper functions, such as logging setup and config
validation, that are used across different parts of the application but do
not belong to a specific domain like physics or rendering.
"""
import logging
import logging.handlers
import json
import math
import numbers
import os
from typing import Dict, Any

from constants import (
    DEFAULT_DAMPING, DEFAULT_GROUPS, DEFAULT_INTERACTION_RADIUS,
    DEFAULT_PARTICLES_PER_GROUP, DEFAULT_RULES, DEFAULT_WORLD_SIZE
)

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", and "log_file" sub-keys.
#   - Outputs: None
#   - Side Effects: Configures the root Python logger. Creates a log
#     directory if it doesn't exist. Sets up a console handler and a
#     rotating file handler.
#   - Invariants: After this function runs, the logging system is
#     initialized and ready for use throughout the application.
#
# validate_simulation_params(params: Dict[str, Any]) -> Dict[str, Any]:
#   - Inputs:
#     - params: The "simulation_parameters" section of config.json.
#   - Outputs: A new dictionary with every key present and normalized
#     ("half_extent", "dimensions", "interaction_radius", "damping",
#     "groups", "particles_per_group" as a dict, "seed", "rules",
#     "snapshot_targets").
#   - Side Effects: None. Raises ConfigurationError on the first invalid
#     value, logging it at CRITICAL level.


class ConfigurationError(ValueError):
    """Raised when the simulation configuration is invalid."""


def config_error(msg: str) -> ConfigurationError:
    """Logs a configuration problem and returns the exception to raise."""
    msg = f"Configuration error: {msg}"
    logging.critical(msg)
    return ConfigurationError(msg)


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Sets up logging to both the console and a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
    log_file_path = log_config.get('log_file', 'logs/simulation.log')

    # Ensure the log directory exists
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Rotates when the log reaches 1MB, keeps 5 backup logs.
    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path, maxBytes=1024*1024, backupCount=5
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path}")


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
        logging.info("Configuration loaded successfully.")
        return config
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise


def is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _positive_number(params: Dict[str, Any], key: str, default: Any) -> float:
    value = params.get(key, default)
    if not is_number(value) or not math.isfinite(value) or value <= 0:
        raise config_error(f"'{key}' must be a positive number, got {value!r}.")
    return float(value)


def validate_simulation_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validates the simulation parameters and fills in defaults.

    Nothing is allocated here; callers build the simulation only from the
    returned dictionary, so a bad config never yields a half-built world.
    """
    groups = params.get('groups', DEFAULT_GROUPS)
    if not isinstance(groups, (list, tuple)):
        raise config_error(f"'groups' must be a list of names, got {groups!r}.")
    groups = list(groups)
    if not groups:
        raise config_error("at least one particle group is required.")
    if not all(isinstance(name, str) and name for name in groups):
        raise config_error(f"group names must be non-empty strings, got {groups!r}.")
    if len(set(groups)) != len(groups):
        raise config_error(f"group names must be unique, got {groups!r}.")

    dimensions = params.get('dimensions', 2)
    if not isinstance(dimensions, int) or isinstance(dimensions, bool) or dimensions < 1:
        raise config_error(f"'dimensions' must be a positive integer, got {dimensions!r}.")

    if 'half_extent' in params:
        half_extent = _positive_number(params, 'half_extent', None)
    else:
        half_extent = _positive_number(params, 'world_size', DEFAULT_WORLD_SIZE) / 2.0

    if 'interaction_radius' in params:
        radius = _positive_number(params, 'interaction_radius', None)
    elif dimensions in DEFAULT_INTERACTION_RADIUS:
        radius = DEFAULT_INTERACTION_RADIUS[dimensions]
    else:
        raise config_error(
            f"'interaction_radius' is required for {dimensions}-dimensional worlds."
        )

    damping = _positive_number(params, 'damping', DEFAULT_DAMPING)
    if damping > 1.0:
        raise config_error(f"'damping' must lie in (0, 1], got {damping!r}.")

    counts = params.get('particles_per_group', DEFAULT_PARTICLES_PER_GROUP)
    if isinstance(counts, dict):
        missing = [name for name in groups if name not in counts]
        unknown = [name for name in counts if name not in groups]
        if missing or unknown:
            raise config_error(
                f"'particles_per_group' must cover exactly the groups {groups}; "
                f"missing {missing}, unknown {unknown}."
            )
        counts = {name: counts[name] for name in groups}
    else:
        counts = {name: counts for name in groups}
    for name, count in counts.items():
        if not isinstance(count, int) or isinstance(count, bool) or count <= 0:
            raise config_error(
                f"group '{name}' needs a positive integer particle count, got {count!r}."
            )

    seed = params.get('seed')
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise config_error(f"'seed' must be an integer or null, got {seed!r}.")

    rules = params.get('rules', DEFAULT_RULES)
    if not isinstance(rules, (list, tuple)):
        raise config_error(f"'rules' must be a list of rule entries, got {rules!r}.")

    snapshot_targets = params.get('snapshot_targets', False)
    if not isinstance(snapshot_targets, bool):
        raise config_error(
            f"'snapshot_targets' must be true or false, got {snapshot_targets!r}."
        )

    return {
        'groups': groups,
        'dimensions': dimensions,
        'half_extent': half_extent,
        'interaction_radius': radius,
        'damping': damping,
        'particles_per_group': counts,
        'seed': seed,
        'rules': list(rules),
        'snapshot_targets': snapshot_targets,
    }
