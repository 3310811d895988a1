"""Tests for configuration loading, validation and logging setup."""

import json
import logging

import pytest

from utils import ConfigurationError, load_config, setup_logging, validate_simulation_params


def test_load_config_roundtrip(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"simulation_parameters": {"seed": 3}}))
    assert load_config(str(path)) == {"simulation_parameters": {"seed": 3}}


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.json"))


def test_load_config_bad_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(json.JSONDecodeError):
        load_config(str(path))


def test_shipped_configs_are_valid(project_root):
    for name, dims, radius in [("config.json", 2, 80.0), ("config_3d.json", 3, 100.0)]:
        config = load_config(str(project_root / name))
        settings = validate_simulation_params(config["simulation_parameters"])
        assert settings["dimensions"] == dims
        assert settings["interaction_radius"] == radius
        assert settings["half_extent"] == 250.0
        assert settings["damping"] == 0.5
        assert settings["particles_per_group"] == {"yellow": 1000, "red": 1000, "green": 1000}


def test_validation_normalizes_counts():
    settings = validate_simulation_params({"particles_per_group": 5, "groups": ["a", "b"], "rules": []})
    assert settings["particles_per_group"] == {"a": 5, "b": 5}
    assert settings["seed"] is None
    assert settings["snapshot_targets"] is False


def test_validation_rejects_partial_count_mapping():
    with pytest.raises(ConfigurationError, match="particles_per_group"):
        validate_simulation_params({"particles_per_group": {"yellow": 3}})


def test_validation_requires_radius_for_unusual_dimensions():
    with pytest.raises(ConfigurationError, match="interaction_radius"):
        validate_simulation_params({"dimensions": 4})
    settings = validate_simulation_params({"dimensions": 4, "interaction_radius": 50})
    assert settings["interaction_radius"] == 50.0


def test_configuration_error_is_logged_critical(caplog):
    with caplog.at_level(logging.CRITICAL):
        with pytest.raises(ConfigurationError):
            validate_simulation_params({"damping": -1})
    assert any(r.levelno == logging.CRITICAL for r in caplog.records)


def test_setup_logging_installs_console_and_file_handlers(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "logs" / "sim.log"
    try:
        setup_logging({"logging": {"level": "debug", "log_file": str(log_file)}})
        assert root.level == logging.DEBUG
        kinds = {type(h).__name__ for h in root.handlers}
        assert kinds == {"StreamHandler", "RotatingFileHandler"}
        logging.info("hello from the test")
        for handler in root.handlers:
            handler.flush()
        assert "hello from the test" in log_file.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
