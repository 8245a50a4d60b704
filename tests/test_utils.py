# test_utils.py
"""
Tests for configuration loading and logging setup.
"""
import json
import logging
import logging.handlers
import pytest
from pathlib import Path

from config import SimulationConfig
from utils import get_run_control, get_section, load_config, setup_logging


def test_load_config_reads_shipped_defaults():
    config = load_config(str(Path(__file__).resolve().parent.parent / 'config.json'))
    sim_config = SimulationConfig.from_params(get_section(config, 'simulation_parameters'))
    assert sim_config == SimulationConfig()


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.json"))


def test_load_config_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json")
    with pytest.raises(json.JSONDecodeError):
        load_config(str(path))


def test_load_config_rejects_non_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_get_section():
    config = {"run_control": {"max_steps": 10}, "visualization": 3}
    assert get_section(config, "run_control") == {"max_steps": 10}
    assert get_section(config, "logging") == {}
    with pytest.raises(ValueError):
        get_section(config, "visualization")


def test_setup_logging_installs_console_and_rotating_file(tmp_path):
    log_file = tmp_path / "nested" / "run.log"
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging({"logging": {"level": "debug", "log_file": str(log_file)}})
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)

        logging.info("hello from the test")
        for handler in root.handlers:
            handler.flush()
        assert "hello from the test" in log_file.read_text()
    finally:
        for handler in list(root.handlers):
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_get_run_control_defaults():
    assert get_run_control({}) == {"max_steps": None, "log_throttle_steps": 100}
    run = get_run_control({"run_control": {"max_steps": 500, "log_throttle_steps": 10}})
    assert run == {"max_steps": 500, "log_throttle_steps": 10}


@pytest.mark.parametrize("run_control", [
    {"log_throttle_steps": 0},
    {"log_throttle_steps": -5},
    {"log_throttle_steps": 2.5},
    {"log_throttle_steps": None},
    {"max_steps": 0},
    {"max_steps": "100"},
    {"max_steps": 10.0},
    {"max_steps": True},
])
def test_get_run_control_rejects_invalid_values(run_control):
    with pytest.raises(ValueError):
        get_run_control({"run_control": run_control})
