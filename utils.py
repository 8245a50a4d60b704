# utils.py
"""
Utility functions for the vector field simulation.

This module provides the logging setup and configuration loading used by
the entry point. Neither belongs to the physics or the rendering.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary that may contain a "logging" key with
#       "level", "format", and "log_file" sub-keys.
#   - Side Effects: Configures the root Python logger with a console
#     handler and a rotating file handler. Creates the log directory.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed JSON object.
#   - Side Effects: Logs and re-raises FileNotFoundError, JSONDecodeError,
#     and ValueError if the top level is not an object.
#
# get_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
#   - Outputs: config[name], or an empty dict when absent.
#   - Side Effects: Raises ValueError if the section is not an object.
#
# get_run_control(config: Dict[str, Any]) -> Dict[str, Any]:
#   - Outputs: {"max_steps": None | int >= 1, "log_throttle_steps": int >= 1}.
#   - Side Effects: Logs CRITICAL and raises ValueError on any other value.

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/vector_field.log'
LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUPS = 5
DEFAULT_LOG_THROTTLE_STEPS = 100


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Routes the root logger to the console and to a size-capped log file.

    Any handlers already on the root logger are replaced, so calling this
    twice does not duplicate output.
    """
    settings = config.get('logging', {})
    level = settings.get('level', 'INFO').upper()
    log_file = settings.get('log_file', DEFAULT_LOG_FILE)
    formatter = logging.Formatter(settings.get('format', DEFAULT_LOG_FORMAT))

    if os.path.dirname(log_file):
        os.makedirs(os.path.dirname(log_file), exist_ok=True)

    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
        ),
    ]
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.info(f"Logging to console and {log_file} at {level}.")


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise

    if not isinstance(config, dict):
        msg = f"Configuration in {path} must be a JSON object, got {type(config).__name__}."
        logging.error(msg)
        raise ValueError(msg)

    logging.info("Configuration loaded successfully.")
    return config


def get_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Returns a top-level configuration section, empty if absent."""
    section = config.get(name, {})
    if not isinstance(section, dict):
        msg = f"Configuration section '{name}' must be a JSON object."
        logging.critical(msg)
        raise ValueError(msg)
    return section


def get_run_control(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Returns the validated "run_control" section.

    max_steps is None (run until the window closes) or a positive integer;
    log_throttle_steps is a positive integer.
    """
    section = get_section(config, 'run_control')
    max_steps = section.get('max_steps')
    log_throttle = section.get('log_throttle_steps', DEFAULT_LOG_THROTTLE_STEPS)

    for name, value in (('max_steps', max_steps), ('log_throttle_steps', log_throttle)):
        if value is None and name == 'max_steps':
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            msg = f"Configuration error: run_control '{name}' must be a positive integer, got {value!r}."
            logging.critical(msg)
            raise ValueError(msg)

    return {'max_steps': max_steps, 'log_throttle_steps': log_throttle}
