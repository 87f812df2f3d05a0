from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of application state and the last export/import
session using JSON. Unknown or missing keys are merged with defaults so that
older state files keep loading.
"""

import json
import logging
import os
from typing import Any, Dict

from gallerysnap.domain.constants import (
    CURRENT_CONFIG_VERSION,
    JPEG_QUALITY,
    SHORT_EDGE_TARGET,
)
from gallerysnap.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"


def get_config_path() -> str:
    """Absolute path of the persisted application state."""
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)

# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration (Session State).
    This dictionary drives the behavior of the export/import engine.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    base = os.getcwd()
    return {
        # IO Paths
        "input_path": base,
        "output_path": "",

        # Transcoding
        "short_edge_target": SHORT_EDGE_TARGET,
        "jpeg_quality": JPEG_QUALITY,

        # Ingestion
        "include_hidden": False,

        # Snapshot document
        "max_snapshot_mb": 0,
        "pretty_json": False,
    }


def get_default_app_state() -> Dict[str, Any]:
    """
    Generate the complete default application state structure.

    Returns:
        Dict[str, Any]: The full JSON structure for config.json.
    """
    return {
        "version": CURRENT_CONFIG_VERSION,
        "app_settings": {
            "locale": "en",
            "log_level": "INFO",
        },
        "last_session": get_default_config(),
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_app_state() -> Dict[str, Any]:
    """
    Load application state from disk.

    Returns:
        Dict[str, Any]: The loaded state or a default structure on failure.
    """
    default_state = get_default_app_state()
    config_file = get_config_path()

    if not os.path.exists(config_file):
        logger.debug("Config file not found. Returning defaults.")
        return default_state

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return default_state

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return default_state

    state = default_state
    if isinstance(data.get("app_settings"), dict):
        state["app_settings"].update(data["app_settings"])
    if isinstance(data.get("last_session"), dict):
        state["last_session"].update(data["last_session"])

    state["version"] = CURRENT_CONFIG_VERSION
    return state


def save_app_state(state: Dict[str, Any]) -> None:
    """
    Persist application state to disk.

    Args:
        state: The state dictionary to save.
    """
    config_file = get_config_path()
    try:
        os.makedirs(os.path.dirname(config_file), exist_ok=True)
        state["version"] = CURRENT_CONFIG_VERSION
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_file}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")

# -----------------------------------------------------------------------------
# Facade API
# -----------------------------------------------------------------------------
def save_config(config: Dict[str, Any]) -> None:
    """Store ``config`` as the last session, keeping the other state sections."""
    state = load_app_state()
    state["last_session"] = dict(config)
    save_app_state(state)
