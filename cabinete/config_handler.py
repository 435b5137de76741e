"""
Configuration file handling for the cabinete CLI tool.
"""

import json
from pathlib import Path
from typing import Any, Dict


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """Load configuration from JSON file."""
    try:
        with open(config_path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found at {config_path}")

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a JSON object")
    return data


def save_config_file(config_path: Path, config_dict: Dict[str, Any]) -> None:
    """Save configuration to JSON file."""
    # Create parent directories if they don't exist
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config_dict, f, indent=2)
