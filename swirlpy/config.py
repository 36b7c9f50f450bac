#!/usr/bin/env python3
"""
Configuration management for swirlpy.
Settings live in ~/.swirlpy/config.json (SWIRLPY_HOME overrides the directory).
"""

import os
import json
from pathlib import Path
from typing import Dict, Any

DEFAULT_MAX_ATTEMPTS = 3


def get_config_dir() -> Path:
    """Get the swirlpy config directory (~/.swirlpy)"""
    home = os.environ.get('SWIRLPY_HOME')
    config_dir = Path(home).expanduser() if home else Path.home() / '.swirlpy'
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the config file path"""
    return get_config_dir() / 'config.json'


def load_config() -> Dict[str, Any]:
    """Load configuration from file"""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                config = json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
        return config if isinstance(config, dict) else {}
    return {}


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to file"""
    config_path = get_config_path()
    with open(config_path, 'w') as f:
        json.dump(config, f, indent=2)


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a specific config value"""
    config = load_config()
    return config.get(key, default)


def set_config_value(key: str, value: Any) -> None:
    """Set a specific config value"""
    config = load_config()
    config[key] = value
    save_config(config)


def get_progress_dir() -> Path:
    """Directory holding lesson progress records"""
    configured = get_config_value('progress_dir')
    path = Path(configured).expanduser() if configured else get_config_dir() / 'progress'
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_courses_dir() -> Path:
    """Directory scanned for installed courses"""
    configured = get_config_value('courses_dir')
    return Path(configured).expanduser() if configured else get_config_dir() / 'courses'


def get_max_attempts() -> int:
    """Graded attempts allowed per question before the answer is revealed"""
    value = get_config_value('max_attempts', DEFAULT_MAX_ATTEMPTS)
    try:
        value = int(value)
    except (TypeError, ValueError):
        return DEFAULT_MAX_ATTEMPTS
    return value if value > 0 else DEFAULT_MAX_ATTEMPTS
