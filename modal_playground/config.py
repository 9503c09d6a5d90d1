"""
Configuration management for the playground.

Handles persistent configuration including:
- Server settings (title, host, port, storage secret)
- Editor defaults (propositional variables, active variable count)
- Logging level and the invariant self-check

Config is stored in config.json next to the executable/project root.
"""

import json
import logging
import os
from typing import Any, Dict, List

from modal_playground.paths import get_config_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "PLAYGROUND_"

DEFAULTS: Dict[str, Any] = {
    "title": "Modal Logic Playground",
    "host": "127.0.0.1",
    "port": 8080,
    "log_level": "INFO",
    "propvars": ["p", "q", "r", "s", "t"],
    "var_count": 2,
    "check_invariants": False,
    "storage_secret": None,
}


def load_config() -> dict:
    """Load configuration from config.json."""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def save_config(config: dict) -> None:
    """Save configuration to config.json."""
    config_path = get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw setting to the type of its default. Raises ValueError on bad input."""
    default = DEFAULTS[name]
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"not a boolean: {value!r}")
    if isinstance(default, int):
        if isinstance(value, bool):
            raise ValueError(f"not an integer: {value!r}")
        return int(value)
    if isinstance(default, list):
        if isinstance(value, str):
            value = [part.strip() for part in value.split(",")]
        names = [str(v) for v in value if str(v)]
        if not names or len(set(names)) != len(names) or not all(n.isidentifier() for n in names):
            raise ValueError(f"not a list of distinct variable names: {value!r}")
        return names
    if name == "log_level":
        level = str(value).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value!r}")
        return level
    return None if value is None else str(value)


def get_setting(name: str) -> Any:
    """
    Get a setting.

    Priority:
    1. Environment variable PLAYGROUND_<NAME>
    2. Stored in config.json
    3. Built-in default
    """
    if name not in DEFAULTS:
        raise KeyError(f"Unknown setting: {name}")

    env_value = os.environ.get(ENV_PREFIX + name.upper())
    if env_value is not None and env_value != "":
        raw, source = env_value, "environment"
    else:
        config = load_config()
        if name not in config:
            return DEFAULTS[name]
        raw, source = config[name], "config.json"

    try:
        return _coerce(name, raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid {name} in {source} ({e}); using default {DEFAULTS[name]!r}")
        return DEFAULTS[name]


def set_setting(name: str, value: Any) -> None:
    """Save a setting to config.json."""
    if name not in DEFAULTS:
        raise KeyError(f"Unknown setting: {name}")
    config = load_config()
    config[name] = value
    save_config(config)


def get_propvars() -> List[str]:
    return get_setting("propvars")


def get_var_count() -> int:
    """Active variable count, clamped to the declared variables."""
    count = get_setting("var_count")
    declared = len(get_propvars())
    if not 1 <= count <= declared:
        logger.warning(f"var_count {count} outside 1..{declared}; clamping")
        count = max(1, min(count, declared))
    return count
