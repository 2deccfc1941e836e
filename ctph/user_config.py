"""
User configuration persistence.

Stores hashing and matching preferences in ~/.ctph/config.json so they
persist across sessions. Environment variables always take priority.
"""
import os
import json
import logging

from pathlib import Path
from typing import Optional, Dict, Any

from ctph.hashing import FuzzyHashMode

logger = logging.getLogger("CTPH")

CONFIG_DIR = Path.home() / ".ctph"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Maps config keys to their corresponding environment variable names
_ENV_VAR_MAP = {
    "eliminate_sequences": "CTPH_ELIMINATE_SEQUENCES",
    "do_not_truncate": "CTPH_DO_NOT_TRUNCATE",
    "match_threshold": "CTPH_MATCH_THRESHOLD",
}

_DEFAULTS = {
    "eliminate_sequences": True,
    "do_not_truncate": False,
    "match_threshold": 0,
}

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def _ensure_config_dir() -> None:
    """Create ~/.ctph/ directory if it does not exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_user_config() -> Dict[str, Any]:
    """Read ~/.ctph/config.json and return its contents as a dict."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            logger.warning(f"User config at {CONFIG_FILE} is not a JSON object, ignoring.")
            return {}
        return data
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to read user config from {CONFIG_FILE}: {e}")
        return {}


def save_user_config(config: Dict[str, Any]) -> None:
    """Write config dict to ~/.ctph/config.json, creating the directory if needed."""
    _ensure_config_dir()
    try:
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2, sort_keys=True)
        CONFIG_FILE.chmod(0o600)
    except OSError as e:
        logger.error(f"Failed to write user config to {CONFIG_FILE}: {e}")
        raise


def get_config_value(key: str) -> Optional[str]:
    """
    Retrieve a config value with environment variable priority.

    Resolution order:
      1. Environment variable (e.g. CTPH_MATCH_THRESHOLD)
      2. ~/.ctph/config.json
      3. None
    """
    env_var = _ENV_VAR_MAP.get(key)
    if env_var:
        env_val = os.getenv(env_var)
        if env_val:
            return env_val

    config = load_user_config()
    val = config.get(key)
    if isinstance(val, bool):
        return "true" if val else "false"
    return str(val) if val is not None else None


def set_config_value(key: str, value: str) -> None:
    """Store a config value in ~/.ctph/config.json."""
    config = load_user_config()
    config[key] = value
    save_user_config(config)
    logger.info(f"Config key '{key}' saved to {CONFIG_FILE}")


def delete_config_value(key: str) -> bool:
    """Remove a config key from ~/.ctph/config.json. Returns True if key existed."""
    config = load_user_config()
    if key in config:
        del config[key]
        save_user_config(config)
        logger.info(f"Config key '{key}' removed from {CONFIG_FILE}")
        return True
    return False


def get_config_view() -> Dict[str, Any]:
    """
    Return the stored config, noting which keys are currently overridden
    by environment variables.
    """
    view = dict(load_user_config())

    overrides = {}
    for key, env_var in _ENV_VAR_MAP.items():
        if os.getenv(env_var):
            overrides[key] = f"(overridden by ${env_var} environment variable)"
    if overrides:
        view["_env_overrides"] = overrides

    return view


def get_bool_setting(key: str) -> bool:
    """Resolve a boolean setting, falling back to its default on bad input."""
    default = bool(_DEFAULTS.get(key, False))
    raw = get_config_value(key)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    logger.warning(f"Config key '{key}' has non-boolean value {raw!r}; using default {default}.")
    return default


def get_int_setting(key: str) -> int:
    """Resolve an integer setting, falling back to its default on bad input."""
    default = int(_DEFAULTS.get(key, 0))
    raw = get_config_value(key)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning(f"Config key '{key}' has non-integer value {raw!r}; using default {default}.")
        return default


def resolve_hash_mode() -> FuzzyHashMode:
    """Generation flags implied by the stored configuration."""
    mode = FuzzyHashMode.NONE
    if get_bool_setting("do_not_truncate"):
        mode |= FuzzyHashMode.DO_NOT_TRUNCATE
    return mode
