import copy
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG = {
    "api": {
        "base_url": "http://localhost:3001",
        "timeout_seconds": 10,
    },
    # IANA zone name; None means the host's local zone
    "timezone": None,
    "shift_rules": {
        "cutoff_hour": 7,
        "shift_start_hour": 14,
    },
    "history": {
        "default_days": 30,
    },
    "events": {
        "default_days": 7,
    },
    "scheduler": {
        "refresh_interval_minutes": 5,
    },
    "slack": {
        "enabled": True,
        "notify_channel": "",
        "suppress_repeats": True,
    },
    "export": {
        "output_dir": "exports",
    },
}

# environment variable -> (section, key); section None means top level
ENV_OVERRIDES = {
    "ATTENDANCE_API_BASE": ("api", "base_url"),
    "DASHBOARD_TIMEZONE": (None, "timezone"),
    "SLACK_NOTIFY_CHANNEL": ("slack", "notify_channel"),
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into a copy of base, recursing into nested sections."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env(config: dict) -> dict:
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if not value:
            continue
        if section is None:
            config[key] = value
        else:
            config[section] = {**config[section], key: value}
    return config


def load_config(path: str = "config.yaml") -> dict:
    """Load the YAML config, merge it over the defaults and apply env overrides."""
    load_dotenv()
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        config = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)
    else:
        config = copy.deepcopy(DEFAULT_CONFIG)
    config = _apply_env(config)
    config["api"]["base_url"] = str(config["api"]["base_url"]).rstrip("/")
    return config
