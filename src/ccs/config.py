"""User configuration: scan limits, transcript root and resume program."""

from __future__ import annotations

import json

from ccs.paths import CONFIG_DIR, PROJECTS_DIR

CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_CONFIG = {
    "max_age_days": 0,
    "max_size_mb": 0,
    "projects_dir": None,
    "resume_command": "claude",
}


def _normalize_config(data: object) -> dict:
    config = dict(DEFAULT_CONFIG)
    if not isinstance(data, dict):
        return config

    days = data.get("max_age_days")
    if isinstance(days, int) and not isinstance(days, bool) and days >= 0:
        config["max_age_days"] = days

    size = data.get("max_size_mb")
    if isinstance(size, (int, float)) and not isinstance(size, bool) and size >= 0:
        config["max_size_mb"] = size

    for key in ("projects_dir", "resume_command"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            config[key] = value.strip()

    return config


def load_config() -> dict:
    """Load config, returning defaults for missing/corrupt data."""
    if not CONFIG_FILE.is_file():
        return dict(DEFAULT_CONFIG)
    try:
        with open(CONFIG_FILE) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return dict(DEFAULT_CONFIG)
    return _normalize_config(data)


def projects_dir(config: dict) -> str:
    return config.get("projects_dir") or str(PROJECTS_DIR)
