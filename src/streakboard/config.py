"""Configuration file management for streakboard.

Reads and writes ~/.streakboard/config.json: the signed-in identity, the local
account registry, the database location, and display/strictness settings.
"""
from __future__ import annotations

import json
from pathlib import Path

from streakboard.leaderboard import DEFAULT_LEADERBOARD_SIZE

DEFAULT_CONFIG_PATH: Path = Path.home() / ".streakboard" / "config.json"
DEFAULT_DB_PATH: Path = Path.home() / ".streakboard" / "data.db"


def load_config(config_path: Path | None = None) -> dict:
    """Load config from JSON file. Returns {} if file missing or invalid."""
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict, config_path: Path | None = None) -> None:
    """Write config dict to JSON file. Creates parent dirs if needed."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def update_config(config_path: Path | None = None, **changes: object) -> dict:
    """Apply changes to the stored config and save. A value of None removes the key."""
    config = load_config(config_path)
    for key, value in changes.items():
        if value is None:
            config.pop(key, None)
        else:
            config[key] = value
    save_config(config, config_path)
    return config


def get_db_path(config_path: Path | None = None) -> Path:
    """Return the configured database path, or the default."""
    raw = load_config(config_path).get("db_path")
    return Path(raw).expanduser() if raw else DEFAULT_DB_PATH


def get_leaderboard_size(config_path: Path | None = None) -> int:
    """Return the configured top-N size. Non-positive or bad values fall back to 5."""
    raw = load_config(config_path).get("leaderboard_size", DEFAULT_LEADERBOARD_SIZE)
    try:
        size = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LEADERBOARD_SIZE
    return size if size > 0 else DEFAULT_LEADERBOARD_SIZE


def is_strict_dates(config_path: Path | None = None) -> bool:
    """True if invalid dates should raise instead of being skipped."""
    return bool(load_config(config_path).get("strict_dates", False))
