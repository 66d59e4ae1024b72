"""
Persistent storage for the CLI's last seen building data hash.

This module manages the file:

    ~/.campusnav/state.json

The library itself never stores anything; only ``campusnav buildings
--if-changed`` uses this to remember which data it has already shown.
"""

from __future__ import annotations

import json
from pathlib import Path


def _default_state_path() -> Path:
    """
    Return the default path of state.json in the user's home directory.

    Using a function instead of a constant lets tests override the path.
    """
    return Path.home() / ".campusnav" / "state.json"


def load_data_hash(path: str | Path | None = None) -> str | None:
    """
    Load the last seen data hash.

    Returns None if the file does not exist or is invalid.
    """
    state_path = Path(path) if path is not None else _default_state_path()

    # First run: nothing seen yet
    if not state_path.exists():
        return None

    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
        value = data.get("data_hash")
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        return None


def save_data_hash(value: str, path: str | Path | None = None) -> None:
    """
    Save the data hash, creating parent directories if needed.
    """
    state_path = Path(path) if path is not None else _default_state_path()
    state_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"data_hash": value.strip()}
    state_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
