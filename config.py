"""
config.py – Configuration persistence helpers.

Handles loading and saving the application's ``config.json`` file, including
backwards-compatible key migration and first-run default creation.
"""

from __future__ import annotations

import copy
import json
import os
from typing import Any

from tmdb import DEFAULT_BATCH_DELAY, DEFAULT_BATCH_SIZE

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

CONFIG_DIR: str = os.path.join(os.path.dirname(__file__), "config")
CONFIG_FILE: str = os.path.join(CONFIG_DIR, "config.json")

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: dict[str, Any] = {
    "tmdb_api_key": "",
    "request_timeout": 15,
    "enrichment": {
        "batch_size": DEFAULT_BATCH_SIZE,
        "batch_delay_ms": int(DEFAULT_BATCH_DELAY * 1000),
    },
}

# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def load_config() -> dict[str, Any]:
    """Load configuration from disk.

    If the config file does not exist it is created from :data:`DEFAULT_CONFIG`
    and a copy of that default dict is returned.  When loading an existing file:

    * Missing keys are filled in from :data:`DEFAULT_CONFIG` (forward-compat).
    * The legacy key ``tmdb_key`` is migrated to ``tmdb_api_key`` and the
      updated config is persisted automatically.

    Returns:
        The (possibly migrated) configuration dictionary.
    """
    if not os.path.exists(CONFIG_FILE):
        save_config(copy.deepcopy(DEFAULT_CONFIG))
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(CONFIG_FILE, "r") as fh:
            cfg: dict[str, Any] = json.load(fh)

        for key, default_value in DEFAULT_CONFIG.items():
            cfg.setdefault(key, copy.deepcopy(default_value))
            if isinstance(default_value, dict) and isinstance(cfg[key], dict):
                for sub_key, sub_val in default_value.items():
                    cfg[key].setdefault(sub_key, sub_val)

        if cfg.get("tmdb_key") and not cfg.get("tmdb_api_key"):
            cfg["tmdb_api_key"] = cfg.pop("tmdb_key")
            save_config(cfg)

        return cfg

    except Exception:
        # If the file is corrupt or unreadable, fall back to safe defaults
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: dict[str, Any]) -> None:
    """Persist *config* to :data:`CONFIG_FILE` as pretty-printed JSON.

    Args:
        config: The configuration dictionary to write.
    """
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_FILE, "w") as fh:
        json.dump(config, fh, indent=4)


def enrichment_settings(config: dict[str, Any]) -> tuple[str, int, float]:
    """Return ``(tmdb_api_key, batch_size, batch_delay_seconds)`` from *config*.

    Non-numeric or non-positive values fall back to the defaults.
    """
    api_key = str(config.get("tmdb_api_key") or "").strip()
    enrichment = config.get("enrichment")
    if not isinstance(enrichment, dict):
        enrichment = {}

    try:
        batch_size = int(enrichment.get("batch_size", DEFAULT_BATCH_SIZE))
    except (TypeError, ValueError):
        batch_size = DEFAULT_BATCH_SIZE
    if batch_size < 1:
        batch_size = DEFAULT_BATCH_SIZE

    try:
        batch_delay = float(enrichment.get("batch_delay_ms", DEFAULT_BATCH_DELAY * 1000)) / 1000
    except (TypeError, ValueError):
        batch_delay = DEFAULT_BATCH_DELAY
    if batch_delay < 0:
        batch_delay = DEFAULT_BATCH_DELAY

    return api_key, batch_size, batch_delay


def request_timeout(config: dict[str, Any]) -> int:
    """Return the list-page HTTP timeout from *config*, in seconds."""
    try:
        timeout = int(config.get("request_timeout", DEFAULT_CONFIG["request_timeout"]))
    except (TypeError, ValueError):
        return DEFAULT_CONFIG["request_timeout"]
    return timeout if timeout > 0 else DEFAULT_CONFIG["request_timeout"]
