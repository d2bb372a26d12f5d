"""Configuration manager for the indexer using a TOML file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from . import config

logger = logging.getLogger(__name__)

SECTION = "indexer"

DEFAULT_CONFIG: Dict[str, Any] = {
    "threads": 0,
    "output": config.DEFAULT_OUTPUT,
    "format": config.DEFAULT_FORMAT,
    "skip_dirs": [],
}

_VALUE_TYPES: Dict[str, tuple] = {
    "threads": (int, str),
    "output": (str,),
    "format": (str,),
    "skip_dirs": (list,),
}


def _config_path(path: Optional[Path]) -> Path:
    return Path(path) if path is not None else config.CONFIG_FILE


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    config_file = _config_path(path)
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", config_file, exc)
        return {}


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the ``[indexer]`` section merged over :data:`DEFAULT_CONFIG`.

    Unknown keys are dropped and values of the wrong type fall back to the
    default.  A missing or malformed file yields the defaults.
    """
    merged = {key: (list(value) if isinstance(value, list) else value)
              for key, value in DEFAULT_CONFIG.items()}
    section = load_full_config(path).get(SECTION, {})
    if not isinstance(section, dict):
        logger.warning("Config section [%s] is not a table; using defaults", SECTION)
        return merged
    for key, value in section.items():
        if key not in DEFAULT_CONFIG:
            logger.debug("Ignoring unknown config key %s.%s", SECTION, key)
        elif not isinstance(value, _VALUE_TYPES[key]):
            logger.warning(
                "Ignoring config key %s.%s: expected %s, got %r",
                SECTION, key, " or ".join(t.__name__ for t in _VALUE_TYPES[key]), value,
            )
        else:
            merged[key] = value
    return merged


def save_config(path: Optional[Path] = None, **values: Any) -> bool:
    """Update the ``[indexer]`` section, preserving other sections.

    ``None`` values are skipped.  Returns True if the file was written.
    """
    config_file = _config_path(path)
    full = load_full_config(config_file)
    section = dict(full.get(SECTION, {}))
    for key, value in values.items():
        if key not in DEFAULT_CONFIG:
            raise ValueError(f"Unknown config key: {key}")
        if value is not None:
            section[key] = value
    full[SECTION] = section

    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            toml.dump(full, f)
    except OSError as exc:
        logger.error("Could not write config file %s: %s", config_file, exc)
        return False
    return True
