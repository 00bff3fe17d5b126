"""Settings manager for jspnav using TOML files."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from . import config

logger = logging.getLogger(__name__)

SECTION = "navigator"


@dataclass
class NavigatorSettings:
    """Resolved navigator settings for one workspace session."""

    source_paths: List[str] = field(default_factory=list)
    dependency_cache_root: Path = field(default_factory=lambda: config.DEFAULT_DEPENDENCY_CACHE)
    platform_home: Optional[Path] = field(
        default_factory=lambda: Path(config.DEFAULT_PLATFORM_HOME) if config.DEFAULT_PLATFORM_HOME else None
    )
    extract_dir: Path = field(default_factory=lambda: config.DEFAULT_EXTRACT_DIR)
    platform_prefixes: List[str] = field(default_factory=lambda: list(config.PLATFORM_PREFIXES))
    max_depth: int = config.MAX_DISCOVERY_DEPTH

    def to_dict(self) -> Dict[str, Any]:
        """Plain TOML-friendly representation (paths as strings, absent keys dropped)."""
        data = asdict(self)
        for key, value in list(data.items()):
            if value is None:
                del data[key]
            elif isinstance(value, Path):
                data[key] = str(value)
        return data


_PATH_KEYS = {"dependency_cache_root", "platform_home", "extract_dir"}
_LIST_KEYS = {"source_paths", "platform_prefixes"}
_INT_KEYS = {"max_depth"}
SETTING_KEYS = _PATH_KEYS | _LIST_KEYS | _INT_KEYS


def load_full_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    path = config_file or config.CONFIG_FILE
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read config file %s: %s", path, exc)
        return {}


def _save_full_config(data: Dict[str, Any], config_file: Optional[Path] = None) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    path = config_file or config.CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "w", encoding="utf-8") as f:
            toml.dump(data, f)
        return True
    except OSError as exc:
        logger.warning("Could not write config file %s: %s", path, exc)
        return False


def _coerce(key: str, value: Any) -> Any:
    if key in _PATH_KEYS:
        return Path(str(value)).expanduser() if value not in (None, "") else None
    if key in _LIST_KEYS:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return [str(item) for item in value]
    if key in _INT_KEYS:
        return int(value)
    raise ValueError(f"Unknown setting: {key}")


def load_settings(config_file: Optional[Path] = None) -> NavigatorSettings:
    """Load navigator settings from the ``[navigator]`` section.

    Missing file, missing section or malformed values fall back to defaults.
    """
    settings = NavigatorSettings()
    section = load_full_config(config_file).get(SECTION, {})
    if not isinstance(section, dict):
        return settings

    for key, value in section.items():
        if key not in SETTING_KEYS:
            logger.warning("Ignoring unknown setting '%s' in config", key)
            continue
        try:
            coerced = _coerce(key, value)
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring invalid value for '%s': %s", key, exc)
            continue
        if coerced is None and key != "platform_home":
            continue
        setattr(settings, key, coerced)
    return settings


def save_setting(key: str, value: str, config_file: Optional[Path] = None) -> bool:
    """Persist one navigator setting.

    Preserves other sections in the file.

    Args:
        key: One of :data:`SETTING_KEYS`.
        value: Raw string value; list settings accept comma-separated items.

    Returns:
        True if saved successfully.

    Raises:
        ValueError: If *key* is not a known setting or *value* does not parse.
    """
    coerced = _coerce(key, value)
    data = load_full_config(config_file)
    section = data.setdefault(SECTION, {})
    if coerced is None:
        section.pop(key, None)
    else:
        section[key] = str(coerced) if isinstance(coerced, Path) else coerced
    return _save_full_config(data, config_file)
