#!/usr/bin/env python3
"""
Load timeclock settings from a TOML file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import tomllib

from .errors import ConfigError

log = logging.getLogger(__name__)

DEFAULT_WORK_HOURS = 7.0
DEFAULT_END_TIME = "17:00"


@dataclass(frozen=True)
class TimeclockConfig:
    """
    User settings for reports and the live timer.

    Attributes
    ----------
    timelog_path : Optional[Path]
        Path to the time log file.
    day_starts : Optional[str]
        Work day start as ``HH:MM``, or ``"auto"`` for the first entry.
    work_hours : float
        Target hours per work day.
    end_time : str
        Usual end of the work day, shown next to the projection.
    non_billable_entities : Tuple[str, ...]
        Group key prefixes counted as non-billable.
    """

    timelog_path: Optional[Path] = None
    day_starts: Optional[str] = None
    work_hours: float = DEFAULT_WORK_HOURS
    end_time: str = DEFAULT_END_TIME
    non_billable_entities: Tuple[str, ...] = field(default_factory=tuple)


def get_config_path() -> Path:
    """
    Return the configuration file path.

    Returns
    -------
    Path
        Configuration TOML path.

    Examples
    --------
    >>> isinstance(get_config_path(), Path)
    True
    """
    override = os.environ.get("TIMECLOCK_CONFIG_PATH", "").strip()
    if override:
        return Path(os.path.expandvars(os.path.expanduser(override)))
    return Path.home() / ".config" / "timeclock" / "config.toml"


def _expand_path(value: Any) -> Optional[Path]:
    text = str(value or "").strip()
    if not text:
        return None
    return Path(os.path.expandvars(os.path.expanduser(text)))


def _is_day_start(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    if value == "auto":
        return True
    try:
        datetime.strptime(value.strip(), "%H:%M")
    except ValueError:
        return False
    return True


def parse_config(raw: Dict[str, Any]) -> TimeclockConfig:
    """
    Build settings from parsed TOML data.

    Examples
    --------
    >>> parse_config({"work_hours": 8, "non_billable_entities": ["Admin"]}).work_hours
    8.0
    >>> parse_config({}).non_billable_entities
    ()
    """
    entities = raw.get("non_billable_entities", [])
    if not isinstance(entities, list) or not all(isinstance(e, str) for e in entities):
        raise ConfigError("non_billable_entities must be a list of strings.")
    day_starts = raw.get("day_starts")
    if day_starts is not None and not _is_day_start(day_starts):
        raise ConfigError("day_starts must be a string such as \"8:00\" or \"auto\".")
    try:
        work_hours = float(raw.get("work_hours", DEFAULT_WORK_HOURS))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid numeric setting: {exc}") from exc
    return TimeclockConfig(
        timelog_path=_expand_path(raw.get("timelog_path")),
        day_starts=day_starts,
        work_hours=work_hours,
        end_time=str(raw.get("end_time", DEFAULT_END_TIME)),
        non_billable_entities=tuple(entities),
    )


def load_config(path: Optional[Path] = None) -> TimeclockConfig:
    """
    Load settings from disk.

    Parameters
    ----------
    path : Optional[Path], optional
        Path to the configuration file (defaults to standard path).

    Returns
    -------
    TimeclockConfig
        Parsed settings, or defaults when the file is missing.

    Raises
    ------
    ConfigError
        If the file cannot be read or is not valid TOML.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        log.debug("No config file at %s; using defaults", config_path)
        return TimeclockConfig()
    try:
        parsed = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Unable to read config file {config_path}: {exc}") from exc
    log.debug("Loaded config from %s", config_path)
    return parse_config(parsed)
