#!/usr/bin/env python3
"""
Live timer that appends clock-in/clock-out lines to the time log.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from .entries import TimeEntry, decode_log_lines, format_entry, format_timestamp, parse_line

log = logging.getLogger(__name__)


def last_log_line(path: Path) -> Optional[str]:
    """
    Return the last non-blank line of the log, if any.
    """
    if not path.exists():
        return None
    last = None
    with path.open("rb") as handle:
        for line in decode_log_lines(handle):
            text = line.strip()
            if text:
                last = text
    return last


def running_entry(path: Path) -> Optional[TimeEntry]:
    """
    Return the open clock-in entry, or None when no timer is running.
    """
    line = last_log_line(path)
    if not line or not line.startswith("i "):
        return None
    return parse_line(line)


def append_entry(path: Path, entry: TimeEntry) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(format_entry(entry) + "\n")


def stop_timer(path: Path, now: datetime) -> Optional[TimeEntry]:
    """
    Clock out of the running entry.

    Parameters
    ----------
    path : Path
        Time log path.
    now : datetime
        Clock-out time.

    Returns
    -------
    Optional[TimeEntry]
        The entry that was stopped, or None if nothing was running.
    """
    running = running_entry(path)
    if running is None:
        return None
    append_entry(path, TimeEntry(is_start=False, timestamp=now))
    log.debug("Stopped %r at %s", running.description, now)
    return running


def start_timer(path: Path, description: str, now: datetime) -> Optional[TimeEntry]:
    """
    Stop any running entry and clock in with a new description.

    Parameters
    ----------
    path : Path
        Time log path.
    description : str
        Activity description; double quotes are removed.
    now : datetime
        Clock-in time.

    Returns
    -------
    Optional[TimeEntry]
        The entry that was stopped first, if any.

    Raises
    ------
    ValueError
        If the description is blank.
    """
    cleaned = " ".join(description.replace('"', "").split())
    if not cleaned:
        raise ValueError("A description is required to start a timer.")
    stopped = stop_timer(path, now)
    append_entry(path, TimeEntry(is_start=True, timestamp=now, description=cleaned))
    return stopped


def timer_status(path: Path) -> str:
    """
    Describe the running timer.

    Examples
    --------
    >>> timer_status(Path("/nonexistent/timelog"))
    'No timer is running'
    """
    running = running_entry(path)
    if running is None:
        return "No timer is running"
    return f"{running.description} has been running since {format_timestamp(running.timestamp)}"
