#!/usr/bin/env python3
"""
Error types raised while reading and summarizing a time log.
"""

from __future__ import annotations

from pathlib import Path


class TimeclockError(Exception):
    """
    Base class for fatal timeclock errors.
    """


class MalformedLineError(TimeclockError):
    """
    Raised when a log line does not match the entry grammar.

    Attributes
    ----------
    line_no : int
        1-based line number in the log file.
    line : str
        Offending line text.

    Examples
    --------
    >>> str(MalformedLineError(3, "x 2020/01/01 09:00:00"))
    "Parse error on line 3: invalid line 'x 2020/01/01 09:00:00'"
    """

    def __init__(self, line_no: int, line: str) -> None:
        self.line_no = line_no
        self.line = line
        super().__init__(f"Parse error on line {line_no}: invalid line {line!r}")


class OrderingError(TimeclockError):
    """
    Raised when clock-in and clock-out entries do not alternate.

    Attributes
    ----------
    line_no : int
        1-based line number of the entry that broke the ordering.
    """

    def __init__(self, line_no: int, message: str) -> None:
        self.line_no = line_no
        super().__init__(f"Parse error on line {line_no}: {message}")


class ConsistencyError(TimeclockError):
    """
    Raised when aggregated hours fail to reconcile.
    """


class TimelogNotFoundError(TimeclockError):
    """
    Raised when the time log file is missing or unreadable.
    """

    def __init__(self, path: Path | None) -> None:
        self.path = path
        super().__init__(f"Unable to find your timelog file at: '{path}'")


class ConfigError(TimeclockError):
    """
    Raised when the configuration file cannot be parsed.
    """
