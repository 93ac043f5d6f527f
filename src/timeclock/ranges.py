#!/usr/bin/env python3
"""
Date windows, midnight splitting and description filtering for time pairs.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta
from re import Pattern
from typing import Iterable, List, Optional, Tuple

from .entries import TimeEntry, TimePair

log = logging.getLogger(__name__)

DEFAULT_BEGIN = datetime(2000, 1, 1)
DEFAULT_END = datetime(2050, 1, 1)

Window = Tuple[datetime, datetime]


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    """
    Return the last instant of a calendar day.

    Examples
    --------
    >>> end_of_day(date(2020, 1, 1)).strftime("%H:%M:%S")
    '23:59:59'
    """
    return datetime.combine(day, time.max)


def split_time_pair(pair: TimePair) -> Tuple[TimePair, TimePair]:
    """
    Split a pair at midnight into a before and after portion.

    Parameters
    ----------
    pair : TimePair
        Pair whose start date is on or before its end date.

    Returns
    -------
    Tuple[TimePair, TimePair]
        ``(start, end of start's day)`` and
        ``(start of end's day, end)``; the second portion keeps the
        original description.

    Examples
    --------
    >>> pair = TimePair(
    ...     TimeEntry(True, datetime(2020, 1, 1, 23, 0), "Acme"),
    ...     TimeEntry(False, datetime(2020, 1, 2, 1, 0)),
    ... )
    >>> first, second = split_time_pair(pair)
    >>> first.end.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    '2020-01-01 23:59:59'
    >>> second.start.timestamp, second.start.description
    (datetime.datetime(2020, 1, 2, 0, 0), 'Acme')
    """
    first_day = pair.start.timestamp.date()
    second_day = pair.end.timestamp.date()
    return (
        TimePair(pair.start, TimeEntry(False, end_of_day(first_day))),
        TimePair(
            TimeEntry(True, start_of_day(second_day), pair.start.description),
            pair.end,
        ),
    )


def split_by_day(pair: TimePair) -> List[TimePair]:
    """
    Split a pair into one pair per calendar day it touches.

    Examples
    --------
    >>> pair = TimePair(
    ...     TimeEntry(True, datetime(2020, 1, 1, 22, 0), "long"),
    ...     TimeEntry(False, datetime(2020, 1, 3, 2, 0)),
    ... )
    >>> [p.start.timestamp.day for p in split_by_day(pair)]
    [1, 2, 3]
    """
    pieces: List[TimePair] = []
    remaining = pair
    while remaining.start.timestamp.date() < remaining.end.timestamp.date():
        next_day = remaining.start.timestamp.date() + timedelta(days=1)
        first, _ = split_time_pair(remaining)
        pieces.append(first)
        remaining = TimePair(
            TimeEntry(True, start_of_day(next_day), pair.start.description),
            pair.end,
        )
    if not pieces or remaining.end.timestamp > remaining.start.timestamp:
        pieces.append(remaining)
    return pieces


def clip_pair(pair: TimePair, begin: datetime, end: datetime) -> List[TimePair]:
    """
    Restrict a pair to the half-open window ``[begin, end)``.

    Parameters
    ----------
    pair : TimePair
        Raw pair from the log.
    begin : datetime
        Window start (inclusive).
    end : datetime
        Window end (exclusive).

    Returns
    -------
    List[TimePair]
        Zero or more same-day pairs lying inside the window.

    Examples
    --------
    >>> pair = TimePair(
    ...     TimeEntry(True, datetime(2020, 1, 4, 20, 0), "Acme"),
    ...     TimeEntry(False, datetime(2020, 1, 5, 4, 0)),
    ... )
    >>> clipped = clip_pair(pair, datetime(2020, 1, 5), datetime(2020, 1, 6))
    >>> [(p.start.timestamp.hour, p.end.timestamp.hour) for p in clipped]
    [(0, 4)]
    >>> clip_pair(pair, datetime(2020, 1, 6), datetime(2020, 1, 7))
    []
    """
    start = pair.start.timestamp
    finish = pair.end.timestamp
    if finish < begin:
        return []
    if start >= end:
        return []
    if start >= begin and finish < end:
        if start.date() == finish.date():
            return [pair]
        return split_by_day(pair)

    clipped_start = pair.start
    if start < begin:
        clipped_start = TimeEntry(True, begin, pair.start.description)
    clipped_end = pair.end
    if finish >= end:
        clipped_end = TimeEntry(False, end)
    log.debug(
        "Clipped %s - %s to window %s - %s",
        start,
        finish,
        clipped_start.timestamp,
        clipped_end.timestamp,
    )
    pieces = split_by_day(TimePair(clipped_start, clipped_end))
    return [
        piece
        for piece in pieces
        if begin <= piece.start.timestamp < end
        and piece.end.timestamp > piece.start.timestamp
    ]


def compile_description_filter(pattern: Optional[str]) -> Optional[Pattern[str]]:
    """
    Compile a case-insensitive description regex.

    Raises
    ------
    re.error
        If the pattern is not a valid regular expression.
    """
    if not pattern:
        return None
    return re.compile(pattern, re.IGNORECASE)


def matches_description(
    pair: TimePair,
    regex: Optional[Pattern[str]],
    invert: bool = False,
) -> bool:
    """
    Return True when a pair passes the description filter.

    Examples
    --------
    >>> pair = TimePair(
    ...     TimeEntry(True, datetime(2020, 1, 1, 9), "Acme research"),
    ...     TimeEntry(False, datetime(2020, 1, 1, 10)),
    ... )
    >>> matches_description(pair, compile_description_filter("ACME"))
    True
    >>> matches_description(pair, compile_description_filter("acme"), invert=True)
    False
    >>> matches_description(pair, None, invert=True)
    True
    """
    if regex is None:
        return True
    matched = regex.search(pair.start.description) is not None
    return not matched if invert else matched


def filter_pairs(
    pairs: Iterable[TimePair],
    window: Window,
    regex: Optional[Pattern[str]] = None,
    invert: bool = False,
) -> List[TimePair]:
    """
    Clip pairs to a window and drop those failing the description filter.
    """
    begin, end = window
    kept: List[TimePair] = []
    for pair in pairs:
        for piece in clip_pair(pair, begin, end):
            if matches_description(piece, regex, invert):
                kept.append(piece)
    return kept


def beginning_of_week(day: date) -> date:
    """
    Return the Monday on or before a date.

    Examples
    --------
    >>> beginning_of_week(date(2020, 1, 5))
    datetime.date(2019, 12, 30)
    >>> beginning_of_week(date(2020, 1, 6))
    datetime.date(2020, 1, 6)
    """
    return day - timedelta(days=day.weekday())


def parse_week_spec(value: Optional[str]) -> Tuple[int, int]:
    """
    Parse a ``m[:n]`` weeks-ago range.

    Examples
    --------
    >>> parse_week_spec(None)
    (0, 0)
    >>> parse_week_spec("1")
    (1, 1)
    >>> parse_week_spec("2:0")
    (2, 0)
    """
    parts = [part.strip() for part in (value or "").split(":")]
    try:
        first = int(parts[0]) if parts[0] else 0
        second = int(parts[1]) if len(parts) > 1 and parts[1] else first
    except ValueError as exc:
        raise ValueError(f"Invalid week range: {value!r}") from exc
    if len(parts) > 2 or first < 0 or second < 0:
        raise ValueError(f"Invalid week range: {value!r}")
    return first, second


def week_window(value: Optional[str], today: date) -> Window:
    """
    Return the window covering weeks ``m`` through ``n`` ago.

    Examples
    --------
    >>> begin, end = week_window("1", date(2020, 1, 8))
    >>> begin.date(), end.date()
    (datetime.date(2019, 12, 30), datetime.date(2020, 1, 6))
    >>> begin, end = week_window("2:0", date(2020, 1, 8))
    >>> begin.date(), end.date()
    (datetime.date(2019, 12, 23), datetime.date(2020, 1, 13))
    """
    weeks_back, weeks_to = parse_week_spec(value)
    monday = start_of_day(beginning_of_week(today))
    begin = monday - timedelta(days=7 * weeks_back)
    end = monday - timedelta(days=7 * weeks_to) + timedelta(days=7)
    return begin, end


def today_window(now: datetime) -> Window:
    begin = start_of_day(now.date())
    return begin, begin + timedelta(days=1)


def parse_user_datetime(value: str) -> datetime:
    """
    Parse a user-provided date with an optional time.

    Parameters
    ----------
    value : str
        ``YYYY-MM-DD`` or ``YYYY/MM/DD``, optionally followed by
        ``HH:MM`` or ``HH:MM:SS``.

    Returns
    -------
    datetime
        Naive local datetime; midnight when no time is given.

    Examples
    --------
    >>> parse_user_datetime("2020-01-05")
    datetime.datetime(2020, 1, 5, 0, 0)
    >>> parse_user_datetime("2020/01/05 13:30")
    datetime.datetime(2020, 1, 5, 13, 30)
    """
    text = value.strip()
    if not text:
        raise ValueError("Datetime value is required.")
    normalized = text.replace("/", "-").replace("T", " ")
    formats = ["%Y-%m-%d", "%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S"]
    for fmt in formats:
        try:
            return datetime.strptime(normalized, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {value!r}")


def date_string(value: date) -> str:
    return f"{value.month:02d}/{value.day:02d}/{value.year:04d}"


def date_range_display(begin: datetime, end: datetime) -> str:
    """
    Describe a window with an inclusive end date.

    Examples
    --------
    >>> date_range_display(datetime(2020, 1, 5), datetime(2020, 1, 6))
    '01/05/2020'
    >>> date_range_display(datetime(2020, 1, 6), datetime(2020, 1, 13))
    '01/06/2020 to 01/12/2020'
    """
    first = begin.date()
    last = (end - timedelta(days=1)).date()
    if last <= first:
        return date_string(first)
    return f"{date_string(first)} to {date_string(last)}"
