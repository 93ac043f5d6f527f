#!/usr/bin/env python3
"""
Parse time log lines into entries and pair clock-in/clock-out events.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Tuple

from .errors import MalformedLineError, OrderingError

log = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"
LINE_PATTERN = re.compile(
    r"^([io]) (\d{4}/\d\d/\d\d \d\d:\d\d:\d\d)(?: (\S.*)?)?$"
)

NumberedLine = Tuple[int, str]


@dataclass(frozen=True)
class TimeEntry:
    """
    Single clock-in or clock-out event.

    Attributes
    ----------
    is_start : bool
        True for clock-in entries.
    timestamp : datetime
        Local wall-clock time without tzinfo.
    description : str
        Activity description (empty for clock-out entries).
    """

    is_start: bool
    timestamp: datetime
    description: str = ""


@dataclass(frozen=True)
class TimePair:
    """
    Matched clock-in/clock-out interval.

    Attributes
    ----------
    start : TimeEntry
        Clock-in entry.
    end : TimeEntry
        Clock-out entry.
    """

    start: TimeEntry
    end: TimeEntry

    @property
    def description(self) -> str:
        return self.start.description


def format_timestamp(value: datetime) -> str:
    """
    Format a timestamp the way log lines store it.

    Examples
    --------
    >>> format_timestamp(datetime(2020, 9, 6, 13, 25, 30))
    '2020/09/06 13:25:30'
    """
    return value.strftime(TIMESTAMP_FORMAT)


def format_entry(entry: TimeEntry) -> str:
    """
    Format an entry as a log line.

    Examples
    --------
    >>> format_entry(TimeEntry(True, datetime(2020, 9, 6, 13, 25, 30), "Acme dev"))
    'i 2020/09/06 13:25:30 Acme dev'
    >>> format_entry(TimeEntry(False, datetime(2020, 9, 6, 14, 11, 43)))
    'o 2020/09/06 14:11:43'
    """
    if not entry.is_start:
        return f"o {format_timestamp(entry.timestamp)}"
    return f"i {format_timestamp(entry.timestamp)} {entry.description}".rstrip()


def parse_line(line: str, line_no: int = 0) -> TimeEntry:
    """
    Parse one trimmed log line into a TimeEntry.

    Parameters
    ----------
    line : str
        Non-blank, stripped log line.
    line_no : int, optional
        1-based line number used in error reports.

    Returns
    -------
    TimeEntry
        Parsed entry.

    Raises
    ------
    MalformedLineError
        If the line does not match the entry grammar.

    Examples
    --------
    >>> parse_line("i 2020/01/01 09:00:00 Lojic research Ruby")
    TimeEntry(is_start=True, timestamp=datetime.datetime(2020, 1, 1, 9, 0), description='Lojic research Ruby')
    >>> parse_line("o 2020/01/01 10:30:00").is_start
    False
    >>> parse_line("i 2020/01/01 09:00:00").description
    ''
    """
    match = LINE_PATTERN.match(line)
    if not match:
        raise MalformedLineError(line_no, line)
    marker, stamp, description = match.groups()
    try:
        timestamp = datetime.strptime(stamp, TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise MalformedLineError(line_no, line) from exc
    is_start = marker == "i"
    return TimeEntry(
        is_start=is_start,
        timestamp=timestamp,
        description=(description or "") if is_start else "",
    )


def decode_log_lines(raw_lines: Iterable[bytes]) -> Iterator[str]:
    """
    Decode UTF-8 log lines read in binary mode.

    Raises
    ------
    MalformedLineError
        If a line is not valid UTF-8.

    Examples
    --------
    >>> list(decode_log_lines([b"i 2020/01/01 09:00:00 Caf\\xc3\\xa9\\n"]))
    ['i 2020/01/01 09:00:00 Café\\n']
    """
    for line_no, raw in enumerate(raw_lines, start=1):
        try:
            yield raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            text = raw.decode("utf-8", errors="replace").rstrip()
            raise MalformedLineError(line_no, text) from exc


def iter_log_lines(lines: Iterable[str]) -> Iterator[NumberedLine]:
    """
    Yield stripped, non-blank lines with 1-based line numbers.

    Examples
    --------
    >>> list(iter_log_lines(["a\\n", "   \\n", " b "]))
    [(1, 'a'), (3, 'b')]
    """
    for line_no, raw in enumerate(lines, start=1):
        text = raw.strip()
        if text:
            yield line_no, text


def read_pair(
    numbered_lines: Iterator[NumberedLine],
    now: datetime,
) -> Optional[TimePair]:
    """
    Read the next clock-in/clock-out pair from numbered lines.

    Parameters
    ----------
    numbered_lines : Iterator[NumberedLine]
        Iterator produced by ``iter_log_lines``.
    now : datetime
        Current local time, used to close a still-running entry.

    Returns
    -------
    Optional[TimePair]
        The next pair, or None at end of stream.

    Raises
    ------
    MalformedLineError
        If either line fails to parse.
    OrderingError
        If the entries do not alternate clock-in then clock-out.
    """
    first = next(numbered_lines, None)
    if first is None:
        return None
    start_no, start_line = first
    start = parse_line(start_line, start_no)
    if not start.is_start:
        raise OrderingError(start_no, "expected in entry")

    second = next(numbered_lines, None)
    if second is None:
        log.debug("Entry on line %d is still running; closing it at %s", start_no, now)
        end = TimeEntry(is_start=False, timestamp=now)
        end_no = start_no
    else:
        end_no, end_line = second
        end = parse_line(end_line, end_no)
        if end.is_start:
            raise OrderingError(end_no, "expected out entry")

    if end.timestamp < start.timestamp:
        raise OrderingError(end_no, "out entry precedes its in entry")
    return TimePair(start=start, end=end)


def iter_pairs(lines: Iterable[str], now: datetime) -> Iterator[TimePair]:
    """
    Yield every pair in a time log.

    Examples
    --------
    >>> lines = ["i 2020/01/01 09:00:00 a", "", "o 2020/01/01 10:00:00"]
    >>> [pair.description for pair in iter_pairs(lines, datetime(2020, 1, 2))]
    ['a']
    """
    numbered = iter_log_lines(lines)
    while True:
        pair = read_pair(numbered, now)
        if pair is None:
            return
        yield pair


def read_pairs(lines: Iterable[str], now: datetime) -> List[TimePair]:
    return list(iter_pairs(lines, now))
