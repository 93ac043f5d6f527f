#!/usr/bin/env python3
"""
Time log reporting and timer commands.
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .config import TimeclockConfig
from .days import group_into_days
from .entries import TimePair, decode_log_lines, iter_pairs
from .errors import TimeclockError, TimelogNotFoundError
from .ranges import (
    DEFAULT_BEGIN,
    DEFAULT_END,
    Window,
    compile_description_filter,
    date_range_display,
    filter_pairs,
)
from .report import day_report_lines, statistics_lines, today_lines
from .stats import DayStats, PeriodStats, TodayStats, compute_today_stats, summarize_days
from .timer import start_timer, stop_timer, timer_status

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportOptions:
    """
    Report selection and presentation options.

    Attributes
    ----------
    begin : datetime
        Window start (inclusive).
    end : datetime
        Window end (exclusive).
    group_levels : int
        Description tokens used as the group key.
    statistics : bool
        Print group subtotals and the statistics summary.
    today : bool
        Print progress toward today's work-hour target.
    pattern : Optional[str]
        Case-insensitive description regex.
    invert_match : bool
        Keep only pairs that do not match ``pattern``.
    """

    begin: datetime = DEFAULT_BEGIN
    end: datetime = DEFAULT_END
    group_levels: int = 0
    statistics: bool = False
    today: bool = False
    pattern: Optional[str] = None
    invert_match: bool = False

    @property
    def window(self) -> Window:
        return self.begin, self.end


@dataclass(frozen=True)
class TimeReport:
    days: List[DayStats]
    period: PeriodStats
    today: Optional[TodayStats]
    date_range: str


def read_time_pairs(
    path: Optional[Path],
    window: Window,
    *,
    pattern: Optional[str] = None,
    invert_match: bool = False,
    now: Optional[datetime] = None,
) -> List[TimePair]:
    """
    Read a time log and return the pairs inside a window.

    Parameters
    ----------
    path : Optional[Path]
        Time log path.
    window : Window
        Half-open ``(begin, end)`` window.
    pattern : Optional[str], optional
        Case-insensitive description regex.
    invert_match : bool, optional
        Keep pairs that do not match ``pattern``.
    now : Optional[datetime], optional
        Reference time for a still-running entry.

    Returns
    -------
    List[TimePair]
        Clipped, day-split pairs in log order.

    Raises
    ------
    TimelogNotFoundError
        If the log file is missing or unreadable.
    MalformedLineError
        If a line does not parse or is not valid UTF-8.
    OrderingError
        If entries do not alternate.
    """
    if path is None or not path.is_file():
        raise TimelogNotFoundError(path)
    regex = compile_description_filter(pattern)
    now = now or datetime.now()
    try:
        with path.open("rb") as handle:
            return filter_pairs(
                iter_pairs(decode_log_lines(handle), now), window, regex, invert_match
            )
    except OSError as exc:
        raise TimelogNotFoundError(path) from exc


def build_report(
    path: Optional[Path],
    options: ReportOptions,
    config: TimeclockConfig,
    now: Optional[datetime] = None,
) -> TimeReport:
    """
    Read the log and compute every statistic a report needs.
    """
    now = now or datetime.now()
    pairs = read_time_pairs(
        path,
        options.window,
        pattern=options.pattern,
        invert_match=options.invert_match,
        now=now,
    )
    days = group_into_days(pairs)
    log.debug("Read %d pairs across %d days", len(pairs), len(days))
    day_stats, period = summarize_days(
        days,
        options.group_levels,
        config.non_billable_entities,
    )
    today = None
    if options.today and days:
        today = compute_today_stats(
            period.total,
            now,
            work_hours=config.work_hours,
            day_starts=config.day_starts,
            first_start=days[0].pairs[0].start.timestamp,
        )
    return TimeReport(
        days=day_stats,
        period=period,
        today=today,
        date_range=date_range_display(options.begin, options.end),
    )


def render_report(
    report: TimeReport,
    options: ReportOptions,
    config: TimeclockConfig,
) -> Iterator[str]:
    yield from day_report_lines(report.days, options.statistics)
    if options.statistics:
        yield from statistics_lines(report.period, report.date_range)
        if report.today is not None:
            yield from today_lines(report.today, config.end_time)


def run_report(
    options: ReportOptions,
    config: TimeclockConfig,
    now: Optional[datetime] = None,
) -> int:
    """
    Print a report for the configured time log.
    """
    try:
        report = build_report(config.timelog_path, options, config, now=now)
    except re.error as exc:
        print(f"timeclock: invalid pattern: {exc}", file=sys.stderr)
        return 1
    except TimeclockError as exc:
        print(f"timeclock: {exc}", file=sys.stderr)
        return 1
    for line in render_report(report, options, config):
        print(line)
    return 0


def _require_log_path(config: TimeclockConfig) -> Optional[Path]:
    if config.timelog_path is None:
        print("timeclock: timelog_path is not configured.", file=sys.stderr)
    return config.timelog_path


def run_start(
    config: TimeclockConfig,
    words: Sequence[str],
    now: Optional[datetime] = None,
) -> int:
    """
    Start a timer, stopping any running one.
    """
    path = _require_log_path(config)
    if path is None:
        return 1
    try:
        stopped = start_timer(path, " ".join(words), now or datetime.now())
    except (ValueError, TimeclockError) as exc:
        print(f"timeclock: start failed: {exc}", file=sys.stderr)
        return 1
    if stopped is not None:
        print(f"stopping: {stopped.description}")
    return 0


def run_stop(config: TimeclockConfig, now: Optional[datetime] = None) -> int:
    """
    Stop the running timer, if any.
    """
    path = _require_log_path(config)
    if path is None:
        return 1
    try:
        stopped = stop_timer(path, now or datetime.now())
    except TimeclockError as exc:
        print(f"timeclock: stop failed: {exc}", file=sys.stderr)
        return 1
    if stopped is not None:
        print(f"stopping: {stopped.description}")
    return 0


def run_status(config: TimeclockConfig) -> int:
    path = _require_log_path(config)
    if path is None:
        return 1
    try:
        print(timer_status(path))
    except TimeclockError as exc:
        print(f"timeclock: status failed: {exc}", file=sys.stderr)
        return 1
    return 0
