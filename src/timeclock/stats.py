#!/usr/bin/env python3
"""
Daily and period statistics grouped by description prefix.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .days import Day
from .entries import TimePair
from .errors import ConfigError, ConsistencyError

TOLERANCE = 0.0001
UNGROUPED = ""


@dataclass(frozen=True)
class DayStats:
    """
    Hours for one day, bucketed by group key.

    Attributes
    ----------
    day : Day
        Day the statistics describe.
    group_hours : Dict[str, float]
        Hours per group key, sorted by key.
    total : float
        Sum of the day's hours.
    """

    day: Day
    group_hours: Dict[str, float]
    total: float

    @property
    def is_grouped(self) -> bool:
        return list(self.group_hours) != [UNGROUPED]


@dataclass(frozen=True)
class RankedGroup:
    key: str
    hours: float
    non_billable: bool


@dataclass(frozen=True)
class PeriodStats:
    """
    Statistics across every day in a report.

    Attributes
    ----------
    daily_totals : Tuple[Tuple[Day, float], ...]
        Total hours per day, in day order.
    group_hours : Dict[str, float]
        Merged hours per group key.
    ranking : Tuple[RankedGroup, ...]
        Groups sorted by hours, most first.
    billable : float
        Hours in billable groups.
    non_billable : float
        Hours in non-billable groups.
    total : float
        Grand total hours.
    """

    daily_totals: Tuple[Tuple[Day, float], ...]
    group_hours: Dict[str, float]
    ranking: Tuple[RankedGroup, ...]
    billable: float
    non_billable: float
    total: float

    @property
    def is_grouped(self) -> bool:
        return list(self.group_hours) != [UNGROUPED]


@dataclass(frozen=True)
class TodayStats:
    total: float
    percent: float
    end_of_day: datetime


def compute_group_key(description: str, depth: int) -> str:
    """
    Return the grouping key for a description.

    Parameters
    ----------
    description : str
        Start entry description.
    depth : int
        Number of leading whitespace-separated tokens to keep.

    Returns
    -------
    str
        Group key; empty for depth 0, the full description when it has
        no more than ``depth`` tokens.

    Examples
    --------
    >>> compute_group_key("Lojic research Ruby", 0)
    ''
    >>> compute_group_key("Lojic research Ruby", 1)
    'Lojic'
    >>> compute_group_key("Lojic research Ruby", 2)
    'Lojic research'
    >>> compute_group_key("Lojic research Ruby", 4)
    'Lojic research Ruby'
    """
    if depth < 1:
        return UNGROUPED
    tokens = description.split()
    if len(tokens) > depth:
        return " ".join(tokens[:depth])
    return description


def elapsed_hours(pair: TimePair) -> float:
    """
    Return the hours between a pair's start and end.

    Examples
    --------
    >>> from timeclock.entries import TimeEntry
    >>> elapsed_hours(TimePair(
    ...     TimeEntry(True, datetime(2020, 1, 1, 9, 0)),
    ...     TimeEntry(False, datetime(2020, 1, 1, 10, 30)),
    ... ))
    1.5
    """
    return (pair.end.timestamp - pair.start.timestamp).total_seconds() / 3600.0


def _hour_of_day(value: datetime) -> float:
    return value.hour + value.minute / 60.0 + value.second / 3600.0 + value.microsecond / 3.6e9


def hours_interval(pair: TimePair) -> Tuple[float, float]:
    """
    Return a same-day pair's start and end as fractional hours.

    Examples
    --------
    >>> from timeclock.entries import TimeEntry
    >>> hours_interval(TimePair(
    ...     TimeEntry(True, datetime(2020, 1, 1, 9, 45)),
    ...     TimeEntry(False, datetime(2020, 1, 1, 15, 24)),
    ... ))
    (9.75, 15.4)
    """
    return _hour_of_day(pair.start.timestamp), _hour_of_day(pair.end.timestamp)


def _drop_empty_ungrouped(group_hours: Dict[str, float]) -> Dict[str, float]:
    if len(group_hours) > 1 and abs(group_hours.get(UNGROUPED, 0.0)) < TOLERANCE:
        group_hours = dict(group_hours)
        group_hours.pop(UNGROUPED, None)
    return group_hours


def _check_reconciled(expected: float, actual: float, what: str) -> None:
    # NaN never compares within tolerance.
    if not abs(expected - actual) <= TOLERANCE:
        raise ConsistencyError(
            f"calculation error: {what} {actual:.6f} != {expected:.6f}"
        )


def compute_day_stats(day: Day, depth: int) -> DayStats:
    """
    Accumulate a day's hours by group key.

    Parameters
    ----------
    day : Day
        Day to summarize.
    depth : int
        Group key depth (0 for a single ungrouped bucket).

    Returns
    -------
    DayStats
        Group hours sorted by key and the day's total.

    Raises
    ------
    ConsistencyError
        If the group hours do not add up to the day's pair hours.
    """
    group_hours: Dict[str, float] = {UNGROUPED: 0.0}
    pair_total = 0.0
    for pair in day.pairs:
        hours = elapsed_hours(pair)
        key = compute_group_key(pair.start.description, depth)
        group_hours[key] = group_hours.get(key, 0.0) + hours
        pair_total += hours
    group_hours = dict(sorted(_drop_empty_ungrouped(group_hours).items()))
    total = sum(group_hours.values())
    _check_reconciled(pair_total, total, f"group hours for {day.label}")
    return DayStats(day=day, group_hours=group_hours, total=total)


def is_non_billable(key: str, non_billable_entities: Sequence[str]) -> bool:
    """
    Return True when a group key starts with a non-billable prefix.

    Examples
    --------
    >>> is_non_billable("Admin email", ["admin"])
    True
    >>> is_non_billable("Acme dev", ["admin"])
    False
    """
    lowered = key.lower()
    return any(lowered.startswith(entity.lower()) for entity in non_billable_entities)


def compute_period_stats(
    day_stats: Iterable[DayStats],
    non_billable_entities: Sequence[str] = (),
) -> PeriodStats:
    """
    Merge daily statistics into report-wide totals.

    Parameters
    ----------
    day_stats : Iterable[DayStats]
        Per-day statistics in day order.
    non_billable_entities : Sequence[str], optional
        Group key prefixes counted as non-billable (case-insensitive).

    Returns
    -------
    PeriodStats
        Daily totals, merged and ranked groups, and billable split.

    Raises
    ------
    ConsistencyError
        If billable and non-billable hours do not add up to the total.
    """
    daily_totals: List[Tuple[Day, float]] = []
    merged: Dict[str, float] = {UNGROUPED: 0.0}
    total = 0.0
    for stats in day_stats:
        daily_sum = 0.0
        for key, hours in stats.group_hours.items():
            merged[key] = merged.get(key, 0.0) + hours
            daily_sum += hours
        daily_totals.append((stats.day, daily_sum))
        total += daily_sum
    merged = _drop_empty_ungrouped(merged)

    ranking: List[RankedGroup] = []
    billable = 0.0
    non_billable = 0.0
    for key, hours in sorted(merged.items(), key=lambda item: (-item[1], item[0])):
        flagged = is_non_billable(key, non_billable_entities)
        ranking.append(RankedGroup(key=key, hours=hours, non_billable=flagged))
        if flagged:
            non_billable += hours
        else:
            billable += hours
    _check_reconciled(total, billable + non_billable, "billable plus non-billable hours")
    return PeriodStats(
        daily_totals=tuple(daily_totals),
        group_hours=merged,
        ranking=tuple(ranking),
        billable=billable,
        non_billable=non_billable,
        total=total,
    )


def summarize_days(
    days: Iterable[Day],
    depth: int,
    non_billable_entities: Sequence[str] = (),
) -> Tuple[List[DayStats], PeriodStats]:
    day_stats = [compute_day_stats(day, depth) for day in days]
    return day_stats, compute_period_stats(day_stats, non_billable_entities)


def compute_today_stats(
    total: float,
    now: datetime,
    *,
    work_hours: float,
    day_starts: Optional[str] = None,
    first_start: Optional[datetime] = None,
) -> TodayStats:
    """
    Compare today's hours with the time elapsed since the day started.

    Parameters
    ----------
    total : float
        Hours logged today.
    now : datetime
        Current local time.
    work_hours : float
        Target hours for a work day.
    day_starts : Optional[str], optional
        ``HH:MM`` start of the work day, or ``"auto"`` to use
        ``first_start``.
    first_start : Optional[datetime], optional
        First clock-in of the day.

    Returns
    -------
    TodayStats
        Total, percent of elapsed time logged, and projected end of day.

    Raises
    ------
    ConfigError
        If ``day_starts`` is neither ``"auto"`` nor ``HH:MM``.

    Examples
    --------
    >>> stats = compute_today_stats(
    ...     3.0, datetime(2020, 1, 6, 12, 0), work_hours=7, day_starts="8:00"
    ... )
    >>> stats.percent, stats.end_of_day.strftime("%H:%M")
    (75.0, '16:00')
    """
    if day_starts == "auto" or not day_starts:
        began = first_start or now
    else:
        began = datetime.combine(now.date(), _parse_clock(day_starts))
    elapsed = (now - began).total_seconds() / 3600.0
    percent = (total / elapsed) * 100.0 if elapsed > 0 else 0.0
    end_of_day = now + timedelta(hours=work_hours - total)
    return TodayStats(total=total, percent=percent, end_of_day=end_of_day)


def _parse_clock(value: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError as exc:
        raise ConfigError(f"Invalid time of day: {value!r}") from exc
