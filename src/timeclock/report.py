#!/usr/bin/env python3
"""
Plain-text rendering of daily reports and statistics.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from .stats import DayStats, PeriodStats, TodayStats, hours_interval


def day_report_lines(day_stats: Iterable[DayStats], statistics: bool) -> Iterator[str]:
    """
    Yield the per-day interval listing.

    Parameters
    ----------
    day_stats : Iterable[DayStats]
        Statistics for each day in the report.
    statistics : bool
        Include group subtotals and the daily total.

    Yields
    ------
    str
        Report lines.
    """
    for stats in day_stats:
        yield stats.day.label
        for pair in stats.day.pairs:
            start, end = hours_interval(pair)
            yield f"{start:05.2f}-{end:05.2f} {pair.start.description}".rstrip()
        if statistics:
            yield "-" * 18
            if stats.is_grouped:
                for key, hours in stats.group_hours.items():
                    yield f"{hours:5.2f} {key}".rstrip()
            yield f"{stats.total:5.2f} Daily Total"
        yield ""


def statistics_lines(period: PeriodStats, date_range: str) -> Iterator[str]:
    """
    Yield daily totals, the group ranking and the billable summary.
    """
    yield "Daily Hours"
    yield "-----------"
    for day, total in period.daily_totals:
        yield f"{day.month:2d}/{day.day:02d}/{day.year}: {total:5.2f}"
    yield f"Total      {period.total:6.2f}"

    if period.is_grouped:
        yield ""
        yield "Most Time Spent"
        yield "---------------"
        for group in period.ranking:
            share = group.hours / period.total * 100.0 if period.total else 0.0
            marker = " *" if group.non_billable else ""
            yield f"{group.hours:5.2f} ({share:5.1f} %) {group.key}{marker}"

    yield ""
    yield f"{period.billable:5.2f} Billable hours"
    yield f"{period.non_billable:5.2f} Non-billable hours *"
    yield ""
    yield f"{period.total:5.2f} Total hours - {date_range}"
    yield ""


def today_lines(today: TodayStats, end_time: Optional[str]) -> Iterator[str]:
    """
    Yield today's progress toward the work-day target.
    """
    yield ""
    yield "Daily Stats"
    yield "-" * 16
    eod = today.end_of_day.strftime("%H:%M")
    yield f"{today.total:2.2f} @ {today.percent:3.1f}% EOD {eod} vs. {end_time or '17:00'}"
    yield ""
