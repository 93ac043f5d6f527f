#!/usr/bin/env python3
"""
Group time pairs into calendar days.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Tuple

from .entries import TimePair


@dataclass(frozen=True)
class Day:
    """
    Pairs that started on one calendar date, in log order.

    Attributes
    ----------
    date : date
        Calendar date of the pair starts.
    pairs : Tuple[TimePair, ...]
        Pairs in the order they appeared in the log.
    """

    date: date
    pairs: Tuple[TimePair, ...]

    @property
    def month(self) -> int:
        return self.date.month

    @property
    def day(self) -> int:
        return self.date.day

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def label(self) -> str:
        """
        Return the ``m/d/yyyy`` heading for the day.

        Examples
        --------
        >>> Day(date(2020, 1, 5), ()).label
        '1/5/2020'
        """
        return f"{self.month}/{self.day}/{self.year}"


def group_into_days(pairs: Iterable[TimePair]) -> List[Day]:
    """
    Group a time-ordered pair stream into consecutive days.

    A new Day starts whenever a pair's start date differs from the most
    recently opened Day. Days are never reopened, so a date that reappears
    after a different date yields a second Day record.

    Parameters
    ----------
    pairs : Iterable[TimePair]
        Filtered pairs in log order.

    Returns
    -------
    List[Day]
        Days in the order first encountered.
    """
    grouped: List[Tuple[date, List[TimePair]]] = []
    for pair in pairs:
        current = pair.start.timestamp.date()
        if grouped and grouped[-1][0] == current:
            grouped[-1][1].append(pair)
        else:
            grouped.append((current, [pair]))
    return [Day(date=day, pairs=tuple(day_pairs)) for day, day_pairs in grouped]
