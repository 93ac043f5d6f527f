"""
Tests for group keys, daily statistics and billable splits.
"""

from __future__ import annotations

import random
from datetime import date, datetime, timedelta

import pytest

import timeclock.stats as stats
from timeclock.days import Day, group_into_days
from timeclock.entries import TimeEntry, TimePair
from timeclock.errors import ConsistencyError
from timeclock.ranges import DEFAULT_BEGIN, DEFAULT_END, filter_pairs

DESCRIPTIONS = [
    "Acme dev backend",
    "Acme dev frontend",
    "Acme support",
    "Admin email",
    "Admin invoicing clients",
    "Lojic research Ruby",
    "Lunch",
    "",
]


def make_pair(start: datetime, end: datetime, description: str) -> TimePair:
    return TimePair(TimeEntry(True, start, description), TimeEntry(False, end))


def random_log_pairs(rng: random.Random, count: int):
    cursor = datetime(2020, 1, 1, 6, 0)
    pairs = []
    for _ in range(count):
        start = cursor + timedelta(minutes=rng.randint(0, 300), seconds=rng.randint(0, 59))
        end = start + timedelta(minutes=rng.randint(0, 600), seconds=rng.randint(0, 59))
        pairs.append(make_pair(start, end, rng.choice(DESCRIPTIONS)))
        cursor = end
    return pairs


@pytest.mark.parametrize(
    ("description", "depth", "expected"),
    [
        ("Lojic research Ruby", 0, ""),
        ("Lojic research Ruby", 1, "Lojic"),
        ("Lojic research Ruby", 2, "Lojic research"),
        ("Lojic research Ruby", 3, "Lojic research Ruby"),
        ("Lojic research Ruby", 4, "Lojic research Ruby"),
        ("Lojic  research   Ruby", 2, "Lojic research"),
        ("", 2, ""),
    ],
)
@pytest.mark.unit
def test_compute_group_key(description, depth, expected):
    """
    Ensure group keys keep the leading description tokens.

    Returns
    -------
    None
        This test asserts group key derivation.
    """
    assert stats.compute_group_key(description, depth) == expected


@pytest.mark.unit
def test_compute_day_stats_grouped():
    """
    Ensure grouped days drop the empty bucket and sort groups by key.

    Returns
    -------
    None
        This test asserts daily group accumulation.
    """
    day = Day(
        date(2020, 1, 6),
        (
            make_pair(datetime(2020, 1, 6, 9), datetime(2020, 1, 6, 11), "Lojic research"),
            make_pair(datetime(2020, 1, 6, 11), datetime(2020, 1, 6, 12, 30), "Acme dev"),
            make_pair(datetime(2020, 1, 6, 13), datetime(2020, 1, 6, 14), "Lojic admin"),
        ),
    )

    result = stats.compute_day_stats(day, 1)

    assert list(result.group_hours) == ["Acme", "Lojic"]
    assert result.group_hours["Acme"] == pytest.approx(1.5)
    assert result.group_hours["Lojic"] == pytest.approx(3.0)
    assert result.total == pytest.approx(4.5)
    assert result.is_grouped


@pytest.mark.unit
def test_compute_day_stats_ungrouped():
    day = Day(
        date(2020, 1, 6),
        (make_pair(datetime(2020, 1, 6, 9), datetime(2020, 1, 6, 11, 15), "Acme dev"),),
    )

    result = stats.compute_day_stats(day, 0)

    assert result.group_hours == {"": pytest.approx(2.25)}
    assert result.total == pytest.approx(2.25)
    assert not result.is_grouped


@pytest.mark.unit
def test_blank_descriptions_keep_their_hours():
    """
    Ensure hours from blank descriptions stay in the totals when grouping.

    Returns
    -------
    None
        This test asserts the empty bucket is kept when it holds hours.
    """
    day = Day(
        date(2020, 1, 6),
        (
            make_pair(datetime(2020, 1, 6, 9), datetime(2020, 1, 6, 10), "Acme dev"),
            make_pair(datetime(2020, 1, 6, 10), datetime(2020, 1, 6, 10, 30), ""),
        ),
    )

    result = stats.compute_day_stats(day, 1)

    assert result.group_hours == {"": pytest.approx(0.5), "Acme": pytest.approx(1.0)}
    assert result.total == pytest.approx(1.5)


@pytest.mark.unit
def test_compute_period_stats_billable_split():
    """
    Ensure period statistics rank groups and split billable hours.

    Returns
    -------
    None
        This test asserts the billable/non-billable classification.
    """
    first = Day(
        date(2020, 1, 6),
        (
            make_pair(datetime(2020, 1, 6, 9), datetime(2020, 1, 6, 13), "Acme dev"),
            make_pair(datetime(2020, 1, 6, 13), datetime(2020, 1, 6, 14), "admin email"),
        ),
    )
    second = Day(
        date(2020, 1, 7),
        (make_pair(datetime(2020, 1, 7, 9), datetime(2020, 1, 7, 11), "Lojic research"),),
    )
    day_stats = [stats.compute_day_stats(day, 1) for day in (first, second)]

    period = stats.compute_period_stats(day_stats, ["Admin", "lojic"])

    assert [group.key for group in period.ranking] == ["Acme", "Lojic", "admin"]
    assert [group.non_billable for group in period.ranking] == [False, True, True]
    assert period.billable == pytest.approx(4.0)
    assert period.non_billable == pytest.approx(3.0)
    assert period.total == pytest.approx(7.0)
    assert [total for _day, total in period.daily_totals] == [
        pytest.approx(5.0),
        pytest.approx(2.0),
    ]


@pytest.mark.unit
def test_compute_period_stats_ungrouped_is_billable():
    day = Day(
        date(2020, 1, 6),
        (make_pair(datetime(2020, 1, 6, 9), datetime(2020, 1, 6, 12), "Acme dev"),),
    )

    period = stats.compute_period_stats([stats.compute_day_stats(day, 0)], ["Acme"])

    assert not period.is_grouped
    assert period.billable == pytest.approx(3.0)
    assert period.non_billable == 0.0


@pytest.mark.unit
def test_inconsistent_day_stats_are_fatal():
    """
    Ensure billable sums that fail to reconcile raise ConsistencyError.

    Returns
    -------
    None
        This test asserts reconciliation is enforced.
    """
    day = Day(
        date(2020, 1, 6),
        (make_pair(datetime(2020, 1, 6, 9), datetime(2020, 1, 6, 12), "Acme dev"),),
    )
    broken = stats.DayStats(day=day, group_hours={"Acme": 3.0, "Beta": float("nan")}, total=3.0)

    with pytest.raises(ConsistencyError):
        stats.compute_period_stats([broken])


@pytest.mark.parametrize("seed", range(8))
@pytest.mark.parametrize("depth", [0, 1, 2, 3])
@pytest.mark.unit
def test_group_hours_reconcile_with_pair_hours(seed, depth):
    """
    Ensure group sums equal pair hours for random multi-day logs.

    Returns
    -------
    None
        This test asserts the group consistency invariant.
    """
    rng = random.Random(seed)
    raw = random_log_pairs(rng, 40)
    pairs = filter_pairs(raw, (DEFAULT_BEGIN, DEFAULT_END))

    day_stats, period = stats.summarize_days(group_into_days(pairs), depth)

    pair_hours = sum(stats.elapsed_hours(pair) for pair in pairs)
    assert sum(s.total for s in day_stats) == pytest.approx(pair_hours, abs=1e-4)
    for day_stat in day_stats:
        day_pair_hours = sum(stats.elapsed_hours(p) for p in day_stat.day.pairs)
        assert sum(day_stat.group_hours.values()) == pytest.approx(day_pair_hours, abs=1e-4)
    assert sum(period.group_hours.values()) == pytest.approx(period.total, abs=1e-4)
    assert period.total == pytest.approx(
        sum(stats.elapsed_hours(pair) for pair in raw), abs=1e-4
    )


@pytest.mark.parametrize(
    "non_billable",
    [(), ("Acme",), ("admin", "LUNCH"), ("a",), ("",), ("Zzz",)],
)
@pytest.mark.parametrize("seed", range(4))
@pytest.mark.unit
def test_billable_split_reconciles(non_billable, seed):
    """
    Ensure billable plus non-billable hours equal the grand total.

    Returns
    -------
    None
        This test asserts the billable split invariant.
    """
    rng = random.Random(100 + seed)
    pairs = filter_pairs(random_log_pairs(rng, 30), (DEFAULT_BEGIN, DEFAULT_END))

    _day_stats, period = stats.summarize_days(
        group_into_days(pairs),
        rng.randint(0, 3),
        non_billable,
    )

    assert period.billable + period.non_billable == pytest.approx(period.total, abs=1e-4)


@pytest.mark.unit
def test_compute_today_stats_auto_start():
    result = stats.compute_today_stats(
        2.0,
        datetime(2020, 1, 6, 12, 0),
        work_hours=7,
        day_starts="auto",
        first_start=datetime(2020, 1, 6, 8, 0),
    )

    assert result.percent == pytest.approx(50.0)
    assert result.end_of_day == datetime(2020, 1, 6, 17, 0)


@pytest.mark.unit
def test_stats_doctest_examples():
    """
    Run doctest examples embedded in statistics helpers.

    Returns
    -------
    None
        This test asserts doctest coverage for statistics helpers.
    """
    import doctest

    results = doctest.testmod(stats)
    assert results.failed == 0
