#!/usr/bin/env python3
"""
Daily and weekly summaries of a plain-text clock-in/clock-out log.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config import TimeclockConfig, load_config
from .errors import ConfigError
from .ranges import (
    DEFAULT_BEGIN,
    DEFAULT_END,
    parse_user_datetime,
    today_window,
    week_window,
)
from .time_log import ReportOptions


def resolve_report_options(
    *,
    begin_date: Optional[str] = None,
    end_date: Optional[str] = None,
    group: Optional[int] = None,
    statistics: bool = False,
    today_only: bool = False,
    invert_match: bool = False,
    week: Optional[str] = None,
    pattern: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ReportOptions:
    """
    Turn command-line flags into report options.

    ``--week`` takes precedence over ``--today-only``, which takes
    precedence over explicit begin/end dates. A group depth above zero
    turns on statistics; ``--week`` turns on statistics and a group depth
    of one unless a depth was given.

    Parameters
    ----------
    begin_date : Optional[str], optional
        Window start date, optionally with a time.
    end_date : Optional[str], optional
        Window end date (exclusive), optionally with a time.
    group : Optional[int], optional
        Explicit group depth.
    statistics : bool, optional
        Print statistics.
    today_only : bool, optional
        Restrict the window to today.
    invert_match : bool, optional
        Invert the description filter.
    week : Optional[str], optional
        ``m[:n]`` weeks-ago range.
    pattern : Optional[str], optional
        Description regex.
    now : Optional[datetime], optional
        Current time (defaults to ``datetime.now()``).

    Returns
    -------
    ReportOptions
        Resolved options.

    Raises
    ------
    ValueError
        If a date or week range cannot be parsed.

    Examples
    --------
    >>> opts = resolve_report_options(week="1", now=datetime(2020, 1, 8, 12))
    >>> opts.begin.date(), opts.end.date(), opts.group_levels, opts.statistics
    (datetime.date(2019, 12, 30), datetime.date(2020, 1, 6), 1, True)
    >>> resolve_report_options(group=2).statistics
    True
    """
    now = now or datetime.now()
    begin = parse_user_datetime(begin_date) if begin_date else DEFAULT_BEGIN
    end = parse_user_datetime(end_date) if end_date else DEFAULT_END
    group_levels = group if group is not None else 0
    if group_levels < 0:
        raise ValueError("Group levels must be zero or more.")
    statistics = statistics or group_levels > 0
    if week is not None:
        begin, end = week_window(week, now.date())
        statistics = True
        if group is None:
            group_levels = 1
    elif today_only:
        begin, end = today_window(now)
    if end <= begin:
        raise ValueError("End date must be after begin date.")
    return ReportOptions(
        begin=begin,
        end=end,
        group_levels=group_levels,
        statistics=statistics,
        today=today_only and week is None,
        pattern=pattern,
        invert_match=invert_match,
    )


def _load_config_or_exit(path: Optional[Path]) -> TimeclockConfig:
    import typer

    try:
        return load_config(path)
    except ConfigError as exc:
        print(f"timeclock: {exc}", file=sys.stderr)
        raise typer.Exit(code=1)


def build_app():
    """
    Build the Typer app lazily to keep fast-path imports light.

    Returns
    -------
    typer.Typer
        Configured Typer application for the timeclock CLI.
    """
    import typer

    app = typer.Typer(help="Summaries of a clock-in/clock-out time log")

    @app.callback()
    def main_callback(
        verbose: bool = typer.Option(
            False,
            "--verbose",
            help="Log debug diagnostics to stderr.",
        ),
    ):
        if verbose:
            logging.basicConfig(
                level=logging.DEBUG,
                format="%(name)s: %(message)s",
                stream=sys.stderr,
            )

    @app.command("report")
    def report_cmd(
        pattern: Optional[str] = typer.Argument(
            None,
            help="Select only records whose description matches this regex.",
        ),
        begin_date: Optional[str] = typer.Option(
            None,
            "--begin-date",
            "-b",
            help="Exclude entries before DATE [TIME] (time defaults to 0:00:00).",
        ),
        end_date: Optional[str] = typer.Option(
            None,
            "--end-date",
            "-e",
            help="Exclude entries from DATE [TIME] on (time defaults to 0:00:00).",
        ),
        group: Optional[int] = typer.Option(
            None,
            "--group",
            "-g",
            help="Description tokens to group by; implies --statistics when > 0.",
        ),
        statistics: bool = typer.Option(
            False,
            "--statistics",
            "-s",
            help="Print daily and total hour amounts.",
        ),
        today_only: bool = typer.Option(
            False,
            "--today-only",
            "-t",
            help="Only process records for today.",
        ),
        invert_match: bool = typer.Option(
            False,
            "--invert-match",
            "-v",
            help="Select only records not matching the regex.",
        ),
        week: Optional[str] = typer.Option(
            None,
            "--week",
            "-w",
            help=(
                "Weeks ago as m[:n] (0 = this week, 2:0 = last three weeks); "
                "a value is required, use -w 0 for the current week."
            ),
        ),
        config_path: Optional[Path] = typer.Option(
            None,
            "--config",
            help="Path to config.toml.",
        ),
    ):
        from . import time_log as time_module

        try:
            options = resolve_report_options(
                begin_date=begin_date,
                end_date=end_date,
                group=group,
                statistics=statistics,
                today_only=today_only,
                invert_match=invert_match,
                week=week,
                pattern=pattern,
            )
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        config = _load_config_or_exit(config_path)
        raise typer.Exit(code=time_module.run_report(options, config))

    @app.command("start")
    def start_cmd(
        words: Optional[List[str]] = typer.Argument(
            None,
            help="Description of the activity to start.",
        ),
        config_path: Optional[Path] = typer.Option(
            None,
            "--config",
            help="Path to config.toml.",
        ),
    ):
        from . import time_log as time_module

        config = _load_config_or_exit(config_path)
        raise typer.Exit(code=time_module.run_start(config, words or []))

    @app.command("stop")
    def stop_cmd(
        config_path: Optional[Path] = typer.Option(
            None,
            "--config",
            help="Path to config.toml.",
        ),
    ):
        from . import time_log as time_module

        config = _load_config_or_exit(config_path)
        raise typer.Exit(code=time_module.run_stop(config))

    @app.command("status")
    def status_cmd(
        config_path: Optional[Path] = typer.Option(
            None,
            "--config",
            help="Path to config.toml.",
        ),
    ):
        from . import time_log as time_module

        config = _load_config_or_exit(config_path)
        raise typer.Exit(code=time_module.run_status(config))

    return app


def main():
    """
    Entry point for the timeclock command.
    """
    app = build_app()
    app()


if __name__ == "__main__":
    main()
