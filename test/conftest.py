"""
Shared pytest fixtures for timeclock tests.
"""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def isolate_config_path(tmp_path, monkeypatch) -> None:
    """
    Ensure tests do not read the real timeclock configuration file.

    Parameters
    ----------
    tmp_path : pathlib.Path
        Temporary path provided by pytest.
    monkeypatch : pytest.MonkeyPatch
        Monkeypatch fixture for environment updates.
    """
    monkeypatch.setenv("TIMECLOCK_CONFIG_PATH", str(tmp_path / "config.toml"))


@pytest.fixture
def write_log(tmp_path):
    """
    Return a helper that writes time log lines to a temporary file.

    Returns
    -------
    Callable[..., pathlib.Path]
        Helper accepting log lines and returning the log path.
    """

    def _write(*lines: str):
        path = tmp_path / "timelog"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
