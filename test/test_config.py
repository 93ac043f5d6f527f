"""
Tests for loading timeclock settings.
"""

from __future__ import annotations

from pathlib import Path

import pytest

import timeclock.config as config
from timeclock.errors import ConfigError


@pytest.mark.unit
def test_load_config_reads_toml(tmp_path):
    """
    Ensure every supported setting is read from TOML.

    Returns
    -------
    None
        This test asserts configuration parsing.
    """
    path = tmp_path / "config.toml"
    path.write_text(
        "\n".join(
            [
                'timelog_path = "/var/log/timelog"',
                'day_starts = "auto"',
                "work_hours = 8",
                'end_time = "16:30"',
                'non_billable_entities = ["Admin", "Lojic"]',
            ]
        ),
        encoding="utf-8",
    )

    loaded = config.load_config(path)

    assert loaded.timelog_path == Path("/var/log/timelog")
    assert loaded.day_starts == "auto"
    assert loaded.work_hours == pytest.approx(8.0)
    assert loaded.end_time == "16:30"
    assert loaded.non_billable_entities == ("Admin", "Lojic")


@pytest.mark.unit
def test_load_config_defaults_when_missing(tmp_path):
    loaded = config.load_config(tmp_path / "absent.toml")

    assert loaded == config.TimeclockConfig()
    assert loaded.work_hours == pytest.approx(7.0)


@pytest.mark.unit
def test_load_config_uses_environment_override(tmp_path, monkeypatch):
    path = tmp_path / "custom.toml"
    path.write_text('timelog_path = "~/timelog"\n', encoding="utf-8")
    monkeypatch.setenv("TIMECLOCK_CONFIG_PATH", str(path))

    loaded = config.load_config()

    assert config.get_config_path() == path
    assert loaded.timelog_path == Path.home() / "timelog"


@pytest.mark.parametrize(
    "text",
    [
        "work_hours = ",
        'non_billable_entities = "Admin"',
        "non_billable_entities = [1, 2]",
        'work_hours = "lots"',
        "day_starts = 8",
        'day_starts = "8am"',
        'day_starts = "25:00"',
    ],
)
@pytest.mark.unit
def test_load_config_rejects_invalid_settings(tmp_path, text):
    """
    Ensure malformed TOML and wrongly typed settings raise ConfigError.

    Returns
    -------
    None
        This test asserts configuration validation.
    """
    path = tmp_path / "config.toml"
    path.write_text(text + "\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        config.load_config(path)


@pytest.mark.unit
def test_config_doctest_examples():
    import doctest

    results = doctest.testmod(config)
    assert results.failed == 0
