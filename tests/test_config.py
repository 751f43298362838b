"""
Tests for Worker Configuration
"""

import pytest

from runrun_worker.analysis.split_calculator import SplitUnit
from runrun_worker.config import WorkerSettings


class TestWorkerSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "REDIS_URL",
            "RUNRUN_TIMEZONE",
            "RUNRUN_FIRST_WEEKDAY",
            "RUNRUN_SEGMENT_LENGTH_M",
            "RUNRUN_SPLIT_UNIT",
            "RUNRUN_INCLUDE_PARTIAL_SPLIT",
            "RUNRUN_MAX_GRADIENT_STOPS",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = WorkerSettings.from_env()
        assert settings.redis_url == "redis://localhost:6379/0"
        assert settings.calendar_rules().first_weekday == 0
        assert settings.segment_length_m == 10.0
        assert settings.split_unit == SplitUnit.KILOMETER
        assert settings.include_partial_split is False
        assert settings.max_gradient_stops == 200

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RUNRUN_TIMEZONE", "Asia/Tokyo")
        monkeypatch.setenv("RUNRUN_FIRST_WEEKDAY", "6")
        monkeypatch.setenv("RUNRUN_SPLIT_UNIT", "mile")
        monkeypatch.setenv("RUNRUN_INCLUDE_PARTIAL_SPLIT", "true")

        settings = WorkerSettings.from_env()
        assert settings.calendar_rules().timezone == "Asia/Tokyo"
        assert settings.first_weekday == 6
        assert settings.split_unit == SplitUnit.MILE
        assert settings.include_partial_split is True

    @pytest.mark.parametrize(
        "name, value",
        [
            ("RUNRUN_SEGMENT_LENGTH_M", "0"),
            ("RUNRUN_FIRST_WEEKDAY", "9"),
            ("RUNRUN_SPLIT_UNIT", "furlong"),
            ("RUNRUN_TIMEZONE", "Not/AZone"),
            ("RUNRUN_MAX_GRADIENT_STOPS", "1"),
        ],
    )
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            WorkerSettings.from_env()
