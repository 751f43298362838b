"""
Tests for Record Normalizer

Tests for converting raw workout summaries into running records.
"""

from datetime import datetime, timedelta, timezone

import pytest

from runrun_worker.analysis.models import HeartRateSample
from runrun_worker.analysis.record_normalizer import (
    normalize_workout,
    normalize_workouts,
    parse_timestamp,
    raw_workout_from_dict,
    RawWorkout,
)

START = datetime(2025, 1, 5, 7, 0, tzinfo=timezone.utc)


class TestParseTimestamp:
    def test_trailing_z(self):
        assert parse_timestamp("2025-01-05T07:00:00Z") == START

    def test_datetime_passthrough(self):
        assert parse_timestamp(START) is START


class TestRawWorkoutFromDict:
    def test_meter_fields(self):
        raw = raw_workout_from_dict(
            {
                "id": "w1",
                "start_date": "2025-01-05T07:00:00Z",
                "total_distance_m": 5000,
                "total_duration_s": 1500,
                "step_count": 4500,
            }
        )
        assert raw.workout_id == "w1"
        assert raw.total_distance_m == 5000.0
        assert raw.total_duration_s == 1500.0
        assert raw.step_count == 4500

    def test_stored_record_shape(self):
        """Should accept distance_km / duration_s / date"""
        raw = raw_workout_from_dict(
            {"date": "2025-01-05T07:00:00+00:00", "distance_km": 5.2, "duration_s": 1600}
        )
        assert raw.total_distance_m == pytest.approx(5200.0)
        assert raw.total_duration_s == 1600.0
        assert raw.start_date == START

    def test_missing_date_raises(self):
        with pytest.raises(ValueError):
            raw_workout_from_dict({"distance_km": 5, "duration_s": 1500})


class TestNormalizeWorkout:
    def test_basic_record(self):
        record = normalize_workout(
            RawWorkout(START, 5000, 1500, workout_id="w1", calories_kcal=320)
        )
        assert record.id == "w1"
        assert record.distance_m == 5000.0
        assert record.pace_per_km == pytest.approx(300.0)
        assert record.calories_kcal == 320

    def test_generates_id(self):
        record = normalize_workout(RawWorkout(START, 5000, 1500))
        assert record.id

    @pytest.mark.parametrize("duration", [None, 0, -10])
    def test_excludes_non_positive_duration(self, duration):
        assert normalize_workout(RawWorkout(START, 5000, duration)) is None

    def test_excludes_negative_distance(self):
        assert normalize_workout(RawWorkout(START, -1, 1500)) is None

    def test_missing_distance_is_zero(self):
        """Treadmill-style workouts keep their duration but have no pace"""
        record = normalize_workout(RawWorkout(START, None, 1800))
        assert record.distance_m == 0.0
        assert record.pace_per_km is None

    def test_cadence_from_steps(self):
        record = normalize_workout(RawWorkout(START, 5000, 1500, step_count=4500))
        assert record.cadence_spm == pytest.approx(180.0)

    def test_heart_rate_from_samples(self):
        samples = [
            HeartRateSample(START + timedelta(seconds=i * 60), bpm)
            for i, bpm in enumerate([140, 150, 160])
        ]
        record = normalize_workout(RawWorkout(START, 5000, 1500), samples)
        assert record.average_heart_rate == pytest.approx(150.0)
        assert record.max_heart_rate == 160
        assert record.min_heart_rate == 140

    def test_summary_heart_rate_wins(self):
        samples = [HeartRateSample(START, 100)]
        record = normalize_workout(
            RawWorkout(START, 5000, 1500, average_heart_rate=155), samples
        )
        assert record.average_heart_rate == 155


class TestNormalizeWorkouts:
    def test_keeps_order_and_drops_excluded(self):
        raws = [
            RawWorkout(START, 5000, 1500, workout_id="a"),
            RawWorkout(START, 5000, 0, workout_id="b"),
            RawWorkout(START, 3000, 1000, workout_id="c"),
        ]
        records = normalize_workouts(raws)
        assert [r.id for r in records] == ["a", "c"]


class TestNonFiniteValues:
    @pytest.mark.parametrize("duration", [float("nan"), float("inf")])
    def test_excludes_non_finite_duration(self, duration):
        assert normalize_workout(RawWorkout(START, 5000, duration)) is None

    @pytest.mark.parametrize("distance", [float("nan"), float("inf")])
    def test_excludes_non_finite_distance(self, distance):
        assert normalize_workout(RawWorkout(START, distance, 1500)) is None

    def test_nan_from_payload(self):
        raw = raw_workout_from_dict(
            {"start_date": "2025-01-05T07:00:00Z", "total_distance_m": 5000, "total_duration_s": "NaN"}
        )
        assert normalize_workouts([raw]) == []
