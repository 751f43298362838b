"""
Record Normalizer

Converts raw workout summaries from a workout data source (health store
export, GPX/FIT import, task payload) into canonical RunningRecord values.
Workouts that cannot produce a meaningful pace are excluded, not raised.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import HeartRateSample, RunningRecord

logger = logging.getLogger(__name__)


@dataclass
class RawWorkout:
    """A workout summary as delivered by the data source"""

    start_date: datetime
    total_distance_m: Optional[float]
    total_duration_s: Optional[float]
    workout_id: Optional[str] = None
    calories_kcal: Optional[float] = None
    average_heart_rate: Optional[float] = None
    max_heart_rate: Optional[float] = None
    min_heart_rate: Optional[float] = None
    cadence_spm: Optional[float] = None
    stride_length_m: Optional[float] = None
    step_count: Optional[int] = None


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing Z is accepted)"""
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def raw_workout_from_dict(data: Dict[str, Any]) -> RawWorkout:
    """
    Build a RawWorkout from a task payload dict.

    Accepts either meter/second fields (total_distance_m, total_duration_s)
    or the stored-record shape (distance_km, duration_s).
    """
    distance_m = data.get("total_distance_m")
    if distance_m is None and data.get("distance_km") is not None:
        distance_m = float(data["distance_km"]) * 1000

    duration_s = data.get("total_duration_s", data.get("duration_s"))
    start = data.get("start_date", data.get("date"))
    if start is None:
        raise ValueError("Workout is missing a start date")

    step_count = data.get("step_count")

    return RawWorkout(
        start_date=parse_timestamp(start),
        total_distance_m=_optional_float(distance_m),
        total_duration_s=_optional_float(duration_s),
        workout_id=data.get("id"),
        calories_kcal=_optional_float(data.get("calories_kcal")),
        average_heart_rate=_optional_float(data.get("average_heart_rate")),
        max_heart_rate=_optional_float(data.get("max_heart_rate")),
        min_heart_rate=_optional_float(data.get("min_heart_rate")),
        cadence_spm=_optional_float(data.get("cadence_spm")),
        stride_length_m=_optional_float(data.get("stride_length_m")),
        step_count=int(step_count) if step_count is not None else None,
    )


def summarize_heart_rate(
    samples: Sequence[HeartRateSample],
) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    """Return (average, max, min) bpm, all None when there are no samples"""
    if not samples:
        return None, None, None
    bpms = [s.bpm for s in samples]
    return sum(bpms) / len(bpms), max(bpms), min(bpms)


def normalize_workout(
    raw: RawWorkout, heart_rate_samples: Optional[Sequence[HeartRateSample]] = None
) -> Optional[RunningRecord]:
    """
    Normalize one raw workout.

    Args:
        raw: Workout summary from the data source
        heart_rate_samples: Optional readings used when the summary has no
            heart-rate aggregates

    Returns:
        RunningRecord, or None when the workout is excluded (duration missing
        or <= 0, negative distance, NaN or infinite values)
    """
    duration = raw.total_duration_s
    if duration is None or not math.isfinite(duration) or duration <= 0:
        logger.debug(
            f"Excluding workout {raw.workout_id or raw.start_date}: "
            f"unusable duration {duration}"
        )
        return None

    distance = raw.total_distance_m or 0.0
    if not math.isfinite(distance) or distance < 0:
        logger.debug(
            f"Excluding workout {raw.workout_id or raw.start_date}: "
            f"unusable distance {distance}"
        )
        return None

    cadence = raw.cadence_spm
    if cadence is None and raw.step_count is not None:
        # steps per minute over the whole workout
        cadence = raw.step_count / (duration / 60.0)

    avg_hr, max_hr, min_hr = (
        raw.average_heart_rate,
        raw.max_heart_rate,
        raw.min_heart_rate,
    )
    if avg_hr is None and max_hr is None and heart_rate_samples:
        avg_hr, max_hr, min_hr = summarize_heart_rate(heart_rate_samples)

    return RunningRecord(
        id=raw.workout_id or str(uuid.uuid4()),
        start_date=raw.start_date,
        distance_m=float(distance),
        duration_s=float(duration),
        calories_kcal=raw.calories_kcal,
        average_heart_rate=avg_hr,
        max_heart_rate=max_hr,
        min_heart_rate=min_hr,
        cadence_spm=cadence,
        stride_length_m=raw.stride_length_m,
        step_count=raw.step_count,
    )


def normalize_workouts(raws: Iterable[RawWorkout]) -> List[RunningRecord]:
    """Normalize a batch, keeping input order and dropping excluded workouts"""
    records = []
    excluded = 0
    for raw in raws:
        record = normalize_workout(raw)
        if record is None:
            excluded += 1
            continue
        records.append(record)

    if excluded:
        logger.info(f"Normalized {len(records)} workouts, excluded {excluded}")

    return records
