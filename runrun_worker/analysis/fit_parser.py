"""
FIT File Parser

Parses Garmin/ANT+ FIT files into the inputs of the running analyses:
- a RawWorkout summary from the session message
- a distance-annotated route from the record messages
- heart-rate readings from the record messages

Uses the fitparse library to decode FIT files.
"""

import io
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional

from fitparse import FitFile

from .models import HeartRateSample, RouteSample
from .record_normalizer import RawWorkout
from .route_track import build_route_samples

SEMICIRCLES_TO_DEGREES = 180.0 / 2**31


@dataclass
class FitTrackPoint:
    """A single record message from a FIT file"""

    time: Optional[datetime]
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    heart_rate: Optional[int] = None
    cadence: Optional[int] = None


@dataclass
class FitActivityData:
    """Activity data extracted from a FIT file"""

    start_time: Optional[datetime] = None
    sport: Optional[str] = None
    total_distance_m: float = 0.0
    total_timer_time_s: float = 0.0
    total_calories: Optional[float] = None
    avg_heart_rate: Optional[int] = None
    max_heart_rate: Optional[int] = None
    min_heart_rate: Optional[int] = None
    avg_running_cadence: Optional[float] = None
    total_strides: Optional[int] = None
    points: List[FitTrackPoint] = field(default_factory=list)


def _field_values(message) -> dict:
    return {f.name: f.value for f in message.fields}


def _read_session(values: dict, data: FitActivityData) -> None:
    def number(name: str) -> Optional[float]:
        value = values.get(name)
        return float(value) if value is not None else None

    data.sport = str(values["sport"]) if values.get("sport") else None
    data.start_time = values.get("start_time")
    data.total_distance_m = number("total_distance") or 0.0
    data.total_timer_time_s = number("total_timer_time") or 0.0
    data.total_calories = number("total_calories")
    data.avg_heart_rate = values.get("avg_heart_rate")
    data.max_heart_rate = values.get("max_heart_rate")
    data.min_heart_rate = values.get("min_heart_rate")
    data.avg_running_cadence = number("avg_running_cadence") or number("avg_cadence")
    data.total_strides = values.get("total_strides")


def _read_record(values: dict) -> FitTrackPoint:
    lat = values.get("position_lat")
    lon = values.get("position_long")
    return FitTrackPoint(
        time=values.get("timestamp"),
        # FIT stores positions in semicircles
        latitude=lat * SEMICIRCLES_TO_DEGREES if lat is not None else None,
        longitude=lon * SEMICIRCLES_TO_DEGREES if lon is not None else None,
        heart_rate=values.get("heart_rate"),
        cadence=values.get("cadence"),
    )


def read_fit_messages(messages: Iterable[Any]) -> FitActivityData:
    """
    Collect session and record data from decoded FIT messages.

    Args:
        messages: Objects with `name` and `fields` (each field with `name`
            and `value`), as yielded by FitFile.get_messages()

    Returns:
        FitActivityData
    """
    data = FitActivityData()

    for message in messages:
        if message.name == "session":
            _read_session(_field_values(message), data)
        elif message.name == "record":
            data.points.append(_read_record(_field_values(message)))

    if data.start_time is None and data.points:
        data.start_time = next((p.time for p in data.points if p.time), None)

    return data


def parse_fit_content(fit_content: bytes) -> FitActivityData:
    """
    Parse FIT file content and extract activity data.

    Args:
        fit_content: Raw FIT file content as bytes

    Returns:
        FitActivityData containing all extracted data
    """
    fitfile = FitFile(io.BytesIO(fit_content))
    return read_fit_messages(fitfile.get_messages())


def fit_to_raw_workout(fit_data: FitActivityData, workout_id: str = None) -> RawWorkout:
    """Session summary as a RawWorkout for the record normalizer"""
    if fit_data.start_time is None:
        raise ValueError("FIT file has no session start time")

    # FIT reports running cadence per leg
    cadence = (
        fit_data.avg_running_cadence * 2
        if fit_data.avg_running_cadence is not None
        else None
    )
    steps = fit_data.total_strides * 2 if fit_data.total_strides is not None else None

    return RawWorkout(
        start_date=fit_data.start_time,
        total_distance_m=fit_data.total_distance_m,
        total_duration_s=fit_data.total_timer_time_s,
        workout_id=workout_id,
        calories_kcal=fit_data.total_calories,
        average_heart_rate=fit_data.avg_heart_rate,
        max_heart_rate=fit_data.max_heart_rate,
        min_heart_rate=fit_data.min_heart_rate,
        cadence_spm=cadence,
        step_count=steps,
    )


def fit_route_samples(fit_data: FitActivityData) -> List[RouteSample]:
    """Route from record messages that carry a position and a timestamp"""
    return build_route_samples(
        (p.time, p.latitude, p.longitude)
        for p in fit_data.points
        if p.time is not None and p.latitude is not None and p.longitude is not None
    )


def fit_heart_rate_samples(fit_data: FitActivityData) -> List[HeartRateSample]:
    start = fit_data.start_time
    return [
        HeartRateSample(
            timestamp=p.time,
            bpm=float(p.heart_rate),
            elapsed_s=(p.time - start).total_seconds() if start else None,
        )
        for p in fit_data.points
        if p.time is not None and p.heart_rate is not None
    ]
