"""
Running Data Models

Immutable value types shared by the analysis modules:
- Workout records and the GPS / heart-rate samples that belong to them
- Route segments and splits derived from a track
- Period buckets, personal records and goals derived from a record history
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class RunningRecord:
    """One completed workout"""

    id: str
    start_date: datetime
    distance_m: float
    duration_s: float
    calories_kcal: Optional[float] = None
    average_heart_rate: Optional[float] = None
    max_heart_rate: Optional[float] = None
    min_heart_rate: Optional[float] = None
    cadence_spm: Optional[float] = None
    stride_length_m: Optional[float] = None
    step_count: Optional[int] = None

    @property
    def distance_km(self) -> float:
        return self.distance_m / 1000

    @property
    def pace_per_km(self) -> Optional[float]:
        """Seconds per km, or None when distance or duration is zero"""
        if self.distance_m <= 0 or self.duration_s <= 0:
            return None
        return self.duration_s / self.distance_km

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["start_date"] = self.start_date.isoformat()
        result["pace_per_km"] = self.pace_per_km
        return result


@dataclass(frozen=True)
class RouteSample:
    """A GPS fix with accumulated distance from the track start"""

    timestamp: datetime
    latitude: float
    longitude: float
    distance_m: float = 0.0

    @property
    def coordinate(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class HeartRateSample:
    """A heart-rate reading taken during a workout"""

    timestamp: datetime
    bpm: float
    elapsed_s: Optional[float] = None


@dataclass(frozen=True)
class RouteSegment:
    """A fixed-length slice of a GPS track"""

    index: int
    coordinates: Tuple[Tuple[float, float], ...]
    start_distance_m: float
    end_distance_m: float
    start_time: datetime
    end_time: datetime
    elapsed_s: float
    pace_per_km: Optional[float]  # None for zero-distance or zero-time slices
    start_coordinate: Optional[Tuple[float, float]] = None
    end_coordinate: Optional[Tuple[float, float]] = None

    @property
    def distance_m(self) -> float:
        return self.end_distance_m - self.start_distance_m

    @property
    def path(self) -> Tuple[Tuple[float, float], ...]:
        """
        Drawable polyline from the interpolated start boundary through the
        segment's own fixes to the interpolated end boundary.

        `coordinates` only holds recorded fixes, so a segment shorter than the
        fix spacing has a single coordinate there; its path still has two.
        """
        if self.start_coordinate is None or self.end_coordinate is None:
            return self.coordinates
        points = (self.start_coordinate,) + self.coordinates[1:]
        if points[-1] != self.end_coordinate:
            points += (self.end_coordinate,)
        return points

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "coordinates": [list(c) for c in self.coordinates],
            "path": [list(c) for c in self.path],
            "start_distance_m": round(self.start_distance_m, 2),
            "end_distance_m": round(self.end_distance_m, 2),
            "distance_m": round(self.distance_m, 2),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "elapsed_s": round(self.elapsed_s, 2),
            "pace_per_km": (
                round(self.pace_per_km, 1) if self.pace_per_km is not None else None
            ),
        }


@dataclass(frozen=True)
class Split:
    """One kilometer (or mile) of a run"""

    index: int
    distance_m: float
    duration_s: float
    start_time: datetime
    end_time: datetime
    average_heart_rate: Optional[float] = None
    max_heart_rate: Optional[float] = None
    min_heart_rate: Optional[float] = None
    is_partial: bool = False

    @property
    def pace_per_km(self) -> Optional[float]:
        if self.distance_m <= 0:
            return None
        return self.duration_s / (self.distance_m / 1000)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["start_time"] = self.start_time.isoformat()
        result["end_time"] = self.end_time.isoformat()
        result["pace_per_km"] = self.pace_per_km
        return result


@dataclass(frozen=True)
class KilometerMarker:
    """Track position where a whole split ends"""

    index: int
    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Granularity(Enum):
    """Bucket period sizes"""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class BucketStats:
    """Totals over the records that fall in one week, month or year"""

    granularity: Granularity
    period_start: date
    total_distance_m: float = 0.0
    total_duration_s: float = 0.0
    run_count: int = 0
    total_calories: float = 0.0
    record_ids: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def _mid_week(self) -> date:
        # Weeks are labelled by the ISO week holding most of their days
        return self.period_start + timedelta(days=3)

    @property
    def year(self) -> int:
        if self.granularity == Granularity.WEEK:
            return self._mid_week.isocalendar()[0]
        return self.period_start.year

    @property
    def month(self) -> Optional[int]:
        if self.granularity == Granularity.MONTH:
            return self.period_start.month
        return None

    @property
    def iso_week(self) -> Optional[int]:
        if self.granularity == Granularity.WEEK:
            return self._mid_week.isocalendar()[1]
        return None

    @property
    def distance_km(self) -> float:
        return self.total_distance_m / 1000

    @property
    def average_pace_per_km(self) -> Optional[float]:
        if self.total_distance_m <= 0:
            return None
        return self.total_duration_s / self.distance_km

    @property
    def average_distance_per_run_km(self) -> float:
        if self.run_count == 0:
            return 0.0
        return self.distance_km / self.run_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "granularity": self.granularity.value,
            "period_start": self.period_start.isoformat(),
            "year": self.year,
            "month": self.month,
            "iso_week": self.iso_week,
            "total_distance_m": round(self.total_distance_m, 2),
            "total_duration_s": round(self.total_duration_s, 2),
            "run_count": self.run_count,
            "total_calories": round(self.total_calories, 1),
            "average_pace_per_km": self.average_pace_per_km,
            "record_ids": list(self.record_ids),
        }


@dataclass(frozen=True)
class DistanceClass:
    """
    A personal-record category.

    Covers the closed-open range [min_km, max_km) so GPS tracks that miss the
    nominal distance by a little still qualify.
    """

    name: str
    min_km: float
    max_km: float

    def contains(self, distance_km: float) -> bool:
        return self.min_km <= distance_km < self.max_km

    def overlaps(self, other: "DistanceClass") -> bool:
        return self.min_km < other.max_km and other.min_km < self.max_km


@dataclass(frozen=True)
class PersonalRecord:
    """Best-pace record within a distance class (record is None if no run qualifies)"""

    distance_class: DistanceClass
    record: Optional[RunningRecord] = None

    @property
    def record_id(self) -> Optional[str]:
        return self.record.id if self.record else None

    @property
    def pace_per_km(self) -> Optional[float]:
        return self.record.pace_per_km if self.record else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distance_class": self.distance_class.name,
            "record_id": self.record_id,
            "pace_per_km": self.pace_per_km,
            "record": self.record.to_dict() if self.record else None,
        }


class GoalType(Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class Goal:
    """Target distance for a year or a month"""

    goal_type: GoalType
    year: int
    target_distance_km: float
    month: Optional[int] = None

    def progress(self, current_distance_km: float) -> float:
        if self.target_distance_km <= 0:
            return 0.0
        return current_distance_km / self.target_distance_km

    def is_achieved(self, current_distance_km: float) -> bool:
        return current_distance_km >= self.target_distance_km


@dataclass(frozen=True)
class Highlights:
    """Extremal days and months surfaced on the profile and year screens"""

    best_day_by_distance: Optional[RunningRecord] = None
    best_day_by_duration: Optional[RunningRecord] = None
    fastest_day: Optional[RunningRecord] = None
    best_month_by_distance: Optional[BucketStats] = None
    best_month_by_duration: Optional[BucketStats] = None
    most_runs_month: Optional[BucketStats] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            name: value.to_dict() if value is not None else None
            for name, value in (
                ("best_day_by_distance", self.best_day_by_distance),
                ("best_day_by_duration", self.best_day_by_duration),
                ("fastest_day", self.fastest_day),
                ("best_month_by_distance", self.best_month_by_distance),
                ("best_month_by_duration", self.best_month_by_duration),
                ("most_runs_month", self.most_runs_month),
            )
        }


def serialize_all(items: List[Any]) -> List[Dict[str, Any]]:
    """Convert a list of model values to JSON-safe dicts"""
    return [item.to_dict() for item in items]
