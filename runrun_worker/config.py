"""
Worker Configuration

Analysis defaults read from the environment. Task arguments override them
per call.
"""

import os
from dataclasses import dataclass

from .analysis.split_calculator import SplitUnit
from .analysis.time_buckets import CalendarRules


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class WorkerSettings:
    """Environment-driven analysis settings"""

    redis_url: str = "redis://localhost:6379/0"
    timezone: str = "UTC"
    first_weekday: int = 0  # Monday
    segment_length_m: float = 10.0
    split_unit: SplitUnit = SplitUnit.KILOMETER
    include_partial_split: bool = False
    max_gradient_stops: int = 200

    def __post_init__(self):
        if self.segment_length_m <= 0:
            raise ValueError(
                f"RUNRUN_SEGMENT_LENGTH_M must be positive (got {self.segment_length_m})"
            )
        if self.max_gradient_stops < 2:
            raise ValueError(
                f"RUNRUN_MAX_GRADIENT_STOPS must be at least 2 (got {self.max_gradient_stops})"
            )
        # Validates timezone and weekday
        self.calendar_rules()

    def calendar_rules(self) -> CalendarRules:
        return CalendarRules(timezone=self.timezone, first_weekday=self.first_weekday)

    @classmethod
    def from_env(cls) -> "WorkerSettings":
        return cls(
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            timezone=os.getenv("RUNRUN_TIMEZONE", "UTC"),
            first_weekday=int(os.getenv("RUNRUN_FIRST_WEEKDAY", "0")),
            segment_length_m=float(os.getenv("RUNRUN_SEGMENT_LENGTH_M", "10")),
            split_unit=SplitUnit(os.getenv("RUNRUN_SPLIT_UNIT", "km")),
            include_partial_split=_env_bool("RUNRUN_INCLUDE_PARTIAL_SPLIT", False),
            max_gradient_stops=int(os.getenv("RUNRUN_MAX_GRADIENT_STOPS", "200")),
        )
