"""
Time Bucket Aggregator

Groups running records into weekly, monthly and yearly buckets:
- Period membership follows explicit calendar rules (timezone, week start)
- Per-bucket totals for distance, duration, run count and calories
- Padding helpers that add zero-valued placeholders for charts
- Cumulative daily distance series for year/month progress charts
"""

import calendar as month_calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .models import BucketStats, Goal, GoalType, Granularity, RunningRecord


@dataclass(frozen=True)
class CalendarRules:
    """
    Calendar used to decide which period a record belongs to.

    first_weekday uses datetime.weekday() numbering (0 = Monday), so the
    default reproduces ISO-8601 week membership regardless of host locale.
    Naive datetimes are taken as wall-clock time in `timezone`.
    """

    timezone: str = "UTC"
    first_weekday: int = 0

    def __post_init__(self):
        if not 0 <= self.first_weekday <= 6:
            raise ValueError(
                f"first_weekday must be between 0 and 6 (got {self.first_weekday})"
            )
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {self.timezone}") from e

    def local_date(self, moment: datetime) -> date:
        if moment.tzinfo is None:
            return moment.date()
        return moment.astimezone(ZoneInfo(self.timezone)).date()

    def week_start(self, day: date) -> date:
        return day - timedelta(days=(day.weekday() - self.first_weekday) % 7)

    def period_start(self, moment: datetime, granularity: Granularity) -> date:
        """Start date of the period containing `moment`"""
        day = self.local_date(moment)
        if granularity == Granularity.WEEK:
            return self.week_start(day)
        elif granularity == Granularity.MONTH:
            return day.replace(day=1)
        else:
            return date(day.year, 1, 1)


@dataclass(frozen=True)
class Totals:
    """Sum over a collection of buckets"""

    total_distance_m: float = 0.0
    total_duration_s: float = 0.0
    run_count: int = 0
    total_calories: float = 0.0

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

    @property
    def average_duration_per_run_s(self) -> float:
        if self.run_count == 0:
            return 0.0
        return self.total_duration_s / self.run_count


def aggregate_records(
    records: Iterable[RunningRecord],
    granularity: Granularity,
    calendar: Optional[CalendarRules] = None,
) -> Dict[date, BucketStats]:
    """
    Group records by period and sum their numeric fields.

    Args:
        records: Records in any order and date range
        granularity: Week, month or year
        calendar: Calendar rules (defaults to UTC with Monday weeks)

    Returns:
        Mapping of period start date to BucketStats, one entry per period that
        has at least one record
    """
    calendar = calendar or CalendarRules()
    totals: Dict[date, Dict[str, Any]] = {}

    for record in records:
        key = calendar.period_start(record.start_date, granularity)
        bucket = totals.setdefault(
            key,
            {"distance": 0.0, "duration": 0.0, "count": 0, "calories": 0.0, "ids": []},
        )
        bucket["distance"] += record.distance_m
        bucket["duration"] += record.duration_s
        bucket["count"] += 1
        bucket["calories"] += record.calories_kcal or 0.0
        bucket["ids"].append(record.id)

    return {
        key: BucketStats(
            granularity=granularity,
            period_start=key,
            total_distance_m=bucket["distance"],
            total_duration_s=bucket["duration"],
            run_count=bucket["count"],
            total_calories=bucket["calories"],
            record_ids=tuple(bucket["ids"]),
        )
        for key, bucket in totals.items()
    }


def pad_months(buckets: Dict[date, BucketStats], year: int) -> List[BucketStats]:
    """Return all 12 months of `year`, with empty placeholders where needed"""
    result = []
    for month in range(1, 13):
        key = date(year, month, 1)
        result.append(buckets.get(key) or BucketStats(Granularity.MONTH, key))
    return result


def pad_weeks(
    buckets: Dict[date, BucketStats],
    through: date,
    weeks: int = 12,
    calendar: Optional[CalendarRules] = None,
) -> List[BucketStats]:
    """Return the `weeks` weeks ending with the one containing `through`, oldest first"""
    calendar = calendar or CalendarRules()
    last_start = calendar.week_start(through)

    result = []
    for offset in range(weeks - 1, -1, -1):
        key = last_start - timedelta(weeks=offset)
        result.append(buckets.get(key) or BucketStats(Granularity.WEEK, key))
    return result


def total_of(buckets: Iterable[BucketStats]) -> Totals:
    distance = duration = calories = 0.0
    count = 0
    for bucket in buckets:
        distance += bucket.total_distance_m
        duration += bucket.total_duration_s
        calories += bucket.total_calories
        count += bucket.run_count
    return Totals(
        total_distance_m=distance,
        total_duration_s=duration,
        run_count=count,
        total_calories=calories,
    )


def cumulative_daily_distance(
    records: Iterable[RunningRecord],
    year: int,
    month: Optional[int] = None,
    through: Optional[date] = None,
    calendar: Optional[CalendarRules] = None,
) -> List[Tuple[int, float]]:
    """
    Running total of kilometers per day for a year or a month.

    Days are numbered from 1 (day of year, or day of month when `month` is
    given). The series covers the whole period, or stops at `through` when
    that date falls inside it.

    Returns:
        List of (day_number, cumulative_km)
    """
    calendar = calendar or CalendarRules()

    if month is None:
        period_start = date(year, 1, 1)
        period_end = date(year, 12, 31)
    else:
        period_start = date(year, month, 1)
        period_end = date(year, month, month_calendar.monthrange(year, month)[1])

    if through is not None:
        if through < period_start:
            return []
        period_end = min(period_end, through)

    daily: Dict[int, float] = {}
    for record in records:
        day = calendar.local_date(record.start_date)
        if not period_start <= day <= period_end:
            continue
        day_number = (day - period_start).days + 1
        daily[day_number] = daily.get(day_number, 0.0) + record.distance_km

    result = []
    cumulative = 0.0
    for day_number in range(1, (period_end - period_start).days + 2):
        cumulative += daily.get(day_number, 0.0)
        result.append((day_number, cumulative))

    return result


def goal_progress(
    goal: Goal,
    records: Iterable[RunningRecord],
    calendar: Optional[CalendarRules] = None,
) -> float:
    """Fraction of the goal covered by the records in the goal's period"""
    if goal.goal_type == GoalType.MONTHLY:
        if goal.month is None:
            raise ValueError("Monthly goal requires a month")
        buckets = aggregate_records(records, Granularity.MONTH, calendar)
        bucket = buckets.get(date(goal.year, goal.month, 1))
    else:
        buckets = aggregate_records(records, Granularity.YEAR, calendar)
        bucket = buckets.get(date(goal.year, 1, 1))

    return goal.progress(bucket.distance_km if bucket else 0.0)
