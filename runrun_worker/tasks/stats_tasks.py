"""
Running History Tasks

Celery tasks that turn a user's workout history into normalized records,
period rollups, highlights and personal records.
"""

import logging
from typing import Any, Dict, List, Optional

from ..analysis import (
    aggregate_records,
    CalendarRules,
    DistanceClass,
    Granularity,
    normalize_workouts as normalize_raw_workouts,
    PersonalRecordTracker,
    raw_workout_from_dict,
    select_highlights,
    serialize_all,
    total_of,
)
from ..celery_app import settings
from . import app

logger = logging.getLogger(__name__)


def _calendar_rules(
    timezone: Optional[str], first_weekday: Optional[int]
) -> CalendarRules:
    return CalendarRules(
        timezone=timezone or settings.timezone,
        first_weekday=settings.first_weekday if first_weekday is None else first_weekday,
    )


def _sorted_buckets(buckets) -> List[Dict[str, Any]]:
    return [buckets[key].to_dict() for key in sorted(buckets)]


@app.task(name="normalize_workouts")
def normalize_workouts(workouts: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Normalize raw workout summaries into running records.

    Args:
        workouts: List of workout dicts with:
            - start_date: ISO-8601 start time
            - total_distance_m / total_duration_s (or distance_km / duration_s)
            - optional id, calories_kcal, heart-rate, cadence and step fields

    Returns:
        Dict containing the records and how many workouts were excluded
    """
    try:
        raws = [raw_workout_from_dict(w) for w in workouts]
        records = normalize_raw_workouts(raws)

        return {
            "success": True,
            "records": serialize_all(records),
            "excluded_count": len(raws) - len(records),
        }

    except Exception as e:
        logger.error(f"Error normalizing workouts: {e}", exc_info=True)
        return {"success": False, "error": str(e)}


@app.task(name="summarize_running_history")
def summarize_running_history(
    workouts: List[Dict[str, Any]],
    year: int = None,
    timezone: str = None,
    first_weekday: int = None,
    distance_classes: List[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the statistics shown on the profile and year screens.

    Args:
        workouts: Workout dicts (see normalize_workouts)
        year: Optional year that highlights and yearly totals focus on
            (defaults to all records)
        timezone: Calendar timezone for period membership
        first_weekday: Week start (0 = Monday)
        distance_classes: Optional personal-record classes, each with
            name, min_km and max_km

    Returns:
        Dict containing:
            - weekly / monthly / yearly: bucket stats sorted by period
            - totals: summed distance, duration, runs and calories
            - highlights: best days and months
            - personal_records: best pace per distance class
    """
    try:
        calendar = _calendar_rules(timezone, first_weekday)
        records = normalize_raw_workouts(raw_workout_from_dict(w) for w in workouts)

        logger.info(
            f"Summarizing {len(records)} records "
            f"(timezone={calendar.timezone}, first_weekday={calendar.first_weekday})"
        )

        weekly = aggregate_records(records, Granularity.WEEK, calendar)
        monthly = aggregate_records(records, Granularity.MONTH, calendar)
        yearly = aggregate_records(records, Granularity.YEAR, calendar)

        focus_records = records
        focus_months = list(monthly.values())
        if year is not None:
            focus_records = [
                r for r in records if calendar.local_date(r.start_date).year == year
            ]
            focus_months = [b for b in monthly.values() if b.year == year]

        tracker = PersonalRecordTracker(
            [
                DistanceClass(c["name"], float(c["min_km"]), float(c["max_km"]))
                for c in distance_classes
            ]
            if distance_classes
            else None
        )

        totals = total_of(focus_months)
        highlights = select_highlights(
            focus_records, sorted(focus_months, key=lambda b: b.period_start)
        )

        return {
            "success": True,
            "record_count": len(records),
            "weekly": _sorted_buckets(weekly),
            "monthly": _sorted_buckets(monthly),
            "yearly": _sorted_buckets(yearly),
            "totals": {
                "total_distance_m": round(totals.total_distance_m, 2),
                "total_duration_s": round(totals.total_duration_s, 2),
                "run_count": totals.run_count,
                "total_calories": round(totals.total_calories, 1),
                "average_pace_per_km": totals.average_pace_per_km,
                "average_distance_per_run_km": totals.average_distance_per_run_km,
            },
            "highlights": highlights.to_dict(),
            "personal_records": serialize_all(tracker.find(records)),
        }

    except Exception as e:
        logger.error(f"Error summarizing running history: {e}", exc_info=True)
        return {"success": False, "error": str(e)}
