"""
Highlight Selector

Finds extremal records and buckets for the profile and year screens:
- Longest run / month by distance
- Longest run / month by duration
- Fastest run by average pace (runs of at least 1 km)
- Month with the most runs

Ties go to the earliest date, then to the earliest position in the input, so
the same input always yields the same highlight.
"""

from datetime import date, datetime, timezone
from typing import Callable, Iterable, Optional, Sequence, TypeVar, Union

from .models import BucketStats, Highlights, RunningRecord

# Runs shorter than this have unreliable pace
MIN_PACE_DISTANCE_KM = 1.0

Candidate = TypeVar("Candidate", RunningRecord, BucketStats)


def _candidate_date(candidate: Union[RunningRecord, BucketStats]) -> Union[date, datetime]:
    if isinstance(candidate, BucketStats):
        return candidate.period_start
    # Naive and aware start dates must stay comparable
    if candidate.start_date.tzinfo is None:
        return candidate.start_date.replace(tzinfo=timezone.utc)
    return candidate.start_date


def _candidate_distance(candidate: Union[RunningRecord, BucketStats]) -> float:
    if isinstance(candidate, BucketStats):
        return candidate.total_distance_m
    return candidate.distance_m


def _candidate_duration(candidate: Union[RunningRecord, BucketStats]) -> float:
    if isinstance(candidate, BucketStats):
        return candidate.total_duration_s
    return candidate.duration_s


def _is_candidate(candidate: Union[RunningRecord, BucketStats]) -> bool:
    # Placeholder buckets with no runs never count as highlights
    return not isinstance(candidate, BucketStats) or candidate.run_count > 0


def select_min(
    candidates: Iterable[Candidate], score: Callable[[Candidate], float]
) -> Optional[Candidate]:
    """Arg-min of score, ties broken by date then input position"""
    best = None
    best_key = None
    for position, candidate in enumerate(candidates):
        key = (score(candidate), _candidate_date(candidate), position)
        if best_key is None or key < best_key:
            best, best_key = candidate, key
    return best


def best_by_distance(candidates: Iterable[Candidate]) -> Optional[Candidate]:
    return select_min(
        (c for c in candidates if _is_candidate(c)),
        lambda c: -_candidate_distance(c),
    )


def best_by_duration(candidates: Iterable[Candidate]) -> Optional[Candidate]:
    return select_min(
        (c for c in candidates if _is_candidate(c)),
        lambda c: -_candidate_duration(c),
    )


def fastest_by_pace(records: Iterable[RunningRecord]) -> Optional[RunningRecord]:
    """Lowest-pace record among runs of at least 1 km"""
    eligible = (
        r
        for r in records
        if r.distance_km >= MIN_PACE_DISTANCE_KM and r.pace_per_km is not None
    )
    return select_min(eligible, lambda r: r.pace_per_km)


def most_frequent_bucket(buckets: Iterable[BucketStats]) -> Optional[BucketStats]:
    return select_min(
        (b for b in buckets if b.run_count > 0), lambda b: -b.run_count
    )


def select_highlights(
    records: Sequence[RunningRecord], monthly_buckets: Sequence[BucketStats]
) -> Highlights:
    """Bundle day and month highlights for a record history"""
    return Highlights(
        best_day_by_distance=best_by_distance(records),
        best_day_by_duration=best_by_duration(records),
        fastest_day=fastest_by_pace(records),
        best_month_by_distance=best_by_distance(monthly_buckets),
        best_month_by_duration=best_by_duration(monthly_buckets),
        most_runs_month=most_frequent_bucket(monthly_buckets),
    )
