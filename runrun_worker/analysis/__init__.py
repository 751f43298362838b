"""
Analysis Module

Provides running statistics over workout records and GPS tracks.
"""

from .models import (
    BucketStats,
    DistanceClass,
    Goal,
    GoalType,
    Granularity,
    HeartRateSample,
    Highlights,
    KilometerMarker,
    PersonalRecord,
    RouteSample,
    RouteSegment,
    RunningRecord,
    serialize_all,
    Split,
)
from .record_normalizer import (
    normalize_workout,
    normalize_workouts,
    parse_timestamp,
    raw_workout_from_dict,
    RawWorkout,
    summarize_heart_rate,
)
from .route_track import (
    build_route_samples,
    haversine_distance,
    parse_gpx_heart_rate,
    parse_gpx_route,
    TrackPosition,
)
from .time_buckets import (
    aggregate_records,
    CalendarRules,
    cumulative_daily_distance,
    goal_progress,
    pad_months,
    pad_weeks,
    total_of,
    Totals,
)
from .highlights import (
    best_by_distance,
    best_by_duration,
    fastest_by_pace,
    most_frequent_bucket,
    select_highlights,
)
from .personal_records import (
    DEFAULT_DISTANCE_CLASSES,
    find_personal_records,
    PersonalRecordTracker,
)
from .route_segmenter import (
    calculate_pace_thresholds,
    gradient_stops,
    GradientStop,
    pace_fraction,
    PaceThresholds,
    RouteSegmenter,
    segment_color,
    SegmentColor,
)
from .split_calculator import (
    calculate_splits,
    heart_rate_stats,
    SplitCalculator,
    SplitUnit,
)
from .fit_parser import (
    fit_heart_rate_samples,
    fit_route_samples,
    fit_to_raw_workout,
    FitActivityData,
    FitTrackPoint,
    parse_fit_content,
    read_fit_messages,
)

__all__ = [
    "RunningRecord",
    "RouteSample",
    "HeartRateSample",
    "RouteSegment",
    "Split",
    "KilometerMarker",
    "Granularity",
    "BucketStats",
    "DistanceClass",
    "PersonalRecord",
    "GoalType",
    "Goal",
    "Highlights",
    "serialize_all",
    "RawWorkout",
    "parse_timestamp",
    "raw_workout_from_dict",
    "summarize_heart_rate",
    "normalize_workout",
    "normalize_workouts",
    "haversine_distance",
    "build_route_samples",
    "TrackPosition",
    "parse_gpx_route",
    "parse_gpx_heart_rate",
    "CalendarRules",
    "Totals",
    "aggregate_records",
    "pad_months",
    "pad_weeks",
    "total_of",
    "cumulative_daily_distance",
    "goal_progress",
    "best_by_distance",
    "best_by_duration",
    "fastest_by_pace",
    "most_frequent_bucket",
    "select_highlights",
    "DEFAULT_DISTANCE_CLASSES",
    "PersonalRecordTracker",
    "find_personal_records",
    "RouteSegmenter",
    "PaceThresholds",
    "SegmentColor",
    "GradientStop",
    "calculate_pace_thresholds",
    "pace_fraction",
    "segment_color",
    "gradient_stops",
    "SplitUnit",
    "SplitCalculator",
    "heart_rate_stats",
    "calculate_splits",
    "FitActivityData",
    "FitTrackPoint",
    "read_fit_messages",
    "parse_fit_content",
    "fit_to_raw_workout",
    "fit_route_samples",
    "fit_heart_rate_samples",
]
