"""
Route Analysis Tasks

Celery tasks that turn a workout's GPS track and heart-rate readings into
pace-colored route segments, gradient stops, splits and kilometer markers.
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..analysis import (
    build_route_samples,
    calculate_pace_thresholds,
    fit_heart_rate_samples,
    fit_route_samples,
    fit_to_raw_workout,
    gradient_stops,
    HeartRateSample,
    normalize_workout,
    parse_fit_content,
    parse_gpx_heart_rate,
    parse_gpx_route,
    parse_timestamp,
    RouteSample,
    RouteSegmenter,
    serialize_all,
    SplitCalculator,
    SplitUnit,
)
from ..celery_app import settings
from . import app

logger = logging.getLogger(__name__)


def _route_analysis(
    samples: Sequence[RouteSample],
    heart_rate_samples: Sequence[HeartRateSample],
    segment_length_m: Optional[float],
    split_unit: Optional[str],
    include_partial_split: Optional[bool],
    max_gradient_stops: Optional[int],
) -> Dict[str, Any]:
    segmenter = RouteSegmenter(
        settings.segment_length_m if segment_length_m is None else segment_length_m
    )
    calculator = SplitCalculator(
        unit=SplitUnit(split_unit) if split_unit else settings.split_unit,
        include_partial=(
            settings.include_partial_split
            if include_partial_split is None
            else include_partial_split
        ),
    )

    segments = segmenter.segment(samples)
    thresholds = calculate_pace_thresholds(segments)
    stops = gradient_stops(
        segments,
        thresholds,
        settings.max_gradient_stops if max_gradient_stops is None else max_gradient_stops,
    )

    splits = calculator.calculate_splits(samples)
    if heart_rate_samples:
        splits = calculator.enrich_with_heart_rate(splits, heart_rate_samples)

    return {
        "total_distance_m": round(samples[-1].distance_m, 2) if samples else 0.0,
        "sample_count": len(samples),
        "segments": serialize_all(segments),
        "pace_thresholds": thresholds.to_dict(),
        "uses_pace_gradient": thresholds.has_range,
        "gradient_stops": serialize_all(stops),
        "splits": serialize_all(splits),
        "kilometer_markers": serialize_all(calculator.kilometer_markers(samples)),
    }


@app.task(name="analyze_run_route", bind=True)
def analyze_run_route(
    self,
    activity_id: str,
    file_content: str,
    file_type: str = "gpx",
    segment_length_m: float = None,
    split_unit: str = None,
    include_partial_split: bool = None,
    max_gradient_stops: int = None,
) -> Dict[str, Any]:
    """
    Analyze the route of a GPX or FIT activity.

    Args:
        activity_id: Unique ID for the activity
        file_content: Raw file content (GPX as string, FIT as base64-encoded string)
        file_type: Type of file - "gpx" or "fit" (default: "gpx")
        segment_length_m: Route segment length (defaults to RUNRUN_SEGMENT_LENGTH_M)
        split_unit: "km" or "mile" (defaults to RUNRUN_SPLIT_UNIT)
        include_partial_split: Report the trailing partial split
        max_gradient_stops: Cap on gradient color stops

    Returns:
        Dict containing segments, pace thresholds, gradient stops, splits,
        kilometer markers and, for FIT files, the normalized record
    """
    logger.info(
        f"[Task {self.request.id}] Starting analyze_run_route for activity_id={activity_id}, "
        f"type: {file_type}"
    )

    try:
        record = None
        if file_type.lower() == "fit":
            fit_data = parse_fit_content(base64.b64decode(file_content))
            samples = fit_route_samples(fit_data)
            heart_rate = fit_heart_rate_samples(fit_data)
            record = normalize_workout(
                fit_to_raw_workout(fit_data, activity_id), heart_rate
            )
        else:
            samples = parse_gpx_route(file_content)
            heart_rate = parse_gpx_heart_rate(file_content)

        logger.info(
            f"[Task {self.request.id}] Parsed {len(samples)} route samples, "
            f"{len(heart_rate)} heart-rate readings"
        )

        result = _route_analysis(
            samples,
            heart_rate,
            segment_length_m,
            split_unit,
            include_partial_split,
            max_gradient_stops,
        )

        logger.info(
            f"[Task {self.request.id}] Route analysis complete. "
            f"Segments: {len(result['segments'])}, splits: {len(result['splits'])}"
        )

        return {
            "success": True,
            "activity_id": activity_id,
            "record": record.to_dict() if record else None,
            **result,
        }

    except Exception as e:
        logger.error(
            f"[Task {self.request.id}] Error analyzing route {activity_id}: {e}",
            exc_info=True,
        )
        return {
            "success": False,
            "error": str(e),
            "activity_id": activity_id,
        }


@app.task(name="analyze_route_samples")
def analyze_route_samples(
    locations: List[Dict[str, Any]],
    heart_rate: List[Dict[str, Any]] = None,
    segment_length_m: float = None,
    split_unit: str = None,
    include_partial_split: bool = None,
    max_gradient_stops: int = None,
) -> Dict[str, Any]:
    """
    Analyze a route delivered as JSON fixes from the health store.

    Args:
        locations: Time-ordered dicts with timestamp, latitude, longitude
        heart_rate: Optional dicts with timestamp and bpm

    Returns:
        Same payload as analyze_run_route (without a record)
    """
    try:
        samples = build_route_samples(
            (
                parse_timestamp(loc["timestamp"]),
                float(loc["latitude"]),
                float(loc["longitude"]),
            )
            for loc in locations
        )
        heart_rate_samples = [
            HeartRateSample(timestamp=parse_timestamp(hr["timestamp"]), bpm=float(hr["bpm"]))
            for hr in heart_rate or []
        ]

        return {
            "success": True,
            **_route_analysis(
                samples,
                heart_rate_samples,
                segment_length_m,
                split_unit,
                include_partial_split,
                max_gradient_stops,
            ),
        }

    except Exception as e:
        logger.error(f"Error analyzing route samples: {e}", exc_info=True)
        return {"success": False, "error": str(e)}
