"""
Route Segmenter

Splits a GPS track into fixed-length segments for pace-colored route maps:
- Segments close at exact multiples of the segment length (boundary times are
  interpolated between fixes); the final partial segment is kept
- Pace per segment in seconds per km
- 10th/90th percentile pace thresholds for the color scale
- Green (fast) to red (slow) hue mapping and subsampled gradient stops
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .models import RouteSample, RouteSegment
from .route_track import TrackPosition

# Used when no segment has a defined pace
DEFAULT_FAST_PACE = 300.0
DEFAULT_SLOW_PACE = 600.0

FAST_HUE = 0.33  # green
SLOW_HUE = 0.0  # red
NEUTRAL_HUE = 0.17  # yellow
SATURATION = 0.85
BRIGHTNESS = 0.9

MAX_GRADIENT_STOPS = 200


@dataclass(frozen=True)
class PaceThresholds:
    """Pace range mapped onto the color scale (seconds per km)"""

    fast: float
    slow: float

    @property
    def has_range(self) -> bool:
        return self.slow > self.fast

    def to_dict(self) -> Dict[str, Any]:
        return {"fast": round(self.fast, 1), "slow": round(self.slow, 1)}


@dataclass(frozen=True)
class SegmentColor:
    """HSB color for a segment"""

    hue: float
    saturation: float = SATURATION
    brightness: float = BRIGHTNESS


@dataclass(frozen=True)
class GradientStop:
    """A color stop along the route, location in [0, 1] by distance"""

    location: float
    color: SegmentColor

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": round(self.location, 4),
            "hue": round(self.color.hue, 4),
            "saturation": self.color.saturation,
            "brightness": self.color.brightness,
        }


class RouteSegmenter:
    """Cuts a distance-annotated track into fixed-length segments"""

    DEFAULT_SEGMENT_LENGTH_M = 10.0

    # Boundaries closer than this to the track end do not open a new segment
    DISTANCE_EPSILON_M = 1e-6

    def __init__(self, segment_length_m: float = DEFAULT_SEGMENT_LENGTH_M):
        """
        Args:
            segment_length_m: Nominal segment length in meters

        Raises:
            ValueError: If segment_length_m is not positive
        """
        if segment_length_m <= 0:
            raise ValueError(
                f"Segment length must be positive (got {segment_length_m})"
            )
        self.segment_length_m = float(segment_length_m)

    def _pace(self, distance_m: float, elapsed_s: float) -> Optional[float]:
        if distance_m <= self.DISTANCE_EPSILON_M or elapsed_s <= 0:
            return None
        return elapsed_s / (distance_m / 1000)

    def segment(self, samples: Sequence[RouteSample]) -> List[RouteSegment]:
        """
        Partition a track into segments.

        Each segment's coordinates start with the last coordinate of the
        previous segment, so adjacent segments share one boundary point.
        Each segment also records its interpolated boundary positions, so
        its `path` is drawable even when no fix falls inside it.

        Args:
            samples: Time-ordered samples with accumulated distance

        Returns:
            Segments in track order (empty for fewer than 2 samples)
        """
        if len(samples) < 2:
            return []

        track = TrackPosition(samples)
        total_m = track.total_distance_m

        if total_m <= self.DISTANCE_EPSILON_M:
            elapsed = (samples[-1].timestamp - samples[0].timestamp).total_seconds()
            return [
                RouteSegment(
                    index=0,
                    coordinates=tuple(s.coordinate for s in samples),
                    start_distance_m=0.0,
                    end_distance_m=total_m,
                    start_time=samples[0].timestamp,
                    end_time=samples[-1].timestamp,
                    elapsed_s=elapsed,
                    pace_per_km=None,
                    start_coordinate=samples[0].coordinate,
                    end_coordinate=samples[-1].coordinate,
                )
            ]

        segments: List[RouteSegment] = []
        next_idx = 1
        start_m = 0.0
        start_time = samples[0].timestamp
        start_coordinate = samples[0].coordinate
        index = 0

        while True:
            end_m = (index + 1) * self.segment_length_m
            is_last = end_m >= total_m - self.DISTANCE_EPSILON_M
            if is_last:
                end_m = total_m

            coordinates = [samples[next_idx - 1].coordinate]
            while next_idx < len(samples) and (
                is_last or samples[next_idx].distance_m <= end_m
            ):
                coordinates.append(samples[next_idx].coordinate)
                next_idx += 1

            if is_last:
                end_time = samples[-1].timestamp
                end_coordinate = samples[-1].coordinate
            else:
                end_time = track.time_at(end_m)
                end_coordinate = track.coordinate_at(end_m)
            elapsed = (end_time - start_time).total_seconds()

            segments.append(
                RouteSegment(
                    index=index,
                    coordinates=tuple(coordinates),
                    start_distance_m=start_m,
                    end_distance_m=end_m,
                    start_time=start_time,
                    end_time=end_time,
                    elapsed_s=elapsed,
                    pace_per_km=self._pace(end_m - start_m, elapsed),
                    start_coordinate=start_coordinate,
                    end_coordinate=end_coordinate,
                )
            )

            if is_last:
                break

            start_m = end_m
            start_time = end_time
            start_coordinate = end_coordinate
            index += 1

        return segments


def calculate_pace_thresholds(segments: Sequence[RouteSegment]) -> PaceThresholds:
    """
    10th ("fast") and 90th ("slow") percentile of segment paces.

    Uses linear interpolation between order statistics. Segments without a
    defined pace are ignored; if none remain the default range is returned.
    """
    paces = [s.pace_per_km for s in segments if s.pace_per_km is not None]
    if not paces:
        return PaceThresholds(DEFAULT_FAST_PACE, DEFAULT_SLOW_PACE)

    fast, slow = np.percentile(paces, [10, 90])
    return PaceThresholds(fast=float(fast), slow=float(slow))


def pace_fraction(
    pace_per_km: Optional[float], thresholds: PaceThresholds
) -> Optional[float]:
    """Position of a pace on the fast..slow scale, clamped to [0, 1]"""
    if pace_per_km is None or not thresholds.has_range:
        return None
    fraction = (pace_per_km - thresholds.fast) / (thresholds.slow - thresholds.fast)
    return min(1.0, max(0.0, fraction))


def segment_color(segment: RouteSegment, thresholds: PaceThresholds) -> SegmentColor:
    fraction = pace_fraction(segment.pace_per_km, thresholds)
    if fraction is None:
        return SegmentColor(hue=NEUTRAL_HUE)
    return SegmentColor(hue=SLOW_HUE + (FAST_HUE - SLOW_HUE) * (1.0 - fraction))


def gradient_stops(
    segments: Sequence[RouteSegment],
    thresholds: PaceThresholds,
    max_stops: int = MAX_GRADIENT_STOPS,
) -> List[GradientStop]:
    """
    Subsample segment colors into at most `max_stops` gradient stops.

    The first stop sits at location 0.0 and the last at 1.0 so the gradient
    spans the whole track.
    """
    if not segments:
        return []
    if max_stops < 2:
        raise ValueError(f"max_stops must be at least 2 (got {max_stops})")

    step = max(1, math.ceil(len(segments) / (max_stops - 1)))
    start_m = segments[0].start_distance_m
    span_m = segments[-1].end_distance_m - start_m

    stops = []
    for segment in segments[::step]:
        location = (segment.start_distance_m - start_m) / span_m if span_m > 0 else 0.0
        stops.append(GradientStop(location, segment_color(segment, thresholds)))

    stops.append(GradientStop(1.0, segment_color(segments[-1], thresholds)))
    return stops
