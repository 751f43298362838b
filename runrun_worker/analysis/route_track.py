"""
Route Track Utilities

Builds distance-annotated GPS tracks for the segment and split calculators:
- Great-circle (haversine) distance between fixes
- Accumulated distance along an ordered list of fixes
- Interpolated time/position at an arbitrary distance along the track
- GPX import of route fixes and heart-rate extension readings
"""

import bisect
import logging
import math
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

import gpxpy

from .models import HeartRateSample, RouteSample

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6371000


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate great-circle distance in meters"""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.asin(min(1.0, math.sqrt(a)))

    return EARTH_RADIUS_M * c


def build_route_samples(
    fixes: Iterable[Tuple[datetime, float, float]]
) -> List[RouteSample]:
    """
    Annotate time-ordered fixes with accumulated distance.

    Args:
        fixes: (timestamp, latitude, longitude) tuples in time order

    Returns:
        List of RouteSample, the first at distance 0
    """
    samples: List[RouteSample] = []
    cumulative_distance = 0.0
    prev = None

    for timestamp, lat, lon in fixes:
        if prev is not None:
            cumulative_distance += haversine_distance(prev[0], prev[1], lat, lon)

        samples.append(
            RouteSample(
                timestamp=timestamp,
                latitude=lat,
                longitude=lon,
                distance_m=cumulative_distance,
            )
        )
        prev = (lat, lon)

    return samples


class TrackPosition:
    """Interpolates time and position along a distance-annotated track"""

    def __init__(self, samples: Sequence[RouteSample]):
        if not samples:
            raise ValueError("Cannot interpolate along an empty track")
        self.samples = samples
        self._distances = [s.distance_m for s in samples]

    @property
    def total_distance_m(self) -> float:
        return self._distances[-1]

    def _bracket(self, distance_m: float) -> Tuple[int, int, float]:
        """Return (before, after, ratio) indices surrounding distance_m"""
        idx = bisect.bisect_left(self._distances, distance_m)
        if idx <= 0:
            return 0, 0, 0.0
        if idx >= len(self._distances):
            last = len(self._distances) - 1
            return last, last, 0.0

        before, after = idx - 1, idx
        span = self._distances[after] - self._distances[before]
        if self._distances[after] == distance_m or span <= 0:
            return after, after, 0.0
        return before, after, (distance_m - self._distances[before]) / span

    def time_at(self, distance_m: float) -> datetime:
        before, after, ratio = self._bracket(distance_m)
        start = self.samples[before].timestamp
        if before == after:
            return start
        delta = (self.samples[after].timestamp - start).total_seconds()
        return start + timedelta(seconds=delta * ratio)

    def coordinate_at(self, distance_m: float) -> Tuple[float, float]:
        before, after, ratio = self._bracket(distance_m)
        a = self.samples[before]
        b = self.samples[after]
        return (
            a.latitude + (b.latitude - a.latitude) * ratio,
            a.longitude + (b.longitude - a.longitude) * ratio,
        )


def parse_gpx_route(gpx_content: str) -> List[RouteSample]:
    """
    Extract a distance-annotated route from GPX content.

    Points without a timestamp cannot contribute to pace and are skipped.

    Args:
        gpx_content: Raw GPX file content

    Returns:
        List of RouteSample in file order
    """
    gpx = gpxpy.parse(gpx_content)

    fixes = []
    skipped = 0
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                if point.time is None:
                    skipped += 1
                    continue
                fixes.append((point.time, point.latitude, point.longitude))

    if skipped:
        logger.debug(f"Skipped {skipped} GPX points without timestamps")

    return build_route_samples(fixes)


def _extension_heart_rate(point) -> Optional[float]:
    """Read a Garmin TrackPointExtension hr value from a GPX point"""
    for extension in point.extensions:
        for element in extension.iter():
            tag = element.tag.split("}")[-1] if isinstance(element.tag, str) else ""
            if tag == "hr" and element.text:
                try:
                    return float(element.text)
                except ValueError:
                    logger.debug(f"Ignoring non-numeric heart rate {element.text!r}")
    return None


def parse_gpx_heart_rate(gpx_content: str) -> List[HeartRateSample]:
    """
    Extract heart-rate readings stored as GPX track point extensions.

    Args:
        gpx_content: Raw GPX file content

    Returns:
        List of HeartRateSample with elapsed seconds from the first timed point
    """
    gpx = gpxpy.parse(gpx_content)

    samples: List[HeartRateSample] = []
    start_time = None
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                if point.time is None:
                    continue
                if start_time is None:
                    start_time = point.time

                bpm = _extension_heart_rate(point)
                if bpm is None:
                    continue

                samples.append(
                    HeartRateSample(
                        timestamp=point.time,
                        bpm=bpm,
                        elapsed_s=(point.time - start_time).total_seconds(),
                    )
                )

    return samples
