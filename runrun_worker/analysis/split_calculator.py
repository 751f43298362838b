"""
Split Calculator

Derives per-kilometer (or per-mile) splits from a GPS track and overlays
heart-rate readings on each split's time window.
"""

from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .models import HeartRateSample, KilometerMarker, RouteSample, Split
from .route_track import TrackPosition


class SplitUnit(Enum):
    """Split distance unit"""

    KILOMETER = "km"
    MILE = "mile"

    @property
    def length_m(self) -> float:
        return 1000.0 if self is SplitUnit.KILOMETER else 1609.34

    @property
    def min_partial_m(self) -> float:
        """Shortest trailing remainder reported as a partial split"""
        return 100.0 if self is SplitUnit.KILOMETER else 160.0


def heart_rate_stats(
    samples: Sequence[HeartRateSample], start: datetime, end: datetime
) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    """
    Average, max and min bpm of readings with start <= timestamp < end.

    Returns (None, None, None) when no reading falls in the window.
    """
    bpms = [s.bpm for s in samples if start <= s.timestamp < end]
    if not bpms:
        return None, None, None
    return sum(bpms) / len(bpms), max(bpms), min(bpms)


class SplitCalculator:
    """Calculates whole-unit splits along a track"""

    # Float slack when deciding whether the track reached a split boundary
    DISTANCE_EPSILON_M = 1e-6

    def __init__(
        self, unit: SplitUnit = SplitUnit.KILOMETER, include_partial: bool = False
    ):
        """
        Args:
            unit: Kilometer or mile splits
            include_partial: Also report the trailing partial split when it
                is longer than the unit's minimum fraction
        """
        self.unit = unit
        self.include_partial = include_partial

    def _whole_splits(self, total_m: float) -> int:
        return int((total_m + self.DISTANCE_EPSILON_M) // self.unit.length_m)

    def calculate_splits(self, samples: Sequence[RouteSample]) -> List[Split]:
        """
        Close a split each time the track crosses a multiple of the split
        length. Boundary times are interpolated between the surrounding fixes.

        Args:
            samples: Time-ordered samples with accumulated distance

        Returns:
            Splits numbered from 1; the trailing partial split is only
            included when include_partial is set
        """
        if len(samples) < 2:
            return []

        track = TrackPosition(samples)
        total_m = track.total_distance_m
        length_m = self.unit.length_m
        whole = self._whole_splits(total_m)

        splits: List[Split] = []
        start_time = samples[0].timestamp
        for index in range(1, whole + 1):
            end_time = track.time_at(index * length_m)
            splits.append(
                Split(
                    index=index,
                    distance_m=length_m,
                    duration_s=(end_time - start_time).total_seconds(),
                    start_time=start_time,
                    end_time=end_time,
                )
            )
            start_time = end_time

        remainder_m = total_m - whole * length_m
        if self.include_partial and remainder_m > self.unit.min_partial_m:
            end_time = samples[-1].timestamp
            splits.append(
                Split(
                    index=whole + 1,
                    distance_m=remainder_m,
                    duration_s=(end_time - start_time).total_seconds(),
                    start_time=start_time,
                    end_time=end_time,
                    is_partial=True,
                )
            )

        return splits

    @staticmethod
    def enrich_with_heart_rate(
        splits: Sequence[Split], heart_rate_samples: Sequence[HeartRateSample]
    ) -> List[Split]:
        """Attach average/max/min heart rate of each split's time window"""
        enriched = []
        for split in splits:
            avg, max_bpm, min_bpm = heart_rate_stats(
                heart_rate_samples, split.start_time, split.end_time
            )
            enriched.append(
                replace(
                    split,
                    average_heart_rate=avg,
                    max_heart_rate=max_bpm,
                    min_heart_rate=min_bpm,
                )
            )
        return enriched

    def kilometer_markers(self, samples: Sequence[RouteSample]) -> List[KilometerMarker]:
        """Interpolated positions where each whole split ends"""
        if len(samples) < 2:
            return []

        track = TrackPosition(samples)
        markers = []
        for index in range(1, self._whole_splits(track.total_distance_m) + 1):
            lat, lon = track.coordinate_at(index * self.unit.length_m)
            markers.append(KilometerMarker(index=index, latitude=lat, longitude=lon))
        return markers


def calculate_splits(
    samples: Sequence[RouteSample],
    heart_rate_samples: Optional[Sequence[HeartRateSample]] = None,
    unit: SplitUnit = SplitUnit.KILOMETER,
    include_partial: bool = False,
) -> List[Split]:
    """Convenience function: splits for a track, enriched when readings are given"""
    calculator = SplitCalculator(unit=unit, include_partial=include_partial)
    splits = calculator.calculate_splits(samples)
    if heart_rate_samples:
        splits = calculator.enrich_with_heart_rate(splits, heart_rate_samples)
    return splits
