"""
Personal Record Tracker

Finds the best-pace run for each standard race distance. Distance classes are
closed-open ranges in km, wide enough to absorb GPS error around the nominal
distance.
"""

from typing import Iterable, List, Optional, Sequence

from .highlights import select_min
from .models import DistanceClass, PersonalRecord, RunningRecord

DEFAULT_DISTANCE_CLASSES = (
    DistanceClass("5km", 4.8, 5.2),
    DistanceClass("10km", 9.5, 10.5),
    DistanceClass("Half", 20.5, 21.7),
    DistanceClass("Full", 41.5, 43.0),
)


class PersonalRecordTracker:
    """Classifies records into distance classes and keeps the fastest per class"""

    def __init__(self, distance_classes: Optional[Sequence[DistanceClass]] = None):
        """
        Args:
            distance_classes: Ordered, pairwise-disjoint classes
                (defaults to 5km, 10km, Half, Full)

        Raises:
            ValueError: If a class is empty or two classes overlap
        """
        classes = tuple(distance_classes or DEFAULT_DISTANCE_CLASSES)

        for cls in classes:
            if cls.min_km >= cls.max_km:
                raise ValueError(
                    f"Distance class {cls.name} has an empty range "
                    f"[{cls.min_km}, {cls.max_km})"
                )

        for i, first in enumerate(classes):
            for second in classes[i + 1 :]:
                if first.overlaps(second):
                    raise ValueError(
                        f"Distance classes {first.name} and {second.name} overlap"
                    )

        self.distance_classes = classes

    def classify(self, record: RunningRecord) -> Optional[DistanceClass]:
        for cls in self.distance_classes:
            if cls.contains(record.distance_km):
                return cls
        return None

    def find(self, records: Iterable[RunningRecord]) -> List[PersonalRecord]:
        """
        Best-pace record per class.

        Returns:
            One PersonalRecord per class in class order; `record` is None
            for classes with no qualifying run
        """
        by_class = {cls: [] for cls in self.distance_classes}
        for record in records:
            if record.pace_per_km is None:
                continue
            cls = self.classify(record)
            if cls is not None:
                by_class[cls].append(record)

        return [
            PersonalRecord(
                distance_class=cls,
                record=select_min(by_class[cls], lambda r: r.pace_per_km),
            )
            for cls in self.distance_classes
        ]


def find_personal_records(
    records: Iterable[RunningRecord],
    distance_classes: Optional[Sequence[DistanceClass]] = None,
) -> List[PersonalRecord]:
    """Convenience wrapper around PersonalRecordTracker.find"""
    return PersonalRecordTracker(distance_classes).find(records)
