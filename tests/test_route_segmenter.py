"""
Tests for Route Segmenter

Tests for fixed-length segmentation, pace thresholds and color mapping.
"""

from datetime import datetime, timedelta, timezone

import pytest

from runrun_worker.analysis.models import RouteSample, RouteSegment
from runrun_worker.analysis.route_segmenter import (
    calculate_pace_thresholds,
    gradient_stops,
    NEUTRAL_HUE,
    pace_fraction,
    PaceThresholds,
    RouteSegmenter,
    segment_color,
)

T0 = datetime(2025, 3, 1, 7, 0, tzinfo=timezone.utc)


def segment_with_pace(index, pace):
    return RouteSegment(
        index=index,
        coordinates=((0.0, 0.0), (0.0, 0.0)),
        start_distance_m=index * 10.0,
        end_distance_m=(index + 1) * 10.0,
        start_time=T0,
        end_time=T0,
        elapsed_s=0.0,
        pace_per_km=pace,
    )


def covered_coordinates(segments):
    """Concatenate segment coordinates, dropping each shared boundary point"""
    result = list(segments[0].coordinates)
    for segment in segments[1:]:
        assert segment.coordinates[0] == result[-1]
        result.extend(segment.coordinates[1:])
    return result


class TestRouteSegmenter:
    def test_final_partial_segment_kept(self, scenario_c_track):
        """1050 m at 500 m segments gives 500, 500 and 50 m"""
        segments = RouteSegmenter(500).segment(scenario_c_track)

        assert len(segments) == 3
        assert segments[0].distance_m == pytest.approx(500)
        assert segments[1].distance_m == pytest.approx(500)
        assert segments[2].distance_m == pytest.approx(50)
        assert [s.index for s in segments] == [0, 1, 2]

    def test_coverage(self, scenario_c_track):
        segments = RouteSegmenter(500).segment(scenario_c_track)
        assert covered_coordinates(segments) == [s.coordinate for s in scenario_c_track]

    def test_coverage_with_short_segments(self, scenario_c_track):
        """Segments shorter than the sample spacing still cover the track"""
        segments = RouteSegmenter(10).segment(scenario_c_track)
        assert len(segments) == 105
        assert covered_coordinates(segments) == [s.coordinate for s in scenario_c_track]

    def test_pace_from_interpolated_time(self, scenario_c_track):
        # 43.75 m every 15 s
        segments = RouteSegmenter(500).segment(scenario_c_track)
        expected = 15 / 0.04375
        for segment in segments:
            assert segment.pace_per_km == pytest.approx(expected, rel=1e-6)
        assert segments[-1].end_time == scenario_c_track[-1].timestamp

    def test_times_are_contiguous(self, scenario_c_track):
        segments = RouteSegmenter(500).segment(scenario_c_track)
        for previous, current in zip(segments, segments[1:]):
            assert current.start_time == previous.end_time

    def test_too_few_samples(self, scenario_c_track):
        assert RouteSegmenter().segment([]) == []
        assert RouteSegmenter().segment(scenario_c_track[:1]) == []

    def test_stationary_track(self):
        samples = [RouteSample(T0 + timedelta(seconds=i), 35.0, 139.0) for i in range(3)]
        segments = RouteSegmenter().segment(samples)

        assert len(segments) == 1
        assert segments[0].pace_per_km is None
        assert len(segments[0].coordinates) == 3

    def test_duplicate_timestamps_have_no_pace(self, make_track):
        samples = make_track(100, 3, seconds_per_sample=0)
        segments = RouteSegmenter(50).segment(samples)
        assert all(s.pace_per_km is None for s in segments)

    @pytest.mark.parametrize("length", [0, -5])
    def test_invalid_length(self, length):
        with pytest.raises(ValueError):
            RouteSegmenter(length)


class TestPaceThresholds:
    def test_percentiles(self):
        segments = [segment_with_pace(i, 300 + i * 10) for i in range(11)]
        thresholds = calculate_pace_thresholds(segments)
        assert thresholds.fast == pytest.approx(310)
        assert thresholds.slow == pytest.approx(390)

    def test_monotonic_and_fractions_clamped(self):
        paces = [420, 250, 600, 310, None, 980, 300, 305]
        segments = [segment_with_pace(i, p) for i, p in enumerate(paces)]
        thresholds = calculate_pace_thresholds(segments)

        assert thresholds.fast <= thresholds.slow
        for segment in segments:
            fraction = pace_fraction(segment.pace_per_km, thresholds)
            if segment.pace_per_km is not None:
                assert 0.0 <= fraction <= 1.0

    def test_defaults_without_pace(self):
        thresholds = calculate_pace_thresholds([segment_with_pace(0, None)])
        assert (thresholds.fast, thresholds.slow) == (300.0, 600.0)

    def test_single_pace_has_no_range(self):
        thresholds = calculate_pace_thresholds([segment_with_pace(0, 330)])
        assert not thresholds.has_range
        assert pace_fraction(330, thresholds) is None


class TestSegmentColor:
    def test_fast_is_green_slow_is_red(self):
        thresholds = PaceThresholds(300, 600)
        assert segment_color(segment_with_pace(0, 250), thresholds).hue == pytest.approx(0.33)
        assert segment_color(segment_with_pace(0, 700), thresholds).hue == pytest.approx(0.0)
        assert segment_color(segment_with_pace(0, 450), thresholds).hue == pytest.approx(0.165)

    def test_undefined_pace_is_neutral(self):
        color = segment_color(segment_with_pace(0, None), PaceThresholds(300, 600))
        assert color.hue == NEUTRAL_HUE
        assert color.saturation == 0.85
        assert color.brightness == 0.9


class TestGradientStops:
    def test_capped_and_spanning(self, make_track):
        track = make_track(5000, 501, seconds_per_sample=3)
        segments = RouteSegmenter(10).segment(track)
        stops = gradient_stops(segments, calculate_pace_thresholds(segments))

        assert len(segments) == 500
        assert len(stops) <= 200
        assert stops[0].location == 0.0
        assert stops[-1].location == 1.0
        locations = [s.location for s in stops]
        assert locations == sorted(locations)

    def test_small_cap(self, scenario_c_track):
        segments = RouteSegmenter(10).segment(scenario_c_track)
        stops = gradient_stops(segments, calculate_pace_thresholds(segments), max_stops=2)
        assert [s.location for s in stops] == [0.0, 1.0]

    def test_no_segments(self):
        assert gradient_stops([], PaceThresholds(300, 600)) == []

    def test_invalid_cap(self):
        with pytest.raises(ValueError):
            gradient_stops([segment_with_pace(0, 300)], PaceThresholds(300, 600), max_stops=1)


class TestSegmentPath:
    """Segments shorter than the fix spacing still get a drawable path"""

    @pytest.fixture
    def sparse_track(self, make_track):
        # 30 m between fixes, 10 m segments
        return make_track(150, 6)

    def test_every_path_has_two_points(self, sparse_track):
        segments = RouteSegmenter(10).segment(sparse_track)

        assert len(segments) == 15
        assert min(len(s.coordinates) for s in segments) == 1
        assert all(len(s.path) >= 2 for s in segments)

    def test_paths_connect(self, sparse_track):
        segments = RouteSegmenter(10).segment(sparse_track)

        assert segments[0].path[0] == sparse_track[0].coordinate
        assert segments[-1].path[-1] == sparse_track[-1].coordinate
        for previous, current in zip(segments, segments[1:]):
            assert current.path[0] == previous.path[-1]

    def test_path_follows_boundaries(self, sparse_track):
        segment = RouteSegmenter(10).segment(sparse_track)[1]
        start_lat, end_lat = segment.path[0][0], segment.path[-1][0]

        assert start_lat == pytest.approx(sparse_track[1].latitude / 3)
        assert end_lat == pytest.approx(sparse_track[1].latitude * 2 / 3)

    def test_coordinates_still_cover_track(self, sparse_track):
        segments = RouteSegmenter(10).segment(sparse_track)
        assert covered_coordinates(segments) == [s.coordinate for s in sparse_track]

    def test_path_serialized(self, sparse_track):
        result = RouteSegmenter(10).segment(sparse_track)[0].to_dict()
        assert len(result["path"]) == 2
        assert len(result["coordinates"]) == 1
