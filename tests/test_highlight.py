import pytest

from core.beatmap import BreakPeriod
from core.highlight import (
    HighlightKind,
    HighlightRange,
    build_bookmark_ranges,
    build_break_ranges,
    build_highlights,
    build_object_ranges,
    render_order,
)


class TestObjectRanges:
    def test_bins_and_merges_runs(self):
        ranges = build_object_ranges([0, 100, 5000], [500, 100, 5000], 10000)
        assert ranges == [
            HighlightRange(0.0, 7 / 120, HighlightKind.OBJECT),
            HighlightRange(0.5, 61 / 120, HighlightKind.OBJECT),
        ]

    def test_trailing_run_ends_at_one(self):
        ranges = build_object_ranges([9990], [10000], 10000)
        assert ranges == [HighlightRange(119 / 120, 1.0, HighlightKind.OBJECT)]

    def test_objects_past_duration_skipped(self):
        assert build_object_ranges([20000], [21000], 10000) == []

    def test_end_past_duration_clamped_to_last_bin(self):
        ranges = build_object_ranges([5000], [50000], 10000)
        assert ranges == [HighlightRange(0.5, 1.0, HighlightKind.OBJECT)]

    @pytest.mark.parametrize('duration', [0, None, -5, float('inf')])
    def test_no_duration(self, duration):
        assert build_object_ranges([0], [100], duration) == []

    def test_no_objects(self):
        assert build_object_ranges([], [], 10000) == []


class TestBreakRanges:
    def test_fractions(self):
        ranges = build_break_ranges([BreakPeriod(2000, 4000)], 10000)
        assert ranges == [HighlightRange(0.2, 0.4, HighlightKind.BREAK)]

    def test_clamped_to_track(self):
        ranges = build_break_ranges([BreakPeriod(8000, 14000), BreakPeriod(12000, 13000)], 10000)
        assert ranges == [HighlightRange(0.8, 1.0, HighlightKind.BREAK)]


class TestBookmarkRanges:
    def test_widened_per_bin(self):
        ranges = build_bookmark_ranges([0, 120, 9999], 10000)
        assert [highlight.kind for highlight in ranges] == [HighlightKind.BOOKMARK] * 3
        assert [highlight.start for highlight in ranges] == pytest.approx([0.0, 0.01, 0.995])
        assert [highlight.end for highlight in ranges] == pytest.approx([0.006, 0.016, 1.0])
        assert all(highlight.end <= 1.0 for highlight in ranges)

    def test_same_bin_deduplicated(self):
        assert len(build_bookmark_ranges([100, 101, 102], 10000)) == 1

    def test_negative_bookmarks_ignored(self):
        assert build_bookmark_ranges([-500], 10000) == []


def test_storage_order_and_render_order():
    ranges = build_highlights([1000], [2000], [BreakPeriod(3000, 4000)], [1500], 10000)
    assert [highlight.kind for highlight in ranges] == [
        HighlightKind.BREAK,
        HighlightKind.OBJECT,
        HighlightKind.BOOKMARK,
    ]
    ordered = render_order([ranges[2], ranges[1], ranges[0]])
    assert ordered[-1].kind is HighlightKind.BOOKMARK
    assert ordered[0].kind is HighlightKind.BREAK


def test_all_ranges_within_unit_interval(parser, sample_content):
    parsed = parser.parse_string(sample_content)
    ranges = build_highlights(
        parsed.hit_starts, parsed.hit_ends, parsed.break_periods, parsed.bookmarks, parsed.content_duration()
    )
    assert ranges
    for highlight in ranges:
        assert 0 <= highlight.start < highlight.end <= 1
