"""
時間軸區段產生器

作用：
- 物件區間 → 固定 120 格，連續格合併為區段
- 休息區段 → 直接換算比例
- 書籤 → 固定 200 格，每格各自成為略為加寬的區段
"""

import math
from typing import Iterable, List, Optional, Sequence

import numpy as np

from config import BOOKMARK_BINS, BOOKMARK_WIDTH, OBJECT_BINS
from core.beatmap.model import BreakPeriod

from .model import HighlightKind, HighlightRange

_RENDER_PRIORITY = {
    HighlightKind.BREAK: 0,
    HighlightKind.OBJECT: 1,
    None: 1,
    HighlightKind.BOOKMARK: 2,
}


def _has_duration(duration_ms: Optional[float]) -> bool:
    return bool(duration_ms) and duration_ms > 0 and math.isfinite(duration_ms)


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def build_object_ranges(
    starts: Sequence[int],
    ends: Sequence[int],
    duration_ms: Optional[float],
    bins: int = OBJECT_BINS,
) -> List[HighlightRange]:
    """將物件區間分格標記後，合併連續格為區段"""
    if not len(starts) or not _has_duration(duration_ms):
        return []

    flags = np.zeros(bins, dtype=bool)
    for index, start in enumerate(starts):
        end = ends[index] if index < len(ends) else start
        if start < 0 or start > duration_ms:
            continue
        start_idx = min(bins - 1, math.floor(start / duration_ms * bins))
        end_idx = min(bins - 1, math.floor(max(start, end) / duration_ms * bins))
        flags[start_idx:end_idx + 1] = True

    ranges = []
    run_start = None
    for index in range(bins):
        if flags[index]:
            if run_start is None:
                run_start = index
        elif run_start is not None:
            ranges.append(HighlightRange(run_start / bins, index / bins, HighlightKind.OBJECT))
            run_start = None
    if run_start is not None:
        ranges.append(HighlightRange(run_start / bins, 1.0, HighlightKind.OBJECT))

    return ranges


def build_break_ranges(
    break_periods: Iterable[BreakPeriod],
    duration_ms: Optional[float],
) -> List[HighlightRange]:
    """休息區段換算為比例（空區段或反向區段捨棄）"""
    if not _has_duration(duration_ms):
        return []

    ranges = []
    for period in break_periods:
        start = _clamp(period.start / duration_ms)
        end = _clamp(period.end / duration_ms)
        if end > start:
            ranges.append(HighlightRange(start, end, HighlightKind.BREAK))
    return ranges


def build_bookmark_ranges(
    bookmarks: Sequence[int],
    duration_ms: Optional[float],
    bins: int = BOOKMARK_BINS,
) -> List[HighlightRange]:
    """每個書籤所在的格子各自輸出一個加寬的區段（相鄰格不合併）"""
    if not len(bookmarks) or not _has_duration(duration_ms):
        return []

    flags = np.zeros(bins, dtype=bool)
    for time in bookmarks:
        index = min(bins - 1, math.floor(time / duration_ms * bins))
        if index >= 0:
            flags[index] = True

    return [
        HighlightRange(index / bins, min(1.0, (index + BOOKMARK_WIDTH) / bins), HighlightKind.BOOKMARK)
        for index in np.flatnonzero(flags).tolist()
    ]


def build_highlights(
    starts: Sequence[int],
    ends: Sequence[int],
    break_periods: Iterable[BreakPeriod],
    bookmarks: Sequence[int],
    duration_ms: Optional[float],
) -> List[HighlightRange]:
    """產生完整區段列表（儲存順序：休息、物件、書籤）"""
    return (
        build_break_ranges(break_periods, duration_ms)
        + build_object_ranges(starts, ends, duration_ms)
        + build_bookmark_ranges(bookmarks, duration_ms)
    )


def render_order(ranges: Iterable[HighlightRange]) -> List[HighlightRange]:
    """繪製順序：書籤最後畫（疊在最上層）"""
    return sorted(ranges, key=lambda highlight: _RENDER_PRIORITY.get(highlight.kind, 1))
