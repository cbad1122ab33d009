"""
完成度計算
"""

from typing import Iterable

from .model import HighlightKind, HighlightRange

MIN_TOTAL = 0.001


def compute_progress(ranges: Iterable[HighlightRange], ignore_start_and_breaks: bool = False) -> float:
    """
    由時間軸區段計算完成度（0 ~ 1）

    Args:
        ranges: 區段列表
        ignore_start_and_breaks: 為 True 時休息區段計入完成度，且不計第一個物件之前的前奏

    Returns:
        完成度比例
    """
    ranges = list(ranges)
    if not ranges:
        return 0.0

    object_ranges = [highlight for highlight in ranges if highlight.counts_as_object]
    populated = sum(highlight.length for highlight in object_ranges)

    if not ignore_start_and_breaks:
        return min(1.0, populated)

    first_start = min((highlight.start for highlight in object_ranges), default=0.0)
    populated += sum(highlight.length for highlight in ranges if highlight.kind is HighlightKind.BREAK)
    total = max(MIN_TOTAL, 1.0 - first_start)
    return min(1.0, populated / total)
