"""
時間點查詢

作用：
- 依指定時間取得當下的每拍長度與流速（SV）
- 計算 slider 的結束時間
"""

import math
from dataclasses import dataclass
from typing import Sequence

from .model import TimingPoint

DEFAULT_BEAT_LENGTH = 60000 / 120  # 120 BPM
DEFAULT_SCROLL_VELOCITY = 1.0


@dataclass(frozen=True)
class TimingState:
    """某一時間點生效的時間資訊"""

    beat_length: float = DEFAULT_BEAT_LENGTH
    scroll_velocity: float = DEFAULT_SCROLL_VELOCITY


def resolve_timing(time: int, timing_points: Sequence[TimingPoint]) -> TimingState:
    """
    依檔案順序線性掃描時間點，遇到第一個晚於 time 的時間點即停止。

    - uninherited：更新每拍長度，流速重設為 1.0
    - inherited 且 beat_length 為負：流速 = -100 / beat_length
    - inherited 且 beat_length 非負：流速維持不變
    """
    beat_length = DEFAULT_BEAT_LENGTH
    scroll_velocity = DEFAULT_SCROLL_VELOCITY

    for point in timing_points:
        if point.time > time:
            break
        if point.uninherited:
            beat_length = point.beat_length
            scroll_velocity = 1.0
        elif point.beat_length < 0:
            scroll_velocity = -100 / point.beat_length

    return TimingState(beat_length=beat_length, scroll_velocity=scroll_velocity)


def slider_end_time(
    time: int,
    length: float,
    slides: int,
    slider_multiplier: float,
    timing_points: Sequence[TimingPoint],
) -> int:
    """slider 結束時間 = time + max(0, floor(length / (SM * 100 * SV) * beatLength * slides))"""
    timing = resolve_timing(time, timing_points)
    try:
        duration = (length / (slider_multiplier * 100 * timing.scroll_velocity)) * timing.beat_length * slides
    except ZeroDivisionError:
        return time
    if not math.isfinite(duration):
        return time
    return time + max(0, math.floor(duration))
