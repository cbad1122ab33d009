"""
Beatmap 模組公開介面
"""

from .model import BeatmapMetadata, BreakPeriod, HeaderInfo, HitObject, ParsedBeatmap, TimingPoint
from .parser import BeatmapParser, parse_beatmap
from .scanner import Section, identify_section, iter_lines
from .timing import TimingState, resolve_timing, slider_end_time

__all__ = [
    'BeatmapMetadata',
    'BreakPeriod',
    'HeaderInfo',
    'HitObject',
    'ParsedBeatmap',
    'TimingPoint',
    'BeatmapParser',
    'parse_beatmap',
    'Section',
    'identify_section',
    'iter_lines',
    'TimingState',
    'resolve_timing',
    'slider_end_time',
]
