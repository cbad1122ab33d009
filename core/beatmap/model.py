"""
Beatmap 資料結構定義

作用：
- 定義 .osu 解析結果的核心資料結構
- 提供內容推算的總長度（尚未量測音訊時使用）
"""

from dataclasses import dataclass, field
from typing import List

UNKNOWN_TITLE = 'Unknown Title'
UNKNOWN_ARTIST = 'Unknown Artist'
UNKNOWN_CREATOR = 'Unknown Creator'
UNKNOWN_VERSION = 'Unknown Version'
UNKNOWN_SET_ID = 'Unknown'

SLIDER = 2
SPINNER = 8
MANIA_HOLD = 128


@dataclass(frozen=True)
class BeatmapMetadata:
    """譜面元資訊（解析後不可變）"""

    title: str = UNKNOWN_TITLE
    title_unicode: str = UNKNOWN_TITLE
    artist: str = UNKNOWN_ARTIST
    artist_unicode: str = UNKNOWN_ARTIST
    creator: str = UNKNOWN_CREATOR
    version: str = UNKNOWN_VERSION
    audio: str = ''  # 音訊檔名
    background: str = ''  # 背景圖檔名
    beatmap_set_id: str = UNKNOWN_SET_ID  # 網址或原始文字
    preview_time: int = -1  # 預覽時間（毫秒），-1 表示未設定

    @property
    def is_uploaded(self) -> bool:
        """beatmap set id 是否已轉為網址"""
        return self.beatmap_set_id.startswith('http')


@dataclass(frozen=True)
class TimingPoint:
    """時間點（BPM / 流速變化）"""

    time: int  # 毫秒
    beat_length: float  # 正值為每拍毫秒數，負值為 -100/流速
    uninherited: bool = True


@dataclass(frozen=True)
class HitObject:
    """單一物件的時間區間"""

    start: int
    end: int
    type: int = 1

    @property
    def is_slider(self) -> bool:
        return (self.type & SLIDER) != 0

    @property
    def is_spinner(self) -> bool:
        return (self.type & SPINNER) != 0

    @property
    def is_hold(self) -> bool:
        return (self.type & MANIA_HOLD) != 0


@dataclass(frozen=True)
class BreakPeriod:
    """休息區段"""

    start: int
    end: int


@dataclass(frozen=True)
class HeaderInfo:
    """只讀檔頭時取得的作者與難度名稱"""

    creator: str = ''
    version: str = ''

    def matches(self, needle: str) -> bool:
        """作者或難度名稱包含 needle（不分大小寫）"""
        needle = needle.lower()
        return needle in self.creator.lower() or needle in self.version.lower()


@dataclass
class ParsedBeatmap:
    """單一 .osu 的解析結果"""

    metadata: BeatmapMetadata = field(default_factory=BeatmapMetadata)
    hit_starts: List[int] = field(default_factory=list)  # 依檔案順序
    hit_ends: List[int] = field(default_factory=list)  # 與 hit_starts 平行
    break_periods: List[BreakPeriod] = field(default_factory=list)
    bookmarks: List[int] = field(default_factory=list)
    timing_points: List[TimingPoint] = field(default_factory=list)
    slider_multiplier: float = 1.0

    def content_duration(self, tail_ms: int = 1000) -> int:
        """由內容推算總長度：最後的物件、休息或書籤時間再加上 tail_ms"""
        latest = max(
            max(self.hit_ends, default=0),
            max((period.end for period in self.break_periods), default=0),
            max(self.bookmarks, default=0),
        )
        if latest <= 0:
            return 0
        return latest + tail_ms
