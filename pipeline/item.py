"""
譜面清單項目
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from core.beatmap.model import (
    UNKNOWN_ARTIST,
    UNKNOWN_CREATOR,
    UNKNOWN_SET_ID,
    UNKNOWN_TITLE,
    UNKNOWN_VERSION,
)
from core.highlight import HighlightRange, deserialize_highlights, serialize_highlights

_BASE36_DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


def _to_base36(value: int) -> str:
    if value == 0:
        return '0'
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return ''.join(reversed(digits))


def create_item_id(seed: Optional[str]) -> str:
    """由檔案路徑產生穩定的項目 id（32 位元字串雜湊）"""
    if not seed:
        return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"
    hash_value = 0
    for char in seed:
        hash_value = ((hash_value << 5) - hash_value + ord(char)) & 0xFFFFFFFF
    if hash_value >= 0x80000000:
        hash_value -= 0x100000000
    return 'id-' + _to_base36(abs(hash_value)) + _to_base36(len(seed))


@dataclass
class BeatmapItem:
    """清單中的單一譜面"""

    id: str = ''
    file_path: str = ''
    title: str = UNKNOWN_TITLE
    title_unicode: str = UNKNOWN_TITLE
    artist: str = UNKNOWN_ARTIST
    artist_unicode: str = UNKNOWN_ARTIST
    creator: str = UNKNOWN_CREATOR
    version: str = UNKNOWN_VERSION
    beatmap_set_id: str = UNKNOWN_SET_ID
    audio: str = ''  # 音訊檔名（相對於譜面資料夾）
    cover_path: str = ''  # 背景圖完整路徑
    duration_ms: Optional[float] = None  # 已量測的音訊長度
    preview_time: int = -1
    highlights: List[HighlightRange] = field(default_factory=list)
    progress: float = 0.0
    date_added: float = 0.0
    date_modified: float = 0.0
    deadline: Optional[float] = None
    target_star_rating: Optional[float] = None

    @property
    def display_name(self) -> str:
        return f"{self.artist} - {self.title} [{self.version}]"

    def to_dict(self) -> dict:
        """轉為可保存的字典（區段以精簡格式保存）"""
        return {
            'id': self.id,
            'filePath': self.file_path,
            'dateAdded': self.date_added,
            'dateModified': self.date_modified,
            'title': self.title,
            'titleUnicode': self.title_unicode,
            'artist': self.artist,
            'artistUnicode': self.artist_unicode,
            'creator': self.creator,
            'version': self.version,
            'beatmapSetID': self.beatmap_set_id,
            'audio': self.audio,
            'deadline': self.deadline if isinstance(self.deadline, (int, float)) else None,
            'targetStarRating': self.target_star_rating if isinstance(self.target_star_rating, (int, float)) else None,
            'durationMs': self.duration_ms if isinstance(self.duration_ms, (int, float)) else None,
            'previewTime': self.preview_time,
            'coverPath': self.cover_path,
            'highlights': serialize_highlights(self.highlights),
            'progress': self.progress,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'BeatmapItem':
        """由保存的字典還原"""
        file_path = data.get('filePath') or ''
        return cls(
            id=data.get('id') or create_item_id(file_path),
            file_path=file_path,
            title=data.get('title') or UNKNOWN_TITLE,
            title_unicode=data.get('titleUnicode') or data.get('title') or UNKNOWN_TITLE,
            artist=data.get('artist') or UNKNOWN_ARTIST,
            artist_unicode=data.get('artistUnicode') or data.get('artist') or UNKNOWN_ARTIST,
            creator=data.get('creator') or UNKNOWN_CREATOR,
            version=data.get('version') or UNKNOWN_VERSION,
            beatmap_set_id=data.get('beatmapSetID') or UNKNOWN_SET_ID,
            audio=data.get('audio') or '',
            cover_path=data.get('coverPath') or '',
            duration_ms=data.get('durationMs'),
            preview_time=data.get('previewTime', -1),
            highlights=deserialize_highlights(data.get('highlights') or []),
            progress=data.get('progress') or 0.0,
            date_added=data.get('dateAdded') or 0.0,
            date_modified=data.get('dateModified') or 0.0,
            deadline=data.get('deadline'),
            target_star_rating=data.get('targetStarRating'),
        )


def is_guest_difficulty(item: BeatmapItem, mapper_name: str) -> bool:
    """
    判斷是否為他人客串難度：
    作者名稱符合，但難度名稱帶有他人的所有格（xxx's）
    """
    mapper = (mapper_name or '').strip().lower()
    if not mapper:
        return False
    if mapper not in (item.creator or '').lower():
        return False
    version = (item.version or '').lower()
    if f"{mapper}'s" in version or f"{mapper}s'" in version:
        return False
    return "'s" in version or "s'" in version


def filter_items(items: Iterable[BeatmapItem], query: str) -> List[BeatmapItem]:
    """依關鍵字篩選（標題、藝人、作者、難度、set id）"""
    items = list(items)
    if not query:
        return items
    needle = query.lower()
    result = []
    for item in items:
        values = [
            item.title,
            item.title_unicode,
            item.artist,
            item.artist_unicode,
            item.creator,
            item.version,
            item.beatmap_set_id,
        ]
        if any(needle in str(value).lower() for value in values if value):
            result.append(item)
    return result


def sort_items(items: Iterable[BeatmapItem], mode: str = 'dateAdded', direction: str = 'desc') -> List[BeatmapItem]:
    """排序（dateAdded / dateModified / name / progress）"""
    reverse = direction != 'asc'
    if mode == 'dateModified':
        key = lambda item: item.date_modified or 0
    elif mode == 'name':
        key = lambda item: f"{item.artist} - {item.title}".lower()
    elif mode == 'progress':
        key = lambda item: item.progress or 0
    else:
        key = lambda item: item.date_added or 0
    return sorted(items, key=key, reverse=reverse)
