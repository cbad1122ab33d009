"""
.osu 解析器

作用：
- 單次掃描解析 .osu 內容
- 取得元資訊、物件區間、休息區段與書籤
- 提供只讀檔頭的輕量解析（作者 / 難度名稱）
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from config import BEATMAP_ENCODING, BEATMAPSET_URL, HEADER_READ_SIZE

from .model import (
    UNKNOWN_ARTIST,
    UNKNOWN_CREATOR,
    UNKNOWN_SET_ID,
    UNKNOWN_TITLE,
    UNKNOWN_VERSION,
    BeatmapMetadata,
    BreakPeriod,
    HeaderInfo,
    HitObject,
    ParsedBeatmap,
    TimingPoint,
)
from .numeric import parse_float, parse_int
from .scanner import BOM, TRIM_CHARS, Section, identify_section, iter_content_lines, section_header_name
from .timing import slider_end_time

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'bmp', 'webp')

_METADATA_KEYS = {
    'title': 'title',
    'titleunicode': 'title_unicode',
    'artist': 'artist',
    'artistunicode': 'artist_unicode',
    'creator': 'creator',
    'version': 'version',
}


@dataclass
class _ParseContext:
    """單次解析的暫存狀態"""

    fields: Dict[str, str] = field(default_factory=dict)  # 原始元資訊
    preview_time: int = -1
    slider_multiplier: float = 1.0
    timing_points: List[TimingPoint] = field(default_factory=list)
    hit_starts: List[int] = field(default_factory=list)
    hit_ends: List[int] = field(default_factory=list)
    previous_was_slider: bool = False
    break_periods: List[BreakPeriod] = field(default_factory=list)
    bookmarks: List[int] = field(default_factory=list)


def split_key_value(line: str):
    """以第一個冒號切分 key / value，key 轉小寫"""
    key, separator, value = line.partition(':')
    if not separator:
        return None, ''
    return key.strip(TRIM_CHARS).lower(), value.strip(TRIM_CHARS)


def is_image_filename(filename: str) -> bool:
    """判斷是否為圖片檔（排除影片背景）"""
    _, dot, extension = filename.rpartition('.')
    return bool(dot) and extension.lower() in IMAGE_EXTENSIONS


def beatmapset_link(raw_value: str) -> str:
    """數字 id > 0 轉為網址，其餘保留原文"""
    set_id = parse_int(raw_value)
    if set_id is not None and set_id > 0:
        return BEATMAPSET_URL.format(set_id)
    return raw_value


class BeatmapParser:
    """.osu 解析器（無狀態，可在多執行緒 / 多行程中共用）"""

    def __init__(self):
        # 區段 → 單行處理函式
        self._handlers: Dict[Section, Callable[[str, _ParseContext], None]] = {
            Section.GENERAL: self._parse_general_line,
            Section.EDITOR: self._parse_editor_line,
            Section.METADATA: self._parse_metadata_line,
            Section.DIFFICULTY: self._parse_difficulty_line,
            Section.EVENTS: self._parse_event_line,
            Section.TIMING_POINTS: self._parse_timing_point_line,
            Section.HIT_OBJECTS: self._parse_hit_object_line,
        }

    def parse_file(self, file_path: str) -> ParsedBeatmap:
        """讀取並解析 .osu 檔案"""
        with open(file_path, 'rb') as file_handle:
            return self.parse_bytes(file_handle.read())

    def parse_bytes(self, data: bytes) -> ParsedBeatmap:
        """解析 UTF-8 位元組內容（可帶 BOM）"""
        return self.parse_string(data.decode(BEATMAP_ENCODING, errors='replace'))

    def parse_string(self, content: str) -> ParsedBeatmap:
        """解析 .osu 字串內容"""
        context = _ParseContext()
        section = Section.NONE

        for line in iter_content_lines(content):
            header = section_header_name(line)
            if header is not None:
                section = identify_section(header)
                continue

            handler = self._handlers.get(section)
            if handler:
                handler(line, context)

        return ParsedBeatmap(
            metadata=self._build_metadata(context),
            hit_starts=context.hit_starts,
            hit_ends=context.hit_ends,
            break_periods=context.break_periods,
            bookmarks=context.bookmarks,
            timing_points=context.timing_points,
            slider_multiplier=context.slider_multiplier,
        )

    def parse_header(self, content: str) -> HeaderInfo:
        """只取作者與難度名稱（兩者皆取得即停止）"""
        creator = ''
        version = ''
        section = Section.NONE

        for line in iter_content_lines(content):
            header = section_header_name(line)
            if header is not None:
                section = identify_section(header)
                continue
            if section is not Section.METADATA:
                continue

            key, value = split_key_value(line)
            if key == 'creator':
                creator = value
            elif key == 'version':
                version = value

            if creator and version:
                break

        return HeaderInfo(creator=creator, version=version)

    def read_header(self, file_path: str, size: int = HEADER_READ_SIZE) -> str:
        """只讀取檔案開頭的部分內容"""
        with open(file_path, 'rb') as file_handle:
            data = file_handle.read(size)
        # 截斷處可能切到多位元組字元
        content = data.decode('utf-8', errors='ignore')
        if content.startswith(BOM):
            content = content[1:]
        return content

    def _build_metadata(self, context: _ParseContext) -> BeatmapMetadata:
        """補齊預設值並建立元資訊"""
        fields = context.fields
        title = fields.get('title') or UNKNOWN_TITLE
        artist = fields.get('artist') or UNKNOWN_ARTIST
        raw_set_id = fields.get('beatmap_set_id')
        return BeatmapMetadata(
            title=title,
            title_unicode=fields.get('title_unicode') or title,
            artist=artist,
            artist_unicode=fields.get('artist_unicode') or artist,
            creator=fields.get('creator') or UNKNOWN_CREATOR,
            version=fields.get('version') or UNKNOWN_VERSION,
            audio=fields.get('audio', ''),
            background=fields.get('background', ''),
            beatmap_set_id=beatmapset_link(raw_set_id) if raw_set_id else UNKNOWN_SET_ID,
            preview_time=context.preview_time,
        )

    def _parse_metadata_line(self, line: str, context: _ParseContext):
        """[Metadata]：title / artist / creator / version / beatmapsetid"""
        key, value = split_key_value(line)
        if key in _METADATA_KEYS:
            context.fields[_METADATA_KEYS[key]] = value
        elif key == 'beatmapsetid':
            context.fields['beatmap_set_id'] = value

    def _parse_general_line(self, line: str, context: _ParseContext):
        """[General]：音訊檔名與預覽時間"""
        key, value = split_key_value(line)
        if key == 'audiofilename':
            context.fields['audio'] = value
        elif key == 'previewtime':
            preview_time = parse_int(value)
            if preview_time is not None:
                context.preview_time = preview_time

    def _parse_event_line(self, line: str, context: _ParseContext):
        """[Events]：背景圖（0,0,"bg.jpg"）與休息區段（2,start,end）"""
        parts = line.split(',')
        if len(parts) < 3:
            return

        event_type = parts[0].strip(TRIM_CHARS)
        if event_type == '0':
            background = parts[2].strip(' \t"')
            if is_image_filename(background):
                context.fields['background'] = background
        elif event_type == '2' or event_type.lower() == 'break':
            start = parse_int(parts[1])
            end = parse_int(parts[2])
            if start is not None and end is not None and end > start:
                context.break_periods.append(BreakPeriod(start=start, end=end))

    def _parse_editor_line(self, line: str, context: _ParseContext):
        """[Editor]：書籤列表（多行 Bookmarks 依序累加）"""
        key, value = split_key_value(line)
        if key != 'bookmarks':
            return
        for token in value.split(','):
            bookmark = parse_int(token)
            if bookmark is not None:
                context.bookmarks.append(bookmark)

    def _parse_difficulty_line(self, line: str, context: _ParseContext):
        """[Difficulty]：SliderMultiplier"""
        key, value = split_key_value(line)
        if key == 'slidermultiplier':
            context.slider_multiplier = parse_float(value) or 1.0

    def _parse_timing_point_line(self, line: str, context: _ParseContext):
        """
        [TimingPoints]
        格式：time,beatLength,meter,sampleSet,sampleIndex,volume,uninherited,effects
        舊版檔案沒有 uninherited 欄位，視為 uninherited
        """
        parts = line.split(',')
        if len(parts) < 2:
            return
        time = parse_int(parts[0])
        beat_length = parse_float(parts[1])
        if time is None or beat_length is None:
            return
        uninherited = parts[6].strip(TRIM_CHARS) == '1' if len(parts) > 6 else True
        context.timing_points.append(TimingPoint(time=time, beat_length=beat_length, uninherited=uninherited))

    def _parse_hit_object_line(self, line: str, context: _ParseContext):
        """
        [HitObjects]
        格式：x,y,time,type,hitSound,objectParams...
        """
        parts = line.split(',')
        if len(parts) < 4:
            return
        time = parse_int(parts[2])
        object_type = parse_int(parts[3])
        if time is None or object_type is None:
            return

        hit_object = HitObject(start=time, end=time, type=object_type)
        end_time = self._object_end_time(parts, hit_object, context)

        # 前一個物件為 slider 時，延伸到目前物件的開始時間
        if context.previous_was_slider:
            context.hit_ends[-1] = max(context.hit_ends[-1], time)

        context.hit_starts.append(time)
        context.hit_ends.append(max(time, end_time))
        context.previous_was_slider = hit_object.is_slider

    def _object_end_time(self, parts: List[str], hit_object: HitObject, context: _ParseContext) -> int:
        """依物件類型計算結束時間（slider → spinner → 長押，先符合者優先）"""
        time = hit_object.start
        if hit_object.is_slider:
            if len(parts) < 8:
                return time
            slides = parse_int(parts[6]) or 1
            length = parse_float(parts[7]) or 0.0
            return slider_end_time(time, length, slides, context.slider_multiplier, context.timing_points)

        if hit_object.is_spinner:
            if len(parts) < 6:
                return time
            return parse_int(parts[5]) or time

        if hit_object.is_hold:
            if len(parts) < 6:
                return time
            return parse_int(parts[5].split(':')[0]) or time

        return time


def parse_beatmap(content: str, parser: Optional[BeatmapParser] = None) -> ParsedBeatmap:
    """便利函式：解析 .osu 字串"""
    return (parser or BeatmapParser()).parse_string(content)
