"""
.osu 行掃描器

作用：
- 單次掃描全文，逐行切出內容（支援 \\n、\\r\\n、\\r）
- 略過開頭的 BOM
- 辨識區段標頭（[General]、[HitObjects] ...）
"""

import re
from enum import Enum
from typing import Iterator

BOM = '\ufeff'
TRIM_CHARS = ' \t'

_NEWLINE_PATTERN = re.compile(r'\r\n|\r|\n')


class Section(Enum):
    """.osu 區段"""

    NONE = 'none'
    GENERAL = 'general'
    EDITOR = 'editor'
    METADATA = 'metadata'
    DIFFICULTY = 'difficulty'
    EVENTS = 'events'
    TIMING_POINTS = 'timingpoints'
    COLOURS = 'colours'
    HIT_OBJECTS = 'hitobjects'


_SECTIONS_BY_NAME = {section.value: section for section in Section if section is not Section.NONE}


def identify_section(name: str) -> Section:
    """由標頭名稱取得區段（不分大小寫，未知名稱回傳 NONE）"""
    return _SECTIONS_BY_NAME.get(name.lower(), Section.NONE)


def section_header_name(line: str):
    """若為 [name] 形式的標頭則回傳 name，否則回傳 None"""
    if len(line) >= 2 and line[0] == '[' and line[-1] == ']':
        return line[1:-1]
    return None


def iter_lines(content: str) -> Iterator[str]:
    """逐行產生去除前後空白與 tab 的內容（不建立整份行列表）"""
    position = 1 if content.startswith(BOM) else 0
    for match in _NEWLINE_PATTERN.finditer(content, position):
        yield content[position:match.start()].strip(TRIM_CHARS)
        position = match.end()
    if position < len(content):
        yield content[position:].strip(TRIM_CHARS)


def iter_content_lines(content: str) -> Iterator[str]:
    """只產生有內容的行（略過空行與 // 註解）"""
    for line in iter_lines(content):
        if not line or line.startswith('//'):
            continue
        yield line
