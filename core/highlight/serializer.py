"""
區段序列化

格式：[start, end, kind]，start / end 取小數 4 位，kind 為 'o' / 'b' / 'k'
"""

import logging
from typing import Iterable, List, Sequence

from .model import HighlightKind, HighlightRange

logger = logging.getLogger(__name__)

KIND_TO_CODE = {
    HighlightKind.OBJECT: 'o',
    HighlightKind.BREAK: 'b',
    HighlightKind.BOOKMARK: 'k',
}
CODE_TO_KIND = {code: kind for kind, code in KIND_TO_CODE.items()}


def serialize_highlights(ranges: Iterable[HighlightRange]) -> List[list]:
    """將區段轉為可 JSON 化的列表"""
    return [
        [round(highlight.start, 4), round(highlight.end, 4), KIND_TO_CODE.get(highlight.kind, 'o')]
        for highlight in ranges
    ]


def deserialize_highlights(rows: Iterable[Sequence]) -> List[HighlightRange]:
    """由列表還原區段（未知的 kind 代碼視為物件）"""
    ranges = []
    for row in rows or []:
        try:
            start = float(row[0])
            end = float(row[1])
        except (TypeError, ValueError, IndexError):
            logger.warning(f"Skipping malformed highlight row: {row!r}")
            continue

        code = row[2] if len(row) > 2 else 'o'
        kind = CODE_TO_KIND.get(code)
        if kind is None:
            logger.debug(f"Unknown highlight kind {code!r}, treating as object")
            kind = HighlightKind.OBJECT
        ranges.append(HighlightRange(start, end, kind))
    return ranges
