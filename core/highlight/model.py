"""
時間軸標示區段
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class HighlightKind(str, Enum):
    """區段來源"""

    OBJECT = 'object'
    BREAK = 'break'
    BOOKMARK = 'bookmark'


@dataclass(frozen=True)
class HighlightRange:
    """以總長度比例表示的區段（0 ≤ start < end ≤ 1）"""

    start: float
    end: float
    kind: Optional[HighlightKind] = HighlightKind.OBJECT

    @property
    def length(self) -> float:
        return self.end - self.start

    @property
    def counts_as_object(self) -> bool:
        """未標記類型的區段視為物件"""
        return self.kind is None or self.kind is HighlightKind.OBJECT
