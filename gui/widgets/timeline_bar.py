"""
時間軸進度條元件
"""

from typing import List

from PyQt5.QtCore import QRectF
from PyQt5.QtGui import QColor, QPainter
from PyQt5.QtWidgets import QWidget

from config import TIMELINE_HEIGHT
from core.highlight import HighlightKind, HighlightRange, render_order

COLORS = {
    HighlightKind.BREAK: QColor(73, 159, 113, 153),
    HighlightKind.BOOKMARK: QColor(67, 145, 255, 204),
    HighlightKind.OBJECT: QColor(63, 155, 106),
}
BACKGROUND_COLOR = QColor('#2a2a2a')


class TimelineBar(QWidget):
    """繪製物件、休息與書籤區段"""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.ranges: List[HighlightRange] = []
        self.setMinimumHeight(TIMELINE_HEIGHT)

    def set_ranges(self, ranges: List[HighlightRange], done: bool = False):
        """設置區段（已完成的項目顯示整條）"""
        if done:
            self.ranges = [HighlightRange(0.0, 1.0, HighlightKind.OBJECT)]
        else:
            self.ranges = render_order(ranges)
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        width = self.width()
        height = self.height()
        painter.fillRect(0, 0, width, height, BACKGROUND_COLOR)

        for highlight in self.ranges:
            x = highlight.start * width
            w = highlight.length * width
            if highlight.kind is HighlightKind.BOOKMARK:
                w = max(2.0, w)
            color = COLORS.get(highlight.kind, COLORS[HighlightKind.OBJECT])
            painter.fillRect(QRectF(x, 0, w, height), color)
        painter.end()
