"""
GUI 元件公開介面
"""

from .progress_dialog import ProgressDialog
from .timeline_bar import TimelineBar

__all__ = [
    'ProgressDialog',
    'TimelineBar',
]
