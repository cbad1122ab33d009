"""
Pipeline module exports
"""

from .item import BeatmapItem, create_item_id, filter_items, is_guest_difficulty, sort_items
from .library import VIEW_ALL, VIEW_COMPLETED, VIEW_TODO, BeatmapLibrary
from .scanner import BeatmapScanner, ScanEntry, ScanError, ScanReport, ScanStats, find_beatmap_files
from .settings import TrackerSettings

__all__ = [
    'BeatmapItem',
    'create_item_id',
    'filter_items',
    'is_guest_difficulty',
    'sort_items',
    'BeatmapLibrary',
    'VIEW_ALL',
    'VIEW_TODO',
    'VIEW_COMPLETED',
    'BeatmapScanner',
    'ScanEntry',
    'ScanError',
    'ScanReport',
    'ScanStats',
    'find_beatmap_files',
    'TrackerSettings',
]
