"""
Configuration for map-progress-tracker
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = Path(os.environ.get('MAP_TRACKER_DATA_DIR', PROJECT_ROOT / 'data'))
LIBRARY_FILE = DATA_DIR / 'library.json'
SETTINGS_FILE = DATA_DIR / 'settings.json'
LOG_FILE = DATA_DIR / 'map-tracker.log'
LOG_LEVEL = os.environ.get('MAP_TRACKER_LOG_LEVEL', 'INFO')

# Beatmap files
BEATMAP_EXTENSION = '.osu'
BEATMAP_ENCODING = 'utf-8-sig'
HEADER_READ_SIZE = 8192  # bytes read for the mapper prefilter
BEATMAPSET_URL = 'https://osu.ppy.sh/beatmapsets/{}'

# Scanner settings
MAX_SCAN_WORKERS = 4
PROGRESS_REPORT_INTERVAL = 25

# Highlight settings
OBJECT_BINS = 120
BOOKMARK_BINS = 200
BOOKMARK_WIDTH = 1.2  # bookmark width in bins
FALLBACK_TAIL_MS = 1000

# Storage
STORAGE_VERSION = 1

# UI settings
WINDOW_WIDTH = 850
WINDOW_HEIGHT = 600
TIMELINE_HEIGHT = 14


def ensure_data_dir() -> Path:
    """建立資料夾（若不存在）"""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return DATA_DIR
