"""
譜面清單狀態管理
"""

import json
import logging
import time
from pathlib import Path
from typing import Dict, List, Optional

from config import FALLBACK_TAIL_MS, STORAGE_VERSION
from core.beatmap import BeatmapParser, ParsedBeatmap
from core.highlight import build_highlights, compute_progress

from .item import BeatmapItem, create_item_id, filter_items, is_guest_difficulty, sort_items
from .scanner import ScanReport
from .settings import TrackerSettings

logger = logging.getLogger(__name__)

VIEW_ALL = 'all'
VIEW_TODO = 'todo'
VIEW_COMPLETED = 'completed'


class BeatmapLibrary:
    """譜面清單（全部 / 待辦 / 已完成）"""

    def __init__(self, settings: Optional[TrackerSettings] = None, parser: Optional[BeatmapParser] = None):
        self.settings = settings or TrackerSettings()
        self.parser = parser or BeatmapParser()
        self.items: Dict[str, BeatmapItem] = {}  # id → 項目（保持加入順序）
        self.todo_ids: List[str] = []
        self.done_ids: List[str] = []

    # ------------------------------------------------------------------
    # 項目建立
    # ------------------------------------------------------------------

    def build_item(
        self,
        parsed: ParsedBeatmap,
        file_path: str,
        mtime_ms: float = 0.0,
        existing: Optional[BeatmapItem] = None,
    ) -> BeatmapItem:
        """由解析結果建立項目（沿用既有項目的 id、加入時間與已量測長度）"""
        metadata = parsed.metadata
        cover_path = str(Path(file_path).parent / metadata.background) if metadata.background else ''

        # 音訊檔名不變才沿用已量測的長度
        duration_ms = existing.duration_ms if existing and existing.audio == metadata.audio else None
        item = BeatmapItem(
            id=existing.id if existing else create_item_id(file_path),
            file_path=file_path,
            title=metadata.title,
            title_unicode=metadata.title_unicode,
            artist=metadata.artist,
            artist_unicode=metadata.artist_unicode,
            creator=metadata.creator,
            version=metadata.version,
            beatmap_set_id=metadata.beatmap_set_id,
            audio=metadata.audio,
            cover_path=cover_path,
            duration_ms=duration_ms,
            preview_time=metadata.preview_time,
            date_added=existing.date_added if existing else time.time() * 1000,
            date_modified=mtime_ms,
            deadline=existing.deadline if existing else None,
            target_star_rating=existing.target_star_rating if existing else None,
        )
        self._apply_highlights(item, parsed, duration_ms or parsed.content_duration(FALLBACK_TAIL_MS))
        return item

    def _apply_highlights(self, item: BeatmapItem, parsed: ParsedBeatmap, total_duration: Optional[float]):
        """依總長度重新計算區段與完成度"""
        if total_duration:
            item.highlights = build_highlights(
                parsed.hit_starts,
                parsed.hit_ends,
                parsed.break_periods,
                parsed.bookmarks,
                total_duration,
            )
        else:
            item.highlights = []
        item.progress = compute_progress(item.highlights, self.settings.ignore_start_and_breaks)

    def add_file(self, file_path: str) -> BeatmapItem:
        """直接加入單一檔案"""
        parsed = self.parser.parse_file(file_path)
        existing = self.find_by_path(file_path)
        item = self.build_item(parsed, file_path, Path(file_path).stat().st_mtime * 1000, existing)
        self.items[item.id] = item
        return item

    def apply_scan_report(self, report: ScanReport) -> List[BeatmapItem]:
        """套用掃描結果，回傳新增或更新的項目"""
        by_path = {item.file_path: item for item in self.items.values()}
        changed = []
        for entry in report.entries:
            existing = by_path.get(entry.file_path)
            if entry.unchanged:
                if existing is None:
                    logger.warning(f"Unchanged entry without stored item: {entry.file_path}")
                    continue
                existing.date_modified = entry.mtime_ms
                continue

            item = self.build_item(entry.parsed, entry.file_path, entry.mtime_ms, existing)
            self.items[item.id] = item
            changed.append(item)

        logger.info(f"Applied scan report: {len(changed)} items updated, {len(self.items)} total")
        return changed

    # ------------------------------------------------------------------
    # 查詢
    # ------------------------------------------------------------------

    def get(self, item_id: str) -> Optional[BeatmapItem]:
        return self.items.get(item_id)

    def find_by_path(self, file_path: str) -> Optional[BeatmapItem]:
        for item in self.items.values():
            if item.file_path == file_path:
                return item
        return None

    def known_files(self) -> Dict[str, float]:
        """已知檔案的修改時間（重新掃描時略過未變更檔案）"""
        return {item.file_path: item.date_modified for item in self.items.values() if item.highlights}

    def is_hidden(self, item: BeatmapItem) -> bool:
        """是否因客串難度設定而隱藏"""
        if not self.settings.ignore_guest_difficulties:
            return False
        return is_guest_difficulty(item, self.settings.effective_mapper_name())

    def visible_items(
        self,
        view: str = VIEW_ALL,
        query: str = '',
        sort_mode: str = 'dateAdded',
        direction: str = 'desc',
    ) -> List[BeatmapItem]:
        """取得目前檢視的項目（待辦 / 已完成依加入清單的順序）"""
        if view == VIEW_TODO:
            ids = self.todo_ids
        elif view == VIEW_COMPLETED:
            ids = self.done_ids
        else:
            visible = [item for item in self.items.values() if not self.is_hidden(item)]
            return sort_items(filter_items(visible, query), sort_mode, direction)

        items = [self.items[item_id] for item_id in ids if item_id in self.items]
        return [item for item in items if not self.is_hidden(item)]

    def is_done(self, item_id: str) -> bool:
        return item_id in self.done_ids

    # ------------------------------------------------------------------
    # 待辦 / 完成
    # ------------------------------------------------------------------

    def toggle_todo(self, item_id: str) -> bool:
        """切換待辦狀態，回傳切換後是否在待辦中"""
        if item_id not in self.items:
            raise KeyError(item_id)
        if item_id in self.todo_ids:
            self.todo_ids.remove(item_id)
            return False
        if item_id in self.done_ids:
            self.done_ids.remove(item_id)
        self.todo_ids.insert(0, item_id)
        return True

    def toggle_done(self, item_id: str) -> bool:
        """切換完成狀態，回傳切換後是否已完成"""
        if item_id not in self.items:
            raise KeyError(item_id)
        if item_id in self.done_ids:
            self.done_ids.remove(item_id)
            return False
        if item_id in self.todo_ids:
            self.todo_ids.remove(item_id)
        self.done_ids.insert(0, item_id)
        return True

    def remove(self, item_id: str):
        """移除項目"""
        self.items.pop(item_id, None)
        if item_id in self.todo_ids:
            self.todo_ids.remove(item_id)
        if item_id in self.done_ids:
            self.done_ids.remove(item_id)

    def clear(self):
        self.items.clear()
        self.todo_ids.clear()
        self.done_ids.clear()

    # ------------------------------------------------------------------
    # 音訊長度
    # ------------------------------------------------------------------

    def audio_path(self, item: BeatmapItem) -> Optional[str]:
        """音訊檔完整路徑"""
        if not item.audio or not item.file_path:
            return None
        return str(Path(item.file_path).parent / item.audio)

    def pending_duration_items(self, view: str = VIEW_ALL) -> List[BeatmapItem]:
        """尚未量測音訊長度的項目"""
        return [
            item for item in self.visible_items(view)
            if item.audio and not isinstance(item.duration_ms, (int, float))
        ]

    def update_duration(self, item_id: str, duration_ms: float) -> BeatmapItem:
        """記錄量測到的音訊長度，並重新解析檔案計算區段"""
        item = self.items[item_id]
        try:
            parsed = self.parser.parse_file(item.file_path)
        except OSError as e:
            logger.error(f"Failed to re-read {item.file_path}: {e}")
            raise
        # 重新解析成功後才記錄長度，失敗時保留待量測狀態
        item.duration_ms = duration_ms
        self._apply_highlights(item, parsed, duration_ms)
        logger.info(f"Duration updated: {item.display_name} ({duration_ms:.0f} ms)")
        return item

    def recompute_progress(self):
        """設定變更後重新計算所有完成度"""
        for item in self.items.values():
            item.progress = compute_progress(item.highlights, self.settings.ignore_start_and_breaks)

    # ------------------------------------------------------------------
    # 保存 / 讀取
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            'version': STORAGE_VERSION,
            'todoIds': list(self.todo_ids),
            'doneIds': list(self.done_ids),
            'items': [item.to_dict() for item in self.items.values()],
        }

    def load_dict(self, data: dict) -> bool:
        """由字典還原（版本不符或格式錯誤時不載入）"""
        if not isinstance(data, dict) or data.get('version') != STORAGE_VERSION or not isinstance(data.get('items'), list):
            logger.warning("Stored library has an unsupported format, ignoring")
            return False

        self.clear()
        for raw_item in data['items']:
            if not isinstance(raw_item, dict) or not raw_item.get('filePath'):
                continue
            item = BeatmapItem.from_dict(raw_item)
            self.items[item.id] = item
        self.todo_ids = [item_id for item_id in data.get('todoIds') or [] if item_id in self.items]
        self.done_ids = [item_id for item_id in data.get('doneIds') or [] if item_id in self.items]
        return True

    def save_to_json(self, file_path: str):
        """保存清單為 JSON"""
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, ensure_ascii=False)
            logger.info(f"Library saved: {file_path}")
        except Exception as e:
            logger.error(f"Failed to save library: {e}")
            raise

    def load_from_json(self, file_path: str) -> bool:
        """從 JSON 加載清單"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except Exception as e:
            logger.error(f"Failed to load library: {e}")
            raise
        loaded = self.load_dict(data)
        if loaded:
            logger.info(f"Library loaded: {file_path} ({len(self.items)} items)")
        return loaded
