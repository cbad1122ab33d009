"""
Worker threads for background tasks
掃描與音訊長度量測的後台線程
"""

import logging
from typing import Dict, List, Optional, Tuple

from PyQt5.QtCore import QThread, pyqtSignal

from core.audio import AudioDurationProbe
from pipeline.scanner import BeatmapScanner, ScanStats

logger = logging.getLogger(__name__)


class ScanWorker(QThread):
    """資料夾掃描工作線程"""

    # 信號
    progress = pyqtSignal(int)   # 進度百分比 (0-100)
    message = pyqtSignal(str)    # 狀態訊息
    finished = pyqtSignal(object)  # 完成，返回 ScanReport
    error = pyqtSignal(str)      # 錯誤訊息

    def __init__(
        self,
        directory: str,
        mapper_name: Optional[str] = None,
        known_files: Optional[Dict[str, float]] = None,
    ):
        super().__init__()
        self.directory = directory  # 掃描資料夾
        self.mapper_name = mapper_name  # 作者篩選
        self.known_files = known_files or {}  # 已知檔案修改時間
        self.scanner = BeatmapScanner()

    def run(self):
        """執行掃描"""
        try:
            self.message.emit("尋找譜面檔案...")
            self.progress.emit(0)

            report = self.scanner.scan_directory(
                self.directory,
                mapper_name=self.mapper_name,
                known_files=self.known_files,
                progress_callback=self._on_progress,
            )

            self.progress.emit(100)
            self.message.emit(
                f"掃描完成：{len(report.entries)} 個譜面"
                f"（快取 {report.stats.cached}、略過 {report.stats.skipped}、錯誤 {report.stats.errors}）"
            )
            self.finished.emit(report)

        except Exception as e:
            logger.error(f"Scan error: {e}")
            self.error.emit(str(e))
            self.progress.emit(0)

    def _on_progress(self, stats: ScanStats):
        """轉發掃描進度"""
        if stats.total:
            self.progress.emit(int(stats.processed / stats.total * 100))
        self.message.emit(f"已處理 {stats.processed} / {stats.total}")


class AudioDurationWorker(QThread):
    """音訊長度量測工作線程（逐一處理）"""

    duration_ready = pyqtSignal(str, float)  # 項目 id、長度（毫秒）
    progress = pyqtSignal(int)
    finished = pyqtSignal()

    def __init__(self, jobs: List[Tuple[str, str]]):
        super().__init__()
        self.jobs = list(jobs)  # [(項目 id, 音訊路徑)]
        self.probe = AudioDurationProbe()
        self._stopped = False

    def stop(self):
        """中止（處理完目前檔案後停止）"""
        self._stopped = True

    def run(self):
        """依序量測"""
        total = len(self.jobs)
        for index, (item_id, audio_path) in enumerate(self.jobs):
            if self._stopped:
                break
            duration = self.probe.get_duration_ms(audio_path)
            if duration:
                self.duration_ready.emit(item_id, duration)
            self.progress.emit(int((index + 1) / total * 100))
            # 讓出時間，避免佔滿 CPU
            self.msleep(100)
        self.finished.emit()
