"""
資料夾掃描

作用：
- 遞迴尋找 .osu 檔案
- 依 CPU 數（最多 4）切分檔案列表，平行解析
- 以訊息佇列回報進度，錯誤以檔案為單位回報，不中斷整批作業
"""

import logging
import math
import multiprocessing
import os
import queue
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, wait, FIRST_COMPLETED
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from config import BEATMAP_EXTENSION, MAX_SCAN_WORKERS, PROGRESS_REPORT_INTERVAL
from core.beatmap import BeatmapParser, ParsedBeatmap

logger = logging.getLogger(__name__)

PHASE_STAT = 'stat'
PHASE_PARSE = 'parse'


@dataclass
class ScanEntry:
    """單一檔案的掃描結果"""

    file_path: str
    mtime_ms: float
    parsed: Optional[ParsedBeatmap] = None  # unchanged 時為 None
    unchanged: bool = False


@dataclass
class ScanError:
    """單一檔案的錯誤資訊"""

    file_path: str
    phase: str  # 'stat' 或 'parse'
    message: str


@dataclass
class ScanStats:
    """掃描統計"""

    total: int = 0
    processed: int = 0
    cached: int = 0
    skipped: int = 0
    errors: int = 0

    def __add__(self, other: 'ScanStats') -> 'ScanStats':
        return ScanStats(
            total=self.total + other.total,
            processed=self.processed + other.processed,
            cached=self.cached + other.cached,
            skipped=self.skipped + other.skipped,
            errors=self.errors + other.errors,
        )


@dataclass
class ScanReport:
    """整批掃描結果"""

    entries: List[ScanEntry] = field(default_factory=list)
    stats: ScanStats = field(default_factory=ScanStats)
    errors: List[ScanError] = field(default_factory=list)


def find_beatmap_files(directory: str) -> List[str]:
    """遞迴尋找 .osu 檔案（無法讀取的資料夾略過）"""
    found = []

    def on_error(error: OSError):
        logger.warning(f"Cannot read directory: {error}")

    for root, _dirs, files in os.walk(directory, onerror=on_error):
        for name in files:
            if os.path.splitext(name)[1].lower() == BEATMAP_EXTENSION:
                found.append(os.path.join(root, name))
    found.sort()
    return found


def split_chunks(file_paths: List[str], worker_count: int) -> List[List[str]]:
    """將檔案列表切成連續且互不重疊的區塊"""
    if worker_count <= 0 or not file_paths:
        return []
    chunk_size = math.ceil(len(file_paths) / worker_count)
    chunks = [file_paths[index:index + chunk_size] for index in range(0, len(file_paths), chunk_size)]
    return [chunk for chunk in chunks if chunk]


def scan_chunk(
    worker_index: int,
    file_paths: List[str],
    mapper_name: Optional[str],
    known_files: Dict[str, float],
    progress_queue=None,
) -> ScanReport:
    """
    依序處理一個區塊的檔案（在工作行程 / 執行緒中執行）

    Args:
        worker_index: 工作編號（回報進度用）
        file_paths: 此工作負責的檔案
        mapper_name: 作者篩選（不分大小寫的子字串）
        known_files: 已知檔案的修改時間 {path: mtime_ms}
        progress_queue: 進度訊息佇列

    Returns:
        此區塊的掃描結果
    """
    parser = BeatmapParser()
    needle = mapper_name.lower() if mapper_name else None
    report = ScanReport(stats=ScanStats(total=len(file_paths)))
    stats = report.stats

    def report_progress():
        if progress_queue is None:
            return
        if stats.processed % PROGRESS_REPORT_INTERVAL == 0 or stats.processed == stats.total:
            progress_queue.put(('progress', worker_index, ScanStats(**vars(stats))))

    for file_path in file_paths:
        try:
            mtime_ms = os.stat(file_path).st_mtime * 1000
        except OSError as e:
            stats.errors += 1
            stats.processed += 1
            report.errors.append(ScanError(file_path=file_path, phase=PHASE_STAT, message=str(e)))
            report_progress()
            continue

        try:
            if needle and not parser.parse_header(parser.read_header(file_path)).matches(needle):
                stats.skipped += 1
            elif known_files.get(file_path) == mtime_ms:
                report.entries.append(ScanEntry(file_path=file_path, mtime_ms=mtime_ms, unchanged=True))
                stats.cached += 1
            else:
                parsed = parser.parse_file(file_path)
                report.entries.append(ScanEntry(file_path=file_path, mtime_ms=mtime_ms, parsed=parsed))
        except Exception as e:
            logger.debug(f"Failed to parse {file_path}: {e}")
            stats.errors += 1
            report.errors.append(ScanError(file_path=file_path, phase=PHASE_PARSE, message=str(e)))

        stats.processed += 1
        report_progress()

    return report


class BeatmapScanner:
    """平行掃描協調器"""

    def __init__(self, max_workers: Optional[int] = None, use_processes: bool = True):
        self.max_workers = max_workers or MAX_SCAN_WORKERS  # 工作數上限
        self.use_processes = use_processes  # False 時改用執行緒（測試用）

    def worker_count(self, file_count: int) -> int:
        """實際工作數 = min(CPU 數, 上限, 檔案數)"""
        return min(os.cpu_count() or 1, self.max_workers, file_count)

    def scan_directory(
        self,
        directory: str,
        mapper_name: Optional[str] = None,
        known_files: Optional[Dict[str, float]] = None,
        progress_callback: Optional[Callable[[ScanStats], None]] = None,
    ) -> ScanReport:
        """掃描資料夾"""
        if not directory or not Path(directory).is_dir():
            raise FileNotFoundError(f"Directory not found: {directory}")
        file_paths = find_beatmap_files(directory)
        logger.info(f"Found {len(file_paths)} beatmap files in {directory}")
        return self.scan(file_paths, mapper_name, known_files, progress_callback)

    def scan(
        self,
        file_paths: List[str],
        mapper_name: Optional[str] = None,
        known_files: Optional[Dict[str, float]] = None,
        progress_callback: Optional[Callable[[ScanStats], None]] = None,
    ) -> ScanReport:
        """平行處理檔案列表並合併結果"""
        chunks = split_chunks(list(file_paths), self.worker_count(len(file_paths)))
        if not chunks:
            return ScanReport()

        known_files = dict(known_files or {})
        mapper_name = (mapper_name or '').strip() or None

        if self.use_processes:
            manager = multiprocessing.Manager()
            progress_queue = manager.Queue()
            executor = ProcessPoolExecutor(max_workers=len(chunks))
        else:
            manager = None
            progress_queue = queue.Queue()
            executor = ThreadPoolExecutor(max_workers=len(chunks))

        try:
            reports = self._run(executor, chunks, mapper_name, known_files, progress_queue, progress_callback)
        finally:
            executor.shutdown(wait=True)
            if manager is not None:
                manager.shutdown()

        merged = ScanReport()
        for report in reports:
            merged.entries.extend(report.entries)
            merged.errors.extend(report.errors)
            merged.stats = merged.stats + report.stats

        logger.info(
            f"Scan complete: {len(merged.entries)} entries, cached={merged.stats.cached}, "
            f"skipped={merged.stats.skipped}, errors={merged.stats.errors}"
        )
        for error in merged.errors:
            logger.warning(f"Scan error ({error.phase}) {error.file_path}: {error.message}")
        return merged

    def _run(
        self,
        executor: Executor,
        chunks: List[List[str]],
        mapper_name: Optional[str],
        known_files: Dict[str, float],
        progress_queue,
        progress_callback: Optional[Callable[[ScanStats], None]],
    ) -> List[ScanReport]:
        """送出工作並轉發進度訊息，依區塊順序回傳結果"""
        futures = [
            executor.submit(scan_chunk, index, chunk, mapper_name, known_files, progress_queue)
            for index, chunk in enumerate(chunks)
        ]
        latest: Dict[int, ScanStats] = {}
        pending = set(futures)

        while pending:
            _done, pending = wait(pending, timeout=0.1, return_when=FIRST_COMPLETED)
            self._drain(progress_queue, latest, progress_callback)
        self._drain(progress_queue, latest, progress_callback)

        # 工作本身失敗時例外在此拋出
        return [future.result() for future in futures]

    def _drain(self, progress_queue, latest: Dict[int, ScanStats], progress_callback):
        """讀取佇列中的進度訊息並回報總和"""
        updated = False
        while True:
            try:
                _kind, worker_index, stats = progress_queue.get_nowait()
            except queue.Empty:
                break
            latest[worker_index] = stats
            updated = True

        if updated and progress_callback:
            total = ScanStats()
            for stats in latest.values():
                total = total + stats
            progress_callback(total)
