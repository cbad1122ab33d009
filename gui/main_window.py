"""
Main window for Map Progress Tracker
"""

import logging
from pathlib import Path

from PyQt5.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton,
    QMessageBox, QListWidget, QListWidgetItem, QComboBox, QLineEdit,
    QFileDialog, QInputDialog, QAction,
)
from PyQt5.QtCore import Qt, QUrl
from PyQt5.QtGui import QDesktopServices, QFont

import config
from pipeline.library import BeatmapLibrary, VIEW_ALL, VIEW_COMPLETED, VIEW_TODO
from pipeline.settings import TrackerSettings
from gui.widgets import ProgressDialog, TimelineBar
from gui.workers import AudioDurationWorker, ScanWorker

logger = logging.getLogger(__name__)

VIEW_LABELS = [('全部', VIEW_ALL), ('待辦', VIEW_TODO), ('已完成', VIEW_COMPLETED)]
SORT_LABELS = [('加入時間', 'dateAdded'), ('修改時間', 'dateModified'), ('名稱', 'name'), ('完成度', 'progress')]


class BeatmapRow(QWidget):
    """清單中的一列：名稱、完成度與時間軸"""

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout()
        layout.setContentsMargins(6, 4, 6, 4)

        header = QHBoxLayout()
        self.name_label = QLabel()
        self.name_label.setFont(QFont('Arial', 10, QFont.Bold))
        header.addWidget(self.name_label, 1)
        self.progress_label = QLabel()
        header.addWidget(self.progress_label)
        layout.addLayout(header)

        self.creator_label = QLabel()
        layout.addWidget(self.creator_label)

        self.timeline = TimelineBar()
        layout.addWidget(self.timeline)
        self.setLayout(layout)

    def set_item(self, item, done: bool):
        self.name_label.setText(f"{item.artist_unicode} - {item.title_unicode} [{item.version}]")
        self.creator_label.setText(f"mapped by {item.creator}")
        self.progress_label.setText('完成' if done else f"{item.progress * 100:.0f}%")
        self.timeline.set_ranges(item.highlights, done=done)


class MainWindow(QMainWindow):
    """主視窗 - Map Progress Tracker"""

    def __init__(self):
        super().__init__()
        self.settings = self._load_settings()
        self.library = BeatmapLibrary(self.settings)
        self.last_directory = self.settings.songs_dir
        self.scan_worker = None
        self.audio_worker = None
        self._load_library()
        self.init_ui()
        self.setup_menu()
        self.refresh_list()
        self._start_audio_analysis()
        logger.info("MainWindow initialized")

    def init_ui(self):
        """初始化 UI"""
        self.setWindowTitle('Map Progress Tracker')
        self.resize(config.WINDOW_WIDTH, config.WINDOW_HEIGHT)

        central_widget = QWidget()
        layout = QVBoxLayout()

        # 檢視 / 排序 / 搜尋
        toolbar = QHBoxLayout()
        self.view_combo = QComboBox()
        for label, view in VIEW_LABELS:
            self.view_combo.addItem(label, view)
        self.view_combo.currentIndexChanged.connect(self.refresh_list)
        toolbar.addWidget(self.view_combo)

        self.sort_combo = QComboBox()
        for label, mode in SORT_LABELS:
            self.sort_combo.addItem(label, mode)
        self.sort_combo.currentIndexChanged.connect(self.refresh_list)
        toolbar.addWidget(self.sort_combo)

        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText('搜尋標題、藝人、作者...')
        self.search_edit.textChanged.connect(self.refresh_list)
        toolbar.addWidget(self.search_edit, 1)
        layout.addLayout(toolbar)

        self.list_widget = QListWidget()
        self.list_widget.itemDoubleClicked.connect(self.on_open_folder)
        layout.addWidget(self.list_widget)

        # 按鈕區
        button_layout = QHBoxLayout()
        todo_btn = QPushButton('加入 / 移出待辦')
        todo_btn.clicked.connect(self.on_toggle_todo)
        button_layout.addWidget(todo_btn)

        done_btn = QPushButton('標記完成')
        done_btn.clicked.connect(self.on_toggle_done)
        button_layout.addWidget(done_btn)

        folder_btn = QPushButton('開啟資料夾')
        folder_btn.clicked.connect(self.on_open_folder)
        button_layout.addWidget(folder_btn)
        layout.addLayout(button_layout)

        central_widget.setLayout(layout)
        self.setCentralWidget(central_widget)
        self.statusBar().showMessage('就緒')

    def setup_menu(self):
        """設置菜單欄"""
        menubar = self.menuBar()

        file_menu = menubar.addMenu('檔案')
        open_action = file_menu.addAction('加入 .osu 檔案')
        open_action.triggered.connect(self.on_open_files)
        scan_action = file_menu.addAction('掃描資料夾')
        scan_action.triggered.connect(self.on_scan_folder)
        mapper_action = file_menu.addAction('依作者掃描')
        mapper_action.triggered.connect(self.on_scan_mapper)
        rescan_action = file_menu.addAction('重新掃描')
        rescan_action.triggered.connect(self.on_rescan)
        file_menu.addSeparator()
        exit_action = file_menu.addAction('離開')
        exit_action.triggered.connect(self.close)

        settings_menu = menubar.addMenu('設定')
        self.auto_detect_action = QAction('重新掃描時不篩選作者', self, checkable=True)
        self.auto_detect_action.setChecked(self.settings.auto_detect_maps)
        self.auto_detect_action.toggled.connect(self.on_toggle_auto_detect)
        settings_menu.addAction(self.auto_detect_action)

        self.ignore_start_action = QAction('完成度不計前奏並計入休息', self, checkable=True)
        self.ignore_start_action.setChecked(self.settings.ignore_start_and_breaks)
        self.ignore_start_action.toggled.connect(self.on_toggle_ignore_start)
        settings_menu.addAction(self.ignore_start_action)

        self.ignore_guest_action = QAction('隱藏客串難度', self, checkable=True)
        self.ignore_guest_action.setChecked(self.settings.ignore_guest_difficulties)
        self.ignore_guest_action.toggled.connect(self.on_toggle_ignore_guest)
        settings_menu.addAction(self.ignore_guest_action)

        help_menu = menubar.addMenu('說明')
        about_action = help_menu.addAction('關於')
        about_action.triggered.connect(self.on_about)

    # ------------------------------------------------------------------
    # 清單
    # ------------------------------------------------------------------

    def refresh_list(self):
        """依目前檢視重建清單"""
        items = self.library.visible_items(
            view=self.view_combo.currentData() or VIEW_ALL,
            query=self.search_edit.text().strip(),
            sort_mode=self.sort_combo.currentData(),
        )

        self.list_widget.clear()
        for item in items:
            row = BeatmapRow()
            row.set_item(item, self.library.is_done(item.id))
            list_item = QListWidgetItem()
            list_item.setData(Qt.UserRole, item.id)
            list_item.setSizeHint(row.sizeHint())
            self.list_widget.addItem(list_item)
            self.list_widget.setItemWidget(list_item, row)

        self.statusBar().showMessage(
            f"全部 {len(self.library.items)}・待辦 {len(self.library.todo_ids)}・已完成 {len(self.library.done_ids)}"
        )

    def _selected_item_id(self):
        current = self.list_widget.currentItem()
        return current.data(Qt.UserRole) if current else None

    def on_toggle_todo(self):
        item_id = self._selected_item_id()
        if item_id:
            self.library.toggle_todo(item_id)
            self.refresh_list()

    def on_toggle_done(self):
        item_id = self._selected_item_id()
        if item_id:
            self.library.toggle_done(item_id)
            self.refresh_list()

    def on_open_folder(self, *_args):
        item = self.library.get(self._selected_item_id())
        if item:
            QDesktopServices.openUrl(QUrl.fromLocalFile(str(Path(item.file_path).parent)))

    # ------------------------------------------------------------------
    # 匯入 / 掃描
    # ------------------------------------------------------------------

    def on_open_files(self):
        """加入單一或多個 .osu 檔案"""
        file_paths, _ = QFileDialog.getOpenFileNames(self, '選擇譜面', '', 'osu! beatmap (*.osu)')
        for file_path in file_paths:
            try:
                self.library.add_file(file_path)
            except OSError as e:
                logger.error(f"Failed to add {file_path}: {e}")
                QMessageBox.warning(self, '讀取失敗', f'{file_path}\n{e}')
        if file_paths:
            self.refresh_list()
            self._start_audio_analysis()

    def on_scan_folder(self):
        directory = QFileDialog.getExistingDirectory(self, '選擇 Songs 資料夾')
        if directory:
            self._start_scan(directory, None)

    def on_scan_mapper(self):
        name, ok = QInputDialog.getText(self, '依作者掃描', '作者名稱：', text=self.settings.mapper_name)
        if not ok or not name.strip():
            return
        directory = self.settings.songs_dir or QFileDialog.getExistingDirectory(self, '選擇 Songs 資料夾')
        if directory:
            self.settings.mapper_name = name.strip()
            self.settings.songs_dir = directory
            self._start_scan(directory, self.settings.effective_mapper_name())

    def on_rescan(self):
        if not self.last_directory:
            QMessageBox.information(self, '提示', '請先掃描資料夾')
            return
        self._start_scan(self.last_directory, self.settings.effective_mapper_name(), self.library.known_files())

    def _start_scan(self, directory: str, mapper_name, known_files=None):
        """開始掃描（背景執行）"""
        if self.scan_worker and self.scan_worker.isRunning():
            return
        self.last_directory = directory

        progress_dialog = ProgressDialog(self, "正在掃描譜面...")
        progress_dialog.show()

        self.scan_worker = ScanWorker(directory, mapper_name, known_files)
        self.scan_worker.progress.connect(lambda value: progress_dialog.update_progress(value))
        self.scan_worker.message.connect(progress_dialog.set_message)
        self.scan_worker.finished.connect(lambda report: self._on_scan_complete(report, progress_dialog))
        self.scan_worker.error.connect(lambda err: self._on_scan_error(err, progress_dialog))
        self.scan_worker.start()
        logger.info(f"Scan started: {directory} (mapper={mapper_name!r})")

    def _on_scan_complete(self, report, progress_dialog):
        progress_dialog.accept()
        self.library.apply_scan_report(report)
        self.refresh_list()
        self.statusBar().showMessage(
            f"掃描完成：{len(report.entries)} 個譜面，錯誤 {report.stats.errors}"
        )
        self._save_quietly()
        self._start_audio_analysis()

    def _on_scan_error(self, error: str, progress_dialog):
        progress_dialog.reject()
        logger.error(f"Scan error: {error}")
        QMessageBox.critical(self, '錯誤', f'掃描失敗：\n{error}')

    # ------------------------------------------------------------------
    # 音訊長度
    # ------------------------------------------------------------------

    def _start_audio_analysis(self):
        """背景量測尚未取得的音訊長度"""
        if self.audio_worker and self.audio_worker.isRunning():
            return
        jobs = []
        for item in self.library.pending_duration_items():
            audio_path = self.library.audio_path(item)
            if audio_path:
                jobs.append((item.id, audio_path))
        if not jobs:
            return

        self.audio_worker = AudioDurationWorker(jobs)
        self.audio_worker.duration_ready.connect(self._on_duration_ready)
        self.audio_worker.finished.connect(self._save_quietly)
        self.audio_worker.start()
        logger.info(f"Audio analysis started: {len(jobs)} files")

    def _on_duration_ready(self, item_id: str, duration_ms: float):
        try:
            self.library.update_duration(item_id, duration_ms)
        except (KeyError, OSError) as e:
            logger.warning(f"Skipping duration update for {item_id}: {e}")
            return
        self.refresh_list()

    # ------------------------------------------------------------------
    # 設定 / 保存
    # ------------------------------------------------------------------

    def on_toggle_ignore_start(self, checked: bool):
        self.settings.ignore_start_and_breaks = checked
        self.library.recompute_progress()
        self.refresh_list()

    def on_toggle_auto_detect(self, checked: bool):
        self.settings.auto_detect_maps = checked

    def on_toggle_ignore_guest(self, checked: bool):
        self.settings.ignore_guest_difficulties = checked
        self.refresh_list()

    def _load_settings(self) -> TrackerSettings:
        if config.SETTINGS_FILE.exists():
            try:
                return TrackerSettings.load_from_json(str(config.SETTINGS_FILE))
            except (OSError, ValueError):
                pass
        return TrackerSettings()

    def _load_library(self):
        if config.LIBRARY_FILE.exists():
            try:
                self.library.load_from_json(str(config.LIBRARY_FILE))
            except (OSError, ValueError):
                QMessageBox.warning(None, '提醒', '清單檔案損毀，已建立新的清單')

    def _save(self):
        """保存清單與設定"""
        config.ensure_data_dir()
        self.settings.songs_dir = self.last_directory
        self.library.save_to_json(str(config.LIBRARY_FILE))
        self.settings.save_to_json(str(config.SETTINGS_FILE))

    def _save_quietly(self) -> bool:
        """於 slot 中保存：失敗時記錄並顯示在狀態列，不中斷程式"""
        try:
            self._save()
        except OSError as e:
            logger.error(f"Failed to save library or settings: {e}")
            self.statusBar().showMessage(f"保存失敗：{e}")
            return False
        return True

    def on_about(self):
        QMessageBox.about(
            self,
            '關於',
            'Map Progress Tracker\n\n'
            '追蹤 osu! 譜面的製作進度。'
        )

    def closeEvent(self, event):
        """關閉窗口"""
        if self.audio_worker and self.audio_worker.isRunning():
            self.audio_worker.stop()
            self.audio_worker.wait()
        try:
            self._save()
        except OSError as e:
            QMessageBox.warning(self, '保存失敗', str(e))
        event.accept()
        logger.info("Application closed")
