"""
Progress dialog widget
掃描進度對話框
"""

from PyQt5.QtWidgets import (
    QDialog, QVBoxLayout, QLabel, QProgressBar, QPushButton
)
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QFont


class ProgressDialog(QDialog):
    """掃描進度對話框（掃描無法中途取消，只能隱藏到背景）"""

    def __init__(self, parent=None, title="Scanning"):
        super().__init__(parent)
        self.init_ui(title)
        self.setWindowTitle(title)
        self.resize(420, 150)
        self.setModal(True)
        self.setWindowFlags(self.windowFlags() & ~Qt.WindowCloseButtonHint)

    def init_ui(self, title):
        """初始化 UI"""
        layout = QVBoxLayout()

        title_label = QLabel(title)
        title_label.setFont(QFont("Arial", 11, QFont.Bold))
        layout.addWidget(title_label)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 100)
        layout.addWidget(self.progress_bar)

        # 已處理 / 快取 / 略過 / 錯誤
        self.status_label = QLabel("尋找譜面檔案...")
        layout.addWidget(self.status_label)

        hide_btn = QPushButton("背景執行")
        hide_btn.clicked.connect(self.hide)
        layout.addWidget(hide_btn)

        self.setLayout(layout)

    def update_progress(self, progress: int, message: str = ""):
        """更新進度"""
        self.progress_bar.setValue(progress)
        if message:
            self.status_label.setText(message)

    def set_message(self, message: str):
        self.status_label.setText(message)
