"""
map-progress-tracker - Main Entry Point
"""

import sys
import logging
import multiprocessing

from PyQt5.QtWidgets import QApplication

from config import LOG_FILE, LOG_LEVEL, ensure_data_dir
from gui.main_window import MainWindow


def setup_logging():
    """設定 logging（檔案放在資料夾內）"""
    ensure_data_dir()
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, encoding='utf-8'),  # 寫到檔案
            logging.StreamHandler(sys.stdout)                 # 也輸出到 terminal
        ]
    )


def main():
    # 打包後的掃描子行程需要
    multiprocessing.freeze_support()
    setup_logging()
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()
