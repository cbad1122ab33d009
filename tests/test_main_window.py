import os

import pytest

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
QtWidgets = pytest.importorskip('PyQt5.QtWidgets')

import config
from pipeline.scanner import ScanReport


class _Dialog:
    def accept(self):
        pass


@pytest.fixture(scope='module')
def qapp():
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, 'DATA_DIR', tmp_path)
    monkeypatch.setattr(config, 'LIBRARY_FILE', tmp_path / 'library.json')
    monkeypatch.setattr(config, 'SETTINGS_FILE', tmp_path / 'settings.json')
    return tmp_path


@pytest.fixture
def make_window(qapp, data_dir):
    from gui.main_window import MainWindow

    windows = []

    def factory():
        window = MainWindow()
        windows.append(window)
        return window

    yield factory
    for window in windows:
        window.deleteLater()


def test_scan_complete_survives_save_failure(make_window, data_dir):
    # 設定檔位置被資料夾佔用，保存必定失敗
    (data_dir / 'settings.json').mkdir()
    window = make_window()

    window._on_scan_complete(ScanReport(), _Dialog())

    assert '保存失敗' in window.statusBar().currentMessage()
    assert window._save_quietly() is False


def test_save_quietly_writes_files(make_window, data_dir):
    window = make_window()
    assert window._save_quietly() is True
    assert (data_dir / 'library.json').is_file()
    assert (data_dir / 'settings.json').is_file()


def test_settings_with_list_json_fall_back_to_defaults(make_window, data_dir):
    (data_dir / 'settings.json').write_text('[1, 2]', encoding='utf-8')
    window = make_window()
    assert window.settings.mapper_name == ''
    assert window.settings.ignore_start_and_breaks is False
