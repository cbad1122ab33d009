"""
使用者設定
"""

import json
import logging
from dataclasses import dataclass, fields
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class TrackerSettings:
    """進度追蹤設定"""

    songs_dir: Optional[str] = None  # Songs 資料夾
    mapper_name: str = ''  # 依作者重新掃描時的名稱
    auto_detect_maps: bool = False  # 為 True 時掃描全部譜面（不篩選作者）
    ignore_start_and_breaks: bool = False  # 完成度不計前奏並計入休息區段
    ignore_guest_difficulties: bool = False  # 隱藏他人客串難度

    def effective_mapper_name(self) -> str:
        """實際用於篩選的作者名稱（自動偵測時為空字串）"""
        if self.auto_detect_maps:
            return ''
        return (self.mapper_name or '').strip()

    def to_dict(self) -> dict:
        """轉為字典"""
        return {
            'songs_dir': self.songs_dir,
            'mapper_name': self.mapper_name,
            'auto_detect_maps': self.auto_detect_maps,
            'ignore_start_and_breaks': self.ignore_start_and_breaks,
            'ignore_guest_difficulties': self.ignore_guest_difficulties,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TrackerSettings':
        """由字典建立設定（忽略未知欄位）"""
        if not isinstance(data, dict):
            if data:
                logger.warning("Stored settings have an unsupported format, using defaults")
            return cls()
        known = {item.name for item in fields(cls)}
        default = cls().to_dict()
        default.update({key: value for key, value in data.items() if key in known})
        return cls(**default)

    def save_to_json(self, file_path: str):
        """保存設定為 JSON"""
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            logger.info(f"Settings saved: {file_path}")
        except Exception as e:
            logger.error(f"Failed to save settings: {e}")
            raise

    @classmethod
    def load_from_json(cls, file_path: str) -> 'TrackerSettings':
        """從 JSON 加載設定"""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            settings = cls.from_dict(data)
            logger.info(f"Settings loaded: {file_path}")
            return settings
        except Exception as e:
            logger.error(f"Failed to load settings: {e}")
            raise
