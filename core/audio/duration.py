"""
音訊長度量測

策略：
1. soundfile 讀取檔頭資訊（wav / ogg / flac，最快）
2. librosa 解碼取得長度（mp3 等格式）
3. ffprobe 讀取容器長度
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

try:
    import librosa
    import soundfile as sf
except ImportError as e:
    raise ImportError(
        f"Required package not found: {e}. "
        f"Install with: pip install librosa soundfile"
    )

logger = logging.getLogger(__name__)


class AudioDurationProbe:
    """取得音訊總長度（毫秒）"""

    def __init__(self, use_ffprobe: bool = True):
        self.use_ffprobe = use_ffprobe  # 前兩種方式失敗時改用 ffprobe

    def get_duration_ms(self, audio_path: str) -> Optional[float]:
        """量測音訊長度，失敗回傳 None"""
        if not audio_path or not Path(audio_path).is_file():
            logger.warning(f"Audio file not found: {audio_path}")
            return None

        for probe in (self._probe_soundfile, self._probe_librosa, self._probe_ffprobe):
            seconds = probe(audio_path)
            if seconds:
                return seconds * 1000.0

        logger.warning(f"Unable to measure audio duration: {audio_path}")
        return None

    def _probe_soundfile(self, audio_path: str) -> Optional[float]:
        """使用 soundfile 讀取長度（秒）"""
        try:
            return float(sf.info(audio_path).duration)
        except Exception as e:
            logger.debug(f"soundfile probe failed for {audio_path}: {e}")
            return None

    def _probe_librosa(self, audio_path: str) -> Optional[float]:
        """使用 librosa 讀取長度（秒）"""
        try:
            return float(librosa.get_duration(path=audio_path))
        except Exception as e:
            logger.debug(f"librosa probe failed for {audio_path}: {e}")
            return None

    def _probe_ffprobe(self, audio_path: str) -> Optional[float]:
        """使用 ffprobe 讀取長度（秒）"""
        if not self.use_ffprobe:
            return None
        try:
            result = subprocess.run(
                [
                    'ffprobe',
                    '-v', 'error',
                    '-show_entries', 'format=duration',
                    '-of', 'default=noprint_wrappers=1:nokey=1',
                    audio_path,
                ],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                check=False,
            )
            if result.stdout:
                return float(result.stdout.strip())
        except (OSError, ValueError) as e:
            logger.debug(f"ffprobe failed for {audio_path}: {e}")
        return None
