"""
數值解析工具

作用：
- 以前綴方式解析整數與浮點數（"123abc" 取 123）
- 解析失敗回傳 None，由呼叫端決定預設值
"""

import re
from typing import Optional

_INT_PATTERN = re.compile(r'[ \t]*([+-]?\d+)')
_FLOAT_PATTERN = re.compile(r'[ \t]*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')


def parse_int(text: str) -> Optional[int]:
    """解析整數前綴（小數部分直接捨去）"""
    if not text:
        return None
    match = _INT_PATTERN.match(text)
    if not match:
        return None
    return int(match.group(1))


def parse_float(text: str) -> Optional[float]:
    """解析浮點數前綴"""
    if not text:
        return None
    match = _FLOAT_PATTERN.match(text)
    if not match:
        return None
    return float(match.group(1))
