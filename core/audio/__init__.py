"""
Audio module exports
"""

from .duration import AudioDurationProbe

__all__ = [
    'AudioDurationProbe',
]
