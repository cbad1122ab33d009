"""
Highlight module exports
"""

from .builder import (
    build_bookmark_ranges,
    build_break_ranges,
    build_highlights,
    build_object_ranges,
    render_order,
)
from .model import HighlightKind, HighlightRange
from .progress import compute_progress
from .serializer import deserialize_highlights, serialize_highlights

__all__ = [
    'HighlightKind',
    'HighlightRange',
    'build_object_ranges',
    'build_break_ranges',
    'build_bookmark_ranges',
    'build_highlights',
    'render_order',
    'compute_progress',
    'serialize_highlights',
    'deserialize_highlights',
]
