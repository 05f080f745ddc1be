"""Utilidades de texto (segmentación)."""

from .segmenters import (
    CodePointSegmenter,
    GraphemeSegmenter,
    WordSegmenter,
    build_segmenter,
)

__all__ = [
    "GraphemeSegmenter",
    "CodePointSegmenter",
    "WordSegmenter",
    "build_segmenter",
]
