# api/services/__init__.py
"""Service layer utilities for the SectionLens API."""

from .highlighting import (
    MatchPosition,
    Occurrence,
    RenderSpan,
    classify_piece,
    index_positions,
    partition_spans,
    scan_occurrences,
)
from .terms import STOPWORDS, TermFamily, compile_patterns, escape_pattern, expand_term
from .view import DocumentView, DocumentViewer, SpanRegistry, ViewerState, build_view

__all__ = [
    "STOPWORDS",
    "TermFamily",
    "compile_patterns",
    "escape_pattern",
    "expand_term",
    "MatchPosition",
    "Occurrence",
    "RenderSpan",
    "classify_piece",
    "index_positions",
    "partition_spans",
    "scan_occurrences",
    "DocumentView",
    "DocumentViewer",
    "SpanRegistry",
    "ViewerState",
    "build_view",
]
