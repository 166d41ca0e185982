# api/services/view.py
"""Derived document views, span lookup and the stateful viewer session."""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Protocol, Tuple, TypeVar

from client import DocumentFetchError, DocumentRecord, DocumentText

from .highlighting import (
    MatchPosition,
    RenderSpan,
    classify_piece,
    index_positions,
    partition_spans,
    scan_occurrences,
)
from .terms import TermFamily

__all__ = [
    "DEFAULT_LOAD_ERROR",
    "DocumentView",
    "DocumentViewer",
    "SpanRegistry",
    "ViewerState",
    "build_view",
    "marker_style",
    "marker_title",
]

LOGGER = logging.getLogger(__name__)

DEFAULT_LOAD_ERROR = "Failed to load section text"

E = TypeVar("E")


@dataclass(slots=True)
class DocumentView:
    """Everything derived from one ``(text, primary, secondary)`` triple."""

    text: str
    primary_term: Optional[str]
    secondary_term: Optional[str]
    spans: List[RenderSpan] = field(default_factory=list)
    positions: List[MatchPosition] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.positions)

    @property
    def has_matches(self) -> bool:
        return bool(self.positions)

    @property
    def highlighted_spans(self) -> List[RenderSpan]:
        return [span for span in self.spans if span.is_highlighted]


def build_view(
    text: Optional[str],
    primary_term: Optional[str] = None,
    secondary_term: Optional[str] = None,
) -> DocumentView:
    """Recompute spans and minimap positions from scratch.

    Each family is scanned with its own pattern for the minimap, while the
    spans come from a single split on the combined pattern. Minimap entries
    are classified with the same rules as the spans so a word present in both
    expansions is reported as primary in both places.
    """

    text = text or ""
    primary = TermFamily.from_phrase("primary", primary_term)
    secondary = TermFamily.from_phrase("secondary", secondary_term)

    primary_hits = scan_occurrences(text, primary.compile(), "primary")
    secondary_hits = scan_occurrences(text, secondary.compile(), "secondary")
    positions = index_positions(
        primary_hits,
        secondary_hits,
        len(text),
        classify=lambda piece: classify_piece(piece, primary, secondary),
    )
    spans = partition_spans(text, primary_term, secondary_term)

    LOGGER.debug(
        "Built view: %d characters, %d spans, %d positions",
        len(text),
        len(spans),
        len(positions),
    )
    return DocumentView(
        text=text,
        primary_term=primary.phrase,
        secondary_term=secondary.phrase,
        spans=spans,
        positions=positions,
    )


def marker_title(position: MatchPosition, index: int, total: int) -> str:
    """Tooltip for the ``index``-th (zero based) minimap marker."""

    return f"{position.term} ({index + 1}/{total})"


def marker_style(position: MatchPosition) -> Dict[str, str]:
    """Placement of a marker along a fixed-height minimap track."""

    return {"top": f"{position.percentage}%", "family": position.family}


class SpanRegistry(Generic[E]):
    """Maps span position keys to displayable elements.

    Lookups fall back to the highlighted span covering an offset, since a
    minimap entry from one family's scan can start inside a span produced by
    the combined split.
    """

    def __init__(self) -> None:
        self._elements: Dict[int, E] = {}
        self._keys: List[int] = []
        self._ends: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._elements)

    def register(self, position_key: int, element: E, length: int = 0) -> None:
        if position_key not in self._elements:
            bisect.insort(self._keys, position_key)
        self._elements[position_key] = element
        self._ends[position_key] = position_key + length

    def register_spans(
        self, spans: Iterable[RenderSpan], make_element: Callable[[RenderSpan], E]
    ) -> None:
        for span in spans:
            if span.is_highlighted and span.position_key is not None:
                self.register(span.position_key, make_element(span), len(span.text))

    def resolve(self, offset: int) -> Optional[E]:
        if offset in self._elements:
            return self._elements[offset]

        index = bisect.bisect_right(self._keys, offset) - 1
        if index < 0:
            return None
        key = self._keys[index]
        if offset < self._ends[key]:
            return self._elements[key]
        return None

    def scroll_to(self, offset: int, scroller: Callable[..., Any]) -> bool:
        """Bring the element for ``offset`` into view, centred."""

        element = self.resolve(offset)
        if element is None:
            LOGGER.debug("No element registered for offset %d", offset)
            return False
        scroller(element, behavior="smooth", block="center")
        return True

    def clear(self) -> None:
        self._elements.clear()
        self._keys.clear()
        self._ends.clear()


class DocumentSource(Protocol):
    async def load_document(self, doc_id: str) -> Tuple[DocumentRecord, DocumentText]:
        ...


@dataclass(slots=True)
class ViewerState:
    """Snapshot of what a document viewer should display."""

    doc_id: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None
    document: Optional[DocumentRecord] = None
    text: str = ""
    view: Optional[DocumentView] = None

    @property
    def ready(self) -> bool:
        return not self.loading and self.error is None and bool(self.text)


class DocumentViewer:
    """Loads one document at a time and keeps its highlights current.

    Every ``open`` or ``close`` starts a new generation; a load that finishes
    after its generation has been superseded is dropped instead of being
    applied to the newer state.
    """

    def __init__(self, source: DocumentSource) -> None:
        self._source = source
        self._generation = 0
        self._primary_term: Optional[str] = None
        self._secondary_term: Optional[str] = None
        self.state = ViewerState()

    @property
    def primary_term(self) -> Optional[str]:
        return self._primary_term

    @property
    def secondary_term(self) -> Optional[str]:
        return self._secondary_term

    async def open(self, doc_id: str) -> Optional[ViewerState]:
        """Load ``doc_id``; returns ``None`` if the result arrived too late."""

        self._generation += 1
        generation = self._generation
        self.state = ViewerState(doc_id=doc_id, loading=True)

        try:
            document, text = await self._source.load_document(doc_id)
        except Exception as exc:  # noqa: BLE001 - any failure ends the load as an error state
            if generation != self._generation:
                LOGGER.debug("Discarding stale failure for %s", doc_id)
                return None
            if isinstance(exc, DocumentFetchError):
                LOGGER.error("Failed to load document %s: %s", doc_id, exc)
            else:
                LOGGER.exception("Unexpected error loading document %s", doc_id)
            self.state = ViewerState(doc_id=doc_id, error=str(exc) or DEFAULT_LOAD_ERROR)
            return self.state
        finally:
            # also reached on cancellation
            if generation == self._generation and self.state.loading:
                self.state.loading = False

        if generation != self._generation:
            LOGGER.debug("Discarding stale load for %s", doc_id)
            return None

        self.state = ViewerState(doc_id=doc_id, document=document, text=text.text)
        self._recompute()
        return self.state

    def set_terms(
        self, primary_term: Optional[str] = None, secondary_term: Optional[str] = None
    ) -> Optional[DocumentView]:
        """Change the active terms and rebuild the view for the loaded text."""

        self._primary_term = primary_term or None
        self._secondary_term = secondary_term or None
        return self._recompute()

    def close(self) -> None:
        self._generation += 1
        self.state = ViewerState()

    def _recompute(self) -> Optional[DocumentView]:
        if self.state.loading or self.state.error is not None:
            return None
        self.state.view = build_view(self.state.text, self._primary_term, self._secondary_term)
        return self.state.view
