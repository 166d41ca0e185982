# api/services/highlighting.py
"""Occurrence scanning, minimap indexing and render span partitioning."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Literal, Optional

from .terms import Family, TermFamily, compile_patterns

__all__ = [
    "MatchPosition",
    "Occurrence",
    "RenderSpan",
    "SpanFamily",
    "classify_piece",
    "index_positions",
    "partition_spans",
    "scan_occurrences",
]

LOGGER = logging.getLogger(__name__)

SpanFamily = Literal["primary", "secondary", "none"]


@dataclass(frozen=True, slots=True)
class Occurrence:
    """A single match of a family's compiled pattern."""

    offset: int
    text: str
    family: Family

    @property
    def end(self) -> int:
        return self.offset + len(self.text)


@dataclass(frozen=True, slots=True)
class MatchPosition:
    """An occurrence normalised against the document length for the minimap."""

    offset: int
    term: str
    family: Family
    percentage: float


@dataclass(frozen=True, slots=True)
class RenderSpan:
    """A contiguous fragment of the document labelled for display."""

    text: str
    family: SpanFamily = "none"
    position_key: Optional[int] = None

    @property
    def is_highlighted(self) -> bool:
        return self.family != "none"


def scan_occurrences(
    text: str, pattern: Optional[re.Pattern[str]], family: Family
) -> List[Occurrence]:
    """Return the non-overlapping, left-to-right matches of ``pattern``."""

    if not text or pattern is None:
        return []
    return [
        Occurrence(offset=match.start(), text=match.group(0), family=family)
        for match in pattern.finditer(text)
    ]


def index_positions(
    primary: Iterable[Occurrence],
    secondary: Iterable[Occurrence],
    text_length: int,
    classify: Optional[Callable[[str], SpanFamily]] = None,
) -> List[MatchPosition]:
    """Build the offset-sorted minimap index for both families.

    Parameters
    ----------
    primary, secondary:
        Occurrences from each family's scan.
    text_length:
        Length of the scanned document. Zero yields an empty index.
    classify:
        Optional resolver mapping matched text to a family. When given, each
        occurrence takes the family the span partitioner would render it
        with; a ``"none"`` answer keeps the scanned family.
    """

    if text_length <= 0:
        return []

    positions: List[MatchPosition] = []
    for occurrence in [*primary, *secondary]:
        family: Family = occurrence.family
        if classify is not None:
            resolved = classify(occurrence.text)
            if resolved != "none":
                family = resolved
        positions.append(
            MatchPosition(
                offset=occurrence.offset,
                term=occurrence.text,
                family=family,
                percentage=occurrence.offset / text_length * 100,
            )
        )

    # Stable: primary entries stay ahead of secondary ones at equal offsets.
    positions.sort(key=lambda position: position.offset)
    return positions


def classify_piece(piece: str, primary: TermFamily, secondary: TermFamily) -> SpanFamily:
    """Resolve the highlight family of a matched piece, primary first."""

    if primary.matches(piece):
        return "primary"
    if secondary.matches(piece):
        return "secondary"
    return "none"


def partition_spans(
    text: str,
    primary_term: Optional[str],
    secondary_term: Optional[str],
) -> List[RenderSpan]:
    """Partition ``text`` into plain and highlighted spans.

    Both families share one alternation (primary literals first). Splitting on
    its capture group yields plain text at even indices and matched text at
    odd indices. Joining the span texts in order always reproduces ``text``.
    Highlighting is best-effort: if the pattern cannot be built or applied the
    whole text comes back as a single plain span.
    """

    text = text or ""
    primary = TermFamily.from_phrase("primary", primary_term)
    secondary = TermFamily.from_phrase("secondary", secondary_term)

    if not primary.is_active and not secondary.is_active:
        return [RenderSpan(text=text)]

    try:
        pattern = compile_patterns([*primary.patterns, *secondary.patterns])
        pieces = pattern.split(text) if pattern is not None else [text]
    except (re.error, ValueError, TypeError) as exc:
        LOGGER.warning("Falling back to plain text, highlight pattern failed: %s", exc)
        return [RenderSpan(text=text)]

    spans: List[RenderSpan] = []
    cursor = 0
    for index, piece in enumerate(pieces):
        start = cursor
        cursor += len(piece)

        family: SpanFamily = "none"
        if index % 2 == 1:
            family = classify_piece(piece, primary, secondary)

        if family == "none":
            spans.append(RenderSpan(text=piece))
        else:
            spans.append(RenderSpan(text=piece, family=family, position_key=start))

    return spans
