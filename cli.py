#!/usr/bin/env python3
# cli.py
"""Terminal viewer that prints a document with its search highlights."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import List, Optional

import click

from api.services import DocumentViewer, RenderSpan, SpanRegistry, ViewerState
from api.services.view import marker_title
from client import DocumentAPI
from config import Settings

FAMILY_STYLES = {
    "primary": {"bg": "yellow", "fg": "black"},
    "secondary": {"bg": "magenta", "fg": "black"},
}
MARKER_GLYPHS = {"primary": "●", "secondary": "◆"}


def style_span(span: RenderSpan, *, color: bool = True) -> str:
    """Render a span with its family's highlight treatment."""

    style = FAMILY_STYLES.get(span.family)
    if style is None or not color:
        return span.text
    return click.style(span.text, **style)


def render_minimap(state: ViewerState, height: int) -> List[str]:
    """Lay the match positions out along a track ``height`` rows tall."""

    if state.view is None or not state.view.positions or height < 1:
        return []

    rows: List[List[str]] = [[] for _ in range(height)]
    total = state.view.match_count
    for index, position in enumerate(state.view.positions):
        row = min(int(position.percentage / 100 * height), height - 1)
        rows[row].append(f"{MARKER_GLYPHS[position.family]} {marker_title(position, index, total)}")
    return [f"│ {'  '.join(row)}" if row else "│" for row in rows]


def render_header(state: ViewerState) -> List[str]:
    lines = [click.style(state.doc_id or "", fg="blue", bold=True)]
    document = state.document
    if document is not None:
        if document.one_sentence_summary:
            lines.append(document.one_sentence_summary)
        details = [f"[{document.category}]"] if document.category else []
        if document.date_range_label:
            details.append(document.date_range_label)
        if details:
            lines.append("  ".join(details))
    return lines


def line_of(text: str, offset: int) -> int:
    return text.count("\n", 0, offset)


def excerpt_around(text: str, line: int, context: int) -> str:
    """Return the lines centred on ``line``."""

    lines = text.split("\n")
    start = max(line - context, 0)
    return "\n".join(lines[start : line + context + 1])


def _legend(viewer: DocumentViewer) -> str:
    parts = []
    if viewer.primary_term:
        parts.append(click.style(viewer.primary_term, **FAMILY_STYLES["primary"]))
    if viewer.secondary_term:
        parts.append(click.style(viewer.secondary_term, **FAMILY_STYLES["secondary"]))
    return "  ".join(parts)


@click.command()
@click.argument("doc_id")
@click.option("--term", "-t", default=None, help="Primary phrase to highlight.")
@click.option("--secondary-term", "-s", default=None, help="Secondary phrase to highlight.")
@click.option("--api-url", default=None, help="Override the document store base URL.")
@click.option("--minimap-height", default=None, type=click.IntRange(min=0), help="Rows in the minimap track.")
@click.option(
    "--jump",
    default=None,
    type=click.IntRange(min=1),
    help="Show only the text around the Nth match.",
)
@click.option("--context", default=None, type=click.IntRange(min=0), help="Lines around a jumped-to match.")
@click.option("--color/--no-color", default=True, show_default=True)
def main(
    doc_id: str,
    term: Optional[str],
    secondary_term: Optional[str],
    api_url: Optional[str],
    minimap_height: Optional[int],
    jump: Optional[int],
    context: Optional[int],
    color: bool,
) -> None:
    """Print DOC_ID with TERM and SECONDARY_TERM highlighted."""

    settings = Settings() if api_url is None else Settings(api_base_url=api_url)
    logging.basicConfig(
        level=settings.logging_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if minimap_height is None:
        minimap_height = settings.minimap_height
    if context is None:
        context = settings.jump_context_lines

    viewer = DocumentViewer(DocumentAPI(settings))
    viewer.set_terms(term, secondary_term)
    state = asyncio.run(viewer.open(doc_id))

    if state is None or state.error is not None:
        message = state.error if state is not None else "Document load was superseded"
        click.echo(click.style(f"Error: {message}", fg="red"), err=True)
        sys.exit(1)

    for line in render_header(state):
        click.echo(line, color=color)
    click.echo("")

    view = state.view
    if view is None or not view.text:
        click.echo("(empty document)")
        return

    if jump is not None:
        if jump > view.match_count:
            click.echo(f"Only {view.match_count} matches found.", err=True)
            sys.exit(1)
        registry: SpanRegistry[int] = SpanRegistry()
        registry.register_spans(
            view.spans, lambda span: line_of(view.text, span.position_key or 0)
        )
        shown: List[str] = []
        registry.scroll_to(
            view.positions[jump - 1].offset,
            lambda line, **_: shown.append(excerpt_around(view.text, line, context)),
        )
        click.echo(shown[0] if shown else view.text)
        return

    click.echo("".join(style_span(span, color=color) for span in view.spans), color=color)

    minimap = render_minimap(state, minimap_height)
    if minimap:
        click.echo("")
        click.echo(f"Matches ({view.match_count}):")
        for row in minimap:
            click.echo(row)

    legend = _legend(viewer)
    if legend:
        click.echo("")
        click.echo(legend, color=color)


if __name__ == "__main__":
    main()
