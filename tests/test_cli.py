# tests/test_cli.py
"""Tests for the terminal viewer."""

from __future__ import annotations

from typing import Any, Dict, List

import httpx
from click.testing import CliRunner

import cli
from api.services import build_view
from api.services.view import ViewerState


def _run(monkeypatch, async_client_factory, routes, *args: str):
    captured: List[Dict[str, Any]] = []
    monkeypatch.setattr("client.httpx.AsyncClient", async_client_factory(routes, captured))
    result = CliRunner().invoke(cli.main, ["--api-url", "http://store.local", "--no-color", *args])
    return result, captured


def test_cli_prints_header_text_and_minimap(
    monkeypatch, section_routes, section_text, async_client_factory
) -> None:
    result, captured = _run(
        monkeypatch, async_client_factory, section_routes, "26-1", "-t", "income tax", "-s", "gross"
    )

    assert result.exit_code == 0, result.output
    assert "26-1" in result.output
    assert "Imposes tax on individual income." in result.output
    assert "[Internal Revenue]  1954 to 2017" in result.output
    assert section_text in result.output
    assert "Matches (3):" in result.output
    assert "gross (2/3)" in result.output
    assert captured[0]["init_kwargs"]["base_url"].startswith("http://store.local")


def test_cli_jump_prints_excerpt(monkeypatch, async_client_factory) -> None:
    body = "\n".join(f"line {index}" for index in range(10)) + "\nincome tax here\nlast"
    routes = {
        "/documents/7": lambda request: httpx.Response(200, request=request, json={"doc_id": "7"}),
        "/documents/7/text": lambda request: httpx.Response(200, request=request, json={"text": body}),
    }

    result, _ = _run(
        monkeypatch, async_client_factory, routes, "7", "-t", "income", "--jump", "1", "--context", "1"
    )

    assert result.exit_code == 0, result.output
    assert "line 9\nincome tax here\nlast" in result.output
    assert "line 5" not in result.output


def test_cli_reports_fetch_failure(monkeypatch, async_client_factory) -> None:
    result, _ = _run(monkeypatch, async_client_factory, {}, "missing")

    assert result.exit_code == 1
    assert "Error: Document missing was not found" in result.output


def test_render_minimap_places_markers_by_percentage() -> None:
    state = ViewerState(doc_id="1", text="a" * 90 + "tax" + "b" * 7)
    state.view = build_view(state.text, "tax")

    rows = cli.render_minimap(state, 10)

    assert len(rows) == 10
    assert "tax (1/1)" in rows[9]
    assert all(row == "│" for row in rows[:9])


def test_style_span_without_color() -> None:
    span = build_view("tax", "tax").spans[1]
    assert cli.style_span(span, color=False) == "tax"
    assert cli.style_span(span) != "tax"


def test_excerpt_counts_only_newlines() -> None:
    text = "a\x0cb\nc\nd\ne\nincome here"
    offset = text.index("income")

    assert cli.excerpt_around(text, cli.line_of(text, offset), 0) == "income here"
    assert cli.excerpt_around(text, cli.line_of(text, offset), 4) == text


def test_cli_help_lists_viewer_options() -> None:
    result = CliRunner().invoke(cli.main, ["--help"])

    assert result.exit_code == 0
    for option in ("--term", "--secondary-term", "--api-url", "--minimap-height", "--jump", "--context", "--no-color"):
        assert option in result.output
