# tests/conftest.py
"""Shared pytest fixtures."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

import httpx
import pytest

SECTION_TEXT = "Income tax applies to gross income."


class DummySettings:
    """Minimal settings object matching the attributes used by DocumentAPI."""

    def __init__(self, base_url: str = "http://store.local", timeout: float = 30.0) -> None:
        self.api_base_url = base_url
        self.request_timeout_seconds = timeout
        self.log_level = "INFO"

    @property
    def logging_level(self) -> int:
        return logging.INFO


def make_async_client(
    routes: Dict[str, Callable[[httpx.Request], httpx.Response]],
    captured: List[Dict[str, Any]],
) -> type:
    """Build an httpx.AsyncClient stand-in serving canned responses per path."""

    class DummyAsyncClient:
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            self.base_url = str(kwargs.get("base_url", ""))
            captured.append({"init_kwargs": kwargs})

        async def __aenter__(self) -> "DummyAsyncClient":
            return self

        async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
            return None

        async def get(self, url: str, params: Dict[str, Any] | None = None) -> httpx.Response:
            request = httpx.Request("GET", f"{self.base_url}{url}")
            captured.append({"url": url, "params": params or {}})
            handler = routes.get(url)
            if handler is None:
                return httpx.Response(404, request=request, json={"detail": "Not Found"})
            return handler(request)

    return DummyAsyncClient


@pytest.fixture
def dummy_settings() -> DummySettings:
    return DummySettings()


@pytest.fixture
def section_routes() -> Dict[str, Callable[[httpx.Request], httpx.Response]]:
    """Routes for a document store holding a single section."""

    def metadata(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            request=request,
            json={
                "doc_id": "26-1",
                "file_path": "title26/section1.txt",
                "one_sentence_summary": "Imposes tax on individual income.",
                "paragraph_summary": "",
                "category": "Internal Revenue",
                "date_range_earliest": "1954",
                "date_range_latest": "2017",
            },
        )

    def text(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, request=request, json={"text": SECTION_TEXT})

    return {"/documents/26-1": metadata, "/documents/26-1/text": text}


@pytest.fixture
def section_text() -> str:
    return SECTION_TEXT


@pytest.fixture
def async_client_factory() -> Callable[..., type]:
    return make_async_client
