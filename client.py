# client.py
"""HTTP client for the document store backing the section viewer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Optional, Tuple, Type, TypeVar
from urllib.parse import quote

import httpx
from httpx import AsyncClient
from pydantic import BaseModel, Field, ValidationError

from config import Settings

LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _segment(doc_id: str) -> str:
    """Quote an identifier for use as a single URL path segment."""

    return quote(doc_id, safe="")


class DocumentFetchError(RuntimeError):
    """Raised when a document or its text cannot be retrieved."""


class DocumentNotFoundError(DocumentFetchError):
    """Raised when the document store has no record for the identifier."""


class DocumentRecord(BaseModel):
    """Metadata describing a single document (a code section)."""

    doc_id: str = Field(..., min_length=1)
    file_path: str = ""
    one_sentence_summary: str = ""
    paragraph_summary: str = ""
    category: str = ""
    date_range_earliest: Optional[str] = None
    date_range_latest: Optional[str] = None

    @property
    def date_range_label(self) -> Optional[str]:
        """Human-readable date range, collapsing identical endpoints."""

        if not self.date_range_earliest:
            return None
        if self.date_range_latest and self.date_range_latest != self.date_range_earliest:
            return f"{self.date_range_earliest} to {self.date_range_latest}"
        return self.date_range_earliest


class DocumentText(BaseModel):
    """Raw body text of a document."""

    text: str


class DocumentAPI:
    """Typed client for the document store HTTP API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[AsyncClient]:
        """Yield an AsyncClient configured for the document store."""

        async with httpx.AsyncClient(
            base_url=str(self._settings.api_base_url),
            timeout=self._settings.request_timeout_seconds,
            follow_redirects=True,
        ) as client:
            yield client

    async def _get(self, path: str, model: Type[ModelT], doc_id: str) -> ModelT:
        try:
            async with self._client() as client:
                response = await client.get(path)
                response.raise_for_status()
                payload: Any = response.json()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise DocumentNotFoundError(f"Document {doc_id} was not found") from exc
            raise DocumentFetchError(
                f"Document store returned {exc.response.status_code} for {doc_id}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DocumentFetchError(f"Unable to reach document store: {exc}") from exc
        except ValueError as exc:
            raise DocumentFetchError(f"Document store sent malformed JSON for {doc_id}") from exc

        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise DocumentFetchError(f"Unexpected payload for {doc_id}: {exc}") from exc

    async def fetch_metadata(self, doc_id: str) -> DocumentRecord:
        """Fetch the metadata record for ``doc_id``."""

        return await self._get(f"/documents/{_segment(doc_id)}", DocumentRecord, doc_id)

    async def fetch_text(self, doc_id: str) -> DocumentText:
        """Fetch the body text for ``doc_id``."""

        return await self._get(f"/documents/{_segment(doc_id)}/text", DocumentText, doc_id)

    async def load_document(self, doc_id: str) -> Tuple[DocumentRecord, DocumentText]:
        """Fetch metadata and text concurrently; either failing fails both."""

        try:
            record, text = await asyncio.gather(
                self.fetch_metadata(doc_id),
                self.fetch_text(doc_id),
            )
        except DocumentFetchError as exc:
            LOGGER.error("Loading %s failed: %s", doc_id, exc)
            raise

        LOGGER.debug("Loaded %s (%d characters)", doc_id, len(text.text))
        return record, text
