# api/main.py
import logging
from contextlib import asynccontextmanager
from typing import List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from api.services import DocumentView, build_view
from client import DocumentAPI, DocumentFetchError, DocumentNotFoundError, DocumentRecord
from config import Settings

LOGGER = logging.getLogger(__name__)
SETTINGS = Settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    logging.basicConfig(
        level=SETTINGS.logging_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    LOGGER.info("Serving highlights for documents at %s", SETTINGS.api_base_url)
    yield


app = FastAPI(title="SectionLens Highlight API", version="0.1.0", lifespan=lifespan)


def get_document_api() -> DocumentAPI:
    return DocumentAPI(SETTINGS)


class HighlightRequest(BaseModel):
    text: str = ""
    term: Optional[str] = None
    secondary_term: Optional[str] = None


class SpanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    text: str
    family: Literal["primary", "secondary", "none"]
    position_key: Optional[int] = None


class PositionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    offset: int
    term: str
    family: Literal["primary", "secondary"]
    percentage: float = Field(..., ge=0, lt=100)


class HighlightResponse(BaseModel):
    spans: List[SpanOut]
    positions: List[PositionOut]


class DocumentViewResponse(HighlightResponse):
    document: DocumentRecord
    date_range: Optional[str] = None
    term: Optional[str] = None
    secondary_term: Optional[str] = None


def _highlight_payload(view: DocumentView) -> dict:
    return {
        "spans": [SpanOut.model_validate(span) for span in view.spans],
        "positions": [PositionOut.model_validate(position) for position in view.positions],
    }


@app.get("/health")
def health():
    return {"status": "ok"}


# Highlight arbitrary text
@app.post("/highlight", response_model=HighlightResponse)
def highlight(request: HighlightRequest):
    view = build_view(request.text, request.term, request.secondary_term)
    return _highlight_payload(view)


# Highlight a stored document
@app.get("/documents/{doc_id}/view", response_model=DocumentViewResponse)
async def document_view(
    doc_id: str,
    term: Optional[str] = None,
    secondary_term: Optional[str] = None,
    api: DocumentAPI = Depends(get_document_api),
):
    try:
        record, text = await api.load_document(doc_id)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except DocumentFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    view = build_view(text.text, term, secondary_term)
    return {
        "document": record,
        "date_range": record.date_range_label,
        "term": view.primary_term,
        "secondary_term": view.secondary_term,
        **_highlight_payload(view),
    }
