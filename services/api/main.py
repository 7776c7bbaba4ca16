from __future__ import annotations

import logging
import os
import uuid
from typing import Any, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from landing_page_composer.content_parser import parse_content
from landing_page_composer.logging_config import get_trace_id, set_trace_id, setup_logging
from landing_page_composer.models.action import Change
from landing_page_composer.models.document import Document
from landing_page_composer.models.page import ActionOutcome, PageRecord
from landing_page_composer.page_store import ActionNotApplicableError, PageNotFoundError, PageStore


class ParseMessageRequest(BaseModel):
    message: str


class CreatePageRequest(BaseModel):
    name: str = Field(min_length=1)
    document: Document | None = None


class ReplaceDocumentRequest(BaseModel):
    document: Document


class ApplyChangesRequest(BaseModel):
    changes: List[Change]


class PageResponse(BaseModel):
    id: str
    name: str
    version: int
    document: dict[str, Any] | None = None

    @staticmethod
    def from_record(record: PageRecord) -> "PageResponse":
        return PageResponse(
            id=record.id,
            name=record.name,
            version=record.version,
            document=record.document.to_wire() if record.document else None,
        )


class MessageResponse(BaseModel):
    parsed: dict[str, Any]
    outcome: ActionOutcome
    page: PageResponse


class ApplyChangesResponse(BaseModel):
    page: PageResponse
    outcome: ActionOutcome


# Environment configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
PROJECT_ID = os.getenv("PROJECT_ID")

# Setup logging
setup_logging(environment=ENVIRONMENT, project_id=PROJECT_ID)
logger = logging.getLogger(__name__)

app = FastAPI(title="Landing Page Composer API", version="0.1.0")

page_store = PageStore()


@app.middleware("http")
async def assign_trace_id(request: Request, call_next):
    set_trace_id(request.headers.get("x-cloud-trace-context") or str(uuid.uuid4()))
    response = await call_next(request)
    response.headers["x-trace-id"] = get_trace_id() or ""
    return response


@app.post("/v1/messages:parse")
async def parse_message(request: ParseMessageRequest) -> JSONResponse:
    parsed = parse_content(request.message)
    return JSONResponse(parsed.to_wire())


@app.post("/v1/pages", response_model=PageResponse)
async def create_page(request: CreatePageRequest) -> PageResponse:
    record = page_store.create_page(name=request.name, document=request.document)
    logger.info("Created page", extra={"page_id": record.id})
    return PageResponse.from_record(record)


@app.get("/v1/pages", response_model=List[PageResponse])
async def list_pages() -> List[PageResponse]:
    return [PageResponse.from_record(record) for record in page_store.list_pages()]


@app.get("/v1/pages/{page_id}", response_model=PageResponse)
async def get_page(page_id: str) -> PageResponse:
    try:
        record = page_store.get_page(page_id)
    except PageNotFoundError:
        raise HTTPException(status_code=404, detail="Page not found")
    return PageResponse.from_record(record)


@app.put("/v1/pages/{page_id}/document", response_model=PageResponse)
async def replace_document(page_id: str, request: ReplaceDocumentRequest) -> PageResponse:
    try:
        record = page_store.replace_document(page_id, request.document)
    except PageNotFoundError:
        raise HTTPException(status_code=404, detail="Page not found")
    return PageResponse.from_record(record)


@app.post("/v1/pages/{page_id}/messages", response_model=MessageResponse)
async def apply_message(page_id: str, request: ParseMessageRequest) -> MessageResponse:
    try:
        parsed, record, outcome = page_store.apply_message(page_id, request.message)
    except PageNotFoundError:
        raise HTTPException(status_code=404, detail="Page not found")
    return MessageResponse(parsed=parsed.to_wire(), outcome=outcome, page=PageResponse.from_record(record))


@app.post("/v1/pages/{page_id}/changes", response_model=ApplyChangesResponse)
async def apply_changes(page_id: str, request: ApplyChangesRequest) -> ApplyChangesResponse:
    try:
        record, outcome = page_store.apply_changes(page_id, request.changes)
    except PageNotFoundError:
        raise HTTPException(status_code=404, detail="Page not found")
    except ActionNotApplicableError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return ApplyChangesResponse(page=PageResponse.from_record(record), outcome=outcome)


@app.get("/health")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok"})
