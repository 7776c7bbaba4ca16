from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Sequence

from pydantic import BaseModel, Field

from .document import Document


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OutcomeKind(str, Enum):
    generated = "GENERATED"
    patched = "PATCHED"
    ignored = "IGNORED"
    no_action = "NO_ACTION"


class ActionOutcome(BaseModel):
    kind: OutcomeKind
    applied: int = 0
    skipped: int = 0
    skip_reasons: Sequence[str] = Field(default_factory=list)
    hint: str | None = None


class PageRevision(BaseModel):
    version: int
    kind: OutcomeKind
    created_at: datetime = Field(default_factory=_utcnow)


class PageRecord(BaseModel):
    id: str
    name: str
    document: Document | None = None
    version: int = 0
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    history: List[PageRevision] = Field(default_factory=list)


__all__ = ["ActionOutcome", "OutcomeKind", "PageRecord", "PageRevision"]
