from __future__ import annotations

import logging
import re
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, Sequence

from .content_parser import parse_content
from .models.action import Change, GenerateAction, ParsedContent, PatchAction, action_to_document
from .models.document import Document
from .models.page import ActionOutcome, OutcomeKind, PageRecord, PageRevision
from .patch_engine import apply_changes_with_report

logger = logging.getLogger(__name__)

CHANGE_REQUEST_PATTERN = re.compile(r"\b(change|update|patch|modify|replace)\b", re.IGNORECASE)
APPLY_CHANGES_HINT = 'Ask the AI to "apply the changes" to update your page.'


class PageNotFoundError(KeyError):
    pass


class ActionNotApplicableError(ValueError):
    pass


def unapplied_change_hint(message: str, *, has_document: bool) -> str | None:
    """Nudge for messages that describe edits without carrying the JSON to apply them."""
    if has_document and "```json" not in message and CHANGE_REQUEST_PATTERN.search(message):
        return APPLY_CHANGES_HINT
    return None


class PageStore:
    """In-memory landing page store.

    Actions against one page are serialized through a per-page lock; records
    handed out are copies, so callers never observe a later mutation.
    """

    def __init__(self) -> None:
        self._pages: Dict[str, PageRecord] = {}
        self._page_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def create_page(self, *, name: str, document: Document | None = None) -> PageRecord:
        with self._lock:
            page_id = self._generate_id()
            page = PageRecord(id=page_id, name=name, document=document)
            if document is not None:
                page.version = 1
                page.history.append(PageRevision(version=1, kind=OutcomeKind.generated))
            self._pages[page_id] = page
            self._page_locks[page_id] = threading.Lock()
            return page.model_copy(deep=True)

    def get_page(self, page_id: str) -> PageRecord:
        with self._lock:
            return self._record(page_id).model_copy(deep=True)

    def list_pages(self) -> list[PageRecord]:
        with self._lock:
            return [page.model_copy(deep=True) for page in self._pages.values()]

    def replace_document(self, page_id: str, document: Document) -> PageRecord:
        with self._page_lock(page_id):
            page = self._store(page_id, document, OutcomeKind.generated)
            return page.model_copy(deep=True)

    def apply_changes(self, page_id: str, changes: Sequence[Change]) -> tuple[PageRecord, ActionOutcome]:
        return self.apply_action(page_id, PatchAction(changes=list(changes)))

    def apply_action(
        self,
        page_id: str,
        action: GenerateAction | PatchAction,
    ) -> tuple[PageRecord, ActionOutcome]:
        with self._page_lock(page_id):
            document = self._current_document(page_id)
            if isinstance(action, PatchAction) and document is None:
                raise ActionNotApplicableError(f"Page {page_id} has no document to patch")
            outcome = self._apply(page_id, document, action)
            return self.get_page(page_id), outcome

    def apply_message(self, page_id: str, message: str) -> tuple[ParsedContent, PageRecord, ActionOutcome]:
        """Parse an assistant message and apply whatever action it carries."""
        parsed = parse_content(message)
        with self._page_lock(page_id):
            document = self._current_document(page_id)
            if parsed.action is None:
                outcome = ActionOutcome(
                    kind=OutcomeKind.no_action,
                    hint=unapplied_change_hint(message, has_document=document is not None),
                )
            elif isinstance(parsed.action, PatchAction) and document is None:
                logger.info("Patch ignored for page without a document", extra={"page_id": page_id})
                outcome = ActionOutcome(kind=OutcomeKind.ignored)
            else:
                outcome = self._apply(page_id, document, parsed.action)
            return parsed, self.get_page(page_id), outcome

    def _apply(
        self,
        page_id: str,
        current: Document | None,
        action: GenerateAction | PatchAction,
    ) -> ActionOutcome:
        if isinstance(action, GenerateAction):
            document = action_to_document(action)
            if document is None:
                logger.info("Incomplete generate action ignored", extra={"page_id": page_id})
                return ActionOutcome(kind=OutcomeKind.ignored)
            self._store(page_id, document, OutcomeKind.generated)
            return ActionOutcome(kind=OutcomeKind.generated)

        result = apply_changes_with_report(current, action.changes)
        if result.applied:
            self._store(page_id, result.document, OutcomeKind.patched)
        logger.info(
            "Applied patch",
            extra={"page_id": page_id, "applied": len(result.applied), "skipped": len(result.skipped)},
        )
        return ActionOutcome(
            kind=OutcomeKind.patched,
            applied=len(result.applied),
            skipped=len(result.skipped),
            skip_reasons=[item.reason.value for item in result.skipped],
        )

    def _store(self, page_id: str, document: Document, kind: OutcomeKind) -> PageRecord:
        with self._lock:
            page = self._record(page_id)
            page.document = document
            page.version += 1
            page.updated_at = datetime.now(timezone.utc)
            page.history.append(PageRevision(version=page.version, kind=kind))
            return page

    def _current_document(self, page_id: str) -> Document | None:
        # Stored documents are replaced, never mutated, so no copy is needed here.
        with self._lock:
            return self._record(page_id).document

    def _record(self, page_id: str) -> PageRecord:
        try:
            return self._pages[page_id]
        except KeyError:
            raise PageNotFoundError(page_id) from None

    def _page_lock(self, page_id: str) -> threading.Lock:
        with self._lock:
            self._record(page_id)
            return self._page_locks[page_id]

    def _generate_id(self) -> str:
        ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        suffix = uuid.uuid4().hex[:6]
        return f"page_{ts}_{suffix}"


__all__ = [
    "APPLY_CHANGES_HINT",
    "ActionNotApplicableError",
    "PageNotFoundError",
    "PageStore",
    "unapplied_change_hint",
]
