from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

from pydantic import ValidationError

from .models.action import Change
from .models.document import Document

logger = logging.getLogger(__name__)

APPEND_TOKEN = "-"


class SkipReason(str, Enum):
    empty_path = "empty_path"
    unresolved_path = "unresolved_path"
    index_out_of_range = "index_out_of_range"
    missing_key = "missing_key"
    unresolved_source = "unresolved_source"
    test_failed = "test_failed"
    invalid_result = "invalid_result"


@dataclass(frozen=True)
class SkippedChange:
    index: int
    change: Change
    reason: SkipReason


@dataclass(frozen=True)
class PatchResult:
    document: Document
    applied: Sequence[int] = field(default_factory=tuple)
    skipped: Sequence[SkippedChange] = field(default_factory=tuple)


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()


def split_path(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def _is_index(component: str) -> bool:
    return component.isascii() and component.isdigit()


def _step(node: Any, component: str) -> Any:
    if isinstance(node, list) and _is_index(component):
        index = int(component)
        return node[index] if index < len(node) else MISSING
    if isinstance(node, dict):
        return node.get(component, MISSING)
    return MISSING


def _resolve(root: Any, parts: Sequence[str]) -> Any:
    node = root
    for component in parts:
        node = _step(node, component)
        if node is MISSING:
            return MISSING
    return node


def _put(tree: Any, parts: Sequence[str], op: str, value: Any) -> SkipReason | None:
    parent = _resolve(tree, parts[:-1])
    last = parts[-1]
    if isinstance(parent, list):
        if last == APPEND_TOKEN and op in ("add", "insert"):
            parent.append(value)
            return None
        if not _is_index(last):
            return SkipReason.unresolved_path
        index = int(last)
        if op == "insert" and index <= len(parent):
            parent.insert(index, value)
        elif index < len(parent):
            parent[index] = value
        elif index == len(parent) and op == "add":
            parent.append(value)
        else:
            return SkipReason.index_out_of_range
        return None
    if isinstance(parent, dict):
        parent[last] = value
        return None
    return SkipReason.unresolved_path


def _delete(tree: Any, parts: Sequence[str]) -> SkipReason | None:
    parent = _resolve(tree, parts[:-1])
    last = parts[-1]
    if isinstance(parent, list):
        if not _is_index(last):
            return SkipReason.unresolved_path
        index = int(last)
        if index >= len(parent):
            return SkipReason.index_out_of_range
        del parent[index]
        return None
    if isinstance(parent, dict):
        if last not in parent:
            return SkipReason.missing_key
        del parent[last]
        return None
    return SkipReason.unresolved_path


def _apply_one(tree: Any, change: Change) -> SkipReason | None:
    parts = split_path(change.path)
    if not parts:
        return SkipReason.empty_path

    if change.op in ("add", "replace"):
        return _put(tree, parts, change.op, copy.deepcopy(change.value))

    if change.op == "remove":
        return _delete(tree, parts)

    if change.op == "test":
        current = _resolve(tree, parts)
        if current is MISSING:
            return SkipReason.unresolved_path
        return None if current == change.value else SkipReason.test_failed

    # move and copy read from another location and insert into lists rather than overwrite
    source = split_path(change.from_ or "")
    if not source:
        return SkipReason.unresolved_source
    value = _resolve(tree, source)
    if value is MISSING:
        return SkipReason.unresolved_source
    if change.op == "move":
        if len(parts) > len(source) and parts[: len(source)] == source:
            # a value cannot be moved into its own descendant
            return SkipReason.unresolved_path
        reason = _delete(tree, source)
        if reason is not None:
            return reason
        return _put(tree, parts, "insert", value)
    return _put(tree, parts, "insert", copy.deepcopy(value))


def apply_changes_with_report(document: Document, changes: Sequence[Change]) -> PatchResult:
    """Apply changes in order to a copy of ``document`` and report skipped ones.

    Each change runs against a scratch copy of the working tree; it is kept only
    when it resolves and the tree still validates as a Document. A skipped change
    leaves the tree exactly as the previous change left it.
    """
    tree = copy.deepcopy(document.to_wire())
    applied: list[int] = []
    skipped: list[SkippedChange] = []

    for index, change in enumerate(changes):
        candidate = copy.deepcopy(tree)
        reason = _apply_one(candidate, change)
        if reason is None:
            try:
                Document.model_validate(candidate)
            except ValidationError:
                reason = SkipReason.invalid_result
        if reason is not None:
            logger.debug(
                "Skipped change",
                extra={"index": index, "op": change.op, "path": change.path, "reason": reason.value},
            )
            skipped.append(SkippedChange(index=index, change=change, reason=reason))
            continue
        tree = candidate
        applied.append(index)

    if skipped:
        logger.info(
            "Applied changes with skips",
            extra={"applied": len(applied), "skipped": len(skipped)},
        )

    return PatchResult(
        document=Document.model_validate(tree),
        applied=tuple(applied),
        skipped=tuple(skipped),
    )


def apply_changes(document: Document, changes: Sequence[Change]) -> Document:
    """Return a new document with ``changes`` applied; the input is left untouched."""
    return apply_changes_with_report(document, changes).document


__all__ = [
    "PatchResult",
    "SkipReason",
    "SkippedChange",
    "apply_changes",
    "apply_changes_with_report",
    "split_path",
]
