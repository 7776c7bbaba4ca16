from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence

logger = logging.getLogger(__name__)

FENCED_JSON_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")


class ExtractionStrategy(str, Enum):
    fenced_block = "fenced_block"
    action_object = "action_object"
    sections_object = "sections_object"


class ExtractionFailure(str, Enum):
    no_candidate = "no_candidate"
    missing_marker_key = "missing_marker_key"
    invalid_json = "invalid_json"


@dataclass(frozen=True)
class Extraction:
    """Outcome of one extraction strategy: either a value or the reason there is none."""

    strategy: ExtractionStrategy
    value: Any = None
    failure: ExtractionFailure | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class ExtractionReport:
    attempts: Sequence[Extraction] = field(default_factory=tuple)

    @property
    def result(self) -> Extraction | None:
        for attempt in self.attempts:
            if attempt.ok:
                return attempt
        return None

    @property
    def found(self) -> bool:
        return self.result is not None

    @property
    def value(self) -> Any:
        result = self.result
        return result.value if result else None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _parse(strategy: ExtractionStrategy, candidate: str) -> Extraction:
    try:
        value = json.loads(candidate, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        logger.debug(
            "Discarded malformed JSON candidate",
            extra={"strategy": strategy.value, "error": str(exc), "candidate_length": len(candidate)},
        )
        return Extraction(strategy, failure=ExtractionFailure.invalid_json, detail=str(exc))
    return Extraction(strategy, value=value)


def _from_fenced_block(text: str) -> Extraction:
    match = FENCED_JSON_PATTERN.search(text)
    if not match:
        return Extraction(ExtractionStrategy.fenced_block, failure=ExtractionFailure.no_candidate)
    return _parse(ExtractionStrategy.fenced_block, match.group(1))


def _outer_brace_span(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def _brace_span_with_key(strategy: ExtractionStrategy, key: str) -> Callable[[str], Extraction]:
    marker = f'"{key}"'

    def attempt(text: str) -> Extraction:
        candidate = _outer_brace_span(text)
        if candidate is None:
            return Extraction(strategy, failure=ExtractionFailure.no_candidate)
        if marker not in candidate:
            return Extraction(strategy, failure=ExtractionFailure.missing_marker_key, detail=marker)
        return _parse(strategy, candidate)

    return attempt


STRATEGIES: Sequence[Callable[[str], Extraction]] = (
    _from_fenced_block,
    _brace_span_with_key(ExtractionStrategy.action_object, "action"),
    # Legacy documents carry no action wrapper.
    _brace_span_with_key(ExtractionStrategy.sections_object, "sections"),
)


def explain_json_extraction(text: str) -> ExtractionReport:
    """Run the strategies in order, stopping at the first success."""
    attempts: list[Extraction] = []
    for strategy in STRATEGIES:
        attempt = strategy(text)
        attempts.append(attempt)
        if attempt.ok:
            break
    return ExtractionReport(attempts=tuple(attempts))


def extract_json(text: str) -> Any | None:
    """Recover an embedded JSON payload from AI output.

    Looks for a fenced ```json block first, then for a raw object that carries
    an ``"action"`` key, then for a legacy object with ``"sections"``. Returns
    None when the message is plain prose or every candidate is malformed.
    """
    return explain_json_extraction(text).value


__all__ = [
    "ExtractionFailure",
    "ExtractionReport",
    "ExtractionStrategy",
    "Extraction",
    "FENCED_JSON_PATTERN",
    "explain_json_extraction",
    "extract_json",
]
