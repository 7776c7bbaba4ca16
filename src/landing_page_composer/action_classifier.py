from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Sequence

from pydantic import ValidationError

from .json_extractor import explain_json_extraction
from .models.action import ACTION_ADAPTER, GenerateAction, PatchAction

logger = logging.getLogger(__name__)

RECOGNIZED_ACTIONS = frozenset({"generate", "patch"})
LEGACY_FIELDS = ("sections", "theme", "metadata")


class ClassificationFailure(str, Enum):
    no_json = "no_json"
    not_an_object = "not_an_object"
    unrecognized_shape = "unrecognized_shape"
    invalid_shape = "invalid_shape"


@dataclass(frozen=True)
class Classification:
    decoder: str | None = None
    action: GenerateAction | PatchAction | None = None
    failure: ClassificationFailure | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.action is not None


def _validate(decoder: str, payload: Mapping[str, Any]) -> Classification:
    try:
        action = ACTION_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        logger.info(
            "Embedded action failed validation",
            extra={"decoder": decoder, "errors": exc.error_count()},
        )
        return Classification(decoder, failure=ClassificationFailure.invalid_shape, detail=str(exc))
    return Classification(decoder, action=action)


def _decode_tagged(payload: Mapping[str, Any]) -> Classification | None:
    if payload.get("action") not in RECOGNIZED_ACTIONS:
        return None
    return _validate("tagged", payload)


def _decode_legacy(payload: Mapping[str, Any]) -> Classification | None:
    if "sections" not in payload:
        return None
    upgraded = {"action": "generate"}
    upgraded.update({name: payload[name] for name in LEGACY_FIELDS if name in payload})
    return _validate("legacy", upgraded)


DECODERS: Sequence[Callable[[Mapping[str, Any]], Classification | None]] = (
    _decode_tagged,
    _decode_legacy,
)


def explain_action(text: str) -> Classification:
    """Classify the JSON embedded in ``text`` and report why nothing matched."""
    report = explain_json_extraction(text)
    if not report.found:
        return Classification(failure=ClassificationFailure.no_json)

    payload = report.value
    if not isinstance(payload, Mapping):
        return Classification(failure=ClassificationFailure.not_an_object)

    for decoder in DECODERS:
        outcome = decoder(payload)
        if outcome is not None:
            return outcome

    return Classification(failure=ClassificationFailure.unrecognized_shape)


def classify_action(text: str) -> GenerateAction | PatchAction | None:
    """Extract the generate/patch action from AI output, upgrading legacy documents."""
    outcome = explain_action(text)
    if outcome.ok:
        logger.debug("Classified embedded action", extra={"decoder": outcome.decoder, "action": outcome.action.action})
    else:
        logger.debug("No action in message", extra={"reason": outcome.failure.value})
    return outcome.action


__all__ = [
    "Classification",
    "ClassificationFailure",
    "DECODERS",
    "classify_action",
    "explain_action",
]
