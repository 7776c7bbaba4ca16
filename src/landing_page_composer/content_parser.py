from __future__ import annotations

import logging

from .action_classifier import classify_action
from .choices import extract_choices, first_choice_offset
from .json_extractor import FENCED_JSON_PATTERN
from .models.action import ParsedContent

logger = logging.getLogger(__name__)


def display_text(message: str, *, has_choices: bool) -> str:
    """Text shown to the user: no fenced JSON, and only the framing copy before any options."""
    text = FENCED_JSON_PATTERN.sub("", message).strip()
    if has_choices:
        offset = first_choice_offset(text)
        if offset:
            text = text[:offset].strip()
    return text


def parse_content(message: str) -> ParsedContent:
    """Parse one assistant message into display text, choices and an action."""
    choices = extract_choices(message)
    action = classify_action(message)
    text = display_text(message, has_choices=bool(choices))

    logger.debug(
        "Parsed assistant message",
        extra={
            "message_length": len(message),
            "choices": len(choices),
            "action": action.action if action else None,
        },
    )

    return ParsedContent(
        text=text,
        choices=choices or None,
        action=action,
    )


__all__ = ["display_text", "parse_content"]
