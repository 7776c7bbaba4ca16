from __future__ import annotations

import re

from .models.action import Choice

CHOICE_MARKER_PATTERN = re.compile(r"\[\[([A-Z])\]\]")
LABEL_SEPARATOR = " - "


def extract_choices(text: str) -> list[Choice]:
    """Parse inline multiple-choice options.

    Format: ``[[A]] Short label - Longer description``. The body of an option
    runs until the next marker or the end of the text.
    """
    markers = list(CHOICE_MARKER_PATTERN.finditer(text))
    choices: list[Choice] = []
    for position, marker in enumerate(markers):
        end = markers[position + 1].start() if position + 1 < len(markers) else len(text)
        body = text[marker.end():end].strip()
        label, separator, description = body.partition(LABEL_SEPARATOR)
        if separator:
            choices.append(
                Choice(key=marker.group(1), label=label.strip(), description=description.strip())
            )
        else:
            choices.append(Choice(key=marker.group(1), label=body.replace("\n", " ").strip()))
    return choices


def strip_choice_markers(text: str) -> str:
    """Remove the ``[[X]]`` markers but keep the surrounding text."""
    return CHOICE_MARKER_PATTERN.sub("", text)


def has_choices(text: str) -> bool:
    return CHOICE_MARKER_PATTERN.search(text) is not None


def first_choice_offset(text: str) -> int | None:
    match = CHOICE_MARKER_PATTERN.search(text)
    return match.start() if match else None


__all__ = [
    "CHOICE_MARKER_PATTERN",
    "extract_choices",
    "first_choice_offset",
    "has_choices",
    "strip_choice_markers",
]
