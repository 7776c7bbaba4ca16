from __future__ import annotations

from typing import Annotated, Any, List, Literal, Union

from pydantic import ConfigDict, Field, TypeAdapter

from .document import Document, PageMetadata, Section, Theme, WireModel

ChangeOp = Literal["add", "remove", "replace", "move", "copy", "test"]


class Change(WireModel):
    op: ChangeOp
    path: str
    value: Any = None
    from_: str | None = Field(default=None, alias="from")


class _TaggedAction(WireModel):
    action: str

    def to_wire(self) -> dict[str, Any]:
        # The tag is emitted even when it was filled in by default.
        return {"action": self.action, **super().to_wire()}


class GenerateAction(_TaggedAction):
    action: Literal["generate"] = "generate"
    sections: List[Section] = Field(default_factory=list)
    theme: Theme | None = None
    metadata: PageMetadata | None = None


class PatchAction(_TaggedAction):
    action: Literal["patch"] = "patch"
    changes: List[Change] = Field(default_factory=list)


Action = Annotated[Union[GenerateAction, PatchAction], Field(discriminator="action")]
ACTION_ADAPTER: TypeAdapter[GenerateAction | PatchAction] = TypeAdapter(Action)


class Choice(WireModel):
    key: str = Field(pattern=r"^[A-Z]$")
    label: str
    description: str | None = None


class ParsedContent(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str
    choices: List[Choice] | None = Field(default=None, min_length=1)
    action: Action | None = None

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"text": self.text}
        if self.choices is not None:
            payload["choices"] = [choice.to_wire() for choice in self.choices]
        if self.action is not None:
            payload["action"] = self.action.to_wire()
        return payload


def to_generate_action(document: Document) -> GenerateAction:
    """Wrap a complete document in the tagged generate form."""
    return GenerateAction(
        sections=[section.model_copy(deep=True) for section in document.sections],
        theme=document.theme.model_copy(deep=True),
        metadata=document.metadata.model_copy(deep=True),
    )


def action_to_document(action: GenerateAction | PatchAction) -> Document | None:
    """Return the document a generate action describes, or None when it is incomplete."""
    if not isinstance(action, GenerateAction):
        return None
    # An explicit empty section list is a valid page; a missing one is not.
    if "sections" not in action.model_fields_set or action.theme is None or action.metadata is None:
        return None
    return Document(
        sections=[section.model_copy(deep=True) for section in action.sections],
        theme=action.theme.model_copy(deep=True),
        metadata=action.metadata.model_copy(deep=True),
    )


__all__ = [
    "ACTION_ADAPTER",
    "Action",
    "Change",
    "ChangeOp",
    "Choice",
    "GenerateAction",
    "ParsedContent",
    "PatchAction",
    "action_to_document",
    "to_generate_action",
]
