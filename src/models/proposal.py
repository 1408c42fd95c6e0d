"""
AI update proposal models.

A proposal's payload is a tagged union: one variant per change type,
discriminated by the ``kind`` field. The persisted record stores the payload
without its tag and re-tags it from ``change_type`` on load.
"""
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from .deck import ComponentLayout, new_id, utc_now


class ChangeType(str, Enum):
    TEXT_EDIT = "TextEdit"
    IMAGE_SWAP = "ImageSwap"
    CHART_UPDATE = "ChartUpdate"
    NEW_ELEMENT = "NewElement"
    DELETE_ELEMENT = "DeleteElement"
    REORDER_ELEMENT = "ReorderElement"
    NEW_SLIDE = "NewSlide"
    REORDER_SLIDE = "ReorderSlide"


class ProposalStatus(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    MODIFIED = "Modified"
    ARCHIVED = "Archived"

    @property
    def is_terminal(self) -> bool:
        return self is not ProposalStatus.PENDING


class TextEditData(BaseModel):
    """Replace a component's text. ``note`` alone carries unstructured advice."""
    kind: Literal["TextEdit"] = "TextEdit"
    new_text_content: Optional[str] = None
    note: Optional[str] = None


class ImageSwapData(BaseModel):
    kind: Literal["ImageSwap"] = "ImageSwap"
    new_image_url: str
    new_alt_text: Optional[str] = None


class ChartUpdateData(BaseModel):
    kind: Literal["ChartUpdate"] = "ChartUpdate"
    new_data: Any
    new_chart_options: Optional[dict[str, Any]] = None


class NewElementData(BaseModel):
    kind: Literal["NewElement"] = "NewElement"
    component_type: str
    data: dict[str, Any] = Field(default_factory=dict)
    layout: Optional[ComponentLayout] = None


class DeleteElementData(BaseModel):
    kind: Literal["DeleteElement"] = "DeleteElement"


class ReorderElementData(BaseModel):
    kind: Literal["ReorderElement"] = "ReorderElement"
    new_order: int = Field(..., ge=0)


class NewSlideData(BaseModel):
    kind: Literal["NewSlide"] = "NewSlide"
    new_slide_data: dict[str, Any] = Field(default_factory=dict)
    target_order: int = Field(..., ge=0)


class ReorderSlideData(BaseModel):
    kind: Literal["ReorderSlide"] = "ReorderSlide"
    new_order: int = Field(..., ge=0)


ProposedContent = Annotated[
    Union[
        TextEditData,
        ImageSwapData,
        ChartUpdateData,
        NewElementData,
        DeleteElementData,
        ReorderElementData,
        NewSlideData,
        ReorderSlideData,
    ],
    Field(discriminator="kind"),
]

_proposed_content_adapter = TypeAdapter(ProposedContent)


def parse_proposed_content(change_type: ChangeType | str, raw: Optional[dict]) -> ProposedContent:
    """Build a typed payload from an untagged stored dict."""
    change_type = ChangeType(change_type)
    return _proposed_content_adapter.validate_python({**(raw or {}), "kind": change_type.value})


class DeckAiUpdateProposal(BaseModel):
    """A reviewable, typed suggestion to mutate one slide."""

    id: str = Field(default_factory=new_id)
    deck_id: str
    slide_id: str
    element_id: Optional[str] = None
    change_type: ChangeType
    description: str = ""
    original_content_snapshot: Optional[Any] = None
    proposed_content_data: ProposedContent
    source_comment_ids: list[str] = Field(default_factory=list)
    ai_confidence_score: float = Field(default=0.0, ge=0, le=1)
    weighted_feedback_score: float = Field(default=1.0, ge=0)
    status: ProposalStatus = ProposalStatus.PENDING
    owner_action_notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_payload_matches_change_type(self):
        if self.proposed_content_data.kind != self.change_type.value:
            raise ValueError(
                f"Payload kind {self.proposed_content_data.kind} does not match change type {self.change_type.value}"
            )
        return self

    def payload_dict(self) -> dict[str, Any]:
        """Untagged JSON-compatible payload, as persisted."""
        return self.proposed_content_data.model_dump(mode="json", exclude={"kind"}, exclude_none=True)

    def to_record(self) -> dict[str, Any]:
        """Flatten into the persisted proposal record."""
        return {
            "id": self.id,
            "deck_id": self.deck_id,
            "slide_id": self.slide_id,
            "element_id": self.element_id,
            "change_type": self.change_type.value,
            "description": self.description,
            "original_content_snapshot": self.original_content_snapshot,
            "proposed_content_data": self.payload_dict(),
            "source_comment_ids": list(self.source_comment_ids),
            "ai_confidence_score": self.ai_confidence_score,
            "weighted_feedback_score": self.weighted_feedback_score,
            "status": self.status.value,
            "owner_action_notes": self.owner_action_notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "DeckAiUpdateProposal":
        """Rebuild a proposal from its persisted record."""
        data = dict(record)
        data["proposed_content_data"] = parse_proposed_content(
            data["change_type"], data.get("proposed_content_data")
        )
        return cls.model_validate(data)
