"""Deck-related Pydantic models."""
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Closed registry of component type tags the renderer knows about.
COMPONENT_TYPES = frozenset({
    "text",
    "heading",
    "image",
    "chart",
    "list",
    "quote",
    "table",
    "code",
    "video",
    "button",
    "shape",
    "divider",
    "icon",
    "embed",
    "callout",
    "team_card",
    "traction_widget",
    "timeline",
    "market_map",
    "competitor_table",
    "problem_solution",
    "logo_wall",
    "business_model",
    "testimonial_card",
    "use_of_funds",
    "cta_card",
    "metric_counter",
    "investment_ask",
    "hero_image",
    "image_gallery",
    "stats_display",
})


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ComponentLayout(BaseModel):
    """Position and size of a component on the slide canvas."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    x: float = Field(default=0, description="Left offset")
    y: float = Field(default=0, description="Top offset")
    width: float = Field(default=100, ge=0, description="Component width")
    height: float = Field(default=50, ge=0, description="Component height")
    z_index: int = Field(default=0, description="Stacking order")


class VisualComponent(BaseModel):
    """A single visual element on a slide."""

    id: str = Field(default_factory=new_id, description="Unique component identifier")
    type: str = Field(..., description="Component type tag from the registry")
    data: dict[str, Any] = Field(default_factory=dict, description="Type-dependent payload")
    layout: ComponentLayout = Field(default_factory=ComponentLayout, description="Canvas layout")
    order: int = Field(default=0, ge=0, description="Position within the section")

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Only registered component types are accepted."""
        if v not in COMPONENT_TYPES:
            raise ValueError(f"Unknown component type: {v}")
        return v

    def text_field(self) -> str:
        """Name of the data key holding this component's text."""
        if isinstance(self.data.get("textContent"), str):
            return "textContent"
        return "text"


class Section(BaseModel):
    """A slide: a titled, ordered list of components."""

    # Slide data generated by the suggestion agent arrives in camelCase.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id, description="Unique slide identifier")
    type: str = Field(default="content", description="Section type tag")
    title: str = Field(default="", description="Slide title")
    components: list[VisualComponent] = Field(default_factory=list)
    order: int = Field(default=0, ge=0, description="Position within the deck")
    width: Optional[int] = None
    height: Optional[int] = None
    slide_style: Optional[dict[str, Any]] = None
    presenter_notes: Optional[str] = None

    def find_component(self, component_id: str) -> Optional[VisualComponent]:
        """Look up a component by id."""
        return next((c for c in self.components if c.id == component_id), None)

    def resequence(self) -> None:
        """Renumber component orders to 0..n-1 in list order."""
        for index, component in enumerate(self.components):
            component.order = index


class Deck(BaseModel):
    """A pitch deck owned by exactly one user."""

    id: str = Field(default_factory=new_id, description="Unique deck identifier")
    title: str = Field(..., description="Deck title")
    sections: list[Section] = Field(default_factory=list)
    theme: Optional[dict[str, Any]] = None
    template_id: Optional[str] = None
    user_id: Optional[str] = Field(default=None, description="Owner user id")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    version: int = Field(default=0, ge=0, description="Incremented on every successful save")

    def find_section(self, section_id: str) -> Optional[Section]:
        """Look up a section by id."""
        return next((s for s in self.sections if s.id == section_id), None)

    def resequence(self) -> None:
        """Renumber section orders to 0..n-1 in list order."""
        for index, section in enumerate(self.sections):
            section.order = index

    def has_contiguous_order(self) -> bool:
        """Check that section orders form a 0-based permutation."""
        return sorted(s.order for s in self.sections) == list(range(len(self.sections)))
