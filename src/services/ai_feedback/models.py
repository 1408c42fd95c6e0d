"""
Request and response models for the feedback AI service.
Uses Pydantic for structured outputs from the LLM.

Wire names are camelCase; Python attributes are snake_case.
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ProposalCategory = Literal["ContentEdit", "NewSlideElement", "SlideRestructure", "GeneralAdvice"]
RestructureOperation = Literal["ReorderElement", "DeleteElement", "AddNewSlideAfter", "ReorderSlide"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Suggestion request
# =============================================================================

class SuggestionCommentInput(_CamelModel):
    id: str
    text_content: str
    author_display_name: Optional[str] = None
    comment_type: Optional[str] = None
    declared_role: Optional[str] = None


class SlideElementInput(_CamelModel):
    id: str
    type: str
    data: dict[str, Any] = Field(default_factory=dict)


class SlideContentInput(_CamelModel):
    title: str
    elements: list[SlideElementInput] = Field(default_factory=list)


class SuggestionRequest(_CamelModel):
    """Everything the suggestion service needs to rewrite one slide."""

    deck_id: str
    slide_id: str
    comments: list[SuggestionCommentInput]
    slide_content: SlideContentInput
    aggregated_insights_summary: str = ""


# =============================================================================
# Suggestion response
# =============================================================================

class SuggestedContent(_CamelModel):
    new_text: Optional[str] = None
    new_image_url: Optional[str] = None
    new_alt_text: Optional[str] = None
    new_chart_data: Optional[Any] = None
    new_chart_options: Optional[dict[str, Any]] = None


class NewElementSuggestion(_CamelModel):
    component_type: str
    data: dict[str, Any] = Field(default_factory=dict)
    layout: Optional[dict[str, float]] = None


class AiGeneratedSuggestion(_CamelModel):
    """A single improvement suggested by the model."""

    proposal_category: ProposalCategory = Field(
        description="ContentEdit, NewSlideElement, SlideRestructure or GeneralAdvice"
    )
    description: str = Field(description="One-sentence summary of the change")
    confidence_score: float = Field(default=0.5, ge=0, le=1, description="Model confidence 0.0-1.0")
    target_element_id: Optional[str] = Field(default=None, description="Id of the element to change")
    suggested_content: Optional[SuggestedContent] = None
    new_element_data: Optional[NewElementSuggestion] = None
    restructure_operation: Optional[RestructureOperation] = None
    restructure_details: Optional[dict[str, Any]] = Field(
        default=None,
        description="newOrder, targetOrder or newSlideData depending on the operation"
    )
    reasoning: Optional[str] = None


class SuggestionList(BaseModel):
    """Structured output wrapper for the suggestion agent."""
    suggestions: list[AiGeneratedSuggestion] = Field(default_factory=list)


# =============================================================================
# Per-comment classification
# =============================================================================

class SentimentResult(BaseModel):
    score: float = Field(..., ge=-1, le=1, description="-1 very negative, 1 very positive")


class ExpertiseResult(BaseModel):
    expertise_score: float = Field(..., ge=0, le=1, description="0 novice, 1 domain expert")


class TopicCategory(BaseModel):
    category: str = Field(..., description="Improvement category, e.g. 'Clarity' or 'Market Sizing'")


class TopicCategories(BaseModel):
    categories: list[TopicCategory] = Field(default_factory=list, description="Most relevant first")


class CommentClassification(BaseModel):
    """Best-effort classification; a field stays None when its call failed."""
    sentiment_score: Optional[float] = None
    expertise_score: Optional[float] = None
    improvement_category: Optional[str] = None
