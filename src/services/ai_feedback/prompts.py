"""Agent instructions and prompt builders for feedback analysis."""
import json

from .models import SuggestionRequest

ELEMENT_PREVIEW_LENGTH = 100

SUGGESTION_AGENT_INSTRUCTIONS = """You are an expert pitch deck editor.
You receive one slide and the reviewer feedback left on it, and you turn that feedback into concrete, actionable improvement proposals.

For each proposal choose a proposalCategory:
- ContentEdit: change an existing element. Set targetElementId and suggestedContent with ONE of newText, newImageUrl (+ newAltText) or newChartData (+ newChartOptions).
- NewSlideElement: add an element. Set newElementData with componentType, data and an optional layout {x, y, width, height}.
- SlideRestructure: set restructureOperation to DeleteElement (targetElementId), ReorderElement (targetElementId, restructureDetails.newOrder), AddNewSlideAfter (restructureDetails.newSlideData, optional restructureDetails.targetOrder) or ReorderSlide (restructureDetails.newOrder).
- GeneralAdvice: feedback that cannot be expressed as a concrete change.

Guidelines:
- Only reference element ids that appear in the slide content
- Weigh feedback from reviewers with relevant declared roles more heavily
- Give every proposal a short description and a confidenceScore between 0.0 and 1.0
- Do not propose the same change twice"""

SENTIMENT_AGENT_INSTRUCTIONS = """You rate the sentiment of a single piece of reviewer feedback on a pitch deck.
Return a score between -1.0 (very negative) and 1.0 (very positive). Constructive criticism phrased politely is close to neutral."""

EXPERTISE_AGENT_INSTRUCTIONS = """You estimate how much domain expertise a reviewer shows in a single comment on a pitch deck.
Return expertise_score between 0.0 (no evident expertise) and 1.0 (clear domain expert: precise terminology, specific benchmarks, concrete experience)."""

TOPIC_AGENT_INSTRUCTIONS = """You categorize reviewer feedback on a pitch deck by the improvement area it addresses.
Return categories ordered from most to least relevant. Use short Title Case names such as Clarity, Design, Market Sizing, Financials, Team, Traction, Storytelling, Competition."""


def build_suggestion_prompt(request: SuggestionRequest) -> str:
    """Build the user prompt for slide rewrite suggestions."""
    feedback = "\n---\n".join(
        f"{c.author_display_name or 'Reviewer'} ({c.declared_role or 'N/A'}, "
        f"type: {c.comment_type or 'General'}) [comment {c.id}]: {c.text_content}"
        for c in request.comments
    )
    elements = "\n".join(
        f"  - ID: {e.id}, Type: {e.type}, Content: {json.dumps(e.data, default=str)[:ELEMENT_PREVIEW_LENGTH]}..."
        for e in request.slide_content.elements
    )
    prompt = f"""Given the following slide content and user feedback, generate actionable improvement proposals.

Slide Title: {request.slide_content.title}
Elements:
{elements or '  (no elements)'}

User Feedback:
{feedback}"""

    if request.aggregated_insights_summary:
        prompt += f"\n\nAggregated Insights Summary for these comments/slide:\n{request.aggregated_insights_summary}"

    return prompt + "\n\nGenerate proposals:"


def build_comment_prompt(text: str) -> str:
    return f'Reviewer comment:\n"""\n{text}\n"""'
