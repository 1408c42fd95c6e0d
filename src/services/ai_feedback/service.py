"""
Feedback AI Service

Per-comment classification (sentiment, expertise, topic) and slide rewrite
suggestions. Classification runs on the lightweight nano deployment; slide
rewrites use the main deployment.

Uses Microsoft Agent Framework for consistent orchestration across all AI services.
"""
import asyncio
import logging
from typing import Optional, TypeVar

from agent_framework import ChatMessage, Role
from agent_framework.azure import AzureOpenAIChatClient
from azure.identity import DefaultAzureCredential
from pydantic import BaseModel, ValidationError

from src.core import get_settings

from .models import (
    AiGeneratedSuggestion,
    CommentClassification,
    ExpertiseResult,
    SentimentResult,
    SuggestionList,
    SuggestionRequest,
    TopicCategories,
    TopicCategory,
)
from .prompts import (
    EXPERTISE_AGENT_INSTRUCTIONS,
    SENTIMENT_AGENT_INSTRUCTIONS,
    SUGGESTION_AGENT_INSTRUCTIONS,
    TOPIC_AGENT_INSTRUCTIONS,
    build_comment_prompt,
    build_suggestion_prompt,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class FeedbackAIService:
    """
    Service for AI analysis of reviewer feedback.

    Every call is independent: a failing classifier call raises from its own
    method, and ``classify_comment`` settles all three calls before reading
    the results.
    """

    def __init__(self):
        """Initialize the Feedback AI service."""
        self._settings = get_settings()
        self._suggestion_agent = None
        self._sentiment_agent = None
        self._expertise_agent = None
        self._topic_agent = None

    @property
    def is_available(self) -> bool:
        """Check if the Feedback AI service is available."""
        return self._settings.has_azure_openai

    def _ensure_client(self) -> None:
        """Ensure the chat clients and agents are initialized."""
        if self._suggestion_agent is not None:
            return
        if not self._settings.has_azure_openai:
            raise ValueError("Azure OpenAI is not configured")

        credential = DefaultAzureCredential()
        main_client = AzureOpenAIChatClient(
            credential=credential,
            endpoint=self._settings.azure_openai_endpoint or "",
            deployment_name=self._settings.azure_openai_deployment,
            api_version=self._settings.azure_openai_api_version,
        )
        nano_client = AzureOpenAIChatClient(
            credential=credential,
            endpoint=self._settings.azure_openai_endpoint or "",
            deployment_name=self._settings.azure_openai_nano_deployment,
            api_version=self._settings.azure_openai_api_version,
        )

        self._suggestion_agent = main_client.create_agent(
            name="SlideRewriteAgent",
            instructions=SUGGESTION_AGENT_INSTRUCTIONS,
        )
        self._sentiment_agent = nano_client.create_agent(
            name="SentimentAgent",
            instructions=SENTIMENT_AGENT_INSTRUCTIONS,
        )
        self._expertise_agent = nano_client.create_agent(
            name="ExpertiseAgent",
            instructions=EXPERTISE_AGENT_INSTRUCTIONS,
        )
        self._topic_agent = nano_client.create_agent(
            name="TopicAgent",
            instructions=TOPIC_AGENT_INSTRUCTIONS,
        )

    async def _run_structured(self, agent, prompt: str, output_model: type[T]) -> T:
        """Run an agent with structured output, falling back to JSON text."""
        response = await agent.run(
            [ChatMessage(role=Role.USER, text=prompt)],
            response_format=output_model,
        )
        if response.value:
            return response.value
        if response.text:
            return output_model.model_validate_json(response.text)
        raise ValueError(f"No {output_model.__name__} in agent response")

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        self._ensure_client()
        return await self._run_structured(
            self._sentiment_agent, build_comment_prompt(text), SentimentResult
        )

    async def detect_expertise(self, text: str) -> ExpertiseResult:
        self._ensure_client()
        return await self._run_structured(
            self._expertise_agent, build_comment_prompt(text), ExpertiseResult
        )

    async def categorize_topics(self, text: str) -> list[TopicCategory]:
        self._ensure_client()
        result = await self._run_structured(
            self._topic_agent, build_comment_prompt(text), TopicCategories
        )
        return result.categories

    async def classify_comment(self, text: str) -> CommentClassification:
        """
        Classify a comment with all three classifiers.

        Calls are settled independently; a failure leaves only its own
        field unset.
        """
        classification = CommentClassification()
        if not text or not self.is_available:
            return classification

        sentiment, expertise, topics = await asyncio.gather(
            self.analyze_sentiment(text),
            self.detect_expertise(text),
            self.categorize_topics(text),
            return_exceptions=True,
        )

        if isinstance(sentiment, BaseException):
            logger.error(f"Error analyzing sentiment: {sentiment}")
        else:
            classification.sentiment_score = sentiment.score

        if isinstance(expertise, BaseException):
            logger.error(f"Error detecting expertise: {expertise}")
        else:
            classification.expertise_score = expertise.expertise_score

        if isinstance(topics, BaseException):
            logger.error(f"Error categorizing comment topics: {topics}")
        elif topics:
            classification.improvement_category = topics[0].category

        return classification

    # -------------------------------------------------------------------------
    # Slide rewrite suggestions
    # -------------------------------------------------------------------------

    async def generate_slide_rewrite_suggestions(
        self,
        request: SuggestionRequest,
    ) -> list[AiGeneratedSuggestion]:
        """
        Ask the model for improvement suggestions for one slide.

        Returns:
            Suggestions in model order; empty when the service is unavailable
            or the call fails.
        """
        if not self.is_available:
            return []

        try:
            self._ensure_client()
            result = await self._run_structured(
                self._suggestion_agent, build_suggestion_prompt(request), SuggestionList
            )
            return result.suggestions
        except (ValidationError, ValueError) as e:
            logger.error(f"Invalid suggestion response for slide {request.slide_id}: {e}")
            return []
        except Exception as e:
            logger.error(f"Failed to generate slide rewrite suggestions: {e}")
            return []


# Singleton instance
_feedback_ai_service: Optional[FeedbackAIService] = None


def get_feedback_ai_service() -> FeedbackAIService:
    """Get the singleton Feedback AI service instance."""
    global _feedback_ai_service
    if _feedback_ai_service is None:
        _feedback_ai_service = FeedbackAIService()
    return _feedback_ai_service
