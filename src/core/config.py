"""
Application settings using Pydantic for validation and type safety.
Security: All sensitive values loaded from environment variables.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration with validation and security best practices."""

    # Application
    app_name: str = Field(default="DeckReview", description="Application name")
    debug: bool = Field(default=False, description="Debug mode flag")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=7010, ge=1, le=65535, description="Server port")

    # Azure OpenAI Configuration
    azure_openai_api_key: Optional[str] = Field(
        default=None,
        description="Azure OpenAI API key (sensitive)"
    )
    azure_openai_endpoint: Optional[str] = Field(
        default=None,
        description="Azure OpenAI endpoint URL"
    )
    azure_openai_deployment: str = Field(
        default="gpt-4o",
        description="Azure OpenAI deployment name for slide rewrite suggestions"
    )
    azure_openai_api_version: str = Field(
        default="2024-10-21",
        description="Azure OpenAI API version"
    )
    azure_openai_nano_deployment: str = Field(
        default="gpt-4.1-nano",
        description="Azure OpenAI nano deployment used for per-comment classification"
    )

    # Feedback analysis
    comment_classification_enabled: bool = Field(
        default=True,
        description="Run sentiment, expertise and topic classification on new comments"
    )
    proposal_generation_enabled: bool = Field(
        default=True,
        description="Allow AI proposal generation from reviewer feedback"
    )
    default_feedback_weight: float = Field(
        default=1.0,
        ge=0,
        description="Weight given to a comment when no role multiplier applies"
    )
    positive_sentiment_threshold: float = Field(
        default=0.3,
        ge=-1,
        le=1,
        description="Sentiment scores above this value count as positive"
    )
    negative_sentiment_threshold: float = Field(
        default=-0.3,
        ge=-1,
        le=1,
        description="Sentiment scores below this value count as negative"
    )
    high_expertise_threshold: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Expertise scores above this value count as high"
    )
    low_expertise_threshold: float = Field(
        default=0.4,
        ge=0,
        le=1,
        description="Expertise scores below this value count as low"
    )
    insight_top_categories: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of improvement categories kept in stored insight snapshots"
    )
    digest_top_categories: int = Field(
        default=3,
        ge=1,
        le=50,
        description="Number of improvement categories mentioned in the AI digest"
    )

    # Sharing
    share_token_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts to create a share link before giving up on token collisions"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @property
    def has_azure_openai(self) -> bool:
        """Check if Azure OpenAI is fully configured."""
        return bool(
            self.azure_openai_api_key
            and self.azure_openai_endpoint
            and self.azure_openai_deployment
        )

    @property
    def llm_provider(self) -> str:
        """Get the active LLM provider name."""
        if self.has_azure_openai:
            return "azure"
        return "none"

    @field_validator("negative_sentiment_threshold")
    @classmethod
    def validate_negative_threshold(cls, v: float, info) -> float:
        """Negative threshold must sit below the positive one."""
        positive = info.data.get("positive_sentiment_threshold")
        if positive is not None and v >= positive:
            raise ValueError("negative_sentiment_threshold must be lower than positive_sentiment_threshold")
        return v

    @field_validator("low_expertise_threshold")
    @classmethod
    def validate_low_expertise_threshold(cls, v: float, info) -> float:
        high = info.data.get("high_expertise_threshold")
        if high is not None and v > high:
            raise ValueError("low_expertise_threshold must not exceed high_expertise_threshold")
        return v

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = ""
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Using lru_cache ensures settings are loaded once and reused.
    """
    return Settings()
