"""
Comment insight aggregation.

A pure reduction over a comment set: sentiment buckets, top improvement
categories and an expertise histogram. The same result renders as a short
digest for the suggestion service and as a structured snapshot for storage.
"""
from collections import Counter
from typing import Iterable

from pydantic import BaseModel, Field

from src.models import DeckComment

POSITIVE_THRESHOLD = 0.3
NEGATIVE_THRESHOLD = -0.3
HIGH_EXPERTISE_THRESHOLD = 0.7
LOW_EXPERTISE_THRESHOLD = 0.4
TOP_CATEGORIES = 5
DIGEST_TOP_CATEGORIES = 3

EMPTY_DIGEST = "No specific comments to summarize for insights."


class SentimentBreakdown(BaseModel):
    positive: int = 0
    neutral: int = 0
    negative: int = 0
    average_score: float = 0.0

    @property
    def scored(self) -> int:
        return self.positive + self.neutral + self.negative


class ExpertiseDistribution(BaseModel):
    low: int = 0
    mid: int = 0
    high: int = 0


class CategoryCount(BaseModel):
    category: str
    count: int


class CommentInsights(BaseModel):
    """Aggregated view of a comment set."""

    total_comments: int = 0
    sentiment: SentimentBreakdown = Field(default_factory=SentimentBreakdown)
    key_themes: list[CategoryCount] = Field(default_factory=list)
    expertise: ExpertiseDistribution = Field(default_factory=ExpertiseDistribution)

    def to_digest(self, top_categories: int = DIGEST_TOP_CATEGORIES) -> str:
        """Short natural-language summary sent along with generation requests."""
        if self.total_comments == 0:
            return EMPTY_DIGEST

        summary = (
            f"Summary of {self.total_comments} comments:\n"
            f"Sentiment: {self.sentiment.positive} positive, {self.sentiment.neutral} neutral, "
            f"{self.sentiment.negative} negative.\n"
            f"Expertise: High {self.expertise.high}, Mid {self.expertise.mid}, Low {self.expertise.low}."
        )
        themes = ", ".join(f"{t.category} ({t.count})" for t in self.key_themes[:top_categories])
        if themes:
            summary += f"\nTop Categories: {themes}."
        return summary

    def to_snapshot(self) -> dict:
        """Structured record stored as an analytics insight."""
        return {
            "total_comments": self.total_comments,
            "sentiment_breakdown": {
                "positive": self.sentiment.positive,
                "neutral": self.sentiment.neutral,
                "negative": self.sentiment.negative,
                "average_score": round(self.sentiment.average_score, 2),
            },
            "key_themes": [t.model_dump() for t in self.key_themes],
            "expertise_distribution": self.expertise.model_dump(),
        }


def aggregate_comment_insights(
    comments: Iterable[DeckComment],
    *,
    positive_threshold: float = POSITIVE_THRESHOLD,
    negative_threshold: float = NEGATIVE_THRESHOLD,
    high_expertise_threshold: float = HIGH_EXPERTISE_THRESHOLD,
    low_expertise_threshold: float = LOW_EXPERTISE_THRESHOLD,
    top_categories: int = TOP_CATEGORIES,
) -> CommentInsights:
    """
    Reduce a comment set to insight counts.

    Comments without a sentiment score are left out of the sentiment buckets
    and the mean but still counted in ``total_comments``.
    """
    total = 0
    sentiment = SentimentBreakdown()
    expertise = ExpertiseDistribution()
    categories: Counter[str] = Counter()
    score_sum = 0.0

    for comment in comments:
        total += 1

        score = comment.ai_sentiment_score
        if score is not None:
            score_sum += score
            if score > positive_threshold:
                sentiment.positive += 1
            elif score < negative_threshold:
                sentiment.negative += 1
            else:
                sentiment.neutral += 1

        if comment.ai_improvement_category:
            categories[comment.ai_improvement_category] += 1

        level = comment.ai_expertise_score
        if level is not None:
            if level > high_expertise_threshold:
                expertise.high += 1
            elif level < low_expertise_threshold:
                expertise.low += 1
            else:
                expertise.mid += 1

    if sentiment.scored:
        sentiment.average_score = score_sum / sentiment.scored

    return CommentInsights(
        total_comments=total,
        sentiment=sentiment,
        key_themes=[
            CategoryCount(category=category, count=count)
            for category, count in categories.most_common(top_categories)
        ],
        expertise=expertise,
    )
