"""
Unit tests for comment insight aggregation.
"""
import pytest

from src.services.feedback.insights import EMPTY_DIGEST, aggregate_comment_insights


class TestSentimentBuckets:
    """Tests for sentiment bucketing."""

    def test_one_comment_per_bucket(self, make_comment):
        comments = [
            make_comment(ai_sentiment_score=0.5),
            make_comment(ai_sentiment_score=-0.4),
            make_comment(ai_sentiment_score=0.1),
        ]

        insights = aggregate_comment_insights(comments)

        assert insights.sentiment.positive == 1
        assert insights.sentiment.negative == 1
        assert insights.sentiment.neutral == 1
        assert insights.sentiment.average_score == pytest.approx(0.2 / 3)
        assert insights.to_snapshot()["sentiment_breakdown"]["average_score"] == 0.07

    def test_boundaries_are_neutral(self, make_comment):
        comments = [make_comment(ai_sentiment_score=0.3), make_comment(ai_sentiment_score=-0.3)]

        insights = aggregate_comment_insights(comments)

        assert insights.sentiment.neutral == 2

    def test_unscored_comments_counted_but_not_bucketed(self, make_comment):
        comments = [make_comment(ai_sentiment_score=0.9), make_comment(), make_comment()]

        insights = aggregate_comment_insights(comments)

        assert insights.total_comments == 3
        assert insights.sentiment.scored == 1
        assert insights.sentiment.average_score == pytest.approx(0.9)

    def test_no_scores_gives_zero_average(self, make_comment):
        insights = aggregate_comment_insights([make_comment()])

        assert insights.sentiment.average_score == 0.0


class TestCategoriesAndExpertise:
    """Tests for theme and expertise tallies."""

    def test_top_five_keeps_first_seen_order_on_ties(self, make_comment):
        categories = ["Clarity", "Design", "Market", "Team", "Pricing", "Story"]
        comments = [make_comment(ai_improvement_category=c) for c in categories]

        insights = aggregate_comment_insights(comments)

        assert [t.category for t in insights.key_themes] == categories[:5]

    def test_most_frequent_first(self, make_comment):
        comments = [
            make_comment(ai_improvement_category="Design"),
            make_comment(ai_improvement_category="Clarity"),
            make_comment(ai_improvement_category="Clarity"),
        ]

        insights = aggregate_comment_insights(comments)

        assert insights.key_themes[0].category == "Clarity"
        assert insights.key_themes[0].count == 2

    def test_expertise_histogram(self, make_comment):
        scores = [0.8, 0.7, 0.5, 0.4, 0.2]
        comments = [make_comment(ai_expertise_score=s) for s in scores]

        insights = aggregate_comment_insights(comments)

        assert insights.expertise.high == 1
        assert insights.expertise.mid == 3
        assert insights.expertise.low == 1


class TestDigest:
    """Tests for the text digest sent to the suggestion service."""

    def test_empty_digest(self):
        assert aggregate_comment_insights([]).to_digest() == EMPTY_DIGEST

    def test_digest_mentions_counts_and_top_categories(self, make_comment):
        comments = [
            make_comment(ai_sentiment_score=0.5, ai_improvement_category="Clarity"),
            make_comment(ai_sentiment_score=-0.5, ai_improvement_category="Clarity"),
            make_comment(ai_improvement_category="Design"),
        ]

        digest = aggregate_comment_insights(comments).to_digest()

        assert digest.startswith("Summary of 3 comments:")
        assert "Sentiment: 1 positive, 0 neutral, 1 negative." in digest
        assert "Top Categories: Clarity (2), Design (1)." in digest

    def test_digest_limits_categories(self, make_comment):
        comments = [make_comment(ai_improvement_category=c) for c in ["A", "B", "C", "D"]]

        digest = aggregate_comment_insights(comments).to_digest(top_categories=3)

        assert "D (1)" not in digest
