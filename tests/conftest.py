"""
Pytest configuration and fixtures.
"""
import pytest
from unittest.mock import AsyncMock, Mock

from src.models import Deck, DeckComment, Section, VisualComponent
from src.services.ai_feedback.models import CommentClassification
from src.services.audit import AuditLogger
from src.services.storage import InMemoryRepository

DECK_ID = "deck-1"
OWNER_ID = "owner-1"


@pytest.fixture
def clean_environment(monkeypatch):
    """Provide a clean environment for tests."""
    env_vars = [
        "AZURE_OPENAI_API_KEY",
        "AZURE_OPENAI_ENDPOINT",
        "AZURE_OPENAI_DEPLOYMENT",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def repository():
    """Empty in-memory repository."""
    return InMemoryRepository()


@pytest.fixture
def audit(repository):
    return AuditLogger(repository)


@pytest.fixture
def sample_deck(repository):
    """
    Two-slide deck stored at version 1.

    slide-1: text-1 (text), img-1 (image)
    slide-2: chart-1 (chart)
    """
    deck = Deck(
        id=DECK_ID,
        title="Seed Round",
        user_id=OWNER_ID,
        sections=[
            Section(
                id="slide-1",
                title="Problem",
                order=0,
                components=[
                    VisualComponent(id="text-1", type="text", data={"text": "Old headline"}, order=0),
                    VisualComponent(id="img-1", type="image", data={"src": "old.png", "alt": "old"}, order=1),
                ],
            ),
            Section(
                id="slide-2",
                title="Traction",
                order=1,
                components=[
                    VisualComponent(
                        id="chart-1",
                        type="chart",
                        data={"chartData": [1, 2, 3], "options": {"legend": True}},
                        order=0,
                    ),
                ],
            ),
        ],
    )
    return repository.save_deck(deck)


@pytest.fixture
def make_comment():
    """Factory for comments on the sample deck."""
    def _make(text="Needs work", slide_id="slide-1", **kwargs):
        return DeckComment(deck_id=DECK_ID, slide_id=slide_id, text_content=text, **kwargs)
    return _make


@pytest.fixture
def mock_ai_service():
    """Available AI service with no suggestions and empty classification."""
    service = Mock()
    service.is_available = True
    service.classify_comment = AsyncMock(return_value=CommentClassification())
    service.generate_slide_rewrite_suggestions = AsyncMock(return_value=[])
    return service
