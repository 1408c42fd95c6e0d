"""
Unit tests for API endpoints.
"""
import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from fastapi import FastAPI

from src.api.errors import register_exception_handlers
from src.api.routes.comments import router as comments_router
from src.api.routes.decks import router as decks_router
from src.api.routes.proposals import router as proposals_router
from src.api.routes.sharing import router as sharing_router
from src.models import ChangeType, DeckAiUpdateProposal, DeleteElementData
from src.services.ai_feedback.models import AiGeneratedSuggestion, SuggestedContent
from src.services.deck_review import DeckReviewService

ROUTE_MODULES = ["decks", "comments", "proposals", "sharing"]


@pytest.fixture
def service(repository, mock_ai_service):
    return DeckReviewService(repository=repository, ai_service=mock_ai_service)


@pytest.fixture
def app(service):
    """Create a test FastAPI application."""
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(decks_router)
    app.include_router(comments_router)
    app.include_router(proposals_router)
    app.include_router(sharing_router)

    patches = [
        patch(f"src.api.routes.{name}.get_deck_review_service", return_value=service)
        for name in ROUTE_MODULES
    ]
    for p in patches:
        p.start()
    yield app
    for p in patches:
        p.stop()


@pytest.fixture
def client(app):
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def pending_delete(repository, sample_deck):
    proposal = DeckAiUpdateProposal(
        deck_id="deck-1",
        slide_id="slide-1",
        element_id="img-1",
        change_type=ChangeType.DELETE_ELEMENT,
        proposed_content_data=DeleteElementData(),
    )
    repository.insert_proposal(proposal.to_record())
    return proposal


class TestDecksAPI:
    """Tests for deck endpoints."""

    def test_get_deck(self, client, sample_deck):
        response = client.get("/api/decks/deck-1")

        assert response.status_code == 200
        assert response.json()["title"] == "Seed Round"

    def test_get_missing_deck(self, client):
        response = client.get("/api/decks/missing")

        assert response.status_code == 404

    def test_put_with_stale_version_conflicts(self, client, sample_deck):
        body = sample_deck.model_dump(mode="json")
        assert client.put("/api/decks/deck-1", json=body).status_code == 200

        response = client.put(f"/api/decks/deck-1?expected_version={sample_deck.version}", json=body)

        assert response.status_code == 409


class TestCommentsAPI:
    """Tests for comment endpoints."""

    def test_add_and_list(self, client, sample_deck):
        response = client.post(
            "/api/decks/deck-1/comments",
            json={"slide_id": "slide-1", "text_content": "Too much text"},
        )

        assert response.status_code == 201
        comments = client.get("/api/decks/deck-1/comments?slide_id=slide-1").json()
        assert [c["text_content"] for c in comments] == ["Too much text"]

    def test_empty_text_rejected(self, client):
        response = client.post("/api/decks/deck-1/comments", json={"slide_id": "slide-1", "text_content": ""})

        assert response.status_code == 422

    def test_update_missing_comment(self, client):
        response = client.patch("/api/comments/missing", json={"text_content": "x"})

        assert response.status_code == 404

    def test_insights_without_comments(self, client, sample_deck):
        response = client.post("/api/decks/deck-1/insights")

        assert response.status_code == 200
        assert response.json() == {"insight": None}


class TestProposalsAPI:
    """Tests for proposal endpoints."""

    def test_generate(self, client, mock_ai_service, sample_deck):
        client.post("/api/decks/deck-1/comments", json={"slide_id": "slide-1", "text_content": "Vague"})
        mock_ai_service.generate_slide_rewrite_suggestions.return_value = [
            AiGeneratedSuggestion(
                proposal_category="ContentEdit",
                description="Sharper headline",
                confidence_score=0.9,
                target_element_id="text-1",
                suggested_content=SuggestedContent(new_text="We cut onboarding from weeks to minutes"),
            ),
        ]

        response = client.post("/api/decks/deck-1/slides/slide-1/proposals/generate")

        assert response.status_code == 200
        proposals = response.json()["proposals"]
        assert len(proposals) == 1
        assert proposals[0]["change_type"] == "TextEdit"

    def test_generate_unknown_slide(self, client, sample_deck):
        response = client.post("/api/decks/deck-1/slides/missing/proposals/generate")

        assert response.status_code == 404

    def test_accept_then_reaccept(self, client, repository, pending_delete):
        response = client.post(f"/api/proposals/{pending_delete.id}/status", json={"status": "Accepted"})

        assert response.status_code == 200
        assert response.json()["status"] == "Accepted"
        assert len(repository.get_deck("deck-1").find_section("slide-1").components) == 1

        response = client.post(f"/api/proposals/{pending_delete.id}/status", json={"status": "Accepted"})
        assert response.status_code == 409

    def test_invalid_status_value(self, client, pending_delete):
        response = client.post(f"/api/proposals/{pending_delete.id}/status", json={"status": "Maybe"})

        assert response.status_code == 422

    def test_missing_proposal(self, client):
        response = client.post("/api/proposals/missing/status", json={"status": "Rejected"})

        assert response.status_code == 404

    def test_apply_failure_is_server_error(self, client, repository, pending_delete):
        with patch.object(repository, "save_deck", side_effect=RuntimeError("disk full")):
            response = client.post(f"/api/proposals/{pending_delete.id}/status", json={"status": "Accepted"})

        assert response.status_code == 500
        assert "disk full" in response.json()["detail"]

    def test_list_filtered_by_status(self, client, pending_delete):
        response = client.get("/api/decks/deck-1/proposals?status=Pending")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [pending_delete.id]


class TestSharingAPI:
    """Tests for share link endpoints."""

    def test_share_flow(self, client, sample_deck):
        response = client.post(
            "/api/decks/deck-1/share-links",
            json={
                "user_id": "owner-1",
                "custom_weights": {"investor": 2.0},
                "recipients": [{"email": "vc@fund.com", "access_code": "123456"}],
            },
        )
        assert response.status_code == 201
        token = response.json()["share_link"]["share_token"]
        assert "access_code" not in response.json()["recipients"][0]

        assert client.get(f"/api/share/{token}").json()["deck"]["id"] == "deck-1"

        verified = client.post(
            f"/api/share/{token}/verify",
            json={"email_or_phone": "vc@fund.com", "access_code": "123456"},
        ).json()
        assert verified["success"] is True

        session = client.post(
            f"/api/share/{token}/sessions",
            json={"session_id": "client-1", "declared_role": "investor"},
        ).json()

        comment = client.post(
            "/api/decks/deck-1/comments",
            json={"slide_id": "slide-1", "text_content": "Show CAC", "reviewer_session_id": session["id"]},
        ).json()
        assert comment["feedback_weight"] == 2.0

    def test_unknown_token(self, client):
        assert client.get("/api/share/missing").status_code == 404

    def test_share_link_for_missing_deck(self, client):
        response = client.post("/api/decks/missing/share-links", json={"user_id": "owner-1"})

        assert response.status_code == 404
