"""Mapping of service exceptions to HTTP responses."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.core import (
    CommentNotFoundError,
    ConcurrentModificationError,
    DeckNotFoundError,
    DeckReviewError,
    InvalidTransitionError,
    ProposalNotFoundError,
    SlideNotFoundError,
)

logger = logging.getLogger(__name__)

_NOT_FOUND = (DeckNotFoundError, SlideNotFoundError, ProposalNotFoundError, CommentNotFoundError)
_CONFLICT = (InvalidTransitionError, ConcurrentModificationError)


def status_code_for(error: DeckReviewError) -> int:
    if isinstance(error, _NOT_FOUND):
        return 404
    if isinstance(error, _CONFLICT):
        return 409
    return 500


async def deck_review_error_handler(request: Request, exc: DeckReviewError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DeckReviewError, deck_review_error_handler)
