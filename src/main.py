"""
DeckReview - Main Application Entry Point

Collects reviewer feedback on shared pitch decks and turns it into
AI-generated change proposals the deck owner can accept or reject.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.core import get_settings, setup_logging
from src.api.errors import register_exception_handlers
from src.api.routes import decks, comments, proposals, sharing

setup_logging(logging.DEBUG if get_settings().debug else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown."""
    settings = get_settings()

    # Startup
    logger.info(f"🚀 Starting {settings.app_name}...")
    logger.info(f"🤖 LLM Provider: \033[96m{settings.llm_provider}\033[0m")
    if not settings.has_azure_openai:
        logger.warning("⚠️  Azure OpenAI not configured - comments will not be classified and no proposals generated")

    yield

    # Shutdown
    logger.info(f"👋 Shutting down {settings.app_name}...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Reviewer feedback to AI change proposals for pitch decks",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API routers
    app.include_router(decks.router, tags=["decks"])
    app.include_router(comments.router, tags=["comments"])
    app.include_router(proposals.router, tags=["proposals"])
    app.include_router(sharing.router, tags=["sharing"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "app_name": settings.app_name,
            "llm_provider": settings.llm_provider,
            "proposal_generation_enabled": settings.proposal_generation_enabled,
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
