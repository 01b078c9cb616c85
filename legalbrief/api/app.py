"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from legalbrief import __version__
from legalbrief.agent.service import AssistantService, get_assistant_service
from legalbrief.api.chat import router as chat_router
from legalbrief.api.documents import router as documents_router
from legalbrief.api.research import router as research_router
from legalbrief.models.schemas import UsageResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info("Starting legalbrief API...")
    yield
    logger.info("Shutting down legalbrief API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="legalbrief API",
        description=(
            "Chat, grounded legal research and motion drafting on top of a hosted "
            "LLM API, using uploaded reference documents as context. Transient "
            "backend failures are retried with backoff and fall back to a faster model."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(chat_router)
    application.include_router(research_router)
    application.include_router(documents_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "legalbrief"}

    @application.get("/usage", response_model=UsageResponse)
    async def usage(service: AssistantService = Depends(get_assistant_service)) -> UsageResponse:
        """Total tokens consumed since the service started."""
        return UsageResponse(total_tokens=service.total_tokens)

    return application


app = create_app()
