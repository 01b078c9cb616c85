"""Research and drafting endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from legalbrief.agent.errors import BackendError, ResearchUnavailableError
from legalbrief.agent.service import AssistantService, get_assistant_service
from legalbrief.models import ResearchReport
from legalbrief.models.schemas import DraftRequest, DraftResponse, ResearchRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["research"])


@router.post("/research", response_model=ResearchReport)
async def research(
    request: ResearchRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> ResearchReport:
    """Run grounded deep research for a query.

    Raises:
        503: Research could not be completed.
    """
    try:
        return await service.run_research(request.query)
    except ResearchUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e


@router.post("/draft", response_model=DraftResponse)
async def draft(
    request: DraftRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> DraftResponse:
    """Draft a motion from a topic and reference documents.

    Raises:
        404: A requested document id is unknown.
        503: The model backend failed after retries and fallback.
    """
    try:
        text = await service.draft_motion(request.topic, request.instructions, request.document_ids)
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown document: {e.args[0]}",
        ) from e
    except BackendError as e:
        logger.error(f"Drafting failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Drafting failed. The model may be temporarily unavailable.",
        ) from e

    return DraftResponse(draft=text)
