"""Chat endpoints.

A failed model call never surfaces here as an error: the session turns it
into an apology reply.
"""

import asyncio
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from legalbrief.agent.service import AssistantService, get_assistant_service
from legalbrief.models.schemas import ChatRequest, ChatResponse, SessionHistory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> ChatResponse:
    """Send a message and get the assistant reply.

    Raises:
        404: A requested document id is unknown.
        409: A newer message on the same session superseded this one.
    """
    session_id = request.session_id or str(uuid.uuid4())

    try:
        reply = await service.chat(session_id, request.message, request.document_ids)
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown document: {e.args[0]}",
        ) from e
    except asyncio.CancelledError:
        current = asyncio.current_task()
        if current is not None and current.cancelling():
            raise
        logger.info(f"Chat message superseded in session {session_id}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Superseded by a newer message in this session",
        ) from None

    turns = len(service.get_session(session_id).history)
    return ChatResponse(response=reply, session_id=session_id, turns=turns)


@router.get("/{session_id}", response_model=SessionHistory)
async def get_history(
    session_id: str,
    service: AssistantService = Depends(get_assistant_service),
) -> SessionHistory:
    session = service.find_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown session: {session_id}",
        )
    return SessionHistory(session_id=session_id, turns=session.history)
