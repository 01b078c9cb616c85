"""Pydantic models for API requests and responses."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from legalbrief.models import ConversationTurn, ReferenceDocument


def _strip(v: object) -> object:
    if isinstance(v, str):
        return v.strip()
    return v


class ChatRequest(BaseModel):
    """Request payload for the chat endpoint.

    Attributes:
        message: User's question or prompt.
        session_id: Optional session for conversation continuity.
        document_ids: Documents to use as context (all when omitted).
    """

    message: str = Field(..., min_length=1)
    session_id: str | None = None
    document_ids: list[str] | None = None

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        return _strip(v)


class ChatResponse(BaseModel):
    """Assistant reply with the session it belongs to."""

    response: str
    session_id: str
    turns: int = Field(..., ge=0)


class SessionHistory(BaseModel):
    session_id: str
    turns: list[ConversationTurn]


class ResearchRequest(BaseModel):
    query: str = Field(..., min_length=1)

    @field_validator("query", mode="before")
    @classmethod
    def strip_query(cls, v: str) -> str:
        return _strip(v)


class DraftRequest(BaseModel):
    """Request payload for motion drafting.

    Attributes:
        topic: Subject of the motion.
        instructions: Optional extra drafting instructions.
        document_ids: Documents to use as context (all when omitted).
    """

    topic: str = Field(..., min_length=1)
    instructions: str = ""
    document_ids: list[str] | None = None

    @field_validator("topic", mode="before")
    @classmethod
    def strip_topic(cls, v: str) -> str:
        return _strip(v)


class DraftResponse(BaseModel):
    draft: str


class DocumentSummary(BaseModel):
    """Uploaded document metadata, without its content."""

    id: str
    name: str
    mime_type: str
    chars: int = Field(..., ge=0)
    binary: bool
    added_at: datetime

    @classmethod
    def from_document(cls, document: ReferenceDocument) -> "DocumentSummary":
        return cls(
            id=document.id,
            name=document.name,
            mime_type=document.mime_type,
            chars=len(document.text_content),
            binary=document.is_binary,
            added_at=document.added_at,
        )


class UsageResponse(BaseModel):
    total_tokens: int = Field(..., ge=0)
