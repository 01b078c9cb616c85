"""Pydantic models for the orchestration core.

Plain value objects shared by the agent layer, the API and the tests.

Models:
    - ReferenceDocument: Locally supplied document used as prompt context
    - ConversationTurn: Single immutable turn in a chat history
    - CitationSource: Grounding citation returned by research calls
    - ModelUsage: Token accounting reported by one model call
    - ModelResponse: Normalized response from the model backend
    - ResearchReport: Merged output of a deep-research run
    - GenerationOptions: Sampling and tool options for one call
"""

import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ModelRole(str, Enum):
    """Model configuration used for a sub-task."""

    REASONING = "reasoning"
    FAST = "fast"


class Speaker(str, Enum):
    """Who produced a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class BinaryPayload(BaseModel):
    """Inline binary content of a document (PDF scans, images).

    Attributes:
        mime_type: MIME type of the payload.
        base64_data: Base64-encoded bytes.
    """

    mime_type: str
    base64_data: str


class ReferenceDocument(BaseModel):
    """A reference document supplied by the user.

    Exactly one of text_content (text documents) or binary_payload
    (binary documents) is meaningfully populated.

    Attributes:
        id: Unique document identifier.
        name: Display name, usually the uploaded filename.
        mime_type: MIME type of the original file.
        text_content: Extracted or decoded text.
        binary_payload: Inline binary data for non-text documents.
        added_at: When the document was registered.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str = Field(..., min_length=1)
    mime_type: str = "text/plain"
    text_content: str = ""
    binary_payload: BinaryPayload | None = None
    added_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_binary(self) -> bool:
        """True when the document carries only a binary payload."""
        return self.binary_payload is not None and not self.text_content.strip()


class ConversationTurn(BaseModel):
    """One turn in a conversation. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    speaker: Speaker
    text: str
    timestamp: datetime = Field(default_factory=_utcnow)


class CitationSource(BaseModel):
    """A grounding citation, unique by uri."""

    title: str
    uri: str


class ModelUsage(BaseModel):
    """Token counts reported by the backend for one call.

    Any field may be missing depending on the provider.
    """

    total_tokens: int | None = Field(None, ge=0)
    prompt_tokens: int | None = Field(None, ge=0)
    candidate_tokens: int | None = Field(None, ge=0)


class ResponseCitation(BaseModel):
    """Raw citation candidate as returned by the backend."""

    uri: str = ""
    title: str | None = None


class ModelResponse(BaseModel):
    """Normalized response of a single backend call.

    Attributes:
        text: Generated text (may be empty).
        usage: Token accounting, if the provider reported it.
        citations: Grounding references, if any.
    """

    text: str = ""
    usage: ModelUsage | None = None
    citations: list[ResponseCitation] = Field(default_factory=list)


class ResearchReport(BaseModel):
    """Merged deep-research result."""

    text: str
    sources: list[CitationSource] = Field(default_factory=list)


class GenerationOptions(BaseModel):
    """Per-call sampling and tool options.

    Attributes:
        temperature: Sampling temperature.
        top_p: Optional nucleus sampling cutoff.
        web_search: Enable search grounding for the call.
    """

    temperature: float = Field(0.7, ge=0.0, le=2.0)
    top_p: float | None = Field(None, gt=0.0, le=1.0)
    web_search: bool = False


__all__ = [
    "BinaryPayload",
    "CitationSource",
    "ConversationTurn",
    "GenerationOptions",
    "ModelResponse",
    "ModelRole",
    "ModelUsage",
    "ReferenceDocument",
    "ResearchReport",
    "ResponseCitation",
    "Speaker",
]
