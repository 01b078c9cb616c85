"""Model backend transport built on Agno.

Exposes the two call shapes used by the orchestration layer:

    - call(): single-shot generation (research, drafting)
    - open_session(): multi-turn chat with replayed history

Requests go straight to the Agno model layer (Model.aresponse), not through
an Agent run. ModelProviderError and its subclasses reach this module with
their status_code and are translated into
TransientBackendError or PermanentBackendError here, so nothing above
this module looks at provider status codes or error text.
"""

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from agno.models.message import Message
from agno.models.openai import OpenAIChat, OpenAIResponses

from legalbrief.agent.config import AgentConfig, get_agent_config
from legalbrief.agent.errors import PermanentBackendError, backend_error_from
from legalbrief.models import (
    ConversationTurn,
    GenerationOptions,
    ModelResponse,
    ModelRole,
    ModelUsage,
    ResponseCitation,
    Speaker,
)

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL = {"type": "web_search_preview"}


class ChatHandle(Protocol):
    """An open multi-turn chat."""

    async def send(self, payload: str) -> ModelResponse: ...


class ModelBackend(Protocol):
    """Abstract remote model API."""

    async def call(
        self,
        role: ModelRole,
        system_instruction: str,
        prompt: str,
        options: GenerationOptions,
    ) -> ModelResponse: ...

    def open_session(
        self,
        role: ModelRole,
        system_instruction: str,
        history: Sequence[ConversationTurn],
        options: GenerationOptions,
    ) -> ChatHandle: ...


def _count(value: Any) -> int | None:
    if isinstance(value, int) and value >= 0:
        return value
    return None


def _sum_counts(metrics: Sequence[Any], attr: str) -> int | None:
    counts = [c for c in (_count(getattr(m, attr, None)) for m in metrics) if c is not None]
    return sum(counts) if counts else None


def to_model_response(output: Any, replies: Sequence[Any] = ()) -> ModelResponse:
    """Normalize an Agno model response.

    Args:
        output: Result of Model.aresponse (or any object with content,
            response_usage/metrics and citations attributes).
        replies: Assistant messages the model appended during the request.
            Used for usage and citations the aggregate result does not carry.

    Raises:
        PermanentBackendError: If the output reports an error state.
    """
    status = getattr(output, "status", None)
    if status is not None and str(getattr(status, "value", status)).lower() == "error":
        raise PermanentBackendError(str(getattr(output, "content", "") or "Model run failed"))

    content = getattr(output, "content", None)
    if content is None and replies:
        content = getattr(replies[-1], "content", None)
    text = content if isinstance(content, str) else str(content or "")

    metrics = [m for m in (getattr(output, "response_usage", None), getattr(output, "metrics", None)) if m]
    if not metrics:
        metrics = [m for m in (getattr(r, "metrics", None) for r in replies) if m is not None]
    usage = None
    if metrics:
        usage = ModelUsage(
            total_tokens=_sum_counts(metrics, "total_tokens"),
            prompt_tokens=_sum_counts(metrics, "input_tokens"),
            candidate_tokens=_sum_counts(metrics, "output_tokens"),
        )

    grounding = getattr(output, "citations", None)
    if grounding is None:
        for reply in reversed(replies):
            grounding = getattr(reply, "citations", None)
            if grounding is not None:
                break

    citations: list[ResponseCitation] = []
    for url_citation in getattr(grounding, "urls", None) or []:
        citations.append(
            ResponseCitation(
                uri=getattr(url_citation, "url", None) or "",
                title=getattr(url_citation, "title", None),
            )
        )

    return ModelResponse(text=text, usage=usage, citations=citations)


async def _generate(
    model: OpenAIChat | OpenAIResponses,
    system_instruction: str,
    conversation: Sequence[Message],
    tools: list[dict[str, Any]] | None,
) -> ModelResponse:
    messages = [Message(role="system", content=system_instruction), *conversation]
    sent = len(messages)
    try:
        output = await model.aresponse(messages=messages, tools=tools)
    except Exception as e:
        raise backend_error_from(e) from e
    replies = [m for m in messages[sent:] if m.role == "assistant"]
    return to_model_response(output, replies)


class AgnoChatHandle:
    """Chat session replaying prior turns on each send."""

    def __init__(
        self,
        model: OpenAIChat | OpenAIResponses,
        system_instruction: str,
        history: Sequence[ConversationTurn],
        tools: list[dict[str, Any]] | None = None,
    ) -> None:
        self._model = model
        self._system_instruction = system_instruction
        self._tools = tools
        self._messages = [
            Message(
                role="assistant" if turn.speaker is Speaker.ASSISTANT else "user",
                content=turn.text,
            )
            for turn in history
        ]

    async def send(self, payload: str) -> ModelResponse:
        messages = [*self._messages, Message(role="user", content=payload)]
        return await _generate(self._model, self._system_instruction, messages, self._tools)


class AgnoBackend:
    """ModelBackend backed by Agno models over OpenAI-compatible APIs.

    A fresh model is built per call so concurrent calls share no state.
    Calls requesting web search use the Responses API with its built-in
    search tool, which reports grounding citations.
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        self._config = config or get_agent_config()

    def _create_model(self, role: ModelRole, options: GenerationOptions) -> OpenAIChat | OpenAIResponses:
        kwargs: dict[str, Any] = {
            "id": self._config.model_for(role),
            "api_key": self._config.api_key,
            "temperature": options.temperature,
        }
        if self._config.base_url:
            kwargs["base_url"] = self._config.base_url
        if options.top_p is not None:
            kwargs["top_p"] = options.top_p

        if options.web_search:
            return OpenAIResponses(**kwargs)
        return OpenAIChat(**kwargs)

    @staticmethod
    def _tools_for(options: GenerationOptions) -> list[dict[str, Any]] | None:
        return [WEB_SEARCH_TOOL] if options.web_search else None

    async def call(
        self,
        role: ModelRole,
        system_instruction: str,
        prompt: str,
        options: GenerationOptions,
    ) -> ModelResponse:
        model = self._create_model(role, options)
        logger.debug(f"Calling {self._config.model_for(role)} ({role.value})")
        return await _generate(
            model,
            system_instruction,
            [Message(role="user", content=prompt)],
            self._tools_for(options),
        )

    def open_session(
        self,
        role: ModelRole,
        system_instruction: str,
        history: Sequence[ConversationTurn],
        options: GenerationOptions,
    ) -> AgnoChatHandle:
        model = self._create_model(role, options)
        return AgnoChatHandle(model, system_instruction, history, self._tools_for(options))
