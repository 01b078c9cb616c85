"""In-memory stand-ins for the model backend."""

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from legalbrief.models import (
    ConversationTurn,
    GenerationOptions,
    ModelResponse,
    ModelRole,
    ModelUsage,
    ResponseCitation,
)


@dataclass
class RecordedCall:
    kind: str
    role: ModelRole
    system_instruction: str
    prompt: str
    options: GenerationOptions
    history: list[ConversationTurn] = field(default_factory=list)


Responder = Callable[[RecordedCall], Any]


def response(
    text: str = "ok",
    total_tokens: int | None = None,
    citations: Sequence[tuple[str | None, str]] = (),
) -> ModelResponse:
    """Build a ModelResponse; citations are (title, uri) pairs."""
    usage = ModelUsage(total_tokens=total_tokens) if total_tokens is not None else None
    return ModelResponse(
        text=text,
        usage=usage,
        citations=[ResponseCitation(title=title, uri=uri) for title, uri in citations],
    )


def scripted(*results: Any) -> Responder:
    """Responder returning (or raising) results in order, repeating the last one."""
    queue = list(results)

    def _respond(call: RecordedCall) -> Any:
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]

    return _respond


class FakeChatHandle:
    def __init__(self, backend: "FakeBackend", call: RecordedCall) -> None:
        self._backend = backend
        self._call = call

    async def send(self, payload: str) -> ModelResponse:
        self._call.prompt = payload
        return await self._backend._respond(self._call)


class FakeBackend:
    """ModelBackend whose answers come from a responder callable.

    The responder may return a ModelResponse, an exception instance
    (raised), or an awaitable resolving to either.
    """

    def __init__(self, responder: Responder | None = None) -> None:
        self.responder = responder or scripted(response())
        self.calls: list[RecordedCall] = []

    async def _respond(self, call: RecordedCall) -> ModelResponse:
        self.calls.append(call)
        result = self.responder(call)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result

    async def call(
        self,
        role: ModelRole,
        system_instruction: str,
        prompt: str,
        options: GenerationOptions,
    ) -> ModelResponse:
        return await self._respond(
            RecordedCall("call", role, system_instruction, prompt, options)
        )

    def open_session(
        self,
        role: ModelRole,
        system_instruction: str,
        history: Sequence[ConversationTurn],
        options: GenerationOptions,
    ) -> FakeChatHandle:
        call = RecordedCall("chat", role, system_instruction, "", options, list(history))
        return FakeChatHandle(self, call)


class RecordingSleep:
    """Awaitable sleep replacement that records delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
