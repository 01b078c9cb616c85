"""Multi-turn conversation with document context on the current turn only.

A failed turn never raises into the transcript: it becomes an apology turn
so the displayed history stays consistent.
"""

import asyncio
import logging
from collections.abc import Sequence
from functools import partial

from legalbrief.agent.backend import ModelBackend
from legalbrief.agent.context import ContextFormatter
from legalbrief.agent.retry import RetryingInvoker
from legalbrief.agent.usage import UsageTracker
from legalbrief.models import (
    ConversationTurn,
    GenerationOptions,
    ModelRole,
    ReferenceDocument,
    Speaker,
)

logger = logging.getLogger(__name__)

APOLOGY_TEXT = "I encountered an error. Please try again."
EMPTY_RESPONSE_TEXT = "No response received."
CHAT_OPTIONS = GenerationOptions(temperature=0.45)


def chat_system_instruction(jurisdiction: str) -> str:
    return (
        f"You are a knowledgeable, professional {jurisdiction} civil law assistant handling "
        "contracts, torts, property, family and other civil matters. Be concise and "
        "accurate, and cite authority when possible."
    )


class ConversationSession:
    """Ordered chat history driving one model call per user turn.

    At most one send is in flight; a new send cancels a stale one.
    """

    def __init__(
        self,
        backend: ModelBackend,
        invoker: RetryingInvoker,
        usage: UsageTracker,
        formatter: ContextFormatter | None = None,
        *,
        primary_role: ModelRole = ModelRole.REASONING,
        fallback_role: ModelRole | None = ModelRole.FAST,
        jurisdiction: str = "Indiana",
        system_instruction: str | None = None,
        history: Sequence[ConversationTurn] = (),
    ) -> None:
        self._backend = backend
        self._invoker = invoker
        self._usage = usage
        self._formatter = formatter or ContextFormatter()
        self._primary_role = primary_role
        self._fallback_role = fallback_role
        self._system_instruction = system_instruction or chat_system_instruction(jurisdiction)
        self._history: list[ConversationTurn] = list(history)
        self._pending: asyncio.Task[str] | None = None

    @property
    def history(self) -> list[ConversationTurn]:
        """Copy of the ordered turn history."""
        return list(self._history)

    @property
    def busy(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def build_payload(self, user_text: str, documents: Sequence[ReferenceDocument]) -> str:
        context = self._formatter.format(documents)
        if not context:
            return user_text
        return f"CASE DATA (do NOT repeat unless asked):\n{context}\n\nUSER: {user_text}"

    async def _call(self, role: ModelRole, history: list[ConversationTurn], payload: str) -> str:
        handle = self._backend.open_session(role, self._system_instruction, history, CHAT_OPTIONS)
        response = await handle.send(payload)
        self._usage.record(response.usage)
        return response.text.strip() or EMPTY_RESPONSE_TEXT

    async def _exchange(self, user_text: str, documents: Sequence[ReferenceDocument]) -> str:
        prior = list(self._history)
        payload = self.build_payload(user_text, documents)

        fallback = None
        if self._fallback_role is not None:
            fallback = partial(self._call, self._fallback_role, prior, payload)

        try:
            reply = await self._invoker.invoke(
                partial(self._call, self._primary_role, prior, payload),
                fallback,
                label="chat",
            )
        except Exception as e:
            logger.error(f"Chat turn failed, replying with apology: {e}")
            reply = APOLOGY_TEXT

        self._history.append(ConversationTurn(speaker=Speaker.USER, text=user_text))
        self._history.append(ConversationTurn(speaker=Speaker.ASSISTANT, text=reply))
        return reply

    async def send(self, user_text: str, documents: Sequence[ReferenceDocument] = ()) -> str:
        """Send a user turn and return the assistant reply.

        Args:
            user_text: The user's message.
            documents: Reference documents injected into this turn only.

        Returns:
            The assistant text, or an apology if the call ultimately failed.

        Raises:
            asyncio.CancelledError: If the send was cancelled or superseded.
                Nothing is appended to the history in that case.
        """
        if self.busy:
            logger.info("Superseding in-flight chat turn")
            self.cancel()

        task = asyncio.create_task(self._exchange(user_text, documents))
        self._pending = task
        try:
            return await task
        finally:
            if self._pending is task:
                self._pending = None

    def cancel(self) -> bool:
        """Cancel the in-flight send, if any."""
        if not self.busy:
            return False
        return self._pending.cancel()
