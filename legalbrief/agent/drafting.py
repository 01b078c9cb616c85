"""Single-shot drafting of legal motions from reference documents."""

import logging
from collections.abc import Sequence
from functools import partial

from legalbrief.agent.backend import ModelBackend
from legalbrief.agent.context import ContextFormatter
from legalbrief.agent.retry import RetryingInvoker
from legalbrief.agent.usage import UsageTracker
from legalbrief.models import GenerationOptions, ModelRole, ReferenceDocument

logger = logging.getLogger(__name__)

DRAFT_FAILED_TEXT = "// Motion drafting failed - please try again"
DRAFT_OPTIONS = GenerationOptions(temperature=0.25, top_p=0.95)


def drafting_system_instruction(jurisdiction: str) -> str:
    return (
        f"You are an experienced {jurisdiction} civil law attorney. Draft formal motions in "
        "proper legal format: caption, title, numbered paragraphs, prayer for relief, "
        "certificate of service and verification block."
    )


class MotionDrafter:
    """Drafts a motion with the reasoning role, falling back to the fast role.

    Backend failures propagate to the caller.
    """

    def __init__(
        self,
        backend: ModelBackend,
        invoker: RetryingInvoker,
        usage: UsageTracker,
        formatter: ContextFormatter | None = None,
        jurisdiction: str = "Indiana",
    ) -> None:
        self._backend = backend
        self._invoker = invoker
        self._usage = usage
        self._formatter = formatter or ContextFormatter()
        self._jurisdiction = jurisdiction

    def build_prompt(
        self,
        topic: str,
        documents: Sequence[ReferenceDocument] = (),
        instructions: str = "",
    ) -> str:
        context = self._formatter.format(documents)
        parts = [
            f"Draft a professional {self._jurisdiction} civil law motion regarding: {topic}",
            f"Additional user instructions:\n{instructions}" if instructions else "",
            f"CASE CONTEXT:\n{context}" if context else "",
        ]
        return "\n\n".join(part for part in parts if part)

    async def _run_draft(self, role: ModelRole, prompt: str) -> str:
        response = await self._backend.call(
            role, drafting_system_instruction(self._jurisdiction), prompt, DRAFT_OPTIONS
        )
        self._usage.record(response.usage)
        return response.text

    async def draft(
        self,
        topic: str,
        documents: Sequence[ReferenceDocument] = (),
        instructions: str = "",
    ) -> str:
        prompt = self.build_prompt(topic, documents, instructions)
        text = await self._invoker.invoke(
            partial(self._run_draft, ModelRole.REASONING, prompt),
            partial(self._run_draft, ModelRole.FAST, prompt),
            label="draft",
        )
        logger.info(f"Drafted motion for topic: {topic}")
        return text.strip() or DRAFT_FAILED_TEXT
