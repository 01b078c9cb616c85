"""Deep research across two model roles running in parallel.

The case-law role and the statutes role run as independent asyncio tasks,
each with its own retry/fallback chain, so wall-clock latency is that of
the slower chain. Either role failing fails the whole run.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from functools import partial

from legalbrief.agent.backend import ModelBackend
from legalbrief.agent.errors import ResearchUnavailableError
from legalbrief.agent.retry import RetryingInvoker
from legalbrief.agent.usage import UsageTracker
from legalbrief.models import (
    CitationSource,
    GenerationOptions,
    ModelResponse,
    ModelRole,
    ResearchReport,
)

logger = logging.getLogger(__name__)

UNTITLED_SOURCE = "Untitled source"
RESEARCH_FAILED_MESSAGE = (
    "Failed to complete grounded legal research. "
    "The search engine or model may be temporarily unavailable."
)

RESEARCH_OPTIONS = GenerationOptions(temperature=0.0, web_search=True)


@dataclass(frozen=True)
class RoleCall:
    """One model invocation within a research role."""

    role: ModelRole
    system_instruction: str
    prompt: str


@dataclass(frozen=True)
class ResearchRole:
    """A research sub-task with its primary call and fallback call."""

    name: str
    primary: RoleCall
    fallback: RoleCall | None = None


def case_law_role(query: str, jurisdiction: str) -> ResearchRole:
    return ResearchRole(
        name="case law",
        primary=RoleCall(
            ModelRole.REASONING,
            f"You are a senior {jurisdiction} appellate legal researcher specializing in "
            "civil matters. Use recent case law only. Be precise and cite holdings clearly.",
            f"Analyze and summarize recent {jurisdiction} civil case law relevant to: {query}",
        ),
        fallback=RoleCall(
            ModelRole.FAST,
            f"Senior {jurisdiction} legal researcher focused on civil case law.",
            f"Recent {jurisdiction} civil case law for: {query}",
        ),
    )


def statutes_role(query: str, jurisdiction: str) -> ResearchRole:
    return ResearchRole(
        name="statutes",
        primary=RoleCall(
            ModelRole.FAST,
            f"You are an expert in the {jurisdiction} code across all titles relevant to "
            "civil law, including procedural and trial rules.",
            f"List and explain relevant {jurisdiction} statutes, codes and trial rules for: {query}",
        ),
        fallback=RoleCall(
            ModelRole.REASONING,
            f"{jurisdiction} statutes and civil procedure expert.",
            f"Relevant {jurisdiction} statutes and trial rules for: {query}",
        ),
    )


def extract_sources(response: ModelResponse) -> list[CitationSource]:
    """Citation candidates of a response that carry a non-empty URI."""
    return [
        CitationSource(title=citation.title or UNTITLED_SOURCE, uri=citation.uri)
        for citation in response.citations
        if citation.uri
    ]


def merge_sources(*groups: Iterable[CitationSource]) -> list[CitationSource]:
    """Concatenate groups and drop repeated URIs, keeping the first occurrence."""
    unique: dict[str, CitationSource] = {}
    for group in groups:
        for source in group:
            unique.setdefault(source.uri, source)
    return list(unique.values())


def build_report_text(case_text: str, statute_text: str, source_count: int) -> str:
    return "\n".join(
        [
            "# Civil Legal Research Report (Grounded with Web Search)",
            "",
            "## Civil Case Law Analysis",
            case_text.strip() or "(no case law summary returned)",
            "",
            "## Relevant Statutes & Trial Rules",
            statute_text.strip() or "(no statutes returned)",
            "",
            f"**Sources ({source_count})**: see below",
        ]
    )


class ResearchAggregator:
    """Runs the case-law and statutes roles concurrently and merges them."""

    def __init__(
        self,
        backend: ModelBackend,
        invoker: RetryingInvoker,
        usage: UsageTracker,
        jurisdiction: str = "Indiana",
    ) -> None:
        self._backend = backend
        self._invoker = invoker
        self._usage = usage
        self._jurisdiction = jurisdiction

    async def _run_call(self, call: RoleCall) -> ModelResponse:
        response = await self._backend.call(
            call.role, call.system_instruction, call.prompt, RESEARCH_OPTIONS
        )
        self._usage.record(response.usage)
        return response

    async def _run_role(self, role: ResearchRole) -> ModelResponse:
        fallback = None
        if role.fallback is not None:
            fallback = partial(self._run_call, role.fallback)

        return await self._invoker.invoke(
            partial(self._run_call, role.primary),
            fallback,
            label=f"research:{role.name}",
        )

    async def research(self, query: str) -> ResearchReport:
        """Produce a grounded research report for a query.

        Raises:
            ResearchUnavailableError: If either role ultimately failed.
        """
        roles = [
            case_law_role(query, self._jurisdiction),
            statutes_role(query, self._jurisdiction),
        ]
        tasks = [asyncio.create_task(self._run_role(role)) for role in roles]

        try:
            case_res, statute_res = await asyncio.gather(*tasks)
        except Exception as e:
            for task in tasks:
                task.cancel()
            logger.error(f"Legal research failed: {e}")
            raise ResearchUnavailableError(RESEARCH_FAILED_MESSAGE) from e

        sources = merge_sources(extract_sources(case_res), extract_sources(statute_res))
        text = build_report_text(case_res.text, statute_res.text, len(sources))
        logger.info(f"Research complete with {len(sources)} unique sources")
        return ResearchReport(text=text, sources=sources)
