"""Assistant service wiring the orchestration components together.

Core module for the application's model access.

Architecture Decisions:

1. **Explicit usage tracker** - One UsageTracker per service is handed to every
   component instead of a module-level listener. The service subscribes a
   UsageMeter so the session total is available to the API.

2. **Shared invoker** - RetryingInvoker carries configuration only, so the
   research roles, drafting and every chat session share one instance.

3. **Singleton Pattern** - Backend construction reads configuration and API
   keys. get_assistant_service() reuses one instance across requests.

4. **In-memory registries** - Documents and conversations live in process
   memory only. Nothing is persisted.
"""

import logging
from collections.abc import Iterable

from legalbrief.agent.backend import AgnoBackend, ModelBackend
from legalbrief.agent.config import AgentConfig, get_agent_config
from legalbrief.agent.context import ContextFormatter
from legalbrief.agent.conversation import ConversationSession
from legalbrief.agent.drafting import MotionDrafter
from legalbrief.agent.research import ResearchAggregator
from legalbrief.agent.retry import RetryingInvoker
from legalbrief.agent.usage import UsageMeter, UsageTracker
from legalbrief.models import ReferenceDocument, ResearchReport

logger = logging.getLogger(__name__)


class AssistantService:
    """Facade over research, drafting and chat sessions.

    Owns:
    - The model backend and the shared retry policy
    - The usage tracker and the session usage meter
    - Registered reference documents
    - Conversation sessions by id
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        backend: ModelBackend | None = None,
        invoker: RetryingInvoker | None = None,
    ) -> None:
        """Initialize the assistant service.

        Args:
            config: Optional configuration. Loads from environment if not provided.
            backend: Optional model backend. Defaults to AgnoBackend.
            invoker: Optional retry policy. Built from config if not provided.
        """
        self._config = config or get_agent_config()
        self._backend = backend or AgnoBackend(self._config)
        self._invoker = invoker or RetryingInvoker(
            max_retries=self._config.max_retries,
            base_delay=self._config.base_delay_seconds,
            max_jitter=self._config.max_jitter_seconds,
        )
        self._formatter = ContextFormatter(self._config.max_document_chars)

        self.usage = UsageTracker()
        self.meter = UsageMeter()
        self.usage.subscribe(self.meter)

        self.research = ResearchAggregator(
            self._backend, self._invoker, self.usage, jurisdiction=self._config.jurisdiction
        )
        self.drafter = MotionDrafter(
            self._backend,
            self._invoker,
            self.usage,
            self._formatter,
            jurisdiction=self._config.jurisdiction,
        )

        self._documents: dict[str, ReferenceDocument] = {}
        self._sessions: dict[str, ConversationSession] = {}

    # Documents

    def add_document(self, document: ReferenceDocument) -> ReferenceDocument:
        self._documents[document.id] = document
        logger.info(f"Registered document: {document.name} ({document.mime_type})")
        return document

    def list_documents(self) -> list[ReferenceDocument]:
        return list(self._documents.values())

    def get_documents(self, ids: Iterable[str] | None = None) -> list[ReferenceDocument]:
        """Return documents by id in the given order, or all when ids is None.

        Raises:
            KeyError: If an id is unknown.
        """
        if ids is None:
            return self.list_documents()
        return [self._documents[doc_id] for doc_id in ids]

    def remove_document(self, doc_id: str) -> bool:
        return self._documents.pop(doc_id, None) is not None

    # Conversations

    def get_session(self, session_id: str) -> ConversationSession:
        """Get or create the conversation for a session id."""
        session = self._sessions.get(session_id)
        if session is None:
            session = ConversationSession(
                self._backend,
                self._invoker,
                self.usage,
                self._formatter,
                jurisdiction=self._config.jurisdiction,
            )
            self._sessions[session_id] = session
        return session

    def find_session(self, session_id: str) -> ConversationSession | None:
        return self._sessions.get(session_id)

    async def chat(
        self, session_id: str, message: str, document_ids: Iterable[str] | None = None
    ) -> str:
        documents = self.get_documents(document_ids)
        return await self.get_session(session_id).send(message, documents)

    # Research and drafting

    async def run_research(self, query: str) -> ResearchReport:
        return await self.research.research(query)

    async def draft_motion(
        self, topic: str, instructions: str = "", document_ids: Iterable[str] | None = None
    ) -> str:
        documents = self.get_documents(document_ids)
        return await self.drafter.draft(topic, documents, instructions)

    @property
    def total_tokens(self) -> int:
        return self.meter.total_tokens


# Module-level singleton instance
_assistant_service: AssistantService | None = None


def get_assistant_service() -> AssistantService:
    """Get or create the global assistant service.

    Returns:
        The AssistantService instance.
    """
    global _assistant_service
    if _assistant_service is None:
        _assistant_service = AssistantService()
    return _assistant_service
