"""Model-call orchestration layer.

Issues requests to the hosted model API and applies the failure policy
around them.

Responsibilities:
    - Retry with exponential backoff and single fallback per call
    - Parallel deep research with citation deduplication
    - Multi-turn chat with per-turn document context
    - Motion drafting from reference documents
    - Token usage accounting

Transport details (Agno, provider errors) stay inside backend.py.
"""

from legalbrief.agent.config import AgentConfig, get_agent_config
from legalbrief.agent.context import ContextFormatter
from legalbrief.agent.conversation import ConversationSession
from legalbrief.agent.drafting import MotionDrafter
from legalbrief.agent.errors import (
    BackendError,
    PermanentBackendError,
    ResearchUnavailableError,
    TransientBackendError,
)
from legalbrief.agent.research import ResearchAggregator
from legalbrief.agent.retry import RetryingInvoker
from legalbrief.agent.service import AssistantService, get_assistant_service
from legalbrief.agent.usage import UsageMeter, UsageTracker

__all__ = [
    "AgentConfig",
    "AssistantService",
    "BackendError",
    "ContextFormatter",
    "ConversationSession",
    "MotionDrafter",
    "PermanentBackendError",
    "ResearchAggregator",
    "ResearchUnavailableError",
    "RetryingInvoker",
    "TransientBackendError",
    "UsageMeter",
    "UsageTracker",
    "get_agent_config",
    "get_assistant_service",
]
