"""Pytest fixtures and shared test configuration.

Fixtures:
    - agent_config: Valid configuration without touching the environment
    - fake_backend: Scriptable in-memory model backend
    - recording_sleep: Backoff sleep that records delays instead of waiting
    - invoker: RetryingInvoker with zero jitter and recorded sleeps
    - usage_tracker: Fresh UsageTracker
    - service: AssistantService wired to the fake backend
    - async_client: HTTPX client for API testing against that service
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from legalbrief.agent.config import AgentConfig
from legalbrief.agent.retry import RetryingInvoker
from legalbrief.agent.service import AssistantService, get_assistant_service
from legalbrief.agent.usage import UsageTracker
from legalbrief.api.app import create_app
from tests.fakes import FakeBackend, RecordingSleep


def no_jitter(low: float, high: float) -> float:
    return 0.0


@pytest.fixture
def agent_config() -> AgentConfig:
    return AgentConfig(
        api_key="sk-test-key",
        base_url=None,
        reasoning_model="reasoning-model",
        fast_model="fast-model",
        max_retries=4,
        base_delay_seconds=1.8,
        jurisdiction="Indiana",
    )


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def invoker(recording_sleep: RecordingSleep) -> RetryingInvoker:
    return RetryingInvoker(max_retries=4, base_delay=1.8, sleep=recording_sleep, jitter=no_jitter)


@pytest.fixture
def usage_tracker() -> UsageTracker:
    return UsageTracker()


@pytest.fixture
def service(
    agent_config: AgentConfig, fake_backend: FakeBackend, invoker: RetryingInvoker
) -> AssistantService:
    return AssistantService(config=agent_config, backend=fake_backend, invoker=invoker)


@pytest.fixture
async def async_client(service: AssistantService) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        AsyncClient bound to an app that uses the fake-backed service.
    """
    app = create_app()
    app.dependency_overrides[get_assistant_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
