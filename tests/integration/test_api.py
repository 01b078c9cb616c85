"""Integration tests for the HTTP API.

Runs the real FastAPI application through httpx ASGITransport with the
assistant service wired to the fake backend.
"""

import asyncio

import pytest_check as check
from httpx import AsyncClient

from legalbrief.agent.conversation import APOLOGY_TEXT
from legalbrief.agent.errors import PermanentBackendError, TransientBackendError
from legalbrief.agent.service import AssistantService
from legalbrief.models import ResearchReport
from legalbrief.models.schemas import ChatResponse, DocumentSummary
from legalbrief.parsing import MAX_FILE_SIZE
from tests.fakes import FakeBackend, RecordedCall, response, scripted


class TestHealthAndUsage:
    async def test_health(self, async_client: AsyncClient) -> None:
        result = await async_client.get("/health")

        assert result.status_code == 200
        assert result.json() == {"status": "healthy", "service": "legalbrief"}

    async def test_usage_reflects_completed_calls(
        self, async_client: AsyncClient, fake_backend: FakeBackend
    ) -> None:
        fake_backend.responder = scripted(response("hi", total_tokens=42))

        await async_client.post("/chat", json={"message": "Hello"})
        result = await async_client.get("/usage")

        assert result.json() == {"total_tokens": 42}


class TestChatEndpoint:
    """Tests for POST /chat and GET /chat/{id}."""

    async def test_chat_returns_reply_and_session(
        self, async_client: AsyncClient, fake_backend: FakeBackend
    ) -> None:
        fake_backend.responder = scripted(response(" Sure. "))

        result = await async_client.post("/chat", json={"message": "Can you help?"})

        assert result.status_code == 200
        data = ChatResponse.model_validate(result.json())
        check.equal(data.response, "Sure.")
        check.equal(data.turns, 2)
        check.is_true(data.session_id)

    async def test_history_endpoint_returns_ordered_turns(self, async_client: AsyncClient) -> None:
        await async_client.post("/chat", json={"message": "first", "session_id": "s-1"})
        await async_client.post("/chat", json={"message": "second", "session_id": "s-1"})

        result = await async_client.get("/chat/s-1")

        assert result.status_code == 200
        turns = result.json()["turns"]
        check.equal([t["text"] for t in turns], ["first", "ok", "second", "ok"])
        check.equal([t["speaker"] for t in turns], ["user", "assistant", "user", "assistant"])

    async def test_backend_failure_degrades_to_apology(
        self, async_client: AsyncClient, fake_backend: FakeBackend
    ) -> None:
        fake_backend.responder = scripted(PermanentBackendError("auth failed", 401))

        result = await async_client.post("/chat", json={"message": "Hello", "session_id": "s-2"})

        assert result.status_code == 200
        check.equal(result.json()["response"], APOLOGY_TEXT)
        check.equal(result.json()["turns"], 2)

    async def test_chat_uses_registered_documents(
        self, async_client: AsyncClient, fake_backend: FakeBackend
    ) -> None:
        await async_client.post(
            "/documents", files={"file": ("order.txt", b"Parenting time order", "text/plain")}
        )

        await async_client.post("/chat", json={"message": "Summarize"})

        check.is_in("Parenting time order", fake_backend.calls[-1].prompt)

    async def test_superseded_message_returns_409(
        self, async_client: AsyncClient, fake_backend: FakeBackend
    ) -> None:
        started = asyncio.Event()

        async def stale_hangs(call: RecordedCall):
            if call.prompt == "stale":
                started.set()
                await asyncio.Event().wait()
            return response("fresh answer")

        fake_backend.responder = stale_hangs
        stale = asyncio.create_task(
            async_client.post("/chat", json={"message": "stale", "session_id": "s-3"})
        )
        await asyncio.wait_for(started.wait(), timeout=1)

        fresh = await async_client.post("/chat", json={"message": "fresh", "session_id": "s-3"})
        superseded = await asyncio.wait_for(stale, timeout=1)

        check.equal(superseded.status_code, 409)
        check.is_in("Superseded", superseded.json()["detail"])
        check.equal(fresh.status_code, 200)
        check.equal(fresh.json()["response"], "fresh answer")
        check.equal(fresh.json()["turns"], 2)

    async def test_unknown_document_returns_404(self, async_client: AsyncClient) -> None:
        result = await async_client.post("/chat", json={"message": "Hi", "document_ids": ["nope"]})

        assert result.status_code == 404

    async def test_unknown_session_returns_404(self, async_client: AsyncClient) -> None:
        result = await async_client.get("/chat/missing")

        assert result.status_code == 404

    async def test_whitespace_only_message_returns_422(self, async_client: AsyncClient) -> None:
        result = await async_client.post("/chat", json={"message": "   "})

        assert result.status_code == 422

    async def test_missing_message_returns_422(self, async_client: AsyncClient) -> None:
        result = await async_client.post("/chat", json={})

        assert result.status_code == 422


class TestResearchEndpoint:
    """Tests for POST /research."""

    async def test_research_merges_sources(
        self, async_client: AsyncClient, fake_backend: FakeBackend
    ) -> None:
        def respond(call: RecordedCall):
            if "statutes" in call.prompt:
                return response("B1", citations=[("Y", "u1")])
            return response("A1", citations=[("X", "u1")])

        fake_backend.responder = respond

        result = await async_client.post("/research", json={"query": "custody relocation"})

        assert result.status_code == 200
        report = ResearchReport.model_validate(result.json())
        check.equal(len(report.sources), 1)
        check.equal(report.sources[0].uri, "u1")
        check.less(report.text.index("A1"), report.text.index("B1"))

    async def test_research_failure_returns_503(
        self, async_client: AsyncClient, fake_backend: FakeBackend
    ) -> None:
        fake_backend.responder = scripted(TransientBackendError("quota exhausted", 429))

        result = await async_client.post("/research", json={"query": "custody"})

        assert result.status_code == 503
        assert "research" in result.json()["detail"]

    async def test_empty_query_returns_422(self, async_client: AsyncClient) -> None:
        result = await async_client.post("/research", json={"query": ""})

        assert result.status_code == 422


class TestDraftEndpoint:
    """Tests for POST /draft."""

    async def test_draft_returns_text(self, async_client: AsyncClient, fake_backend: FakeBackend) -> None:
        fake_backend.responder = scripted(response("MOTION TO COMPEL"))

        result = await async_client.post(
            "/draft", json={"topic": "discovery", "instructions": "Be brief"}
        )

        assert result.status_code == 200
        check.equal(result.json(), {"draft": "MOTION TO COMPEL"})
        check.is_in("Be brief", fake_backend.calls[0].prompt)

    async def test_draft_failure_returns_503(
        self, async_client: AsyncClient, fake_backend: FakeBackend
    ) -> None:
        fake_backend.responder = scripted(PermanentBackendError("bad request", 400))

        result = await async_client.post("/draft", json={"topic": "discovery"})

        assert result.status_code == 503


class TestDocumentsEndpoint:
    """Tests for the /documents registry."""

    async def test_upload_list_and_delete(
        self, async_client: AsyncClient, service: AssistantService
    ) -> None:
        upload = await async_client.post(
            "/documents", files={"file": ("notes.txt", b"Hearing June 3", "text/plain")}
        )

        assert upload.status_code == 201
        summary = DocumentSummary.model_validate(upload.json())
        check.equal(summary.name, "notes.txt")
        check.equal(summary.chars, len("Hearing June 3"))
        check.is_false(summary.binary)

        listing = await async_client.get("/documents")
        check.equal([d["id"] for d in listing.json()], [summary.id])

        deleted = await async_client.delete(f"/documents/{summary.id}")
        check.equal(deleted.status_code, 204)
        check.equal(service.list_documents(), [])

        missing = await async_client.delete(f"/documents/{summary.id}")
        check.equal(missing.status_code, 404)

    async def test_empty_file_returns_400(self, async_client: AsyncClient) -> None:
        result = await async_client.post(
            "/documents", files={"file": ("empty.txt", b"", "text/plain")}
        )

        assert result.status_code == 400
        assert "Empty file" in result.json()["detail"]

    async def test_corrupt_pdf_returns_400(self, async_client: AsyncClient) -> None:
        result = await async_client.post(
            "/documents", files={"file": ("bad.pdf", b"not a pdf", "application/pdf")}
        )

        assert result.status_code == 400

    async def test_oversized_file_returns_413(self, async_client: AsyncClient) -> None:
        result = await async_client.post(
            "/documents",
            files={"file": ("big.txt", b"a" * (MAX_FILE_SIZE + 1), "text/plain")},
        )

        assert result.status_code == 413
