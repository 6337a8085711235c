"""
Integration tests for the HTTP endpoints.
Tests: request body -> scoring -> streamed body with the fit score header.
"""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

import app_fastapi
import llm_provider
from generation_session import GenerationSession, SessionState
from history_store import HistoryStore
from models import GenerationRequest

SCENARIO = {
    "jobDescription": "Senior Go engineer",
    "resume": "5 years backend",
    "tone": "Friendly",
    "length": "Short",
}


@pytest.fixture
def use_provider(monkeypatch):
    def install(provider):
        monkeypatch.setattr(llm_provider, "get_provider", lambda: provider)
        return provider

    return install


@pytest.fixture
def client():
    return TestClient(app_fastapi.app)


@pytest.mark.integration
def test_generate_sends_score_header_and_raw_stream(client, use_provider, fake_provider_cls, sample_stream_lines):
    use_provider(fake_provider_cls(score_text="Score: 72 out of 100", lines=sample_stream_lines))

    response = client.post("/api/generate", json=SCENARIO)

    assert response.status_code == 200
    assert response.headers["x-fit-score"] == "72"
    assert response.text.splitlines() == sample_stream_lines


@pytest.mark.integration
def test_scoring_runs_before_streaming(client, use_provider, fake_provider_cls):
    provider = use_provider(fake_provider_cls(score_text="80", lines=[]))

    client.post("/api/generate", json=SCENARIO)

    assert [call["op"] for call in provider.calls] == ["complete", "open_stream"]
    assert "friendly tone" in provider.calls[1]["system"]
    assert "short in length" in provider.calls[1]["system"]


@pytest.mark.integration
@pytest.mark.parametrize("score_text, expected", [("N/A", "0"), ("150", "100")])
def test_score_header_is_clamped(client, use_provider, fake_provider_cls, score_text, expected):
    use_provider(fake_provider_cls(score_text=score_text, lines=[]))

    response = client.post("/api/generate", json=SCENARIO)

    assert response.headers["x-fit-score"] == expected


@pytest.mark.integration
def test_scoring_failure_does_not_block_generation(client, use_provider, fake_provider_cls, sample_stream_lines):
    use_provider(fake_provider_cls(score_error=TimeoutError("slow"), lines=sample_stream_lines))

    response = client.post("/api/generate", json=SCENARIO)

    assert response.status_code == 200
    assert response.headers["x-fit-score"] == "0"


@pytest.mark.integration
def test_stream_setup_failure_returns_500_with_message(client, use_provider, fake_provider_cls):
    use_provider(fake_provider_cls(stream_error=RuntimeError("model overloaded")))

    response = client.post("/api/generate", json=SCENARIO)

    assert response.status_code == 500
    assert response.text == "An error occurred: model overloaded"


@pytest.mark.integration
def test_stream_setup_failure_without_message(client, use_provider, fake_provider_cls):
    use_provider(fake_provider_cls(stream_error=RuntimeError()))

    response = client.post("/api/generate", json=SCENARIO)

    assert response.status_code == 500
    assert response.text == "An error occurred: Unknown error"


@pytest.mark.integration
def test_missing_api_key_returns_500(client, monkeypatch):
    monkeypatch.setattr(llm_provider.config, "OPENAI_API_KEY", None)

    response = client.post("/api/generate", json=SCENARIO)

    assert response.status_code == 500
    assert "OPENAI_API_KEY" in response.text


@pytest.mark.integration
def test_malformed_body_returns_500(client, use_provider, fake_provider_cls):
    use_provider(fake_provider_cls())

    response = client.post("/api/generate", content=b"[1, 2]", headers={"Content-Type": "application/json"})

    assert response.status_code == 500
    assert response.text.startswith("An error occurred:")


@pytest.mark.integration
def test_session_against_live_endpoint(tmp_path, use_provider, fake_provider_cls, sample_stream_lines):
    """Full pipeline: endpoint -> HTTP -> decoder -> session -> history."""
    use_provider(fake_provider_cls(score_text="Score: 72 out of 100", lines=sample_stream_lines))
    history = HistoryStore(tmp_path / "applications.json")
    request = GenerationRequest(
        SCENARIO["jobDescription"], SCENARIO["resume"], SCENARIO["tone"], SCENARIO["length"]
    )

    async def go():
        transport = httpx.ASGITransport(app=app_fastapi.app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
            session = GenerationSession(http, history, "http://testserver/api/generate")
            await session.run(request)
            return session

    session = asyncio.run(go())

    assert session.state is SessionState.COMPLETED
    assert session.cover_letter == "Dear Hiring Manager,"
    saved = HistoryStore(history.path).load()
    assert len(saved) == 1
    assert saved[0].fit_score == 72
    assert saved[0].cover_letter == "Dear Hiring Manager,"


@pytest.mark.integration
def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
