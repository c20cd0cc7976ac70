"""
Pytest configuration and shared fixtures

Provides:
1. Fake LLM clients that record every call (no network)
2. Test settings with valid-looking provider keys and no pacing delay
3. FastAPI test client with dependencies overridden
"""
import pytest
from dataclasses import dataclass
from typing import List, Optional
from fastapi.testclient import TestClient

from orchestrator.config import Settings, get_settings
from orchestrator.api.dependencies import get_llm_clients


@dataclass
class RecordedCall:
    provider: str
    system: str
    user: str
    max_tokens: Optional[int]


class FakeLLMClient:
    """
    Stand-in for LLMClient

    Returns queued responses in order, then "<provider> output <n>".
    Raises ``error`` on every call, or only on call number ``fail_on_call``.
    """

    def __init__(
        self,
        provider_name: str,
        model: str = "fake-model",
        responses: Optional[List[str]] = None,
        error: Optional[Exception] = None,
        fail_on_call: Optional[int] = None,
        call_log: Optional[List[RecordedCall]] = None
    ):
        self.provider_name = provider_name
        self.model = model
        self.responses = list(responses or [])
        self.error = error
        self.fail_on_call = fail_on_call
        self.calls: List[RecordedCall] = []
        self.call_log = call_log if call_log is not None else []

    async def generate(self, system: str, user: str, max_tokens: Optional[int] = None) -> str:
        call = RecordedCall(self.provider_name, system, user, max_tokens)
        self.calls.append(call)
        self.call_log.append(call)
        if self.error is not None and (self.fail_on_call is None or self.fail_on_call == len(self.calls)):
            raise self.error
        if self.responses:
            return self.responses.pop(0)
        return f"{self.provider_name} output {len(self.calls)}"


def make_document(min_chars: int) -> str:
    """Build a document of whole sentences at least ``min_chars`` long"""
    sentences = []
    total = 0
    index = 0
    while total < min_chars:
        sentence = f"Control step {index} requires the operator to verify the batch record entry."
        sentences.append(sentence)
        total += len(sentence) + 1
        index += 1
    return " ".join(sentences)


@pytest.fixture
def call_log() -> List[RecordedCall]:
    """Shared, ordered log of calls across all fake clients"""
    return []


@pytest.fixture
def fake_openai(call_log) -> FakeLLMClient:
    return FakeLLMClient("openai", model="gpt-test", call_log=call_log)


@pytest.fixture
def fake_anthropic(call_log) -> FakeLLMClient:
    return FakeLLMClient("anthropic", model="claude-test", call_log=call_log)


@pytest.fixture
def settings() -> Settings:
    """Valid keys, no delay between calls"""
    return Settings(
        _env_file=None,
        openai_api_key="sk-test-openai-key",
        anthropic_api_key="sk-ant-test-anthropic-key",
        inter_call_delay=0
    )


@pytest.fixture
def app(settings, fake_openai, fake_anthropic):
    """FastAPI application with settings and provider clients overridden"""
    from orchestrator.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_settings] = lambda: settings
    fastapi_app.dependency_overrides[get_llm_clients] = lambda: {
        "openai": fake_openai,
        "anthropic": fake_anthropic,
    }
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)
