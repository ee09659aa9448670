from __future__ import annotations

from typing import Any

import pytest

from insightflow.config import Settings
from insightflow.integrations import LLMStreamChunk


class FakeLLMClient:
    """Stand-in for LLMClient that replays canned payloads and records prompts."""

    def __init__(self, payload: Any = None, chunks: list[str] | None = None, error: Exception | None = None) -> None:
        self.payload = payload
        self.chunks = chunks or []
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def extract_json(self, system_prompt: str, user_message: str) -> Any:
        self.calls.append((system_prompt, user_message))
        if self.error is not None:
            raise self.error
        return self.payload

    async def stream(self, system_prompt: str, user_message: str, temperature: float = 0.2):
        self.calls.append((system_prompt, user_message))
        if self.error is not None:
            raise self.error
        for text in self.chunks:
            yield LLMStreamChunk(content=text)
        yield LLMStreamChunk(content="", is_done=True)

    async def check_health(self) -> tuple[bool, str, int | None]:
        return True, "LLM server is reachable", 3


@pytest.fixture
def fake_llm() -> type[FakeLLMClient]:
    return FakeLLMClient


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        llm_base_url="http://llm.test/v1",
        model_name="test-model",
        request_timeout_s=5,
        max_upload_mb=1,
        forecast_horizon=5,
        forecast_context_points=30,
        overview_sample_rows=30,
        sheet_sample_rows=100,
        max_stack_keys=10,
    )


@pytest.fixture
def sales_rows() -> list[dict[str, Any]]:
    return [
        {"region": "East", "amt": 10},
        {"region": "West", "amt": 5},
        {"region": "East", "amt": 7},
    ]
