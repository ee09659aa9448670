"""
LLM client for OpenAI-compatible chat-completion servers (LM Studio, vLLM, Ollama).
"""
from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from typing import AsyncIterator, Any

import requests


@dataclass(frozen=True)
class LLMResponse:
    """Response from a non-streaming LLM call."""
    content: str
    model: str


@dataclass(frozen=True)
class LLMStreamChunk:
    """A chunk from a streaming LLM response."""
    content: str
    is_done: bool = False


class LLMClientError(Exception):
    pass


def parse_json_payload(raw: str) -> Any:
    """Parse a JSON object or array, tolerating prose or fences around it."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    # Try whichever bracket opens first so a top-level array is not mistaken for its first element.
    spans = sorted((raw.find(o), raw.rfind(c)) for o, c in (("{", "}"), ("[", "]")) if o in raw)
    for start, end in spans:
        if end > start:
            try:
                return json.loads(raw[start:end + 1])
            except json.JSONDecodeError:
                continue
    return None


class LLMClient:
    """Async client for an OpenAI-compatible LLM service."""

    def __init__(self, base_url: str, model_name: str, timeout_seconds: int = 30) -> None:
        self._base_url = base_url.rstrip("/")
        self._model_name = model_name
        self._timeout = timeout_seconds

    def _post(self, payload: dict) -> str:
        try:
            resp = requests.post(f"{self._base_url}/chat/completions", json=payload, timeout=self._timeout)
            resp.raise_for_status()
            return resp.json()["choices"][0]["message"]["content"]
        except requests.exceptions.RequestException as exc:
            raise LLMClientError(str(exc)) from exc
        except (KeyError, IndexError, ValueError) as exc:
            raise LLMClientError(f"Malformed completion response: {exc}") from exc

    async def complete(self, system_prompt: str, user_message: str, temperature: float = 0.2) -> LLMResponse:
        """Send a non-streaming chat completion request."""
        payload = {
            "model": self._model_name,
            "messages": [{"role": "system", "content": system_prompt}, {"role": "user", "content": user_message}],
            "temperature": temperature,
        }
        content = await asyncio.to_thread(self._post, payload)
        return LLMResponse(content=content or "", model=self._model_name)

    async def extract_json(self, system_prompt: str, user_message: str) -> Any:
        """Send request expecting a JSON object or array response."""
        resp = await self.complete(system_prompt, user_message, temperature=0.0)
        return parse_json_payload(resp.content)

    async def stream(self, system_prompt: str, user_message: str, temperature: float = 0.2) -> AsyncIterator[LLMStreamChunk]:
        """Stream chat completion."""
        payload = {
            "model": self._model_name,
            "messages": [{"role": "system", "content": system_prompt}, {"role": "user", "content": user_message}],
            "temperature": temperature,
            "stream": True,
        }
        resp = await asyncio.to_thread(lambda: requests.post(f"{self._base_url}/chat/completions", json=payload, timeout=self._timeout, stream=True))
        with resp:
            resp.raise_for_status()
            lines = resp.iter_lines()
            while True:
                # iter_lines blocks on the socket
                line = await asyncio.to_thread(next, lines, None)
                if line is None:
                    break
                if not line:
                    continue
                line_str = line.decode("utf-8")
                if not line_str.startswith("data: "):
                    continue
                data_str = line_str[6:]
                if data_str == "[DONE]":
                    yield LLMStreamChunk(content="", is_done=True)
                    break
                try:
                    data = json.loads(data_str)
                except json.JSONDecodeError:
                    continue
                content = data.get("choices", [{}])[0].get("delta", {}).get("content", "")
                if content:
                    yield LLMStreamChunk(content=content)

    async def check_health(self) -> tuple[bool, str, int | None]:
        """Check if the LLM service is reachable."""
        try:
            start = time.perf_counter()
            resp = await asyncio.to_thread(lambda: requests.get(f"{self._base_url}/models", timeout=5))
            latency_ms = int((time.perf_counter() - start) * 1000)
            if resp.status_code == 200:
                return True, "LLM server is reachable", latency_ms
            return False, f"LLM server returned status {resp.status_code}", None
        except requests.exceptions.ConnectionError:
            return False, f"Cannot connect to LLM server at {self._base_url}", None
        except requests.exceptions.RequestException as e:
            return False, str(e), None
