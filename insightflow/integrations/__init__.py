"""Integrations layer for insightflow."""
from .llm_client import LLMClient, LLMResponse, LLMStreamChunk, LLMClientError, parse_json_payload

__all__ = ["LLMClient", "LLMResponse", "LLMStreamChunk", "LLMClientError", "parse_json_payload"]
