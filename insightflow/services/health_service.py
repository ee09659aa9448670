"""
Health check service.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ..integrations import LLMClient

HealthStatusType = Literal["ok", "error", "unavailable"]


@dataclass(frozen=True)
class ServiceHealth:
    status: HealthStatusType
    message: str | None = None
    latency_ms: int | None = None


@dataclass(frozen=True)
class HealthReport:
    backend: ServiceHealth
    llm: ServiceHealth


class HealthService:
    """Service for checking health of all system components."""

    def __init__(self, llm_client: LLMClient) -> None:
        self._llm = llm_client

    async def check_all(self) -> HealthReport:
        return HealthReport(ServiceHealth("ok", "Backend is running"), await self._check_llm())

    async def _check_llm(self) -> ServiceHealth:
        ok, msg, lat = await self._llm.check_health()
        if ok:
            return ServiceHealth("ok", msg, lat)
        return ServiceHealth("unavailable" if "Cannot connect" in msg else "error", msg)
