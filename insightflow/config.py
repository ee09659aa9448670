from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import os

from dotenv import load_dotenv

load_dotenv()


def _getenv_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    llm_base_url: str
    model_name: str
    request_timeout_s: int
    max_upload_mb: int
    forecast_horizon: int
    forecast_context_points: int
    overview_sample_rows: int
    sheet_sample_rows: int
    max_stack_keys: int


settings = Settings(
    llm_base_url=os.getenv("LLM_BASE_URL", "http://localhost:1234/v1"),
    model_name=os.getenv("MODEL_NAME", "qwen2.5-7b-instruct"),
    request_timeout_s=_getenv_int("REQUEST_TIMEOUT_S", 60),
    max_upload_mb=_getenv_int("MAX_UPLOAD_MB", 25),
    forecast_horizon=_getenv_int("FORECAST_HORIZON", 5),
    forecast_context_points=_getenv_int("FORECAST_CONTEXT_POINTS", 30),
    overview_sample_rows=_getenv_int("OVERVIEW_SAMPLE_ROWS", 30),
    sheet_sample_rows=_getenv_int("SHEET_SAMPLE_ROWS", 100),
    max_stack_keys=_getenv_int("MAX_STACK_KEYS", 10),
)

_INT_FIELDS = {
    "request_timeout_s",
    "max_upload_mb",
    "forecast_horizon",
    "forecast_context_points",
    "overview_sample_rows",
    "sheet_sample_rows",
    "max_stack_keys",
}

_RUNTIME_OVERRIDES: dict[str, Any] = {}


def get_settings() -> Settings:
    if not _RUNTIME_OVERRIDES:
        return settings
    base = settings
    return Settings(
        llm_base_url=_RUNTIME_OVERRIDES.get("llm_base_url", base.llm_base_url),
        model_name=_RUNTIME_OVERRIDES.get("model_name", base.model_name),
        request_timeout_s=_RUNTIME_OVERRIDES.get(
            "request_timeout_s", base.request_timeout_s
        ),
        max_upload_mb=_RUNTIME_OVERRIDES.get("max_upload_mb", base.max_upload_mb),
        forecast_horizon=_RUNTIME_OVERRIDES.get(
            "forecast_horizon", base.forecast_horizon
        ),
        forecast_context_points=_RUNTIME_OVERRIDES.get(
            "forecast_context_points", base.forecast_context_points
        ),
        overview_sample_rows=_RUNTIME_OVERRIDES.get(
            "overview_sample_rows", base.overview_sample_rows
        ),
        sheet_sample_rows=_RUNTIME_OVERRIDES.get(
            "sheet_sample_rows", base.sheet_sample_rows
        ),
        max_stack_keys=_RUNTIME_OVERRIDES.get("max_stack_keys", base.max_stack_keys),
    )


def update_settings(overrides: dict[str, Any]) -> Settings:
    normalized: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key in _INT_FIELDS:
            normalized[key] = int(value)
        else:
            normalized[key] = value
    _RUNTIME_OVERRIDES.update(normalized)
    return get_settings()


def reset_settings() -> Settings:
    _RUNTIME_OVERRIDES.clear()
    return settings
