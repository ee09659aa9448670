"""
FastAPI application for InsightFlow.

Routes delegate parsing to the workbook module, computation to the analytics
engine and LLM calls to the services layer.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
from typing import Any, AsyncGenerator, Literal

from fastapi import FastAPI, HTTPException, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from .analytics import (
    AnalysisResult,
    ChartView,
    ColumnProfile,
    InsightGenerationError,
    UnsupportedWorkbookError,
    WorkbookNotFoundError,
    WorkbookParseError,
    build_chart_series,
    build_pivot,
    stack_keys,
)
from .analytics.models import Dataset, Sheet
from .config import get_settings, update_settings
from .domain import FORECAST_FLAG, AggregationType, ErrorCode
from .integrations import LLMClient
from .repositories import WorkbookRepository
from .services import HealthService, InsightService
from .workbook import get_workbook_type_from_filename, parse_workbook

logger = logging.getLogger(__name__)

app = FastAPI(title="InsightFlow", version="1.0.0", docs_url="/docs", redoc_url="/redoc", openapi_url="/openapi.json")
app.add_middleware(CORSMiddleware, allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"], allow_credentials=True, allow_methods=["*"], allow_headers=["*"])

_workbooks = WorkbookRepository()


# ============================================================================
# Pydantic Models
# ============================================================================

class SheetSummary(BaseModel):
    sheet_name: str
    row_count: int
    columns: list[ColumnProfile]


class WorkbookResponse(BaseModel):
    workbook_id: str
    file_name: str
    total_rows: int
    sheets: list[SheetSummary]


class WorkbookListEntry(BaseModel):
    workbook_id: str
    file_name: str
    sheet_names: list[str]
    total_rows: int


class WorkbookListResponse(BaseModel):
    workbooks: list[WorkbookListEntry]
    total: int


class AggregateRequest(BaseModel):
    sheet_name: str
    group_key: str
    metric_key: str
    aggregation: AggregationType = "sum"
    breakdown_key: str | None = None


class SeriesResponse(BaseModel):
    points: list[dict[str, Any]]
    stack_keys: list[Any] = Field(default_factory=list)
    forecast_applied: bool = False


class PivotRequest(BaseModel):
    sheet_name: str
    row_key: str
    col_key: str | None = None
    value_key: str
    aggregation: AggregationType = "sum"


class PivotResponse(BaseModel):
    row_labels: list[str]
    col_labels: list[str]
    rows: list[dict[str, Any]]


class ForecastRequest(BaseModel):
    sheet_name: str
    x_axis_key: str
    metric_key: str
    aggregation: AggregationType = "sum"
    group_by_key: str | None = None


class AskRequest(BaseModel):
    question: str = Field(..., min_length=1)
    sheet_name: str | None = None


class SettingsResponse(BaseModel):
    llm_base_url: str
    model_name: str
    request_timeout_s: int
    max_upload_mb: int
    forecast_horizon: int
    forecast_context_points: int
    overview_sample_rows: int
    sheet_sample_rows: int
    max_stack_keys: int


class HealthStatus(BaseModel):
    status: Literal["ok", "error", "unavailable"]
    message: str | None = None
    latency_ms: int | None = None


class HealthResponse(BaseModel):
    backend: HealthStatus
    llm: HealthStatus


class ConfigUpdate(BaseModel):
    llm_base_url: str | None = None
    model_name: str | None = None
    request_timeout_s: int | None = Field(None, ge=1)
    max_upload_mb: int | None = Field(None, ge=1)
    forecast_horizon: int | None = Field(None, ge=1)
    forecast_context_points: int | None = Field(None, ge=1)
    overview_sample_rows: int | None = Field(None, ge=1)
    sheet_sample_rows: int | None = Field(None, ge=1)
    max_stack_keys: int | None = Field(None, ge=1)


# ============================================================================
# Service Factories
# ============================================================================

def _llm_client() -> LLMClient:
    s = get_settings()
    return LLMClient(s.llm_base_url, s.model_name, s.request_timeout_s)


def _insight_service() -> InsightService:
    return InsightService(get_settings(), _llm_client())


def _health_service() -> HealthService:
    return HealthService(_llm_client())


def _dataset(workbook_id: str) -> Dataset:
    try:
        return _workbooks.get(workbook_id)
    except WorkbookNotFoundError as e:
        raise HTTPException(404, {"code": ErrorCode.NOT_FOUND, "message": str(e)})


def _sheet(workbook_id: str, sheet_name: str) -> Sheet:
    sheet = _dataset(workbook_id).sheet(sheet_name)
    if sheet is None:
        raise HTTPException(404, {"code": ErrorCode.SHEET_NOT_FOUND, "message": f"Sheet not found: {sheet_name}"})
    return sheet


def _workbook_to_response(workbook_id: str, d: Dataset) -> WorkbookResponse:
    return WorkbookResponse(workbook_id=workbook_id, file_name=d.file_name, total_rows=d.total_rows,
                            sheets=[SheetSummary(sheet_name=s.sheet_name, row_count=s.row_count, columns=s.columns) for s in d.sheets])


# ============================================================================
# Workbook Routes
# ============================================================================

@app.post("/api/workbooks/upload", response_model=WorkbookResponse)
async def upload_workbook(file: UploadFile = File(...)) -> WorkbookResponse:
    s = get_settings()
    if not file.filename:
        raise HTTPException(400, {"code": ErrorCode.INVALID_FILENAME, "message": "Filename is required"})
    if get_workbook_type_from_filename(file.filename) is None:
        raise HTTPException(400, {"code": ErrorCode.UNSUPPORTED_TYPE, "message": "Unsupported file type. Allowed: .xlsx, .xls, .csv"})
    content = await file.read()
    if len(content) > s.max_upload_mb * 1024 * 1024:
        raise HTTPException(413, {"code": ErrorCode.FILE_TOO_LARGE, "message": f"File exceeds {s.max_upload_mb}MB"})
    try:
        dataset = parse_workbook(file.filename, content)
    except UnsupportedWorkbookError as e:
        raise HTTPException(400, {"code": ErrorCode.UNSUPPORTED_TYPE, "message": str(e)})
    except WorkbookParseError as e:
        raise HTTPException(400, {"code": ErrorCode.PARSE_ERROR, "message": str(e)})
    workbook_id = _workbooks.save(dataset)
    logger.info("Registered workbook %s (%s)", workbook_id, dataset.file_name)
    return _workbook_to_response(workbook_id, dataset)


@app.get("/api/workbooks", response_model=WorkbookListResponse)
async def list_workbooks() -> WorkbookListResponse:
    entries = [WorkbookListEntry(workbook_id=w.workbook_id, file_name=w.file_name, sheet_names=w.sheet_names, total_rows=w.total_rows)
               for w in _workbooks.list_workbooks()]
    return WorkbookListResponse(workbooks=entries, total=len(entries))


@app.get("/api/workbooks/{workbook_id}", response_model=WorkbookResponse)
async def get_workbook(workbook_id: str) -> WorkbookResponse:
    return _workbook_to_response(workbook_id, _dataset(workbook_id))


@app.delete("/api/workbooks/{workbook_id}")
async def delete_workbook(workbook_id: str) -> dict:
    if not _workbooks.delete(workbook_id):
        raise HTTPException(404, {"code": ErrorCode.NOT_FOUND, "message": f"Workbook not found: {workbook_id}"})
    return {"status": "ok", "message": f"Workbook {workbook_id} deleted"}


@app.get("/api/workbooks/{workbook_id}/sheets/{sheet_name}/profile", response_model=list[ColumnProfile])
async def get_sheet_profile(workbook_id: str, sheet_name: str) -> list[ColumnProfile]:
    return _sheet(workbook_id, sheet_name).columns


# ============================================================================
# Analytics Routes
# ============================================================================

@app.post("/api/workbooks/{workbook_id}/aggregate", response_model=SeriesResponse)
async def aggregate_sheet(workbook_id: str, request: AggregateRequest) -> SeriesResponse:
    sheet = _sheet(workbook_id, request.sheet_name)
    view = ChartView(request.group_key, request.metric_key, request.aggregation, request.breakdown_key)
    points = build_chart_series(sheet.rows, view)
    keys = stack_keys(sheet.rows, request.breakdown_key, get_settings().max_stack_keys) if request.breakdown_key else []
    return SeriesResponse(points=points, stack_keys=keys)


@app.post("/api/workbooks/{workbook_id}/pivot", response_model=PivotResponse)
async def pivot_sheet(workbook_id: str, request: PivotRequest) -> PivotResponse:
    sheet = _sheet(workbook_id, request.sheet_name)
    table = build_pivot(sheet.rows, request.row_key, request.col_key, request.value_key, request.aggregation)
    return PivotResponse(row_labels=table.row_labels, col_labels=table.col_labels, rows=table.to_records())


@app.post("/api/workbooks/{workbook_id}/forecast", response_model=SeriesResponse)
async def forecast_sheet(workbook_id: str, request: ForecastRequest) -> SeriesResponse:
    sheet = _sheet(workbook_id, request.sheet_name)
    view = ChartView(request.x_axis_key, request.metric_key, request.aggregation, request.group_by_key)
    points = await _insight_service().forecast_chart(sheet, view)
    applied = any(p.get(FORECAST_FLAG) for p in points)
    return SeriesResponse(points=points, forecast_applied=applied)


# ============================================================================
# Insight Routes
# ============================================================================

@app.post("/api/workbooks/{workbook_id}/analyze", response_model=AnalysisResult)
async def analyze_workbook(workbook_id: str) -> AnalysisResult:
    dataset = _dataset(workbook_id)
    try:
        return await _insight_service().analyze(dataset)
    except InsightGenerationError as e:
        raise HTTPException(502, {"code": ErrorCode.ANALYSIS_FAILED, "message": str(e)})


@app.post("/api/workbooks/{workbook_id}/ask/stream")
async def ask_stream(workbook_id: str, request: AskRequest):
    dataset = _dataset(workbook_id)
    if request.sheet_name:
        _sheet(workbook_id, request.sheet_name)
    async def gen() -> AsyncGenerator[str, None]:
        async for ev in _insight_service().stream_answer(dataset, request.question, request.sheet_name):
            yield f"event: {ev.event_type}\ndata: {json.dumps(ev.data, default=str)}\n\n"
    return StreamingResponse(gen(), media_type="text/event-stream", headers={"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"})


# ============================================================================
# Settings & Health Routes
# ============================================================================

def _settings_response() -> SettingsResponse:
    s = get_settings()
    return SettingsResponse(
        llm_base_url=s.llm_base_url,
        model_name=s.model_name,
        request_timeout_s=s.request_timeout_s,
        max_upload_mb=s.max_upload_mb,
        forecast_horizon=s.forecast_horizon,
        forecast_context_points=s.forecast_context_points,
        overview_sample_rows=s.overview_sample_rows,
        sheet_sample_rows=s.sheet_sample_rows,
        max_stack_keys=s.max_stack_keys,
    )


@app.get("/api/settings", response_model=SettingsResponse)
async def get_api_settings() -> SettingsResponse:
    return _settings_response()


@app.post("/api/config")
async def update_config(payload: ConfigUpdate) -> dict:
    update_settings(payload.model_dump(exclude_none=True))
    return {"status": "ok", "settings": _settings_response().model_dump()}


@app.get("/api/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    r = await _health_service().check_all()
    return HealthResponse(backend=HealthStatus(status=r.backend.status, message=r.backend.message, latency_ms=r.backend.latency_ms),
                          llm=HealthStatus(status=r.llm.status, message=r.llm.message, latency_ms=r.llm.latency_ms))


@app.get("/")
async def root() -> dict:
    s = get_settings()
    return {"service": "insightflow", "status": "ok", "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(), "model_name": s.model_name, "workbooks": len(_workbooks)}
