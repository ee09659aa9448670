"""
Insight service: LLM workbook analysis, streaming Q&A and chart forecasting.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Any

from pydantic import ValidationError

from ..analytics.charts import ChartView, build_chart_series
from ..analytics.errors import InsightGenerationError
from ..analytics.forecast import splice_forecast
from ..analytics.models import AnalysisResult, Dataset, Sheet
from ..analytics.validator import filter_valid_charts
from ..config import Settings
from ..domain import AGGREGATION_TYPES, ChartType, ErrorCode
from ..integrations import LLMClient, LLMClientError

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "Failed to generate insights. Please try again."
STREAM_FAILED_MESSAGE = "Sorry, I encountered an error analyzing the data."


@dataclass(frozen=True)
class StreamEvent:
    event_type: str
    data: dict[str, Any]


def build_dataset_structure(dataset: Dataset) -> list[dict[str, Any]]:
    """Schema summary of every sheet, as sent to the analysis prompt."""
    return [
        {
            "sheet_name": sheet.sheet_name,
            "row_count": sheet.row_count,
            "columns": [
                {
                    "name": c.name,
                    "type": c.type,
                    "distinct_count": c.distinct_count,
                    "example_values": ", ".join(str(v) for v in c.sample_values),
                    "range": c.range_label,
                }
                for c in sheet.columns
            ],
        }
        for sheet in dataset.sheets
    ]


class InsightService:
    """Builds prompts from sheet profiles and validates what the LLM returns."""

    def __init__(self, settings: Settings, llm_client: LLMClient) -> None:
        self._s = settings
        self._llm = llm_client

    # ------------------------------------------------------------------
    # Workbook analysis
    # ------------------------------------------------------------------

    def _analysis_system_prompt(self) -> str:
        chart_types = ", ".join(t.value for t in ChartType)
        return (
            "You are an expert Chief Data Officer and Data Scientist.\n"
            "Output ONLY valid JSON, no markdown fences, no commentary, with this shape:\n"
            "{\n"
            '  "summary": "<executive summary of the whole workbook>",\n'
            '  "cross_sheet_insights": ["..."],\n'
            '  "inferences": ["..."],\n'
            '  "charts": [\n'
            "    {\n"
            '      "id": "...", "title": "...", "description": "...",\n'
            f'      "chart_type": "<one of: {chart_types}>",\n'
            '      "sheet_name": "...", "x_axis_key": "...", "data_keys": ["..."],\n'
            f'      "aggregation": "<one of: {", ".join(AGGREGATION_TYPES)}>",\n'
            '      "group_by_key": "<low-cardinality column or null>",\n'
            '      "colors": ["#6366f1"]\n'
            "    }\n"
            "  ]\n"
            "}\n"
            "Column names must be copied exactly from the schema."
        )

    def _analysis_user_prompt(self, dataset: Dataset) -> str:
        structure = json.dumps(build_dataset_structure(dataset), indent=2, default=str)
        return (
            f'I have a workbook named "{dataset.file_name}" containing {len(dataset.sheets)} sheet(s).\n\n'
            f"Here is the schema and profile of the sheets:\n{structure}\n\n"
            "1. Executive Summary: synthesize what the entire workbook represents.\n"
            "2. Cross-Sheet Insights: identify relationships between sheets, such as shared keys or correlations.\n"
            "3. Educated Inferences: make logical leaps from the profile, e.g. outliers suggested by wide ranges or seasonality suggested by date ranges.\n"
            "4. Chart Recommendations: suggest 4-6 visualizations. Name the sheet each chart draws from, "
            "pick an aggregation for the metric, and use a low-cardinality categorical column as group_by_key for stacked charts."
        )

    async def analyze(self, dataset: Dataset) -> AnalysisResult:
        try:
            payload = await self._llm.extract_json(self._analysis_system_prompt(), self._analysis_user_prompt(dataset))
        except LLMClientError as exc:
            logger.warning("Workbook analysis request failed: %s", exc)
            raise InsightGenerationError(ANALYSIS_FAILED_MESSAGE) from exc

        if not isinstance(payload, dict):
            logger.warning("Workbook analysis returned no JSON object")
            raise InsightGenerationError(ANALYSIS_FAILED_MESSAGE)

        try:
            result = AnalysisResult.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Workbook analysis failed validation: %s", exc)
            raise InsightGenerationError(ANALYSIS_FAILED_MESSAGE) from exc

        charts = filter_valid_charts(result.charts, dataset.sheets)
        return result.model_copy(update={"charts": charts})

    # ------------------------------------------------------------------
    # Question answering
    # ------------------------------------------------------------------

    def _question_context(self, dataset: Dataset, sheet: Sheet | None) -> str:
        if sheet is None:
            samples = [
                {"sheet": s.sheet_name, "sample": s.rows[: self._s.overview_sample_rows]}
                for s in dataset.sheets
            ]
            return f"Context: Full Workbook Overview.\nSheets & Samples: {json.dumps(samples, default=str)}"
        schema = [c.model_dump() for c in sheet.columns]
        return (
            f'Context: Specific Sheet "{sheet.sheet_name}".\n'
            f"Schema: {json.dumps(schema, default=str)}\n"
            f"Sample Data (first {self._s.sheet_sample_rows} rows): "
            f"{json.dumps(sheet.rows[: self._s.sheet_sample_rows], default=str)}"
        )

    def _question_system_prompt(self, dataset: Dataset, sheet: Sheet | None) -> str:
        return (
            "You are a specialized data analyst.\n"
            f"{self._question_context(dataset, sheet)}\n\n"
            "Instructions:\n"
            "1. Answer concisely.\n"
            '2. If calculating, state "Based on the provided sample...".\n'
            "3. Use markdown for tables or lists if needed."
        )

    async def stream_answer(self, dataset: Dataset, question: str, sheet_name: str | None = None) -> AsyncIterator[StreamEvent]:
        sheet = dataset.sheet(sheet_name) if sheet_name else None
        context_type = "sheet" if sheet is not None else "overview"
        try:
            yield StreamEvent("meta", {"context_type": context_type, "sheet_name": sheet.sheet_name if sheet else None})
            full_resp = ""
            async for chunk in self._llm.stream(self._question_system_prompt(dataset, sheet), question):
                if chunk.content:
                    full_resp += chunk.content
                    yield StreamEvent("token", {"text": chunk.content})
                if chunk.is_done:
                    break
            yield StreamEvent("done", {"final_text": full_resp})
        except Exception as e:
            logger.warning("Question stream failed: %s", e)
            yield StreamEvent("error", {"code": ErrorCode.STREAM_ERROR, "message": STREAM_FAILED_MESSAGE})

    # ------------------------------------------------------------------
    # Forecasting
    # ------------------------------------------------------------------

    def _forecast_prompt(self, series: list[dict[str, Any]], x_key: str, y_key: str) -> str:
        recent = [{x_key: p.get(x_key), y_key: p.get(y_key)} for p in series[-self._s.forecast_context_points:]]
        return (
            f"X-Axis: {x_key}\n"
            f"Y-Axis: {y_key}\n\n"
            f"Data: {json.dumps(recent, default=str)}\n\n"
            f"Predict the next {self._s.forecast_horizon} points.\n"
            f'Return ONLY a JSON array of objects with "{x_key}" (string) and "{y_key}" (number).'
        )

    async def forecast(self, series: list[dict[str, Any]], x_key: str, y_key: str) -> list[dict[str, Any]]:
        """Ask the LLM to extend ``series``; any failure yields an empty forecast."""
        if not series:
            return []
        try:
            payload = await self._llm.extract_json(
                "You are a statistical forecasting expert.", self._forecast_prompt(series, x_key, y_key)
            )
        except Exception as exc:
            logger.warning("Forecast request failed: %s", exc)
            return []

        if not isinstance(payload, list):
            logger.warning("Forecast response was not a JSON array")
            return []
        points = [p for p in payload if isinstance(p, dict) and x_key in p and y_key in p]
        if len(points) != len(payload):
            logger.warning("Discarded %d malformed forecast point(s)", len(payload) - len(points))
        return [{x_key: p[x_key], y_key: p[y_key]} for p in points]

    async def forecast_chart(self, sheet: Sheet, view: ChartView) -> list[dict[str, Any]]:
        """Aggregate ``sheet`` per ``view`` and splice an LLM forecast onto it.

        Stacked views are returned without a forecast.
        """
        history = build_chart_series(sheet.rows, view)
        if not view.can_forecast:
            return history
        predicted = await self.forecast(history, view.x_axis_key, view.metric_key)
        return splice_forecast(history, predicted, view.metric_key)
