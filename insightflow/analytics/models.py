from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from ..domain.types import AggregationType, ChartType, ColumnType


class ColumnProfile(BaseModel):
    """Per-column type inference and summary statistics."""
    name: str
    type: ColumnType = "string"
    sample_values: list[Any] = Field(default_factory=list)
    distinct_count: int = 0
    min_value: float | int | None = None
    max_value: float | int | None = None

    @model_validator(mode="after")
    def _range_only_for_numbers(self) -> "ColumnProfile":
        if self.type != "number" and (self.min_value is not None or self.max_value is not None):
            raise ValueError(f"min/max are only valid for number columns, '{self.name}' is {self.type}")
        return self

    @property
    def range_label(self) -> str:
        if self.type == "number":
            return f"{self.min_value} to {self.max_value}"
        return "N/A"


class Sheet(BaseModel):
    """One non-empty sheet of an ingested workbook."""
    sheet_name: str
    rows: list[dict[str, Any]] = Field(default_factory=list)
    columns: list[ColumnProfile] = Field(default_factory=list)
    row_count: int = 0

    def column(self, name: str) -> ColumnProfile | None:
        return next((c for c in self.columns if c.name == name), None)


class Dataset(BaseModel):
    """All sheets decoded from a single uploaded file."""
    file_name: str
    sheets: list[Sheet] = Field(default_factory=list)
    total_rows: int = 0

    def sheet(self, sheet_name: str) -> Sheet | None:
        return next((s for s in self.sheets if s.sheet_name == sheet_name), None)


class ChartConfiguration(BaseModel):
    """A chart recommendation produced by the LLM.

    LLMs frequently emit ``null`` for optional fields instead of omitting them.
    The pre-validator coerces those nulls back to safe defaults.
    """
    id: str
    title: str
    description: str = ""
    chart_type: ChartType
    sheet_name: str
    x_axis_key: str
    data_keys: list[str] = Field(min_length=1)
    aggregation: AggregationType = "sum"
    group_by_key: str | None = None
    colors: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict):
            if values.get("description") is None:
                values["description"] = ""
            if values.get("aggregation") is None:
                values["aggregation"] = "sum"
            if values.get("colors") is None:
                values["colors"] = []
            if not values.get("group_by_key"):
                values["group_by_key"] = None
        return values


class AnalysisResult(BaseModel):
    """Workbook-level insights returned by the LLM analysis."""
    summary: str
    cross_sheet_insights: list[str] = Field(default_factory=list)
    inferences: list[str] = Field(default_factory=list)
    charts: list[ChartConfiguration] = Field(default_factory=list)
