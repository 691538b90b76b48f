"""
overdose_trends/schemas/series.py

Response schemas for the series and column endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from overdose_trends.domain.overdose_series import AggregationResult, ColumnMapping


class ColumnMappingResponse(BaseModel):
    """
    API response model for role-to-column bindings ("" = unset).
    """

    drug: str = ""
    date: str = ""
    value: str = ""
    jurisdiction: str = ""

    @classmethod
    def from_mapping(cls, mapping: ColumnMapping) -> ColumnMappingResponse:
        return cls(**mapping.as_dict())


class SeriesPointResponse(BaseModel):
    """
    One summed value on one calendar day.
    """

    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    value: float


class TimeSeriesResponse(BaseModel):
    drug: str
    points: list[SeriesPointResponse] = Field(default_factory=list)


class SeriesResponse(BaseModel):
    """
    API response model for an aggregation run.
    """

    series: list[TimeSeriesResponse] = Field(default_factory=list)
    used_rows: int = Field(..., ge=0)
    dropped_rows: int = Field(..., ge=0)
    mapping: ColumnMappingResponse

    @classmethod
    def from_result(cls, result: AggregationResult, mapping: ColumnMapping) -> SeriesResponse:
        return cls(
            series=[
                TimeSeriesResponse(
                    drug=item.drug,
                    points=[
                        SeriesPointResponse(date=date_key, value=value)
                        for date_key, value in item.points
                    ],
                )
                for item in result.series
            ],
            used_rows=result.used_rows,
            dropped_rows=result.dropped_rows,
            mapping=ColumnMappingResponse.from_mapping(mapping),
        )


class ColumnsResponse(BaseModel):
    """
    API response model for header inspection.
    """

    fields: list[str] = Field(default_factory=list)
    guessed_mapping: ColumnMappingResponse
    row_count: int = Field(..., ge=0)


class LoadErrorResponse(BaseModel):
    kind: str
    message: str
    missing: list[str] | None = None


class HealthResponse(BaseModel):
    status: str
    capabilities: dict[str, bool] = Field(default_factory=dict)
