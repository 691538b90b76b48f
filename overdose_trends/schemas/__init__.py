"""
overdose_trends/schemas package marker.
"""

from overdose_trends.schemas.series import (
    ColumnMappingResponse,
    ColumnsResponse,
    HealthResponse,
    LoadErrorResponse,
    SeriesPointResponse,
    SeriesResponse,
    TimeSeriesResponse,
)

__all__ = [
    "ColumnMappingResponse",
    "ColumnsResponse",
    "HealthResponse",
    "LoadErrorResponse",
    "SeriesPointResponse",
    "SeriesResponse",
    "TimeSeriesResponse",
]
