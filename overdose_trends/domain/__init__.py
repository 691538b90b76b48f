"""
overdose_trends/domain package marker.
"""

from overdose_trends.domain.errors import (
    CSVLoadError,
    CSVParseError,
    DelimiterAmbiguousError,
    EmptyInputError,
    FetchFailedError,
    LibrariesUnavailableError,
    MissingColumnsError,
    NoDataError,
)
from overdose_trends.domain.overdose_series import (
    AggregationResult,
    ColumnMapping,
    ColumnRole,
    CSVTable,
    LoadFailureKind,
    ResolvedRow,
    TimeSeries,
    resolve_row,
)

__all__ = [
    "AggregationResult",
    "ColumnMapping",
    "ColumnRole",
    "CSVLoadError",
    "CSVParseError",
    "CSVTable",
    "DelimiterAmbiguousError",
    "EmptyInputError",
    "FetchFailedError",
    "LibrariesUnavailableError",
    "LoadFailureKind",
    "MissingColumnsError",
    "NoDataError",
    "ResolvedRow",
    "TimeSeries",
    "resolve_row",
]
