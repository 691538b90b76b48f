"""
overdose_trends/mappers package marker.
"""

from overdose_trends.mappers.column_inferencer import (
    REQUIRED_COLUMNS,
    ROLE_PATTERNS,
    fixed_schema_mapping,
    guess_column,
    guess_columns,
    merge_guess,
)

__all__ = [
    "REQUIRED_COLUMNS",
    "ROLE_PATTERNS",
    "fixed_schema_mapping",
    "guess_column",
    "guess_columns",
    "merge_guess",
]
