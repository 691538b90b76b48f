"""
overdose_trends/domain/overdose_series.py

Domain models shared by ingestion, aggregation, and presentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Mapping, Sequence

RawRow = Mapping[str, str]
FieldSet = tuple[str, ...]
DrugFilter = frozenset[str] | None


class ColumnRole(str, Enum):
    """
    Closed set of roles a CSV column can play in the chart.
    """

    DRUG = "drug"
    DATE = "date"
    VALUE = "value"
    JURISDICTION = "jurisdiction"


class LoadFailureKind(str, Enum):
    """
    Load-level failure categories surfaced to the user.
    """

    LIBRARIES_UNAVAILABLE = "libraries_unavailable"
    EMPTY_INPUT = "empty_input"
    DELIMITER_AMBIGUOUS = "delimiter_ambiguous"
    PARSE_ERROR = "parse_error"
    NO_DATA = "no_data"
    MISSING_COLUMNS = "missing_columns"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class CSVTable:
    """
    Parsed CSV content: rows in file order, fields in header order.
    """

    rows: tuple[RawRow, ...]
    fields: FieldSet
    delimiter: str = ","


@dataclass(frozen=True)
class ColumnMapping:
    """
    Role-to-column bindings. An empty string means the role is unset.
    """

    drug: str = ""
    date: str = ""
    value: str = ""
    jurisdiction: str = ""

    def column_for(self, role: ColumnRole) -> str:
        return getattr(self, role.value)

    def with_role(self, role: ColumnRole, column: str | None) -> ColumnMapping:
        return replace(self, **{role.value: (column or "").strip()})

    def restricted_to(self, available: Sequence[str]) -> ColumnMapping:
        """
        Clear every role that points at a column missing from ``available``.
        """

        known = set(available)
        stale = {
            item.name: ""
            for item in fields(self)
            if getattr(self, item.name) not in known
        }
        return replace(self, **stale)

    @property
    def is_complete(self) -> bool:
        """
        True when the three roles needed for charting are bound.
        """

        return bool(self.drug and self.date and self.value)

    def as_dict(self) -> dict[str, str]:
        return {role.value: self.column_for(role) for role in ColumnRole}


@dataclass(frozen=True)
class ResolvedRow:
    """
    One raw row projected onto the chart roles. Cells are still raw text.
    """

    drug: str
    date: str
    value: str
    jurisdiction: str = ""


def resolve_row(raw_row: RawRow, mapping: ColumnMapping) -> ResolvedRow:
    """
    Project a raw CSV row onto the mapped roles; unbound or absent cells become "".
    """

    def cell(column: str) -> str:
        if not column:
            return ""
        value = raw_row.get(column)
        return "" if value is None else str(value)

    return ResolvedRow(
        drug=cell(mapping.drug),
        date=cell(mapping.date),
        value=cell(mapping.value),
        jurisdiction=cell(mapping.jurisdiction),
    )


@dataclass(frozen=True)
class TimeSeries:
    """
    Summed values for one drug, strictly increasing by ISO date key.
    """

    drug: str
    points: tuple[tuple[str, float], ...]

    @property
    def dates(self) -> list[str]:
        return [date_key for date_key, _ in self.points]

    @property
    def values(self) -> list[float]:
        return [value for _, value in self.points]


@dataclass(frozen=True)
class AggregationResult:
    """
    Hand-off artifact to presentation: one series per drug plus row counters.
    """

    series: tuple[TimeSeries, ...] = field(default_factory=tuple)
    used_rows: int = 0
    dropped_rows: int = 0

    @classmethod
    def empty(cls) -> AggregationResult:
        return cls()

    @property
    def drugs(self) -> list[str]:
        return [item.drug for item in self.series]

    def series_for(self, drug: str) -> TimeSeries | None:
        for item in self.series:
            if item.drug == drug:
                return item
        return None
