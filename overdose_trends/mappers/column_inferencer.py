"""
overdose_trends/mappers/column_inferencer.py

Keyword heuristics that map CSV headers onto chart roles.
"""

from __future__ import annotations

import re
from typing import Mapping, Sequence

from overdose_trends.domain.overdose_series import ColumnMapping, ColumnRole

ROLE_PATTERNS: dict[ColumnRole, tuple[str, ...]] = {
    ColumnRole.DRUG: ("drug", "substance", "opioid", "category"),
    ColumnRole.DATE: ("date", "week", "month", "period", "ending"),
    ColumnRole.VALUE: ("death(s)?", "count", "number", "value"),
    ColumnRole.JURISDICTION: ("jurisdiction", "state", "region", "location"),
}

# Fixed CDC schema: role -> literal header.
REQUIRED_COLUMNS: dict[ColumnRole, str] = {
    ColumnRole.JURISDICTION: "jurisdiction_occurrence",
    ColumnRole.DRUG: "drug_involved",
    ColumnRole.DATE: "month_ending_date",
    ColumnRole.VALUE: "drug_overdose_deaths",
}

_SEPARATORS = re.compile(r"[_\-]+")


def _compile(patterns: Mapping[ColumnRole, Sequence[str]]) -> dict[ColumnRole, tuple[re.Pattern[str], ...]]:
    return {
        role: tuple(re.compile(rf"\b(?:{pattern})\b", re.IGNORECASE) for pattern in items)
        for role, items in patterns.items()
    }


_COMPILED_PATTERNS = _compile(ROLE_PATTERNS)


def _searchable(header: str) -> str:
    return _SEPARATORS.sub(" ", header.strip().lower())


def guess_column(role: ColumnRole, field_names: Sequence[str]) -> str:
    """
    Return the first field matching the earliest role pattern that matches any field.
    """

    searchable = [(name, _searchable(name)) for name in field_names if name]
    for pattern in _COMPILED_PATTERNS[role]:
        for name, text in searchable:
            if pattern.search(text):
                return name
    return ""


def guess_columns(field_names: Sequence[str]) -> ColumnMapping:
    """
    Guess every role independently from the header list.
    """

    return ColumnMapping(
        drug=guess_column(ColumnRole.DRUG, field_names),
        date=guess_column(ColumnRole.DATE, field_names),
        value=guess_column(ColumnRole.VALUE, field_names),
        jurisdiction=guess_column(ColumnRole.JURISDICTION, field_names),
    )


def merge_guess(current: ColumnMapping | None, field_names: Sequence[str]) -> ColumnMapping:
    """
    Fill only the unset roles of ``current`` with guesses.

    Roles that point at a column absent from ``field_names`` count as unset.
    """

    kept = (current or ColumnMapping()).restricted_to(field_names)
    guessed = guess_columns(field_names)
    merged = kept
    for role in ColumnRole:
        if not kept.column_for(role):
            merged = merged.with_role(role, guessed.column_for(role))
    return merged


def fixed_schema_mapping() -> ColumnMapping:
    """
    Mapping for the fixed CDC export headers.
    """

    return ColumnMapping(**{role.value: column for role, column in REQUIRED_COLUMNS.items()})
