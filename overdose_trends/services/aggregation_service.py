"""
overdose_trends/services/aggregation_service.py

Groups raw CSV rows into one summed time series per drug.

Row handling
------------
Rows are visited in file order and each one ends up in exactly one bucket:

    skipped   – outside the selected jurisdiction, or filtered-out drug
    dropped   – blank drug, unparseable date, or unparseable value
    used      – value added to the (drug, date) running sum

Skipped rows are out of scope for the current view and are not counted.
Dropped rows are reported next to used rows so the chart can show how much
of the file it actually reflects.

Ordering
--------
Points are sorted by their ISO date key (lexicographic order equals
chronological order for ``YYYY-MM-DD``). Series are sorted by drug name with
``drug_sort_key`` so results never depend on dict or set iteration order.

The whole result is recomputed on every call; nothing is cached or mutated
incrementally.
"""

from __future__ import annotations

import logging
import unicodedata
from collections import defaultdict
from typing import AbstractSet, Iterable

from overdose_trends.domain.overdose_series import (
    AggregationResult,
    ColumnMapping,
    RawRow,
    TimeSeries,
    resolve_row,
)
from overdose_trends.logging_utils import log_event
from overdose_trends.validators.value_parsers import date_key, parse_date, parse_number

logger = logging.getLogger(__name__)


def drug_sort_key(name: str) -> tuple[str, str, str, str]:
    """
    Collation-style ordering: base letters first, then accents, then case
    (lower before upper), then the raw name as a deterministic tie breaker.
    """

    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return (base.casefold(), decomposed.casefold(), name.swapcase(), name)


def aggregate(
    rows: Iterable[RawRow],
    mapping: ColumnMapping,
    drug_filter: AbstractSet[str] | None = None,
    jurisdiction: str | None = None,
) -> AggregationResult:
    """
    Sum values per drug and per normalized date.

    Parameters
    ----------
    rows:
        Raw CSV rows in file order.
    mapping:
        Role bindings. Jurisdiction filtering applies only when both
        ``mapping.jurisdiction`` and ``jurisdiction`` are set.
    drug_filter:
        Drugs to keep; ``None`` keeps every drug.
    jurisdiction:
        Target jurisdiction compared against the trimmed cell.
    """

    target_jurisdiction = (jurisdiction or "").strip()
    filter_jurisdiction = bool(mapping.jurisdiction and target_jurisdiction)

    sums_by_drug: dict[str, dict[str, float]] = defaultdict(lambda: defaultdict(float))
    used_rows = 0
    dropped_rows = 0
    skipped_rows = 0

    for raw_row in rows:
        row = resolve_row(raw_row, mapping)

        if filter_jurisdiction and row.jurisdiction.strip() != target_jurisdiction:
            skipped_rows += 1
            continue

        drug = row.drug.strip()
        if not drug:
            dropped_rows += 1
            continue

        if drug_filter is not None and drug not in drug_filter:
            skipped_rows += 1
            continue

        parsed_date = parse_date(row.date)
        value = parse_number(row.value)
        if parsed_date is None or value is None:
            dropped_rows += 1
            continue

        sums_by_drug[drug][date_key(parsed_date)] += value
        used_rows += 1

    series = tuple(
        TimeSeries(drug=drug, points=tuple(sorted(sums_by_drug[drug].items())))
        for drug in sorted(sums_by_drug, key=drug_sort_key)
    )

    log_event(
        logger,
        logging.DEBUG,
        "aggregation_completed",
        series=len(series),
        used_rows=used_rows,
        dropped_rows=dropped_rows,
        skipped_rows=skipped_rows,
    )
    return AggregationResult(series=series, used_rows=used_rows, dropped_rows=dropped_rows)


def _distinct_cells(rows: Iterable[RawRow], column: str) -> tuple[str, ...]:
    if not column:
        return ()
    names = {
        str(raw_row.get(column) or "").strip()
        for raw_row in rows
    }
    names.discard("")
    return tuple(sorted(names, key=drug_sort_key))


def observed_drugs(rows: Iterable[RawRow], drug_column: str) -> tuple[str, ...]:
    """
    Distinct non-blank drug names found in ``drug_column``, sorted for display.
    """

    return _distinct_cells(rows, drug_column)


def observed_jurisdictions(rows: Iterable[RawRow], jurisdiction_column: str) -> tuple[str, ...]:
    return _distinct_cells(rows, jurisdiction_column)


def reconcile_drug_filter(
    current: AbstractSet[str] | None,
    observed: Iterable[str],
) -> frozenset[str] | None:
    """
    Drop filter entries that no longer name an observed drug.

    ``None`` ("include all") is left untouched.
    """

    if current is None:
        return None
    return frozenset(current) & frozenset(observed)
