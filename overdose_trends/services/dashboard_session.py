"""
overdose_trends/services/dashboard_session.py

Single coordinating context for one dashboard viewer.

``DashboardSession`` owns the only mutable state (loaded rows, fields,
column mapping, drug filter, jurisdiction, status text) as one frozen
``AppState`` that is swapped whole on every change. Readers never observe a
half-applied load.

Loads are tagged with a ``LoadTicket``. Starting a new load makes every
older ticket stale; a stale ticket's result is discarded on arrival.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable

from overdose_trends.capabilities import CapabilityReport, get_capability_report
from overdose_trends.config import SchemaMode
from overdose_trends.domain.errors import CSVLoadError, FetchFailedError
from overdose_trends.domain.overdose_series import (
    AggregationResult,
    ColumnMapping,
    ColumnRole,
    FieldSet,
    LoadFailureKind,
    RawRow,
)
from overdose_trends.logging_utils import log_event
from overdose_trends.mappers.column_inferencer import (
    REQUIRED_COLUMNS,
    fixed_schema_mapping,
    merge_guess,
)
from overdose_trends.services.aggregation_service import (
    aggregate,
    observed_drugs,
    observed_jurisdictions,
    reconcile_drug_filter,
)
from overdose_trends.services.chart_adapter import (
    FIXED_SCHEMA_AXIS_TITLES,
    ChartSpec,
    build_chart_spec,
)
from overdose_trends.services.csv_ingestion_service import (
    CSVIngestionService,
    get_csv_ingestion_service,
)
from overdose_trends.services.data_source_service import DataSourceService, decode_csv_bytes

logger = logging.getLogger(__name__)

STATUS_NO_DATA = "No data loaded."
STATUS_PARSE_FAILED = "Failed to parse CSV."
STATUS_AWAITING_UPLOAD = "Upload a CSV to begin."

_NO_DATA_KINDS = {
    LoadFailureKind.NO_DATA,
    LoadFailureKind.MISSING_COLUMNS,
    LoadFailureKind.FETCH_FAILED,
}


@dataclass(frozen=True)
class AppState:
    """
    Everything the page renders from; replaced whole, never edited in place.
    """

    rows: tuple[RawRow, ...] = ()
    fields: FieldSet = ()
    mapping: ColumnMapping = ColumnMapping()
    drug_filter: frozenset[str] | None = None
    jurisdiction: str = ""
    status: str = "Loading…"
    error: str = ""
    failure_kind: LoadFailureKind | None = None
    source_label: str = ""

    @property
    def has_data(self) -> bool:
        return bool(self.rows)


@dataclass(frozen=True)
class LoadTicket:
    """
    Identifies one load attempt; only the newest ticket may apply its result.
    """

    generation: int
    label: str


class DashboardSession:
    """
    Owns AppState and applies loads, mapping edits, and filter edits to it.
    """

    def __init__(
        self,
        *,
        schema_mode: SchemaMode = SchemaMode.MAPPED,
        default_jurisdiction: str = "",
        ingestion_service: CSVIngestionService | None = None,
        capabilities: CapabilityReport | None = None,
    ) -> None:
        self._schema_mode = schema_mode
        self._default_jurisdiction = default_jurisdiction.strip()
        self._ingestion = ingestion_service or get_csv_ingestion_service()
        self._capabilities = capabilities or get_capability_report()
        self._generation = 0

        initial = AppState(
            mapping=fixed_schema_mapping() if self.is_fixed_schema else ColumnMapping(),
            jurisdiction=self._default_jurisdiction if self.is_fixed_schema else "",
        )
        if not self._capabilities.available:
            initial = self._failed_state(initial, self._capabilities.to_error())
        self._state = initial

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def schema_mode(self) -> SchemaMode:
        return self._schema_mode

    @property
    def is_fixed_schema(self) -> bool:
        return self._schema_mode is SchemaMode.FIXED

    def observed_drugs(self) -> tuple[str, ...]:
        return observed_drugs(self._state.rows, self._state.mapping.drug)

    def observed_jurisdictions(self) -> tuple[str, ...]:
        return observed_jurisdictions(self._state.rows, self._state.mapping.jurisdiction)

    def result(self) -> AggregationResult:
        """
        Aggregate the current state from scratch.
        """

        state = self._state
        if not state.rows or not state.mapping.is_complete:
            return AggregationResult.empty()
        return aggregate(
            state.rows,
            state.mapping,
            drug_filter=state.drug_filter,
            jurisdiction=state.jurisdiction or None,
        )

    def chart_spec(self) -> ChartSpec:
        axis_titles = FIXED_SCHEMA_AXIS_TITLES if self.is_fixed_schema else None
        return build_chart_spec(self.result(), self._state.mapping, axis_titles=axis_titles)

    # ------------------------------------------------------------------
    # Loads
    # ------------------------------------------------------------------

    def begin_load(self, label: str) -> LoadTicket:
        """
        Start a load attempt and make every earlier ticket stale.
        """

        self._generation += 1
        self._state = replace(self._state, status=f"Loading {label}…")
        return LoadTicket(generation=self._generation, label=label)

    def is_current(self, ticket: LoadTicket) -> bool:
        return ticket.generation == self._generation

    def complete_load(self, ticket: LoadTicket, text: str) -> bool:
        """
        Parse ``text`` and apply it. Returns False when ``ticket`` is stale.
        """

        if not self._accepts(ticket):
            return False

        try:
            self._capabilities.raise_if_unavailable()
            table = self._ingestion.ingest(text)
            if self.is_fixed_schema:
                self._ingestion.require_columns(table, list(REQUIRED_COLUMNS.values()))
        except CSVLoadError as exc:
            self._state = self._failed_state(self._state, exc, label=ticket.label)
            return True

        mapping = (
            fixed_schema_mapping()
            if self.is_fixed_schema
            else merge_guess(self._state.mapping, table.fields)
        )
        self._state = replace(
            self._state,
            rows=table.rows,
            fields=table.fields,
            mapping=mapping,
            drug_filter=reconcile_drug_filter(
                self._state.drug_filter,
                observed_drugs(table.rows, mapping.drug),
            ),
            jurisdiction=(
                self._state.jurisdiction
                if self.is_fixed_schema
                else self._jurisdiction_target(table.rows, mapping)
            ),
            status=f"Loaded {len(table.rows):,} rows.",
            error="",
            failure_kind=None,
            source_label=ticket.label,
        )
        log_event(
            logger,
            logging.INFO,
            "load_applied",
            source=ticket.label,
            generation=ticket.generation,
            rows=len(table.rows),
            mapping=mapping.as_dict(),
        )
        return True

    def fail_load(self, ticket: LoadTicket, error: CSVLoadError) -> bool:
        """
        Record a failed attempt. Returns False when ``ticket`` is stale.
        """

        if not self._accepts(ticket):
            return False
        self._state = self._failed_state(self._state, error, label=ticket.label)
        return True

    def load_from_source(self, source: str, data_source: DataSourceService) -> bool:
        """
        Fetch the autoload source and apply it under a fresh ticket.
        """

        ticket = self.begin_load(source)
        try:
            text = data_source.fetch_text(source)
        except CSVLoadError as exc:
            return self.fail_load(ticket, exc)
        return self.complete_load(ticket, text)

    def load_upload(self, filename: str, data: bytes) -> bool:
        """
        Apply an uploaded file's bytes under a fresh ticket.
        """

        ticket = self.begin_load(filename)
        try:
            text = decode_csv_bytes(data)
        except CSVLoadError as exc:
            return self.fail_load(ticket, exc)
        return self.complete_load(ticket, text)

    # ------------------------------------------------------------------
    # Selections
    # ------------------------------------------------------------------

    def set_mapping(self, mapping: ColumnMapping) -> None:
        """
        Replace the column mapping; the drug filter is reconciled against it.
        """

        if self.is_fixed_schema:
            logger.debug("Ignoring mapping change in fixed schema mode")
            return
        restricted = mapping.restricted_to(self._state.fields)
        self._state = replace(
            self._state,
            mapping=restricted,
            jurisdiction=(
                self._state.jurisdiction
                if restricted.jurisdiction == self._state.mapping.jurisdiction
                else self._jurisdiction_target(self._state.rows, restricted)
            ),
            drug_filter=reconcile_drug_filter(
                self._state.drug_filter,
                observed_drugs(self._state.rows, restricted.drug),
            ),
        )

    def set_role(self, role: ColumnRole, column: str | None) -> None:
        self.set_mapping(self._state.mapping.with_role(role, column))

    def set_drug_filter(self, drugs: Iterable[str] | None) -> None:
        """
        Select drugs to chart; ``None`` charts every drug.
        """

        selected = None if drugs is None else frozenset(drug.strip() for drug in drugs)
        self._state = replace(
            self._state,
            drug_filter=reconcile_drug_filter(selected, self.observed_drugs()),
        )

    def set_jurisdiction(self, jurisdiction: str | None) -> None:
        self._state = replace(self._state, jurisdiction=(jurisdiction or "").strip())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _accepts(self, ticket: LoadTicket) -> bool:
        if self.is_current(ticket):
            return True
        log_event(
            logger,
            logging.DEBUG,
            "stale_load_discarded",
            source=ticket.label,
            generation=ticket.generation,
            current_generation=self._generation,
        )
        return False

    def _jurisdiction_target(self, rows: tuple[RawRow, ...], mapping: ColumnMapping) -> str:
        """
        Keep the current target if the new data still has it, else fall back to
        the configured default when present, else every jurisdiction.
        """

        observed = observed_jurisdictions(rows, mapping.jurisdiction)
        if self._state.jurisdiction in observed:
            return self._state.jurisdiction
        if self._default_jurisdiction in observed:
            return self._default_jurisdiction
        return ""

    def _failed_state(
        self,
        state: AppState,
        error: CSVLoadError,
        *,
        label: str = "",
    ) -> AppState:
        log_event(
            logger,
            logging.WARNING,
            "load_failed",
            source=label,
            kind=error.kind.value,
            message=error.message,
        )
        if isinstance(error, FetchFailedError) and not self.is_fixed_schema:
            return replace(state, status=STATUS_AWAITING_UPLOAD, error="", failure_kind=None)

        status = STATUS_NO_DATA if error.kind in _NO_DATA_KINDS else STATUS_PARSE_FAILED
        return replace(state, status=status, error=error.message, failure_kind=error.kind)
