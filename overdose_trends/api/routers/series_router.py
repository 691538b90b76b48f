"""
overdose_trends/api/routers/series_router.py

HTTP endpoints that turn an uploaded CSV into per-drug time series.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status

from overdose_trends.api.dependencies import get_csv_upload, get_settings
from overdose_trends.config import DashboardSettings, SchemaMode
from overdose_trends.domain.errors import CSVLoadError, MissingColumnsError
from overdose_trends.domain.overdose_series import ColumnMapping, ColumnRole, CSVTable
from overdose_trends.mappers.column_inferencer import (
    REQUIRED_COLUMNS,
    fixed_schema_mapping,
    guess_columns,
    merge_guess,
)
from overdose_trends.schemas.series import (
    ColumnMappingResponse,
    ColumnsResponse,
    LoadErrorResponse,
    SeriesResponse,
)
from overdose_trends.services.aggregation_service import (
    aggregate,
    observed_drugs,
    observed_jurisdictions,
    reconcile_drug_filter,
)
from overdose_trends.services.csv_ingestion_service import (
    CSVIngestionService,
    get_csv_ingestion_service,
)
from overdose_trends.services.data_source_service import decode_csv_bytes

router = APIRouter(tags=["series"])


def _load_error_detail(exc: CSVLoadError) -> dict:
    return LoadErrorResponse(**exc.to_dict()).model_dump(exclude_none=True)


def _load_table(
    file: UploadFile,
    ingestion_service: CSVIngestionService,
    settings: DashboardSettings,
) -> CSVTable:
    try:
        table = ingestion_service.ingest(decode_csv_bytes(file.file.read()))
        if settings.schema_mode is SchemaMode.FIXED:
            ingestion_service.require_columns(table, list(REQUIRED_COLUMNS.values()))
    except CSVLoadError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_load_error_detail(exc),
        ) from exc
    finally:
        file.file.close()
    return table


@router.post("/columns", response_model=ColumnsResponse)
def inspect_columns(
    file: UploadFile = Depends(get_csv_upload),
    settings: DashboardSettings = Depends(get_settings),
    ingestion_service: CSVIngestionService = Depends(get_csv_ingestion_service),
) -> ColumnsResponse:
    """
    Return the CSV header and the heuristic role guesses for it.
    """

    table = _load_table(file, ingestion_service, settings)
    guessed = (
        fixed_schema_mapping()
        if settings.schema_mode is SchemaMode.FIXED
        else guess_columns(table.fields)
    )
    return ColumnsResponse(
        fields=list(table.fields),
        guessed_mapping=ColumnMappingResponse.from_mapping(guessed),
        row_count=len(table.rows),
    )


@router.post("/series", response_model=SeriesResponse)
def build_series(
    file: UploadFile = Depends(get_csv_upload),
    drug_column: str | None = Query(default=None, description="Column holding the drug name"),
    date_column: str | None = Query(default=None, description="Column holding the period date"),
    value_column: str | None = Query(default=None, description="Column holding the death count"),
    jurisdiction_column: str | None = Query(default=None, description="Optional jurisdiction column"),
    jurisdiction: str | None = Query(default=None, description="Keep only rows for this jurisdiction"),
    drug: list[str] | None = Query(default=None, description="Drugs to include; all when omitted"),
    settings: DashboardSettings = Depends(get_settings),
    ingestion_service: CSVIngestionService = Depends(get_csv_ingestion_service),
) -> SeriesResponse:
    """
    Aggregate one CSV upload into sorted per-drug series.
    """

    table = _load_table(file, ingestion_service, settings)

    if settings.schema_mode is SchemaMode.FIXED:
        mapping = fixed_schema_mapping()
        if jurisdiction is None:
            jurisdiction = settings.default_jurisdiction
    else:
        requested = ColumnMapping(
            drug=(drug_column or "").strip(),
            date=(date_column or "").strip(),
            value=(value_column or "").strip(),
            jurisdiction=(jurisdiction_column or "").strip(),
        )
        unknown = [
            column
            for column in requested.as_dict().values()
            if column and column not in table.fields
        ]
        if unknown:
            error = MissingColumnsError(unknown)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_load_error_detail(error))
        mapping = merge_guess(requested, table.fields)
        if jurisdiction is None and settings.default_jurisdiction in observed_jurisdictions(
            table.rows, mapping.jurisdiction
        ):
            jurisdiction = settings.default_jurisdiction

    unmapped = [
        role.value
        for role in (ColumnRole.DRUG, ColumnRole.DATE, ColumnRole.VALUE)
        if not mapping.column_for(role)
    ]
    if unmapped:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Could not determine columns for: {', '.join(unmapped)}. Pass them explicitly.",
        )

    drug_filter = reconcile_drug_filter(
        frozenset(name.strip() for name in drug) if drug else None,
        observed_drugs(table.rows, mapping.drug),
    )
    result = aggregate(table.rows, mapping, drug_filter=drug_filter, jurisdiction=jurisdiction)
    return SeriesResponse.from_result(result, mapping)
