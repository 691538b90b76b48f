"""
overdose_trends/services package marker.
"""

from overdose_trends.services.aggregation_service import (
    aggregate,
    observed_drugs,
    reconcile_drug_filter,
)
from overdose_trends.services.chart_adapter import ChartSpec, build_chart_spec, build_figure
from overdose_trends.services.csv_ingestion_service import (
    CSVIngestionService,
    get_csv_ingestion_service,
    ingest_csv_text,
)
from overdose_trends.services.dashboard_session import AppState, DashboardSession, LoadTicket
from overdose_trends.services.data_source_service import DataSourceService, decode_csv_bytes

__all__ = [
    "AppState",
    "ChartSpec",
    "CSVIngestionService",
    "DashboardSession",
    "DataSourceService",
    "LoadTicket",
    "aggregate",
    "build_chart_spec",
    "build_figure",
    "decode_csv_bytes",
    "get_csv_ingestion_service",
    "ingest_csv_text",
    "observed_drugs",
    "reconcile_drug_filter",
]
