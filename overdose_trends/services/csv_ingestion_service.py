"""
overdose_trends/services/csv_ingestion_service.py

Service layer that turns raw CSV text into rows and header-ordered fields.

Parsing steps:

    1. Reject input with no real content (EmptyInputError).
    2. Sniff the delimiter among ``, ; TAB |``.
    3. If sniffing fails, or the header yields at most one usable field,
       parse once more forcing a comma (DelimiterAmbiguousError if that
       does not help either).
    4. Reject structurally valid input without rows or fields (NoDataError).

Cells are kept as raw strings; trimming and typing belong to the value
parsers used by the aggregator.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Sequence

from overdose_trends.domain.errors import (
    CSVParseError,
    DelimiterAmbiguousError,
    EmptyInputError,
    MissingColumnsError,
    NoDataError,
)
from overdose_trends.domain.overdose_series import CSVTable, RawRow
from overdose_trends.logging_utils import log_event

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 10
SNIFF_DELIMITERS = ",;\t|"
SNIFF_SAMPLE_CHARS = 64 * 1024
FALLBACK_DELIMITER = ","

_AMBIGUOUS_DELIMITER_MESSAGE = (
    "Could not detect the CSV delimiter: the header has fewer than two columns."
)


@dataclass(frozen=True)
class _ParsedText:
    fields: tuple[str, ...]
    rows: tuple[RawRow, ...]
    delimiter: str


class CSVIngestionService:
    """
    Parses CSV text into a ``CSVTable``; every failure is a ``CSVLoadError``.
    """

    def __init__(
        self,
        *,
        min_content_length: int = MIN_CONTENT_LENGTH,
        sniff_sample_chars: int = SNIFF_SAMPLE_CHARS,
    ) -> None:
        self._min_content_length = max(0, min_content_length)
        self._sniff_sample_chars = max(1, sniff_sample_chars)

    def ingest(self, text: str) -> CSVTable:
        """
        Parse ``text`` into rows (file order) and fields (header order).
        """

        raw = text.removeprefix("\ufeff")
        trimmed = raw.strip()
        if len(trimmed) < self._min_content_length:
            raise EmptyInputError(
                f"The CSV appears to be empty ({len(trimmed)} characters read)."
            )

        parsed = self._parse_with_fallback(raw)
        if not parsed.rows or not parsed.fields:
            raise NoDataError("No data found in CSV (missing header row or empty file).")

        log_event(
            logger,
            logging.INFO,
            "csv_ingested",
            rows=len(parsed.rows),
            fields=len(parsed.fields),
            delimiter=parsed.delimiter,
        )
        return CSVTable(rows=parsed.rows, fields=parsed.fields, delimiter=parsed.delimiter)

    def require_columns(self, table: CSVTable, required: Sequence[str]) -> None:
        """
        Raise ``MissingColumnsError`` naming every required column absent from ``table``.
        """

        present = set(table.fields)
        missing = [column for column in required if column not in present]
        if missing:
            raise MissingColumnsError(missing)

    # ------------------------------------------------------------------
    # Parsing internals
    # ------------------------------------------------------------------

    def _parse_with_fallback(self, raw: str) -> _ParsedText:
        sniffed = self._sniff_delimiter(raw)
        first_error: CSVParseError | None = None

        if sniffed is not None:
            try:
                parsed = self._parse(raw, sniffed)
            except CSVParseError as exc:
                first_error = exc
            else:
                if len(parsed.fields) > 1:
                    return parsed
                if sniffed == FALLBACK_DELIMITER:
                    raise DelimiterAmbiguousError(_AMBIGUOUS_DELIMITER_MESSAGE)

        logger.debug("Retrying CSV parse with forced delimiter %r", FALLBACK_DELIMITER)
        try:
            parsed = self._parse(raw, FALLBACK_DELIMITER)
        except CSVParseError:
            if first_error is not None:
                raise first_error
            raise

        if len(parsed.fields) <= 1:
            if first_error is not None:
                raise first_error
            raise DelimiterAmbiguousError(_AMBIGUOUS_DELIMITER_MESSAGE)
        return parsed

    def _sniff_delimiter(self, raw: str) -> str | None:
        sample = raw[: self._sniff_sample_chars]
        if len(raw) > self._sniff_sample_chars and "\n" in sample:
            sample = sample[: sample.rindex("\n")]
        try:
            return csv.Sniffer().sniff(sample, delimiters=SNIFF_DELIMITERS).delimiter
        except csv.Error:
            return None

    @staticmethod
    def _parse(raw: str, delimiter: str) -> _ParsedText:
        reader = csv.reader(io.StringIO(raw, newline=""), delimiter=delimiter, strict=True)
        header: list[str | None] | None = None
        rows: list[RawRow] = []

        try:
            for record in reader:
                if _is_empty_line(record):
                    continue
                if header is None:
                    header = _normalize_header(record)
                    continue
                rows.append(_build_row(header, record))
        except csv.Error as exc:
            raise CSVParseError(str(exc) or "CSV parse error") from exc

        fields = tuple(name for name in (header or []) if name)
        return _ParsedText(fields=fields, rows=tuple(rows), delimiter=delimiter)


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _is_empty_line(record: Sequence[str]) -> bool:
    return not record or (len(record) == 1 and not record[0].strip())


def _normalize_header(record: Sequence[str]) -> list[str | None]:
    """
    Trim header cells, drop blank names, and make duplicates distinct.
    """

    seen: set[str] = set()
    names: list[str | None] = []
    for cell in record:
        name = cell.strip()
        if not name:
            names.append(None)
            continue
        candidate = name
        suffix = 0
        while candidate in seen:
            suffix += 1
            candidate = f"{name}_{suffix}"
        seen.add(candidate)
        names.append(candidate)
    return names


def _build_row(header: Sequence[str | None], record: Sequence[str]) -> RawRow:
    cells = {
        name: record[index] if index < len(record) else ""
        for index, name in enumerate(header)
        if name
    }
    return MappingProxyType(cells)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with default limits.
    """

    return CSVIngestionService()


def ingest_csv_text(text: str) -> CSVTable:
    """
    Parse CSV text with the shared ingestion service.
    """

    return get_csv_ingestion_service().ingest(text)
