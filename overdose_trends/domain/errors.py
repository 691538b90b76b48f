"""
overdose_trends/domain/errors.py

Load-level exceptions raised while obtaining and parsing CSV input.

Row-level problems (blank drug, unparseable date or value) are never
raised; the aggregator only counts them.
"""

from __future__ import annotations

from typing import Any, Sequence

from overdose_trends.domain.overdose_series import LoadFailureKind


class CSVLoadError(ValueError):
    """
    Base class for every failure that prevents a load from being applied.
    """

    kind: LoadFailureKind = LoadFailureKind.PARSE_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}


class LibrariesUnavailableError(CSVLoadError):
    """
    Raised when the charting or parsing libraries cannot be imported.
    """

    kind = LoadFailureKind.LIBRARIES_UNAVAILABLE


class EmptyInputError(CSVLoadError):
    """
    Raised when the input text carries no meaningful content.
    """

    kind = LoadFailureKind.EMPTY_INPUT


class DelimiterAmbiguousError(CSVLoadError):
    """
    Raised when neither the sniffed nor the forced comma delimiter yields columns.
    """

    kind = LoadFailureKind.DELIMITER_AMBIGUOUS


class CSVParseError(CSVLoadError):
    """
    Raised on a structural CSV error; the message is the parser's own.
    """

    kind = LoadFailureKind.PARSE_ERROR


class NoDataError(CSVLoadError):
    """
    Raised when a structurally valid CSV has no data rows or no fields.
    """

    kind = LoadFailureKind.NO_DATA


class MissingColumnsError(CSVLoadError):
    """
    Raised by the fixed-schema check when required headers are absent.
    """

    kind = LoadFailureKind.MISSING_COLUMNS

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"CSV is missing required columns: {', '.join(self.missing)}")

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["missing"] = list(self.missing)
        return payload


class FetchFailedError(CSVLoadError):
    """
    Raised when the autoload source is unreachable or answers with an error status.
    """

    kind = LoadFailureKind.FETCH_FAILED

    def __init__(self, source: str, *, reason: str | None = None) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Could not load {source}.")
