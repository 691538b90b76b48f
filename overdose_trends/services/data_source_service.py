"""
overdose_trends/services/data_source_service.py

Obtains CSV text from the autoload source or from uploaded bytes.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from overdose_trends.config import HTTPSettings, get_http_settings
from overdose_trends.domain.errors import CSVParseError, FetchFailedError

logger = logging.getLogger(__name__)

_HTTP_SCHEMES = ("http://", "https://")


def decode_csv_bytes(data: bytes) -> str:
    """
    Decode uploaded CSV bytes as UTF-8, dropping a byte-order mark if present.
    """

    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise CSVParseError("CSV must be UTF-8 encoded.") from exc


class DataSourceService:
    """
    Reads the well-known CSV source, either a local path or an HTTP(S) URL.
    """

    def __init__(
        self,
        *,
        http_settings: HTTPSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        settings = http_settings or get_http_settings()
        self._timeout_seconds = settings.timeout_seconds
        self._session = session or requests.Session()

    def fetch_text(self, source: str) -> str:
        """
        Return the CSV text behind ``source`` or raise ``FetchFailedError``.
        """

        if source.lower().startswith(_HTTP_SCHEMES):
            return self._fetch_url(source)
        return self._read_path(source)

    def _fetch_url(self, url: str) -> str:
        try:
            response = self._session.get(
                url,
                timeout=self._timeout_seconds,
                headers={"Cache-Control": "no-store"},
            )
        except requests.RequestException as exc:
            logger.warning("Autoload request failed url=%s: %s", url, exc)
            raise FetchFailedError(url, reason=str(exc)) from exc

        if not response.ok:
            logger.warning("Autoload request returned status=%s url=%s", response.status_code, url)
            raise FetchFailedError(url, reason=f"HTTP {response.status_code}")

        return decode_csv_bytes(response.content)

    @staticmethod
    def _read_path(source: str) -> str:
        path = Path(source).expanduser()
        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.info("Autoload file unavailable path=%s: %s", path, exc)
            raise FetchFailedError(source, reason=str(exc)) from exc
        return decode_csv_bytes(data)
