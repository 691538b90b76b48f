"""
overdose_trends/capabilities.py

One-time check that the rendering and table libraries can be imported.
"""

from __future__ import annotations

import importlib.util
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Sequence

from overdose_trends.domain.errors import LibrariesUnavailableError

logger = logging.getLogger(__name__)

RENDERING_LIBRARIES: tuple[str, ...] = ("plotly", "pandas")


@dataclass(frozen=True)
class CapabilityReport:
    """
    Availability of the libraries the dashboard renders with.
    """

    checked: tuple[str, ...]
    missing: tuple[str, ...] = ()

    @property
    def available(self) -> bool:
        return not self.missing

    def as_dict(self) -> dict[str, bool]:
        return {name: name not in self.missing for name in self.checked}

    def to_error(self) -> LibrariesUnavailableError:
        return LibrariesUnavailableError(
            f"Charting libraries are not available: {', '.join(self.missing)}."
        )

    def raise_if_unavailable(self) -> None:
        if self.missing:
            raise self.to_error()


def check_capabilities(libraries: Sequence[str] = RENDERING_LIBRARIES) -> CapabilityReport:
    """
    Report which of ``libraries`` cannot be found on the import path.
    """

    missing = tuple(name for name in libraries if importlib.util.find_spec(name) is None)
    if missing:
        logger.error("Rendering libraries unavailable: %s", ", ".join(missing))
    return CapabilityReport(checked=tuple(libraries), missing=missing)


@lru_cache(maxsize=1)
def get_capability_report() -> CapabilityReport:
    """
    Return the cached startup capability report.
    """

    return check_capabilities()
