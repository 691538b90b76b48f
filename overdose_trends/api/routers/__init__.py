"""
overdose_trends/api/routers package marker.
"""

from overdose_trends.api.routers.series_router import router as series_router

__all__ = [
    "series_router",
]
