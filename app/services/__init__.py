"""Services package for the FIRE & compound growth planner."""

from .fire_service import FireService
from .growth_service import GrowthService
from .report_service import ReportService
from .storage_service import StorageService

__all__ = [
    "FireService",
    "GrowthService",
    "ReportService",
    "StorageService",
]
