"""UI components for the FIRE & compound growth planner."""

from .calculators import CompoundInterestComponent, FireComponent, ScenarioComponent
from .charts import ChartComponent
from .results import ResultsComponent
from .saved import SavedCalculationsComponent
from .sidebar import SidebarComponent

__all__ = [
    "SidebarComponent",
    "ChartComponent",
    "ResultsComponent",
    "CompoundInterestComponent",
    "FireComponent",
    "ScenarioComponent",
    "SavedCalculationsComponent",
]
