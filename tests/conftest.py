"""Shared fixtures for the planner test suite."""

import pytest

from app.config import reset_config
from app.services import FireService, GrowthService, StorageService

START_YEAR = 2024


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from (and leaves behind) the default configuration."""
    config = reset_config()
    yield config
    reset_config()


@pytest.fixture
def growth_service():
    return GrowthService()


@pytest.fixture
def fire_service():
    return FireService()


@pytest.fixture
def storage_service(tmp_path):
    return StorageService(str(tmp_path / "calculations.json"))


@pytest.fixture
def baseline_projection(growth_service):
    """100k principal, 1k/month, 7% for 20 years with 2.5% inflation."""
    return growth_service.simulate_compound_growth(
        100000, 1000, 7, 20, 2.5, True, start_year=START_YEAR
    )
