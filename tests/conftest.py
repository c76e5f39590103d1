"""Shared fixtures for the unit conversion tests."""

import pytest
from fastapi.testclient import TestClient

from modules.unitconvert.tool.app import app as unitconvert_app
from universe.settings import get_settings


@pytest.fixture
def client():
    """Client for the unitconvert tool app on its own (no host mount)."""
    with TestClient(unitconvert_app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
