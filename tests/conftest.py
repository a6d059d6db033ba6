"""Shared fixtures for the test suite."""
import pytest

from helpers import StubEnrichmentClient
from part_lifecycle.models import PartRecord
from part_lifecycle.services.row_processor import RowProcessor


@pytest.fixture
def parts():
    return [PartRecord(part=f"P{i}", website=f"vendor{i}.com") for i in range(4)]


@pytest.fixture
def stub_client():
    return StubEnrichmentClient()


@pytest.fixture
def processor(stub_client):
    return RowProcessor(stub_client)
