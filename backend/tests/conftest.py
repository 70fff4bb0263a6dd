"""
Pytest fixtures for the report engine tests.

Lead documents are written the way the datastore returns them (camelCase
keys, ISO-8601 timestamps) and validated through the same model the API uses.
"""

from datetime import datetime
from typing import Any, Callable, Dict
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from report_engine.models.lead import Lead

MANILA = ZoneInfo("Asia/Manila")


def lead_doc(**fields: Any) -> Dict[str, Any]:
    """Minimal valid lead document with overrides."""
    doc: Dict[str, Any] = {
        "id": "lead-1",
        "submissionDateTime": "2024-03-10T02:00:00Z",
        "priorityType": "Regular",
        "orderType": "Customize",
        "salesRepresentative": "Ana",
        "customerName": "Acme Corp",
        "orders": [],
    }
    doc.update(fields)
    return doc


@pytest.fixture
def make_doc() -> Callable[..., Dict[str, Any]]:
    """Factory for raw lead documents, as posted to the API."""
    return lead_doc


@pytest.fixture
def make_lead() -> Callable[..., Lead]:
    """Factory building validated Lead models from camelCase overrides."""

    def _make(**fields: Any) -> Lead:
        return Lead.model_validate(lead_doc(**fields))

    return _make


@pytest.fixture
def fixed_now() -> datetime:
    """Noon, 10 March 2024, Manila time."""
    return datetime(2024, 3, 10, 12, 0, tzinfo=MANILA)


@pytest.fixture
def client() -> TestClient:
    from report_engine.main import app

    return TestClient(app)
