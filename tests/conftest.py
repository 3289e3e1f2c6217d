"""
Pytest configuration and shared fixtures for all tests.
"""

import copy
import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so `app` imports without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from app.services.geocoding import reset_geocoding_provider  # noqa: E402


class FakeDocument:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeQuery:
    """Minimal stand-in for a Firestore collection/query supporting '==' filters."""

    def __init__(self, docs, filters=()):
        self._docs = docs
        self._filters = list(filters)

    def where(self, field_path, op_string, value):
        assert op_string == "=="
        return FakeQuery(self._docs, self._filters + [(field_path, value)])

    def stream(self):
        for doc_id, data in self._docs.items():
            if all(data.get(field) == value for field, value in self._filters):
                yield FakeDocument(doc_id, data)

    def document(self, doc_id):
        docs = self._docs

        class _Ref:
            def get(self):
                return FakeDocument(doc_id, docs.get(doc_id))

            def set(self, data):
                docs[doc_id] = data

        return _Ref()


class FakeFirestore:
    def __init__(self, collections=None):
        self.collections_data = collections or {}

    def collection(self, name):
        return FakeQuery(self.collections_data.setdefault(name, {}))

    def collections(self):
        return list(self.collections_data)


def make_report(address="40.7128, -74.0060", latitude=40.7128, longitude=-74.006, **overrides):
    report = {
        "type": "pothole",
        "severity": "medium",
        "status": "pending",
        "location": {
            "address": address,
            "coordinates": {"latitude": latitude, "longitude": longitude},
        },
        "description": "Pothole in the right lane",
        "priority": 0,
        "createdAt": "2024-01-15T10:30:00Z",
    }
    report.update(overrides)
    return report


@pytest.fixture(autouse=True)
def fresh_geocoding_provider():
    """Every test resolves the provider from current settings."""
    reset_geocoding_provider()
    yield
    reset_geocoding_provider()


@pytest.fixture
def nyc_geocode_result():
    return {
        "address": "123 Main St",
        "city": "NYC",
        "state": "NY",
        "zipCode": "10001",
        "country": "United States",
        "provider": "mapbox",
    }


@pytest.fixture
def fake_db():
    return FakeFirestore()


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test (no external dependencies)"
    )
