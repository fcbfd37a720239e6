"""Shared pytest fixtures, sample FHIR payloads, and test markers.

Test tiers
----------
  unit        Fast, fully offline. HTTP is mocked with requests-mock.
              Always run.

  integration Whole practitioner → patient → note flows against a mocked
              FHIR server, with session state persisted to a temp file.

  quality     Deep validation of note invariants and property-based
              (Hypothesis) tests of the pure helpers and the session store.

  live        Real calls to the public HAPI FHIR R4 server. Skipped unless
              FHIR_LIVE_TESTS is set. See tests/live/conftest.py.

Run specific tiers:
  pytest tests/unit tests/integration tests/quality   # offline only
  FHIR_LIVE_TESTS=1 pytest tests/live -m live         # live only
  pytest tests/ -v                                    # everything
"""

from __future__ import annotations

import base64
from pathlib import Path

import pytest

from clinical_notes.fhir.fhir_client import FHIRClient
from clinical_notes.session.state import SessionState
from clinical_notes.session.storage import JSONFileStorage, MemoryStorage

BASE_URL = "https://fhir.example.com/r4"


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast offline unit tests")
    config.addinivalue_line("markers", "integration: mock-based integration tests")
    config.addinivalue_line("markers", "quality: deep-validation, property-based")
    config.addinivalue_line("markers", "live: requires the public HAPI FHIR server (skipped by default)")


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------

def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def bundle(*resources: dict) -> dict:
    """A searchset Bundle wrapping ``resources`` in server order."""
    return {
        "resourceType": "Bundle",
        "type": "searchset",
        "total": len(resources),
        "entry": [{"fullUrl": f"{BASE_URL}/{r['resourceType']}/{r.get('id')}", "resource": r} for r in resources],
    }


def practitioner_json(pid: str = "pract-1", family: str = "Smith", given: str = "Jane") -> dict:
    return {
        "resourceType": "Practitioner",
        "id": pid,
        "active": True,
        "name": [{"family": family, "given": [given], "prefix": ["Dr."]}],
        "meta": {"versionId": "1", "lastUpdated": "2026-10-01T09:00:00.000+00:00"},
    }


def patient_json(pid: str = "pat-1", practitioner_id: str = "pract-1", family: str = "Doe", given: str = "John") -> dict:
    return {
        "resourceType": "Patient",
        "id": pid,
        "active": True,
        "name": [{"family": family, "given": [given]}],
        "generalPractitioner": [{"reference": f"Practitioner/{practitioner_id}"}],
        "meta": {"versionId": "1", "lastUpdated": "2026-10-02T09:00:00.000+00:00"},
    }


def note_json(
    nid: str = "note-1",
    patient_id: str = "pat-1",
    practitioner_id: str = "pract-1",
    title: str = "Follow-up",
    text: str = "Blood pressure stable on current medication.",
    last_updated: str = "2026-10-03T09:00:00.000+00:00",
) -> dict:
    return {
        "resourceType": "DocumentReference",
        "id": nid,
        "status": "current",
        "type": {"text": "Clinical Note"},
        "subject": {"reference": f"Patient/{patient_id}"},
        "author": [{"reference": f"Practitioner/{practitioner_id}"}],
        "description": title,
        "content": [{"attachment": {"contentType": "text/plain", "title": title, "data": b64(text)}}],
        "meta": {"versionId": "1", "lastUpdated": last_updated},
    }


# ---------------------------------------------------------------------------
# Client and session fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def client() -> FHIRClient:
    return FHIRClient(BASE_URL)


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def session(memory_storage: MemoryStorage) -> SessionState:
    return SessionState(memory_storage)


@pytest.fixture
def session_with_practitioner(session: SessionState) -> SessionState:
    session.set_active_practitioner_id("pract-1")
    return session


@pytest.fixture
def session_with_patient(session_with_practitioner: SessionState) -> SessionState:
    session_with_practitioner.set_active_patient_id("pat-1")
    return session_with_practitioner


@pytest.fixture
def session_file(tmp_path: Path) -> Path:
    return tmp_path / "state" / "session.json"


@pytest.fixture
def file_storage(session_file: Path) -> JSONFileStorage:
    return JSONFileStorage(session_file)
