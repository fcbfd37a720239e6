"""Skip guards for live tests.

Live tests talk to a real FHIR R4 server and write synthetic records to it.
They silently skip unless explicitly enabled; they never fail because the
network or the environment is missing.

Environment variables:
  FHIR_LIVE_TESTS          Any non-empty value enables the live tier
  FHIR_BASE_URL            Server to test against (default: public HAPI R4)

Run:
  FHIR_LIVE_TESTS=1 pytest tests/live -v -m live
"""

from __future__ import annotations

import os

import pytest

from clinical_notes import config
from clinical_notes.fhir.fhir_client import FHIRClient

LIVE_TIMEOUT_S = 30.0


def _skip_unless(env_var: str, reason: str | None = None):
    """Return a pytest.mark.skipif that skips when env_var is not set."""
    msg = reason or f"Set {env_var} to run this test"
    return pytest.mark.skipif(not os.environ.get(env_var), reason=msg)


skip_no_live = _skip_unless("FHIR_LIVE_TESTS", "Set FHIR_LIVE_TESTS=1 to run tests against a real FHIR server")


@pytest.fixture(scope="session")
def live_client() -> FHIRClient:
    if not os.environ.get("FHIR_LIVE_TESTS"):
        pytest.skip("FHIR_LIVE_TESTS not set")
    return FHIRClient(config.FHIR_BASE_URL, timeout=LIVE_TIMEOUT_S)
