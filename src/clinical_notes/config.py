"""Runtime settings read from the environment.

Constructors accept explicit values that take precedence over these.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_FHIR_BASE_URL = "https://hapi.fhir.org/baseR4"

FHIR_BASE_URL = os.environ.get("FHIR_BASE_URL", DEFAULT_FHIR_BASE_URL)


def _optional_float(value: str | None) -> float | None:
    if not value:
        return None
    return float(value)


# Unset means the transport default (no timeout)
FHIR_TIMEOUT = _optional_float(os.environ.get("FHIR_TIMEOUT"))

SESSION_STORAGE_PATH = Path(
    os.environ.get(
        "CLINICAL_NOTES_SESSION_PATH",
        str(Path.home() / ".clinical_notes" / "session.json"),
    )
)

NOTE_PREVIEW_LENGTH = 80
