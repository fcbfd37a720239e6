"""Client-side core of a FHIR-backed clinical notes application."""

from .errors import (
    ClinicalNotesError,
    CreateFailure,
    ExportFailure,
    InvalidServerResponse,
    LoadFailure,
    MutationFailure,
    SelectionRequired,
    UpdateFailure,
)
from .fhir import FHIRClient
from .session import SessionState

__all__ = [
    "ClinicalNotesError",
    "CreateFailure",
    "ExportFailure",
    "InvalidServerResponse",
    "LoadFailure",
    "MutationFailure",
    "SelectionRequired",
    "UpdateFailure",
    "FHIRClient",
    "SessionState",
]
