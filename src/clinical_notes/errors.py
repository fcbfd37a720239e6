"""Domain errors raised by the clinical notes core.

Every message is safe to show to the user as-is. Transport exceptions are
chained (``raise ... from exc``) and never escape on their own.
"""

from __future__ import annotations


class ClinicalNotesError(Exception):
    """Base class for every error raised by this package."""


class LoadFailure(ClinicalNotesError):
    """A search or read against the FHIR server failed."""


class MutationFailure(ClinicalNotesError):
    """A create or update did not persist. Callers treat every subclass alike."""


class CreateFailure(MutationFailure):
    """A POST failed at the transport level."""


class UpdateFailure(MutationFailure):
    """A PUT failed at the transport level."""


class InvalidServerResponse(MutationFailure):
    """The server answered 2xx but the body carries no resource id."""

    def __init__(self, message: str = "Invalid response from server") -> None:
        super().__init__(message)


class SelectionRequired(ClinicalNotesError):
    """A workflow needs an active practitioner or patient that is not set."""


class ExportFailure(ClinicalNotesError):
    """Rendering a note to a document failed."""


class NoteValidationError(ValueError):
    """Raised when a locally built note breaks the note invariants."""
