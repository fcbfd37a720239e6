"""Clinical note builder on top of the FHIR R4 DocumentReference resource.

A note is a DocumentReference with exactly one subject Patient, exactly one
author Practitioner and exactly one ``text/plain`` attachment whose ``data``
holds the note body as base64 of its UTF-8 bytes.
"""

from __future__ import annotations

import base64
import binascii
import re

from pydantic import BaseModel, Field

from ..config import NOTE_PREVIEW_LENGTH
from ..errors import NoteValidationError
from .models import (
    Attachment,
    CodeableText,
    DocumentContent,
    DocumentReference,
    Reference,
    last_updated,
)


NOTE_TYPE_TEXT     = "Clinical Note"
NOTE_CONTENT_TYPE  = "text/plain"
DEFAULT_NOTE_TITLE = "Untitled Note"
DEFAULT_FILE_TITLE = "note.txt"

_VALID_STATUSES    = {"current", "superseded", "entered-in-error"}
_FHIR_REFERENCE_RE = re.compile(r"^[A-Z][A-Za-z]+/.+$")


class NoteItem(BaseModel):
    """A note decoded for display."""

    id: str
    title: str | None = Field(default=None, description="The note's description")
    text: str | None = Field(default=None, description="Decoded attachment body")
    last_updated: str | None = None


class ClinicalNoteBuilder:
    """Build, validate and decode clinical note DocumentReferences."""

    @staticmethod
    def build(
        patient_id: str,
        practitioner_id: str,
        title: str = "",
        text: str = "",
    ) -> DocumentReference:
        """Build a validated note ready to POST (or PUT as a full body).

        Args:
            patient_id: FHIR Patient logical ID, becomes ``subject``.
            practitioner_id: FHIR Practitioner logical ID, the single author.
            title: Human title. Blank falls back to "Untitled Note" for the
                   description and "note.txt" for the attachment title.
            text: Plain-text note body.

        Raises:
            ValueError: if patient_id or practitioner_id are empty.
            NoteValidationError: if the note breaks an invariant.
        """
        if not patient_id or not patient_id.strip():
            raise ValueError("patient_id must not be empty")
        if not practitioner_id or not practitioner_id.strip():
            raise ValueError("practitioner_id must not be empty")

        note = DocumentReference(
            status="current",
            type=CodeableText(text=NOTE_TYPE_TEXT),
            subject=Reference(reference=f"Patient/{patient_id}"),
            author=[Reference(reference=f"Practitioner/{practitioner_id}")],
            description=title or DEFAULT_NOTE_TITLE,
            content=[
                DocumentContent(
                    attachment=Attachment(
                        content_type=NOTE_CONTENT_TYPE,
                        title=title or DEFAULT_FILE_TITLE,
                        data=encode_text(text),
                    )
                )
            ],
        )

        ClinicalNoteBuilder.validate(note)
        return note

    @staticmethod
    def validate(note: DocumentReference) -> None:
        """Check the note invariants, reporting every violation at once.

        Checks:
          - status, if present, is a valid R4 code
          - subject.reference is present and matches 'Patient/id'
          - exactly one author, matching 'Practitioner/id'
          - exactly one content attachment whose data, if present, is base64

        Raises:
            NoteValidationError: listing every error found.
        """
        errors: list[str] = []

        if note.status and note.status not in _VALID_STATUSES:
            errors.append(f"status {note.status!r} is not a valid R4 code: {_VALID_STATUSES}")

        subject_ref = note.subject.reference if note.subject else None
        if not subject_ref:
            errors.append("subject.reference is required")
        elif not _FHIR_REFERENCE_RE.match(subject_ref) or not subject_ref.startswith("Patient/"):
            errors.append(f"subject.reference {subject_ref!r} must match 'Patient/id'")

        authors = note.author or []
        if len(authors) != 1:
            errors.append(f"author must have exactly one entry, got {len(authors)}")
        for i, author in enumerate(authors):
            author_ref = author.reference or ""
            if not author_ref.startswith("Practitioner/") or not _FHIR_REFERENCE_RE.match(author_ref):
                errors.append(f"author[{i}].reference {author.reference!r} must match 'Practitioner/id'")

        content = note.content or []
        if len(content) != 1:
            errors.append(f"content must have exactly one entry, got {len(content)}")
        elif content[0].attachment.data:
            try:
                base64.b64decode(content[0].attachment.data, validate=True)
            except binascii.Error:
                errors.append("content[0].attachment.data is not valid base64")

        if errors:
            bullet_list = "\n  - ".join(errors)
            raise NoteValidationError(
                f"Clinical note validation failed ({len(errors)} error(s)):\n  - {bullet_list}"
            )

    @staticmethod
    def decode_content(note: DocumentReference) -> str:
        """Decode the base64 note body of the first attachment."""
        try:
            data = note.content[0].attachment.data  # type: ignore[index]
        except (TypeError, IndexError) as exc:
            raise ValueError(f"Cannot decode DocumentReference content: {exc}") from exc
        if data is None:
            raise ValueError("Cannot decode DocumentReference content: attachment has no data")
        return decode_text(data)

    @staticmethod
    def to_item(note: DocumentReference) -> NoteItem:
        """Project a note for display; a missing body decodes to ``None``."""
        try:
            text: str | None = ClinicalNoteBuilder.decode_content(note)
        except ValueError:
            text = None
        return NoteItem(
            id=note.id or "",
            title=note.description,
            text=text,
            last_updated=last_updated(note),
        )


def encode_text(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_text(data: str) -> str:
    """Reverse of encode_text.

    Notes written by byte-per-character clients are Latin-1; those decode
    through the fallback instead of failing.
    """
    try:
        raw = base64.b64decode(data)
    except binascii.Error as exc:
        raise ValueError(f"Cannot decode DocumentReference content: {exc}") from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def preview(text: str, limit: int = NOTE_PREVIEW_LENGTH) -> str:
    """First ``limit`` characters, with '...' when truncated."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
