"""Deep validation of the clinical note invariants.

Each test breaks exactly one invariant of a known-good note and checks that
ClinicalNoteBuilder.validate() reports it. All tests are offline.
"""

from __future__ import annotations

import pytest

from clinical_notes.errors import NoteValidationError
from clinical_notes.fhir.document_reference import ClinicalNoteBuilder
from clinical_notes.fhir.models import Attachment, DocumentContent, DocumentReference, Reference

pytestmark = pytest.mark.quality


@pytest.fixture
def valid_note() -> DocumentReference:
    """A known-good note that passes all validation rules."""
    return ClinicalNoteBuilder.build(
        patient_id="patient-schema-001",
        practitioner_id="practitioner-schema-001",
        title="Assessment",
        text="Assessment: stable angina.\nPlan: continue current therapy.",
    )


class TestBuilderProducesValidNote:
    def test_valid_note_passes(self, valid_note: DocumentReference) -> None:
        # must not raise
        ClinicalNoteBuilder.validate(valid_note)

    def test_server_shaped_note_passes(self) -> None:
        note = DocumentReference.model_validate({
            "resourceType": "DocumentReference",
            "id": "dr-1",
            "status": "superseded",
            "subject": {"reference": "Patient/p"},
            "author": [{"reference": "Practitioner/a"}],
            "content": [{"attachment": {"contentType": "text/plain"}}],
        })
        ClinicalNoteBuilder.validate(note)


class TestInvariantViolations:
    def test_missing_subject(self, valid_note: DocumentReference) -> None:
        valid_note.subject = None
        with pytest.raises(NoteValidationError, match="subject.reference is required"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_subject_not_a_patient(self, valid_note: DocumentReference) -> None:
        valid_note.subject = Reference(reference="Group/g-1")
        with pytest.raises(NoteValidationError, match="must match 'Patient/id'"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_no_author(self, valid_note: DocumentReference) -> None:
        valid_note.author = []
        with pytest.raises(NoteValidationError, match="exactly one entry, got 0"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_two_authors(self, valid_note: DocumentReference) -> None:
        valid_note.author = [Reference(reference="Practitioner/a"), Reference(reference="Practitioner/b")]
        with pytest.raises(NoteValidationError, match="author must have exactly one entry, got 2"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_author_not_a_practitioner(self, valid_note: DocumentReference) -> None:
        valid_note.author = [Reference(reference="Patient/p")]
        with pytest.raises(NoteValidationError, match=r"author\[0\]"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_author_without_reference(self, valid_note: DocumentReference) -> None:
        valid_note.author = [Reference(display="Dr. Who")]
        with pytest.raises(NoteValidationError, match=r"author\[0\]\.reference None"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_subject_without_reference(self, valid_note: DocumentReference) -> None:
        valid_note.subject = Reference(display="John Doe")
        with pytest.raises(NoteValidationError, match="subject.reference is required"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_two_attachments(self, valid_note: DocumentReference) -> None:
        extra = DocumentContent(attachment=Attachment(content_type="text/plain", data=""))
        valid_note.content = [valid_note.content[0], extra]
        with pytest.raises(NoteValidationError, match="content must have exactly one entry, got 2"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_invalid_base64(self, valid_note: DocumentReference) -> None:
        valid_note.content[0].attachment.data = "!!!not base64!!!"
        with pytest.raises(NoteValidationError, match="not valid base64"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_every_error_reported(self, valid_note: DocumentReference) -> None:
        valid_note.subject = None
        valid_note.author = None
        valid_note.content = None
        with pytest.raises(NoteValidationError, match=r"\(3 error\(s\)\)"):
            ClinicalNoteBuilder.validate(valid_note)

    def test_validation_error_is_value_error(self) -> None:
        assert issubclass(NoteValidationError, ValueError)
