"""Notes editor for the active patient.

Lists the patient's notes newest first, saves new notes or full-body edits
of existing ones, and exports a note to PDF.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

from ..errors import LoadFailure, SelectionRequired
from ..export.pdf import ExportedDocument, export_note_pdf
from ..fhir.document_reference import ClinicalNoteBuilder, NoteItem
from ..fhir.fhir_client import FHIRClient
from ..fhir.models import Patient, Practitioner
from ..session.state import SessionState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NotesEditor:
    """Active practitioner + active patient → clinical notes."""

    def __init__(self, client: FHIRClient, session: SessionState) -> None:
        self._client = client
        self._session = session

    def load(self) -> list[NoteItem] | None:
        """The active patient's notes, decoded; None if the selection moved on."""
        patient_id = self._require_patient()
        generation = self._session.generation
        notes = self._client.search_notes(patient_id)
        if not self._session.is_current(generation):
            logger.info("Discarding stale notes for patient %s", patient_id)
            return None
        return [ClinicalNoteBuilder.to_item(n) for n in notes]

    def details(self) -> tuple[Practitioner | None, Patient | None]:
        """Load the active practitioner and patient together.

        Either side is None when it cannot be loaded.
        """
        practitioner_id = self._require_practitioner()
        patient_id = self._require_patient()
        # Both reads share the client's requests.Session, which is safe for concurrent GETs.
        with ThreadPoolExecutor(max_workers=2) as pool:
            practitioner = pool.submit(self._client.get_practitioner, practitioner_id)
            patient = pool.submit(self._client.get_patient, patient_id)
            return _result_or_none(practitioner), _result_or_none(patient)

    def can_save(self, title: str, text: str) -> bool:
        return bool(
            self._session.active_practitioner_id
            and self._session.active_patient_id
            and (title.strip() or text.strip())
        )

    def save(self, title: str, text: str, editing_id: str | None = None) -> list[NoteItem] | None:
        """Create a note, or replace ``editing_id`` with the form contents.

        Returns the refreshed note list (None if stale).

        Raises:
            SelectionRequired: without an active practitioner and patient.
            MutationFailure: if the server did not persist the note.
            LoadFailure: if the note was saved but the refreshed list could not
                be loaded. Reload rather than saving again.
        """
        practitioner_id = self._require_practitioner()
        patient_id = self._require_patient()
        note = ClinicalNoteBuilder.build(
            patient_id=patient_id,
            practitioner_id=practitioner_id,
            title=title,
            text=text,
        )
        if editing_id:
            self._client.update_note(editing_id, note)
        else:
            self._client.create_note(note)
        return self.load()

    @staticmethod
    def start_edit(notes: list[NoteItem], note_id: str) -> tuple[str, str] | None:
        """Form values ``(title, text)`` for editing ``note_id``, if listed."""
        for note in notes:
            if note.id == note_id:
                return note.title or "", note.text or ""
        return None

    @staticmethod
    def export_pdf(
        note: NoteItem,
        patient: Patient | None = None,
        practitioner: Practitioner | None = None,
    ) -> ExportedDocument:
        return export_note_pdf(note, patient=patient, practitioner=practitioner)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require_practitioner(self) -> str:
        practitioner_id = self._session.active_practitioner_id
        if not practitioner_id:
            raise SelectionRequired("Please select a practitioner first")
        return practitioner_id

    def _require_patient(self) -> str:
        patient_id = self._session.active_patient_id
        if not patient_id:
            raise SelectionRequired("Please select a patient first")
        return patient_id


def _result_or_none(future: Future[T]) -> T | None:
    try:
        return future.result()
    except LoadFailure as exc:
        logger.warning("Failed to load details: %s", exc)
        return None
