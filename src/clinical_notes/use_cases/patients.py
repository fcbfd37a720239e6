"""Patient roster for the active practitioner.

Lists the practitioner's patients with a short preview of each patient's
latest note. Previews are fetched concurrently; one failing lookup only
blanks that patient's preview.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from pydantic import BaseModel, Field

from ..errors import ClinicalNotesError, LoadFailure, SelectionRequired
from ..fhir.document_reference import ClinicalNoteBuilder, preview
from ..fhir.fhir_client import FHIRClient
from ..fhir.models import Patient, Practitioner, Reference
from ..session.state import SessionState
from .practitioners import PractitionerDirectory, name_entry

logger = logging.getLogger(__name__)

MAX_PREVIEW_WORKERS = 8


class RosterView(BaseModel):
    patients: list[Patient] = Field(default_factory=list)
    previews: dict[str, str] = Field(
        default_factory=dict,
        description="patient id -> latest note preview; patients without one are absent",
    )


class PatientRoster:
    """Active practitioner → their patients → active patient."""

    def __init__(self, client: FHIRClient, session: SessionState) -> None:
        self._client = client
        self._session = session

    def practitioner(self) -> Practitioner | None:
        """The active practitioner's record, or None if it cannot be loaded."""
        practitioner_id = self._require_practitioner()
        try:
            return self._client.get_practitioner(practitioner_id)
        except LoadFailure as exc:
            logger.warning("Failed to load practitioner %s: %s", practitioner_id, exc)
            return None

    def search(self, query: str = "") -> list[Patient] | None:
        """The active practitioner's patients, newest first.

        Returns None when the selection changed while the request was in flight.
        """
        practitioner_id = self._require_practitioner()
        generation = self._session.generation
        patients = self._client.search_patients(
            name=query.strip() or None,
            practitioner_id=practitioner_id,
        )
        if not self._session.is_current(generation):
            logger.info("Discarding stale patient list for practitioner %s", practitioner_id)
            return None
        return patients

    def load(self, query: str = "") -> RosterView | None:
        """Patients plus latest-note previews, or None if stale."""
        generation = self._session.generation
        patients = self.search(query)
        if patients is None:
            return None
        previews = self.latest_note_previews(patients)
        if not self._session.is_current(generation):
            return None
        return RosterView(patients=patients, previews=previews)

    def latest_note_previews(self, patients: Sequence[Patient]) -> dict[str, str]:
        """``{patient_id: preview}`` of each patient's newest note, if any."""
        patient_ids = [p.id for p in patients if p.id]
        if not patient_ids:
            return {}
        # Workers share the client's requests.Session; only GETs go through it here.
        workers = min(MAX_PREVIEW_WORKERS, len(patient_ids))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(self._latest_preview, patient_ids))
        return {pid: text for pid, text in zip(patient_ids, results) if text}

    def create(self, given: str, family: str) -> Patient:
        """Create an active patient owned by the active practitioner and select it."""
        practitioner_id = self._require_practitioner()
        if not PractitionerDirectory.can_create(given, family):
            raise ValueError("Enter a given or family name")
        created = self._client.create_patient(
            Patient(
                active=True,
                name=[name_entry(given, family)],
                general_practitioner=[Reference(reference=f"Practitioner/{practitioner_id}")],
            )
        )
        self._session.set_active_patient_id(created.id)
        return created

    def select(self, patient_id: str) -> None:
        self._require_practitioner()
        self._session.set_active_patient_id(patient_id)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require_practitioner(self) -> str:
        practitioner_id = self._session.active_practitioner_id
        if not practitioner_id:
            raise SelectionRequired("Please select a practitioner first")
        return practitioner_id

    def _latest_preview(self, patient_id: str) -> str:
        try:
            notes = self._client.search_notes(patient_id)
            if not notes:
                return ""
            return preview(ClinicalNoteBuilder.decode_content(notes[0]))
        except (ClinicalNotesError, ValueError) as exc:
            logger.warning("No preview for patient %s: %s", patient_id, exc)
            return ""
