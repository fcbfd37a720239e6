"""Example: pick a practitioner and patient, write a note, export it to PDF.

Talks to the server in FHIR_BASE_URL (public HAPI R4 by default) and keeps
the selection in CLINICAL_NOTES_SESSION_PATH, so running it twice reuses the
same practitioner and patient.

Usage:
    python examples/walkthrough.py
"""

from __future__ import annotations

import logging
from pathlib import Path

from clinical_notes import config
from clinical_notes.errors import ClinicalNotesError
from clinical_notes.fhir.fhir_client import FHIRClient
from clinical_notes.fhir.models import display_name
from clinical_notes.session.state import SessionState
from clinical_notes.session.storage import JSONFileStorage
from clinical_notes.use_cases import NotesEditor, PatientRoster, PractitionerDirectory


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print(f"=== Clinical notes walkthrough against {config.FHIR_BASE_URL} ===\n")

    client = FHIRClient()
    session = SessionState(JSONFileStorage(config.SESSION_STORAGE_PATH))
    session.subscribe(
        lambda s: print(f"  [session] practitioner={s.active_practitioner_id} patient={s.active_patient_id}")
    )

    try:
        # 1. Practitioner
        if not session.active_practitioner_id:
            practitioner = PractitionerDirectory(client, session).create("Ada", "Example")
            print(f"Created practitioner {display_name(practitioner)} ({practitioner.id})")

        # 2. Patient
        roster = PatientRoster(client, session)
        if not session.active_patient_id:
            patient = roster.create("Sam", "Sample")
            print(f"Created patient {display_name(patient)} ({patient.id})")
        view = roster.load()
        if view is not None:
            print(f"Practitioner has {len(view.patients)} patient(s); previews: {view.previews}")

        # 3. Note
        editor = NotesEditor(client, session)
        notes = editor.save("Walkthrough note", "Hello world\nWritten by examples/walkthrough.py") or []
        for note in notes:
            print(f"  {note.last_updated}  {note.title}: {note.text!r}")

        # 4. Export the latest note
        if notes:
            practitioner, patient = editor.details()
            exported = editor.export_pdf(notes[0], patient=patient, practitioner=practitioner)
            path = exported.save(Path.cwd())
            print(f"\nExported {path}")
    except ClinicalNotesError as exc:
        print(f"Error: {exc}")


if __name__ == "__main__":
    main()
