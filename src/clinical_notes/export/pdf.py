"""Render a clinical note to a printable PDF with fpdf2.

Layout (A4, Helvetica, baselines in millimetres from the top-left):
  15  "Clinical Note"                      14pt
  25  Patient: <name>                      10pt, when known
  32  Practitioner: <name>                 10pt, when known
  39  Date: <YYYY-MM-DD>                   10pt
  50  <note title>                         12pt
  60  <note body, wrapped to 180mm>        10pt, continues on new pages
"""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path

from fpdf import FPDF
from pydantic import BaseModel

from ..errors import ExportFailure
from ..fhir.document_reference import DEFAULT_NOTE_TITLE, NoteItem
from ..fhir.models import Patient, Practitioner, display_name

logger = logging.getLogger(__name__)

_LEFT_MM = 10
_TOP_MM = 15
_BOTTOM_MM = 15
_BODY_TOP_MM = 57
_BODY_WIDTH_MM = 180
_BODY_LINE_HEIGHT_MM = 4.5


class ExportedDocument(BaseModel):
    filename: str
    content: bytes

    def save(self, directory: str | Path) -> Path:
        path = Path(directory) / self.filename
        path.write_bytes(self.content)
        return path


def export_note_pdf(
    note: NoteItem,
    patient: Patient | None = None,
    practitioner: Practitioner | None = None,
    today: date | None = None,
) -> ExportedDocument:
    """Render ``note`` as a PDF.

    Raises:
        ExportFailure: if the document cannot be generated.
    """
    try:
        content = _render(note, patient, practitioner, today or date.today())
    except Exception as exc:
        logger.error("Failed to generate PDF for note %s: %s", note.id, exc)
        raise ExportFailure("Failed to generate PDF. Please try again.") from exc
    return ExportedDocument(filename=note_filename(note), content=content)


def note_filename(note: NoteItem) -> str:
    return re.sub(r"\s+", "-", note.title or "clinical-note") + ".pdf"


# ------------------------------------------------------------------
# Private helpers
# ------------------------------------------------------------------

def _render(
    note: NoteItem,
    patient: Patient | None,
    practitioner: Practitioner | None,
    today: date,
) -> bytes:
    title = note.title or DEFAULT_NOTE_TITLE
    header: list[tuple[float, int, str]] = [(15, 14, "Clinical Note")]
    patient_name = display_name(patient)
    if patient_name:
        header.append((25, 10, f"Patient: {patient_name}"))
    practitioner_name = display_name(practitioner)
    if practitioner_name:
        header.append((32, 10, f"Practitioner: {practitioner_name}"))
    header.append((39, 10, f"Date: {today.isoformat()}"))
    header.append((50, 12, title))

    pdf = FPDF(orientation="portrait", unit="mm", format="A4")
    pdf.set_margins(_LEFT_MM, _TOP_MM, _LEFT_MM)
    pdf.set_auto_page_break(auto=True, margin=_BOTTOM_MM)
    pdf.set_title(_latin1(title))
    pdf.add_page()

    for y, size, text in header:
        pdf.set_font("Helvetica", size=size)
        pdf.text(_LEFT_MM, y, _latin1(text))

    pdf.set_font("Helvetica", size=10)
    pdf.set_xy(_LEFT_MM, _BODY_TOP_MM)
    pdf.multi_cell(_BODY_WIDTH_MM, _BODY_LINE_HEIGHT_MM, _latin1(note.text or ""))
    return bytes(pdf.output())


def _latin1(text: str) -> str:
    # Core fonts only cover Latin-1; anything else prints as '?'
    return text.encode("latin-1", errors="replace").decode("latin-1")
