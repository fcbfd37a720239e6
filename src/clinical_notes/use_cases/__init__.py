from .notes import NotesEditor
from .patients import PatientRoster, RosterView
from .practitioners import PractitionerDirectory

__all__ = [
    "NotesEditor",
    "PatientRoster",
    "RosterView",
    "PractitionerDirectory",
]
