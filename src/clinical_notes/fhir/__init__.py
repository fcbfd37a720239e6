from .document_reference import ClinicalNoteBuilder, NoteItem
from .fhir_client import FHIRClient
from .models import DocumentReference, HumanName, Patient, Practitioner, Reference

__all__ = [
    "ClinicalNoteBuilder",
    "NoteItem",
    "FHIRClient",
    "DocumentReference",
    "HumanName",
    "Patient",
    "Practitioner",
    "Reference",
]
