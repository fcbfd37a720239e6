from .pdf import ExportedDocument, export_note_pdf

__all__ = ["ExportedDocument", "export_note_pdf"]
