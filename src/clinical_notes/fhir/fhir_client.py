"""FHIR R4 HTTP client for practitioners, patients and clinical notes.

Searches are permissive: a reply without a result collection is an empty
list. Mutations are strict: a reply without a server-assigned id is an error.
Every ``requests`` exception is re-raised as a domain error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import requests
from pydantic import ValidationError

from .. import config
from ..errors import CreateFailure, InvalidServerResponse, LoadFailure, UpdateFailure
from .models import DocumentReference, FHIRModel, Patient, Practitioner

logger = logging.getLogger(__name__)

FHIR_JSON = "application/fhir+json"
FHIR_HEADERS = {
    "Accept": FHIR_JSON,
    "Content-Type": FHIR_JSON,
}
SORT_NEWEST_FIRST = "-_lastUpdated"

R = TypeVar("R", bound=FHIRModel)


class FHIRClient:
    """FHIR R4 REST client for the resources this application manages."""

    def __init__(
        self,
        base_url: str | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url or config.FHIR_BASE_URL).rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout if timeout is not None else config.FHIR_TIMEOUT

    # ------------------------------------------------------------------
    # Practitioner
    # ------------------------------------------------------------------

    def search_practitioners(self, name: str | None = None) -> list[Practitioner]:
        """Practitioners, newest first, optionally filtered by name."""
        params = {"_sort": SORT_NEWEST_FIRST}
        if name:
            params["name"] = name
        return self._search(Practitioner, params, "practitioners")

    def create_practitioner(self, practitioner: Practitioner) -> Practitioner:
        return self._create(Practitioner, practitioner, "practitioner")

    def get_practitioner(self, practitioner_id: str) -> Practitioner:
        return self._read(Practitioner, practitioner_id, "practitioner")

    # ------------------------------------------------------------------
    # Patient
    # ------------------------------------------------------------------

    def search_patients(
        self,
        name: str | None = None,
        practitioner_id: str | None = None,
    ) -> list[Patient]:
        """Patients, newest first, filtered by name and/or owning practitioner."""
        params = {"_sort": SORT_NEWEST_FIRST}
        if name:
            params["name"] = name
        if practitioner_id:
            params["general-practitioner"] = f"Practitioner/{practitioner_id}"
        return self._search(Patient, params, "patients")

    def create_patient(self, patient: Patient) -> Patient:
        return self._create(Patient, patient, "patient")

    def get_patient(self, patient_id: str) -> Patient:
        return self._read(Patient, patient_id, "patient")

    # ------------------------------------------------------------------
    # Clinical notes (DocumentReference)
    # ------------------------------------------------------------------

    def search_notes(self, patient_id: str) -> list[DocumentReference]:
        """A patient's notes, newest first: ``result[0]`` is the latest."""
        params = {
            "subject": f"Patient/{patient_id}",
            "_sort": SORT_NEWEST_FIRST,
        }
        return self._search(DocumentReference, params, "notes")

    def create_note(self, note: DocumentReference) -> DocumentReference:
        return self._create(DocumentReference, note, "note")

    def update_note(
        self,
        note_id: str,
        fields: DocumentReference | Mapping[str, Any],
    ) -> DocumentReference:
        """Replace a note in place with ``fields`` plus its id and resourceType.

        The id in the URL always wins over any ``id`` present in ``fields``.
        """
        if isinstance(fields, FHIRModel):
            fields = fields.to_fhir()
        body = {**fields, "resourceType": "DocumentReference", "id": note_id}
        url = f"{self.base_url}/DocumentReference/{note_id}"
        try:
            response = self._session.put(url, json=body, headers=FHIR_HEADERS, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Failed to update note %s: %s", note_id, exc)
            raise UpdateFailure("Failed to update note. Please try again.") from exc
        return _parse_created(DocumentReference, response)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _search(self, model: type[R], params: dict[str, str], label: str) -> list[R]:
        resource_type = model.model_fields["resource_type"].default
        url = f"{self.base_url}/{resource_type}"
        try:
            response = self._session.get(url, params=params, headers=FHIR_HEADERS, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Failed to search %s: %s", label, exc)
            raise LoadFailure(f"Failed to load {label}. Please try again.") from exc
        return _extract_entries(model, _json_or_none(response))

    def _create(self, model: type[R], resource: R, label: str) -> R:
        resource_type = model.model_fields["resource_type"].default
        url = f"{self.base_url}/{resource_type}"
        try:
            response = self._session.post(
                url, json=resource.to_fhir(), headers=FHIR_HEADERS, timeout=self._timeout
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Failed to create %s: %s", label, exc)
            raise CreateFailure(f"Failed to create {label}. Please try again.") from exc
        return _parse_created(model, response)

    def _read(self, model: type[R], resource_id: str, label: str) -> R:
        resource_type = model.model_fields["resource_type"].default
        url = f"{self.base_url}/{resource_type}/{resource_id}"
        message = f"Failed to load {label}. Please try again."
        try:
            response = self._session.get(url, headers=FHIR_HEADERS, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Failed to read %s %s: %s", label, resource_id, exc)
            raise LoadFailure(message) from exc
        try:
            return model.model_validate(_json_or_none(response))
        except ValidationError as exc:
            logger.error("Unreadable %s %s: %s", label, resource_id, exc)
            raise LoadFailure(message) from exc


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _extract_entries(model: type[R], bundle: Any) -> list[R]:
    """Resources of ``model``'s type from a search Bundle, in server order."""
    if not isinstance(bundle, dict) or not isinstance(bundle.get("entry"), list):
        return []
    resource_type = model.model_fields["resource_type"].default
    resources: list[R] = []
    for entry in bundle["entry"]:
        resource = entry.get("resource") if isinstance(entry, dict) else None
        if not isinstance(resource, dict) or resource.get("resourceType") != resource_type:
            continue
        try:
            resources.append(model.model_validate(resource))
        except ValidationError as exc:
            logger.warning("Skipping malformed %s %s: %s", resource_type, resource.get("id"), exc)
    return resources


def _parse_created(model: type[R], response: requests.Response) -> R:
    """The resource echoed back by a POST/PUT; it must carry an id."""
    body = _json_or_none(response)
    if not isinstance(body, dict) or not body.get("id"):
        raise InvalidServerResponse()
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise InvalidServerResponse() from exc
