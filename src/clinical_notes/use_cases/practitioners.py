"""Practitioner directory: find, create and pick the practitioner to work as."""

from __future__ import annotations

from ..fhir.fhir_client import FHIRClient
from ..fhir.models import HumanName, Practitioner
from ..session.state import SessionState


def name_entry(given: str, family: str) -> HumanName:
    """A single name entry; blank parts are left out."""
    given = given.strip()
    family = family.strip()
    return HumanName(given=[given] if given else None, family=family or None)


class PractitionerDirectory:
    """Search → create or select → active practitioner."""

    def __init__(self, client: FHIRClient, session: SessionState) -> None:
        self._client = client
        self._session = session

    def search(self, query: str = "") -> list[Practitioner]:
        """Practitioners newest first; a blank query lists everyone."""
        return self._client.search_practitioners(query.strip() or None)

    @staticmethod
    def can_create(given: str, family: str) -> bool:
        return bool(given.strip() or family.strip())

    def create(self, given: str, family: str) -> Practitioner:
        """Create an active practitioner and make it the active selection.

        Raises:
            ValueError: if both name parts are blank.
            MutationFailure: if the server did not persist it.
        """
        if not self.can_create(given, family):
            raise ValueError("Enter a given or family name")
        created = self._client.create_practitioner(
            Practitioner(active=True, name=[name_entry(given, family)])
        )
        self._session.set_active_practitioner_id(created.id)
        return created

    def select(self, practitioner_id: str) -> None:
        self._session.set_active_practitioner_id(practitioner_id)
