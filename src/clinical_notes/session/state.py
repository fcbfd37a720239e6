"""Active practitioner / patient selection shared by every workflow.

Construct one ``SessionState`` per session and pass it to the workflows that
need it. Selections are mirrored to a ``DurableStorage`` so a new session over
the same storage restores them.

Invariant: the active patient is unset whenever the active practitioner is
unset. It is re-established after every practitioner change and at startup.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .storage import DurableStorage, MemoryStorage

logger = logging.getLogger(__name__)

PRACTITIONER_KEY = "activePractitionerId"
PATIENT_KEY = "activePatientId"

Listener = Callable[["SessionState"], None]


class SessionState:
    """Observable, persisted selection of the practitioner and patient in use."""

    def __init__(self, storage: DurableStorage | None = None) -> None:
        self._storage = storage or MemoryStorage()
        self._listeners: list[Listener] = []
        self._generation = 0
        self._practitioner_id = self._restore(PRACTITIONER_KEY)
        self._patient_id = self._restore(PATIENT_KEY)
        self._enforce_patient_invariant()

    @property
    def active_practitioner_id(self) -> str | None:
        return self._practitioner_id

    @property
    def active_patient_id(self) -> str | None:
        return self._patient_id

    @property
    def generation(self) -> int:
        """Advances on every selection change.

        Capture it before a network call; if it moved by the time the reply
        arrives, the reply belongs to a selection the user has left.
        """
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def set_active_practitioner_id(self, practitioner_id: str | None) -> None:
        self._practitioner_id = practitioner_id or None
        self._persist(PRACTITIONER_KEY, self._practitioner_id)
        self._enforce_patient_invariant()
        self._changed()

    def set_active_patient_id(self, patient_id: str | None) -> None:
        if patient_id and self._practitioner_id is None:
            logger.warning("Ignoring patient %s: no active practitioner", patient_id)
            patient_id = None
        self._patient_id = patient_id or None
        self._persist(PATIENT_KEY, self._patient_id)
        self._changed()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(state)`` after every change. Returns an unsubscribe.

        A listener that raises is logged and skipped; the others still run.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _enforce_patient_invariant(self) -> None:
        if self._practitioner_id is None:
            self._patient_id = None
            self._persist(PATIENT_KEY, None)

    def _restore(self, key: str) -> str | None:
        result = self._storage.get_item(key)
        if not result.ok:
            logger.warning("Could not restore %s; starting unset", key)
            return None
        return result.value or None

    def _persist(self, key: str, value: str | None) -> None:
        if value:
            ok = self._storage.set_item(key, value)
        else:
            ok = self._storage.remove_item(key)
        if not ok:
            logger.warning("Could not persist %s; keeping it in memory only", key)

    def _changed(self) -> None:
        self._generation += 1
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener %r failed", listener)
