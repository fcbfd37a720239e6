from .state import PATIENT_KEY, PRACTITIONER_KEY, SessionState
from .storage import DurableStorage, JSONFileStorage, MemoryStorage, StorageRead

__all__ = [
    "SessionState",
    "PRACTITIONER_KEY",
    "PATIENT_KEY",
    "DurableStorage",
    "JSONFileStorage",
    "MemoryStorage",
    "StorageRead",
]
