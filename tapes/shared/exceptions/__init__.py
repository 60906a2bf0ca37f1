from tapes.shared.exceptions.base import AppException
from tapes.shared.exceptions.sync import (
    PersistenceError,
    StructuralError,
    SyncConfigError,
    SyncException,
    TransportError,
)

__all__ = [
    "AppException",
    "SyncException",
    "StructuralError",
    "TransportError",
    "PersistenceError",
    "SyncConfigError",
]
