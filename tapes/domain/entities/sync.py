"""
Entidades de una corrida de sync: warnings, resultados por item y el
registro de auditoria (SyncRun).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class SyncWarning:
    """
    Defecto no fatal de un item: el item se descarta y la corrida continua.

    location es el numero de fila (1-based, la fila de encabezados es la 1)
    o el filename del objeto en el bucket.
    """

    location: Union[int, str]
    message: str

    def __str__(self) -> str:
        if isinstance(self.location, int):
            return f"At row {self.location}: {self.message}"
        return f"{self.location}: {self.message}"


@dataclass(frozen=True)
class Accepted(Generic[T]):
    """Item clasificado como valido."""

    value: T


@dataclass(frozen=True)
class Rejected:
    """Item descartado, con el warning que lo explica."""

    warning: SyncWarning


Outcome = Union[Accepted[T], Rejected]


def format_warnings(warnings: list[SyncWarning]) -> str:
    """Digest de warnings que se guarda en el SyncRun (uno por linea)."""
    return "\n".join(str(w) for w in warnings)


@dataclass(frozen=True)
class SyncRun:
    """
    Registro de auditoria de una corrida.

    Se crea al inicio (solo id + started_at) y se cierra una sola vez:
    - exito: finished_at, num_tapes y warnings
    - fallo: finished_at y error
    """

    id: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    num_tapes: Optional[int] = None
    warnings: Optional[str] = None
    error: Optional[str] = None

    @property
    def status(self) -> str:
        if self.finished_at is None:
            return "running"
        if self.error is not None:
            return "failure"
        return "success"
