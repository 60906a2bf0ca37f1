"""
Entidad Tape: una cinta del inventario.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class Tape:
    """
    Una fila valida de la planilla de inventario.

    - year / runtime_minutes: None significa "desconocido" (celda vacia), nunca 0.
    - tags: conjunto de tags activos para la cinta (el orden no importa).
    - row_number: fila 1-based de origen; solo se usa para ubicar warnings.
    """

    id: int
    title: str
    year: Optional[int] = None
    runtime_minutes: Optional[int] = None
    contributor_id: Optional[str] = None
    tags: FrozenSet[str] = frozenset()
    row_number: int = field(default=0, compare=False)
