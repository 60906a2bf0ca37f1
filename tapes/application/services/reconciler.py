"""
Merge de inventario + imagenes en el conjunto de cintas admitidas.

Funcion pura y determinista: no toca la base ni las fuentes externas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from loguru import logger

from tapes.application.services.image_scanner import ImageScanResult
from tapes.application.services.inventory_parser import InventoryResult
from tapes.domain.entities import Image, SyncWarning, Tape, TapeImages


@dataclass(frozen=True)
class CatalogEntry:
    """Una cinta admitida junto a sus imagenes (thumbnail + galeria)."""

    tape: Tape
    images: TapeImages

    @property
    def gallery(self) -> Tuple[Image, ...]:
        return self.images.gallery


@dataclass(frozen=True)
class ReconcileResult:
    entries: List[CatalogEntry]
    warnings: List[SyncWarning]

    @property
    def num_tapes(self) -> int:
        return len(self.entries)


def reconcile(inventory: InventoryResult, scan: ImageScanResult) -> ReconcileResult:
    """
    Admite cada cinta del inventario que tenga imagenes de galeria validas.

    Los warnings resultantes son: inventario, luego bucket, luego los de
    este paso, en ese orden.
    """
    entries: List[CatalogEntry] = []
    own_warnings: List[SyncWarning] = []

    for tape in sorted(inventory.tapes, key=lambda t: t.id):
        images = scan.get(tape.id)
        if images is None or not images.gallery:
            own_warnings.append(
                SyncWarning(
                    location=tape.row_number,
                    message=f"tape {tape.id} has no image files; ignoring it",
                )
            )
            continue
        entries.append(CatalogEntry(tape=tape, images=images))

    logger.info(
        f"Reconciliacion: {len(entries)} cintas admitidas de {len(inventory.tapes)}"
    )
    return ReconcileResult(
        entries=entries,
        warnings=list(inventory.warnings) + list(scan.warnings) + own_warnings,
    )
