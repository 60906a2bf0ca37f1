"""
Caso de uso: sincronizar el catalogo de cintas.

Una corrida tiene tres fases:

1. Open  - se registra el SyncRun (id + started_at) y se confirma de
           inmediato, antes de cualquier otra escritura.
2. Apply - se leen las dos fuentes, se reconcilian y se escriben todas las
           cintas, tags e imagenes en UNA transaccion.
3. Close - se cierra el SyncRun (exito o fallo) en una sesion aparte, de
           modo que el registro sobrevive aunque Apply haga rollback.

Un error al cerrar el SyncRun se loguea pero nunca cambia el resultado de
la corrida ni tapa el error original.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from tapes.application.interfaces.sources import ImageSource, InventorySource
from tapes.application.services.image_scanner import scan_images
from tapes.application.services.inventory_parser import list_tapes
from tapes.application.services.reconciler import (
    CatalogEntry,
    ReconcileResult,
    reconcile,
)
from tapes.domain.entities import SyncRun, SyncWarning, format_warnings
from tapes.infrastructure.database.session import session_scope
from tapes.infrastructure.repositories.sync_run_repository import SyncRunRepository
from tapes.infrastructure.repositories.tape_repository import TapeRepository
from tapes.shared.exceptions import PersistenceError
from tapes.shared.utils.audit_logger import SyncAuditLogger
from tapes.shared.utils.datetime_utils import utc_now

CANCELLED_ERROR = "sync cancelled"


@dataclass(frozen=True)
class SyncResult:
    """
    Resultado de una corrida (o de un preview, con run_id None).
    """

    run_id: Optional[str]
    entries: List[CatalogEntry] = field(default_factory=list)
    warnings: List[SyncWarning] = field(default_factory=list)

    @property
    def num_tapes(self) -> int:
        return len(self.entries)


class TapeSyncUseCase:
    """
    Orquesta una corrida completa de sync.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        inventory: InventorySource,
        images: ImageSource,
        audit: Any = SyncAuditLogger,
    ):
        """
        Inicializa el caso de uso con sus dependencias.

        Args:
            session_factory: Factory de sesiones SQLAlchemy
            inventory: Fuente de la planilla de inventario
            images: Fuente del bucket de imagenes
            audit: Logger de auditoria por corrida
        """
        self._session_factory = session_factory
        self._inventory = inventory
        self._images = images
        self._audit = audit

    def gather(self) -> ReconcileResult:
        """
        Lee ambas fuentes y las reconcilia. No escribe nada.

        Raises:
            TransportError: si alguna fuente no responde.
            StructuralError: si la planilla no tiene la forma esperada.
        """
        inventory = list_tapes(self._inventory)
        scan = scan_images(self._images)
        return reconcile(inventory, scan)

    def preview(self) -> SyncResult:
        """Dry run: lo que se escribiria, sin tocar la base (ni SyncRun)."""
        reconciled = self.gather()
        return SyncResult(run_id=None, entries=reconciled.entries, warnings=reconciled.warnings)

    def run(self) -> SyncResult:
        """
        Ejecuta la corrida completa.

        Returns:
            SyncResult con el id del SyncRun, las cintas escritas y los warnings

        Raises:
            PersistenceError: si no se pudo registrar el inicio o fallo Apply
            TransportError / StructuralError: si fallo la lectura de las fuentes
            KeyboardInterrupt: si la corrida se cancelo (ya registrada como fallo)
        """
        run = self._open()

        try:
            reconciled = self.gather()
            for warning in reconciled.warnings:
                self._audit.log_warning(run.id, warning)
            self._apply(run.id, reconciled)
        except KeyboardInterrupt:
            logger.warning(f"Sync {run.id} cancelado")
            self._close_failure(run.id, CANCELLED_ERROR)
            raise
        except Exception as e:
            logger.error(f"Sync {run.id} fallo: {e}")
            self._close_failure(run.id, str(e))
            raise

        self._close_success(run.id, reconciled)
        return SyncResult(run_id=run.id, entries=reconciled.entries, warnings=reconciled.warnings)

    def _open(self) -> SyncRun:
        try:
            with session_scope(self._session_factory) as session:
                run = SyncRunRepository(session).create()
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to record start of sync run: {e}") from e

        self._audit.open_run(run.id)
        logger.info(f"Sync {run.id} iniciado")
        return run

    def _apply(self, run_id: str, reconciled: ReconcileResult) -> None:
        """Escribe todas las cintas admitidas en una sola transaccion."""
        synced_at = utc_now()
        try:
            with session_scope(self._session_factory) as session:
                tapes = TapeRepository(session)
                for entry in reconciled.entries:
                    tapes.upsert_tape(entry.tape, synced_at=synced_at)
                    tapes.replace_tape_tags(entry.tape.id, entry.tape.tags)
                    for image in entry.gallery:
                        tapes.upsert_image(
                            tape_id=entry.tape.id,
                            index=image.gallery_index,
                            color=image.metadata.color,
                            width=image.metadata.width,
                            height=image.metadata.height,
                            rotated=image.metadata.rotated,
                        )
        except SQLAlchemyError as e:
            raise PersistenceError(f"failed to persist tape catalog: {e}") from e

        self._audit.log_event(run_id, f"{len(reconciled.entries)} cintas escritas")

    def _close_success(self, run_id: str, reconciled: ReconcileResult) -> None:
        try:
            with session_scope(self._session_factory) as session:
                SyncRunRepository(session).record_success(
                    run_id,
                    num_tapes=len(reconciled.entries),
                    warnings=format_warnings(reconciled.warnings),
                )
        except Exception as e:
            # Los datos ya estan confirmados: la corrida sigue siendo exitosa
            logger.error(f"No se pudo registrar el exito del sync {run_id}: {e}")

        summary = f"Synced {len(reconciled.entries)} tapes ({len(reconciled.warnings)} warnings)."
        self._audit.close_run(run_id, "SUCCESS", summary)
        logger.success(f"Sync {run_id} completado: {summary}")

    def _close_failure(self, run_id: str, error: str) -> None:
        try:
            with session_scope(self._session_factory) as session:
                SyncRunRepository(session).record_failure(run_id, error)
        except Exception as e:
            logger.error(f"No se pudo registrar el fallo del sync {run_id}: {e}")

        self._audit.close_run(run_id, "FAILURE", error)
