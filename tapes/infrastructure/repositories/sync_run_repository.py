"""
Repositorio de la tabla sync_runs (auditoria de corridas).
"""
import uuid
from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from tapes.domain.entities import SyncRun
from tapes.infrastructure.database.models import SyncRunModel
from tapes.shared.exceptions import PersistenceError
from tapes.shared.utils.datetime_utils import ensure_utc, utc_now


def _to_entity(row: SyncRunModel) -> SyncRun:
    return SyncRun(
        id=row.id,
        started_at=ensure_utc(row.started_at),
        finished_at=ensure_utc(row.finished_at) if row.finished_at else None,
        num_tapes=row.num_tapes,
        warnings=row.warnings,
        error=row.error,
    )


class SyncRunRepository:
    """
    Gestiona la tabla sync_runs.

    Cada metodo hace flush pero no commit: quien llama decide cuando
    confirmar (el caso de uso usa una sesion aparte para la auditoria).
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, run_id: Optional[str] = None, started_at: Optional[datetime] = None) -> SyncRun:
        """Registra el inicio de una corrida (solo id + started_at)."""
        row = SyncRunModel(
            id=run_id or str(uuid.uuid4()),
            started_at=started_at or utc_now(),
        )
        self.db.add(row)
        self.db.flush()
        logger.info(f"Sync run {row.id} registrado")
        return _to_entity(row)

    def _get_row(self, run_id: str) -> SyncRunModel:
        row = self.db.get(SyncRunModel, run_id)
        if row is None:
            raise PersistenceError(f"sync run {run_id} not found")
        return row

    def record_success(self, run_id: str, num_tapes: int, warnings: str) -> SyncRun:
        row = self._get_row(run_id)
        row.finished_at = utc_now()
        row.num_tapes = num_tapes
        row.warnings = warnings
        self.db.flush()
        return _to_entity(row)

    def record_failure(self, run_id: str, error: str) -> SyncRun:
        row = self._get_row(run_id)
        row.finished_at = utc_now()
        row.error = error
        self.db.flush()
        return _to_entity(row)

    def get(self, run_id: str) -> Optional[SyncRun]:
        row = self.db.get(SyncRunModel, run_id)
        return _to_entity(row) if row else None

    def list_recent(self, limit: int = 10) -> List[SyncRun]:
        """Ultimas corridas, de la mas reciente a la mas vieja."""
        query = select(SyncRunModel).order_by(SyncRunModel.started_at.desc()).limit(limit)
        return [_to_entity(row) for row in self.db.execute(query).scalars().all()]
