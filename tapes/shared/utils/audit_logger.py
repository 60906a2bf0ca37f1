"""
SyncAuditLogger - Un archivo de log por corrida de sync.

Ademas del registro SyncRun en la base, cada corrida deja un archivo
legible con el banner de inicio, cada warning y el resultado final:

    logs/sync_runs/sync_<fecha>_<hora>_<id corto>.log
"""
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from tapes.domain.entities import SyncWarning


class SyncAuditLogger:
    """
    Gestor de logs de auditoria por corrida.

    Uso:
        SyncAuditLogger.initialize(settings.SYNC_RUN_LOG_DIR)

        SyncAuditLogger.open_run(run_id)
        SyncAuditLogger.log_warning(run_id, warning)
        SyncAuditLogger.close_run(run_id, "SUCCESS", "Synced 3 tapes")

    Un error escribiendo el log de auditoria nunca afecta la corrida: se
    reporta en el log general y se sigue.
    """

    LOG_DIR = Path("logs") / "sync_runs"

    LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {message}"

    # Logger y sink de loguru por corrida
    _run_loggers: Dict[str, Any] = {}
    _run_sinks: Dict[str, int] = {}
    _run_files: Dict[str, Path] = {}

    @classmethod
    def initialize(cls, log_dir: Optional[str] = None) -> None:
        """
        Define la carpeta de logs por corrida.

        Args:
            log_dir: Carpeta destino (por defecto logs/sync_runs)
        """
        if log_dir:
            cls.LOG_DIR = Path(log_dir)

    @classmethod
    def open_run(cls, run_id: str) -> None:
        """Crea el archivo de la corrida y escribe el banner de inicio."""
        if run_id in cls._run_loggers:
            return

        now = datetime.now()
        log_file = cls.LOG_DIR / f"sync_{now:%Y-%m-%d}_{now:%H-%M-%S}_{run_id[:8]}.log"
        try:
            cls.LOG_DIR.mkdir(parents=True, exist_ok=True)
            sink_id = logger.add(
                str(log_file),
                format=cls.LOG_FORMAT,
                filter=lambda record, rid=run_id: record["extra"].get("sync_run_id") == rid,
                level="DEBUG",
            )
        except Exception as e:
            logger.warning(f"No se pudo crear el log de auditoria para {run_id}: {e}")
            return

        run_logger = logger.bind(sync_run_id=run_id)
        cls._run_loggers[run_id] = run_logger
        cls._run_sinks[run_id] = sink_id
        cls._run_files[run_id] = log_file

        run_logger.info("=" * 60)
        run_logger.info("SYNC INICIADO")
        run_logger.info(f"Sync run ID: {run_id}")
        run_logger.info(f"Timestamp: {now.isoformat()}")
        run_logger.info("=" * 60)

    @classmethod
    def get_log_file(cls, run_id: str) -> Optional[Path]:
        return cls._run_files.get(run_id)

    @classmethod
    def log_event(cls, run_id: str, event: str) -> None:
        if run_id not in cls._run_loggers:
            return
        cls._run_loggers[run_id].info(f"EVENT: {event}")

    @classmethod
    def log_warning(cls, run_id: str, warning: SyncWarning) -> None:
        if run_id not in cls._run_loggers:
            return
        cls._run_loggers[run_id].warning(str(warning))

    @classmethod
    def close_run(cls, run_id: str, status: str, summary: str) -> None:
        """
        Escribe el resultado y quita el sink de la corrida.

        Args:
            run_id: ID de la corrida
            status: SUCCESS o FAILURE
            summary: Resumen (cantidad de cintas o texto del error)
        """
        run_logger = cls._run_loggers.pop(run_id, None)
        sink_id = cls._run_sinks.pop(run_id, None)
        cls._run_files.pop(run_id, None)
        if run_logger is None:
            return

        level = "info" if status == "SUCCESS" else "error"
        run_logger.info("=" * 60)
        getattr(run_logger, level)(f"SYNC FINALIZADO: {status}")
        getattr(run_logger, level)(summary)
        run_logger.info(f"Timestamp: {datetime.now().isoformat()}")
        run_logger.info("=" * 60)

        try:
            logger.remove(sink_id)
        except ValueError:
            logger.warning(f"Sink de auditoria ya removido para {run_id}")
