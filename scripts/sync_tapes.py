"""
CLI: planilla de inventario + bucket de imagenes -> Postgres.

Uso recomendado:
  - Ejecutar como job (cron/systemd timer). Las corridas se asumen
    serializadas: no hay lock entre dos syncs concurrentes.

Variables de entorno requeridas (ver tapes/core/config.py):
  - SHEETS_API_KEY, SPREADSHEET_ID
  - SPACES_BUCKET_NAME, SPACES_REGION_NAME, SPACES_ENDPOINT_URL,
    SPACES_ACCESS_KEY_ID, SPACES_SECRET_KEY
  - DATABASE_URL o PGHOST/PGPORT/PGDATABASE/PGUSER/PGPASSWORD

Ejecución:
  python scripts/sync_tapes.py
  python scripts/sync_tapes.py --dry-run
  python scripts/sync_tapes.py --init-db
  python scripts/sync_tapes.py --history 10

Exit code 0 si la corrida termino bien (aunque haya warnings), 1 si fallo.
"""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

# Cargar variables desde .env antes de instanciar settings
load_dotenv(_REPO_ROOT / ".env", override=False)

from tapes.application.use_cases import SyncResult, TapeSyncUseCase
from tapes.core.config import Settings, settings
from tapes.core.log_config import configure_logging
from tapes.infrastructure.database.session import close_db, get_session_factory, init_db, session_scope
from tapes.infrastructure.external.bucket import BucketClient, BucketCredentials
from tapes.infrastructure.external.sheets import SheetsClient, SheetsCredentials
from tapes.infrastructure.repositories import SyncRunRepository
from tapes.shared.exceptions import SyncConfigError, SyncException
from tapes.shared.utils.audit_logger import SyncAuditLogger
from tapes.shared.utils.datetime_utils import format_timestamp


def _raise_keyboard_interrupt(signum, frame) -> None:
    raise KeyboardInterrupt()


def build_use_case(config: Settings) -> TapeSyncUseCase:
    """
    Arma el caso de uso con los clientes reales.

    Raises:
        SyncConfigError: si falta alguna variable obligatoria.
    """
    missing = config.missing_sync_settings()
    if missing:
        raise SyncConfigError(
            f"Faltan variables de entorno obligatorias: {', '.join(missing)}",
            missing=missing,
        )

    sheets = SheetsClient(
        SheetsCredentials(api_key=config.SHEETS_API_KEY, spreadsheet_id=config.SPREADSHEET_ID),
        sheet_name=config.SHEET_NAME,
        timeout_s=config.SHEETS_TIMEOUT_S,
    )
    bucket = BucketClient(
        bucket_name=config.SPACES_BUCKET_NAME,
        endpoint=config.SPACES_ENDPOINT_URL,
        region=config.SPACES_REGION_NAME,
        credentials=BucketCredentials(
            access_key_id=config.SPACES_ACCESS_KEY_ID,
            secret_key=config.SPACES_SECRET_KEY,
        ),
    )
    return TapeSyncUseCase(get_session_factory(), inventory=sheets, images=bucket)


def _print_result(result: SyncResult, dry_run: bool) -> None:
    for warning in result.warnings:
        print(f"[WARNING] {warning}")
    if dry_run:
        for entry in result.entries:
            tags = ", ".join(sorted(entry.tape.tags)) or "-"
            print(
                f"  {entry.tape.id:04d} {entry.tape.title} "
                f"({len(entry.gallery)} images; tags: {tags})"
            )
        print(f"Would sync {result.num_tapes} tapes ({len(result.warnings)} warnings).")
        return
    print(f"Synced {result.num_tapes} tapes ({len(result.warnings)} warnings).")


def _print_history(limit: int) -> None:
    with session_scope() as session:
        runs = SyncRunRepository(session).list_recent(limit)
    if not runs:
        print("No sync runs recorded.")
        return
    for run in runs:
        if run.status == "success":
            outcome = f"success: {run.num_tapes} tapes"
        elif run.status == "failure":
            outcome = f"failure: {run.error}"
        else:
            outcome = "running"
        print(
            f"{run.id}  {format_timestamp(run.started_at)}  "
            f"{format_timestamp(run.finished_at)}  {outcome}"
        )


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync del catalogo de cintas")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Lee y reconcilia las fuentes e imprime el resultado, sin escribir nada.",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Crea las tablas si no existen antes de sincronizar.",
    )
    parser.add_argument(
        "--history",
        type=int,
        metavar="N",
        help="Solo imprime las ultimas N corridas registradas.",
    )
    args = parser.parse_args()

    configure_logging(settings)
    SyncAuditLogger.initialize(settings.SYNC_RUN_LOG_DIR)
    # SIGTERM (cron / systemd) se trata igual que Ctrl+C: rollback + fallo registrado
    signal.signal(signal.SIGTERM, _raise_keyboard_interrupt)

    try:
        if args.history is not None:
            _print_history(args.history)
            return 0

        if args.init_db:
            init_db()

        use_case = build_use_case(settings)
        if args.dry_run:
            logger.info("Dry run: no se escribe en la base")
            _print_result(use_case.preview(), dry_run=True)
            return 0

        logger.info("Iniciando sync de cintas...")
        _print_result(use_case.run(), dry_run=False)
        return 0
    except SyncException as e:
        logger.error(f"Sync fallido [{e.error_code}]: {e.message}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Sync cancelado")
        return 1
    except Exception as e:
        logger.exception(f"Error inesperado: {e}")
        return 1
    finally:
        close_db()


if __name__ == "__main__":
    raise SystemExit(main())
