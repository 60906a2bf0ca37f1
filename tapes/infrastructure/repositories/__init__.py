from tapes.infrastructure.repositories.sync_run_repository import SyncRunRepository
from tapes.infrastructure.repositories.tape_repository import TapeRepository

__all__ = ["TapeRepository", "SyncRunRepository"]
