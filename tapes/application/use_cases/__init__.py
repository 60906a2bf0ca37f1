"""
Casos de uso de la aplicacion.
"""
from tapes.application.use_cases.sync_use_cases import SyncResult, TapeSyncUseCase

__all__ = ["TapeSyncUseCase", "SyncResult"]
