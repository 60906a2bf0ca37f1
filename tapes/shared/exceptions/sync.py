"""
Excepciones fatales del pipeline de sync.

Los defectos por item (fila mala, archivo mal nombrado, metadata invalida)
NO son excepciones de este modulo: se convierten en SyncWarning y la
corrida continua. Todo lo que hereda de SyncException aborta la corrida.
"""
from typing import Any, Dict, Optional

from tapes.shared.exceptions.base import AppException


class SyncException(AppException):
    """Excepción base para errores que abortan una corrida de sync."""

    def __init__(
        self,
        message: str,
        error_code: str = "SYNC_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, error_code=error_code, details=details)


class StructuralError(SyncException):
    """
    La fuente no tiene la forma esperada: planilla vacia, columnas
    obligatorias sin resolver o duplicadas.
    """

    def __init__(self, message: str):
        super().__init__(message=message, error_code="STRUCTURAL_ERROR")


class TransportError(SyncException):
    """No se pudo leer una fuente externa (planilla o bucket)."""

    def __init__(self, message: str, source: Optional[str] = None):
        details = {"source": source} if source else None
        super().__init__(message=message, error_code="TRANSPORT_ERROR", details=details)


class PersistenceError(SyncException):
    """Fallo una escritura durante la fase Apply; la transaccion se revierte."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="PERSISTENCE_ERROR")


class SyncConfigError(SyncException):
    """Error de configuración del pipeline."""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        details = {"missing": missing} if missing else None
        super().__init__(message=message, error_code="CONFIG_ERROR", details=details)
