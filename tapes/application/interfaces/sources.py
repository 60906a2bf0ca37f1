"""
Contratos de las dos fuentes externas del sync.

Este contrato existe para:
- Que el motor de reconciliacion no dependa de requests ni de boto3.
- Facilitar tests unitarios con fuentes fake en memoria.

Cualquier excepcion que lancen estas implementaciones se considera un
error de transporte (fuente inalcanzable) y aborta la corrida.
"""

from __future__ import annotations

from typing import Dict, List, Protocol


class InventorySource(Protocol):
    """
    Planilla de inventario: una grilla de strings cuya primera fila son los
    encabezados y cada fila siguiente una cinta.
    """

    def get_values(self) -> List[List[str]]:
        """Retorna la grilla completa (las filas pueden venir recortadas)."""
        ...


class ImageSource(Protocol):
    """
    Bucket de imagenes escaneadas.

    Implementaciones:
    - BucketClient (boto3, S3-compatible).
    - Fake en memoria para tests.
    """

    def list_filenames(self) -> List[str]:
        """Lista todos los object keys del bucket."""
        ...

    def get_metadata(self, filename: str) -> Dict[str, str]:
        """Retorna la metadata (string -> string) asociada a un objeto."""
        ...
