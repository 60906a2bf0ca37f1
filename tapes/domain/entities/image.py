"""
Entidades de imagenes escaneadas que viven en el bucket.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ImageKind(str, Enum):
    """Como se usa la imagen en el catalogo."""

    # Una sola imagen de baja resolucion que representa la cinta
    THUMBNAIL = "thumbnail"
    # Una de la serie ordenada de escaneos a resolucion completa
    GALLERY = "gallery"


@dataclass(frozen=True)
class ImageMetadata:
    """
    Metadata requerida para renderizar una imagen de galeria.

    rotated=True indica que la imagen fue rotada 90 grados CCW para quedar
    vertical; el frontend la puede rotar de vuelta para mostrar el texto.
    """

    width: int
    height: int
    color: str
    rotated: bool


@dataclass(frozen=True)
class Image:
    """
    Un archivo de imagen en el bucket. El filename (object key) es su identidad.

    gallery_index y metadata solo tienen sentido para kind == GALLERY.
    """

    filename: str
    tape_id: int
    kind: ImageKind
    gallery_index: int = 0
    metadata: Optional[ImageMetadata] = None


@dataclass(frozen=True)
class TapeImages:
    """Imagenes admitidas de una cinta: un thumbnail y la galeria ordenada por indice."""

    tape_id: int
    thumbnail: Image
    gallery: Tuple[Image, ...]
