"""
Convenciones de nombres de los objetos del bucket.

    0042_thumb.jpg  -> thumbnail de la cinta 42
    0042_a.jpg      -> imagen de galeria 0 de la cinta 42
    0042_b.jpg      -> imagen de galeria 1 ...

Funciones puras, sin I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from tapes.domain.entities import ImageKind

IMAGE_FILENAME_RE = re.compile(r"^(\d{4})_(thumb|[a-z])\.jpg$", re.ASCII)

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{3}(?:[0-9a-fA-F]{3})?$")

MAX_GALLERY_INDEX = 25


class ImageFilenameError(ValueError):
    """El object key no sigue la convencion de nombres."""


class InvalidHexColorError(ValueError):
    """El string no es un color hex (#rgb o #rrggbb)."""


@dataclass(frozen=True)
class ImageKey:
    """Lo que codifica un filename: cinta, tipo e indice de galeria."""

    tape_id: int
    kind: ImageKind
    gallery_index: Optional[int] = None


def parse_image_filename(filename: str) -> ImageKey:
    """
    Decodifica un object key.

    Raises:
        ImageFilenameError: si el key no matchea la convencion.
    """
    match = IMAGE_FILENAME_RE.fullmatch(filename)
    if match is None:
        raise ImageFilenameError(
            f"not a valid image filename matching {IMAGE_FILENAME_RE.pattern}"
        )
    tape_id = int(match.group(1))
    suffix = match.group(2)
    if suffix == "thumb":
        return ImageKey(tape_id=tape_id, kind=ImageKind.THUMBNAIL)
    return ImageKey(
        tape_id=tape_id,
        kind=ImageKind.GALLERY,
        gallery_index=ord(suffix) - ord("a"),
    )


def get_thumbnail_key(tape_id: int) -> str:
    return f"{tape_id:04d}_thumb.jpg"


def get_image_key(tape_id: int, gallery_index: int) -> str:
    """Key de una imagen de galeria; el indice se acota a [0, 25] ('a'..'z')."""
    index = min(max(gallery_index, 0), MAX_GALLERY_INDEX)
    return f"{tape_id:04d}_{chr(ord('a') + index)}.jpg"


def get_image_filename(tape_id: int, kind: ImageKind, gallery_index: int = 0) -> str:
    """Inversa de parse_image_filename."""
    if kind == ImageKind.THUMBNAIL:
        return get_thumbnail_key(tape_id)
    return get_image_key(tape_id, gallery_index)


def parse_hex_color(value: str) -> str:
    """
    Valida un color hex y lo retorna normalizado en minusculas.

    Acepta "#fff" y "#ffeecc"; rechaza colores con nombre, sin '#', o vacios.
    """
    if not HEX_COLOR_RE.fullmatch(value):
        raise InvalidHexColorError(f"invalid hex color: '{value}'")
    return value.lower()
