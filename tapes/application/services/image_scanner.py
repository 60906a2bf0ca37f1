"""
Escaneo del bucket de imagenes (object keys + metadata -> Image).

Reglas (resumen):
- Key con nombre invalido -> warning, se ignora (no bloquea otras cintas).
- Thumbnail duplicado -> warning, la cinta queda invalida en esta corrida.
- Imagen de galeria -> se pide la metadata (Width, Height, Color, Rotated).
  Metadata invalida -> warning, la cinta queda invalida (todas sus imagenes).
  Fallo al pedir la metadata -> TransportError: el bucket no responde, se aborta.
- Completitud: cada cinta necesita thumbnail Y al menos una imagen de galeria.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Set

from loguru import logger

from tapes.application.interfaces.sources import ImageSource
from tapes.application.services.image_filenames import (
    ImageFilenameError,
    ImageKey,
    InvalidHexColorError,
    parse_hex_color,
    parse_image_filename,
)
from tapes.domain.entities import (
    Accepted,
    Image,
    ImageKind,
    ImageMetadata,
    Outcome,
    Rejected,
    SyncWarning,
    TapeImages,
)
from tapes.shared.exceptions import TransportError

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class ImageMetadataError(ValueError):
    """La metadata de una imagen de galeria falta o es invalida."""


@dataclass(frozen=True)
class ImageScanResult:
    """
    Imagenes admitidas agrupadas por cinta + warnings acumulados.

    images_by_tape se construye en orden ascendente de tape id.
    """

    images_by_tape: Dict[int, TapeImages]
    warnings: List[SyncWarning]

    def get(self, tape_id: int) -> Optional[TapeImages]:
        return self.images_by_tape.get(tape_id)

    @property
    def images(self) -> List[Image]:
        """Lista plana: por cinta, el thumbnail y luego la galeria en orden."""
        flat: List[Image] = []
        for group in self.images_by_tape.values():
            flat.append(group.thumbnail)
            flat.extend(group.gallery)
        return flat


def _parse_positive_int(raw: Mapping[str, str], name: str) -> int:
    value = raw.get(name)
    if value is None:
        raise ImageMetadataError(f"metadata value '{name}' is required")
    if not _INTEGER_RE.fullmatch(value):
        raise ImageMetadataError(
            f"metadata value '{name}' must be an integer (got '{value}')"
        )
    number = int(value)
    if number <= 0:
        raise ImageMetadataError(f"metadata value '{name}' must be positive (got {number})")
    return number


def parse_image_metadata(raw: Mapping[str, str]) -> ImageMetadata:
    """
    Valida la metadata cruda de S3 (x-amz-meta-*) de una imagen de galeria.

    Raises:
        ImageMetadataError: si falta un valor o no tiene el formato esperado.
    """
    width = _parse_positive_int(raw, "Width")
    height = _parse_positive_int(raw, "Height")

    color_value = raw.get("Color")
    if color_value is None:
        raise ImageMetadataError("metadata value 'Color' is required")
    try:
        color = parse_hex_color(color_value)
    except InvalidHexColorError:
        raise ImageMetadataError(
            f"metadata value 'Color' must be a hex color (got '{color_value}')"
        ) from None

    rotated_value = raw.get("Rotated")
    if rotated_value is None:
        raise ImageMetadataError("metadata value 'Rotated' is required")
    if rotated_value not in ("true", "false"):
        raise ImageMetadataError(
            f"metadata value 'Rotated' must be a bool (got '{rotated_value}')"
        )

    return ImageMetadata(
        width=width,
        height=height,
        color=color,
        rotated=rotated_value == "true",
    )


def classify_filename(filename: str) -> Outcome[ImageKey]:
    """Accepted(key) o Rejected(warning) para un object key."""
    try:
        return Accepted(parse_image_filename(filename))
    except ImageFilenameError as e:
        return Rejected(SyncWarning(location=filename, message=str(e)))


def _fetch_metadata(source: ImageSource, filename: str) -> Mapping[str, str]:
    try:
        return source.get_metadata(filename)
    except Exception as e:
        raise TransportError(
            f"failed to get metadata for image file {filename}: {e}", source="bucket"
        ) from e


def scan_images(source: ImageSource) -> ImageScanResult:
    """
    Lista y valida todas las imagenes del bucket.

    Raises:
        TransportError: si falla el listado o cualquier pedido de metadata.
    """
    try:
        filenames = source.list_filenames()
    except Exception as e:
        raise TransportError(
            f"failed to list filenames from storage bucket: {e}", source="bucket"
        ) from e

    warnings: List[SyncWarning] = []
    invalid_tape_ids: Set[int] = set()
    thumbnails: Dict[int, Image] = {}
    galleries: Dict[int, List[Image]] = {}

    for filename in filenames:
        outcome = classify_filename(filename)
        if isinstance(outcome, Rejected):
            warnings.append(outcome.warning)
            continue
        key = outcome.value

        if key.kind == ImageKind.THUMBNAIL:
            existing = thumbnails.get(key.tape_id)
            if existing is not None:
                warnings.append(
                    SyncWarning(
                        location=filename,
                        message=(
                            f"duplicate thumbnail image for tape {key.tape_id} "
                            f"(already have {existing.filename})"
                        ),
                    )
                )
                invalid_tape_ids.add(key.tape_id)
                continue
            thumbnails[key.tape_id] = Image(
                filename=filename, tape_id=key.tape_id, kind=ImageKind.THUMBNAIL
            )
            continue

        raw = _fetch_metadata(source, filename)
        try:
            metadata = parse_image_metadata(raw)
        except ImageMetadataError as e:
            warnings.append(SyncWarning(location=filename, message=str(e)))
            invalid_tape_ids.add(key.tape_id)
            continue
        galleries.setdefault(key.tape_id, []).append(
            Image(
                filename=filename,
                tape_id=key.tape_id,
                kind=ImageKind.GALLERY,
                gallery_index=key.gallery_index,
                metadata=metadata,
            )
        )

    # Una imagen invalida descarta todas las imagenes de esa cinta
    for tape_id in invalid_tape_ids:
        thumbnails.pop(tape_id, None)
        galleries.pop(tape_id, None)

    for gallery in galleries.values():
        gallery.sort(key=lambda image: image.gallery_index)

    incomplete: Set[int] = set()
    for tape_id in sorted(thumbnails):
        if not galleries.get(tape_id):
            warnings.append(
                SyncWarning(
                    location=thumbnails[tape_id].filename,
                    message=f"tape {tape_id} has thumbnail image but no accompanying gallery image(s)",
                )
            )
            incomplete.add(tape_id)
    for tape_id in sorted(galleries):
        if tape_id not in thumbnails:
            warnings.append(
                SyncWarning(
                    location=galleries[tape_id][0].filename,
                    message=f"tape {tape_id} has gallery image(s) but no accompanying thumbnail image",
                )
            )
            incomplete.add(tape_id)

    images_by_tape: Dict[int, TapeImages] = {}
    for tape_id in sorted(thumbnails):
        if tape_id in incomplete:
            continue
        images_by_tape[tape_id] = TapeImages(
            tape_id=tape_id,
            thumbnail=thumbnails[tape_id],
            gallery=tuple(galleries[tape_id]),
        )

    logger.info(
        f"Bucket escaneado: {len(filenames)} objetos, {len(images_by_tape)} cintas "
        f"con imagenes completas, {len(warnings)} warnings"
    )
    return ImageScanResult(images_by_tape=images_by_tape, warnings=warnings)
