"""
Entidades del dominio del catalogo de cintas.
"""
from tapes.domain.entities.image import Image, ImageKind, ImageMetadata, TapeImages
from tapes.domain.entities.sync import (
    Accepted,
    Outcome,
    Rejected,
    SyncRun,
    SyncWarning,
    format_warnings,
)
from tapes.domain.entities.tape import Tape

__all__ = [
    "Tape",
    "Image",
    "ImageKind",
    "ImageMetadata",
    "TapeImages",
    "SyncWarning",
    "SyncRun",
    "Accepted",
    "Rejected",
    "Outcome",
    "format_warnings",
]
