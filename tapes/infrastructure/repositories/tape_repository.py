"""
Repositorio del catalogo: cintas, tags e imagenes de galeria.

Todas las escrituras estan keyeadas por identificadores estables (tape id,
tape id + indice de galeria) para que repetir un sync sea idempotente.
No hace commit: la transaccion la maneja el caso de uso.
"""
from datetime import datetime
from typing import Iterable, List, Optional

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from tapes.domain.entities import Tape
from tapes.infrastructure.database.models import (
    ImageModel,
    TagModel,
    TapeModel,
    TapeTagModel,
)
from tapes.shared.utils.datetime_utils import utc_now


class TapeRepository:
    """
    Gestiona las tablas tapes, tags, tape_tags y tape_images.
    """

    def __init__(self, db: Session):
        self.db = db

    def upsert_tape(self, tape: Tape, synced_at: Optional[datetime] = None) -> TapeModel:
        """
        Inserta la cinta o sobreescribe sus valores si ya existe.

        year/runtime ausentes se escriben como NULL (desconocido).
        """
        existing = self.db.get(TapeModel, tape.id)
        if existing:
            existing.title = tape.title
            existing.year = tape.year
            existing.runtime = tape.runtime_minutes
            existing.contributor_id = tape.contributor_id
            existing.synced_at = synced_at or utc_now()
            row = existing
        else:
            row = TapeModel(
                id=tape.id,
                title=tape.title,
                year=tape.year,
                runtime=tape.runtime_minutes,
                contributor_id=tape.contributor_id,
                synced_at=synced_at or utc_now(),
            )
            self.db.add(row)

        self.db.flush()
        return row

    def replace_tape_tags(self, tape_id: int, tag_names: Iterable[str]) -> None:
        """
        Reemplaza por completo los tags de la cinta (no es un diff).
        """
        self.db.execute(delete(TapeTagModel).where(TapeTagModel.tape_id == tape_id))

        for name in sorted(set(tag_names)):
            if self.db.get(TagModel, name) is None:
                self.db.add(TagModel(name=name))
                self.db.flush()
            self.db.add(TapeTagModel(tape_id=tape_id, tag_name=name))

        self.db.flush()

    def upsert_image(
        self,
        tape_id: int,
        index: int,
        color: str,
        width: int,
        height: int,
        rotated: bool,
    ) -> ImageModel:
        """Inserta o sobreescribe la imagen de galeria (tape_id, index)."""
        existing = self.db.get(ImageModel, (tape_id, index))
        if existing:
            existing.color = color
            existing.width = width
            existing.height = height
            existing.rotated = rotated
            row = existing
        else:
            row = ImageModel(
                tape_id=tape_id,
                gallery_index=index,
                color=color,
                width=width,
                height=height,
                rotated=rotated,
            )
            self.db.add(row)

        self.db.flush()
        logger.debug(f"Imagen {tape_id}/{index} guardada")
        return row

    def get_tape(self, tape_id: int) -> Optional[TapeModel]:
        return self.db.get(TapeModel, tape_id)

    def list_tapes(self) -> List[TapeModel]:
        query = select(TapeModel).order_by(TapeModel.id)
        return list(self.db.execute(query).scalars().all())

    def get_tag_names(self, tape_id: int) -> List[str]:
        query = (
            select(TapeTagModel.tag_name)
            .where(TapeTagModel.tape_id == tape_id)
            .order_by(TapeTagModel.tag_name)
        )
        return list(self.db.execute(query).scalars().all())

    def list_images(self, tape_id: int) -> List[ImageModel]:
        query = (
            select(ImageModel)
            .where(ImageModel.tape_id == tape_id)
            .order_by(ImageModel.gallery_index)
        )
        return list(self.db.execute(query).scalars().all())
