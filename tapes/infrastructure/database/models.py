"""
Modelos de base de datos (ORM) del catalogo de cintas.
"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from tapes.infrastructure.database.session import Base


class TapeModel(Base):
    """Una cinta del catalogo. year/runtime NULL = desconocido."""

    __tablename__ = "tapes"

    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(Text, nullable=False)
    year = Column(Integer, nullable=True)
    runtime = Column(Integer, nullable=True)
    contributor_id = Column(Text, nullable=True)
    synced_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Tape(id={self.id}, title={self.title})>"


class TagModel(Base):
    """Tag conocido; se crea la primera vez que una cinta lo usa."""

    __tablename__ = "tags"

    name = Column(Text, primary_key=True)

    def __repr__(self):
        return f"<Tag(name={self.name})>"


class TapeTagModel(Base):
    """Asociacion cinta <-> tag."""

    __tablename__ = "tape_tags"

    tape_id = Column(Integer, ForeignKey("tapes.id", ondelete="CASCADE"), primary_key=True)
    tag_name = Column(Text, ForeignKey("tags.name", ondelete="CASCADE"), primary_key=True)

    def __repr__(self):
        return f"<TapeTag(tape_id={self.tape_id}, tag={self.tag_name})>"


class ImageModel(Base):
    """
    Imagen de galeria de una cinta, identificada por (tape_id, index).

    El thumbnail no se guarda: su key se deriva del tape id.
    """

    __tablename__ = "tape_images"

    tape_id = Column(Integer, ForeignKey("tapes.id", ondelete="CASCADE"), primary_key=True)
    gallery_index = Column("index", Integer, primary_key=True, autoincrement=False)
    color = Column(String(7), nullable=False)
    width = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    rotated = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<Image(tape_id={self.tape_id}, index={self.gallery_index})>"


class SyncRunModel(Base):
    """
    Registro de auditoria de una corrida de sync.

    Se inserta al empezar (finished_at NULL) y se cierra una sola vez con
    num_tapes + warnings (exito) o error (fallo).
    """

    __tablename__ = "sync_runs"

    id = Column(String(36), primary_key=True)
    started_at = Column(DateTime(timezone=True), nullable=False, index=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    error = Column(Text, nullable=True)
    num_tapes = Column(Integer, nullable=True)
    warnings = Column(Text, nullable=True)

    def __repr__(self):
        return f"<SyncRun(id={self.id}, started_at={self.started_at})>"
