"""
Gestión de sesiones de base de datos.

El sync es un batch sincrono de un solo hilo, asi que usamos el engine
sincrono de SQLAlchemy con psycopg. El engine se crea recien cuando se
pide (los tests usan su propio engine SQLite en memoria).
"""
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from tapes.core.config import settings


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args(url: str) -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones, SQLite no lo soporta.
    """
    args = {
        "echo": settings.DEBUG,
        "future": True,
    }

    # Configuracion de pool solo para PostgreSQL
    if url.startswith("postgresql"):
        args.update({
            "pool_size": 2,
            "max_overflow": 0,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })

    return args


def build_engine(url: str) -> Engine:
    """Crea un engine para la URL dada."""
    return create_engine(url, **_create_engine_args(url))


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Engine de la base configurada (settings.effective_database_url)."""
    return build_engine(settings.effective_database_url)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    """Session factory sobre el engine configurado."""
    return build_session_factory(get_engine())


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """
    Sesion transaccional: commit al salir sin errores, rollback en
    cualquier otro caso (incluye KeyboardInterrupt).
    """
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Optional[Engine] = None) -> None:
    """Inicializa la base de datos creando todas las tablas."""
    # Registra los modelos en Base.metadata
    from tapes.infrastructure.database import models  # noqa: F401

    Base.metadata.create_all(engine or get_engine())


def close_db() -> None:
    """Cierra las conexiones de la base de datos."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
