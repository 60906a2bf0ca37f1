"""
Configuración de fixtures para pytest.
"""
from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from tapes.infrastructure.database import models  # noqa: F401
from tapes.infrastructure.database.session import Base, build_session_factory


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite:///:memory:"


def gallery_metadata(
    width: str = "640",
    height: str = "480",
    color: str = "#ffeecc",
    rotated: str = "false",
) -> Dict[str, str]:
    """Metadata valida de una imagen de galeria, con overrides."""
    return {"Width": width, "Height": height, "Color": color, "Rotated": rotated}


class FakeInventorySource:
    """Planilla en memoria."""

    def __init__(self, grid: Optional[List[List[str]]] = None, error: Optional[Exception] = None):
        self.grid = grid or []
        self.error = error
        self.calls = 0

    def get_values(self) -> List[List[str]]:
        self.calls += 1
        if self.error:
            raise self.error
        return [list(row) for row in self.grid]


class FakeImageSource:
    """
    Bucket en memoria: filename -> metadata. Los thumbnails pueden tener
    metadata vacia, nunca se consulta.
    """

    def __init__(
        self,
        objects: Optional[Dict[str, Dict[str, str]]] = None,
        list_error: Optional[Exception] = None,
        metadata_errors: Optional[Dict[str, Exception]] = None,
    ):
        self.objects = dict(objects or {})
        self.list_error = list_error
        self.metadata_errors = metadata_errors or {}
        self.metadata_requests: List[str] = []

    def list_filenames(self) -> List[str]:
        if self.list_error:
            raise self.list_error
        return list(self.objects)

    def get_metadata(self, filename: str) -> Dict[str, str]:
        self.metadata_requests.append(filename)
        if filename in self.metadata_errors:
            raise self.metadata_errors[filename]
        return dict(self.objects[filename])


@pytest.fixture(scope="function")
def engine():
    """
    Engine SQLite en memoria compartido por todas las sesiones del test
    (StaticPool = una sola conexion).
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Sesion de base de datos para tests de repositorios."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def make_inventory():
    return FakeInventorySource


@pytest.fixture
def make_bucket():
    return FakeImageSource


@pytest.fixture
def gallery_md():
    return gallery_metadata
