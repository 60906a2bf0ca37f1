"""
Configuración de base de datos.

Importa todos los modelos para que se registren con Base
antes de crear las tablas.
"""
from tapes.infrastructure.database.models import (
    ImageModel,
    SyncRunModel,
    TagModel,
    TapeModel,
    TapeTagModel,
)
