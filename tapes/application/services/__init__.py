"""
Servicios de aplicacion.

Motor de reconciliacion: funciones puras (salvo la lectura de las fuentes
detras de los Protocols de interfaces) sin acceso a la base.
"""
from tapes.application.services.image_filenames import (
    get_image_filename,
    get_image_key,
    get_thumbnail_key,
    parse_hex_color,
    parse_image_filename,
)
from tapes.application.services.image_scanner import (
    ImageScanResult,
    parse_image_metadata,
    scan_images,
)
from tapes.application.services.inventory_parser import (
    InventoryResult,
    list_tapes,
    parse_inventory,
    resolve_columns,
)
from tapes.application.services.reconciler import (
    CatalogEntry,
    ReconcileResult,
    reconcile,
)

__all__ = [
    # Inventario
    "InventoryResult",
    "list_tapes",
    "parse_inventory",
    "resolve_columns",
    # Imagenes
    "ImageScanResult",
    "scan_images",
    "parse_image_metadata",
    "parse_image_filename",
    "get_image_filename",
    "get_image_key",
    "get_thumbnail_key",
    "parse_hex_color",
    # Reconciliacion
    "CatalogEntry",
    "ReconcileResult",
    "reconcile",
]
