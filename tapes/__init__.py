"""
Sync del catalogo de cintas: planilla de inventario + bucket de imagenes -> PostgreSQL.

Este paquete esta pensado para ejecutarse como job (cron / task scheduler),
ver scripts/sync_tapes.py.
"""
__version__ = "1.0.0"
