"""
Modelos de datos del sistema.

- PropertyRecord: propiedad leída de Supabase (solo lectura)
- Modelos derivados de difusión (opciones, estadísticas, estrategia de media)
"""

from dealdrop.models.property import PropertyRecord, PropertyType, PropertyStatus
from dealdrop.models.broadcast import (
    DEFAULT_FOOTER,
    DEFAULT_HEADER,
    BroadcastOptions,
    MediaStrategy,
    MediaType,
    MessageFormat,
    MessageStats,
)

__all__ = [
    # Propiedad
    "PropertyRecord",
    "PropertyType",
    "PropertyStatus",
    # Difusión
    "BroadcastOptions",
    "MediaStrategy",
    "MediaType",
    "MessageFormat",
    "MessageStats",
    "DEFAULT_HEADER",
    "DEFAULT_FOOTER",
]
