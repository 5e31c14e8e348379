"""
Módulo de difusión.

Provee el formateador de WhatsApp, los links para compartir y los
renderers de collage y flyer PDF.
"""

from dealdrop.broadcast.errors import (
    BroadcastError,
    EmptySelectionError,
    ExportError,
    InvalidSelectionError,
)
from dealdrop.broadcast.links import ShareLinkBuilder
from dealdrop.broadcast.formatter import (
    DIVIDER,
    WhatsAppFormatter,
    format_currency,
)
from dealdrop.broadcast.images import ImageLoader
from dealdrop.broadcast.collage import CollageGenerator, CollageOptions
from dealdrop.broadcast.flyer import FlyerDocument, FlyerGenerator, FlyerOptions
from dealdrop.broadcast.selection import BroadcastFilters, BroadcastSelection
from dealdrop.broadcast.composer import BroadcastComposer, BroadcastDraft, MediaArtifact

__all__ = [
    # Errores
    "BroadcastError",
    "EmptySelectionError",
    "ExportError",
    "InvalidSelectionError",
    # Texto
    "ShareLinkBuilder",
    "WhatsAppFormatter",
    "DIVIDER",
    "format_currency",
    # Media
    "ImageLoader",
    "CollageGenerator",
    "CollageOptions",
    "FlyerGenerator",
    "FlyerOptions",
    "FlyerDocument",
    # Selección y orquestación
    "BroadcastFilters",
    "BroadcastSelection",
    "BroadcastComposer",
    "BroadcastDraft",
    "MediaArtifact",
]
