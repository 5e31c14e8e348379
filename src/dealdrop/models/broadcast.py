"""
Modelos derivados de una difusión.

Ninguno se persiste: se recalculan cada vez que cambia la selección
o las opciones de formato.
"""

from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_HEADER = "🏠 *WHOLESALE DEAL DROP* 🏠"
DEFAULT_FOOTER = "📞 Questions? Reply to this message!"


class MessageFormat(str, Enum):
    """Variante de mensaje de texto."""

    DETAILED = "detailed"
    COMPACT = "compact"


class MediaType(str, Enum):
    """Adjunto recomendado según el tamaño de la selección."""

    SINGLE_IMAGE = "single_image"
    COLLAGE = "collage"
    PDF = "pdf"


class BroadcastOptions(BaseModel):
    """Opciones del mensaje detallado; cada campo se puede pisar por separado."""

    header_text: str = Field(default=DEFAULT_HEADER, description="Línea de encabezado")
    footer_text: str = Field(default=DEFAULT_FOOTER, description="Línea de cierre")
    include_timestamp: bool = Field(
        default=True, description="Agrega la fecha de generación al final"
    )


class MessageStats(BaseModel):
    """Estadísticas del mensaje contra el límite blando de WhatsApp."""

    char_count: int
    is_over_limit: bool
    percent_used: int


class MediaStrategy(BaseModel):
    """Estrategia de adjunto recomendada."""

    type: MediaType
    description: str
