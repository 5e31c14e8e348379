"""
Formateador de mensajes de WhatsApp.

Convierte una selección de propiedades en texto listo para difundir:
bloque detallado por propiedad, versión compacta, estadísticas contra
el límite blando de WhatsApp y truncado sin cortar bloques a la mitad.
"""

import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional, Sequence

import structlog

from dealdrop.broadcast.errors import EmptySelectionError
from dealdrop.broadcast.links import ShareLinkBuilder
from dealdrop.config import get_settings
from dealdrop.models import (
    BroadcastOptions,
    MediaStrategy,
    MediaType,
    MessageStats,
    PropertyRecord,
)

logger = structlog.get_logger()

# 21 caracteres de bloque completo
DIVIDER = "━" * 21

TRUNCATED_NOTICE = "\n\n⚠️ _Message truncated. See full list on our website._"
TRUNCATED_NOTICE_SHORT = "\n\n⚠️ _Message truncated._"


def format_currency(value: float) -> str:
    """Moneda USD sin decimales con separador de miles: $150,000 (medios hacia arriba)."""
    rounded = Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return f"${rounded:,.0f}"


def format_number(value: float) -> str:
    """Número sin ceros decimales sobrantes: 2 -> '2', 2.5 -> '2.5', 1500 -> '1,500'."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,g}"


def shorten(text: str, max_chars: int) -> str:
    """Recorta a `max_chars - 2` caracteres + '...' si supera `max_chars`."""
    if len(text) <= max_chars:
        return text
    return text[: max(max_chars - 2, 0)] + "..."


def format_date(moment: datetime) -> str:
    """Fecha legible estilo en-US: 'Fri, Oct 16, 2026'."""
    return f"{moment:%a}, {moment:%b} {moment.day}, {moment.year}"


class WhatsAppFormatter:
    """
    Genera mensajes de difusión para WhatsApp.

    Usa un ShareLinkBuilder para los links de cada propiedad, de modo que
    el origen del sitio se inyecta y no depende de estado global.
    """

    def __init__(
        self,
        links: Optional[ShareLinkBuilder] = None,
        soft_limit: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        settings = get_settings()
        self.links = links or ShareLinkBuilder()
        self.soft_limit = settings.message_soft_limit if soft_limit is None else soft_limit
        self.default_max_chars = settings.truncate_max_chars
        self._clock = clock

    # ------------------------------------------------------------------
    # Mensaje detallado
    # ------------------------------------------------------------------

    def format_property_block(self, prop: PropertyRecord) -> str:
        """Bloque fijo de cinco líneas para una propiedad."""
        price_line = f"💰 Asking: {format_currency(prop.asking_price)}"
        if prop.arv:
            price_line += f" | ARV: {format_currency(prop.arv)}"

        details = []
        if prop.bedrooms:
            details.append(f"{format_number(prop.bedrooms)} BD")
        if prop.bathrooms:
            details.append(f"{format_number(prop.bathrooms)} BA")
        if prop.square_footage:
            details.append(f"{format_number(prop.square_footage)} sqft")
        if prop.property_type:
            details.append(prop.property_type)
        details_line = "🛏 " + (" | ".join(details) if details else "Details on request")

        if prop.county:
            location_line = f"📍 {prop.county} County"
        else:
            location_line = f"📍 {prop.state or prop.city}"

        lines = [
            f"🔥 *{prop.full_address}*",
            price_line,
            details_line,
            location_line,
            f"🔗 {self.links.get_property_url(prop.id)}",
        ]
        return "\n".join(lines)

    def format_broadcast_message(
        self,
        properties: Sequence[PropertyRecord],
        options: Optional[BroadcastOptions] = None,
    ) -> str:
        """
        Mensaje completo: header, bloques separados por divisor y footer.

        Args:
            properties: Propiedades seleccionadas (al menos una)
            options: Header/footer/timestamp; lo omitido usa los defaults

        Returns:
            Mensaje listo para copiar o precargar en wa.me

        Raises:
            EmptySelectionError: Si no hay propiedades
        """
        if not properties:
            raise EmptySelectionError()

        options = options or BroadcastOptions()
        blocks = [self.format_property_block(p) for p in properties]

        parts = [
            options.header_text,
            DIVIDER,
            "",
            f"\n\n{DIVIDER}\n\n".join(blocks),
            "",
            DIVIDER,
        ]

        if options.footer_text:
            parts.append(options.footer_text)

        if options.include_timestamp:
            parts.append(f"\n📅 {format_date(self._clock())}")

        message = "\n".join(parts)
        logger.debug(
            "Mensaje de difusión generado",
            properties=len(blocks),
            chars=len(message),
        )
        return message

    # ------------------------------------------------------------------
    # Mensaje compacto
    # ------------------------------------------------------------------

    def format_compact_property(self, prop: PropertyRecord) -> str:
        """Una línea por propiedad: calle en negrita, ciudad y precio."""
        line = f"• *{prop.street_address}*"
        if prop.city:
            line += f", {prop.city}"
        return f"{line} - {format_currency(prop.asking_price)}"

    def format_compact_broadcast(self, properties: Sequence[PropertyRecord]) -> str:
        """Versión densa para cuando el detallado supera el límite."""
        if not properties:
            raise EmptySelectionError()

        header = f"🏠 *{len(properties)} NEW DEALS* 🏠\n\n"
        compact_list = "\n".join(self.format_compact_property(p) for p in properties)
        footer = (
            f"\n\n🔗 View all: {self.links.get_listings_url()}"
            "\n📞 Reply for details!"
        )
        return header + compact_list + footer

    # ------------------------------------------------------------------
    # Estadísticas y estrategia
    # ------------------------------------------------------------------

    def get_message_stats(self, message: str) -> MessageStats:
        """Largo del mensaje contra el límite blando (solo se informa)."""
        char_count = len(message)
        return MessageStats(
            char_count=char_count,
            is_over_limit=char_count > self.soft_limit,
            # Redondeo half-up, no bancario
            percent_used=math.floor(char_count / self.soft_limit * 100 + 0.5),
        )

    @staticmethod
    def get_media_strategy(count: int) -> MediaStrategy:
        """1 -> imagen, 2 a 4 -> collage, el resto -> PDF."""
        if count == 1:
            return MediaStrategy(
                type=MediaType.SINGLE_IMAGE,
                description="Single property image",
            )
        if 2 <= count <= 4:
            return MediaStrategy(
                type=MediaType.COLLAGE,
                description=f"{count}-image collage grid",
            )
        return MediaStrategy(
            type=MediaType.PDF,
            description="Auto-generated PDF deal sheet",
        )

    def truncate_message(self, message: str, max_chars: Optional[int] = None) -> str:
        """
        Trunca el mensaje sin partir un bloque de propiedad.

        Busca el último divisor antes del corte; si cae en la segunda mitad,
        corta justo después de él. Si no, corta en seco en `max_chars`.
        """
        if max_chars is None:
            max_chars = self.default_max_chars
        if len(message) <= max_chars:
            return message

        truncated = message[:max_chars]
        last_divider = truncated.rfind(DIVIDER)

        if last_divider > max_chars / 2:
            logger.info("Mensaje truncado en divisor", original=len(message), cut=last_divider)
            return truncated[: last_divider + len(DIVIDER)] + TRUNCATED_NOTICE

        logger.info("Mensaje truncado en seco", original=len(message), cut=max_chars)
        return truncated + TRUNCATED_NOTICE_SHORT
