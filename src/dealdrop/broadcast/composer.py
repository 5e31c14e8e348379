"""
Orquestador de una difusión.

Une formateador, links y renderers: dado un conjunto de propiedades arma
el borrador de texto y genera el adjunto recomendado.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import structlog

from dealdrop.broadcast.collage import CollageGenerator, CollageOptions
from dealdrop.broadcast.errors import EmptySelectionError
from dealdrop.broadcast.flyer import FlyerGenerator, FlyerOptions
from dealdrop.broadcast.formatter import WhatsAppFormatter
from dealdrop.models import (
    BroadcastOptions,
    MediaStrategy,
    MediaType,
    MessageFormat,
    MessageStats,
    PropertyRecord,
)

logger = structlog.get_logger()


@dataclass
class BroadcastDraft:
    """Texto listo para enviar con sus métricas."""

    message: str
    message_format: MessageFormat
    stats: MessageStats
    strategy: MediaStrategy
    whatsapp_url: str


@dataclass
class MediaArtifact:
    """Adjunto generado para la difusión."""

    type: MediaType
    path: Optional[Path] = None  # collage o PDF escrito en disco
    url: Optional[str] = None  # imagen única: se comparte la URL original


class BroadcastComposer:
    """
    Arma difusiones completas.

    Flujo:
    1. Formatear el mensaje (detallado o compacto)
    2. Calcular estadísticas y estrategia de media
    3. Construir el deep link de WhatsApp
    4. Generar el adjunto (imagen, collage o PDF) si se pide
    """

    def __init__(
        self,
        formatter: Optional[WhatsAppFormatter] = None,
        collage: Optional[CollageGenerator] = None,
        flyer: Optional[FlyerGenerator] = None,
    ):
        self.formatter = formatter or WhatsAppFormatter()
        self.collage = collage or CollageGenerator()
        self.flyer = flyer or FlyerGenerator()

    def draft(
        self,
        properties: Sequence[PropertyRecord],
        message_format: MessageFormat = MessageFormat.DETAILED,
        options: Optional[BroadcastOptions] = None,
        phone_number: Optional[str] = None,
    ) -> BroadcastDraft:
        """
        Genera el borrador de texto.

        Raises:
            EmptySelectionError: Si no hay propiedades
        """
        if message_format == MessageFormat.COMPACT:
            message = self.formatter.format_compact_broadcast(properties)
        else:
            message = self.formatter.format_broadcast_message(properties, options)

        stats = self.formatter.get_message_stats(message)
        if stats.is_over_limit:
            logger.warning(
                "Mensaje supera el límite de WhatsApp",
                chars=stats.char_count,
                percent=stats.percent_used,
                format=MessageFormat(message_format).value,
            )

        return BroadcastDraft(
            message=message,
            message_format=MessageFormat(message_format),
            stats=stats,
            strategy=self.formatter.get_media_strategy(len(properties)),
            whatsapp_url=self.formatter.links.generate_whatsapp_url(message, phone_number),
        )

    async def render_media(
        self,
        properties: Sequence[PropertyRecord],
        directory: Optional[Path] = None,
        collage_options: Optional[CollageOptions] = None,
        flyer_options: Optional[FlyerOptions] = None,
    ) -> MediaArtifact:
        """Genera el adjunto que recomienda la estrategia de media."""
        if not properties:
            raise EmptySelectionError()

        strategy = self.formatter.get_media_strategy(len(properties))

        if strategy.type == MediaType.SINGLE_IMAGE:
            return MediaArtifact(type=strategy.type, url=properties[0].image_url)

        if strategy.type == MediaType.COLLAGE:
            data_url = await self.collage.generate(properties, collage_options)
            return MediaArtifact(
                type=strategy.type,
                path=self.collage.save(data_url, directory=directory),
            )

        document = await self.flyer.generate(properties, flyer_options)
        return MediaArtifact(
            type=strategy.type,
            path=self.flyer.save(document, directory=directory),
        )
