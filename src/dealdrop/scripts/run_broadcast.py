"""
Script para armar una difusión de WhatsApp desde la terminal.

Uso:
    python -m dealdrop.scripts.run_broadcast --ids 1f0c...,9a2b...
    python -m dealdrop.scripts.run_broadcast --city Miami --max-price 200000 --format compact
    python -m dealdrop.scripts.run_broadcast --county Broward --media auto --output-dir ./out
    python -m dealdrop.scripts.run_broadcast --price-range '$100K - $200K' --media pdf
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import structlog

from dealdrop.broadcast import (
    BroadcastComposer,
    BroadcastError,
    BroadcastFilters,
    CollageOptions,
    FlyerOptions,
)
from dealdrop.broadcast.selection import PRICE_RANGES, price_range
from dealdrop.database import PropertyRepository
from dealdrop.log import configure_logging
from dealdrop.models import (
    DEFAULT_FOOTER,
    DEFAULT_HEADER,
    BroadcastOptions,
    MessageFormat,
    PropertyRecord,
    PropertyType,
)

logger = structlog.get_logger()


def _load_properties(
    repo: PropertyRepository,
    ids: Optional[list[str]],
    filters: BroadcastFilters,
) -> list[PropertyRecord]:
    if ids:
        return repo.get_many(ids)
    return filters.apply(repo.list_active())


async def run_broadcast(
    ids: Optional[list[str]] = None,
    filters: Optional[BroadcastFilters] = None,
    message_format: MessageFormat = MessageFormat.DETAILED,
    options: Optional[BroadcastOptions] = None,
    phone_number: Optional[str] = None,
    truncate: bool = False,
    media: Optional[str] = None,
    include_images: bool = True,
    output_dir: Optional[Path] = None,
) -> int:
    """
    Ejecuta la difusión.

    Args:
        ids: IDs explícitos (tienen prioridad sobre los filtros)
        filters: Filtros sobre las propiedades activas
        message_format: detailed o compact
        options: Header/footer/timestamp del mensaje detallado
        phone_number: Destinatario del deep link (opcional)
        truncate: Trunca el mensaje si supera el límite
        media: 'auto' (estrategia recomendada), 'collage', 'pdf' o None
        include_images: Miniaturas en el PDF
        output_dir: Directorio de salida de collage/PDF

    Returns:
        Código de salida
    """
    repo = PropertyRepository()
    properties = _load_properties(repo, ids, filters or BroadcastFilters())

    if not properties:
        logger.error("No hay propiedades para difundir", ids=ids)
        return 1

    composer = BroadcastComposer()
    draft = composer.draft(properties, message_format, options, phone_number)

    message = draft.message
    if truncate and draft.stats.is_over_limit:
        message = composer.formatter.truncate_message(message)
        draft.whatsapp_url = composer.formatter.links.generate_whatsapp_url(message, phone_number)

    logger.info(
        "Borrador listo",
        properties=len(properties),
        chars=draft.stats.char_count,
        percent=draft.stats.percent_used,
        over_limit=draft.stats.is_over_limit,
        strategy=draft.strategy.type.value,
    )

    print("\n=== MENSAJE ===")
    print(message)
    print("\n=== WHATSAPP ===")
    print(draft.whatsapp_url)
    print(f"\nMedia recomendada: {draft.strategy.description}")

    flyer_options = FlyerOptions(include_images=include_images)

    if media == "auto":
        artifact = await composer.render_media(
            properties, directory=output_dir, flyer_options=flyer_options
        )
        print(f"Adjunto ({artifact.type.value}): {artifact.path or artifact.url or 'sin imagen'}")
    elif media == "collage":
        data_url = await composer.collage.generate(properties, CollageOptions())
        print(f"Collage: {composer.collage.save(data_url, directory=output_dir)}")
    elif media == "pdf":
        document = await composer.flyer.generate(properties, flyer_options)
        print(f"Flyer: {composer.flyer.save(document, directory=output_dir)}")

    return 0


def _split(value: Optional[str]) -> Optional[list[str]]:
    if not value:
        return None
    return [v.strip() for v in value.split(",") if v.strip()]


def build_filters(args: argparse.Namespace) -> BroadcastFilters:
    """Filtros a partir de los argumentos; los límites explícitos pisan al rango."""
    low, high = price_range(args.price_range) if args.price_range else (None, None)
    return BroadcastFilters(
        min_price=args.min_price if args.min_price is not None else low,
        max_price=args.max_price if args.max_price is not None else high,
        city=args.city,
        county=args.county,
        property_types=args.types,
        status=args.status,
        address_search=args.search,
    )


def main():
    parser = argparse.ArgumentParser(
        description="Arma un mensaje de WhatsApp (y adjunto) para propiedades mayoristas"
    )
    parser.add_argument("--ids", help="IDs separados por coma (ignora los filtros)")
    parser.add_argument("--min-price", type=float, help="Precio mínimo")
    parser.add_argument("--max-price", type=float, help="Precio máximo")
    parser.add_argument(
        "--price-range",
        choices=[label for label, _, _ in PRICE_RANGES],
        help="Rango rápido (--min-price/--max-price tienen prioridad)",
    )
    parser.add_argument("--city", default="", help="Ciudad exacta")
    parser.add_argument("--county", default="", help="Condado exacto")
    parser.add_argument(
        "--type",
        dest="types",
        action="append",
        default=[],
        choices=[t.value for t in PropertyType],
        help="Tipo de propiedad (repetible)",
    )
    parser.add_argument("--status", default="", help="Estado (Available, Pending, ...)")
    parser.add_argument("--search", default="", help="Texto libre sobre la dirección")
    parser.add_argument(
        "--format",
        default=MessageFormat.DETAILED.value,
        choices=[f.value for f in MessageFormat],
        help="Formato del mensaje",
    )
    parser.add_argument("--header", default=DEFAULT_HEADER, help="Encabezado del mensaje")
    parser.add_argument("--footer", default=DEFAULT_FOOTER, help="Cierre del mensaje")
    parser.add_argument("--no-timestamp", action="store_true", help="Sin fecha al final")
    parser.add_argument("--phone", help="Teléfono destino con código de país")
    parser.add_argument("--truncate", action="store_true", help="Trunca si supera el límite")
    parser.add_argument(
        "--media",
        choices=["auto", "collage", "pdf"],
        help="Genera adjunto: auto (recomendado), collage o pdf",
    )
    parser.add_argument("--no-images", action="store_true", help="PDF sin miniaturas")
    parser.add_argument("--output-dir", type=Path, help="Directorio de salida")

    args = parser.parse_args()
    configure_logging()

    filters = build_filters(args)
    options = BroadcastOptions(
        header_text=args.header,
        footer_text=args.footer,
        include_timestamp=not args.no_timestamp,
    )

    try:
        exit_code = asyncio.run(
            run_broadcast(
                ids=_split(args.ids),
                filters=filters,
                message_format=MessageFormat(args.format),
                options=options,
                phone_number=args.phone,
                truncate=args.truncate,
                media=args.media,
                include_images=not args.no_images,
                output_dir=args.output_dir,
            )
        )
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Difusión interrumpida por usuario")
        sys.exit(130)
    except BroadcastError as e:
        logger.error("No se pudo armar la difusión", error=str(e))
        sys.exit(2)
    except Exception as e:
        logger.error("Error fatal en difusión", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
