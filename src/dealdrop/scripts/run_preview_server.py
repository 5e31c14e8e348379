"""
Script para levantar el preview server de links (Open Graph).

Uso:
    python -m dealdrop.scripts.run_preview_server
    python -m dealdrop.scripts.run_preview_server --port 9000
"""

import argparse
import sys

import structlog
from aiohttp import web

from dealdrop.config import get_settings
from dealdrop.log import configure_logging
from dealdrop.preview.server import create_app

logger = structlog.get_logger()


def main():
    """Entry point del preview server."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Sirve meta tags OG a crawlers")
    parser.add_argument("--host", default=settings.og_listen, help="Host de escucha")
    parser.add_argument("--port", type=int, default=settings.og_port, help="Puerto")
    args = parser.parse_args()

    configure_logging()
    logger.info("Iniciando preview server...", host=args.host, port=args.port)

    try:
        web.run_app(create_app(settings=settings), host=args.host, port=args.port, print=None)
    except KeyboardInterrupt:
        logger.info("Preview server detenido por usuario")
        sys.exit(0)
    except Exception as e:
        logger.error("Error fatal en preview server", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
