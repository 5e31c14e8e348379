"""
Preview server para crawlers.

Atiende /property/<id>: a los bots les devuelve HTML con meta tags Open
Graph y a los humanos los redirige a la SPA.
"""

from typing import Optional

import structlog
from aiohttp import web

from dealdrop.config import Settings, get_settings
from dealdrop.database import PropertyRepository
from dealdrop.preview.og import extract_property_id, is_bot, render_og_html

logger = structlog.get_logger()

REPOSITORY_KEY = web.AppKey("repository", PropertyRepository)
SETTINGS_KEY = web.AppKey("settings", Settings)


def _to_spa(request: web.Request) -> web.HTTPFound:
    settings = request.app[SETTINGS_KEY]
    return web.HTTPFound(f"{settings.spa_origin.rstrip('/')}{request.path_qs}")


async def property_preview(request: web.Request) -> web.Response:
    """GET /property/...: ids inválidos o rutas anidadas van directo a la SPA."""
    user_agent = request.headers.get("User-Agent")
    if not is_bot(user_agent):
        raise _to_spa(request)

    property_id = extract_property_id(request.path)
    if property_id is None:
        raise _to_spa(request)

    settings = request.app[SETTINGS_KEY]

    try:
        prop = request.app[REPOSITORY_KEY].get_by_id(property_id)
    except Exception as e:
        logger.error("Error obteniendo propiedad", property_id=property_id, error=str(e))
        raise _to_spa(request)

    if prop is None:
        logger.info("Propiedad no encontrada para preview", property_id=property_id)
        raise _to_spa(request)

    logger.info("Preview servido", property_id=property_id, user_agent=user_agent)
    return web.Response(
        text=render_og_html(prop, settings.site_url, f"{settings.brand_name} Wholesale Properties"),
        content_type="text/html",
        headers={"Cache-Control": "public, max-age=3600"},
    )


async def health(_: web.Request) -> web.Response:
    return web.Response(text="ok")


def create_app(
    repository: Optional[PropertyRepository] = None,
    settings: Optional[Settings] = None,
) -> web.Application:
    """Arma la aplicación aiohttp del preview server."""
    app = web.Application()
    app[SETTINGS_KEY] = settings or get_settings()
    app[REPOSITORY_KEY] = repository or PropertyRepository()

    app.router.add_get(r"/property/{tail:.*}", property_preview)
    app.router.add_get("/health", health)
    return app
