"""
Meta tags Open Graph para páginas de propiedades.

Los crawlers de WhatsApp, Facebook, etc. no ejecutan la SPA: para ellos
se genera un HTML mínimo con título, descripción e imagen de la propiedad.
"""

import re
from html import escape
from typing import Optional

from dealdrop.broadcast.formatter import format_currency, format_number
from dealdrop.models import PropertyRecord

BOT_USER_AGENTS = [
    "WhatsApp",
    "facebookexternalhit",
    "Facebot",
    "Twitterbot",
    "LinkedInBot",
    "Slackbot",
    "TelegramBot",
    "Discordbot",
    "Pinterest",
    "Googlebot",
    "bingbot",
    "Applebot",
    "Embedly",
    "Quora Link Preview",
    "Showyoubot",
    "outbrain",
    "vkShare",
    "W3C_Validator",
]

_PROPERTY_PATH = re.compile(r"^/property/([a-zA-Z0-9-]+)/?$")


def is_bot(user_agent: Optional[str]) -> bool:
    """True si el user agent corresponde a un crawler de previews."""
    if not user_agent:
        return False
    ua = user_agent.lower()
    return any(bot.lower() in ua for bot in BOT_USER_AGENTS)


def extract_property_id(path: str) -> Optional[str]:
    """'/property/<id>' -> '<id>'; cualquier otra ruta -> None."""
    match = _PROPERTY_PATH.match(path)
    return match.group(1) if match else None


def build_title(prop: PropertyRecord) -> str:
    return f"{prop.full_address} | {format_currency(prop.asking_price)}"


def build_description(prop: PropertyRecord) -> str:
    rooms = [
        f"{format_number(prop.bedrooms)} BD" if prop.bedrooms else None,
        f"{format_number(prop.bathrooms)} BA" if prop.bathrooms else None,
    ]
    rooms_text = " | ".join(r for r in rooms if r)

    parts = [
        f"💰 Asking: {format_currency(prop.asking_price)}",
        f"ARV: {format_currency(prop.arv)}" if prop.arv else None,
        f"🛏 {rooms_text}" if rooms_text else None,
        f"{format_number(prop.square_footage)} sqft" if prop.square_footage else None,
        f"📍 {prop.county} County" if prop.county else None,
        prop.property_type,
    ]
    return " | ".join(p for p in parts if p)


def render_og_html(prop: PropertyRecord, site_url: str, site_name: str) -> str:
    """
    HTML con meta tags OG/Twitter que redirige a la página real.

    Args:
        prop: Propiedad a previsualizar
        site_url: Origen público (sin barra final)
        site_name: Nombre mostrado en og:site_name
    """
    site_url = site_url.rstrip("/")
    title = escape(build_title(prop))
    description = escape(build_description(prop))
    image = escape(prop.image_url or f"{site_url}/og-image.svg")
    url = escape(f"{site_url}/property/{prop.id}")
    site_name = escape(site_name)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <meta name="title" content="{title}">
  <meta name="description" content="{description}">
  <meta property="og:type" content="website">
  <meta property="og:url" content="{url}">
  <meta property="og:title" content="{title}">
  <meta property="og:description" content="{description}">
  <meta property="og:image" content="{image}">
  <meta property="og:image:width" content="1200">
  <meta property="og:image:height" content="630">
  <meta property="og:site_name" content="{site_name}">
  <meta property="twitter:card" content="summary_large_image">
  <meta property="twitter:url" content="{url}">
  <meta property="twitter:title" content="{title}">
  <meta property="twitter:description" content="{description}">
  <meta property="twitter:image" content="{image}">
  <noscript><meta http-equiv="refresh" content="0;url={url}"></noscript>
  <script>window.location.href = "{url}";</script>
</head>
<body>
  <p>Redirecting to <a href="{url}">{title}</a>...</p>
</body>
</html>"""
