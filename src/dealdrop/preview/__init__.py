"""
Previews de links para crawlers (Open Graph).
"""

from dealdrop.preview.og import (
    BOT_USER_AGENTS,
    build_description,
    build_title,
    extract_property_id,
    is_bot,
    render_og_html,
)

__all__ = [
    "BOT_USER_AGENTS",
    "build_description",
    "build_title",
    "extract_property_id",
    "is_bot",
    "render_og_html",
]
