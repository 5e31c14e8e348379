"""
Constructor de links para compartir.

Arma la URL pública de cada propiedad (con cache-buster) y los
deep links de WhatsApp con el mensaje precargado.
"""

import re
import time
from typing import Callable, Optional
from urllib.parse import quote

from dealdrop.config import WHATSAPP_BASE_URL, get_settings

# Mismo set de caracteres que deja intactos encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _now_millis() -> int:
    return int(time.time() * 1000)


class ShareLinkBuilder:
    """
    Construye URLs salientes a partir de un origen inyectado.

    El parámetro `v` de las URLs de propiedades es un cache-buster: WhatsApp
    cachea los previews por URL, así que cada share nuevo usa una URL distinta
    y el crawler vuelve a leer los meta tags.
    """

    def __init__(
        self,
        site_url: Optional[str] = None,
        clock: Callable[[], int] = _now_millis,
    ):
        self.site_url = (site_url or get_settings().site_url).rstrip("/")
        self._clock = clock

    def get_property_url(self, property_id: str) -> str:
        """URL pública de una propiedad con cache-buster."""
        return f"{self.site_url}/property/{property_id}?v={self._clock()}"

    def get_listings_url(self) -> str:
        """URL del listado general de propiedades."""
        return f"{self.site_url}/properties"

    def generate_whatsapp_url(
        self, message: str, phone_number: Optional[str] = None
    ) -> str:
        """
        Deep link de wa.me con el mensaje precargado.

        Args:
            message: Mensaje ya formateado
            phone_number: Destinatario con código de país (opcional).
                Sin número, WhatsApp deja elegir el contacto.

        Returns:
            URL completa de wa.me
        """
        encoded = quote(message, safe=_URI_COMPONENT_SAFE)

        if phone_number:
            clean_number = re.sub(r"\D", "", phone_number)
            if clean_number:
                return f"{WHATSAPP_BASE_URL}/{clean_number}?text={encoded}"

        return f"{WHATSAPP_BASE_URL}/?text={encoded}"

    def generate_whatsapp_share_url(self, message: str) -> str:
        """Link genérico: abre WhatsApp y el usuario elige grupo o chat."""
        return self.generate_whatsapp_url(message)
