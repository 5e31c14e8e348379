"""
Carga de imágenes remotas.

Descarga y decodifica imágenes de propiedades. Nunca lanza excepciones:
cualquier fallo devuelve None y el render usa un placeholder.
"""

import asyncio
import io
from typing import Optional

import aiohttp
import structlog
from PIL import Image, UnidentifiedImageError

from dealdrop.config import get_settings

logger = structlog.get_logger()


class ImageLoader:
    """
    Descargador de imágenes con una sesión aiohttp compartida.

    Uso:
        async with ImageLoader() as loader:
            img = await loader.load(url)
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        settings = get_settings()
        self.timeout = aiohttp.ClientTimeout(
            total=timeout_seconds or settings.image_timeout_seconds
        )
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Context manager entry: abre la sesión HTTP."""
        self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit: cierra la sesión HTTP."""
        if self._session:
            await self._session.close()
            self._session = None

    async def fetch(self, url: str) -> bytes:
        """Descarga los bytes crudos de una URL."""
        if not self._session:
            raise RuntimeError("Sesión no inicializada. Usa 'async with loader:'")
        async with self._session.get(url) as response:
            response.raise_for_status()
            return await response.read()

    async def load(self, url: Optional[str]) -> Optional[Image.Image]:
        """
        Descarga y decodifica una imagen.

        Args:
            url: URL de la imagen (None o vacío devuelve None)

        Returns:
            Imagen RGB decodificada o None si falló
        """
        if not url:
            return None

        try:
            data = await self.fetch(url)
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                return img.convert("RGB")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("No se pudo descargar imagen", url=url, error=str(e))
        except (UnidentifiedImageError, OSError) as e:
            logger.warning("No se pudo decodificar imagen", url=url, error=str(e))
        return None

    async def load_thumbnail(
        self, url: Optional[str], max_size: tuple[int, int]
    ) -> Optional[Image.Image]:
        """Imagen reducida a una caja máxima, preservando aspecto (nunca agranda)."""
        img = await self.load(url)
        if img is None:
            return None
        img.thumbnail(max_size)
        return img
