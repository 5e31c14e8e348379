"""
Generador de collages para 2 a 4 propiedades.

Compone las imágenes en un JPEG de 1200x630 (formato de preview social)
con overlay de precio/dirección por tile y un footer de marca.
"""

import base64
import io
import time
from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence

import structlog
from PIL import Image, ImageDraw, ImageFont, ImageOps
from pydantic import BaseModel, Field

from dealdrop.broadcast.errors import ExportError, InvalidSelectionError
from dealdrop.broadcast.formatter import format_currency, shorten
from dealdrop.broadcast.images import ImageLoader
from dealdrop.config import BRAND_GREEN, DARK_BG, get_settings
from dealdrop.models import PropertyRecord

logger = structlog.get_logger()

COLLAGE_WIDTH = 1200
COLLAGE_HEIGHT = 630
GAP = 4
OVERLAY_HEIGHT = 55
FOOTER_HEIGHT = 28

PLACEHOLDER_BG = "#2a2a2a"
PLACEHOLDER_TEXT = "#666666"

DATA_URL_PREFIX = "data:image/jpeg;base64,"

Box = tuple[int, int, int, int]  # x, y, ancho, alto


class CollageOptions(BaseModel):
    """Opciones de render del collage."""

    show_prices: bool = Field(default=True, description="Muestra el precio en cada tile")
    show_address: bool = Field(default=True, description="Muestra 'calle, ciudad'")
    quality: Optional[float] = Field(
        default=None, gt=0.0, le=1.0, description="Calidad JPEG (0-1); None usa settings"
    )
    address_max_chars: int = Field(
        default=28, gt=3, description="Largo máximo de la dirección antes de recortar"
    )


@lru_cache(maxsize=16)
def _font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont:
    """Fuente TrueType de sistema; si no está, la default de Pillow al mismo tamaño."""
    name = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return ImageFont.load_default(size=size)


def collage_layout(
    count: int,
    width: int = COLLAGE_WIDTH,
    height: int = COLLAGE_HEIGHT,
    gap: int = GAP,
) -> list[Box]:
    """
    Calcula las cajas de cada tile según la cantidad de propiedades.

    - 2: dos mitades verticales
    - 3: panel izquierdo (55%) + dos apilados a la derecha
    - 4: grilla 2x2

    Raises:
        InvalidSelectionError: Si count no está entre 2 y 4
    """
    if count == 2:
        w = (width - gap) // 2
        return [(0, 0, w, height), (w + gap, 0, w, height)]

    if count == 3:
        left_w = round(width * 0.55)
        right_w = width - left_w - gap
        right_h = (height - gap) // 2
        return [
            (0, 0, left_w, height),
            (left_w + gap, 0, right_w, right_h),
            (left_w + gap, right_h + gap, right_w, right_h),
        ]

    if count == 4:
        w = (width - gap) // 2
        h = (height - gap) // 2
        return [
            (0, 0, w, h),
            (w + gap, 0, w, h),
            (0, h + gap, w, h),
            (w + gap, h + gap, w, h),
        ]

    raise InvalidSelectionError("Collage requires 2-4 properties")


class _CollageCanvas:
    """Superficie de dibujo exclusiva de un render."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.image = Image.new("RGBA", (width, height), DARK_BG)
        self.draw = ImageDraw.Draw(self.image)

    def paste_cover(self, img: Image.Image, box: Box):
        """Dibuja la imagen recortada al centro para cubrir la caja completa."""
        x, y, w, h = box
        fitted = ImageOps.fit(img.convert("RGBA"), (w, h), centering=(0.5, 0.5))
        self.image.paste(fitted, (x, y))

    def placeholder(self, box: Box):
        x, y, w, h = box
        self.draw.rectangle((x, y, x + w - 1, y + h - 1), fill=PLACEHOLDER_BG)
        self.draw.text(
            (x + w / 2, y + h / 2),
            "No Image",
            fill=PLACEHOLDER_TEXT,
            font=_font(16),
            anchor="mm",
        )

    def shade(self, x: int, y: int, w: int, h: int, alpha: int):
        """Banda negra semitransparente."""
        band = Image.new("RGBA", (w, h), (0, 0, 0, alpha))
        self.image.alpha_composite(band, dest=(x, y))

    def overlay(self, prop: PropertyRecord, box: Box, options: CollageOptions):
        x, y, w, h = box
        top = y + h - OVERLAY_HEIGHT
        self.shade(x, top, w, OVERLAY_HEIGHT, alpha=204)

        if options.show_prices:
            self.draw.text(
                (x + 8, top + 22),
                format_currency(prop.asking_price),
                fill=BRAND_GREEN,
                font=_font(18, bold=True),
                anchor="ls",
            )

        if options.show_address:
            self.draw.text(
                (x + 8, top + 42),
                shorten(prop.street_city, options.address_max_chars),
                fill="#ffffff",
                font=_font(13),
                anchor="ls",
            )

    def footer(self, text: str):
        top = self.height - FOOTER_HEIGHT
        self.shade(0, top, self.width, FOOTER_HEIGHT, alpha=178)
        self.draw.text(
            (self.width / 2, self.height - 9),
            text,
            fill=BRAND_GREEN,
            font=_font(14, bold=True),
            anchor="ms",
        )

    def to_data_url(self, quality: float) -> str:
        buf = io.BytesIO()
        self.image.convert("RGB").save(buf, format="JPEG", quality=round(quality * 100))
        return DATA_URL_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")


class CollageGenerator:
    """
    Compone collages de 2 a 4 propiedades.

    Las imágenes se cargan de a una antes de dibujar cada tile. Una imagen
    que falla degrada solo su tile a placeholder; la única falla fatal es
    una cantidad de propiedades fuera de rango.
    """

    def __init__(self, loader: Optional[ImageLoader] = None):
        self.settings = get_settings()
        self._loader = loader

    @property
    def branding(self) -> str:
        s = self.settings
        return f"{s.brand_name}  •  {s.brand_phone}  •  {s.brand_website}"

    async def generate(
        self,
        properties: Sequence[PropertyRecord],
        options: Optional[CollageOptions] = None,
    ) -> str:
        """
        Genera el collage.

        Args:
            properties: Entre 2 y 4 propiedades
            options: Opciones de render

        Returns:
            Data URL 'data:image/jpeg;base64,...'

        Raises:
            InvalidSelectionError: Si la cantidad no está entre 2 y 4
        """
        options = options or CollageOptions()
        boxes = collage_layout(len(properties))
        canvas = _CollageCanvas(COLLAGE_WIDTH, COLLAGE_HEIGHT)

        if self._loader is not None:
            await self._draw_tiles(canvas, self._loader, properties, boxes, options)
        else:
            async with ImageLoader() as loader:
                await self._draw_tiles(canvas, loader, properties, boxes, options)

        # El footer va al final para que ningún tile lo tape
        canvas.footer(self.branding)

        quality = options.quality or self.settings.collage_quality
        data_url = canvas.to_data_url(quality)
        logger.info(
            "Collage generado",
            properties=len(properties),
            size_kb=round(len(data_url) * 3 / 4 / 1024, 1),
        )
        return data_url

    async def _draw_tiles(
        self,
        canvas: _CollageCanvas,
        loader: ImageLoader,
        properties: Sequence[PropertyRecord],
        boxes: list[Box],
        options: CollageOptions,
    ):
        for prop, box in zip(properties, boxes):
            img = await loader.load(prop.image_url)
            if img is not None:
                canvas.paste_cover(img, box)
            else:
                canvas.placeholder(box)
            canvas.overlay(prop, box, options)

    def save(
        self,
        data_url: str,
        filename: Optional[str] = None,
        directory: Optional[Path] = None,
    ) -> Path:
        """
        Guarda el collage como archivo JPEG.

        Returns:
            Ruta del archivo escrito

        Raises:
            ExportError: Si el data URL es inválido o no se pudo escribir
        """
        if not data_url.startswith(DATA_URL_PREFIX):
            raise ExportError("Collage data URL must be a base64 JPEG")

        filename = filename or f"{self.settings.brand_slug}-deals-{int(time.time() * 1000)}.jpg"
        path = Path(directory or self.settings.flyer_output_dir) / filename

        try:
            path.write_bytes(base64.b64decode(data_url[len(DATA_URL_PREFIX):]))
        except OSError as e:
            logger.error("Error guardando collage", path=str(path), error=str(e))
            raise ExportError(f"Could not write collage to {path}") from e

        logger.info("Collage guardado", path=str(path))
        return path
