"""
Generador de flyers PDF.

Arma un documento carta multipágina: header y footer de marca en cada
página, una fila por propiedad y una página final de contacto.
"""

import io
import math
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

import structlog
from PIL import Image
from pydantic import BaseModel, Field
from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from dealdrop.broadcast.errors import EmptySelectionError, ExportError
from dealdrop.broadcast.formatter import format_currency, format_number, shorten
from dealdrop.broadcast.images import ImageLoader
from dealdrop.config import (
    BRAND_GREEN,
    DARK_TEXT,
    LIGHT_TEXT,
    STATUS_COLORS,
    STATUS_FALLBACK_COLOR,
    get_settings,
)
from dealdrop.models import PropertyRecord

logger = structlog.get_logger()

# Geometría en mm, medida desde el borde superior de la página
PAGE_W = letter[0] / mm
PAGE_H = letter[1] / mm
MARGIN = 15
HEADER_END = 38
BOTTOM_LIMIT = PAGE_H - 20
TITLE_BLOCK = 18  # título + línea de fecha en la primera página

ROW_HEIGHT_WITH_IMAGES = 45
ROW_HEIGHT_TEXT_ONLY = 28
THUMB_W, THUMB_H = 35, 26
THUMB_MAX_PX = (200, 150)

DISCLAIMER = "Investment opportunities - prices subject to change"


class FlyerOptions(BaseModel):
    """Opciones del flyer."""

    title: Optional[str] = Field(default=None, description="Título de la primera página")
    include_images: bool = Field(default=True, description="Incluye miniaturas por fila")
    address_max_chars: int = Field(default=50, gt=3, description="Largo máximo de dirección")


@dataclass
class FlyerDocument:
    """PDF generado en memoria."""

    filename: str
    content: bytes
    page_count: int
    property_count: int


def default_title(count: int) -> str:
    noun = "Opportunity" if count == 1 else "Opportunities"
    return f"{count} Investment {noun}"


def status_color(status: Optional[str]) -> str:
    """Verde disponible, ámbar pendiente, rojo para todo lo demás."""
    if not status:
        return STATUS_FALLBACK_COLOR
    return STATUS_COLORS.get(status.strip().lower(), STATUS_FALLBACK_COLOR)


def plan_pages(
    count: int,
    row_height: float,
    first_start: float = HEADER_END + TITLE_BLOCK,
    next_start: float = HEADER_END,
    bottom: float = BOTTOM_LIMIT,
) -> list[int]:
    """
    Cantidad de filas por página de propiedades.

    Las filas se apilan hasta que la siguiente se pasaría del área
    imprimible. Se calcula antes de dibujar para que "Page N of M"
    sea exacto desde la primera página.
    """
    first_cap = max(1, math.floor((bottom - first_start) / row_height))
    next_cap = max(1, math.floor((bottom - next_start) / row_height))

    pages = [min(count, first_cap)]
    remaining = count - pages[0]
    while remaining > 0:
        pages.append(min(remaining, next_cap))
        remaining -= pages[-1]
    return pages


class _FlyerCanvas:
    """
    Superficie de dibujo exclusiva de un render.

    Traduce coordenadas "desde arriba" en mm al sistema de reportlab.
    """

    def __init__(self, buffer: io.BytesIO, logo: Optional[ImageReader], title: str):
        self.settings = get_settings()
        self.c = canvas.Canvas(buffer, pagesize=letter)
        self.c.setTitle(title)
        self.c.setAuthor(self.settings.brand_name)
        self.logo = logo

    @staticmethod
    def y(top: float) -> float:
        return (PAGE_H - top) * mm

    def text(self, x: float, top: float, value: str, font: str, size: float,
             color: str, align: str = "left"):
        self.c.setFont(font, size)
        self.c.setFillColor(HexColor(color))
        if align == "right":
            self.c.drawRightString(x * mm, self.y(top), value)
        elif align == "center":
            self.c.drawCentredString(x * mm, self.y(top), value)
        else:
            self.c.drawString(x * mm, self.y(top), value)

    def rect(self, x: float, top: float, w: float, h: float, color: str,
             radius: float = 0):
        self.c.setFillColor(HexColor(color))
        if radius:
            self.c.roundRect(x * mm, self.y(top + h), w * mm, h * mm, radius * mm,
                             stroke=0, fill=1)
        else:
            self.c.rect(x * mm, self.y(top + h), w * mm, h * mm, stroke=0, fill=1)

    def header(self) -> float:
        """Logo, nombre, contacto y línea verde. Devuelve el Y libre."""
        s = self.settings
        if self.logo is not None:
            self.c.drawImage(
                self.logo, MARGIN * mm, self.y(8 + 20), width=35 * mm, height=20 * mm,
                preserveAspectRatio=True, anchor="w", mask="auto",
            )

        self.text(PAGE_W - MARGIN, 18, s.brand_name, "Helvetica-Bold", 20,
                  BRAND_GREEN, align="right")
        self.text(PAGE_W - MARGIN, 25, f"{s.brand_phone}  •  {s.brand_website}",
                  "Helvetica", 10, LIGHT_TEXT, align="right")

        self.c.setStrokeColor(HexColor(BRAND_GREEN))
        self.c.setLineWidth(0.8 * mm)
        self.c.line(MARGIN * mm, self.y(32), (PAGE_W - MARGIN) * mm, self.y(32))
        return HEADER_END

    def footer(self, page_num: int, total_pages: int):
        footer_top = PAGE_H - 12
        self.text(PAGE_W / 2, footer_top, f"Page {page_num} of {total_pages}",
                  "Helvetica", 8, LIGHT_TEXT, align="center")
        self.text(PAGE_W / 2, footer_top + 4, DISCLAIMER,
                  "Helvetica", 8, LIGHT_TEXT, align="center")

    def new_page(self):
        self.c.showPage()

    def save(self):
        self.c.save()


class FlyerGenerator:
    """
    Genera flyers PDF para cualquier cantidad de propiedades.

    Todas las miniaturas se descargan antes de empezar a maquetar; una
    descarga fallida deja esa fila con placeholder. Si el logo no está,
    el header se dibuja sin él.
    """

    def __init__(self, loader: Optional[ImageLoader] = None):
        self.settings = get_settings()
        self._loader = loader

    def _load_logo(self) -> Optional[ImageReader]:
        path = self.settings.logo_path
        if not path:
            return None
        try:
            with Image.open(path) as img:
                img.load()
                return ImageReader(img.convert("RGBA"))
        except OSError as e:
            logger.warning("Logo no disponible, header sin logo", path=str(path), error=str(e))
            return None

    async def _preload_thumbnails(
        self, loader: ImageLoader, properties: Sequence[PropertyRecord]
    ) -> list[Optional[Image.Image]]:
        thumbs = []
        for prop in properties:
            thumbs.append(await loader.load_thumbnail(prop.image_url, THUMB_MAX_PX))
        return thumbs

    async def generate(
        self,
        properties: Sequence[PropertyRecord],
        options: Optional[FlyerOptions] = None,
    ) -> FlyerDocument:
        """
        Genera el flyer.

        Args:
            properties: Propiedades a listar (al menos una)
            options: Título e inclusión de imágenes

        Returns:
            FlyerDocument con el PDF en memoria

        Raises:
            EmptySelectionError: Si no hay propiedades
        """
        if not properties:
            raise EmptySelectionError()

        options = options or FlyerOptions()
        title = options.title or default_title(len(properties))

        thumbs: list[Optional[Image.Image]] = [None] * len(properties)
        if options.include_images:
            if self._loader is not None:
                thumbs = await self._preload_thumbnails(self._loader, properties)
            else:
                async with ImageLoader() as loader:
                    thumbs = await self._preload_thumbnails(loader, properties)

        row_h = ROW_HEIGHT_WITH_IMAGES if options.include_images else ROW_HEIGHT_TEXT_ONLY
        plan = plan_pages(len(properties), row_h)
        total_pages = len(plan) + 1  # + página de contacto

        buffer = io.BytesIO()
        doc = _FlyerCanvas(buffer, self._load_logo(), title)

        y = doc.header()
        doc.text(MARGIN, y, title, "Helvetica-Bold", 16, DARK_TEXT)
        y += 8
        doc.text(MARGIN, y, f"Generated: {self._today()}", "Helvetica", 9, LIGHT_TEXT)
        y += 10

        index = 0
        for page_num, rows in enumerate(plan, start=1):
            if page_num > 1:
                doc.new_page()
                y = doc.header()
            for _ in range(rows):
                self._draw_row(doc, properties[index], thumbs[index], index, y, row_h, options)
                index += 1
                y += row_h
            doc.footer(page_num, total_pages)

        doc.new_page()
        self._draw_cta_page(doc)
        doc.footer(total_pages, total_pages)
        doc.save()

        filename = (
            f"{self.settings.brand_slug}-deals-{len(properties)}-properties-"
            f"{int(time.time() * 1000)}.pdf"
        )
        logger.info(
            "Flyer generado",
            filename=filename,
            properties=len(properties),
            pages=total_pages,
        )
        return FlyerDocument(
            filename=filename,
            content=buffer.getvalue(),
            page_count=total_pages,
            property_count=len(properties),
        )

    @staticmethod
    def _today() -> str:
        now = datetime.now()
        return f"{now.month}/{now.day}/{now.year}"

    def _draw_row(
        self,
        doc: _FlyerCanvas,
        prop: PropertyRecord,
        thumb: Optional[Image.Image],
        index: int,
        y: float,
        row_h: float,
        options: FlyerOptions,
    ):
        content_w = PAGE_W - MARGIN * 2

        # Fondo alternado
        if index % 2 == 0:
            doc.rect(MARGIN, y - 2, content_w, row_h - 2, "#f8f8f8")

        x = MARGIN
        if options.include_images:
            if thumb is not None:
                doc.c.drawImage(
                    ImageReader(thumb), x * mm, doc.y(y + THUMB_H),
                    width=THUMB_W * mm, height=THUMB_H * mm,
                    preserveAspectRatio=True, anchor="c",
                )
            else:
                doc.rect(x, y, THUMB_W, THUMB_H, "#e6e6e6")
                doc.text(x + THUMB_W / 2, y + 14, "No Image", "Helvetica", 7,
                         "#969696", align="center")
            x += THUMB_W + 5

        doc.text(x, y + 6, shorten(prop.full_address, options.address_max_chars),
                 "Helvetica-Bold", 11, DARK_TEXT)

        doc.text(x, y + 13, format_currency(prop.asking_price), "Helvetica-Bold", 10,
                 BRAND_GREEN)
        if prop.arv:
            doc.text(x + 45, y + 13, f"ARV: {format_currency(prop.arv)}", "Helvetica", 10,
                     LIGHT_TEXT)

        details = [
            prop.property_type,
            f"{format_number(prop.bedrooms)} BD" if prop.bedrooms else None,
            f"{format_number(prop.bathrooms)} BA" if prop.bathrooms else None,
            f"{format_number(prop.square_footage)} sqft" if prop.square_footage else None,
            f"{prop.county} County" if prop.county else None,
        ]
        doc.text(x, y + 20, "  •  ".join(d for d in details if d), "Helvetica", 9, LIGHT_TEXT)

        if prop.status:
            label = prop.status.upper()
            badge_w = max(18, stringWidth(label, "Helvetica", 7) / mm + 4)
            badge_x = PAGE_W - MARGIN - 2 - badge_w
            doc.rect(badge_x, y + 2, badge_w, 6, status_color(prop.status), radius=1)
            doc.text(badge_x + badge_w / 2, y + 6.5, label, "Helvetica", 7, "#ffffff",
                     align="center")

    def _draw_cta_page(self, doc: _FlyerCanvas):
        s = self.settings
        doc.header()

        cta_y = PAGE_H / 2 - 30
        doc.text(PAGE_W / 2, cta_y, "Ready to Invest?", "Helvetica-Bold", 24, DARK_TEXT,
                 align="center")
        doc.text(PAGE_W / 2, cta_y + 12,
                 "Contact us today for more details on these properties",
                 "Helvetica", 14, LIGHT_TEXT, align="center")

        doc.rect(PAGE_W / 2 - 50, cta_y + 25, 100, 35, BRAND_GREEN, radius=3)
        doc.text(PAGE_W / 2, cta_y + 40, s.brand_phone, "Helvetica-Bold", 16, "#ffffff",
                 align="center")
        doc.text(PAGE_W / 2, cta_y + 52, s.brand_website, "Helvetica", 12, "#ffffff",
                 align="center")

    def save(self, document: FlyerDocument, directory: Optional[Path] = None) -> Path:
        """
        Escribe el PDF en disco.

        Raises:
            ExportError: Si no se pudo escribir el archivo
        """
        path = Path(directory or self.settings.flyer_output_dir) / document.filename
        try:
            path.write_bytes(document.content)
        except OSError as e:
            logger.error("Error guardando flyer", path=str(path), error=str(e))
            raise ExportError(f"Could not write flyer to {path}") from e

        logger.info("Flyer guardado", path=str(path), pages=document.page_count)
        return path
