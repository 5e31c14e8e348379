"""Fixtures compartidas."""

from typing import Optional

import pytest
from PIL import Image

from dealdrop.broadcast import ShareLinkBuilder, WhatsAppFormatter
from dealdrop.config import get_settings
from dealdrop.models import PropertyRecord

SITE = "https://deals.example.com"
FIXED_MILLIS = 1_700_000_000_000


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Settings sin .env del desarrollador y con salida en tmp."""
    monkeypatch.setenv("SITE_URL", SITE)
    monkeypatch.setenv("FLYER_OUTPUT_DIR", str(tmp_path))
    monkeypatch.setenv("LOGO_PATH", str(tmp_path / "missing-logo.png"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_property():
    counter = {"n": 0}

    def _make(**overrides) -> PropertyRecord:
        counter["n"] += 1
        data = {
            "id": f"prop-{counter['n']}",
            "street_address": "123 Main St",
            "city": "Miami",
            "state": "FL",
            "zip_code": "33101",
            "county": "Miami-Dade",
            "asking_price": 150000,
            "arv": 240000,
            "bedrooms": 3,
            "bathrooms": 2,
            "square_footage": 1450,
            "property_type": "SFR",
            "status": "Available",
            "image_url": f"https://img.example.com/{counter['n']}.jpg",
        }
        data.update(overrides)
        return PropertyRecord.model_validate(data)

    return _make


@pytest.fixture
def links() -> ShareLinkBuilder:
    return ShareLinkBuilder(SITE, clock=lambda: FIXED_MILLIS)


@pytest.fixture
def formatter(links) -> WhatsAppFormatter:
    return WhatsAppFormatter(links=links)


class FakeImageLoader:
    """Loader en memoria: URL -> imagen (None simula una descarga fallida)."""

    def __init__(self, images: Optional[dict] = None, default_color: str = "#3366cc"):
        self.images = images or {}
        self.default_color = default_color
        self.calls: list[Optional[str]] = []

    async def load(self, url):
        self.calls.append(url)
        if not url:
            return None
        if url in self.images:
            img = self.images[url]
            return img.copy() if img is not None else None
        return Image.new("RGB", (800, 500), self.default_color)

    async def load_thumbnail(self, url, max_size):
        img = await self.load(url)
        if img is not None:
            img.thumbnail(max_size)
        return img


@pytest.fixture
def fake_loader() -> FakeImageLoader:
    return FakeImageLoader()
