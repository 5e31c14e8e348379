import pytest
from aiohttp.test_utils import TestClient, TestServer

from dealdrop.config import get_settings
from dealdrop.preview import (
    build_description,
    extract_property_id,
    is_bot,
    render_og_html,
)
from dealdrop.preview.server import create_app

from conftest import SITE

WHATSAPP_UA = "WhatsApp/2.23.20.0 A"
BROWSER_UA = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"


class FakeRepository:
    def __init__(self, records=None, fail=False):
        self.records = {r.id: r for r in records or []}
        self.fail = fail
        self.asked = []

    def get_by_id(self, property_id):
        self.asked.append(property_id)
        if self.fail:
            raise RuntimeError("supabase down")
        return self.records.get(property_id)


@pytest.mark.parametrize(
    "user_agent,expected",
    [
        (WHATSAPP_UA, True),
        ("facebookexternalhit/1.1", True),
        ("Mozilla/5.0 (compatible; Googlebot/2.1)", True),
        (BROWSER_UA, False),
        ("", False),
        (None, False),
    ],
)
def test_is_bot(user_agent, expected):
    assert is_bot(user_agent) is expected


def test_extract_property_id():
    assert extract_property_id("/property/abc-123") == "abc-123"
    assert extract_property_id("/property/abc-123/") == "abc-123"
    assert extract_property_id("/properties") is None
    assert extract_property_id("/property/abc/edit") is None


def test_description_skips_missing_fields(make_property):
    prop = make_property(arv=None, square_footage=None)
    description = build_description(prop)

    assert description.startswith("💰 Asking: $150,000 | 🛏 3 BD | 2 BA")
    assert "ARV" not in description
    assert "sqft" not in description
    assert description.endswith("📍 Miami-Dade County | SFR")


def test_description_omits_zero_rooms(make_property):
    description = build_description(make_property(bedrooms=0, bathrooms=0, county=""))

    assert "0 BD" not in description
    assert "0 BA" not in description
    assert "🛏" not in description
    assert description == "💰 Asking: $150,000 | ARV: $240,000 | 1,450 sqft | SFR"


def test_description_keeps_non_zero_rooms(make_property):
    description = build_description(make_property(bedrooms=0, bathrooms=1.5))
    assert "🛏 1.5 BA | 1,450 sqft" in description


def test_og_html_escapes_and_falls_back_to_default_image(make_property):
    prop = make_property(street_address='5 "Quoted" <Ln>', image_url=None)
    html = render_og_html(prop, SITE + "/", "Nork Wholesale Properties")

    assert "&quot;Quoted&quot; &lt;Ln&gt;" in html
    assert '<Ln>' not in html
    assert f'<meta property="og:image" content="{SITE}/og-image.svg">' in html
    assert f'<meta property="og:url" content="{SITE}/property/{prop.id}">' in html


@pytest.fixture
async def client(make_property):
    prop = make_property(id="abc-123")
    app = create_app(repository=FakeRepository([prop]), settings=get_settings())
    async with TestClient(TestServer(app)) as client:
        yield client


async def test_bot_gets_og_html(client):
    response = await client.get("/property/abc-123", headers={"User-Agent": WHATSAPP_UA})

    assert response.status == 200
    assert response.content_type == "text/html"
    body = await response.text()
    assert '<meta property="og:title" content="123 Main St, Miami, FL 33101 | $150,000">' in body


async def test_human_is_redirected_to_spa(client):
    response = await client.get(
        "/property/abc-123?v=1", headers={"User-Agent": BROWSER_UA}, allow_redirects=False
    )

    assert response.status == 302
    spa = get_settings().spa_origin.rstrip("/")
    assert response.headers["Location"] == f"{spa}/property/abc-123?v=1"


async def test_unknown_property_falls_through_to_spa(client):
    response = await client.get(
        "/property/zzz", headers={"User-Agent": WHATSAPP_UA}, allow_redirects=False
    )
    assert response.status == 302


async def test_repository_failure_falls_through_to_spa():
    app = create_app(repository=FakeRepository(fail=True), settings=get_settings())
    async with TestClient(TestServer(app)) as client:
        response = await client.get(
            "/property/abc", headers={"User-Agent": WHATSAPP_UA}, allow_redirects=False
        )
    assert response.status == 302


async def test_health(client):
    response = await client.get("/health")
    assert response.status == 200
    assert await response.text() == "ok"


async def test_nested_property_path_skips_repository(make_property):
    repo = FakeRepository([make_property(id="abc")])
    app = create_app(repository=repo, settings=get_settings())
    async with TestClient(TestServer(app)) as client:
        response = await client.get(
            "/property/abc/edit", headers={"User-Agent": WHATSAPP_UA}, allow_redirects=False
        )
        invalid = await client.get(
            "/property/abc_123", headers={"User-Agent": WHATSAPP_UA}, allow_redirects=False
        )

    spa = get_settings().spa_origin.rstrip("/")
    assert response.status == 302
    assert response.headers["Location"] == f"{spa}/property/abc/edit"
    assert invalid.status == 302
    assert repo.asked == []


async def test_trailing_slash_is_served(make_property):
    repo = FakeRepository([make_property(id="abc")])
    app = create_app(repository=repo, settings=get_settings())
    async with TestClient(TestServer(app)) as client:
        response = await client.get("/property/abc/", headers={"User-Agent": WHATSAPP_UA})

    assert response.status == 200
    assert repo.asked == ["abc"]
