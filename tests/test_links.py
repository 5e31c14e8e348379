import re
from urllib.parse import unquote

from dealdrop.broadcast import ShareLinkBuilder

from conftest import FIXED_MILLIS, SITE


def test_property_url_has_cache_buster(links):
    assert links.get_property_url("abc-123") == f"{SITE}/property/abc-123?v={FIXED_MILLIS}"


def test_default_clock_uses_unix_millis():
    url = ShareLinkBuilder(SITE).get_property_url("abc")
    millis = int(re.search(r"\?v=(\d+)$", url).group(1))
    assert millis > 1_600_000_000_000


def test_origin_comes_from_settings_and_trailing_slash_is_dropped():
    assert ShareLinkBuilder().site_url == SITE
    assert ShareLinkBuilder("https://x.test/").get_listings_url() == "https://x.test/properties"


def test_whatsapp_url_with_phone_strips_non_digits(links):
    url = links.generate_whatsapp_url("Hola mundo", "+1 (786) 369-6335")
    assert url == "https://wa.me/17863696335?text=Hola%20mundo"


def test_whatsapp_url_without_phone_lets_user_pick(links):
    assert links.generate_whatsapp_url("hi") == "https://wa.me/?text=hi"
    assert links.generate_whatsapp_share_url("hi") == "https://wa.me/?text=hi"


def test_whatsapp_url_encodes_like_encode_uri_component(links):
    message = "🔥 *Deal* & more: $150,000 | ARV (est.)\nhttps://x.test/p?v=1"
    url = links.generate_whatsapp_url(message)
    encoded = url.split("?text=", 1)[1]

    assert " " not in encoded
    assert "&" not in encoded
    assert "(est.)" in encoded
    assert unquote(encoded) == message
