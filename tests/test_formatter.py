from datetime import datetime
from urllib.parse import unquote

import pytest

from dealdrop.broadcast import (
    DIVIDER,
    EmptySelectionError,
    ShareLinkBuilder,
    WhatsAppFormatter,
)
from dealdrop.broadcast.formatter import (
    TRUNCATED_NOTICE,
    TRUNCATED_NOTICE_SHORT,
    format_currency,
    format_date,
    format_number,
    shorten,
)
from dealdrop.models import BroadcastOptions, MediaType

from conftest import FIXED_MILLIS, SITE


class TestHelpers:
    def test_currency_has_no_cents_and_groups_thousands(self):
        assert format_currency(150000) == "$150,000"
        assert format_currency(1234567.6) == "$1,234,568"
        assert format_currency(0) == "$0"

    def test_currency_rounds_halves_up(self):
        assert format_currency(150000.5) == "$150,001"
        assert format_currency(2.5) == "$3"
        assert format_currency(2.4) == "$2"

    def test_number_drops_trailing_zero(self):
        assert format_number(2) == "2"
        assert format_number(2.0) == "2"
        assert format_number(2.5) == "2.5"
        assert format_number(1450) == "1,450"

    def test_shorten(self):
        assert shorten("short", 28) == "short"
        text = "1234 Very Long Boulevard Name, Fort Lauderdale"
        assert shorten(text, 28) == text[:26] + "..."

    def test_format_date(self):
        assert format_date(datetime(2026, 10, 16)) == "Fri, Oct 16, 2026"


class TestPropertyBlock:
    def test_five_lines(self, formatter, make_property):
        block = formatter.format_property_block(make_property())
        lines = block.split("\n")

        assert lines == [
            "🔥 *123 Main St, Miami, FL 33101*",
            "💰 Asking: $150,000 | ARV: $240,000",
            "🛏 3 BD | 2 BA | 1,450 sqft | SFR",
            "📍 Miami-Dade County",
            f"🔗 {SITE}/property/prop-1?v={FIXED_MILLIS}",
        ]

    def test_missing_sqft_is_omitted(self, formatter, make_property):
        prop = make_property(bedrooms=3, bathrooms=2, square_footage=None)
        block = formatter.format_property_block(prop)

        assert "🛏 3 BD | 2 BA | SFR" in block
        assert "sqft" not in block
        assert "None" not in block

    def test_missing_arv_is_omitted(self, formatter, make_property):
        block = formatter.format_property_block(make_property(arv=None))
        assert "💰 Asking: $150,000\n" in block
        assert "ARV" not in block

    def test_zero_values_render_gracefully(self, formatter, make_property):
        prop = make_property(
            bedrooms=0, bathrooms=0, square_footage=0, property_type=None, arv=0
        )
        block = formatter.format_property_block(prop)

        assert "🛏 Details on request" in block
        assert "0 BD" not in block
        assert "ARV" not in block
        assert "NaN" not in block

    def test_half_bathrooms(self, formatter, make_property):
        block = formatter.format_property_block(make_property(bathrooms=1.5))
        assert "| 1.5 BA |" in block

    def test_link_uses_cache_buster(self, make_property):
        ticks = iter([1, 2])
        formatter = WhatsAppFormatter(links=ShareLinkBuilder(SITE, clock=lambda: next(ticks)))
        prop = make_property()

        first = formatter.format_property_block(prop)
        second = formatter.format_property_block(prop)

        assert first.endswith("?v=1")
        assert second.endswith("?v=2")


class TestBroadcastMessage:
    @pytest.fixture
    def fixed_formatter(self, links):
        return WhatsAppFormatter(links=links, clock=lambda: datetime(2026, 10, 16, 9, 30))

    def test_one_block_per_property(self, fixed_formatter, make_property):
        props = [make_property(), make_property(), make_property()]
        message = fixed_formatter.format_broadcast_message(props)

        assert message.count("🔥 *") == 3
        for prop in props:
            assert f"/property/{prop.id}?v=" in message
        # header + divider de apertura, 2 separadores entre bloques, divider de cierre
        assert message.count(DIVIDER) == 4

    def test_header_footer_and_timestamp(self, fixed_formatter, make_property):
        message = fixed_formatter.format_broadcast_message([make_property()])

        assert message.startswith("🏠 *WHOLESALE DEAL DROP* 🏠\n" + DIVIDER + "\n\n🔥")
        assert message.endswith(
            DIVIDER + "\n📞 Questions? Reply to this message!\n\n📅 Fri, Oct 16, 2026"
        )

    def test_options_override_individually(self, fixed_formatter, make_property):
        options = BroadcastOptions(header_text="HOT DEALS", include_timestamp=False)
        message = fixed_formatter.format_broadcast_message([make_property()], options)

        assert message.startswith("HOT DEALS\n")
        assert message.endswith("📞 Questions? Reply to this message!")
        assert "📅" not in message

    def test_empty_footer_is_skipped(self, fixed_formatter, make_property):
        options = BroadcastOptions(footer_text="", include_timestamp=False)
        message = fixed_formatter.format_broadcast_message([make_property()], options)
        assert message.endswith(DIVIDER)

    def test_empty_selection_raises(self, formatter):
        with pytest.raises(EmptySelectionError):
            formatter.format_broadcast_message([])

    def test_whatsapp_url_round_trip(self, formatter, make_property):
        message = formatter.format_broadcast_message([make_property()])
        url = formatter.links.generate_whatsapp_url(message)

        encoded = url.split("?text=", 1)[1]
        assert unquote(encoded) == message


class TestCompactBroadcast:
    def test_two_deals(self, formatter, make_property):
        props = [
            make_property(asking_price=150000),
            make_property(street_address="9 Palm Ave", city="Hialeah", asking_price=275000),
        ]
        message = formatter.format_compact_broadcast(props)

        assert message.startswith("🏠 *2 NEW DEALS* 🏠")
        assert "• *123 Main St*, Miami - $150,000" in message
        assert "• *9 Palm Ave*, Hialeah - $275,000" in message
        assert ".00" not in message
        assert message.endswith(f"🔗 View all: {SITE}/properties\n📞 Reply for details!")

    def test_empty_selection_raises(self, formatter):
        with pytest.raises(EmptySelectionError):
            formatter.format_compact_broadcast([])


class TestStats:
    def test_char_count_matches_length(self, formatter):
        for message in ["", "hola", "🏠" * 10, "x" * 5000]:
            stats = formatter.get_message_stats(message)
            assert stats.char_count == len(message)
            assert stats.is_over_limit == (len(message) > 4096)

    def test_limit_boundary(self, formatter):
        assert formatter.get_message_stats("x" * 4096).is_over_limit is False
        assert formatter.get_message_stats("x" * 4097).is_over_limit is True

    def test_percent_rounds_to_nearest(self, formatter):
        assert formatter.get_message_stats("x" * 2048).percent_used == 50
        assert formatter.get_message_stats("x" * 4096).percent_used == 100
        # 2068 / 4096 = 50.49% -> 50 ; 2069 / 4096 = 50.51% -> 51
        assert formatter.get_message_stats("x" * 2068).percent_used == 50
        assert formatter.get_message_stats("x" * 2069).percent_used == 51


class TestMediaStrategy:
    @pytest.mark.parametrize(
        "count,expected",
        [
            (1, MediaType.SINGLE_IMAGE),
            (2, MediaType.COLLAGE),
            (4, MediaType.COLLAGE),
            (5, MediaType.PDF),
            (40, MediaType.PDF),
        ],
    )
    def test_mapping(self, count, expected):
        assert WhatsAppFormatter.get_media_strategy(count).type == expected

    def test_collage_description_mentions_count(self):
        assert WhatsAppFormatter.get_media_strategy(3).description == "3-image collage grid"


class TestTruncate:
    def test_short_message_unchanged(self, formatter):
        assert formatter.truncate_message("hola", 10) == "hola"
        assert formatter.truncate_message("x" * 10, 10) == "x" * 10

    def test_cuts_after_divider_in_second_half(self, formatter, make_property):
        message = formatter.format_broadcast_message([make_property() for _ in range(30)])
        result = formatter.truncate_message(message, 4000)

        assert result.endswith(DIVIDER + TRUNCATED_NOTICE)
        body = result[: -len(TRUNCATED_NOTICE)]
        assert message.startswith(body)
        assert len(result) <= 4000 + len(TRUNCATED_NOTICE)

    def test_hard_cut_without_divider(self, formatter):
        message = "x" * 500
        result = formatter.truncate_message(message, 100)

        assert result == "x" * 100 + TRUNCATED_NOTICE_SHORT

    def test_divider_in_first_half_is_ignored(self, formatter):
        message = DIVIDER + "y" * 500
        result = formatter.truncate_message(message, 100)
        assert result == message[:100] + TRUNCATED_NOTICE_SHORT

    def test_explicit_zero_max_is_respected(self, formatter):
        assert formatter.truncate_message("abc", 0) == TRUNCATED_NOTICE_SHORT

    def test_default_max_is_4000(self, formatter):
        result = formatter.truncate_message("z" * 4500)
        assert result == "z" * 4000 + TRUNCATED_NOTICE_SHORT


def test_explicit_soft_limit_is_respected(links):
    formatter = WhatsAppFormatter(links=links, soft_limit=10)
    stats = formatter.get_message_stats("x" * 11)
    assert stats.is_over_limit is True
    assert stats.percent_used == 110
