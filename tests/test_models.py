import pytest
from pydantic import ValidationError

from dealdrop.models import BroadcastOptions, PropertyRecord


def test_database_row_is_normalized():
    prop = PropertyRecord.model_validate(
        {
            "id": "p1",
            "street_address": "1 Ocean Dr",
            "city": None,
            "state": "FL",
            "zip_code": "33139",
            "county": None,
            "asking_price": 99000,
            "bedrooms": None,
            "bathrooms": None,
            "property_type": "multi-family",
            "status": "under contract",
            "image_url": "  ",
            "wholesaler_id": "ignored",
        }
    )

    assert prop.city == ""
    assert prop.county == ""
    assert prop.bedrooms == 0
    assert prop.bathrooms == 0
    assert prop.property_type == "Multi-Family"
    assert prop.status == "Under Contract"
    assert prop.image_url is None
    assert prop.full_address == "1 Ocean Dr, FL 33139"
    assert prop.street_city == "1 Ocean Dr"


def test_asking_price_is_required_and_non_negative():
    with pytest.raises(ValidationError):
        PropertyRecord(id="p", street_address="x")
    with pytest.raises(ValidationError):
        PropertyRecord(id="p", street_address="x", asking_price=-1)


def test_unknown_property_type_is_rejected():
    with pytest.raises(ValidationError):
        PropertyRecord(id="p", street_address="x", asking_price=1, property_type="Castle")


def test_broadcast_options_defaults():
    options = BroadcastOptions(footer_text="Call me")
    assert options.header_text == "🏠 *WHOLESALE DEAL DROP* 🏠"
    assert options.footer_text == "Call me"
    assert options.include_timestamp is True
