import pytest

from app.shared.validators import clean_optional_text, parse_chf_price, validate_email


def test_clean_optional_text():
    assert clean_optional_text("  Geneva ") == "Geneva"
    assert clean_optional_text("   ") is None
    assert clean_optional_text(None) is None


def test_validate_email_lowercases():
    assert validate_email(" Ana@Example.COM ") == "ana@example.com"

    with pytest.raises(ValueError):
        validate_email("not-an-email")


def test_parse_chf_price():
    assert parse_chf_price("12,5") == 12.5
    assert parse_chf_price(0) == 0.0
    assert parse_chf_price("  ") is None


@pytest.mark.parametrize("value", [True, "nan", "inf", "-1", "twelve", "1 000"])
def test_parse_chf_price_rejects(value):
    with pytest.raises(ValueError, match="Please enter a valid CHF price."):
        parse_chf_price(value)
