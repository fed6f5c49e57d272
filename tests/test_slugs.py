import pytest

from app.services.slugs import generate_listing_slug, slugify


def test_slugify_normalizes_text():
    assert slugify("  2BR Sea-View  Flat!! ") == "2br-sea-view-flat"
    assert slugify("Café Résidence") == "cafe-residence"
    assert slugify(None) == ""


def test_listing_slug_is_deterministic():
    a = generate_listing_slug("2BR Apartment", "Pune", "lst_0123456789abcdef")
    b = generate_listing_slug("2BR Apartment", "Pune", "lst_0123456789abcdef")
    assert a == b == "2br-apartment-pune-01234567"


def test_listing_slug_without_city():
    assert generate_listing_slug("Plot", None, "lst_abcdef0123", id_chars=4) == "plot-abcd"


def test_listing_slug_differs_per_listing():
    a = generate_listing_slug("Villa", "Goa", "lst_aaaaaaaa1111")
    b = generate_listing_slug("Villa", "Goa", "lst_bbbbbbbb2222")
    assert a != b


def test_empty_title_raises():
    with pytest.raises(ValueError):
        generate_listing_slug("!!!", "Pune", "lst_abc")
