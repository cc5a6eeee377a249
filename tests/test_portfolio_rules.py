"""Unit tests for portfolio slug, link and social validation."""

import pytest

from freyn.services.portfolio_rules import (
    PortfolioValidationError,
    is_valid_slug,
    normalize_slug,
    sanitize_links,
    sanitize_socials,
    validate_cover,
)


def test_slug_rules():
    assert not is_valid_slug(normalize_slug("My Cool Slug!"))
    assert is_valid_slug(normalize_slug("my-cool-slug"))
    assert normalize_slug("  Jane-Design ") == "jane-design"
    assert is_valid_slug("jane-design-2")
    assert not is_valid_slug("jane--design")
    assert not is_valid_slug("-jane")
    assert not is_valid_slug("jane_design")
    assert not is_valid_slug("")


def test_links_skip_blank_rows_and_keep_valid_ones():
    links = sanitize_links([
        {"name": "", "url": ""},
        {"name": " Site ", "url": "https://example.com/work"},
        "junk",
    ])
    assert links == [{"name": "Site", "url": "https://example.com/work", "icon": ""}]
    assert sanitize_links(None) == []


def test_link_needs_both_name_and_url():
    with pytest.raises(PortfolioValidationError, match="name and URL"):
        sanitize_links([{"name": "Site"}])


def test_link_url_must_be_http():
    with pytest.raises(PortfolioValidationError, match="valid URL"):
        sanitize_links([{"name": "Site", "url": "ftp://example.com"}])


def test_link_name_length_limit():
    with pytest.raises(PortfolioValidationError, match="120 characters"):
        sanitize_links([{"name": "x" * 121, "url": "https://example.com"}])


def test_socials_fill_every_key():
    socials = sanitize_socials({
        "email": "jane@example.com",
        "whatsapp": "+62 812-3456-7890",
        "instagram": "https://instagram.com/jane",
        "unknown": "dropped",
    })
    assert socials["email"] == "jane@example.com"
    assert socials["whatsapp"] == "+62 812-3456-7890"
    assert socials["x"] == ""
    assert "unknown" not in socials
    assert len(socials) == 9


def test_invalid_social_names_its_label():
    with pytest.raises(PortfolioValidationError, match="YouTube must be a valid URL"):
        sanitize_socials({"youtube": "not a url"})
    with pytest.raises(PortfolioValidationError, match="Email must be a valid email address"):
        sanitize_socials({"email": "nope"})
    with pytest.raises(PortfolioValidationError, match="WhatsApp"):
        sanitize_socials({"whatsapp": "abc"})


def test_cover_size_limit():
    validate_cover("")
    validate_cover("data:image/png;base64,aGVsbG8=")
    big = "data:image/png;base64," + "A" * (1300 * 1024)
    with pytest.raises(PortfolioValidationError, match="Cover image is too large"):
        validate_cover(big)
