"""Validation rules for the public portfolio page."""

import re

from freyn.models.portfolio import SOCIAL_KEYS
from freyn.services.invoicing import estimate_data_url_bytes

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
URL_PATTERN = re.compile(r"^(https?://)([\w.-]+)(:[0-9]+)?(/.*)?$", re.IGNORECASE)
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9\s-]{5,19}$")

MAX_TITLE_LENGTH = 140
MAX_LINK_NAME_LENGTH = 120
MAX_COVER_BYTES = 900 * 1024
MAX_ICON_BYTES = 220 * 1024

SLUG_MESSAGE = "Slug can only contain lowercase letters, numbers, and hyphens"

SOCIAL_LABELS = {
    "email": "Email",
    "whatsapp": "WhatsApp",
    "youtube": "YouTube",
    "instagram": "Instagram",
    "tiktok": "TikTok",
    "linkedin": "LinkedIn",
    "facebook": "Facebook",
    "x": "X",
    "threads": "Threads",
}


class PortfolioValidationError(ValueError):
    """Carries the user-facing message of the first failing rule."""


def normalize_slug(slug) -> str:
    return str(slug or "").strip().lower()


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and SLUG_PATTERN.match(slug) is not None


def is_http_url(value: str) -> bool:
    return URL_PATTERN.match(value) is not None


def sanitize_links(raw_links) -> list[dict]:
    links = raw_links if isinstance(raw_links, list) else []
    sanitized = []
    for link in links:
        if not isinstance(link, dict) or not (link.get("name") or link.get("url")):
            continue
        name = str(link.get("name") or "").strip()
        url = str(link.get("url") or "").strip()
        icon = str(link.get("icon") or "")

        if not name or not url:
            raise PortfolioValidationError("Each link must include a name and URL")
        if len(name) > MAX_LINK_NAME_LENGTH:
            raise PortfolioValidationError("Link name must be 120 characters or less")
        if not is_http_url(url):
            raise PortfolioValidationError("Each link URL must be a valid URL")
        if icon and estimate_data_url_bytes(icon) > MAX_ICON_BYTES:
            raise PortfolioValidationError("Link icon is too large")

        sanitized.append({"name": name, "url": url, "icon": icon})
    return sanitized


def _validate_social(key: str, value: str) -> None:
    label = SOCIAL_LABELS[key]
    if key == "email":
        if not EMAIL_PATTERN.match(value):
            raise PortfolioValidationError(f"{label} must be a valid email address")
    elif key == "whatsapp":
        if not (PHONE_PATTERN.match(value) or is_http_url(value)):
            raise PortfolioValidationError(
                f"{label} must be a valid phone number or URL"
            )
    elif not is_http_url(value):
        raise PortfolioValidationError(f"{label} must be a valid URL")


def sanitize_socials(raw_socials) -> dict:
    """Fixed key set; empty values allowed, the first invalid one aborts."""
    socials = raw_socials if isinstance(raw_socials, dict) else {}
    sanitized = {}
    for key in SOCIAL_KEYS:
        value = str(socials.get(key) or "").strip()
        if value:
            _validate_social(key, value)
        sanitized[key] = value
    return sanitized


def validate_cover(cover_image: str) -> None:
    if cover_image and estimate_data_url_bytes(cover_image) > MAX_COVER_BYTES:
        raise PortfolioValidationError("Cover image is too large")
