"""
normalize.py – Text and URL normalisation for scraped Letterboxd markup.

Provides entity decoding for titles and canonicalisation of poster / film
URLs (absolute, high-resolution, never a placeholder).
"""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

LETTERBOXD_ORIGIN: str = "https://letterboxd.com"

# Letterboxd serves this image instead of a real poster to logged-out scrapers
PLACEHOLDER_MARKER: str = "empty-poster"

# Resized poster crops: 70x105 thumbnails are upgraded to 230x345
_LOW_RES_CROP: str = "-0-70-0-105-crop"
_HIGH_RES_CROP: str = "-0-230-0-345-crop"

_ENTITIES: dict[str, str] = {
    "&#039;": "'",
    "&#39;": "'",
    "&#x27;": "'",
    "&amp;": "&",
    "&quot;": '"',
    "&lt;": "<",
    "&gt;": ">",
    "&nbsp;": "\xa0",
    "&apos;": "'",
}

_ENTITY_RE = re.compile("|".join(re.escape(entity) for entity in _ENTITIES))


def decode_entities(text: str | None) -> str | None:
    """Replace the known HTML entities in *text* with their literal characters.

    Replacement happens in a single pass, so ``&amp;quot;`` becomes
    ``&quot;`` and not ``"``.  Unknown entities are left untouched.

    Args:
        text: Raw text taken from an attribute, element body or JSON-LD value.

    Returns:
        The decoded string, or *text* itself when it is empty or ``None``.
    """
    if not text:
        return text
    return _ENTITY_RE.sub(lambda match: _ENTITIES[match.group(0)], text)


def is_placeholder(url: str | None) -> bool:
    """Return ``True`` if *url* points at Letterboxd's placeholder poster."""
    return bool(url and PLACEHOLDER_MARKER in url)


def normalize_url(raw: str | None, origin: str = LETTERBOXD_ORIGIN) -> str:
    """Canonicalise a poster or film URL scraped from a list page.

    Relative and protocol-relative URLs are resolved against *origin*,
    thumbnail crops are upgraded to the large crop, and anything that is not
    an ``http(s)`` URL or that points at the placeholder poster is dropped.
    Applying the function to its own output returns the output unchanged.

    Args:
        raw: URL-like string from markup; may be empty or ``None``.
        origin: Base used for relative URLs.

    Returns:
        An absolute ``http(s)`` URL, or ``""``.
    """
    url = (raw or "").strip()
    if not url:
        return ""

    url = url.replace(_LOW_RES_CROP, _HIGH_RES_CROP)

    if not url.lower().startswith(("http://", "https://")):
        url = urljoin(origin.rstrip("/") + "/", url)

    parsed = urlparse(url)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        return ""
    if is_placeholder(url):
        return ""
    return url
