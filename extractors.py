"""
extractors.py – Movie extraction from Letterboxd list pages.

Letterboxd has shipped several markup shapes over time, so extraction is a
small dispatch table of strategies tried in order:

1. ``json-ld``     – the embedded ``ItemList`` linked-data block.
2. ``list-items``  – ``<li class="listitem">`` entries with ``data-film-*`` attributes.
3. ``poster-list`` – the legacy ``<ul class="poster-list">`` poster grid.

The first strategy that yields at least one movie wins; results are never
merged.  Every strategy scans the raw HTML with regular expressions and skips
malformed entries instead of raising.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Iterable, Iterator

from models import MovieRecord
from normalize import decode_entities, normalize_url

logger = logging.getLogger(__name__)

Strategy = Callable[[str], list[MovieRecord]]

# ---------------------------------------------------------------------------
# Markup contract (these names drift whenever Letterboxd redesigns a page)
# ---------------------------------------------------------------------------

_LIST_ITEM_CLASS: str = "listitem"
_FRAME_CLASS: str = "frame"
_FILM_LINK_CLASS: str = "film"
_FILM_PATH_PREFIX: str = "/film/"
_POSTER_PATH_SEGMENT: str = "film-poster"
_IMAGE_ATTRS: tuple[str, ...] = ("src", "data-src", "srcset", "data-srcset")

_JSON_LD_RE = re.compile(
    r"<script\b[^>]*type\s*=\s*[\"']application/ld\+json[\"'][^>]*>(.*?)</script>",
    re.IGNORECASE | re.DOTALL,
)
_CDATA_RE = re.compile(r"(?:/\*\s*)?(?:<!\[CDATA\[|\]\]>)(?:\s*\*/)?")
_LI_RE = re.compile(r"<li\b([^>]*)>(.*?)</li>", re.IGNORECASE | re.DOTALL)
_POSTER_LIST_RE = re.compile(
    r"<ul\b[^>]*class\s*=\s*\"[^\"]*poster-list[^\"]*\"[^>]*>(.*?)</ul>",
    re.IGNORECASE | re.DOTALL,
)
_TAG_RE = re.compile(r"<([a-zA-Z][\w-]*)\b([^>]*)>")
_ATTR_RE = re.compile(r"([\w:.-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")
_ANCHOR_TEXT_RE = re.compile(r"<a\b([^>]*)>([^<]+)<", re.IGNORECASE)
_PERMALINK_YEAR_RE = re.compile(r"/film/[^/\"'\s]+/(\d{4})/")
_WORD_START_RE = re.compile(r"\b\w")

# ---------------------------------------------------------------------------
# Scanning helpers
# ---------------------------------------------------------------------------


def _attrs(tag_body: str) -> dict[str, str]:
    """Parse the attribute section of an opening tag; first occurrence wins."""
    attrs: dict[str, str] = {}
    for name, double_quoted, single_quoted in _ATTR_RE.findall(tag_body):
        attrs.setdefault(name.lower(), double_quoted or single_quoted)
    return attrs


def _iter_tags(html: str, name: str | None = None) -> Iterator[dict[str, str]]:
    """Yield the attributes of every opening tag in *html* (optionally by name)."""
    for match in _TAG_RE.finditer(html):
        if name is None or match.group(1).lower() == name:
            yield _attrs(match.group(2))


def _has_class(attrs: dict[str, str], marker: str) -> bool:
    return marker in attrs.get("class", "")


def _first_attr(html: str, attr: str, tag: str | None = None) -> str:
    """Return the first non-empty value of *attr* on any (matching) tag."""
    for attrs in _iter_tags(html, tag):
        value = attrs.get(attr, "").strip()
        if value:
            return value
    return ""


def _first_url(candidates: Iterable[str]) -> str:
    """Return the first candidate that survives :func:`normalize_url`."""
    for candidate in candidates:
        # srcset values look like "url 2x, url 3x"
        parts = candidate.split(",")[0].split()
        url = normalize_url(parts[0] if parts else "")
        if url:
            return url
    return ""


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _clean_title(raw: str) -> str:
    return (decode_entities(raw) or "").strip()


# ---------------------------------------------------------------------------
# Strategy (a): JSON-LD ItemList
# ---------------------------------------------------------------------------


def _is_item_list(node: dict[str, Any]) -> bool:
    node_type = node.get("@type")
    types = node_type if isinstance(node_type, list) else [node_type]
    return "ItemList" in types and isinstance(node.get("itemListElement"), list)


def _item_lists(data: Any) -> Iterator[dict[str, Any]]:
    if isinstance(data, list):
        for entry in data:
            yield from _item_lists(entry)
    elif isinstance(data, dict):
        if _is_item_list(data):
            yield data
        if "@graph" in data:
            yield from _item_lists(data["@graph"])


def _person_name(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        return _clean_title(_text(value.get("name")))
    return ""


def _image_url(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("url") or value.get("contentUrl")
    return _text(value)


def extract_from_json_ld(html: str) -> list[MovieRecord]:
    """Extract movies from embedded ``application/ld+json`` ``ItemList`` blocks.

    A block that fails to decode is skipped; the remaining blocks are still
    processed.  Only list elements wrapping an ``item`` object with a
    non-empty ``name`` are kept.

    Args:
        html: Raw list page body.

    Returns:
        Movies in document order (possibly empty).
    """
    movies: list[MovieRecord] = []

    for raw_block in _JSON_LD_RE.findall(html):
        try:
            data = json.loads(_CDATA_RE.sub("", raw_block))
            item_lists = list(_item_lists(data))
        except (ValueError, RecursionError) as exc:
            logger.debug("Skipping undecodable JSON-LD block: %s", exc)
            continue

        for item_list in item_lists:
            for element in item_list["itemListElement"]:
                item = element.get("item") if isinstance(element, dict) else None
                if not isinstance(item, dict):
                    continue

                title = _clean_title(_text(item.get("name")))
                if not title:
                    continue

                movies.append(
                    MovieRecord(
                        title=title,
                        year=_text(item.get("datePublished")),
                        director=_person_name(item.get("director")),
                        poster=normalize_url(_image_url(item.get("image"))),
                        link=normalize_url(_text(item.get("url"))),
                    )
                )

    return movies


# ---------------------------------------------------------------------------
# Strategy (b): <li class="listitem"> entries
# ---------------------------------------------------------------------------


def _film_link_text(block: str) -> str:
    for match in _ANCHOR_TEXT_RE.finditer(block):
        if _has_class(_attrs(match.group(1)), _FILM_LINK_CLASS) and match.group(2).strip():
            return match.group(2)
    return ""


def _release_year(block: str) -> str:
    year = _first_attr(block, "data-film-release-year")
    if year.isdigit():
        return year
    match = _PERMALINK_YEAR_RE.search(block)
    return match.group(1) if match else ""


def _poster_candidates(block: str) -> Iterator[str]:
    images = list(_iter_tags(block, "img"))
    for attr in ("src", "data-src"):
        for attrs in images:
            if attrs.get(attr):
                yield attrs[attr]
    for attrs in _iter_tags(block):
        for attr in _IMAGE_ATTRS:
            value = attrs.get(attr, "")
            if _POSTER_PATH_SEGMENT in value:
                yield value


def _frame_link(block: str) -> str:
    for attrs in _iter_tags(block, "a"):
        href = attrs.get("href", "")
        if _has_class(attrs, _FRAME_CLASS) and href.startswith(_FILM_PATH_PREFIX):
            return normalize_url(href)
    return ""


def extract_from_list_items(html: str) -> list[MovieRecord]:
    """Extract movies from ``<li>`` elements carrying the ``listitem`` class.

    Director is not present in this markup and is always empty.
    """
    movies: list[MovieRecord] = []

    for li_attrs, block in _LI_RE.findall(html):
        if not _has_class(_attrs(li_attrs), _LIST_ITEM_CLASS):
            continue

        item_html = f"<li{li_attrs}>{block}"
        title = _clean_title(
            _first_attr(item_html, "data-film-name") or _film_link_text(block)
        )
        if not title:
            continue

        movies.append(
            MovieRecord(
                title=title,
                year=_release_year(item_html),
                poster=_first_url(_poster_candidates(block)),
                link=_frame_link(block),
            )
        )

    return movies


# ---------------------------------------------------------------------------
# Strategy (c): legacy <ul class="poster-list"> grid
# ---------------------------------------------------------------------------


def _slug_to_title(slug: str) -> str:
    return _WORD_START_RE.sub(lambda match: match.group(0).upper(), slug.replace("-", " "))


def _any_film_link(block: str) -> str:
    for attrs in _iter_tags(block):
        href = attrs.get("href", "")
        if href.startswith(_FILM_PATH_PREFIX):
            return normalize_url(href)
    return ""


def extract_from_poster_list(html: str) -> list[MovieRecord]:
    """Extract movies from the first ``poster-list`` container on the page.

    Titles come from ``data-film-slug`` (``"the-godfather"`` becomes
    ``"The Godfather"``), falling back to the poster's ``alt`` text.  Year and
    director are not available in this shape.
    """
    container = _POSTER_LIST_RE.search(html)
    if not container:
        return []

    movies: list[MovieRecord] = []
    for li_attrs, block in _LI_RE.findall(container.group(1)):
        slug = _first_attr(f"<li{li_attrs}>{block}", "data-film-slug")
        title = _clean_title(_slug_to_title(slug) if slug else _first_attr(block, "alt", "img"))
        if not title:
            continue

        movies.append(
            MovieRecord(
                title=title,
                poster=_first_url(
                    attrs[attr]
                    for attr in ("src", "data-src")
                    for attrs in _iter_tags(block)
                    if attrs.get(attr)
                ),
                link=_any_film_link(block),
            )
        )

    return movies


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("json-ld", extract_from_json_ld),
    ("list-items", extract_from_list_items),
    ("poster-list", extract_from_poster_list),
)


def extract_movies(
    html: str,
    strategies: tuple[tuple[str, Strategy], ...] = STRATEGIES,
) -> list[MovieRecord]:
    """Run *strategies* in order and return the first non-empty result.

    Args:
        html: Raw list page body.
        strategies: Ordered ``(name, function)`` pairs.

    Returns:
        The movies found by the first strategy that found any, or an empty
        list when no recognised structure is present.
    """
    html = html or ""
    for name, strategy in strategies:
        movies = strategy(html)
        if movies:
            logger.info("Extracted %d movies using the %s strategy", len(movies), name)
            return movies
        logger.debug("Strategy %s found no movies", name)

    logger.info("No movies recognised in list page (%d bytes)", len(html))
    return []
