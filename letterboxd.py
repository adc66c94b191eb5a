"""
letterboxd.py – Letterboxd list fetching pipeline.

Provides a single public function that fetches a public Letterboxd list page,
extracts its movies and optionally fills missing posters from TMDb, together
with the typed failures a caller has to handle.
"""

from __future__ import annotations

import logging
import re

import requests

from extractors import extract_movies
from models import MovieRecord
from tmdb import DEFAULT_BATCH_DELAY, DEFAULT_BATCH_SIZE, enrich_posters

logger = logging.getLogger(__name__)

_LIST_URL_RE = re.compile(r"^https?://(www\.)?letterboxd\.com/.+/list/.+")

_REQUEST_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://letterboxd.com/",
}

# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class InvalidListURLError(ValueError):
    """The supplied URL is missing or is not a Letterboxd list URL."""


class ListFetchError(RuntimeError):
    """The list page could not be fetched."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ListNotFoundError(LookupError):
    """The page was fetched but contained no recognisable movies."""


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def validate_list_url(list_url: str | None) -> str:
    """Return the stripped *list_url* if it looks like a Letterboxd list.

    Raises:
        InvalidListURLError: If *list_url* is empty or has the wrong shape.
    """
    list_url = (list_url or "").strip()
    if not list_url:
        raise InvalidListURLError("URL is required")
    if not _LIST_URL_RE.match(list_url):
        raise InvalidListURLError(f"Invalid Letterboxd list URL: {list_url!r}")
    return list_url


def fetch_list_page(
    list_url: str,
    *,
    session: requests.Session | None = None,
    timeout: int = 15,
) -> str:
    """GET *list_url* with browser-like headers and return the body.

    A caller-supplied *session* is used as-is and left open; otherwise a
    session is created and closed here.

    Raises:
        ListFetchError: On a non-2xx response (with its status code) or a
            network failure (without one).
    """
    if session is None:
        with requests.Session() as own_session:
            return fetch_list_page(list_url, session=own_session, timeout=timeout)

    try:
        resp = session.get(list_url, headers=_REQUEST_HEADERS, timeout=timeout)
    except requests.RequestException as exc:
        raise ListFetchError(f"Failed to fetch list: {exc}") from exc

    if not 200 <= resp.status_code < 300:
        raise ListFetchError(f"Failed to fetch list: {resp.status_code}", resp.status_code)
    return resp.text


def fetch_letterboxd_list(
    list_url: str,
    tmdb_api_key: str | None = "",
    *,
    session: requests.Session | None = None,
    timeout: int = 15,
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_delay: float = DEFAULT_BATCH_DELAY,
) -> list[MovieRecord]:
    """Fetch a public Letterboxd list and return its movies in list order.

    Only the single fetched page is read.  When *tmdb_api_key* is set,
    movies without a usable poster are enriched from TMDb.

    Args:
        list_url: Full Letterboxd list URL,
            e.g. ``https://letterboxd.com/jane/list/favourites/``.
        tmdb_api_key: TMDb API Key (v3); empty disables enrichment.
        session: Optional ``requests.Session`` to fetch with.
        timeout: HTTP timeout for the list page, in seconds.
        batch_size: Concurrent TMDb lookups per batch.
        batch_delay: Pause between TMDb batches, in seconds.

    Returns:
        The extracted (and possibly enriched) movies.

    Raises:
        InvalidListURLError: If *list_url* is not a Letterboxd list URL.
        ListFetchError: If the list page could not be fetched.
        ListNotFoundError: If no movies were recognised on the page.
    """
    list_url = validate_list_url(list_url)
    logger.info("Fetching Letterboxd list %s", list_url)

    html = fetch_list_page(list_url, session=session, timeout=timeout)

    movies = extract_movies(html)
    if not movies:
        raise ListNotFoundError("No movies found in this list. Make sure the list is public.")

    return enrich_posters(movies, tmdb_api_key, batch_size=batch_size, delay=batch_delay)
