"""
tmdb.py – TMDb poster enrichment.

Provides a single-title poster lookup against the TMDb v3 search API and a
batched enricher that fills missing Letterboxd posters while staying inside
TMDb's request quota.
"""

from __future__ import annotations

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

import requests

from models import MovieRecord
from normalize import is_placeholder

logger = logging.getLogger(__name__)

_TMDB_API_BASE: str = "https://api.themoviedb.org/3"
_TMDB_IMAGE_BASE: str = "https://image.tmdb.org/t/p/w500"

# TMDb allows roughly 40 requests per 10 seconds: 5 lookups every 250 ms
# stays well below that.
DEFAULT_BATCH_SIZE: int = 5
DEFAULT_BATCH_DELAY: float = 0.25

_YEAR_RE = re.compile(r"^(\d{4})")

PosterLookup = Callable[[str, str, str], "str | None"]


def search_movie_poster(
    title: str,
    year: str | None,
    api_key: str,
    *,
    timeout: int = 10,
) -> str | None:
    """Search TMDb for *title* and return the best match's poster URL.

    Failures never propagate: a missing key, a non-200 response, a network
    error or an unreadable body all yield ``None``.

    Args:
        title: Movie title to search for.
        year: Optional release year or date string (``"2021-05-03"`` is
            searched as ``2021``).
        api_key: TMDb API Key (v3).
        timeout: HTTP request timeout in seconds.

    Returns:
        An absolute ``w500`` poster URL for the first result, or ``None``.
    """
    if not api_key or not title:
        return None

    params: dict[str, str] = {
        "api_key": api_key,
        "query": title,
        "include_adult": "false",
        "language": "en-US",
    }
    year_match = _YEAR_RE.match((year or "").strip())
    if year_match:
        params["year"] = year_match.group(1)

    try:
        resp = requests.get(f"{_TMDB_API_BASE}/search/movie", params=params, timeout=timeout)
        if resp.status_code != 200:
            logger.warning("TMDb search for %r returned status %s", title, resp.status_code)
            return None
        data: dict[str, Any] = resp.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning("TMDb search for %r failed: %s", title, exc)
        return None

    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        return None

    poster_path = results[0].get("poster_path")
    if not poster_path:
        return None
    return f"{_TMDB_IMAGE_BASE}/{str(poster_path).lstrip('/')}"


def needs_poster(poster: str | None) -> bool:
    """Return ``True`` if *poster* is empty or Letterboxd's placeholder image."""
    return not poster or is_placeholder(poster)


def _safe_lookup(lookup: PosterLookup, index: int, movie: MovieRecord, api_key: str) -> tuple[int, str | None]:
    try:
        return index, lookup(movie.title, movie.year, api_key)
    except Exception:
        logger.exception("Poster lookup for %r raised; leaving poster unchanged", movie.title)
        return index, None


def enrich_posters(
    movies: list[MovieRecord],
    api_key: str | None,
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    delay: float = DEFAULT_BATCH_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    lookup: PosterLookup = search_movie_poster,
) -> list[MovieRecord]:
    """Fill missing or placeholder posters from TMDb, in rate-limited batches.

    Movies that need a poster are grouped into batches of *batch_size*.  The
    lookups of one batch run concurrently; the batch finishes once every
    lookup has returned, after which matches are written back by index.
    Consecutive batches are separated by *delay* seconds.  Only ``poster`` is
    ever changed, and order and length of *movies* are preserved.

    Args:
        movies: Extracted movies; updated in place.
        api_key: TMDb API Key (v3).  Empty or ``None`` disables enrichment.
        batch_size: Number of concurrent lookups per batch.
        delay: Pause between batches, in seconds.
        sleep: Sleep function (injectable for tests).
        lookup: Poster lookup function (injectable for tests).

    Returns:
        The same *movies* list object.
    """
    if not api_key or not movies:
        return movies

    batch_size = max(1, int(batch_size))
    candidates = [(index, movie) for index, movie in enumerate(movies) if needs_poster(movie.poster)]
    if not candidates:
        return movies

    batches = [candidates[i:i + batch_size] for i in range(0, len(candidates), batch_size)]
    logger.info(
        "Enriching %d of %d movies from TMDb in %d batches",
        len(candidates), len(movies), len(batches),
    )

    found = 0
    with ThreadPoolExecutor(max_workers=batch_size) as executor:
        for batch_number, batch in enumerate(batches):
            futures = [
                executor.submit(_safe_lookup, lookup, index, movie, api_key)
                for index, movie in batch
            ]
            for future in futures:
                index, poster = future.result()
                if poster:
                    movies[index].poster = poster
                    found += 1

            if batch_number < len(batches) - 1:
                sleep(delay)

    logger.info("TMDb enrichment found %d posters", found)
    return movies
