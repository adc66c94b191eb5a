"""
routes.py – Flask Blueprint containing all HTTP route handlers.

Every route is registered on the ``bp`` Blueprint which is imported and
registered with the Flask application in ``app.py``.  Route handlers are
intentionally thin: they validate inputs, delegate to service functions in
other modules, and serialise results back to JSON.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, jsonify, request
from flask.typing import ResponseReturnValue

from config import enrichment_settings, load_config, request_timeout, save_config
from letterboxd import (
    InvalidListURLError,
    ListFetchError,
    ListNotFoundError,
    fetch_letterboxd_list,
)
from models import MovieRecord
from roulette import DEFAULT_SPINS, spin

logger = logging.getLogger(__name__)

bp = Blueprint("main", __name__)

# Upper bound on the animation run-up a client may request
MAX_SPINS: int = 500


def _error(message: str, status: int, **extra: Any) -> ResponseReturnValue:
    return jsonify({"status": "error", "message": message, **extra}), status


# ---------------------------------------------------------------------------
# Config routes
# ---------------------------------------------------------------------------


@bp.route("/api/config", methods=["GET"])
def get_config() -> ResponseReturnValue:
    """Return the current application configuration as JSON."""
    return jsonify(load_config())


@bp.route("/api/config", methods=["POST"])
def update_config() -> ResponseReturnValue:
    """Persist a new application configuration supplied in the request body.

    The entire configuration object is replaced with the POSTed JSON.

    Returns:
        JSON with ``status`` and the saved ``config``, or a 500 error if the
        config file could not be written.
    """
    new_config = request.get_json(silent=True)
    if not isinstance(new_config, dict):
        return _error("Request body must be a JSON object", 400)
    try:
        save_config(new_config)
    except OSError as exc:
        logger.exception("Failed to write config file")
        return _error(f"Config file write failed: {exc}", 500)

    return jsonify({"status": "success", "config": new_config})


# ---------------------------------------------------------------------------
# List fetching
# ---------------------------------------------------------------------------


@bp.route("/api/fetch-list", methods=["POST"])
def fetch_list() -> ResponseReturnValue:
    """Fetch a public Letterboxd list and return its movies.

    Expects a JSON body with a ``url`` field.  Posters are enriched from TMDb
    when ``tmdb_api_key`` is configured.

    Returns:
        ``{"status": "success", "movies": [...]}`` on success; 400 for a
        missing or invalid URL, 404 when no movies were found and 502 when
        Letterboxd could not be reached.
    """
    data = request.get_json(silent=True)
    url = data.get("url") if isinstance(data, dict) else None
    if not url or not isinstance(url, str):
        return _error("URL is required", 400)

    config = load_config()
    api_key, batch_size, batch_delay = enrichment_settings(config)

    try:
        movies = fetch_letterboxd_list(
            url,
            api_key,
            timeout=request_timeout(config),
            batch_size=batch_size,
            batch_delay=batch_delay,
        )
    except InvalidListURLError as exc:
        return _error(str(exc), 400)
    except ListNotFoundError as exc:
        return _error(str(exc), 404)
    except ListFetchError as exc:
        logger.warning("Letterboxd fetch failed for %s: %s", url, exc)
        return _error(str(exc), 502, upstream_status=exc.status_code)
    except Exception:
        logger.exception("Unexpected error while fetching %s", url)
        return _error(
            "Failed to fetch the list. Please make sure the list is public and the URL is correct.",
            500,
        )

    return jsonify({"status": "success", "movies": [movie.to_dict() for movie in movies]})


# ---------------------------------------------------------------------------
# Roulette
# ---------------------------------------------------------------------------


@bp.route("/api/spin", methods=["POST"])
def spin_roulette() -> ResponseReturnValue:
    """Pick a random movie from the POSTed ``movies`` list.

    An optional ``spins`` field controls how many animation draws precede the
    final pick.

    Returns:
        ``{"status": "success", "sequence": [...], "selected": {...}}``, or a
        400 error for an empty or malformed list.
    """
    data = request.get_json(silent=True)
    raw_movies = data.get("movies") if isinstance(data, dict) else None
    if not isinstance(raw_movies, list):
        return _error("A list of movies is required", 400)

    movies = [
        MovieRecord.from_dict(entry)
        for entry in raw_movies
        if isinstance(entry, dict) and entry.get("title")
    ]
    if not movies:
        return _error("No movies to choose from", 400)

    try:
        spins = min(int(data.get("spins", DEFAULT_SPINS)), MAX_SPINS)
    except (TypeError, ValueError):
        return _error("spins must be an integer", 400)

    sequence, selected = spin(movies, spins=spins)
    return jsonify(
        {
            "status": "success",
            "sequence": [movie.to_dict() for movie in sequence],
            "selected": selected.to_dict(),
        }
    )
