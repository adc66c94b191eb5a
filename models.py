"""
models.py – Record types shared by the extraction and enrichment stages.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class MovieRecord:
    """One movie as displayed to the user.

    Every field is a display string.  ``year`` may be empty, a four-digit year
    or an upstream date string; ``poster`` and ``link`` are absolute URLs or
    empty.  Only ``title`` is required to be non-empty.
    """

    title: str
    year: str = ""
    director: str = ""
    poster: str = ""
    link: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MovieRecord:
        """Build a record from client-supplied JSON, coercing values to strings."""

        def _text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        return cls(
            title=_text("title"),
            year=_text("year"),
            director=_text("director"),
            poster=_text("poster"),
            link=_text("link"),
        )
