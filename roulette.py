"""
roulette.py – Random movie selection.
"""

from __future__ import annotations

import random
from typing import Sequence

from models import MovieRecord

DEFAULT_SPINS: int = 50


def spin(
    movies: Sequence[MovieRecord],
    *,
    spins: int = DEFAULT_SPINS,
    rng: random.Random | None = None,
) -> tuple[list[MovieRecord], MovieRecord]:
    """Pick one movie uniformly at random, plus a run-up for the wheel animation.

    Args:
        movies: Candidate movies.
        spins: Number of throw-away draws shown before the final pick.
        rng: Random source (seed it for reproducible picks).

    Returns:
        ``(sequence, selected)`` where *sequence* holds the *spins* animation
        draws followed by *selected*.

    Raises:
        ValueError: If *movies* is empty.
    """
    if not movies:
        raise ValueError("Cannot spin an empty list")

    rng = rng or random.Random()
    sequence = [rng.choice(movies) for _ in range(max(0, spins))]
    selected = rng.choice(movies)
    sequence.append(selected)
    return sequence, selected
