"""
content_scoring.py

Deterministic pacing / intensity / emotional depth scores (1-10) for a movie.

- Each dimension is the mean of the movie's per-genre weights, rounded half away from zero.
- Pacing: +1 for runtimes under 90 minutes, -1 for runtimes over 150 minutes.
- Emotional depth: +1 for vote_average >= 8.0, -1 for vote_average < 6.0.
- Empty genre sets score a neutral (5, 5, 5); unknown genres weigh 5.

Missing fields never raise, so a batch run does not fail on dirty catalog rows.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Optional
import numpy as np

from feelflick.services.reference_data import (
    DEFAULT_GENRE_ATTRIBUTES,
    NEUTRAL_WEIGHT,
    GenreAttributeTable,
    coerce_genre_ids,
)
from feelflick.utils.numbers import clamp, round_to_int

MIN_SCORE = 1
MAX_SCORE = 10

SHORT_RUNTIME_MINUTES = 90
LONG_RUNTIME_MINUTES = 150
ACCLAIMED_VOTE_AVERAGE = 8.0
POORLY_RATED_VOTE_AVERAGE = 6.0


@dataclass(frozen=True)
class ContentScores:
    pacing: int
    intensity: int
    emotional_depth: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "pacing": self.pacing,
            "intensity": self.intensity,
            "emotional_depth": self.emotional_depth,
        }


NEUTRAL_CONTENT_SCORES = ContentScores(NEUTRAL_WEIGHT, NEUTRAL_WEIGHT, NEUTRAL_WEIGHT)


class ContentScorer:
    """Maps genre ids + runtime + vote average to ContentScores. Stateless and thread-safe."""

    def __init__(self, genre_table: GenreAttributeTable = DEFAULT_GENRE_ATTRIBUTES):
        self.genre_table = genre_table

    def score(
        self,
        genre_ids: Optional[Iterable[int]],
        runtime: Optional[float] = None,
        vote_average: Optional[float] = None,
    ) -> ContentScores:
        genres = coerce_genre_ids(genre_ids)
        if not genres:
            return NEUTRAL_CONTENT_SCORES

        weights = np.array([self.genre_table.get(g).as_tuple() for g in genres], dtype=float)
        pacing, intensity, depth = (round_to_int(v) for v in weights.mean(axis=0))

        if runtime is not None:
            if runtime < SHORT_RUNTIME_MINUTES:
                pacing += 1
            elif runtime > LONG_RUNTIME_MINUTES:
                pacing -= 1

        if vote_average is not None:
            if vote_average >= ACCLAIMED_VOTE_AVERAGE:
                depth += 1
            elif vote_average < POORLY_RATED_VOTE_AVERAGE:
                depth -= 1

        return ContentScores(
            pacing=int(clamp(pacing, MIN_SCORE, MAX_SCORE)),
            intensity=int(clamp(intensity, MIN_SCORE, MAX_SCORE)),
            emotional_depth=int(clamp(depth, MIN_SCORE, MAX_SCORE)),
        )
