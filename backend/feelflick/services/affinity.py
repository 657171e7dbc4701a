"""
affinity.py

Mood-match (affinity) score, 0-100, for one (movie, mood) pair.

Scoring weights:
- 40% genre match (+15 per preferred genre, -30 per avoided genre, clamped 0-100)
- 25% pacing match
- 20% intensity match
- 15% emotional depth match
Each "match" is 100 - 10 * |movie value - mood target|, floored at 0.

The weighted base is then scaled by a quality multiplier
(1 + 0.1 per vote point above 6.0) and topped up by a popularity boost
(popularity / 100, capped at 10) before the final clamp to 100.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from feelflick.services.content_scoring import ContentScores
from feelflick.services.reference_data import MoodProfile, coerce_genre_ids
from feelflick.utils.numbers import clamp, round_half_away

# Component weights (sum to 1.0)
GENRE_WEIGHT = 0.40
PACING_WEIGHT = 0.25
INTENSITY_WEIGHT = 0.20
EMOTIONAL_DEPTH_WEIGHT = 0.15

PREFERRED_GENRE_POINTS = 15
AVOIDED_GENRE_POINTS = 30
POINTS_PER_STEP = 10

QUALITY_BASELINE = 6.0
QUALITY_STEP = 0.1
POPULARITY_DIVISOR = 100.0
MAX_POPULARITY_BOOST = 10.0
MAX_AFFINITY = 100.0


@dataclass(frozen=True)
class AffinityResult:
    """Composite score plus the sub-scores kept for explainability.

    The emotional depth match feeds the composite but is not part of the
    persisted breakdown.
    """
    score: float
    genre_match_score: float
    pacing_match_score: float
    intensity_match_score: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "score": self.score,
            "genre_match_score": self.genre_match_score,
            "pacing_match_score": self.pacing_match_score,
            "intensity_match_score": self.intensity_match_score,
        }


def genre_match(genre_ids: Iterable[int], profile: MoodProfile) -> float:
    """Accumulate preferred/avoided hits over every genre, then clamp to 0-100."""
    total = 0
    for genre_id in genre_ids:
        if genre_id in profile.preferred_genres:
            total += PREFERRED_GENRE_POINTS
        if genre_id in profile.avoided_genres:
            total -= AVOIDED_GENRE_POINTS
    return float(clamp(total, 0, 100))


def distance_match(movie_value: float, target_value: float) -> float:
    return float(max(0, 100 - POINTS_PER_STEP * abs(movie_value - target_value)))


def quality_multiplier(vote_average: Optional[float]) -> float:
    if vote_average is None:
        return 1.0
    return 1 + max(0.0, (vote_average - QUALITY_BASELINE) * QUALITY_STEP)


def popularity_boost(popularity: Optional[float]) -> float:
    if not popularity or popularity < 0:
        return 0.0
    return min(popularity / POPULARITY_DIVISOR, MAX_POPULARITY_BOOST)


class AffinityScorer:
    """Scores a movie against a MoodProfile. Stateless and thread-safe."""

    def score(
        self,
        content_scores: ContentScores,
        genre_ids: Optional[Iterable[int]],
        mood_profile: MoodProfile,
        vote_average: Optional[float] = None,
        popularity: Optional[float] = None,
    ) -> AffinityResult:
        genre_score = genre_match(coerce_genre_ids(genre_ids), mood_profile)
        pacing_score = distance_match(content_scores.pacing, mood_profile.pacing)
        intensity_score = distance_match(content_scores.intensity, mood_profile.intensity)
        depth_score = distance_match(content_scores.emotional_depth, mood_profile.emotional_depth)

        base_score = (
            genre_score * GENRE_WEIGHT
            + pacing_score * PACING_WEIGHT
            + intensity_score * INTENSITY_WEIGHT
            + depth_score * EMOTIONAL_DEPTH_WEIGHT
        )

        final_score = base_score * quality_multiplier(vote_average) + popularity_boost(popularity)
        final_score = clamp(final_score, 0.0, MAX_AFFINITY)

        return AffinityResult(
            score=round_half_away(final_score, 1),
            genre_match_score=round_half_away(genre_score, 1),
            pacing_match_score=round_half_away(pacing_score, 1),
            intensity_match_score=round_half_away(intensity_score, 1),
        )
