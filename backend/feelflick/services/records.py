"""
Plain records exchanged between the catalog stores, the batch jobs and the ranker.

The stores build these from ORM rows; tests build them directly.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class MovieRecord:
    id: int
    title: str
    genre_ids: Tuple[int, ...] = ()
    runtime: Optional[int] = None
    vote_average: Optional[float] = None
    popularity: Optional[float] = None
    poster_path: Optional[str] = None
    release_date: Optional[str] = None


@dataclass(frozen=True)
class MoodRecord:
    id: int
    name: str
    description: Optional[str] = None
    emoji: Optional[str] = None
    category: Optional[str] = None
    display_order: int = 0
    active: bool = True


@dataclass(frozen=True)
class ExperienceTypeRecord:
    id: int
    name: str
    preferred_genres: FrozenSet[int] = frozenset()
    avoided_genres: FrozenSet[int] = frozenset()
    description: Optional[str] = None
    display_order: int = 0


@dataclass(frozen=True)
class ViewingContextRecord:
    id: int
    name: str
    prefer_shorter_runtime: bool = False
    content_rating_filter: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    display_order: int = 0


@dataclass(frozen=True)
class AffinityRow:
    """One persisted (movie, mood) affinity."""
    movie_id: int
    mood_id: int
    score: float
    genre_match_score: float
    pacing_match_score: float
    intensity_match_score: float
    last_updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AffinityCandidate:
    """An affinity row joined with its movie, as returned by candidate retrieval."""
    movie: MovieRecord
    score: float


@dataclass(frozen=True)
class RankedMovie:
    movie: MovieRecord
    final_score: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "movie_id": self.movie.id,
            "title": self.movie.title,
            "poster_path": self.movie.poster_path,
            "release_date": self.movie.release_date,
            "runtime": self.movie.runtime,
            "vote_average": self.movie.vote_average,
            "popularity": self.movie.popularity,
            "final_score": self.final_score,
        }
