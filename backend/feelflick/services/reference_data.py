"""
Static scoring configuration for FeelFlick.

- GENRE_SCORES: per-genre pacing / intensity / emotional depth weights (TMDB genre ids, 0-10).
- MOOD_PREFERENCES: per-mood target content scores plus preferred / avoided genres.

Both are loaded once into immutable tables and passed into the scorers
explicitly, so the scorers stay pure and any table can be swapped in tests.

TMDB genre ids:
    28 Action, 12 Adventure, 16 Animation, 35 Comedy, 80 Crime, 99 Documentary,
    18 Drama, 10751 Family, 14 Fantasy, 36 History, 27 Horror, 10402 Music,
    9648 Mystery, 10749 Romance, 878 Science Fiction, 10770 TV Movie,
    53 Thriller, 10752 War, 37 Western
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple

NEUTRAL_WEIGHT = 5

GENRE_SCORES: Dict[str, Dict[int, int]] = {
    "pacing": {
        28: 9, 12: 8, 16: 6, 35: 7, 80: 6, 99: 4, 18: 4, 10751: 6, 14: 7,
        36: 3, 27: 7, 10402: 6, 9648: 5, 10749: 5, 878: 7, 10770: 5, 53: 8,
        10752: 6, 37: 5,
    },
    "intensity": {
        28: 8, 12: 7, 16: 4, 35: 3, 80: 7, 99: 5, 18: 6, 10751: 3, 14: 6,
        36: 4, 27: 9, 10402: 4, 9648: 7, 10749: 4, 878: 7, 10770: 5, 53: 9,
        10752: 8, 37: 5,
    },
    "emotional_depth": {
        28: 4, 12: 5, 16: 6, 35: 3, 80: 6, 99: 7, 18: 9, 10751: 5, 14: 6,
        36: 7, 27: 5, 10402: 6, 9648: 6, 10749: 8, 878: 6, 10770: 5, 53: 5,
        10752: 7, 37: 5,
    },
}

MOOD_PREFERENCES: Dict[str, Dict[str, Any]] = {
    "Cozy": {"pacing": 3, "intensity": 2, "emotional_depth": 5, "preferred_genres": [35, 10749, 10751], "avoid_genres": [27, 53]},
    "Adventurous": {"pacing": 8, "intensity": 7, "emotional_depth": 5, "preferred_genres": [12, 28, 14, 878], "avoid_genres": []},
    "Heartbroken": {"pacing": 4, "intensity": 6, "emotional_depth": 9, "preferred_genres": [18, 10749], "avoid_genres": [35]},
    "Curious": {"pacing": 5, "intensity": 5, "emotional_depth": 7, "preferred_genres": [9648, 878, 99], "avoid_genres": [28]},
    "Nostalgic": {"pacing": 4, "intensity": 3, "emotional_depth": 6, "preferred_genres": [18, 10749, 35], "avoid_genres": [27, 53]},
    "Energized": {"pacing": 9, "intensity": 8, "emotional_depth": 4, "preferred_genres": [28, 12, 53], "avoid_genres": [18]},
    "Anxious": {"pacing": 2, "intensity": 1, "emotional_depth": 3, "preferred_genres": [35, 10751, 16], "avoid_genres": [27, 53, 80]},
    "Romantic": {"pacing": 5, "intensity": 5, "emotional_depth": 7, "preferred_genres": [10749, 35, 18], "avoid_genres": [27, 28]},
    "Inspired": {"pacing": 6, "intensity": 6, "emotional_depth": 7, "preferred_genres": [18, 36, 99], "avoid_genres": [27]},
    "Silly": {"pacing": 7, "intensity": 3, "emotional_depth": 2, "preferred_genres": [35, 16, 10751], "avoid_genres": [27, 18, 53]},
    "Dark": {"pacing": 6, "intensity": 9, "emotional_depth": 8, "preferred_genres": [27, 53, 80], "avoid_genres": [35, 10751]},
    "Overwhelmed": {"pacing": 3, "intensity": 1, "emotional_depth": 2, "preferred_genres": [16, 35, 10751], "avoid_genres": [27, 53, 80, 18]},
}


def coerce_genre_ids(values: Optional[Iterable[Any]]) -> Tuple[int, ...]:
    """Normalize a raw genre collection into a de-duplicated tuple of ints.

    Accepts None, lists of ints or numeric strings, or TMDB-style dicts
    ({"id": 28, "name": "Action"}). Entries that are not genre ids are dropped.
    """
    if not values:
        return ()
    seen: Dict[int, None] = {}
    for value in values:
        if isinstance(value, dict):
            value = value.get("id")
        if isinstance(value, bool) or value is None:
            continue
        try:
            genre_id = int(value)
        except (TypeError, ValueError):
            continue
        seen.setdefault(genre_id, None)
    return tuple(seen)


@dataclass(frozen=True)
class GenreAttributes:
    pacing: int
    intensity: int
    emotional_depth: int

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.pacing, self.intensity, self.emotional_depth)


NEUTRAL_GENRE_ATTRIBUTES = GenreAttributes(NEUTRAL_WEIGHT, NEUTRAL_WEIGHT, NEUTRAL_WEIGHT)


class GenreAttributeTable:
    """Read-only genre id -> GenreAttributes lookup.

    Unknown genre ids resolve to the neutral midpoint (5, 5, 5) instead of raising.
    """

    def __init__(self, attributes: Mapping[int, GenreAttributes]):
        self._attributes = MappingProxyType(dict(attributes))

    @classmethod
    def from_dimension_maps(cls, dimensions: Mapping[str, Mapping[int, int]]) -> "GenreAttributeTable":
        genre_ids = set()
        for weights in dimensions.values():
            genre_ids.update(weights)
        attributes = {
            genre_id: GenreAttributes(
                pacing=dimensions.get("pacing", {}).get(genre_id, NEUTRAL_WEIGHT),
                intensity=dimensions.get("intensity", {}).get(genre_id, NEUTRAL_WEIGHT),
                emotional_depth=dimensions.get("emotional_depth", {}).get(genre_id, NEUTRAL_WEIGHT),
            )
            for genre_id in genre_ids
        }
        return cls(attributes)

    def get(self, genre_id: int) -> GenreAttributes:
        return self._attributes.get(genre_id, NEUTRAL_GENRE_ATTRIBUTES)

    def __contains__(self, genre_id: object) -> bool:
        return genre_id in self._attributes

    def __len__(self) -> int:
        return len(self._attributes)


@dataclass(frozen=True)
class MoodProfile:
    name: str
    pacing: int
    intensity: int
    emotional_depth: int
    preferred_genres: FrozenSet[int] = frozenset()
    avoided_genres: FrozenSet[int] = frozenset()


class MoodProfileTable:
    """Read-only mood name -> MoodProfile lookup (case-insensitive on name)."""

    def __init__(self, profiles: Iterable[MoodProfile]):
        self._profiles = MappingProxyType({p.name.lower(): p for p in profiles})

    @classmethod
    def from_preferences(cls, preferences: Mapping[str, Mapping[str, Any]]) -> "MoodProfileTable":
        return cls(
            MoodProfile(
                name=name,
                pacing=int(prefs["pacing"]),
                intensity=int(prefs["intensity"]),
                emotional_depth=int(prefs["emotional_depth"]),
                preferred_genres=frozenset(coerce_genre_ids(prefs.get("preferred_genres"))),
                avoided_genres=frozenset(coerce_genre_ids(prefs.get("avoid_genres"))),
            )
            for name, prefs in preferences.items()
        )

    def get(self, mood_name: Optional[str]) -> Optional[MoodProfile]:
        if not mood_name:
            return None
        return self._profiles.get(mood_name.strip().lower())

    def __contains__(self, mood_name: object) -> bool:
        return isinstance(mood_name, str) and self.get(mood_name) is not None

    def __iter__(self) -> Iterator[MoodProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)


DEFAULT_GENRE_ATTRIBUTES = GenreAttributeTable.from_dimension_maps(GENRE_SCORES)
DEFAULT_MOOD_PROFILES = MoodProfileTable.from_preferences(MOOD_PREFERENCES)
