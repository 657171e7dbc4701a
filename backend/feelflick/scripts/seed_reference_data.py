"""
Seed the reference tables the scoring engine reads: genres, moods, viewing
contexts and experience types.

Rows are upserted by name (genres by TMDB id), so the script can be re-run
after editing the data below. Mood scoring targets are not stored here; they
live in feelflick.services.reference_data and are matched by mood name.

Usage:
    python -m feelflick.scripts.seed_reference_data
"""
import json
import logging

from feelflick.core.database import SessionLocal, init_db
from feelflick import models

logger = logging.getLogger(__name__)

GENRES = [
    (28, "Action"), (12, "Adventure"), (16, "Animation"), (35, "Comedy"), (80, "Crime"),
    (99, "Documentary"), (18, "Drama"), (10751, "Family"), (14, "Fantasy"), (36, "History"),
    (27, "Horror"), (10402, "Music"), (9648, "Mystery"), (10749, "Romance"),
    (878, "Science Fiction"), (10770, "TV Movie"), (53, "Thriller"), (10752, "War"), (37, "Western"),
]

MOODS = [
    {"name": "Cozy", "description": "Warm, comforting, gentle entertainment", "emoji": "☕", "category": "calm"},
    {"name": "Adventurous", "description": "Exciting, bold, thrilling experiences", "emoji": "🗺️", "category": "energetic"},
    {"name": "Heartbroken", "description": "Emotionally raw, cathartic stories", "emoji": "💔", "category": "emotional"},
    {"name": "Curious", "description": "Thought-provoking, mind-expanding content", "emoji": "🔍", "category": "intellectual"},
    {"name": "Nostalgic", "description": "Classic, familiar, comforting favorites", "emoji": "🎞️", "category": "reflective"},
    {"name": "Energized", "description": "Fast-paced, high-energy entertainment", "emoji": "⚡", "category": "energetic"},
    {"name": "Anxious", "description": "Need something calming and predictable", "emoji": "😰", "category": "calm"},
    {"name": "Romantic", "description": "Love stories and heartfelt connections", "emoji": "💕", "category": "emotional"},
    {"name": "Inspired", "description": "Uplifting, motivational stories", "emoji": "✨", "category": "uplifting"},
    {"name": "Silly", "description": "Light, funny, don't-think-too-hard fun", "emoji": "🤪", "category": "lighthearted"},
    {"name": "Dark", "description": "Gritty, intense, edge-of-your-seat tension", "emoji": "🌑", "category": "intense"},
    {"name": "Overwhelmed", "description": "Need complete escape and zone-out time", "emoji": "😵", "category": "calm"},
]

VIEWING_CONTEXTS = [
    {"name": "Alone", "description": "Watching by yourself", "icon": "🧘", "prefer_shorter_runtime": False, "content_rating_filter": None},
    {"name": "Partner", "description": "Watching with your significant other", "icon": "💑", "prefer_shorter_runtime": False, "content_rating_filter": None},
    {"name": "Friends", "description": "Watching with friends", "icon": "👥", "prefer_shorter_runtime": False, "content_rating_filter": None},
    {"name": "Family", "description": "Watching with family members", "icon": "👨‍👩‍👧‍👦", "prefer_shorter_runtime": True, "content_rating_filter": "PG-13"},
    {"name": "Kids", "description": "Watching with young children", "icon": "👶", "prefer_shorter_runtime": True, "content_rating_filter": "G,PG"},
]

EXPERIENCE_TYPES = [
    {"name": "Escape", "description": "Get lost in another world", "preferred_genres": [14, 878, 12, 16], "avoid_genres": [99, 36]},
    {"name": "Laugh", "description": "Just want to laugh and feel good", "preferred_genres": [35, 10751], "avoid_genres": [27, 53, 18]},
    {"name": "Cry", "description": "Need a good emotional release", "preferred_genres": [18, 10749], "avoid_genres": [35, 28]},
    {"name": "Think", "description": "Want something intellectually stimulating", "preferred_genres": [9648, 878, 99, 80], "avoid_genres": [28, 12]},
    {"name": "Zone Out", "description": "Don't want to think at all", "preferred_genres": [28, 12, 16], "avoid_genres": [9648, 99]},
]


def _upsert_by_name(db, model, rows):
    for order, data in enumerate(rows, 1):
        row = db.query(model).filter(model.name == data["name"]).one_or_none()
        if row is None:
            row = model(name=data["name"])
            db.add(row)
        for key, value in data.items():
            if key in ("preferred_genres", "avoid_genres"):
                value = json.dumps(value)
            setattr(row, key, value)
        row.active = True
        row.display_order = order
    db.flush()


def seed_reference_data(session_factory=None) -> dict:
    """Upsert all reference rows in one transaction. Returns row counts per table."""
    db = (session_factory or SessionLocal)()
    try:
        for genre_id, name in GENRES:
            genre = db.get(models.Genre, genre_id)
            if genre is None:
                db.add(models.Genre(id=genre_id, name=name))
            else:
                genre.name = name
        _upsert_by_name(db, models.Mood, MOODS)
        _upsert_by_name(db, models.ViewingContext, VIEWING_CONTEXTS)
        _upsert_by_name(db, models.ExperienceType, EXPERIENCE_TYPES)
        db.commit()
        counts = {
            "genres": db.query(models.Genre).count(),
            "moods": db.query(models.Mood).count(),
            "viewing_contexts": db.query(models.ViewingContext).count(),
            "experience_types": db.query(models.ExperienceType).count(),
        }
        logger.info(f"Reference data seeded: {counts}")
        return counts
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    import feelflick.utils.logger  # noqa: F401

    init_db()
    counts = seed_reference_data()
    for table, n in counts.items():
        print(f"{table}: {n}")
