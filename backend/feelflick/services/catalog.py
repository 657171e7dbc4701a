"""
catalog.py

SQLAlchemy-backed stores the scoring engine reads from and writes to.

Every method opens its own short-lived session from the injected session
factory, so one store instance can be shared by the precompute worker threads
(each row upsert runs in its own transaction).
"""
from typing import Callable, Dict, List, Optional
import json
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from feelflick import models
from feelflick.core.database import SessionLocal
from feelflick.services.content_scoring import ContentScores
from feelflick.services.ranking import CandidateRetrievalError
from feelflick.services.records import (
    AffinityCandidate,
    AffinityRow,
    ExperienceTypeRecord,
    MoodRecord,
    MovieRecord,
    ViewingContextRecord,
)
from feelflick.services.reference_data import coerce_genre_ids
from feelflick.utils.timezone import ensure_utc, utc_now

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def _load_genre_ids(raw) -> tuple:
    """Parse a JSON genre column; malformed values count as no genres."""
    if not raw:
        return ()
    try:
        parsed = json.loads(raw) if isinstance(raw, str) else raw
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Ignoring malformed genre list: {raw!r}")
        return ()
    if not isinstance(parsed, list):
        return ()
    return coerce_genre_ids(parsed)


def movie_record(row: models.Movie) -> MovieRecord:
    return MovieRecord(
        id=row.id,
        title=row.title,
        genre_ids=_load_genre_ids(row.genres),
        runtime=row.runtime,
        vote_average=row.vote_average,
        popularity=row.popularity,
        poster_path=row.poster_path,
        release_date=row.release_date,
    )


class _Store:
    def __init__(self, session_factory: Optional[SessionFactory] = None):
        self.session_factory = session_factory or SessionLocal


class MovieCatalog(_Store):
    def get_by_id(self, movie_id: int) -> Optional[MovieRecord]:
        db = self.session_factory()
        try:
            row = db.get(models.Movie, movie_id)
            return movie_record(row) if row else None
        finally:
            db.close()

    def list_active(self) -> List[MovieRecord]:
        db = self.session_factory()
        try:
            rows = db.query(models.Movie).filter(models.Movie.active.is_(True)).order_by(models.Movie.id).all()
            return [movie_record(r) for r in rows]
        finally:
            db.close()


class ContentScoreStore(_Store):
    def load_all(self) -> Dict[int, ContentScores]:
        db = self.session_factory()
        try:
            rows = db.query(models.ContentScore).all()
            return {
                r.movie_id: ContentScores(r.pacing_score, r.intensity_score, r.emotional_depth_score)
                for r in rows
            }
        finally:
            db.close()

    def get(self, movie_id: int) -> Optional[ContentScores]:
        db = self.session_factory()
        try:
            row = db.get(models.ContentScore, movie_id)
            if not row:
                return None
            return ContentScores(row.pacing_score, row.intensity_score, row.emotional_depth_score)
        finally:
            db.close()

    def upsert(self, movie_id: int, scores: ContentScores, scored_at=None) -> None:
        db = self.session_factory()
        try:
            row = db.get(models.ContentScore, movie_id)
            if row is None:
                row = models.ContentScore(movie_id=movie_id)
                db.add(row)
            row.pacing_score = scores.pacing
            row.intensity_score = scores.intensity
            row.emotional_depth_score = scores.emotional_depth
            row.last_scored_at = scored_at or utc_now()
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class AffinityStore(_Store):
    def upsert(self, row: AffinityRow) -> None:
        db = self.session_factory()
        try:
            existing = (
                db.query(models.MovieMoodScore)
                .filter(
                    models.MovieMoodScore.movie_id == row.movie_id,
                    models.MovieMoodScore.mood_id == row.mood_id,
                )
                .one_or_none()
            )
            if existing is None:
                existing = models.MovieMoodScore(movie_id=row.movie_id, mood_id=row.mood_id)
                db.add(existing)
            existing.score = row.score
            existing.genre_match_score = row.genre_match_score
            existing.pacing_match_score = row.pacing_match_score
            existing.intensity_match_score = row.intensity_match_score
            existing.last_updated_at = row.last_updated_at or utc_now()
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def get(self, movie_id: int, mood_id: int) -> Optional[AffinityRow]:
        db = self.session_factory()
        try:
            r = (
                db.query(models.MovieMoodScore)
                .filter(models.MovieMoodScore.movie_id == movie_id, models.MovieMoodScore.mood_id == mood_id)
                .one_or_none()
            )
            if r is None:
                return None
            return AffinityRow(
                movie_id=r.movie_id,
                mood_id=r.mood_id,
                score=r.score,
                genre_match_score=r.genre_match_score,
                pacing_match_score=r.pacing_match_score,
                intensity_match_score=r.intensity_match_score,
                last_updated_at=ensure_utc(r.last_updated_at),
            )
        finally:
            db.close()

    def count(self, mood_id: Optional[int] = None) -> int:
        db = self.session_factory()
        try:
            q = db.query(models.MovieMoodScore)
            if mood_id is not None:
                q = q.filter(models.MovieMoodScore.mood_id == mood_id)
            return q.count()
        finally:
            db.close()

    def fetch_candidates(self, mood_id: int, floor_score: float, window: int) -> List[AffinityCandidate]:
        """Rows for a mood at or above the floor, best first, capped at `window`.

        Storage errors surface as CandidateRetrievalError so callers can retry.
        """
        db = self.session_factory()
        try:
            rows = (
                db.query(models.MovieMoodScore.score, models.Movie)
                .join(models.Movie, models.Movie.id == models.MovieMoodScore.movie_id)
                .filter(
                    models.MovieMoodScore.mood_id == mood_id,
                    models.MovieMoodScore.score >= floor_score,
                )
                .order_by(models.MovieMoodScore.score.desc(), models.MovieMoodScore.movie_id.asc())
                .limit(window)
                .all()
            )
            return [AffinityCandidate(movie=movie_record(movie), score=float(score)) for score, movie in rows]
        except SQLAlchemyError as e:
            logger.error(f"Candidate retrieval failed for mood {mood_id}: {e}")
            raise CandidateRetrievalError(f"Candidate retrieval failed for mood {mood_id}") from e
        finally:
            db.close()


def _mood_record(row: models.Mood) -> MoodRecord:
    return MoodRecord(
        id=row.id,
        name=row.name,
        description=row.description,
        emoji=row.emoji,
        category=row.category,
        display_order=row.display_order or 0,
        active=bool(row.active),
    )


class MoodStore(_Store):
    def get_by_id(self, mood_id: int) -> Optional[MoodRecord]:
        db = self.session_factory()
        try:
            row = db.get(models.Mood, mood_id)
            return _mood_record(row) if row else None
        except SQLAlchemyError as e:
            logger.error(f"Mood lookup failed for {mood_id}: {e}")
            raise CandidateRetrievalError(f"Mood lookup failed for {mood_id}") from e
        finally:
            db.close()

    def list_active(self) -> List[MoodRecord]:
        db = self.session_factory()
        try:
            rows = (
                db.query(models.Mood)
                .filter(models.Mood.active.is_(True))
                .order_by(models.Mood.display_order, models.Mood.id)
                .all()
            )
            return [_mood_record(r) for r in rows]
        finally:
            db.close()


def _experience_record(row: models.ExperienceType) -> ExperienceTypeRecord:
    return ExperienceTypeRecord(
        id=row.id,
        name=row.name,
        preferred_genres=frozenset(_load_genre_ids(row.preferred_genres)),
        avoided_genres=frozenset(_load_genre_ids(row.avoid_genres)),
        description=row.description,
        display_order=row.display_order or 0,
    )


class ExperienceTypeStore(_Store):
    def get_by_id(self, experience_type_id: int) -> Optional[ExperienceTypeRecord]:
        db = self.session_factory()
        try:
            row = db.get(models.ExperienceType, experience_type_id)
            return _experience_record(row) if row else None
        finally:
            db.close()

    def list_active(self) -> List[ExperienceTypeRecord]:
        db = self.session_factory()
        try:
            rows = (
                db.query(models.ExperienceType)
                .filter(models.ExperienceType.active.is_(True))
                .order_by(models.ExperienceType.display_order, models.ExperienceType.id)
                .all()
            )
            return [_experience_record(r) for r in rows]
        finally:
            db.close()


def _context_record(row: models.ViewingContext) -> ViewingContextRecord:
    return ViewingContextRecord(
        id=row.id,
        name=row.name,
        prefer_shorter_runtime=bool(row.prefer_shorter_runtime),
        content_rating_filter=row.content_rating_filter,
        description=row.description,
        icon=row.icon,
        display_order=row.display_order or 0,
    )


class ViewingContextStore(_Store):
    def get_by_id(self, viewing_context_id: int) -> Optional[ViewingContextRecord]:
        db = self.session_factory()
        try:
            row = db.get(models.ViewingContext, viewing_context_id)
            return _context_record(row) if row else None
        finally:
            db.close()

    def list_active(self) -> List[ViewingContextRecord]:
        db = self.session_factory()
        try:
            rows = (
                db.query(models.ViewingContext)
                .filter(models.ViewingContext.active.is_(True))
                .order_by(models.ViewingContext.display_order, models.ViewingContext.id)
                .all()
            )
            return [_context_record(r) for r in rows]
        finally:
            db.close()
