"""
models.py

SQLAlchemy models for the movie catalog, derived content scores, mood/movie
affinities and the reference tables (genres, moods, viewing contexts,
experience types).
"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Float, Text, UniqueConstraint, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from feelflick.utils.timezone import utc_now

Base = declarative_base()


class Genre(Base):
    __tablename__ = "genres"
    id = Column(Integer, primary_key=True, autoincrement=False)  # TMDB genre id
    name = Column(String, nullable=False, unique=True)


class Movie(Base):
    """Catalog entry. Written by the ingestion pipeline, read-only to the scoring engine."""
    __tablename__ = "movies"
    id = Column(Integer, primary_key=True, autoincrement=False)  # TMDB movie id
    title = Column(String, nullable=False, index=True)
    genres = Column(Text)  # JSON array of TMDB genre ids
    runtime = Column(Integer, nullable=True)
    vote_average = Column(Float, nullable=True)
    vote_count = Column(Integer, nullable=True)
    popularity = Column(Float, nullable=True, index=True)
    poster_path = Column(String, nullable=True)
    release_date = Column(String, nullable=True)  # raw YYYY-MM-DD from TMDB
    active = Column(Boolean, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    content_score = relationship("ContentScore", back_populates="movie", uselist=False, cascade="all, delete-orphan")
    mood_scores = relationship("MovieMoodScore", back_populates="movie", cascade="all, delete-orphan")


class ContentScore(Base):
    """Derived pacing/intensity/emotional depth (1-10). One row per movie, overwritten in place."""
    __tablename__ = "movie_content_scores"
    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True)
    pacing_score = Column(Integer, nullable=False)
    intensity_score = Column(Integer, nullable=False)
    emotional_depth_score = Column(Integer, nullable=False)
    last_scored_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    movie = relationship("Movie", back_populates="content_score")


class Mood(Base):
    """Selectable mood. Its scoring profile is static configuration keyed by name."""
    __tablename__ = "moods"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=True)
    emoji = Column(String, nullable=True)
    category = Column(String, nullable=True)
    active = Column(Boolean, default=True, index=True)
    display_order = Column(Integer, default=0)


class MovieMoodScore(Base):
    """Precomputed affinity between one movie and one mood (0-100)."""
    __tablename__ = "movie_mood_scores"
    id = Column(Integer, primary_key=True)
    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="CASCADE"), nullable=False)
    mood_id = Column(Integer, ForeignKey("moods.id", ondelete="CASCADE"), nullable=False)
    score = Column(Float, nullable=False)
    genre_match_score = Column(Float, nullable=False)
    pacing_match_score = Column(Float, nullable=False)
    intensity_match_score = Column(Float, nullable=False)
    last_updated_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    movie = relationship("Movie", back_populates="mood_scores")

    __table_args__ = (
        UniqueConstraint("movie_id", "mood_id", name="uq_movie_mood_scores_movie_mood"),
        Index("ix_movie_mood_scores_mood_score", "mood_id", "score"),
    )


class ExperienceType(Base):
    __tablename__ = "experience_types"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=True)
    preferred_genres = Column(Text)  # JSON array of TMDB genre ids
    avoid_genres = Column(Text)  # JSON array of TMDB genre ids
    active = Column(Boolean, default=True, index=True)
    display_order = Column(Integer, default=0)


class ViewingContext(Base):
    __tablename__ = "viewing_contexts"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    prefer_shorter_runtime = Column(Boolean, default=False, nullable=False)
    content_rating_filter = Column(String, nullable=True)  # e.g. "G,PG"; not applied by the ranker
    active = Column(Boolean, default=True, index=True)
    display_order = Column(Integer, default=0)
