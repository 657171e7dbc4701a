"""
precompute.py

Offline batch jobs that fill the score tables the ranker reads from.

- ContentScoringJob: one ContentScore per active movie (pacing / intensity / emotional depth).
- AffinityPrecomputeJob: one affinity row per (active movie with a ContentScore, active mood).

Both jobs are full, idempotent recomputes: re-running overwrites rows in place
and produces the same values for unchanged inputs. Each row is written in its
own transaction; a failing row is logged and counted, never rolled back with
its neighbours.
"""
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional
import logging
import threading

from feelflick.services.affinity import AffinityScorer
from feelflick.services.content_scoring import ContentScorer, ContentScores
from feelflick.services.records import AffinityRow, MoodRecord, MovieRecord
from feelflick.services.reference_data import DEFAULT_MOOD_PROFILES, MoodProfile, MoodProfileTable
from feelflick.utils.timezone import utc_now

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8


@dataclass
class JobReport:
    """Counters returned by a batch run (also the Celery task result)."""
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    movies_considered: int = 0
    skipped_moods: List[str] = field(default_factory=list)
    cancelled: bool = False

    def as_dict(self) -> Dict:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "movies_considered": self.movies_considered,
            "skipped_moods": list(self.skipped_moods),
            "cancelled": self.cancelled,
        }


class ContentScoringJob:
    """Score every active movie and persist the result with a fresh timestamp."""

    def __init__(
        self,
        movie_catalog,
        content_store,
        scorer: Optional[ContentScorer] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.movie_catalog = movie_catalog
        self.content_store = content_store
        self.scorer = scorer or ContentScorer()
        self.clock = clock

    def run(self, stop_event: Optional[threading.Event] = None) -> JobReport:
        report = JobReport()
        movies = self.movie_catalog.list_active()
        report.movies_considered = len(movies)
        logger.info(f"Content scoring started for {len(movies)} movies")

        for i, movie in enumerate(movies, 1):
            if stop_event is not None and stop_event.is_set():
                report.cancelled = True
                logger.warning(f"Content scoring cancelled after {report.attempted} movies")
                break
            report.attempted += 1
            try:
                scores = self.scorer.score(movie.genre_ids, movie.runtime, movie.vote_average)
                self.content_store.upsert(movie.id, scores, scored_at=self.clock())
                report.succeeded += 1
            except Exception as e:
                report.failed += 1
                logger.error(f"Failed to score movie {movie.id} ({movie.title}): {e}")
            if i % 1000 == 0:
                logger.info(f"Content scoring progress: {i}/{len(movies)}")

        logger.info(
            f"Content scoring finished: {report.succeeded} scored, {report.failed} failed "
            f"of {report.attempted} attempted"
        )
        return report


class AffinityPrecomputeJob:
    """Compute mood affinities for the whole catalog.

    Work is fanned out per mood over a bounded thread pool. Counters are only
    touched on the submitting thread, from completed futures. Setting
    `stop_event` stops new submissions; rows already submitted still finish.
    """

    def __init__(
        self,
        mood_store,
        movie_catalog,
        content_store,
        affinity_store,
        scorer: Optional[AffinityScorer] = None,
        mood_profiles: MoodProfileTable = DEFAULT_MOOD_PROFILES,
        max_workers: int = DEFAULT_WORKERS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.mood_store = mood_store
        self.movie_catalog = movie_catalog
        self.content_store = content_store
        self.affinity_store = affinity_store
        self.scorer = scorer or AffinityScorer()
        self.mood_profiles = mood_profiles
        self.max_workers = max(1, int(max_workers))
        self.clock = clock

    def run(self, stop_event: Optional[threading.Event] = None) -> JobReport:
        report = JobReport()
        moods = self.mood_store.list_active()
        movies = self.movie_catalog.list_active()
        content_scores = self.content_store.load_all()

        scored_movies = [m for m in movies if m.id in content_scores]
        report.movies_considered = len(movies)
        unscored = len(movies) - len(scored_movies)
        if unscored:
            logger.info(f"{unscored} active movies have no content score yet and will be skipped")

        logger.info(f"Affinity precompute started: {len(moods)} moods x {len(scored_movies)} movies")

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="feelflick-precompute") as pool:
            for mood in moods:
                if stop_event is not None and stop_event.is_set():
                    report.cancelled = True
                    break

                profile = self.mood_profiles.get(mood.name)
                if profile is None:
                    logger.warning(f"Mood '{mood.name}' (id={mood.id}) has no scoring profile, skipping")
                    report.skipped_moods.append(mood.name)
                    continue

                report.skipped += unscored
                self._run_mood(pool, mood, profile, scored_movies, content_scores, report, stop_event)

        if report.cancelled:
            logger.warning(f"Affinity precompute cancelled after {report.attempted} rows")
        logger.info(
            f"Affinity precompute finished: {report.succeeded} upserted, {report.failed} failed, "
            f"{report.skipped} skipped of {report.attempted} attempted"
        )
        return report

    def _run_mood(
        self,
        pool: ThreadPoolExecutor,
        mood: MoodRecord,
        profile: MoodProfile,
        movies: List[MovieRecord],
        content_scores: Dict[int, ContentScores],
        report: JobReport,
        stop_event: Optional[threading.Event],
    ) -> None:
        futures = {}
        for movie in movies:
            if stop_event is not None and stop_event.is_set():
                report.cancelled = True
                break
            future = pool.submit(self._score_one, mood, profile, movie, content_scores[movie.id])
            futures[future] = movie
        report.attempted += len(futures)

        ok = 0
        for future in as_completed(futures):
            movie = futures[future]
            try:
                future.result()
                ok += 1
            except Exception as e:
                report.failed += 1
                logger.error(f"Failed to upsert affinity for movie {movie.id} / mood '{mood.name}': {e}")
        report.succeeded += ok
        logger.info(f"Mood '{mood.name}': {ok}/{len(futures)} affinities upserted")

    def _score_one(self, mood: MoodRecord, profile: MoodProfile, movie: MovieRecord, scores: ContentScores) -> None:
        result = self.scorer.score(scores, movie.genre_ids, profile, movie.vote_average, movie.popularity)
        self.affinity_store.upsert(
            AffinityRow(
                movie_id=movie.id,
                mood_id=mood.id,
                score=result.score,
                genre_match_score=result.genre_match_score,
                pacing_match_score=result.pacing_match_score,
                intensity_match_score=result.intensity_match_score,
                last_updated_at=self.clock(),
            )
        )
