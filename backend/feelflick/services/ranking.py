"""
ranking.py

Online re-ranking of precomputed mood affinities for a single request.

Pipeline:
1. Fetch affinity rows for the mood with score >= floor (30), best first, at most 100.
2. Adjust each candidate:
   - experience type: +10 per preferred genre, -20 per avoided genre (every genre counts)
   - viewing context: -10 when shorter runtimes are preferred and runtime > 120
   - quality nudge: (vote_average - 6.0) * 5
3. Drop candidates whose adjusted score fell below the floor.
4. Stable sort by adjusted score, descending; ties keep retrieval order.
5. Truncate to `limit` and round scores to one decimal.

The floor is only re-applied to candidates that passed retrieval. A movie
below the retrieval floor is never re-admitted, even if adjustments would lift
it over 30.
"""
from concurrent.futures import Executor, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Iterable, List, Optional
import logging
import threading

from feelflick.services.records import (
    AffinityCandidate,
    ExperienceTypeRecord,
    RankedMovie,
    ViewingContextRecord,
)
from feelflick.utils.numbers import round_half_away

logger = logging.getLogger(__name__)

FLOOR_SCORE = 30.0
RETRIEVAL_WINDOW = 100

PREFERRED_GENRE_BOOST = 10.0
AVOIDED_GENRE_PENALTY = 20.0
LONG_RUNTIME_MINUTES = 120
LONG_RUNTIME_PENALTY = 10.0
QUALITY_BASELINE = 6.0
QUALITY_NUDGE_PER_POINT = 5.0


class RecommendationValidationError(ValueError):
    """Raised for malformed requests (bad limit, unknown mood) before any scoring work."""
    pass


class UnknownMoodError(RecommendationValidationError):
    """The requested mood id does not exist."""
    pass


class CandidateRetrievalError(Exception):
    """Raised when candidate retrieval times out or storage is unavailable.

    Transient: the caller may retry. The ranker itself never retries.
    """
    retryable = True


_retrieval_executor: Optional[ThreadPoolExecutor] = None
_retrieval_executor_lock = threading.Lock()


def get_retrieval_executor(max_workers: int = 8) -> ThreadPoolExecutor:
    """Process-wide pool used to bound retrieval calls by a timeout."""
    global _retrieval_executor
    with _retrieval_executor_lock:
        if _retrieval_executor is None:
            _retrieval_executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="feelflick-retrieval")
        return _retrieval_executor


def experience_adjustment(genre_ids: Iterable[int], experience: ExperienceTypeRecord) -> float:
    adjustment = 0.0
    for genre_id in genre_ids:
        if genre_id in experience.preferred_genres:
            adjustment += PREFERRED_GENRE_BOOST
        if genre_id in experience.avoided_genres:
            adjustment -= AVOIDED_GENRE_PENALTY
    return adjustment


def context_adjustment(runtime: Optional[int], context: ViewingContextRecord) -> float:
    if context.prefer_shorter_runtime and runtime is not None and runtime > LONG_RUNTIME_MINUTES:
        return -LONG_RUNTIME_PENALTY
    return 0.0


def quality_nudge(vote_average: Optional[float]) -> float:
    if vote_average is None:
        return 0.0
    return (vote_average - QUALITY_BASELINE) * QUALITY_NUDGE_PER_POINT


class RecommendationRanker:
    """Turns a mood / viewing context / experience type selection into an ordered list.

    `affinity_source` needs fetch_candidates(mood_id, floor_score, window); the
    mood, experience type and viewing context lookups need get_by_id(id).
    Holds no per-request state; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        affinity_source,
        moods,
        experience_types=None,
        viewing_contexts=None,
        floor_score: float = FLOOR_SCORE,
        retrieval_window: int = RETRIEVAL_WINDOW,
        executor: Optional[Executor] = None,
    ):
        self.affinity_source = affinity_source
        self.moods = moods
        self.experience_types = experience_types
        self.viewing_contexts = viewing_contexts
        self.floor_score = floor_score
        self.retrieval_window = retrieval_window
        self._executor = executor

    def recommend(
        self,
        mood_id: int,
        viewing_context_id: Optional[int],
        experience_type_id: Optional[int],
        limit: int,
        timeout: Optional[float] = None,
    ) -> List[RankedMovie]:
        self._validate(mood_id, limit, timeout)

        candidates = self._fetch_candidates(mood_id, timeout)
        if not candidates:
            logger.info(f"No precomputed candidates for mood {mood_id}")
            return []

        experience = self._lookup(self.experience_types, experience_type_id, "experience type")
        context = self._lookup(self.viewing_contexts, viewing_context_id, "viewing context")

        ranked: List[RankedMovie] = []
        for candidate in candidates:
            movie = candidate.movie
            final_score = candidate.score
            if experience is not None:
                final_score += experience_adjustment(movie.genre_ids, experience)
            if context is not None:
                final_score += context_adjustment(movie.runtime, context)
            final_score += quality_nudge(movie.vote_average)

            if final_score < self.floor_score:
                continue
            ranked.append(RankedMovie(movie=movie, final_score=final_score))

        # sorted() is stable with reverse=True, so ties keep retrieval order
        ranked = sorted(ranked, key=lambda r: r.final_score, reverse=True)[:limit]
        logger.debug(
            f"Ranked mood={mood_id} context={viewing_context_id} experience={experience_type_id}: "
            f"{len(candidates)} candidates -> {len(ranked)} results"
        )
        return [RankedMovie(movie=r.movie, final_score=round_half_away(r.final_score, 1)) for r in ranked]

    def _validate(self, mood_id: int, limit: int, timeout: Optional[float]) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise RecommendationValidationError(f"limit must be an integer, got {limit!r}")
        if limit < 1:
            raise RecommendationValidationError(f"limit must be positive, got {limit}")
        if timeout is not None and timeout <= 0:
            raise RecommendationValidationError(f"timeout must be positive, got {timeout}")
        if isinstance(mood_id, bool) or not isinstance(mood_id, int):
            raise RecommendationValidationError(f"mood_id must be an integer, got {mood_id!r}")
        if self._bounded("Mood lookup", timeout, self.moods.get_by_id, mood_id) is None:
            raise UnknownMoodError(f"Unknown mood_id {mood_id}")

    def _fetch_candidates(self, mood_id: int, timeout: Optional[float]) -> List[AffinityCandidate]:
        return list(self._bounded(
            "Candidate retrieval", timeout,
            self.affinity_source.fetch_candidates, mood_id, self.floor_score, self.retrieval_window,
        ))

    def _bounded(self, label: str, timeout: Optional[float], fn, *args):
        """Run a storage call within `timeout`; every failure surfaces as CandidateRetrievalError."""
        try:
            if timeout is None:
                return fn(*args)
            executor = self._executor or get_retrieval_executor()
            future = executor.submit(fn, *args)
            try:
                return future.result(timeout=timeout)
            except FuturesTimeoutError as e:
                if not future.cancel():
                    logger.warning(f"{label} still running after {timeout}s; its worker stays busy until the query returns")
                raise CandidateRetrievalError(f"{label} timed out after {timeout}s") from e
        except CandidateRetrievalError:
            raise
        except Exception as e:
            logger.error(f"{label} failed: {e}")
            raise CandidateRetrievalError(f"{label} failed: {e}") from e

    @staticmethod
    def _lookup(store, record_id: Optional[int], label: str):
        """Missing or failing lookups mean "no adjustment", never a failed request."""
        if record_id is None or store is None:
            return None
        try:
            record = store.get_by_id(record_id)
        except Exception as e:
            logger.warning(f"Skipping {label} adjustment: lookup of {record_id} failed: {e}")
            return None
        if record is None:
            logger.warning(f"Skipping {label} adjustment: {label} {record_id} not found")
        return record
