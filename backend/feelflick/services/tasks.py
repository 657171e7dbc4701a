"""
tasks.py

Celery tasks wrapping the offline scoring jobs.

Each job runs under a Redis lock so a manual trigger and the nightly beat
cannot recompute the same table at the same time; the second caller returns
a "skipped" result instead of queueing behind the first.
"""
import logging
import threading
import uuid

from celery import shared_task

from feelflick.core.config import settings
from feelflick.core.redis_client import get_redis_sync
from feelflick.services.catalog import AffinityStore, ContentScoreStore, MoodStore, MovieCatalog
from feelflick.services.precompute import AffinityPrecomputeJob, ContentScoringJob

logger = logging.getLogger(__name__)

CONTENT_SCORES_LOCK = "lock:feelflick:content-scores"
MOOD_SCORES_LOCK = "lock:feelflick:mood-scores"

# Compare-and-delete so a lock that expired and was re-taken is not released by the old holder
_RELEASE_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
end
return 0
"""


class JobLockBusy(Exception):
    """Raised when another worker already holds the job lock."""
    pass


class JobLock:
    """Redis-based lock for batch jobs (SET NX EX with a per-holder token)."""

    def __init__(self, key: str, ttl: int = None, redis_client=None):
        self.key = key
        self.ttl = int(ttl or settings.job_lock_ttl_seconds)
        self.redis = redis_client or get_redis_sync()
        self.token = uuid.uuid4().hex

    def acquire(self) -> bool:
        acquired = self.redis.set(self.key, self.token, ex=self.ttl, nx=True)
        if not acquired:
            logger.info(f"Lock already held: {self.key}")
        return bool(acquired)

    def release(self):
        self.redis.eval(_RELEASE_SCRIPT, 1, self.key, self.token)

    def __enter__(self):
        if not self.acquire():
            raise JobLockBusy(f"Could not acquire lock: {self.key}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


def build_content_scoring_job(session_factory=None) -> ContentScoringJob:
    return ContentScoringJob(MovieCatalog(session_factory), ContentScoreStore(session_factory))


def build_affinity_job(session_factory=None, max_workers: int = None) -> AffinityPrecomputeJob:
    return AffinityPrecomputeJob(
        mood_store=MoodStore(session_factory),
        movie_catalog=MovieCatalog(session_factory),
        content_store=ContentScoreStore(session_factory),
        affinity_store=AffinityStore(session_factory),
        max_workers=max_workers or settings.precompute_workers,
    )


def _run_locked(lock_key: str, job, label: str) -> dict:
    try:
        with JobLock(lock_key):
            report = job.run(stop_event=threading.Event())
    except JobLockBusy:
        logger.info(f"{label} already running, skipping this trigger")
        return {"status": "skipped", "reason": "already_running"}
    result = report.as_dict()
    result["status"] = "cancelled" if report.cancelled else "completed"
    return result


@shared_task(bind=True, max_retries=2, default_retry_delay=60, name="feelflick.services.tasks.calculate_content_scores")
def calculate_content_scores(self) -> dict:
    """Recompute pacing / intensity / emotional depth for every active movie."""
    try:
        return _run_locked(CONTENT_SCORES_LOCK, build_content_scoring_job(), "Content scoring")
    except Exception as e:
        logger.error(f"Content scoring task failed: {e}")
        raise self.retry(exc=e)


@shared_task(bind=True, max_retries=2, default_retry_delay=60, name="feelflick.services.tasks.precompute_mood_scores")
def precompute_mood_scores(self) -> dict:
    """Recompute every (movie, mood) affinity from the stored content scores."""
    try:
        return _run_locked(MOOD_SCORES_LOCK, build_affinity_job(), "Affinity precompute")
    except Exception as e:
        logger.error(f"Affinity precompute task failed: {e}")
        raise self.retry(exc=e)


@shared_task(bind=True, name="feelflick.services.tasks.run_nightly_scoring")
def run_nightly_scoring(self) -> dict:
    """Nightly pipeline: content scores first, then mood affinities built from them."""
    logger.info("Starting nightly scoring")
    content = _run_locked(CONTENT_SCORES_LOCK, build_content_scoring_job(), "Content scoring")
    moods = _run_locked(MOOD_SCORES_LOCK, build_affinity_job(), "Affinity precompute")
    logger.info(f"Nightly scoring done: content={content.get('status')} moods={moods.get('status')}")
    return {"content_scores": content, "mood_scores": moods}
