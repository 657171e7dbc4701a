"""
maintenance.py

API endpoints that queue the offline scoring jobs.
"""
from fastapi import APIRouter, HTTPException
import logging

from feelflick.core.celery_app import celery_app  # noqa: F401  binds shared tasks to the Redis broker
from feelflick.schemas import MaintenanceResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/content-scores", response_model=MaintenanceResponse)
def trigger_content_scores():
    """Queue a full recompute of pacing / intensity / emotional depth scores."""
    try:
        from feelflick.services.tasks import calculate_content_scores
        task = calculate_content_scores.delay()
        return MaintenanceResponse(
            status="queued",
            message="Content score recompute queued.",
            task_id=task.id
        )
    except Exception as e:
        logger.exception(f"Failed to queue content scoring: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/mood-scores", response_model=MaintenanceResponse)
def trigger_mood_scores():
    """Queue a full recompute of movie/mood affinities from the stored content scores."""
    try:
        from feelflick.services.tasks import precompute_mood_scores
        task = precompute_mood_scores.delay()
        return MaintenanceResponse(
            status="queued",
            message="Mood affinity precompute queued. This may take several minutes.",
            task_id=task.id
        )
    except Exception as e:
        logger.exception(f"Failed to queue mood score precompute: {e}")
        raise HTTPException(status_code=500, detail=str(e))
