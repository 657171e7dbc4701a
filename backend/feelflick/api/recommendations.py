from fastapi import APIRouter, Depends, Query, HTTPException
from typing import Optional, List
import logging

from feelflick.core.config import settings
from feelflick.core.database import get_session_factory
from feelflick.schemas import (
    ExperienceTypeOption,
    MoodOption,
    RecommendationOptions,
    RecommendationOut,
    ViewingContextOption,
)
from feelflick.services.catalog import AffinityStore, ExperienceTypeStore, MoodStore, ViewingContextStore
from feelflick.services.ranking import (
    CandidateRetrievalError,
    RecommendationRanker,
    RecommendationValidationError,
    UnknownMoodError,
    get_retrieval_executor,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_ranker(session_factory=Depends(get_session_factory)) -> RecommendationRanker:
    return RecommendationRanker(
        affinity_source=AffinityStore(session_factory),
        moods=MoodStore(session_factory),
        experience_types=ExperienceTypeStore(session_factory),
        viewing_contexts=ViewingContextStore(session_factory),
        floor_score=settings.affinity_floor_score,
        retrieval_window=settings.retrieval_window,
        executor=get_retrieval_executor(settings.retrieval_workers),
    )


@router.get("", response_model=List[RecommendationOut])
def recommend(
    mood_id: int = Query(..., description="Selected mood"),
    viewing_context_id: Optional[int] = Query(None, description="Who is watching"),
    experience_type_id: Optional[int] = Query(None, description="What the viewer wants out of it"),
    limit: int = Query(settings.default_recommendation_limit, ge=1),
    ranker: RecommendationRanker = Depends(get_ranker),
):
    """
    Rank precomputed mood affinities for a mood / viewing context / experience type selection.
    """
    try:
        ranked = ranker.recommend(
            mood_id=mood_id,
            viewing_context_id=viewing_context_id,
            experience_type_id=experience_type_id,
            limit=limit,
            timeout=settings.retrieval_timeout_seconds,
        )
    except UnknownMoodError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RecommendationValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CandidateRetrievalError as e:
        logger.warning(f"Recommendations unavailable for mood {mood_id}: {e}")
        raise HTTPException(status_code=503, detail="Recommendations temporarily unavailable, please retry")
    return [r.as_dict() for r in ranked]


@router.get("/options", response_model=RecommendationOptions)
def recommendation_options(session_factory=Depends(get_session_factory)):
    """Active moods, viewing contexts and experience types, in display order."""
    return RecommendationOptions(
        moods=[MoodOption.model_validate(m) for m in MoodStore(session_factory).list_active()],
        viewing_contexts=[ViewingContextOption.model_validate(c) for c in ViewingContextStore(session_factory).list_active()],
        experience_types=[ExperienceTypeOption.model_validate(e) for e in ExperienceTypeStore(session_factory).list_active()],
    )
