"""
schemas.py

Pydantic response schemas for recommendations, selection options and maintenance triggers.
"""
from pydantic import BaseModel
from typing import Optional, List


class RecommendationOut(BaseModel):
    movie_id: int
    title: str
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    runtime: Optional[int] = None
    vote_average: Optional[float] = None
    popularity: Optional[float] = None
    final_score: float


class MoodOption(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    emoji: Optional[str] = None
    category: Optional[str] = None
    display_order: int = 0
    class Config:
        from_attributes = True


class ViewingContextOption(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    prefer_shorter_runtime: bool = False
    display_order: int = 0
    class Config:
        from_attributes = True


class ExperienceTypeOption(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    display_order: int = 0
    class Config:
        from_attributes = True


class RecommendationOptions(BaseModel):
    moods: List[MoodOption]
    viewing_contexts: List[ViewingContextOption]
    experience_types: List[ExperienceTypeOption]


class MaintenanceResponse(BaseModel):
    status: str
    message: str
    task_id: Optional[str] = None
