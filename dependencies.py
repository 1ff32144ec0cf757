# dependencies.py

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

import config
from cache import RecommendationCache
from db import get_session
from ml_engine import MLEngine
from repository import VideoRepository
from services import RecommendationService

# Holds no per-request state, so one instance serves every request
ml_engine = MLEngine()


def get_repo(db_session: Session = Depends(get_session)) -> VideoRepository:
    return VideoRepository(db=db_session)


def get_recommendation_cache(request: Request) -> Optional[RecommendationCache]:
    return getattr(request.app.state, "recommendation_cache", None)


def get_recommendation_service(
    repo: VideoRepository = Depends(get_repo),
    cache: Optional[RecommendationCache] = Depends(get_recommendation_cache),
) -> RecommendationService:
    return RecommendationService(
        repo=repo,
        engine=ml_engine,
        cache=cache,
        video_limit=config.RECOMMENDED_VIDEOS_LIMIT,
        shorts_limit=config.RECOMMENDED_SHORTS_LIMIT,
    )
