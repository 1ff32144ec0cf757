# main.py

# --- Standard Library Imports ---
import logging
from typing import List, Optional

# --- Third-Party Imports ---
from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

# --- Local Application Imports ---
import config
from cache import RecommendationCache
from db import SessionLocal
from services import RecommendationService
from repository import VideoRepository
from api_models import RecommendedFeedResponse, VideoCard, WatchHistoryRequest, WatchHistoryResponse
from dependencies import get_recommendation_cache, get_recommendation_service, get_repo

# ==============================================================================
# --- Initial Application Setup ---
# ==============================================================================

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ==============================================================================
# --- FastAPI App Initialization ---
# ==============================================================================

app = FastAPI(
    title="Video Recommendation API",
    description="Content-based video recommendations with a popularity fallback for new viewers.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# ==============================================================================
# --- Service Connections ---
# ==============================================================================

app.state.recommendation_cache = RecommendationCache.from_url(
    config.REDIS_URL, ttl_seconds=config.REDIS_TTL_SECONDS)

# ==============================================================================
# --- FastAPI Application Events ---
# ==============================================================================


@app.on_event("startup")
def on_startup() -> None:
    """Verify the database connection on application startup."""
    logger.info("Application starting up...")
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
        logger.info("Connection to the database established successfully.")
    except Exception as e:
        logger.critical(f"FATAL: Could not connect to the database: {e}")
        raise RuntimeError(f"Database connection failed: {e}") from e
    logger.info("Application startup complete.")

# ==============================================================================
# --- Background Tasks ---
# ==============================================================================


def invalidate_user_recommendations(cache: Optional[RecommendationCache], user_id: str):
    """
    Background task that frees a user's cached recommendations after their
    watch history changed. Those entries are already unreachable because keys
    carry the history version. This runs after the HTTP response is sent.
    """
    if not cache:
        return
    removed = cache.invalidate_user(user_id)
    logger.info("Invalidated %s cached recommendation lists for user %s.", removed, user_id)

# ==============================================================================
# --- API Endpoints ---
# ==============================================================================


@app.get("/", tags=["Health"])
async def read_root():
    return {"message": "Video Recommendation API is running."}


@app.get("/videos/recommended", response_model=RecommendedFeedResponse, tags=["Recommendations"])
def get_recommended_videos(
    user_id: str = Query(..., max_length=255, min_length=1),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """Returns recommended long-form videos and shorts for the user.

    Ranking failures degrade to the trending feed; only a failure to load
    that fallback is reported as an error.
    """
    try:
        feed = service.get_recommended_feed(user_id)
        return RecommendedFeedResponse(
            videos=[VideoCard.model_validate(v) for v in feed["videos"]],
            shorts=[VideoCard.model_validate(v) for v in feed["shorts"]],
        )
    except Exception as e:
        logger.exception(f"Error building recommended feed for user {user_id}: {e}")
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "An internal server error occurred.")


@app.post("/videos/history", response_model=WatchHistoryResponse, tags=["User Data"])
def add_to_history(
    request: WatchHistoryRequest,
    background_tasks: BackgroundTasks,
    repo: VideoRepository = Depends(get_repo),
    cache: Optional[RecommendationCache] = Depends(get_recommendation_cache),
):
    if not repo.get_active_video(request.video_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Video not found.")

    try:
        user = repo.get_or_create_user(request.user_id)
        removed = repo.add_to_history(
            user, request.video_id, progress=request.progress, duration=request.duration)
    except Exception as e:
        logger.exception(f"Error updating watch history for user {request.user_id}: {e}")
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update watch history.")

    background_tasks.add_task(invalidate_user_recommendations, cache, request.user_id)
    return WatchHistoryResponse(success=True, removed=removed)


@app.get("/videos/history", response_model=List[VideoCard], tags=["User Data"])
def get_watch_history(
    user_id: str = Query(..., max_length=255, min_length=1),
    repo: VideoRepository = Depends(get_repo),
):
    """Returns the user's watched videos, most recent first."""
    try:
        return [VideoCard.model_validate(v) for v in repo.get_watch_history(user_id)]
    except Exception as e:
        logger.exception(f"Error fetching watch history for user {user_id}: {e}")
        raise HTTPException(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve watch history."
        )


@app.get("/health", status_code=status.HTTP_200_OK, tags=["Health"])
async def health_check():
    """A simple endpoint to confirm the service is running."""
    return {"status": "healthy"}
