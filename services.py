# services.py

import logging
from typing import Any, Dict, List, Optional

from cache import RecommendationCache
from db import Video
from ml_engine import MLEngine
from repository import VideoRepository
from utils.metrics import track_latency

logger = logging.getLogger(__name__)


def _bucket_name(is_short: Optional[bool]) -> str:
    if is_short is None:
        return "all"
    return "shorts" if is_short else "videos"


class RecommendationService:
    def __init__(
        self,
        repo: VideoRepository,
        engine: MLEngine,
        cache: Optional[RecommendationCache] = None,
        video_limit: int = 20,
        shorts_limit: int = 10,
    ):
        self.repo = repo
        self.engine = engine
        self.cache = cache
        self.video_limit = video_limit
        self.shorts_limit = shorts_limit

    def recommend(self, user_id: str, limit: int = 20, is_short: Optional[bool] = None) -> List[Any]:
        """
        Returns ranked ids of videos the user has not watched yet.

        Recommendations are best-effort: any failure while fetching data or
        ranking is logged and turned into an empty list.
        """
        bucket = _bucket_name(is_short)
        try:
            cache_key = None
            if self.cache:
                # Versions are read before the data, so a result computed from
                # an older snapshot can only land under an older key
                cache_key = self.cache.make_key(
                    user_id, bucket, limit,
                    self.repo.get_catalog_version(),
                    self.repo.get_history_version(user_id),
                )
                cached = self.cache.get(cache_key)
                if cached is not None:
                    logger.info("Serving cached %s recommendations for user %s.", bucket, user_id)
                    return cached

            videos = self.repo.get_eligible_videos(is_short=is_short)
            if not videos:
                logger.info("No eligible %s in the catalog.", bucket)
                return []

            watched_ids = self.repo.get_watched_video_ids(user_id)
            if not watched_ids:
                logger.info("User %s has no watch history. Ranking %s by popularity.", user_id, bucket)

            with track_latency("MLEngine:recommend", bucket=bucket, catalog=len(videos)):
                video_ids = self.engine.recommend(videos, watched_ids, top_n=limit)

            if cache_key and video_ids:
                self.cache.set(cache_key, video_ids)
            return video_ids

        except Exception as e:
            logger.exception(f"Recommendation engine error for user {user_id}: {e}")
            self.repo.rollback()
            return []

    def get_recommended_feed(self, user_id: str) -> Dict[str, List[Video]]:
        """
        Builds the home feed: long-form videos and shorts, each ranked
        separately. A bucket with no recommendations falls back to the
        most viewed videos of its kind.
        """
        feed = {}
        for key, is_short, limit in (
            ("videos", False, self.video_limit),
            ("shorts", True, self.shorts_limit),
        ):
            video_ids = self.recommend(user_id, limit=limit, is_short=is_short)
            videos = self.repo.get_videos_by_ids(video_ids)
            if not videos:
                logger.warning(
                    f"No {key} recommendations for user {user_id}. Using trending fallback.")
                videos = self.repo.get_trending_videos(is_short=is_short, limit=limit)
            feed[key] = videos
        return feed
