import logging
import random

from ml_engine import MLEngine
from utils.metrics import track_latency

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CATEGORIES = ["Music", "Gaming", "Sports", "News", "Education", "Tech", "Comedy"]
WORDS = ["guitar", "speedrun", "highlights", "election", "calculus", "kernel", "standup",
         "tutorial", "review", "live", "remix", "season", "budget", "interview"]


def run_performance_test():
    engine = MLEngine()
    rng = random.Random(42)

    # Large catalog simulation
    videos = [
        {
            "id": i,
            "title": " ".join(rng.sample(WORDS, 3)),
            "description": " ".join(rng.sample(WORDS, 6)),
            "category": CATEGORIES[i % len(CATEGORIES)],
            "views": rng.randint(0, 100_000),
        }
        for i in range(1000)
    ]
    watched_ids = {v["id"] for v in videos[:50]}

    logger.info("Starting ML Engine Recommendation Performance Test...")

    with track_latency("MLEngine:Recommend_1000_videos", watched=len(watched_ids)):
        recs = engine.recommend(videos, watched_ids, top_n=20)

    logger.info(f"Generated {len(recs)} recommendations.")


if __name__ == "__main__":
    run_performance_test()
