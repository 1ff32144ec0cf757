# config.py

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        logger.warning("Invalid %s environment variable, using default %s", name, default)
        return default


REDIS_URL = os.getenv("REDIS_URL")
REDIS_TTL_SECONDS = _int_env("REDIS_TTL_SECONDS", 3600)

RECOMMENDED_VIDEOS_LIMIT = _int_env("RECOMMENDED_VIDEOS_LIMIT", 20)
RECOMMENDED_SHORTS_LIMIT = _int_env("RECOMMENDED_SHORTS_LIMIT", 10)
