import time
import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@contextmanager
def track_latency(operation: str, **context):
    """
    Logs how long the wrapped block took, plus any keyword context
    (e.g. catalog size). The yielded dict receives `latency_ms` on exit.
    """
    timing = {}
    start_time = time.perf_counter()
    try:
        yield timing
    finally:
        timing["latency_ms"] = (time.perf_counter() - start_time) * 1000
        details = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        logger.info(f"METRIC: [{operation}] took {timing['latency_ms']:.2f}ms {details}".rstrip())
