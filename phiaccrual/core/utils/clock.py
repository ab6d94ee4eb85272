import time


def now_millis() -> float:
    """Return a monotonic clock reading in milliseconds."""
    return time.monotonic() * 1000.0
