import math
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any

from phiaccrual.core.exception import ConfigurationError, EmptyWindowError, InvalidArgumentError


@dataclass(frozen=True)
class WindowStats:
    """
    Immutable view of a SampleWindow at one point in time.

    mean and variance are None when the window holds no samples.
    """
    count: int
    mean: float | None
    variance: float | None

    @property
    def std_deviation(self) -> float | None:
        if self.variance is None:
            return None
        return math.sqrt(self.variance)

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "mean": self.mean,
            "variance": self.variance,
        }


class SampleWindow:
    """
    Fixed-capacity ring buffer of inter-arrival intervals.

    Once the window holds window_size samples, every insert evicts the
    oldest one. All operations are guarded by an internal lock so a window
    can be shared between threads on its own.

    Statistics are recomputed from the stored samples with math.fsum, so
    they always reflect exactly the samples currently in the window (no
    drift accumulates from evicted values).
    """

    def __init__(self, window_size: int) -> None:
        if isinstance(window_size, bool) or not isinstance(window_size, int):
            raise ConfigurationError(f"window_size must be an integer, got {window_size!r}")
        if window_size <= 0:
            raise ConfigurationError(f"window_size must be positive, got {window_size}")

        self._window_size = window_size
        self._samples: deque[float] = deque(maxlen=window_size)
        self._lock = threading.Lock()

    @property
    def window_size(self) -> int:
        return self._window_size

    def insert(self, value: float) -> None:
        value = float(value)
        if not math.isfinite(value) or value < 0:
            raise InvalidArgumentError(f"Interval must be a finite non-negative value, got {value}")

        with self._lock:
            self._samples.append(value)

    def count(self) -> int:
        with self._lock:
            return len(self._samples)

    def mean(self) -> float:
        with self._lock:
            if not self._samples:
                raise EmptyWindowError("Mean is undefined for an empty window")
            return self._mean()

    def variance(self) -> float:
        """Population variance of the stored samples."""
        with self._lock:
            if not self._samples:
                raise EmptyWindowError("Variance is undefined for an empty window")
            return self._variance(self._mean())

    def stats(self) -> WindowStats:
        with self._lock:
            if not self._samples:
                return WindowStats(count=0, mean=None, variance=None)

            mean = self._mean()
            return WindowStats(
                count=len(self._samples),
                mean=mean,
                variance=self._variance(mean),
            )

    def values(self) -> list[float]:
        """Return a copy of the samples, oldest first."""
        with self._lock:
            return list(self._samples)

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"SampleWindow(window_size={self._window_size}, count={self.count()})"

    # Callers must hold self._lock and ensure the window is not empty.
    def _mean(self) -> float:
        return math.fsum(self._samples) / len(self._samples)

    def _variance(self, mean: float) -> float:
        return math.fsum((x - mean) ** 2 for x in self._samples) / len(self._samples)
