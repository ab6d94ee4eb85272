import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from phiaccrual.core.exception import ConfigurationError, InvalidArgumentError
from phiaccrual.core.phi import DistributionModel, ExponentialModel
from phiaccrual.core.utils.clock import now_millis
from phiaccrual.core.window import SampleWindow, WindowStats

if TYPE_CHECKING:
    from phiaccrual.core.settings import DetectorSettings


@dataclass(frozen=True)
class DetectorSnapshot:
    """
    Consistent view of a FailureDetector: the latest heartbeat and the
    window statistics were captured under the same lock acquisition.
    """
    latest_heartbeat: float | None
    stats: WindowStats

    @property
    def is_tracking(self) -> bool:
        return self.latest_heartbeat is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "latest_heartbeat": self.latest_heartbeat,
            "stats": self.stats.to_dict(),
        }


class FailureDetector:
    """
    φ-accrual failure detector (Hayashibara et al. 2004) for one monitored
    process.

    Heartbeat timestamps are turned into inter-arrival intervals and kept in
    a sliding SampleWindow. phi(now) reports how improbable the silence since
    the last heartbeat is under the configured DistributionModel
    (exponential by default). Deciding what φ means "failed" is left to the
    caller.

    The window and the latest heartbeat timestamp form a single unit guarded
    by one lock: a phi() call never pairs window statistics from one
    heartbeat with the timestamp of another.
    """

    def __init__(
        self,
        window_size: int,
        min_samples: int,
        model: DistributionModel | None = None,
    ) -> None:
        if isinstance(min_samples, bool) or not isinstance(min_samples, int):
            raise ConfigurationError(f"min_samples must be an integer, got {min_samples!r}")
        if min_samples < 0:
            raise ConfigurationError(f"min_samples must be non-negative, got {min_samples}")

        self._window = SampleWindow(window_size)
        self._min_samples = min_samples
        self._model = model if model is not None else ExponentialModel()
        self._latest_heartbeat: float | None = None
        self._lock = threading.Lock()

        self._logger = logging.getLogger("phiaccrual.core.detector")

    @classmethod
    def from_settings(cls, settings: "DetectorSettings") -> "FailureDetector":
        return cls(
            window_size=settings.window_size,
            min_samples=settings.min_samples,
            model=settings.build_model(),
        )

    @property
    def window_size(self) -> int:
        return self._window.window_size

    @property
    def min_samples(self) -> int:
        return self._min_samples

    @property
    def model(self) -> DistributionModel:
        return self._model

    @property
    def latest_heartbeat(self) -> float | None:
        with self._lock:
            return self._latest_heartbeat

    def record_heartbeat(self, now: float | None = None) -> None:
        """
        Record the signal from the monitored process that it is alive.

        The first heartbeat only sets the baseline. Each later one pushes
        the interval since the previous heartbeat into the window.

        A heartbeat older than the latest one (clock skew, out-of-order
        delivery) is clamped: it records a zero interval and the latest
        heartbeat timestamp never moves backwards. A heartbeat with the same
        timestamp also records a zero interval.
        """
        if now is None:
            now = now_millis()

        if not math.isfinite(now):
            raise InvalidArgumentError(f"Heartbeat time must be finite, got {now}")

        with self._lock:
            latest = self._latest_heartbeat

            if latest is None:
                self._latest_heartbeat = now
            elif now < latest:
                self._window.insert(0.0)
            else:
                self._window.insert(now - latest)
                self._latest_heartbeat = now

        # no logging while holding the lock
        if latest is None:
            self._logger.debug(f"Tracking started at {now}")
        elif now < latest:
            self._logger.warning(
                f"Out-of-order heartbeat at {now} (latest is {latest}), "
                f"recording a zero interval"
            )

    def snapshot(self) -> DetectorSnapshot:
        with self._lock:
            return DetectorSnapshot(
                latest_heartbeat=self._latest_heartbeat,
                stats=self._window.stats(),
            )

    def phi(self, now: float | None = None) -> float | None:
        """
        Compute the suspicion level φ at time now.

        Returns None when no heartbeat was ever recorded or fewer than
        min_samples intervals have been observed. None means "no verdict
        yet", not "healthy".

        Raises InvalidArgumentError when now precedes the latest heartbeat
        or when the model cannot produce a finite φ (e.g. a zero mean, or a
        gap so large that the tail probability underflows). Callers should
        treat the latter as maximal suspicion.
        """
        if now is None:
            now = now_millis()

        snapshot = self.snapshot()

        if not snapshot.is_tracking:
            return None

        if snapshot.stats.count == 0 or snapshot.stats.count < self._min_samples:
            return None

        elapsed = now - snapshot.latest_heartbeat
        if elapsed < 0:
            raise InvalidArgumentError(
                f"Query time {now} precedes latest heartbeat {snapshot.latest_heartbeat}"
            )

        return self._model.phi(snapshot.stats, elapsed)

    def reset(self) -> None:
        """
        Forget every heartbeat (e.g., after the process restarted).
        """
        with self._lock:
            self._window.clear()
            self._latest_heartbeat = None
        self._logger.debug("Detector reset")

    def __repr__(self) -> str:
        return (
            f"FailureDetector(window_size={self.window_size}, "
            f"min_samples={self._min_samples}, model={self._model!r})"
        )
