import math
from typing import Protocol

from phiaccrual.core.exception import ConfigurationError, EmptyWindowError, InvalidArgumentError
from phiaccrual.core.window import WindowStats


def compute_phi(mean: float, elapsed: float) -> float:
    """
    Compute φ(t) = -log10(1 - CDF(t)) for an exponential distribution.

    The distribution's rate is 1 / mean, so its survival function is:

        1 - CDF(t) = exp(-t / mean)

    The closed form -log10(exp(-t / mean)) == (t / mean) / ln(10) is
    returned directly, so φ stays exact and strictly increasing in t even
    when t is tiny next to the mean. exp() is only evaluated to detect the
    point where the tail probability underflows.

    If φ == 1 there is a 10% chance that suspecting the process is a
    mistake, if φ == 2 a 1% chance, and so on.

    Raises InvalidArgumentError when mean is not a positive finite number,
    when elapsed is negative, or when the tail probability underflows to 0
    (the gap is so improbable that φ is not representable).
    """
    if not math.isfinite(mean) or mean <= 0:
        raise InvalidArgumentError(f"Mean must be a positive finite number, got {mean}")

    if math.isnan(elapsed) or elapsed < 0:
        raise InvalidArgumentError(f"Elapsed time must be non-negative, got {elapsed}")

    if elapsed == 0:
        return 0.0

    if math.exp(-elapsed / mean) <= 0.0:
        raise InvalidArgumentError(
            f"Tail probability underflowed for elapsed={elapsed}, mean={mean}"
        )

    # -log10(exp(-x)) == x / ln(10), without rounding exp(-x) to 1.0 for tiny x
    return (elapsed / mean) / math.log(10)


class DistributionModel(Protocol):
    def phi(self, stats: WindowStats, elapsed: float) -> float:
        ...


class ExponentialModel:
    """
    Assumes inter-arrival intervals are exponentially distributed with a
    mean equal to the observed sample mean.
    """

    name = "exponential"

    def phi(self, stats: WindowStats, elapsed: float) -> float:
        if stats.mean is None:
            raise EmptyWindowError("Cannot compute phi from an empty window")
        return compute_phi(stats.mean, elapsed)

    def __repr__(self) -> str:
        return "ExponentialModel()"


class NormalModel:
    """
    Fits a normal distribution N(mean, std) to the window and computes
    φ = -log10(P(X > elapsed)).

    The standard deviation is floored at min_std_deviation, otherwise a
    perfectly regular heartbeat would make any small delay look infinitely
    suspicious.
    """

    name = "normal"

    def __init__(self, min_std_deviation: float = 100.0) -> None:
        if not math.isfinite(min_std_deviation) or min_std_deviation <= 0:
            raise ConfigurationError(
                f"min_std_deviation must be a positive finite number, got {min_std_deviation}"
            )
        self.min_std_deviation = min_std_deviation

    def phi(self, stats: WindowStats, elapsed: float) -> float:
        if stats.mean is None or stats.std_deviation is None:
            raise EmptyWindowError("Cannot compute phi from an empty window")

        mean = stats.mean
        if not math.isfinite(mean) or mean <= 0:
            raise InvalidArgumentError(f"Mean must be a positive finite number, got {mean}")

        if math.isnan(elapsed) or elapsed < 0:
            raise InvalidArgumentError(f"Elapsed time must be non-negative, got {elapsed}")

        if elapsed == 0:
            return 0.0

        std = max(stats.std_deviation, self.min_std_deviation)
        y = (elapsed - mean) / std

        if y < 0:
            # below the mean 1 - CDF is close to 1: log1p keeps the small CDF
            cdf = 0.5 * math.erfc(-y / math.sqrt(2.0))
            return -math.log1p(-cdf) / math.log(10)

        # erfc keeps precision in the upper tail where 1 - CDF would cancel
        probability = 0.5 * math.erfc(y / math.sqrt(2.0))
        if probability <= 0.0:
            raise InvalidArgumentError(
                f"Tail probability underflowed for elapsed={elapsed}, mean={mean}, std={std}"
            )

        return -math.log10(probability)

    def __repr__(self) -> str:
        return f"NormalModel(min_std_deviation={self.min_std_deviation})"
