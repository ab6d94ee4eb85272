from phiaccrual.core.detector import DetectorSnapshot, FailureDetector
from phiaccrual.core.exception import (
    ConfigurationError,
    EmptyWindowError,
    InvalidArgumentError,
    PhiAccrualError,
)
from phiaccrual.core.phi import DistributionModel, ExponentialModel, NormalModel, compute_phi
from phiaccrual.core.settings import DetectorSettings, load_settings
from phiaccrual.core.window import SampleWindow, WindowStats

__all__ = [
    "ConfigurationError",
    "DetectorSettings",
    "DetectorSnapshot",
    "DistributionModel",
    "EmptyWindowError",
    "ExponentialModel",
    "FailureDetector",
    "InvalidArgumentError",
    "NormalModel",
    "PhiAccrualError",
    "SampleWindow",
    "WindowStats",
    "compute_phi",
    "load_settings",
]
