"""Input validation for inertial sensor samples."""

import numpy as np
from numpy.typing import NDArray

from .types import SampleKind, SensorSample, ValidationResult
from .config import Config


class SampleValidator:
    """Validates sensor samples for plausibility."""

    def __init__(self, config: Config):
        """Initialize validator with configuration.

        Args:
            config: System configuration with plausibility limits.
        """
        self._config = config

    def check_finite(self, sample: SensorSample) -> ValidationResult:
        """Check all components are finite (not NaN or Inf)."""
        result = ValidationResult(is_valid=True)
        for axis, val in zip("xyz", (sample.x, sample.y, sample.z)):
            if not np.isfinite(val):
                result.add_error(f"Non-finite {sample.kind.value}.{axis}: {val}")
        return result

    def check_corrected(
        self,
        kind: SampleKind,
        corrected: NDArray[np.float64],
    ) -> ValidationResult:
        """Validate a bias-corrected vector against the magnitude limits.

        Args:
            kind: Sensor that produced the vector.
            corrected: Reading with bias already removed.

        Returns:
            ValidationResult with validation status.
        """
        result = ValidationResult(is_valid=True)
        limits = self._config.limits
        magnitude = float(np.linalg.norm(corrected))

        if kind is SampleKind.ACCELEROMETER and magnitude > limits.max_acceleration:
            result.add_error(
                f"Acceleration magnitude {magnitude:.2f} m/s^2 exceeds "
                f"{limits.max_acceleration:.2f}"
            )
        elif kind is SampleKind.GYROSCOPE and magnitude > limits.max_angular_velocity:
            result.add_error(
                f"Angular rate magnitude {magnitude:.2f} rad/s exceeds "
                f"{limits.max_angular_velocity:.2f}"
            )

        return result


def validate_dt(dt: float, config: Config) -> ValidationResult:
    """Validate time step for integration.

    Args:
        dt: Time step in seconds.
        config: System configuration.

    Returns:
        ValidationResult with status.
    """
    result = ValidationResult(is_valid=True)
    cfg = config.validation.timestamp

    if not np.isfinite(dt):
        result.add_error(f"Non-finite dt: {dt}")
    elif dt <= 0:
        result.add_error(f"Non-positive dt: {dt}")
    elif dt < cfg.min_dt_s:
        result.add_warning(f"dt too small: {dt*1000:.2f}ms")
    elif dt > cfg.max_dt_s:
        result.add_warning(f"dt too large: {dt*1000:.2f}ms")

    return result
