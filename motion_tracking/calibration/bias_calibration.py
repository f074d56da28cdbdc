"""Static accelerometer bias calibration.

Collects a batch of stationary accelerometer samples and derives the
bias as their mean, minus gravity on the z-axis (device assumed lying
with z vertical). Gyroscope bias is not estimated and stays zero.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional
import numpy as np
from numpy.typing import NDArray

from ..core.config import CalibrationConfig

logger = logging.getLogger(__name__)


@dataclass
class CalibrationResult:
    """Result of accelerometer bias calibration."""
    accel_bias: NDArray[np.float64]   # [bx, by, bz] in m/s^2
    gyro_bias: NDArray[np.float64]    # Always zero
    std: NDArray[np.float64]          # Per-axis standard deviation
    num_samples: int
    warnings: List[str]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'accel_bias': self.accel_bias.tolist(),
            'gyro_bias': self.gyro_bias.tolist(),
            'std': self.std.tolist(),
            'num_samples': self.num_samples,
            'warnings': self.warnings
        }


class BiasCalibrator:
    """Accumulates accelerometer samples until a bias can be computed."""

    def __init__(self, config: CalibrationConfig):
        """Initialize calibrator.

        Args:
            config: Calibration configuration (sample count, gravity).
        """
        self._num_samples = config.num_samples
        self._gravity = config.gravity_magnitude
        self._max_std = config.max_std

        self._buffer: List[NDArray[np.float64]] = []
        self.result: Optional[CalibrationResult] = None

    @property
    def buffered(self) -> int:
        """Number of samples currently buffered."""
        return len(self._buffer)

    @property
    def is_complete(self) -> bool:
        """True once a bias has been computed."""
        return self.result is not None

    def add_sample(self, accel: NDArray[np.float64]) -> Optional[CalibrationResult]:
        """Buffer one accelerometer reading.

        Args:
            accel: Raw accelerometer reading [ax, ay, az] in m/s^2.

        Returns:
            CalibrationResult when the buffer just filled, else None.
        """
        self._buffer.append(np.asarray(accel, dtype=np.float64).copy())

        if len(self._buffer) < self._num_samples:
            return None

        self.result = self._compute_bias()
        self._buffer.clear()
        return self.result

    def _compute_bias(self) -> CalibrationResult:
        samples = np.array(self._buffer)
        bias = np.mean(samples, axis=0)
        bias[2] -= self._gravity
        std = np.std(samples, axis=0)

        warnings = []
        if np.any(std > self._max_std):
            warnings.append(
                f"High variance during calibration (std={np.round(std, 3)}). "
                "Device may not have been stationary."
            )
            logger.warning(warnings[-1])

        logger.info(
            "Accelerometer bias calibrated from %d samples: [%.3f, %.3f, %.3f] m/s^2",
            len(samples), bias[0], bias[1], bias[2]
        )

        return CalibrationResult(
            accel_bias=bias,
            gyro_bias=np.zeros(3),
            std=std,
            num_samples=len(samples),
            warnings=warnings,
        )

    def reset(self) -> None:
        """Discard buffered samples and any previous result."""
        self._buffer.clear()
        self.result = None
