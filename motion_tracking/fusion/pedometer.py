"""Step detection from low-pass filtered acceleration magnitude."""

import logging
from typing import Union
import numpy as np
from numpy.typing import NDArray

from ..core.config import StepDetectionConfig

logger = logging.getLogger(__name__)


class StepDetector:
    """Counts gait cycles from acceleration peaks.

    A step is counted when the magnitude lies strictly inside
    (threshold, threshold * max_ratio) and more than time_threshold_ms
    has elapsed since the previous step. The upper bound rejects spikes.
    """

    def __init__(self, config: StepDetectionConfig):
        self._threshold = config.step_threshold
        self._time_threshold_ms = config.time_threshold_ms
        self._upper_bound = config.step_threshold * config.max_threshold_ratio

        self.step_count = 0
        self.last_step_ms = 0.0

    def update(
        self,
        accel: Union[float, NDArray[np.float64]],
        timestamp_ms: float,
    ) -> bool:
        """Feed one filtered acceleration.

        Args:
            accel: Filtered acceleration vector, or its magnitude.
            timestamp_ms: Sample time in milliseconds.

        Returns:
            True if a step was counted.
        """
        magnitude = float(np.linalg.norm(accel))
        elapsed_ms = timestamp_ms - self.last_step_ms

        if (magnitude > self._threshold
                and elapsed_ms > self._time_threshold_ms
                and self.is_valid_step_pattern(magnitude)):
            self.step_count += 1
            self.last_step_ms = timestamp_ms
            logger.debug("Step %d at %.0f ms (|a|=%.2f)",
                         self.step_count, timestamp_ms, magnitude)
            return True

        return False

    def is_valid_step_pattern(self, magnitude: float) -> bool:
        """Amplitude window check."""
        return self._threshold < magnitude < self._upper_bound
