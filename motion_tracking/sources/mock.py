"""Synthetic sample source for development without hardware."""

import logging
import math
from typing import Iterator
import numpy as np

from ..core.config import Config
from ..core.types import SampleKind, SensorSample

logger = logging.getLogger(__name__)


class MockSampleSource:
    """Generates a stationary phase followed by a walking-like phase.

    Stationary: gravity on z with small Gaussian noise, long enough to
    complete calibration.
    Walking: half-wave acceleration peaks on x at the cadence frequency
    and a slow constant yaw rate.
    """

    def __init__(
        self,
        config: Config,
        duration_s: float = 10.0,
        cadence_hz: float = 1.8,
        peak_accel: float = 15.0,
        yaw_rate: float = 0.3,
        seed: int = 42,
    ):
        self._config = config
        self._duration_s = duration_s
        self._cadence_hz = cadence_hz
        self._peak_accel = peak_accel
        self._yaw_rate = yaw_rate
        self._rng = np.random.default_rng(seed)

        self._period_ms = config.source.update_interval_ms
        self._gravity = config.calibration.gravity_magnitude
        # One extra period so throttling never eats a calibration sample
        self._stationary_ms = (config.calibration.num_samples + 1) * self._period_ms

    def __iter__(self) -> Iterator[SensorSample]:
        n_ticks = int(self._duration_s * 1000.0 / self._period_ms)
        logger.info("Mock source: %d ticks at %.0f ms", n_ticks, self._period_ms)

        for tick in range(n_ticks):
            t_ms = tick * self._period_ms
            noise_acc = self._rng.normal(0, 0.02, 3)
            noise_gyr = self._rng.normal(0, 0.001, 3)
            noise_mag = self._rng.normal(0, 0.1, 3)

            ax = 0.0
            gz = 0.0
            if t_ms >= self._stationary_ms:
                phase = 2 * math.pi * self._cadence_hz * (t_ms - self._stationary_ms) / 1000.0
                ax = self._peak_accel * max(0.0, math.sin(phase))
                gz = self._yaw_rate

            yield SensorSample(
                SampleKind.ACCELEROMETER,
                ax + noise_acc[0], noise_acc[1], self._gravity + noise_acc[2],
                t_ms,
            )
            yield SensorSample(
                SampleKind.GYROSCOPE,
                noise_gyr[0], noise_gyr[1], gz + noise_gyr[2],
                t_ms,
            )
            yield SensorSample(
                SampleKind.MAGNETOMETER,
                20.0 + noise_mag[0], 5.0 + noise_mag[1], 45.0 + noise_mag[2],
                t_ms,
            )
