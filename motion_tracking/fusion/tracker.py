"""Motion tracker combining calibration, Kalman filtering, pedometer
and dead reckoning.

Pipeline per sample:
- Non-finite samples are dropped
- Until calibrated, accelerometer samples feed the bias calibrator and
  everything else is ignored
- Gyroscope: bias removal, limit check, orientation integration
- Accelerometer: bias removal, limit check, Kalman step, low-pass,
  step detection and position integration
- Magnetometer: accepted without effect

Usage:
    tracker = MotionTracker(config)

    for kind, x, y, z in samples:
        tracker.process_sample(kind, x, y, z)
        print(tracker.step_count, tracker.position)

A tracker is not thread-safe; serialize calls from a single writer.
"""

import logging
import time
from typing import Callable, Dict, Optional
import numpy as np
from numpy.typing import NDArray

from ..core.config import Config
from ..core.types import ProcessingStats, SampleKind, SensorSample, TrackerSnapshot
from ..core.validation import SampleValidator, validate_dt
from ..calibration.bias_calibration import BiasCalibrator, CalibrationResult
from .kalman import KalmanFilter3
from .pedometer import StepDetector
from .dead_reckoning import DeadReckoning
from .orientation import OrientationIntegrator

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


class MotionTracker:
    """Estimates orientation, velocity, position and step count."""

    def __init__(
        self,
        config: Optional[Config] = None,
        kalman_filter: Optional[KalmanFilter3] = None,
        clock: Callable[[], float] = monotonic_ms,
    ):
        """Initialize tracker.

        Args:
            config: System configuration. Defaults are used if None.
            kalman_filter: Filter to use for accelerometer smoothing.
                Built from config.kalman if None.
            clock: Millisecond clock used when a sample carries no
                timestamp.
        """
        self._config = config if config is not None else Config()
        self._clock = clock

        self._validator = SampleValidator(self._config)
        self._calibrator = BiasCalibrator(self._config.calibration)
        self._kalman = (
            kalman_filter if kalman_filter is not None
            else KalmanFilter3.from_config(self._config.kalman)
        )
        self._pedometer = StepDetector(self._config.step_detection)
        self._dead_reckoning = DeadReckoning(self._config.integration)
        self._orientation = OrientationIntegrator()

        integration = self._config.integration
        self._fixed_dt = integration.fixed_dt_s
        self._use_sample_time = integration.use_sample_time
        self._alpha = integration.low_pass_alpha

        self._accel_bias = np.zeros(3)
        self._gyro_bias = np.zeros(3)
        self._is_calibrated = False
        self._filtered_accel = np.zeros(3)
        self._last_sample_ms: Dict[SampleKind, float] = {}
        self._last_timestamp_ms = 0.0

        self.stats = ProcessingStats()

    # Public state

    @property
    def step_count(self) -> int:
        """Number of steps detected so far."""
        return self._pedometer.step_count

    @property
    def position(self) -> NDArray[np.float64]:
        """Dead-reckoned position (m)."""
        return self._dead_reckoning.position.copy()

    @property
    def velocity(self) -> NDArray[np.float64]:
        """Live velocity array (m/s).

        Not a copy: host-side smoothing writes into it.
        """
        return self._dead_reckoning.velocity

    @property
    def orientation(self) -> NDArray[np.float64]:
        """Integrated angles around x, y, z (rad), each in [-pi, pi]."""
        return self._orientation.orientation.copy()

    @property
    def is_calibrated(self) -> bool:
        """True once the accelerometer bias is known."""
        return self._is_calibrated

    @property
    def accel_bias(self) -> NDArray[np.float64]:
        """Accelerometer bias (m/s^2)."""
        return self._accel_bias.copy()

    @property
    def gyro_bias(self) -> NDArray[np.float64]:
        """Gyroscope bias (rad/s). Never estimated, always zero."""
        return self._gyro_bias.copy()

    @property
    def filtered_accel(self) -> NDArray[np.float64]:
        """Low-pass memory of the Kalman output."""
        return self._filtered_accel.copy()

    @property
    def last_step_timestamp(self) -> float:
        """Time of the last counted step (ms)."""
        return self._pedometer.last_step_ms

    @property
    def calibration_result(self) -> Optional[CalibrationResult]:
        """Latest calibration result, if any."""
        return self._calibrator.result

    @property
    def kalman(self) -> KalmanFilter3:
        """Underlying Kalman filter."""
        return self._kalman

    def snapshot(self) -> TrackerSnapshot:
        """Copy of the current estimate."""
        return TrackerSnapshot(
            step_count=self.step_count,
            position=self.position,
            velocity=self._dead_reckoning.velocity.copy(),
            orientation=self.orientation,
            is_calibrated=self._is_calibrated,
            timestamp_ms=self._last_timestamp_ms,
        )

    # Sample processing

    def process_sample(
        self,
        kind: SampleKind,
        x: float,
        y: float,
        z: float,
        timestamp_ms: Optional[float] = None,
    ) -> None:
        """Consume one 3-axis reading.

        Args:
            kind: Sensor that produced the reading.
            x, y, z: Reading components.
            timestamp_ms: Sample time in ms. The tracker clock is used
                if None.
        """
        if not isinstance(kind, SampleKind):
            kind = SampleKind.parse(kind)
        self.process(SensorSample(kind, x, y, z, timestamp_ms))

    def process(self, sample: SensorSample) -> None:
        """Consume one sensor sample.

        Any exception raised while processing resets velocity and the
        low-pass memory; the next sample is processed normally.
        """
        self.stats.total_samples += 1

        finite = self._validator.check_finite(sample)
        if not finite.is_valid:
            self.stats.non_finite_samples += 1
            logger.debug("Dropping sample: %s", finite.errors)
            return

        timestamp_ms = (
            sample.timestamp_ms if sample.timestamp_ms is not None
            else self._clock()
        )
        self._last_timestamp_ms = timestamp_ms

        try:
            if not self._is_calibrated:
                if sample.kind is SampleKind.ACCELEROMETER:
                    self._collect_calibration_data(sample.vector)
                else:
                    self.stats.ignored_samples += 1
                return

            if sample.kind is SampleKind.GYROSCOPE:
                self._process_gyroscope(sample.vector, timestamp_ms)
            elif sample.kind is SampleKind.ACCELEROMETER:
                self._process_accelerometer(sample.vector, timestamp_ms)
            elif sample.kind is SampleKind.MAGNETOMETER:
                self._process_magnetometer(sample.vector)
        except Exception as e:
            self.stats.faults += 1
            logger.warning("Failed to process %s sample: %s", sample.kind.value, e)
            self._reset_states()

    def recalibrate(self) -> None:
        """Restart bias calibration.

        Position, orientation and step count are kept.
        """
        self._is_calibrated = False
        self._calibrator.reset()
        self._last_sample_ms.clear()
        self._reset_states()
        logger.info("Recalibration requested")

    def _collect_calibration_data(self, accel: NDArray[np.float64]) -> None:
        self.stats.calibration_samples += 1
        result = self._calibrator.add_sample(accel)
        if result is None:
            return

        self._accel_bias = result.accel_bias.copy()
        self._gyro_bias = result.gyro_bias.copy()
        self._is_calibrated = True

    def _process_gyroscope(self, gyro: NDArray[np.float64], timestamp_ms: float) -> None:
        gyro = gyro - self._gyro_bias

        check = self._validator.check_corrected(SampleKind.GYROSCOPE, gyro)
        if not check.is_valid:
            self.stats.discarded_samples += 1
            logger.debug("Discarding gyroscope sample: %s", check.errors[0])
            return

        dt = self._time_step(SampleKind.GYROSCOPE, timestamp_ms)
        self._orientation.update(gyro, dt)
        self.stats.processed_samples += 1

    def _process_accelerometer(self, accel: NDArray[np.float64], timestamp_ms: float) -> None:
        accel = accel - self._accel_bias

        check = self._validator.check_corrected(SampleKind.ACCELEROMETER, accel)
        if not check.is_valid:
            self.stats.discarded_samples += 1
            logger.debug("Discarding accelerometer sample: %s", check.errors[0])
            return

        dt = self._time_step(SampleKind.ACCELEROMETER, timestamp_ms)
        kalman_out = self._kalman.step(accel, dt)

        self._filtered_accel = self._low_pass(self._filtered_accel, kalman_out)

        self._pedometer.update(self._filtered_accel, timestamp_ms)
        self._dead_reckoning.update(self._filtered_accel, dt)
        self.stats.processed_samples += 1

    def _process_magnetometer(self, mag: NDArray[np.float64]) -> None:
        # No heading correction yet.
        self.stats.processed_samples += 1

    def _low_pass(
        self,
        previous: NDArray[np.float64],
        current: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        return previous * (1 - self._alpha) + current * self._alpha

    def _time_step(self, kind: SampleKind, timestamp_ms: float) -> float:
        """Integration step for a sample.

        The fixed step is used unless sample-time integration is enabled
        and the measured interval lies within the validation bounds.
        """
        last_ms = self._last_sample_ms.get(kind)
        self._last_sample_ms[kind] = timestamp_ms

        if not self._use_sample_time or last_ms is None:
            return self._fixed_dt

        dt = (timestamp_ms - last_ms) / 1000.0
        result = validate_dt(dt, self._config)
        if not result.is_valid:
            logger.debug("Using fixed dt: %s", result.errors)
            return self._fixed_dt
        if dt > self._config.validation.timestamp.max_dt_s:
            logger.debug("Using fixed dt: %s", result.warnings)
            return self._fixed_dt
        return dt

    def _reset_states(self) -> None:
        self._dead_reckoning.reset_velocity()
        self._filtered_accel = np.zeros(3)
