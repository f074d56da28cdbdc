"""Tests for the motion tracker pipeline."""

import math
import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from motion_tracking.core.config import Config
from motion_tracking.core.errors import SingularMatrixError
from motion_tracking.core.matrix3 import Matrix3
from motion_tracking.core.types import SampleKind, SensorSample
from motion_tracking.fusion.kalman import KalmanFilter3
from motion_tracking.fusion.tracker import MotionTracker

ACCEL = SampleKind.ACCELEROMETER
GYRO = SampleKind.GYROSCOPE
MAG = SampleKind.MAGNETOMETER


def calibrate(tracker, start_ms=0.0):
    for i in range(100):
        tracker.process_sample(ACCEL, 0.0, 0.0, 9.81, timestamp_ms=start_ms + i * 20.0)
    assert tracker.is_calibrated


def walk(tracker, n=30, start_ms=3000.0, spacing_ms=100.0, peak=15.0):
    for i in range(n):
        tracker.process_sample(ACCEL, peak, 0.0, 9.81, timestamp_ms=start_ms + i * spacing_ms)


class TestGyroscopePath:
    """Tests for orientation integration."""

    def test_fixed_dt_ignores_timestamps(self, calibrated_tracker):
        """Each gyro sample advances by rate * 0.01 s."""
        calibrated_tracker.process_sample(GYRO, 0.0, 0.0, 1.0, timestamp_ms=5000.0)
        calibrated_tracker.process_sample(GYRO, 0.0, 0.0, 1.0, timestamp_ms=5500.0)

        assert_allclose(calibrated_tracker.orientation, [0.0, 0.0, 0.02])

    def test_orientation_wraps(self, calibrated_tracker):
        """Long rotation is remapped into [-pi, pi]."""
        for i in range(50):
            calibrated_tracker.process_sample(GYRO, 0.0, 0.0, 10.0, timestamp_ms=5000.0 + i)

        yaw = calibrated_tracker.orientation[2]
        assert -math.pi <= yaw <= math.pi
        assert yaw == pytest.approx(5.0 - 2 * math.pi, abs=1e-9)

    def test_fast_rotation_discarded(self, calibrated_tracker):
        """Angular rate above 20 rad/s is dropped silently."""
        calibrated_tracker.process_sample(GYRO, 0.0, 15.0, 15.0)

        assert_array_equal(calibrated_tracker.orientation, np.zeros(3))
        assert calibrated_tracker.stats.discarded_samples == 1

    def test_string_kind(self, calibrated_tracker):
        """Kinds may be given by their short name."""
        calibrated_tracker.process_sample("gyro", 1.0, 0.0, 0.0)
        assert calibrated_tracker.orientation[0] == pytest.approx(0.01)

    def test_sample_time_dt(self, clock):
        """With sample-time integration dt follows the timestamps."""
        config = Config()
        config.integration.use_sample_time = True
        tracker = MotionTracker(config, clock=clock)
        calibrate(tracker)

        tracker.process_sample(GYRO, 0.0, 0.0, 1.0, timestamp_ms=5000.0)  # first: fixed
        tracker.process_sample(GYRO, 0.0, 0.0, 1.0, timestamp_ms=5050.0)  # 0.05 s
        tracker.process_sample(GYRO, 0.0, 0.0, 1.0, timestamp_ms=5050.0)  # dt=0: fixed

        assert tracker.orientation[2] == pytest.approx(0.07)

    def test_long_kind_name(self, calibrated_tracker):
        """Long names are accepted like the short ones."""
        calibrated_tracker.process_sample("Gyroscope", 0.0, 1.0, 0.0)
        assert calibrated_tracker.orientation[1] == pytest.approx(0.01)

    def test_sample_time_gap_uses_fixed_dt(self, clock):
        """An interval above max_dt_s is not integrated."""
        config = Config()
        config.integration.use_sample_time = True
        tracker = MotionTracker(config, clock=clock)
        calibrate(tracker)

        tracker.process_sample(GYRO, 0.0, 0.0, 1.0, timestamp_ms=5000.0)
        tracker.process_sample(GYRO, 0.0, 0.0, 1.0, timestamp_ms=8000.0)

        assert tracker.orientation[2] == pytest.approx(0.02)

    def test_sample_time_restarts_after_recalibration(self, clock):
        """The first sample after recalibration does not span the gap."""
        config = Config()
        config.integration.use_sample_time = True
        config.validation.timestamp.max_dt_s = 10.0
        tracker = MotionTracker(config, clock=clock)
        calibrate(tracker)

        tracker.process_sample(GYRO, 0.0, 0.0, 1.0, timestamp_ms=2000.0)
        tracker.recalibrate()
        calibrate(tracker, start_ms=3000.0)
        tracker.process_sample(GYRO, 0.0, 0.0, 1.0, timestamp_ms=5000.0)

        assert tracker.orientation[2] == pytest.approx(0.02)


class TestAccelerometerPath:
    """Tests for filtering, step detection and position."""

    def test_walking_counts_steps(self, calibrated_tracker):
        """Sustained 15 m/s^2 on x raises the filtered magnitude into the step window."""
        walk(calibrated_tracker)

        assert calibrated_tracker.step_count >= 1
        assert calibrated_tracker.last_step_timestamp >= 3000.0
        assert 10.0 < np.linalg.norm(calibrated_tracker.filtered_accel) < 20.0

    def test_walking_moves_position(self, calibrated_tracker):
        """Filtered acceleration is integrated into position."""
        walk(calibrated_tracker)

        assert calibrated_tracker.position[0] > 0.0
        assert calibrated_tracker.kalman.update_count == 30

    def test_low_pass_first_sample(self, calibrated_tracker):
        """The first filtered value is 0.1 of the Kalman output."""
        calibrated_tracker.process_sample(ACCEL, 5.0, 0.0, 9.81, timestamp_ms=3000.0)

        filtered = calibrated_tracker.filtered_accel
        assert filtered[0] == pytest.approx(0.5, rel=0.02)

    def test_large_acceleration_discarded(self, calibrated_tracker):
        """Acceleration above 50 m/s^2 is dropped before filtering."""
        calibrated_tracker.process_sample(ACCEL, 60.0, 0.0, 9.81)

        assert calibrated_tracker.kalman.update_count == 0
        assert_array_equal(calibrated_tracker.filtered_accel, np.zeros(3))
        assert calibrated_tracker.stats.discarded_samples == 1

    def test_magnetometer_has_no_effect(self, calibrated_tracker):
        """Magnetometer samples are accepted but change nothing."""
        walk(calibrated_tracker, n=5)
        before = calibrated_tracker.snapshot()

        calibrated_tracker.process_sample(MAG, 20.0, 5.0, 45.0, timestamp_ms=before.timestamp_ms)
        after = calibrated_tracker.snapshot()

        assert after.step_count == before.step_count
        assert_array_equal(after.position, before.position)
        assert_array_equal(after.velocity, before.velocity)
        assert_array_equal(after.orientation, before.orientation)


class TestSampleGate:
    """Tests for non-finite samples and timestamps."""

    def test_non_finite_is_noop(self, tracker):
        """NaN or Inf samples are dropped before calibration."""
        for _ in range(100):
            tracker.process_sample(ACCEL, float("nan"), 0.0, 9.81)
        tracker.process_sample(GYRO, 0.0, float("inf"), 0.0)

        assert not tracker.is_calibrated
        assert tracker.stats.non_finite_samples == 101
        assert tracker.stats.calibration_samples == 0

    def test_non_finite_after_calibration(self, calibrated_tracker):
        """Non-finite samples don't reach the filter."""
        calibrated_tracker.process_sample(ACCEL, 1.0, float("-inf"), 9.81)
        assert calibrated_tracker.kalman.update_count == 0

    def test_clock_used_without_timestamp(self, tracker, clock):
        """Samples without a timestamp use the tracker clock."""
        clock.advance(500.0)
        tracker.process(SensorSample(ACCEL, 0.0, 0.0, 9.81))

        assert tracker.snapshot().timestamp_ms == 1500.0


class TestFaultRecovery:
    """Tests for per-sample fault handling."""

    def test_singular_gain_resets_velocity_only(self, calibrated_tracker, monkeypatch):
        """A failing filter step zeroes velocity and filter memory."""
        tracker = calibrated_tracker
        walk(tracker, n=5)
        tracker.process_sample(GYRO, 0.0, 0.0, 1.0)

        position = tracker.position
        orientation = tracker.orientation
        steps = tracker.step_count
        assert np.linalg.norm(tracker.velocity) > 0.0

        original_step = tracker.kalman.step
        calls = {"n": 0}

        def failing_step(measurement, dt):
            calls["n"] += 1
            if calls["n"] == 1:
                raise SingularMatrixError("forced")
            return original_step(measurement, dt)

        monkeypatch.setattr(tracker.kalman, "step", failing_step)

        tracker.process_sample(ACCEL, 15.0, 0.0, 9.81, timestamp_ms=4000.0)

        assert_array_equal(tracker.velocity, np.zeros(3))
        assert_array_equal(tracker.filtered_accel, np.zeros(3))
        assert_array_equal(tracker.position, position)
        assert_array_equal(tracker.orientation, orientation)
        assert tracker.step_count == steps
        assert tracker.is_calibrated
        assert tracker.stats.faults == 1

        tracker.process_sample(ACCEL, 15.0, 0.0, 9.81, timestamp_ms=4100.0)
        assert calls["n"] == 2
        assert np.linalg.norm(tracker.filtered_accel) > 0.0

    def test_injected_singular_filter(self, clock):
        """Every sample faults with a filter whose gain can't be computed."""
        kf = KalmanFilter3(
            process_noise=Matrix3.zeros(),
            measurement_noise=Matrix3.zeros(),
            measurement_matrix=Matrix3.zeros(),
        )
        tracker = MotionTracker(Config(), kalman_filter=kf, clock=clock)
        calibrate(tracker)

        walk(tracker, n=10)

        assert tracker.stats.faults == 10
        assert_array_equal(tracker.velocity, np.zeros(3))
        assert_array_equal(tracker.position, np.zeros(3))
        assert tracker.is_calibrated


class TestRecalibration:
    """Tests for recalibrate()."""

    def test_recalibrate_keeps_pose_and_steps(self, calibrated_tracker):
        """Position, orientation and steps survive; velocity doesn't."""
        tracker = calibrated_tracker
        walk(tracker)
        for _ in range(10):
            tracker.process_sample(GYRO, 0.0, 0.0, 1.0)

        position = tracker.position
        orientation = tracker.orientation
        steps = tracker.step_count
        assert steps > 0
        assert np.linalg.norm(position) > 0.0
        assert np.linalg.norm(orientation) > 0.0

        tracker.recalibrate()

        assert not tracker.is_calibrated
        assert_array_equal(tracker.velocity, np.zeros(3))
        assert_array_equal(tracker.filtered_accel, np.zeros(3))
        assert_array_equal(tracker.position, position)
        assert_array_equal(tracker.orientation, orientation)
        assert tracker.step_count == steps

    def test_recalibrate_gates_gyro_again(self, calibrated_tracker):
        """After recalibrate() gyro samples are ignored until calibrated."""
        calibrated_tracker.recalibrate()
        calibrated_tracker.process_sample(GYRO, 0.0, 0.0, 1.0)

        assert_array_equal(calibrated_tracker.orientation, np.zeros(3))

    def test_recalibrate_collects_new_bias(self, calibrated_tracker):
        """A fresh batch of 100 samples sets a new bias."""
        calibrated_tracker.recalibrate()
        for i in range(100):
            calibrated_tracker.process_sample(ACCEL, 0.3, 0.0, 9.81, timestamp_ms=10000.0 + i)

        assert calibrated_tracker.is_calibrated
        assert_allclose(calibrated_tracker.accel_bias, [0.3, 0.0, 0.0], atol=1e-9)


class TestPublicState:
    """Tests for accessors and snapshots."""

    def test_velocity_is_live(self, calibrated_tracker):
        """The velocity accessor exposes the tracker's own array."""
        v = calibrated_tracker.velocity
        v[0] = 1.5

        assert calibrated_tracker.velocity[0] == 1.5

    def test_position_is_copy(self, calibrated_tracker):
        """Position and orientation accessors return copies."""
        calibrated_tracker.position[0] = 3.0
        calibrated_tracker.orientation[0] = 3.0

        assert calibrated_tracker.position[0] == 0.0
        assert calibrated_tracker.orientation[0] == 0.0

    def test_snapshot_to_dict(self, calibrated_tracker):
        """Snapshot serializes to plain values."""
        data = calibrated_tracker.snapshot().to_dict()

        assert data["steps"] == 0
        assert data["calibrated"] is True
        assert set(data) >= {"px", "py", "pz", "vx", "vy", "vz", "roll", "pitch", "yaw"}
