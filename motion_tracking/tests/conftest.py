"""Pytest fixtures for motion tracking tests."""

import sys
from pathlib import Path
import pytest
import numpy as np
from numpy.typing import NDArray

repo_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(repo_root))

from motion_tracking.core.config import Config
from motion_tracking.core.types import SampleKind
from motion_tracking.fusion.tracker import MotionTracker


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: float = 1000.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


@pytest.fixture
def config() -> Config:
    """Create default configuration for tests."""
    return Config()


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock starting at 1000 ms."""
    return FakeClock()


@pytest.fixture
def rest_accel_samples() -> NDArray[np.float64]:
    """Create accelerometer samples for calibration.

    Returns 100 samples of a device lying flat (gravity on +Z)
    with small Gaussian noise.
    """
    np.random.seed(42)
    n_samples = 100
    noise = np.random.normal(0, 0.01, (n_samples, 3))
    samples = np.zeros((n_samples, 3))
    samples[:, 2] = 9.81
    return samples + noise


@pytest.fixture
def tracker(config, clock) -> MotionTracker:
    """Uncalibrated tracker on the fake clock."""
    return MotionTracker(config, clock=clock)


@pytest.fixture
def calibrated_tracker(tracker, rest_accel_samples) -> MotionTracker:
    """Tracker calibrated from stationary samples at 20 ms spacing."""
    for i, (x, y, z) in enumerate(rest_accel_samples):
        tracker.process_sample(SampleKind.ACCELEROMETER, x, y, z, timestamp_ms=i * 20.0)
    assert tracker.is_calibrated
    return tracker


@pytest.fixture
def random_matrices() -> NDArray[np.float64]:
    """Ten well-conditioned random 3x3 arrays."""
    rng = np.random.default_rng(7)
    return rng.normal(0, 1, (10, 3, 3)) + 3.0 * np.eye(3)
