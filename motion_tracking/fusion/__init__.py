"""Sensor fusion: Kalman filtering, step detection and dead reckoning."""

from .kalman import KalmanFilter3, FilterState, CovarianceUpdate
from .pedometer import StepDetector
from .dead_reckoning import DeadReckoning
from .orientation import OrientationIntegrator, normalize_angle
from .tracker import MotionTracker, monotonic_ms

__all__ = [
    "KalmanFilter3",
    "FilterState",
    "CovarianceUpdate",
    "StepDetector",
    "DeadReckoning",
    "OrientationIntegrator",
    "normalize_angle",
    "MotionTracker",
    "monotonic_ms",
]
