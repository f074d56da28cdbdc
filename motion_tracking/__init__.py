"""Inertial motion tracking: orientation, velocity, position and step
count from gyroscope and accelerometer streams."""

from .core import (
    Config,
    load_config,
    Matrix3,
    SampleKind,
    SensorSample,
    TrackerSnapshot,
    MatrixError,
    InvalidDimensionError,
    IndexOutOfRangeError,
    SingularMatrixError,
)
from .fusion import KalmanFilter3, CovarianceUpdate, MotionTracker
from .calibration import BiasCalibrator
from .session import TrackingSession

__version__ = "0.1.0"

__all__ = [
    "Config",
    "load_config",
    "Matrix3",
    "SampleKind",
    "SensorSample",
    "TrackerSnapshot",
    "MatrixError",
    "InvalidDimensionError",
    "IndexOutOfRangeError",
    "SingularMatrixError",
    "KalmanFilter3",
    "CovarianceUpdate",
    "MotionTracker",
    "BiasCalibrator",
    "TrackingSession",
]
