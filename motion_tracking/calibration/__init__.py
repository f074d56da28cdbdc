"""Calibration tools for motion tracking."""

from .bias_calibration import (
    BiasCalibrator,
    CalibrationResult,
)

__all__ = [
    'BiasCalibrator',
    'CalibrationResult',
]
