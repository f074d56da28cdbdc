"""Core types, configuration and matrix algebra for motion tracking."""

from .types import (
    SampleKind,
    SensorSample,
    TrackerSnapshot,
    ValidationResult,
    ProcessingStats,
)
from .errors import (
    MatrixError,
    InvalidDimensionError,
    IndexOutOfRangeError,
    SingularMatrixError,
)
from .matrix3 import Matrix3
from .validation import SampleValidator, validate_dt
from .config import Config, load_config

__all__ = [
    "SampleKind",
    "SensorSample",
    "TrackerSnapshot",
    "ValidationResult",
    "ProcessingStats",
    "MatrixError",
    "InvalidDimensionError",
    "IndexOutOfRangeError",
    "SingularMatrixError",
    "Matrix3",
    "SampleValidator",
    "validate_dt",
    "Config",
    "load_config",
]
