"""Data types for inertial motion tracking."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import numpy as np
from numpy.typing import NDArray


class SampleKind(str, Enum):
    """Sensor that produced a sample."""
    GYROSCOPE = "gyro"
    ACCELEROMETER = "accel"
    MAGNETOMETER = "mag"

    @classmethod
    def parse(cls, value: str) -> "SampleKind":
        """Parse a kind from its short or long name (case-insensitive)."""
        text = value.strip().lower()
        for kind in cls:
            if text in (kind.value, kind.name.lower()):
                return kind
        raise ValueError(f"Unknown sample kind: {value!r}")


@dataclass(frozen=True)
class SensorSample:
    """Single 3-axis reading from one sensor.

    All values use SI units:
    - Accelerometer: m/s^2 (gravity-free user acceleration on most platforms)
    - Gyroscope: rad/s
    - Magnetometer: uT (microtesla)
    """
    kind: SampleKind
    x: float
    y: float
    z: float
    timestamp_ms: Optional[float] = None  # Monotonic milliseconds

    @property
    def vector(self) -> NDArray[np.float64]:
        """Reading as a vector [x, y, z]."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @property
    def magnitude(self) -> float:
        """Euclidean norm of the reading."""
        return float(np.linalg.norm(self.vector))

    def is_finite(self) -> bool:
        """Check all components are finite."""
        return bool(np.all(np.isfinite([self.x, self.y, self.z])))


@dataclass
class TrackerSnapshot:
    """Point-in-time copy of the tracker's public estimate."""
    step_count: int
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    orientation: NDArray[np.float64]
    is_calibrated: bool
    timestamp_ms: float

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "t_ms": self.timestamp_ms,
            "steps": self.step_count,
            "px": float(self.position[0]),
            "py": float(self.position[1]),
            "pz": float(self.position[2]),
            "vx": float(self.velocity[0]),
            "vy": float(self.velocity[1]),
            "vz": float(self.velocity[2]),
            "roll": float(self.orientation[0]),
            "pitch": float(self.orientation[1]),
            "yaw": float(self.orientation[2]),
            "calibrated": self.is_calibrated,
        }


@dataclass
class ValidationResult:
    """Result of sensor data validation."""
    is_valid: bool
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.is_valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


@dataclass
class ProcessingStats:
    """Counters for samples handled by a tracker."""
    total_samples: int = 0
    processed_samples: int = 0
    calibration_samples: int = 0
    ignored_samples: int = 0
    non_finite_samples: int = 0
    discarded_samples: int = 0
    faults: int = 0

    @property
    def discard_rate(self) -> float:
        """Fraction of samples rejected by the magnitude limits."""
        if self.total_samples == 0:
            return 0.0
        return self.discarded_samples / self.total_samples

    @property
    def fault_rate(self) -> float:
        """Fraction of samples that raised during processing."""
        if self.total_samples == 0:
            return 0.0
        return self.faults / self.total_samples

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": self.total_samples,
            "processed": self.processed_samples,
            "calibration": self.calibration_samples,
            "ignored": self.ignored_samples,
            "non_finite": self.non_finite_samples,
            "discarded": self.discarded_samples,
            "faults": self.faults,
        }
