"""Gyroscope orientation integration."""

import math
import numpy as np
from numpy.typing import NDArray


def normalize_angle(angle: float) -> float:
    """Wrap angle into [-pi, pi] by repeated 2*pi steps."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle < -math.pi:
        angle += 2 * math.pi
    return angle


class OrientationIntegrator:
    """Integrates angular rate into per-axis angles (rad).

    This is plain Euler-angle accumulation, not a rotation composition.
    """

    def __init__(self):
        self.orientation = np.zeros(3)

    def update(self, gyro: NDArray[np.float64], dt: float) -> None:
        """Add gyro * dt and wrap each component."""
        raw = self.orientation + np.asarray(gyro, dtype=np.float64) * dt
        self.orientation = np.array([normalize_angle(float(a)) for a in raw])
