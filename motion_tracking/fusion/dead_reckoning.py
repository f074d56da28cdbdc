"""Dead-reckoning velocity and position integration."""

import numpy as np
from numpy.typing import NDArray

from ..core.config import IntegrationConfig


class DeadReckoning:
    """Integrates filtered acceleration into velocity and position.

    Gravity is removed as a fixed world-frame vector (0, 0, g); the
    device is assumed level. Velocity is damped on every update and
    snapped to zero below a threshold.

    The velocity array is updated in place so that references held by
    a consumer stay live.
    """

    def __init__(self, config: IntegrationConfig):
        self._gravity = np.array([0.0, 0.0, config.gravity_magnitude])
        self._damping = config.damping_factor
        self._zero_threshold = config.velocity_zero_threshold

        self.velocity = np.zeros(3)
        self.position = np.zeros(3)

    def update(self, accel: NDArray[np.float64], dt: float) -> None:
        """Advance velocity and position by one time step.

        Args:
            accel: Filtered acceleration including gravity (m/s^2).
            dt: Time step in seconds.
        """
        compensated = self.remove_gravity(accel)

        self.velocity += compensated * dt
        self._apply_drift_compensation()

        self.position += self.velocity * dt

    def remove_gravity(self, accel: NDArray[np.float64]) -> NDArray[np.float64]:
        """Subtract the fixed gravity vector."""
        return np.asarray(accel, dtype=np.float64) - self._gravity

    def _apply_drift_compensation(self) -> None:
        self.velocity *= self._damping

        if np.linalg.norm(self.velocity) < self._zero_threshold:
            self.velocity[:] = 0.0

    def reset_velocity(self) -> None:
        """Zero velocity, keeping position."""
        self.velocity[:] = 0.0
