"""Fixed-size Kalman filter for accelerometer smoothing.

State: one 3x3 matrix, one column per spatial axis packed together
rather than three independent 1-D filters.

Process model:
- Constant-acceleration transition with entries (0,1)=dt, (0,2)=dt^2/2,
  (1,2)=dt rewritten every step

Measurement model:
- Identity measurement matrix; the measurement enters as diag(x, y, z)

The filtered output is the first column of the state matrix.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import numpy as np
from numpy.typing import NDArray

from ..core.config import KalmanConfig
from ..core.matrix3 import Matrix3

logger = logging.getLogger(__name__)


class CovarianceUpdate(str, Enum):
    """How the error covariance is handled after the measurement update."""
    PREDICT_ONLY = "predict_only"  # P is never contracted
    STANDARD = "standard"          # P = (I - K @ H) @ P


@dataclass
class FilterState:
    """Per-step mutable matrices of the filter."""
    state_matrix: Matrix3
    error_covariance: Matrix3
    transition_matrix: Matrix3

    @classmethod
    def initial(cls, initial_covariance: float = 1.0) -> "FilterState":
        """Zero state, scaled identity covariance, identity transition."""
        return cls(
            state_matrix=Matrix3.zeros(),
            error_covariance=Matrix3.diagonal([initial_covariance] * 3),
            transition_matrix=Matrix3.identity(),
        )


class KalmanFilter3:
    """Kalman filter over a packed 3x3 state.

    Process noise, measurement noise and measurement matrix are fixed at
    construction. Only the state, covariance and transition matrices
    change between steps.
    """

    def __init__(
        self,
        process_noise: Matrix3,
        measurement_noise: Matrix3,
        measurement_matrix: Optional[Matrix3] = None,
        initial_covariance: float = 1.0,
        covariance_update: CovarianceUpdate = CovarianceUpdate.PREDICT_ONLY,
    ):
        """Initialize filter.

        Args:
            process_noise: Q, added to the covariance on every prediction.
            measurement_noise: R, added to the innovation covariance.
            measurement_matrix: H, identity if None.
            initial_covariance: Diagonal value of the initial covariance.
            covariance_update: Post-update covariance strategy.
        """
        self._process_noise = process_noise.copy()
        self._measurement_noise = measurement_noise.copy()
        self._measurement_matrix = (
            measurement_matrix.copy() if measurement_matrix is not None
            else Matrix3.identity()
        )
        self._initial_covariance = initial_covariance
        self._covariance_update = CovarianceUpdate(covariance_update)
        self._state = FilterState.initial(initial_covariance)
        self.update_count = 0

    @classmethod
    def from_config(cls, config: KalmanConfig) -> "KalmanFilter3":
        """Build a filter with diagonal noise matrices from configuration."""
        return cls(
            process_noise=Matrix3.diagonal([config.process_noise] * 3),
            measurement_noise=Matrix3.diagonal([config.measurement_noise] * 3),
            initial_covariance=config.initial_covariance,
            covariance_update=CovarianceUpdate(config.covariance_update),
        )

    @property
    def covariance_update(self) -> CovarianceUpdate:
        """Active covariance strategy."""
        return self._covariance_update

    def step(self, measurement: NDArray[np.float64], dt: float) -> NDArray[np.float64]:
        """Run one predict + update cycle.

        Args:
            measurement: Bias-corrected acceleration [x, y, z].
            dt: Time step in seconds.

        Returns:
            First column of the updated state matrix.

        Raises:
            SingularMatrixError: If the innovation covariance cannot be
                inverted. The predicted state is kept, the update is skipped.
        """
        self._update_transition(dt)

        F = self._state.transition_matrix
        H = self._measurement_matrix

        # Predict
        self._state.state_matrix = F @ self._state.state_matrix
        self._state.error_covariance = (
            F @ self._state.error_covariance @ F.transpose() + self._process_noise
        )

        # Measurement update
        Z = Matrix3.diagonal(measurement)
        innovation = Z - H @ self._state.state_matrix
        K = self._kalman_gain()

        self._state.state_matrix = self._state.state_matrix + K @ innovation

        if self._covariance_update is CovarianceUpdate.STANDARD:
            I = Matrix3.identity()
            self._state.error_covariance = (I - K @ H) @ self._state.error_covariance

        self.update_count += 1
        return self._state.state_matrix.column(0)

    def _update_transition(self, dt: float) -> None:
        """Rewrite the dt-dependent transition entries."""
        F = self._state.transition_matrix
        F.set(0, 1, dt)
        F.set(0, 2, 0.5 * dt * dt)
        F.set(1, 2, dt)

    def _kalman_gain(self) -> Matrix3:
        """K = P @ H.T @ (H @ P @ H.T + R)^-1"""
        P = self._state.error_covariance
        H = self._measurement_matrix
        S = H @ P @ H.transpose() + self._measurement_noise
        return P @ H.transpose() @ S.inverse()

    def reset(self) -> None:
        """Return to zero state and initial covariance."""
        self._state = FilterState.initial(self._initial_covariance)
        self.update_count = 0
        logger.debug("Kalman filter reset")

    def get_state(self) -> Matrix3:
        """Copy of the current state matrix."""
        return self._state.state_matrix.copy()

    def get_covariance(self) -> Matrix3:
        """Copy of the current error covariance."""
        return self._state.error_covariance.copy()

    def get_transition(self) -> Matrix3:
        """Copy of the current transition matrix."""
        return self._state.transition_matrix.copy()

    def get_covariance_trace(self) -> float:
        """Trace of the error covariance (total uncertainty)."""
        return float(np.trace(self._state.error_covariance.to_array()))
