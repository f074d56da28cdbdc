"""Host-side tracking session.

Wraps a MotionTracker the way a device host drives it:
- Per-sensor throttling to a minimum update interval
- Non-finite readings dropped before they reach the tracker
- Raw accelerometer x/y blended into the tracker's velocity once calibrated
- Bounded in-memory history of map positions
"""

import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Tuple
import numpy as np
from numpy.typing import NDArray

from .core.config import Config, SourceConfig
from .core.types import SampleKind, SensorSample, TrackerSnapshot
from .fusion.tracker import MotionTracker, monotonic_ms
from .monitoring.metrics import PerformanceMonitor

logger = logging.getLogger(__name__)


class SampleThrottle:
    """Drops samples arriving sooner than interval_ms after the last
    accepted sample of the same kind."""

    def __init__(self, interval_ms: float):
        self._interval_ms = interval_ms
        self._last_accepted: Dict[SampleKind, float] = {}

    def accept(self, kind: SampleKind, timestamp_ms: float) -> bool:
        """Return True and record the time if the sample may pass."""
        last = self._last_accepted.get(kind)
        if last is not None and timestamp_ms - last < self._interval_ms:
            return False
        self._last_accepted[kind] = timestamp_ms
        return True

    def reset(self) -> None:
        """Forget all accepted times."""
        self._last_accepted.clear()


class VelocitySmoother:
    """Blends raw accelerometer x/y into a live velocity array.

    velocity.xy = raw.xy * alpha + velocity.xy * (1 - alpha)
    """

    def __init__(self, alpha: float):
        self._alpha = alpha

    def apply(self, velocity: NDArray[np.float64], raw_accel: NDArray[np.float64]) -> None:
        """Update velocity[0:2] in place."""
        velocity[0:2] = (
            raw_accel[0:2] * self._alpha + (1 - self._alpha) * velocity[0:2]
        )


class PathHistory:
    """Bounded list of positions projected to map offsets (lat, lon)."""

    def __init__(self, max_points: int, scale_deg_per_m: float,
                 origin: Tuple[float, float] = (0.0, 0.0)):
        self._points: Deque[Tuple[float, float]] = deque(maxlen=max_points)
        self._scale = scale_deg_per_m
        self._origin = origin

    def append(self, position: NDArray[np.float64]) -> Tuple[float, float]:
        """Project a position and append it."""
        point = (
            self._origin[0] + float(position[0]) * self._scale,
            self._origin[1] + float(position[1]) * self._scale,
        )
        self._points.append(point)
        return point

    @property
    def points(self) -> List[Tuple[float, float]]:
        """Recorded points, oldest first."""
        return list(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def clear(self) -> None:
        """Remove all points."""
        self._points.clear()


class TrackingSession:
    """Feeds samples from a source into a tracker.

    Usage:
        session = TrackingSession(config)
        for sample in source:
            if session.feed(sample):
                print(session.snapshot().to_dict())
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        tracker: Optional[MotionTracker] = None,
        clock: Callable[[], float] = monotonic_ms,
    ):
        """Initialize session.

        Args:
            config: System configuration. Defaults are used if None.
            tracker: Tracker to drive. Built from config if None.
            clock: Millisecond clock for samples without a timestamp.
        """
        self._config = config if config is not None else Config()
        self._clock = clock
        src: SourceConfig = self._config.source

        self.tracker = tracker if tracker is not None else MotionTracker(
            self._config, clock=clock
        )
        self.throttle = SampleThrottle(src.update_interval_ms)
        self.smoother = VelocitySmoother(src.velocity_smoothing_alpha)
        self.path = PathHistory(src.max_path_points, src.map_scale_deg_per_m)
        self.monitor = PerformanceMonitor(self._config)

        self.throttled_samples = 0
        self.rejected_samples = 0

    def feed(self, sample: SensorSample) -> bool:
        """Deliver one sample.

        Args:
            sample: Raw sensor sample.

        Returns:
            True if the sample was forwarded to the tracker.
        """
        timestamp_ms = (
            sample.timestamp_ms if sample.timestamp_ms is not None
            else self._clock()
        )

        if not self.throttle.accept(sample.kind, timestamp_ms):
            self.throttled_samples += 1
            return False

        if not sample.is_finite():
            self.rejected_samples += 1
            logger.debug("Rejected non-finite %s sample", sample.kind.value)
            return False

        stamped = SensorSample(sample.kind, sample.x, sample.y, sample.z, timestamp_ms)

        self.monitor.start_sample()
        self.tracker.process(stamped)

        if sample.kind is SampleKind.ACCELEROMETER and self.tracker.is_calibrated:
            self.smoother.apply(self.tracker.velocity, stamped.vector)
            self.path.append(self.tracker.position)

        self.monitor.end_sample(timestamp_ms, self.tracker.stats)
        return True

    def recalibrate(self) -> None:
        """Forward a recalibration request to the tracker."""
        self.tracker.recalibrate()

    def snapshot(self) -> TrackerSnapshot:
        """Current tracker estimate."""
        return self.tracker.snapshot()
