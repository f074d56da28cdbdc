"""Performance metrics and monitoring for the tracking loop."""

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional, Deque
import numpy as np

from ..core.config import Config
from ..core.types import ProcessingStats

logger = logging.getLogger(__name__)


@dataclass
class SampleMetrics:
    """Metrics for a single processed sample."""
    timestamp_ms: float
    interval_ms: float
    processing_time_ms: float
    iteration: int


@dataclass
class PerformanceStats:
    """Aggregated performance statistics."""
    mean_interval_ms: float
    std_interval_ms: float
    max_interval_ms: float
    min_interval_ms: float
    mean_processing_ms: float
    max_processing_ms: float
    effective_rate_hz: float
    total_iterations: int


class PerformanceMonitor:
    """Monitors sample timing and processing cost.

    Tracks inter-sample intervals and per-sample processing time, and
    periodically logs a summary together with tracker counters.
    """

    def __init__(self, config: Config):
        """Initialize performance monitor.

        Args:
            config: System configuration with monitoring settings.
        """
        self._mon_cfg = config.monitoring

        window = self._mon_cfg.window_size
        self._interval_history: Deque[float] = deque(maxlen=window)
        self._processing_history: Deque[float] = deque(maxlen=window)

        self._iteration = 0
        self._last_log_time = time.time()
        self._last_timestamp: Optional[float] = None
        self._start_time: Optional[float] = None

        self._target_interval_ms = 1000.0 / self._mon_cfg.target_hz
        self._jitter_threshold = self._mon_cfg.jitter_warning_ms

    def start_sample(self) -> None:
        """Mark the start of sample processing."""
        self._start_time = time.perf_counter()

    def end_sample(
        self,
        timestamp_ms: float,
        stats: Optional[ProcessingStats] = None,
    ) -> SampleMetrics:
        """Mark the end of sample processing and compute metrics.

        Args:
            timestamp_ms: Sample timestamp in milliseconds.
            stats: Tracker counters to include in periodic logs.

        Returns:
            Metrics for this sample.
        """
        now = time.perf_counter()
        processing_ms = 0.0

        if self._start_time is not None:
            processing_ms = (now - self._start_time) * 1000

        interval_ms = 0.0
        if self._last_timestamp is not None:
            interval_ms = timestamp_ms - self._last_timestamp
            self._interval_history.append(interval_ms)

        self._processing_history.append(processing_ms)
        self._last_timestamp = timestamp_ms
        self._iteration += 1

        if interval_ms > self._target_interval_ms + self._jitter_threshold:
            logger.debug(
                "High jitter: interval=%.2f ms (target=%.2f ms)",
                interval_ms, self._target_interval_ms
            )

        self._maybe_log_stats(stats)

        return SampleMetrics(
            timestamp_ms=timestamp_ms,
            interval_ms=interval_ms,
            processing_time_ms=processing_ms,
            iteration=self._iteration,
        )

    def _maybe_log_stats(self, stats: Optional[ProcessingStats]) -> None:
        """Log statistics periodically."""
        now = time.time()

        if now - self._last_log_time >= self._mon_cfg.log_interval_s:
            perf = self.get_stats()
            logger.info(
                "Performance: rate=%.1f Hz, interval=%.2f+/-%.2f ms, "
                "processing=%.3f ms",
                perf.effective_rate_hz,
                perf.mean_interval_ms,
                perf.std_interval_ms,
                perf.mean_processing_ms,
            )
            if stats is not None:
                logger.info(
                    "Samples: %d total, %d discarded, %d faults",
                    stats.total_samples, stats.discarded_samples, stats.faults,
                )
            self._last_log_time = now

    def get_stats(self) -> PerformanceStats:
        """Get aggregated performance statistics.

        Returns:
            PerformanceStats with current metrics.
        """
        if not self._interval_history:
            return PerformanceStats(
                mean_interval_ms=0.0,
                std_interval_ms=0.0,
                max_interval_ms=0.0,
                min_interval_ms=0.0,
                mean_processing_ms=(
                    float(np.mean(self._processing_history))
                    if self._processing_history else 0.0
                ),
                max_processing_ms=(
                    float(np.max(self._processing_history))
                    if self._processing_history else 0.0
                ),
                effective_rate_hz=0.0,
                total_iterations=self._iteration,
            )

        interval_array = np.array(self._interval_history)
        processing_array = np.array(self._processing_history)

        mean_interval = float(np.mean(interval_array))
        effective_rate = 1000.0 / mean_interval if mean_interval > 0 else 0.0

        return PerformanceStats(
            mean_interval_ms=mean_interval,
            std_interval_ms=float(np.std(interval_array)),
            max_interval_ms=float(np.max(interval_array)),
            min_interval_ms=float(np.min(interval_array)),
            mean_processing_ms=float(np.mean(processing_array)),
            max_processing_ms=float(np.max(processing_array)),
            effective_rate_hz=effective_rate,
            total_iterations=self._iteration,
        )

    def reset(self) -> None:
        """Reset all metrics."""
        self._interval_history.clear()
        self._processing_history.clear()
        self._iteration = 0
        self._last_timestamp = None
        self._start_time = None
