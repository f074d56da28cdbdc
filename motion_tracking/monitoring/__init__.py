"""Performance monitoring module for motion tracking."""

from .metrics import PerformanceMonitor, PerformanceStats, SampleMetrics

__all__ = ["PerformanceMonitor", "PerformanceStats", "SampleMetrics"]
