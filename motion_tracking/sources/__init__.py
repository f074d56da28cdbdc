"""Sample sources for motion tracking."""

from .replay import CsvSampleSource, SourceError, write_samples
from .mock import MockSampleSource

__all__ = ["CsvSampleSource", "SourceError", "write_samples", "MockSampleSource"]
