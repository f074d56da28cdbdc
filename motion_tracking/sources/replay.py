"""Replay of recorded sensor samples.

Log format is CSV with a header row:

    timestamp_ms,kind,x,y,z
    0.0,accel,0.01,-0.02,9.80
    0.0,gyro,0.001,0.0,-0.002

``kind`` accepts the short names (gyro, accel, mag) or the long names
(gyroscope, accelerometer, magnetometer).
"""

import csv
import logging
from pathlib import Path
from typing import Iterator, Union

from ..core.types import SampleKind, SensorSample

logger = logging.getLogger(__name__)

FIELDS = ("timestamp_ms", "kind", "x", "y", "z")


class SourceError(Exception):
    """Raised for unreadable or malformed sample logs."""


class CsvSampleSource:
    """Iterates over samples stored in a CSV log."""

    def __init__(self, path: Union[str, Path]):
        """Initialize source.

        Args:
            path: CSV log file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        self._path = Path(path)
        if not self._path.exists():
            raise FileNotFoundError(f"Sample log not found: {path}")
        self.rows_read = 0

    def __iter__(self) -> Iterator[SensorSample]:
        with open(self._path, "r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            missing = set(FIELDS) - set(reader.fieldnames or ())
            if missing:
                raise SourceError(
                    f"{self._path}: missing columns {sorted(missing)}"
                )

            for line_no, row in enumerate(reader, start=2):
                yield self._parse_row(row, line_no)
                self.rows_read += 1

        logger.info("Replayed %d samples from %s", self.rows_read, self._path)

    def _parse_row(self, row: dict, line_no: int) -> SensorSample:
        try:
            return SensorSample(
                kind=SampleKind.parse(row["kind"]),
                x=float(row["x"]),
                y=float(row["y"]),
                z=float(row["z"]),
                timestamp_ms=float(row["timestamp_ms"]),
            )
        except (TypeError, ValueError) as e:
            raise SourceError(f"{self._path}:{line_no}: {e}") from e


def write_samples(path: Union[str, Path], samples) -> int:
    """Write samples to a CSV log readable by CsvSampleSource.

    Returns:
        Number of rows written.
    """
    count = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(FIELDS)
        for s in samples:
            writer.writerow([s.timestamp_ms, s.kind.value, s.x, s.y, s.z])
            count += 1
    return count
