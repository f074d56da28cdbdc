#!/usr/bin/env python3
"""Command line entry point for motion tracking.

Usage:
    motion-tracking --mock                    # Synthetic walk
    motion-tracking --replay samples.csv      # Replay a recorded log
    motion-tracking --replay samples.csv --output csv
    motion-tracking --mock --recalibrate-at 5000

Tracker snapshots are written to stdout; logs go to stderr.
"""

import argparse
import json
import logging
import sys
from typing import Iterable, Optional, TextIO

from .core import Config, SensorSample, TrackerSnapshot, load_config
from .session import TrackingSession
from .sources import CsvSampleSource, MockSampleSource, SourceError

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("t_ms", "steps", "px", "py", "pz", "vx", "vy", "vz",
               "roll", "pitch", "yaw", "calibrated")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: If True, set DEBUG level; otherwise INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def format_snapshot(snapshot: TrackerSnapshot, output: str) -> str:
    """Render a snapshot as json, csv or minimal text."""
    data = snapshot.to_dict()
    if output == "json":
        return json.dumps(data)
    if output == "csv":
        return ",".join(str(data[c]) for c in CSV_COLUMNS)
    return (
        f"t={data['t_ms']:.0f}ms steps={data['steps']} "
        f"pos=({data['px']:.2f}, {data['py']:.2f}, {data['pz']:.2f}) "
        f"yaw={data['yaw']:.2f}"
    )


def run_session(
    session: TrackingSession,
    samples: Iterable[SensorSample],
    output: str = "json",
    every: int = 10,
    recalibrate_at_ms: Optional[float] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """Feed samples through a session and emit snapshots.

    Args:
        session: Session to drive.
        samples: Sample iterable.
        output: Output format (json/csv/minimal).
        every: Emit one snapshot per this many forwarded samples.
        recalibrate_at_ms: Request recalibration at this sample time.
        stream: Output stream. Defaults to sys.stdout at call time.

    Returns:
        Number of samples forwarded to the tracker.
    """
    if stream is None:
        stream = sys.stdout
    forwarded = 0
    recalibrated = recalibrate_at_ms is None

    if output == "csv":
        print(",".join(CSV_COLUMNS), file=stream)

    for sample in samples:
        if (not recalibrated and sample.timestamp_ms is not None
                and sample.timestamp_ms >= recalibrate_at_ms):
            session.recalibrate()
            recalibrated = True

        if not session.feed(sample):
            continue

        forwarded += 1
        if session.tracker.is_calibrated and forwarded % every == 0:
            print(format_snapshot(session.snapshot(), output), file=stream, flush=True)

    return forwarded


def log_summary(session: TrackingSession) -> None:
    """Log final statistics."""
    stats = session.tracker.stats
    perf = session.monitor.get_stats()
    snapshot = session.snapshot()

    logger.info("Final statistics:")
    logger.info("  Samples: %d total, %d processed, %d calibration",
                stats.total_samples, stats.processed_samples, stats.calibration_samples)
    logger.info("  Discarded: %d, non-finite: %d, faults: %d",
                stats.discarded_samples, stats.non_finite_samples, stats.faults)
    logger.info("  Throttled: %d", session.throttled_samples)
    logger.info("  Effective rate: %.1f Hz", perf.effective_rate_hz)
    logger.info("  Steps: %d", snapshot.step_count)
    logger.info("  Position: [%.2f, %.2f, %.2f] m", *snapshot.position)


def main(argv: Optional[list] = None) -> int:
    """Application entry point.

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        description="Inertial motion tracking with Kalman filtering and step counting"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--replay",
        type=str,
        help="CSV sample log to replay (timestamp_ms,kind,x,y,z)",
    )
    source.add_argument(
        "--mock",
        action="store_true",
        help="Use synthetic samples",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "-o", "--output",
        choices=("json", "csv", "minimal"),
        default="json",
        help="Snapshot output format",
    )
    parser.add_argument(
        "--every",
        type=int,
        default=10,
        help="Emit one snapshot every N forwarded samples",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Mock source duration in seconds",
    )
    parser.add_argument(
        "--recalibrate-at",
        type=float,
        default=None,
        help="Request recalibration at this sample time (ms)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except Exception as e:
        logger.error("Failed to load configuration: %s", e)
        return 1

    if args.every < 1:
        logger.error("--every must be at least 1")
        return 1

    try:
        if args.mock:
            samples = MockSampleSource(config, duration_s=args.duration)
        else:
            samples = CsvSampleSource(args.replay)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1

    session = TrackingSession(config)

    try:
        run_session(
            session,
            samples,
            output=args.output,
            every=args.every,
            recalibrate_at_ms=args.recalibrate_at,
        )
    except SourceError as e:
        logger.error("Sample source error: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        log_summary(session)

    return 0


if __name__ == "__main__":
    sys.exit(main())
