#!/usr/bin/env python3
"""
CLI entry point for the trackgate location filter.

Defines the following commands:
  trackgate replay FILE [--mode MODE] [threshold flags] [--decisions]
  trackgate profile [MODE] [threshold flags]
  trackgate serve [--host HOST] [--port 8000]
  trackgate version
"""

import json
import sys
from argparse import ArgumentParser, Namespace
from importlib.metadata import PackageNotFoundError, version as _get_version

import uvicorn
from rich.console import Console
from rich.table import Table

from trackgate.utils.log import get_logger, set_level
from trackgate.analysis.config import ThresholdOverrides, resolve_profile
from trackgate.analysis.session import ActivitySession
from trackgate.parsers.samples import load_samples
from trackgate.server import create_app

logger = get_logger(__name__)
console = Console()

# (flag, ThresholdOverrides field, type, help)
THRESHOLD_FLAGS = (
    ("--max-accuracy-meters", "max_accuracy_meters", float, "Weak-signal accuracy ceiling (m)."),
    ("--min-delta-seconds", "min_delta_seconds", float, "Minimum gap between samples (s)."),
    ("--smoothing-window-size", "smoothing_window_size", int, "Median smoothing window length."),
    ("--min-speed-mps", "min_speed_mps", float, "Reported speed counted as motion (m/s)."),
    ("--max-implicit-speed-mps", "max_implicit_speed_mps", float, "Anti-jump speed ceiling (m/s)."),
    ("--step-accuracy-factor", "step_accuracy_factor", float, "Step threshold accuracy factor."),
    ("--min-step-meters", "min_step_meters", float, "Step threshold floor (m)."),
)


def _overrides_from_args(args: Namespace) -> ThresholdOverrides:
    return ThresholdOverrides(**{dest: getattr(args, dest) for _, dest, _, _ in THRESHOLD_FLAGS})


def replay(path: str, mode: str, overrides: ThresholdOverrides, show_decisions: bool) -> None:
    """
    Feed a recorded sample file through an ActivitySession and print a summary.

    Parameters
    ----------
    path
        `.csv`, `.jsonl` or `.ndjson` file of samples, in time order.
    mode
        Activity mode tag.
    overrides
        Threshold overrides taking precedence over the mode presets.
    show_decisions
        Print one line per decision.
    """
    logger.info("Replay: path=%s, mode=%s", path, mode)
    samples, parsed = load_samples(path)
    logger.info("Loaded %d samples (%d skipped)", parsed.rows_parsed, parsed.rows_skipped)

    session = ActivitySession(mode, overrides)
    for sample in samples:
        decision = session.ingest(sample)
        if show_decisions:
            console.print(
                f"{sample.timestamp_ms} {decision.reason.value:<22} "
                f"d={decision.delta_dist_meters:8.2f}m dt={decision.delta_time_seconds:6.2f}s "
                f"state={session.state.value}"
            )

    summary = session.summary()
    table = Table(title=f"trackgate replay: {path}")
    table.add_column("metric")
    table.add_column("value", justify="right")
    table.add_row("mode", summary["mode"])
    table.add_row("samples", str(len(samples)))
    table.add_row("distance (m)", f"{summary['distance_m']:.1f}")
    table.add_row("elapsed (s)", f"{summary['elapsed_s']:.0f}")
    table.add_row("pace", summary["pace"])
    table.add_row("state", summary["state"] + (" (paused)" if summary["paused"] else ""))
    for reason, count in sorted(summary["reasons"].items()):
        table.add_row(f"reason: {reason}", str(count))
    console.print(table)


def profile(mode: str | None, overrides: ThresholdOverrides) -> None:
    """
    Print the resolved threshold profile as JSON.
    """
    resolved = resolve_profile(mode, overrides)
    print(json.dumps(resolved.to_dict(), indent=2))


def serve(host: str, port: int) -> None:
    """
    Spin up FastAPI+Uvicorn to serve per-session trackers.

    Parameters
    ----------
    host
        Interface to bind.
    port
        Port on which to serve HTTP.
    """
    logger.info("Serve: host=%s, port=%d", host, port)
    app = create_app()
    uvicorn.run(app, host=host, port=port)


def version() -> None:
    """
    Print the installed trackgate package version.
    """
    try:
        ver = _get_version("trackgate")
    except PackageNotFoundError:
        ver = "unknown"
    logger.info("trackgate version %s", ver)


def _add_threshold_flags(p: ArgumentParser) -> None:
    for flag, dest, typ, help_ in THRESHOLD_FLAGS:
        p.add_argument(flag, dest=dest, type=typ, default=None, help=help_)


def parse_args(argv: list[str] | None = None) -> Namespace:
    """
    Parse command-line arguments and return the populated namespace.
    """
    parser = ArgumentParser(prog="trackgate")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG shows every decision).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # trackgate replay
    p = subparsers.add_parser("replay", help="Replay a recorded sample file.")
    p.add_argument("path", type=str, help="CSV or JSON-lines sample file.")
    p.add_argument("--mode", type=str, default="default", help="Activity mode.")
    p.add_argument("--decisions", action="store_true", help="Print every decision.")
    _add_threshold_flags(p)

    # trackgate profile
    p = subparsers.add_parser("profile", help="Show the resolved threshold profile.")
    p.add_argument("mode", type=str, nargs="?", default="default", help="Activity mode.")
    _add_threshold_flags(p)

    # trackgate serve
    p = subparsers.add_parser("serve", help="Serve via FastAPI + Uvicorn.")
    p.add_argument("--host", type=str, default="127.0.0.1", help="Interface to bind.")
    p.add_argument(
        "--port", type=int, default=8000, help="Port number to serve on."
    )

    # trackgate version
    subparsers.add_parser("version", help="Show trackgate version and exit.")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """
    Entry point: dispatch to the selected subcommand.
    """
    args = parse_args(argv)
    set_level(args.log_level.upper())
    match args.command:
        case "replay":
            try:
                replay(args.path, args.mode, _overrides_from_args(args), args.decisions)
            except (OSError, KeyError, ValueError) as exc:
                logger.error("Replay failed: %s", exc)
                sys.exit(2)
        case "profile":
            try:
                profile(args.mode, _overrides_from_args(args))
            except ValueError as exc:
                logger.error("Invalid thresholds: %s", exc)
                sys.exit(2)
        case "serve":
            serve(args.host, args.port)
        case "version":
            version()
        case _:
            sys.exit(1)


if __name__ == "__main__":
    main()
