#!/usr/bin/env python3
"""Command-line plantar pressure analysis of a footprint photo."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from footprint.config import Settings
from footprint.errors import InvalidImageError
from footprint.models import RawImage
from footprint.pipeline import analyze_footprint, build_analyzer


def configure_logging(level: str) -> None:
    """Configure the root logger with a sensible default format."""

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse command-line arguments."""

    parser = argparse.ArgumentParser(
        description="Derive a pressure map and region breakdown from a footprint-on-glass photo."
    )
    parser.add_argument("--image", type=Path, required=True, help="Footprint photo path")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory to write outputs (default: same directory as the photo)",
    )
    parser.add_argument(
        "--mm-per-pixel",
        type=float,
        default=None,
        help="Calibration factor overriding FOOTPRINT_MM_PER_PIXEL",
    )
    parser.add_argument(
        "--edge-threshold",
        type=float,
        default=None,
        help="Laplacian threshold for the outline overlay (default: FOOTPRINT_EDGE_THRESHOLD or 40)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Vision request timeout in seconds (default: FOOTPRINT_VISION_TIMEOUT or 30)",
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip the vision model and use the deterministic local analysis only.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides = {
        "mm_per_pixel": args.mm_per_pixel,
        "edge_threshold": args.edge_threshold,
        "vision_timeout": args.timeout,
    }
    return dataclasses.replace(settings, **{k: v for k, v in overrides.items() if v is not None})


def run_pipeline(args: argparse.Namespace) -> Path:
    """Analyse the photo and write mask, pressure map and JSON result."""

    configure_logging(args.log_level)
    if not args.image.exists():
        raise FileNotFoundError(f"Missing required input file: {args.image}")

    settings = _settings_from_args(args)
    output_dir = args.output_dir or args.image.parent
    output_dir.mkdir(parents=True, exist_ok=True)

    raw = RawImage(data=args.image.read_bytes(), filename=args.image.name)
    analyzer = build_analyzer(settings, offline=args.offline)
    report = analyze_footprint(raw, analyzer, edge_threshold=settings.edge_threshold)

    stem = args.image.stem
    (output_dir / f"{stem}_mask.png").write_bytes(report.mask_png())
    (output_dir / f"{stem}_pressure.png").write_bytes(report.pressure_png())
    result_path = output_dir / f"{stem}_analysis.json"
    result_path.write_text(json.dumps(report.result.to_dict(), indent=2))
    logging.info("Analysis saved to %s", result_path)

    print(json.dumps(report.result.to_dict(), indent=2))
    return result_path


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""

    argv = argv if argv is not None else sys.argv[1:]
    args = parse_args(argv)
    try:
        run_pipeline(args)
    except (InvalidImageError, FileNotFoundError, ValueError) as exc:
        logging.error("Analysis failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())
