#!/usr/bin/env python3
"""main.py: CLI entry point for the diversity engine.

Usage:
    python main.py <command> [options]

Commands:
    generate  - Write N augmented variants of one source image
    help      - Show this help message

Examples:
    python main.py generate photo.png
    python main.py generate photo.png --count 50 --harshness 80 --zip
    python main.py generate photo.png --seed 7 --output ./dataset --dry-run
    python main.py help
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from pathlib import Path

parser: argparse.ArgumentParser


def cmd_generate(args: argparse.Namespace) -> int:
    """Run one batch and write it to disk."""
    from diversity_engine.archive import write_directory, write_zip
    from diversity_engine.config import Config
    from diversity_engine.driver import run_batch
    from diversity_engine.exceptions import EngineError
    from diversity_engine.image import SourceImage
    from diversity_engine.params import AugmentationParams

    try:
        Config.configure(
            max_workers=args.workers,
            output_format=args.format,
            output_dir=args.output,
        )
        cfg = Config.get_config()
        source = SourceImage.from_path(args.source)
        params = AugmentationParams(
            harshness=args.harshness,
            light_aging=args.light_aging,
            dirtiness=args.dirtiness,
        )
    except EngineError as exc:
        print(f"Error: {exc}")
        return 1

    print(f"Source   : {args.source} ({source.width}x{source.height})")
    print(
        f"Knobs    : harshness={params.harshness:g} "
        f"light_aging={params.light_aging:g} dirtiness={params.dirtiness:g}"
    )

    cancel = threading.Event()
    samples = []
    status = "done"

    def on_interrupt(signum, frame):
        # Second Ctrl-C falls through to the default handler
        signal.signal(signal.SIGINT, previous)
        print("\nInterrupted; finishing current sample...")
        cancel.set()

    previous = signal.signal(signal.SIGINT, on_interrupt)
    try:
        for event in run_batch(source, params, args.count, cancel, seed=args.seed):
            kind = event["type"]
            if kind == "progress":
                print(f"  [{event['current']:>4}/{event['total']}] {event['file_name']}")
            elif kind == "error":
                print(f"Error: {event['message']}")
                return 1
            elif kind in ("done", "cancelled"):
                samples = event["samples"]
                status = kind
    except EngineError as exc:
        print(f"Error: {exc}")
        return 1
    finally:
        signal.signal(signal.SIGINT, previous)

    written = 0
    target: Path = cfg.output_dir
    if not args.dry_run and samples:
        try:
            if args.zip:
                target = write_zip(samples, cfg.output_dir)
            else:
                write_directory(samples, cfg.output_dir)
        except EngineError as exc:
            print(f"Error: {exc}")
            return 1
        written = len(samples)

    print(f"\n{'='*60}")
    print(f"  Status   : {status}")
    print(f"  Samples  : {len(samples)}")
    print(f"  Written  : {written}")
    if args.seed is not None:
        print(f"  Seed     : {args.seed}")
    if args.dry_run:
        print("  [DRY RUN -- no files written]")
    else:
        print(f"  Output   : {target}")
    print(f"{'='*60}")
    return 130 if status == "cancelled" else 0


def cmd_help(args: argparse.Namespace) -> int:
    """Show help message."""
    parser.print_help()
    return 0


def build_parser() -> argparse.ArgumentParser:
    from diversity_engine.constants import (
        DEFAULT_DIRTINESS,
        DEFAULT_HARSHNESS,
        DEFAULT_LIGHT_AGING,
        DEFAULT_SAMPLE_COUNT,
    )

    p = argparse.ArgumentParser(
        description="Diversity Engine CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py generate photo.png
  python main.py generate photo.png --count 50 --harshness 80 --zip
  python main.py generate photo.png --seed 7 --dry-run
        """,
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = p.add_subparsers(dest="command", help="Available commands")

    gen = subparsers.add_parser("generate", help="Write augmented variants of an image")
    gen.add_argument("source", metavar="IMAGE", help="Source image file")
    gen.add_argument(
        "--count",
        type=int,
        default=DEFAULT_SAMPLE_COUNT,
        metavar="N",
        help=f"Number of samples (default: {DEFAULT_SAMPLE_COUNT})",
    )
    gen.add_argument(
        "--harshness",
        type=float,
        default=DEFAULT_HARSHNESS,
        metavar="PCT",
        help="Noise and weather intensity, 0-100",
    )
    gen.add_argument(
        "--light-aging",
        type=float,
        default=DEFAULT_LIGHT_AGING,
        metavar="PCT",
        help="Lighting distortion and glare intensity, 0-100",
    )
    gen.add_argument(
        "--dirtiness",
        type=float,
        default=DEFAULT_DIRTINESS,
        metavar="PCT",
        help="Dirt / lens artifact density, 0-100",
    )
    gen.add_argument("--seed", type=int, default=None, help="Seed for a reproducible batch")
    gen.add_argument(
        "--workers",
        type=int,
        default=None,
        metavar="N",
        help="Worker threads (default: DIVERSITY_MAX_WORKERS or min(4, CPUs))",
    )
    gen.add_argument(
        "--format",
        choices=["jpeg", "webp"],
        default=None,
        help="Output encoding (default: jpeg)",
    )
    gen.add_argument(
        "--output",
        default=os.environ.get("DIVERSITY_OUTPUT_DIR"),
        metavar="DIR",
        help="Output directory (default: ./augmented)",
    )
    gen.add_argument("--zip", action="store_true", help="Write one zip archive")
    gen.add_argument("--dry-run", action="store_true", help="Generate without writing files")

    subparsers.add_parser("help", help="Show this help message")
    return p


def main(argv: list[str] | None = None) -> int:
    global parser

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(asctime)s] %(levelname)s: %(message)s",
    )

    if args.command == "generate":
        return cmd_generate(args)
    return cmd_help(args)


if __name__ == "__main__":
    sys.exit(main())
