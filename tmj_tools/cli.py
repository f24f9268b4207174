"""
Command line entry point.

    tmj-tools rotate   [--cw | --ccw] [--turns N] [--dry-run] [paths...]
    tmj-tools variants [--count N] [--tileset NAME] [--dry-run] [paths...]
    tmj-tools check    [--tileset NAME] [paths...]

Without paths, the configured map directories under --root are scanned for
*.json files. Every map is rewritten in place.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .batch import (
    CheckJob, FileStatus, MapJob, RotateJob, VariantJob, resolve_targets, run_batch
)
from .config import ToolConfig
from .logging_config import setup_logging
from .transform.direction import Direction


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return value


def build_parser(config: ToolConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmj-tools",
        description="Rotate Tiled JSON maps and assign floor tile variants"
    )
    parser.add_argument(
        "--root",
        default=".",
        help="Project root; relative paths and map directories resolve against it",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="More log output (-v info, -vv debug)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    rotate = commands.add_parser("rotate", help="Rotate maps by quarter turns")
    direction = rotate.add_mutually_exclusive_group()
    direction.add_argument("--cw", dest="direction", action="store_const",
                           const=Direction.CLOCKWISE, help="Clockwise (default)")
    direction.add_argument("--ccw", dest="direction", action="store_const",
                           const=Direction.COUNTERCLOCKWISE, help="Counter-clockwise")
    rotate.set_defaults(direction=Direction.CLOCKWISE)
    rotate.add_argument("--turns", type=int, default=1,
                        help="Number of quarter turns (default 1)")
    rotate.add_argument("--dry-run", action="store_true", help="Do not write files")
    rotate.add_argument("paths", nargs="*", help="Map files")

    variants = commands.add_parser("variants", help="Assign floor tile variants")
    variants.add_argument("--count", type=_positive_int, default=config.variant_count,
                          help=f"Number of variant tiles (default {config.variant_count})")
    variants.add_argument("--tileset", default=None,
                          help="Tileset holding the variants (default: first tileset)")
    variants.add_argument("--dry-run", action="store_true", help="Do not write files")
    variants.add_argument("paths", nargs="*", help="Map files")

    check = commands.add_parser("check", help="Check what the game client relies on")
    check.add_argument("--tileset", default=config.expected_tileset,
                       help=f"Expected tileset name (default {config.expected_tileset})")
    check.add_argument("paths", nargs="*", help="Map files")

    return parser


def make_job(args: argparse.Namespace, config: ToolConfig) -> MapJob:
    if args.command == "rotate":
        return RotateJob(args.direction, args.turns, config.property_aliases)
    if args.command == "variants":
        return VariantJob(args.count, args.tileset, config.floor_keywords)
    return CheckJob(args.tileset)


def _display(path: Path, root: Path) -> str:
    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)


def main(argv: Optional[List[str]] = None, config: Optional[ToolConfig] = None) -> int:
    try:
        config = config if config is not None else ToolConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    parser = build_parser(config)
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    root = Path(args.root)
    targets = resolve_targets(args.paths, root, config)
    if not targets:
        print("No map JSON files found.", file=sys.stderr)
        return 1

    job = make_job(args, config)
    report = run_batch(targets, job, write=not getattr(args, "dry_run", False))

    for result in report.results:
        path_text = _display(result.path, root)
        if result.status is FileStatus.OK:
            print(job.status_line(path_text, result.outcome))
        elif result.status is FileStatus.SKIPPED:
            print(f"Skipped {path_text}: {result.message}")
        else:
            print(f"Failed {result.message}", file=sys.stderr)

    if report.failed:
        print(f"{len(report.failed)} of {len(report.results)} map(s) failed", file=sys.stderr)
    return report.exit_code
