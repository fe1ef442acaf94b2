"""CLI entry point: parses flags, drives the engine, reports to stdout."""

import argparse
import sys
from typing import List, Optional

from .config import apply_overrides, load_config
from .engine import run_engine
from .stats import RunStats
from .syntax import LANGUAGES


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsdedupe",
        description="Replace repeated string literals in scripts with"
        " scope-local variables.",
    )
    parser.add_argument("files", nargs="+", help="JavaScript/TypeScript files")
    parser.add_argument(
        "-s",
        "--addScope",
        dest="add_scope",
        action="store_true",
        default=None,
        help="wrap the whole script in an IIFE",
    )
    parser.add_argument(
        "-c",
        "--cleanStrings",
        dest="clean_strings",
        action="store_true",
        default=None,
        help="collapse repeated whitespace in extracted strings",
    )
    parser.add_argument(
        "-m",
        "--minInstances",
        dest="min_instances",
        type=_positive_int,
        help="'all' strategy: occurrence count a string must exceed",
    )
    parser.add_argument(
        "-l",
        "--minLength",
        dest="min_length",
        type=_positive_int,
        help="'all' strategy: length a string must exceed",
    )
    parser.add_argument(
        "-t", "--type", choices=("gzip", "all"), help="selection strategy"
    )
    parser.add_argument("--language", choices=LANGUAGES, help="grammar to parse with")
    parser.add_argument(
        "--suffix",
        dest="output_suffix",
        help="inserted before the extension of each output file (default .min)",
    )
    parser.add_argument(
        "--no-verify",
        dest="verify_output",
        action="store_false",
        default=None,
        help="do not re-parse outputs before writing them",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = _build_parser().parse_args(argv)
    config = load_config()
    overrides = {k: v for k, v in vars(args).items() if k != "files" and v is not None}
    apply_overrides(config, overrides)

    run_stats = RunStats()
    try:
        for message in run_engine(args.files, config=config, stats=run_stats):
            print(message)
    except ValueError as exc:
        print(f"jsdedupe: {exc}", file=sys.stderr)
        sys.exit(1)
    for line in run_stats.format_summary():
        print(line)
    if run_stats.files_skipped:
        sys.exit(1)
