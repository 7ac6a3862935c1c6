"""Command-line interface for depmap."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from depmap.config import ConfigError, parse_format_config
from depmap.pipeline import run
from depmap.renderer import FORMATS
from depmap.semantic.base import LoadError

logger = logging.getLogger("depmap")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="depmap",
        description="Symbol-level dependency graphs with connected-component ranking.",
    )
    parser.add_argument(
        "project_dir",
        type=Path,
        nargs="?",
        default=Path("."),
        help="Path to the project to analyze (default: current directory)",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default=None,
        help="Output format (default: json)",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help='JSON object of formatter options, e.g. \'{"pretty": false}\'',
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--components",
        action="store_true",
        default=None,
        help="Compute and rank connected components",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help="Worker threads for reference resolution",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable progress (-v) or debug (-vv) output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s", stream=sys.stderr)
    if args.verbose:
        logger.setLevel(logging.DEBUG if args.verbose > 1 else logging.INFO)

    try:
        options = parse_format_config(args.config)
        run(
            args.project_dir,
            output=args.output,
            fmt=args.format,
            formatter_options=options,
            components=args.components,
            workers=max(1, args.jobs),
        )
    except (ConfigError, LoadError) as e:
        logger.error("%s", e)
        sys.exit(1)
