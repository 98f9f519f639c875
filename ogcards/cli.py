"""Command-line entry point for site builds."""

from typing import Any, Dict, Optional, Sequence
import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

from ogcards.config.logging import get_logger, setup_logging
from ogcards.config.settings import reload_settings
from ogcards.core.build.orchestrator import BuildOrchestrator
from ogcards.core.errors import OgcardsError

logger = get_logger("ogcards.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ogcards",
        description="Build a static site with preview cards and post-render transforms",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Render the site and capture preview images")
    build.add_argument("--source", type=Path, help="Site source directory")
    build.add_argument("--destination", type=Path, help="Site output directory")
    build.add_argument(
        "--production",
        action="store_true",
        help="Keep preview pages out of the published site",
    )
    build.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    build.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Capture every preview before reporting failures",
    )
    return parser


def settings_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.source is not None:
        overrides["source_path"] = args.source
    if args.destination is not None:
        overrides["destination_path"] = args.destination
    if args.production:
        overrides["environment"] = "production"
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.continue_on_error:
        overrides["capture_continue_on_error"] = True
    return overrides


def run_build(args: argparse.Namespace) -> int:
    try:
        settings = reload_settings(**settings_overrides(args))
    except ValidationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 2

    setup_logging(settings)
    orchestrator = BuildOrchestrator(settings)
    try:
        report = asyncio.run(orchestrator.build())
    except OgcardsError as e:
        logger.error("Build failed", error=str(e))
        return 1

    logger.info(
        "Build complete",
        rendered=report.rendered,
        preview_pages=report.preview_pages,
        captured=len(report.captured),
        cached=len(report.cached),
        custom_images=len(report.custom_images),
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.command == "build":
        return run_build(args)
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
