"""Command line entry point: convert an octile map to polygons and a CDT mesh."""

import argparse
import logging
import sys
from typing import List, Optional

import structlog

from .config import settings
from .errors import GridMeshError, InputFormatError
from .pipeline import run_cdt, run_poly

logger = structlog.get_logger()


def configure_logging(level: str = "INFO", log_format: str = "console"):
    """Configure structlog for command line use."""
    logging.basicConfig(
        format="%(message)s", stream=sys.stderr, level=level.upper(), force=True
    )
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-gridmesh",
        description="Convert an octile grid map into polygons and a CDT navigation mesh",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--cdt",
        dest="mode",
        action="store_const",
        const="cdt",
        help="Convert grid map to CDT mesh (default)",
    )
    mode.add_argument(
        "--poly",
        dest="mode",
        action="store_const",
        const="poly",
        help="Only convert grid map to polygons",
    )
    parser.add_argument(
        "--has-outside",
        action="store_true",
        default=None,
        help="Treat the area outside the map as traversable",
    )
    parser.add_argument("--log-level", default=None, help="Logging level")
    parser.add_argument("map", help="Input octile map (.map)")
    parser.set_defaults(mode="cdt")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    run_settings = settings.model_copy()
    if args.has_outside is not None:
        run_settings.has_outside = args.has_outside
    if args.log_level is not None:
        run_settings.log_level = args.log_level

    configure_logging(run_settings.log_level, run_settings.log_format)

    try:
        if args.mode == "poly":
            run_poly(args.map, run_settings)
        else:
            run_cdt(args.map, run_settings)
    except InputFormatError as e:
        logger.error("Malformed input", map=args.map, error=str(e))
        return 1
    except GridMeshError as e:
        logger.error("Conversion failed", map=args.map, error=str(e), kind=type(e).__name__)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
