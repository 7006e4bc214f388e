"""CLI entry point: ``python -m elm327diag [-d <device>] [-f <file>] [-o]``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, NoReturn, Optional

import structlog

from elm327diag.errors import DiagError, UsageError

_DESCRIPTION = (
    "Diagnostics utility for ELM327 devices: reads Mode 1 data through "
    "a vehicle's OBD-II port and writes it to a text report."
)


class _ArgumentParser(argparse.ArgumentParser):
    """argparse parser that raises ``UsageError`` instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="elm327diag", description=_DESCRIPTION)
    parser.add_argument(
        "-d",
        dest="device",
        metavar="<string>",
        default=None,
        help="device name (default: /dev/pts/8, 'sim' for simulation)",
    )
    parser.add_argument(
        "-f",
        dest="output_file",
        metavar="<string>",
        default=None,
        help="output file name (default: carstats.csv)",
    )
    parser.add_argument(
        "-o",
        dest="defaults",
        action="store_true",
        help="dummy option (useful because at least one option is needed)",
    )
    return parser


def parse_args(argv: List[str]) -> argparse.Namespace:
    """Parse *argv* (without the program name).

    At least one option is required; raises ``UsageError`` otherwise.
    """
    if not argv:
        raise UsageError("at least one option is required")
    return _build_parser().parse_args(argv)


def _configure_logging(level: str, fmt: str) -> None:
    """Set up structlog with console or JSON rendering."""
    import logging

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
    )

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def main(argv: Optional[List[str]] = None) -> None:
    args_list = sys.argv[1:] if argv is None else argv
    try:
        args = parse_args(args_list)
    except UsageError as exc:
        _build_parser().print_help(sys.stdout)
        print(f"\nerror: {exc}", file=sys.stdout)
        sys.exit(exc.exit_code)

    # Load settings from env / .env file first, then override with CLI flags.
    from elm327diag.config import DiagSettings

    settings = DiagSettings()
    if args.device is not None:
        settings.elm_device = args.device
    if args.output_file is not None:
        settings.output_file = args.output_file

    _configure_logging(settings.log_level, settings.log_format)

    logger = structlog.get_logger("elm327diag")
    logger.info(
        "diag_starting",
        version=__import__("elm327diag").__version__,
        mode="simulation" if settings.is_simulation else "serial",
        device=settings.elm_device,
        output_file=settings.output_file,
        timeout_ms=settings.elm_timeout_ms,
    )

    from elm327diag.runner import run_diagnostics

    try:
        result = asyncio.run(run_diagnostics(settings))
    except DiagError as exc:
        logger.error(
            "diag_failed",
            error_kind=type(exc).__name__,
            error=str(exc),
            exit_code=exc.exit_code,
        )
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        logger.info("diag_interrupted")
        sys.exit(130)

    logger.info("done", readings=len(result.readings), output_file=settings.output_file)


if __name__ == "__main__":
    main()
