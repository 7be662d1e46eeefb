"""Console entrypoint for marktrim.

Truncates HTML fragments or text read from a file or stdin, budgets composite
messages, and exposes config helpers.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from marktrim import __version__
from marktrim.budget import MeasureBy
from marktrim.compose import compose_message
from marktrim.config import LogLevel, Settings, default_config_path, load_settings
from marktrim.html import html_truncate
from marktrim.logging import _to_logging_level, configure_logger, default_log_path
from marktrim.text import truncate_output

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marktrim",
        description="Truncate HTML fragments and text to a byte budget",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version and exit.",
    )
    parser.add_argument(
        "--debug",
        nargs="?",
        const="",
        metavar="LOGFILE",
        help="Enable debug logging into LOGFILE (default: log.txt under the marktrim home).",
    )
    parser.add_argument(
        "--log-level",
        choices=[e.value for e in LogLevel],
        dest="log_level",
        help="Log level override",
    )
    parser.add_argument("--config-path", dest="config_path", help="Path to config.toml")

    subparsers = parser.add_subparsers(dest="command")

    truncate_parser = subparsers.add_parser("truncate", help="Truncate a fragment from FILE or stdin")
    truncate_parser.add_argument("file", nargs="?", help="Input file (default: stdin)")
    _add_budget_arguments(truncate_parser)
    truncate_parser.add_argument("--separator", help="Prefer cutting before this word separator")
    truncate_parser.add_argument(
        "--content",
        action="store_true",
        help="Budget visible text only instead of the full markup.",
    )
    truncate_parser.add_argument("--text", action="store_true", help="Treat input as plain text, not HTML.")
    truncate_parser.add_argument("--max-lines", type=int, dest="max_lines", help="Limit printed output to N lines")

    compose_parser = subparsers.add_parser("compose", help="Fit a message and its items under one budget")
    compose_parser.add_argument("primary", help="Primary message")
    compose_parser.add_argument("items", nargs="*", help="Secondary items, in priority order")
    _add_budget_arguments(compose_parser)
    compose_parser.add_argument("--separator", dest="item_separator", help="Separator between items")
    compose_parser.add_argument("--lead-separator", dest="lead_separator", help="Separator after the message")
    compose_parser.add_argument("--more-format", dest="more_format", help="Placeholder format, with {count}")

    config_parser = subparsers.add_parser("config", help="Config helpers")
    config_sub = config_parser.add_subparsers(dest="config_cmd", required=True)
    config_sub.add_parser("path", help="Print config path")
    config_sub.add_parser("print", help="Print resolved settings")

    return parser


def _add_budget_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--max-bytes", type=int, dest="max_bytes", help="Byte budget")
    parser.add_argument("--omission", help="Marker appended at the cut point")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    debug_enabled = getattr(args, "debug", None) is not None

    overrides = _collect_overrides(args, debug_enabled)
    settings = load_settings(cli_overrides=overrides, config_path=args.config_path)

    _configure_base_logging(debug_enabled=debug_enabled, marktrim_level=settings.log_level)
    if debug_enabled:
        configure_logger(log_level=settings.log_level, log_file=args.debug or default_log_path())

    command = args.command
    if command == "truncate":
        return _run_truncate(settings, args)
    if command == "compose":
        return _run_compose(settings, args)
    if command == "config":
        return _run_config(settings, args)

    parser.print_help()
    return 1


def _run_truncate(settings: Settings, args: argparse.Namespace) -> int:
    try:
        source = _read_source(args.file)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    result = html_truncate(
        source,
        settings.max_bytes,
        omission=settings.omission,
        separator=settings.separator,
        content=args.content or settings.measure_by is MeasureBy.CONTENT,
        html=not args.text,
        boundary_window=settings.boundary_window,
    )
    logger.debug("truncated %d characters to %d", len(source), len(result))
    if args.max_lines is not None:
        result, clipped = truncate_output(result, max_lines=args.max_lines)
        if clipped:
            logger.debug("output clipped to %d lines", args.max_lines)
    if result:
        print(result)
    return 0


def _run_compose(settings: Settings, args: argparse.Namespace) -> int:
    message = compose_message(
        args.primary,
        args.items,
        settings.max_bytes,
        lead_separator=settings.lead_separator,
        separator=settings.item_separator,
        more_format=settings.more_format,
        omission=settings.omission,
        measure_by=settings.measure_by,
        word_boundary=settings.separator,
        boundary_window=settings.boundary_window,
    )
    logger.debug("composed %d items, %d omitted", len(message.items), message.omitted)
    rendered = message.render()
    if rendered:
        print(rendered)
    return 0


def _run_config(settings: Settings, args: argparse.Namespace) -> int:
    if args.config_cmd == "path":
        print(args.config_path or default_config_path())
        return 0
    if args.config_cmd == "print":
        print(settings.model_dump_json(indent=2))
        return 0
    return 1


def _read_source(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as handle:
        return handle.read()


def _collect_overrides(args: argparse.Namespace, debug_enabled: bool) -> dict[str, Any]:
    default_log_level = LogLevel.DEBUG.value if debug_enabled else None
    log_level_override = args.log_level or default_log_level
    return {
        "max_bytes": getattr(args, "max_bytes", None),
        "omission": getattr(args, "omission", None),
        "separator": getattr(args, "separator", None),
        "lead_separator": getattr(args, "lead_separator", None),
        "item_separator": getattr(args, "item_separator", None),
        "more_format": getattr(args, "more_format", None),
        "log_level": log_level_override,
    }


def _configure_base_logging(*, debug_enabled: bool, marktrim_level: LogLevel | str) -> None:
    root_level = logging.INFO if debug_enabled else logging.WARNING

    logging.basicConfig(
        level=root_level,
        stream=sys.__stderr__,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )

    logging.getLogger("marktrim").setLevel(_to_logging_level(marktrim_level))


if __name__ == "__main__":
    sys.exit(main())
