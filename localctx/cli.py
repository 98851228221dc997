"""CLI entrypoints for localctx commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, LocalCtxConfig, load_config
from .config_editor import OPERATIONS, ConfigEditor, parse_value
from .logging import configure_logging
from .models import FetchRequest
from .orchestrator import Orchestrator


def _add_global_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    verbose_default: object = argparse.SUPPRESS if suppress_default else False
    config_default: object = argparse.SUPPRESS if suppress_default else None
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=verbose_default,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=config_default,
        help="Path to localctx.yml or its directory (defaults to $LOCALCTX_CONFIG or the cwd).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localctx",
        description="Discover code context in local repositories for AI agents.",
    )
    _add_global_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Build a markdown context bundle for directories matching search terms.",
    )
    _add_global_options(fetch_parser, suppress_default=True)
    fetch_parser.add_argument("terms", nargs="+", help="Search terms matched against directory names.")
    fetch_parser.add_argument(
        "--glob",
        dest="globs",
        action="append",
        default=[],
        help="Glob pattern for files (repeatable; prefix with ! to exclude).",
    )
    fetch_parser.add_argument(
        "--regex",
        dest="regex",
        action="append",
        default=[],
        help="Regular expression to search for in file contents (repeatable).",
    )
    fetch_parser.add_argument(
        "--depth",
        type=int,
        default=None,
        help="Reference depth (-1 unlimited, 0 disables; defaults to the configured value).",
    )

    config_parser = subparsers.add_parser(
        "config",
        help="Get or edit settings in localctx.yml.",
    )
    _add_global_options(config_parser, suppress_default=True)
    config_parser.add_argument("operation", choices=OPERATIONS)
    config_parser.add_argument("key", nargs="?", help="Dot-separated setting key.")
    config_parser.add_argument(
        "value",
        nargs="?",
        help="Value for set, or the list item for add/remove (parsed as YAML).",
    )

    tools_parser = subparsers.add_parser(
        "tools",
        help="Print the reference for the available tools.",
    )
    _add_global_options(tools_parser, suppress_default=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing the tools.",
    )
    _add_global_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for localctx commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    verbose = bool(args.verbose)
    configure_logging(verbose=verbose)
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")
    if config.log_file is not None:
        configure_logging(verbose=verbose, log_file=config.log_file)

    if args.command == "fetch":
        _run_fetch(parser, config, args)
    elif args.command == "config":
        editor = ConfigEditor(config.config_path)
        value = parse_value(args.value)
        try:
            print(
                editor.apply(
                    args.operation,
                    args.key,
                    value=value,
                    array_item=value if args.operation in {"add", "remove"} else None,
                )
            )
        except ConfigError as exc:
            parser.exit(1, f"localctx config failed: {exc}\n")
    elif args.command == "tools":
        print(Orchestrator(config).tools_reference())
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config_path=config.config_path)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_fetch(
    parser: argparse.ArgumentParser, config: LocalCtxConfig, args: argparse.Namespace
) -> None:
    request = FetchRequest(
        search_terms=list(args.terms),
        globs=list(args.globs),
        regex=list(args.regex),
        reference_depth=args.depth,
    )
    if request.reference_depth is not None and request.reference_depth < -1:
        parser.exit(1, "--depth must be -1 or a non-negative integer\n")
    try:
        markdown = Orchestrator(config).fetch_context(request)
    except Exception as exc:  # pragma: no cover - defensive guard
        parser.exit(1, f"localctx fetch failed: {exc}\nRun with --verbose for more details.\n")
    print(markdown)


if __name__ == "__main__":
    main(sys.argv[1:])
