"""Tabby CLI — tabby build / tabby run.

Entry point for the ``tabby`` command-line interface.  Flags override the
environment (``SRC_DIR``, ``DEST_DIR``, ``HOST``, ``PORT``, ``DEBUG``),
which overrides ``tabby.toml`` / ``tabby.yaml``.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the tabby CLI."""
    parser = argparse.ArgumentParser(
        prog="tabby",
        description="Minify a static site, or serve it with live reload.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # tabby build
    build_parser = subparsers.add_parser(
        "build",
        help="Minify and copy the source tree into the destination tree",
    )
    build_parser.add_argument("--source", default=None, help="Source directory")
    build_parser.add_argument("--dest", default=None, help="Destination directory")
    build_parser.add_argument(
        "--debug", action="store_true", default=None, help="Enable debug logging",
    )

    # tabby run
    run_parser = subparsers.add_parser(
        "run",
        aliases=["serve"],
        help="Serve the source tree with live reload",
    )
    run_parser.add_argument("--source", default=None, help="Source directory")
    run_parser.add_argument("--host", default=None, help="Bind address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port")
    run_parser.add_argument(
        "--debug", action="store_true", default=None, help="Enable debug logging",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from tabby import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from tabby.app import build, serve

    if args.command == "build":
        build(source=args.source, destination=args.dest, debug=args.debug)
    elif args.command in ("run", "serve"):
        serve(source=args.source, host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
