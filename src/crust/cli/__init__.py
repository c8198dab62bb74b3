"""Crust CLI: the shop server and the admin console.

Entry point registered as ``crust`` in ``pyproject.toml``::

    [project.scripts]
    crust = "crust.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``crust`` command."""
    parser = argparse.ArgumentParser(
        prog="crust",
        description="Crust: a pizza delivery service over plain HTTP.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- crust serve ------------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Start the shop server")
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    serve_parser.add_argument(
        "--debug",
        action="store_true",
        help="Debug mode (reload on changes, verbose logging)",
    )

    # -- crust console ----------------------------------------------------
    subparsers.add_parser("console", help="Open the interactive admin console")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from crust.cli._run import run_server

        run_server(args)
    elif args.command == "console":
        from crust.cli._console import run_console

        run_console(args)
