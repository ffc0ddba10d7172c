"""Command line argument parser for telnet sessions.

The parser is built from the argument table in telnet_session.constants,
one argument group per table section.
"""

from __future__ import annotations

from argparse import (
    ArgumentParser,
    Namespace as Arguments,
    RawDescriptionHelpFormatter as Formatter,
)
from sys import argv as sys_argv, exit as sys_exit

from telnet_session.constants import (
    CLI_ARGUMENTS,
    CLI_HELP_DESCRIPTION,
    CLI_HELP_EPILOGUE,
    CLI_HELP_NAME,
)

from .console import log


def build_parser() -> ArgumentParser:
    """Create the argument parser with every argument group.

    Returns:
        Configured ArgumentParser instance
    """
    parser = ArgumentParser(
        description=CLI_HELP_DESCRIPTION,
        epilog=CLI_HELP_EPILOGUE,
        prog=CLI_HELP_NAME,
        formatter_class=Formatter,
    )
    for category_name, args in CLI_ARGUMENTS.items():
        category = parser.add_argument_group(category_name)
        [category.add_argument(*flags, **kwargs) for flags, kwargs in args]
    return parser


def parse_args(argv: list[str] | None = None) -> Arguments:
    """Parse command line arguments and apply the requested verbosity.

    Args:
        argv: Arguments to parse, defaults to the process arguments

    Returns:
        The parsed arguments
    """
    parser = build_parser()
    if argv is None:
        argv = sys_argv[1:]

    # Show help rather than an error when run without arguments
    if not argv:
        parser.print_help()
        sys_exit(0)

    parsed_args = parser.parse_args(argv)
    if not parsed_args.host and not parsed_args.input:
        parser.error("one of --host or --input is required")

    if parsed_args.verbose >= 2:  # noqa: PLR2004
        log.setLevel("DEBUG")
    elif parsed_args.verbose == 1:
        log.setLevel("INFO")
    else:
        log.setLevel("WARNING")

    return parsed_args
