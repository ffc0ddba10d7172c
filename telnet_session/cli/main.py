"""Main entry point for the telnet session CLI."""

from __future__ import annotations

from getpass import getpass
from json import dumps as json_dumps
from typing import TYPE_CHECKING

from rich.console import Console

from telnet_session.batch import CommandTarget, run_sessions
from telnet_session.constants import MAX_PORT, MIN_PORT

from .args import parse_args
from .console import log
from .files import FileReader, FileWriter, format_plain

if TYPE_CHECKING:
    from argparse import Namespace as Arguments

# Command output goes to stdout, logs and progress to stderr
output_console = Console(soft_wrap=True)


def build_targets(args: Arguments) -> list[CommandTarget]:
    """Collect the hosts to connect to from --host and the input file.

    Rows from the input file may set their own port, username, password and
    profile; anything they leave out comes from the command line.

    Returns:
        One CommandTarget per usable host

    Raises:
        OSError: If the input file cannot be read
        ValueError: If the input file cannot be parsed
    """
    rows: list[dict] = []
    if args.host:
        rows.append({"host": args.host})
    if args.input:
        rows.extend(FileReader(args.input, args.input_format).data)

    targets = []
    for row in rows:
        host = str(row.get("host") or "").strip()
        if not host:
            log.warning("Skipping row without a host: %s", row)
            continue
        port = int(row.get("port") or args.port)
        if not MIN_PORT <= port <= MAX_PORT:
            log.warning("Skipping %s with invalid port %d", host, port)
            continue
        targets.append(
            CommandTarget(
                host=host,
                port=port,
                username=str(row.get("username") or args.username or ""),
                password=str(row.get("password") or args.password or ""),
                profile=str(row.get("profile") or args.profile),
            )
        )
    return targets


async def main(argv: list[str] | None = None) -> int:
    """Main entry point for the telnet session CLI.

    Returns:
        0 if every host succeeded, 1 if any failed, 2 on bad input
    """
    args = parse_args(argv)
    if args.username and args.password is None:
        args.password = getpass(f"Password for {args.username}: ")

    try:
        targets = build_targets(args)
    except (OSError, ValueError) as e:
        log.error("Cannot read hosts from %s: %s", args.input, e)  # noqa: TRY400
        return 2
    if not targets:
        log.error("No hosts to connect to")
        return 2

    results = await run_sessions(
        targets,
        args.commands,
        time_limit=args.timeout,
        stream_timeout=args.stream_timeout,
        max_concurrency=args.concurrency,
        strip_prompt=not args.keep_prompt,
    )
    rows = [result.as_dict() for result in results]

    if args.output:
        FileWriter(args.output, args.output_format, rows)
        log.info("Wrote %d results to %s", len(rows), args.output)
    elif args.output_format == "json":
        output_console.print(json_dumps(rows, indent=2), markup=False, highlight=False)
    else:
        output_console.print(format_plain(rows), markup=False, highlight=False, end="")

    return 0 if all(result.success for result in results) else 1
