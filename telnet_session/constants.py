"""Constants for telnet sessions."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Session defaults

DEFAULT_PORT = 23
DEFAULT_CONNECT_TIMEOUT = 10  # Seconds, also bounds each prompt wait
DEFAULT_STREAM_TIMEOUT = 1.0  # Seconds allowed between two received bytes
DEFAULT_EOL = "\r\n"
DEFAULT_PROFILE = "linux"

# Transport tuning

READ_CHUNK_SIZE = 1024
DRAIN_TIME_LIMIT = 0.01  # Grace period when discarding trailing bytes
TRANSCRIPT_SPOOL_SIZE = 1024 * 1024  # Keep transcripts in memory up to 1 MiB
PROMPT_SEARCH_WINDOW = 1024  # Bytes at the end of the buffer a prompt must fit in
MIN_PORT = 1
MAX_PORT = 65535

# CLI constants

CLI_ARGUMENTS: dict[str, list[tuple[Any]]] = {
    "connection": [
        (["-H", "--host"], {"help": "Single host to connect to"}),
        (["-P", "--port"], {"type": int, "default": DEFAULT_PORT, "metavar": f"<{DEFAULT_PORT}>"}),
        (
            ["-t", "--timeout"],
            {
                "type": float,
                "default": DEFAULT_CONNECT_TIMEOUT,
                "help": "Connect and prompt wait timeout",
                "metavar": f"<{DEFAULT_CONNECT_TIMEOUT}>",
            },
        ),
        (
            ["-s", "--stream-timeout"],
            {
                "type": float,
                "default": DEFAULT_STREAM_TIMEOUT,
                "help": "Maximum silence between received bytes",
                "metavar": f"<{DEFAULT_STREAM_TIMEOUT}>",
            },
        ),
    ],
    "login": [
        (["-u", "--username"], {"help": "Login username (skips login if omitted)"}),
        (["-p", "--password"], {"help": "Login password (prompted for if omitted)"}),
        (
            ["--profile"],
            {
                "choices": ["alaxala", "eoc-master", "eoc-modem", "ios", "junos", "linux"],
                "default": DEFAULT_PROFILE,
                "metavar": "alaxala|eoc-master|eoc-modem|ios|junos|<linux>",
            },
        ),
    ],
    "operations": [
        (
            ["-c", "--command"],
            {"action": "append", "dest": "commands", "help": "Command to run (repeatable)", "required": True},
        ),
        (["-C", "--concurrency"], {"type": int, "default": 10, "metavar": "<10>"}),
        (["--keep-prompt"], {"action": "store_true", "help": "Keep the trailing prompt line in output"}),
        (["-v", "--verbose"], {"action": "count", "default": 0, "help": "Increase log verbosity"}),
    ],
    "files": [
        (["-i", "--input"], {"help": "Hosts file path", "type": Path}),
        (
            ["-if", "--input-format"],
            {"choices": ["csv", "json", "xlsx"], "default": "csv", "metavar": "<csv>|json|xlsx"},
        ),
        (["-o", "--output"], {"help": "Output file path (default: stdout)", "type": Path}),
        (
            ["-of", "--output-format"],
            {
                "choices": ["csv", "json", "plain", "xlsx"],
                "default": "plain",
                "metavar": "csv|json|<plain>|xlsx",
            },
        ),
    ],
}
CLI_HELP_DESCRIPTION: str = """Telnet session: run commands on remote shells and network devices.

Connects to one host, or every host listed in an input file, logs in using
a device profile, runs each command and waits for the device prompt after
it. Results are printed or written in the chosen output format.
"""
CLI_HELP_EPILOGUE: str | None = "If an argument has a default, it's shown in <parentheses>."
CLI_HELP_NAME: str = "telnet-session"
