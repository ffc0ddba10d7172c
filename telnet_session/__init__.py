"""Telnet session package.

This package drives interactive command line sessions on remote hosts over
TELNET: UNIX shells, Cisco IOS, Juniper JunOS and similar device CLIs. It
connects, logs in with a device profile, sends commands and reads each
response up to the device prompt, refusing every telnet option the remote
end offers.

A command line tool runs the same commands on many hosts concurrently and
writes the results as CSV, JSON, plain text or Excel.
"""

from __future__ import annotations

from importlib.metadata import version

from .cli import (
    complete_progress,
    console,
    create_progress,
    log,
    parse_args,
    update_progress,
)
from .batch import CommandResult, CommandTarget, run_session, run_sessions
from .clients.telnet import HOST_PROFILES, HostProfile, TelnetSession, get_profile
from .exceptions import (
    ConfigurationError,
    LoginError,
    PromptTimeoutError,
    ProtocolError,
    TelnetConnectionError,
    TelnetError,
    TelnetWriteError,
)

__all__ = [
    "HOST_PROFILES",
    "CommandResult",
    "CommandTarget",
    "ConfigurationError",
    "HostProfile",
    "LoginError",
    "PromptTimeoutError",
    "ProtocolError",
    "TelnetConnectionError",
    "TelnetError",
    "TelnetSession",
    "TelnetWriteError",
    "complete_progress",
    "console",
    "create_progress",
    "get_profile",
    "log",
    "parse_args",
    "run_session",
    "run_sessions",
    "update_progress",
]

__version__ = version("telnet-session")
