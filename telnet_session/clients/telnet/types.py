"""Telnet protocol types module."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import NamedTuple


class ReadSignal(Enum):
    """Outcomes of a single-byte read that are not a byte."""

    EOF = "eof"
    TIMEOUT = "timeout"


class TelnetCommand(IntEnum):
    """Telnet protocol commands."""

    IAC = 255  # Interpret As Command
    DONT = 254
    DO = 253
    WONT = 252
    WILL = 251

    @classmethod
    def is_negotiation(cls, cmd: int) -> bool:
        """Check if a command byte is a negotiation command.

        Returns:
            True if the command is a negotiation command, False otherwise
        """
        return cmd in {cls.DO, cls.DONT, cls.WILL, cls.WONT}

    @classmethod
    def get_refusal_command(cls, cmd: int) -> int:
        """Get the command that refuses a negotiation request.

        Returns:
            WONT for DO/DONT, DONT for WILL/WONT, 0 for anything else
        """
        return {
            cls.DO: cls.WONT,  # We won't do what we're asked to
            cls.DONT: cls.WONT,
            cls.WILL: cls.DONT,  # We don't want what they offer
            cls.WONT: cls.DONT,
        }.get(cmd, 0)


class TelnetSequence(NamedTuple):
    """Represents a complete telnet command sequence."""

    command: int
    option: int = 0

    @classmethod
    def create_command(cls, command: int, option: int) -> bytes:
        """Create a simple telnet command sequence.

        Returns:
            The created command sequence
        """
        return bytes([TelnetCommand.IAC, command, option])
