"""Exception hierarchy for telnet sessions.

Every failure raised by a session derives from TelnetError. Where a failure
has an obvious builtin counterpart the exception also subclasses it, so
callers written against ``ConnectionError`` or ``TimeoutError`` keep working.
None of these are retried internally; they end the current operation.
"""

from __future__ import annotations


class TelnetError(Exception):
    """Base exception for all telnet session errors."""


class TelnetConnectionError(TelnetError, ConnectionError):
    """Host resolution, connect or close failure, or I/O on a closed session."""


class TelnetWriteError(TelnetError):
    """Writing to an established connection failed."""


class PromptTimeoutError(TelnetError, TimeoutError):
    """The expected prompt did not arrive in time.

    Attributes:
        pattern: The prompt regex that was never matched
        buffer: Text collected before giving up
    """

    def __init__(self, msg: str, pattern: str | None = None, buffer: str = "") -> None:
        """Store the unmatched pattern and the partial buffer."""
        super().__init__(msg)
        self.pattern = pattern
        self.buffer = buffer


class ProtocolError(TelnetError):
    """The peer sent a control sequence we cannot interpret."""


class ConfigurationError(TelnetError, ValueError):
    """Invalid session configuration, such as an unknown host profile."""


class LoginError(TelnetError):
    """Login sequence failed; the underlying error is kept as ``__cause__``."""
