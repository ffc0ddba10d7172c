"""Shared stream doubles and fixtures for the telnet session tests."""

from __future__ import annotations

from asyncio import sleep as asyncio_sleep
from typing import TYPE_CHECKING, Any
from unittest.mock import patch

import pytest

from telnet_session.clients.telnet.client import TelnetSession
from telnet_session.clients.telnet.transport import TelnetTransport
from telnet_session.clients.telnet.types import TelnetCommand

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


class MockStreamReader:
    """Mock StreamReader for testing.

    Returns each chunk in turn. Once exhausted it either reports end of
    stream, or with ``stall`` set, never returns so that reads time out.
    """

    def __init__(self, return_data: list[bytes], stall: bool = False) -> None:
        """Initialise with sequence of data to return."""
        self.return_data = list(return_data)
        self.read_count = 0
        self.stall = stall

    async def read(self, _: int) -> bytes:
        """Return next chunk of data, or wait forever / report EOF when exhausted."""
        if self.read_count < len(self.return_data):
            data = self.return_data[self.read_count]
            self.read_count += 1
            return data
        if self.stall:
            await asyncio_sleep(3600)
        return b""


class TricklingStreamReader:
    """StreamReader double that sends one byte every interval, forever."""

    def __init__(self, interval: float, byte: bytes = b".") -> None:
        """Initialise with the pause between bytes."""
        self.interval = interval
        self.byte = byte

    async def read(self, _: int) -> bytes:
        """Return a single byte after the interval."""
        await asyncio_sleep(self.interval)
        return self.byte


class MockStreamWriter:
    """Mock StreamWriter for testing."""

    def __init__(self) -> None:
        """Initialise with empty write buffer."""
        self.written_data: list[bytes] = []
        self.closed = False

    def write(self, data: bytes) -> None:
        """Store written data in buffer."""
        self.written_data.append(data)

    async def drain(self) -> None:
        """Mock drain operation."""

    def close(self) -> None:
        """Mark writer as closed."""
        self.closed = True

    async def wait_closed(self) -> None:
        """Mock wait_closed operation."""


def create_telnet_command(cmd: int, option: int) -> bytes:
    """Create a telnet command sequence."""
    return bytes([TelnetCommand.IAC, cmd, option])


@pytest.fixture(autouse=True)
def mock_logging() -> Generator[None]:
    """Keep session logging out of the RichHandler during tests."""
    with (
        patch("telnet_session.clients.telnet.client.log"),
        patch("telnet_session.clients.telnet.transport.log"),
        patch("telnet_session.clients.telnet.negotiate.log"),
    ):
        yield


@pytest.fixture
def make_session() -> Callable[..., tuple[TelnetSession, MockStreamWriter]]:
    """Fixture building a connected session over stream doubles."""

    def factory(
        chunks: list[bytes] | None = None, *, stall: bool = False, reader: Any = None, **kwargs: Any
    ) -> tuple[TelnetSession, MockStreamWriter]:
        writer = MockStreamWriter()
        if reader is None:
            reader = MockStreamReader(chunks or [], stall=stall)
        kwargs.setdefault("stream_timeout", 0.1)
        kwargs.setdefault("connect_timeout", 2)
        transport = TelnetTransport(reader=reader, writer=writer, address="192.0.2.1")
        session = TelnetSession(host="192.0.2.1", transport=transport, **kwargs)
        return session, writer

    return factory
