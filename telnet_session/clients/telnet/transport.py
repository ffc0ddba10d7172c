"""Byte-level TCP transport for telnet sessions.

The transport owns one asyncio stream pair and exposes the primitives the
session read loop is built on: a readiness wait, a single-byte read that
reports end-of-stream and timeouts as signals rather than exceptions, a
non-blocking drain of trailing bytes, and a bounded write.

Data is fetched from the stream in chunks and handed out one byte at a time
from a small pushback buffer, so readiness waits never lose data.
"""

from __future__ import annotations

from asyncio import (
    StreamReader,
    StreamWriter,
    get_running_loop as asyncio_get_running_loop,
    open_connection,
    timeout as asyncio_timeout,
    wait_for as asyncio_wait_for,
)
from dataclasses import dataclass, field
from ipaddress import ip_address
from socket import SOCK_STREAM, gaierror as socket_gaierror

from telnet_session.cli.console import log
from telnet_session.constants import DRAIN_TIME_LIMIT, READ_CHUNK_SIZE
from telnet_session.exceptions import TelnetConnectionError, TelnetWriteError

from .types import ReadSignal


@dataclass(slots=True)
class TelnetTransport:
    """One TCP byte stream with timeout-bounded reads and writes."""

    reader: StreamReader | None = field(default=None)
    writer: StreamWriter | None = field(default=None)
    address: str | None = field(default=None)
    _pending: bytearray = field(default_factory=bytearray)
    _eof: bool = field(default=False)

    @property
    def is_open(self) -> bool:
        """Check if the stream is currently open."""
        return self.reader is not None and self.writer is not None

    async def open(self, host: str, port: int, connect_timeout: float) -> None:
        """Resolve the host and open the TCP stream.

        Args:
            host: Hostname or literal IP address
            port: TCP port number
            connect_timeout: Seconds allowed for resolution and connection

        Raises:
            TelnetConnectionError: If the host cannot be resolved or reached
        """
        try:
            async with asyncio_timeout(connect_timeout):
                address = await self._resolve(host, port)
                log.debug("Opening TCP stream to %s:%d", address, port)
                self.reader, self.writer = await open_connection(address, port)
        except TelnetConnectionError:
            raise
        except (TimeoutError, OSError) as exc:
            msg = f"Cannot connect to {host} on port {port}"
            raise TelnetConnectionError(msg) from exc

        self.address = address
        self._pending.clear()
        self._eof = False

    @staticmethod
    async def _resolve(host: str, port: int) -> str:
        """Return a literal address for the host, resolving names via DNS.

        Raises:
            TelnetConnectionError: If name resolution fails
        """
        try:
            ip_address(host)
        except ValueError:
            pass
        else:
            return host

        try:
            infos = await asyncio_get_running_loop().getaddrinfo(host, port, type=SOCK_STREAM)
        except socket_gaierror as exc:
            msg = f"Cannot resolve {host}"
            raise TelnetConnectionError(msg) from exc
        if not infos:
            msg = f"Cannot resolve {host}"
            raise TelnetConnectionError(msg)
        return infos[0][4][0]

    def _ensure_open(self) -> None:
        """Fail fast before any I/O on a closed stream.

        Raises:
            TelnetConnectionError: If the stream is closed
        """
        if not self.is_open:
            msg = "Telnet connection closed"
            raise TelnetConnectionError(msg)

    async def _fill(self, time_limit: float) -> bool:
        """Make sure at least one byte is waiting in the pushback buffer.

        Returns:
            True if a byte is available, False on timeout or end of stream.

        Raises:
            TelnetConnectionError: If the peer reset the connection
        """
        if self._pending:
            return True
        if self._eof:
            return False

        try:
            chunk = await asyncio_wait_for(self.reader.read(READ_CHUNK_SIZE), timeout=time_limit)
        except TimeoutError:
            return False
        except OSError as exc:
            msg = f"Connection to {self.address} lost"
            raise TelnetConnectionError(msg) from exc

        if not chunk:
            self._eof = True
            return False
        self._pending.extend(chunk)
        return True

    async def wait_readable(self, time_limit: float) -> bool:
        """Wait until data is available, without failing on timeout.

        Returns:
            True if data is ready to be read.
        """
        self._ensure_open()
        return await self._fill(time_limit)

    async def read_byte(self, time_limit: float) -> int | ReadSignal:
        """Read a single byte.

        Args:
            time_limit: Maximum time to wait for the byte

        Returns:
            The byte value, ReadSignal.EOF once the peer closed the stream, or
            ReadSignal.TIMEOUT if nothing arrived within the time limit.
        """
        self._ensure_open()
        if not await self._fill(time_limit):
            return ReadSignal.EOF if self._eof else ReadSignal.TIMEOUT

        byte = self._pending[0]
        del self._pending[0]
        return byte

    async def drain(self, deadline: float | None = None) -> int:
        """Discard every byte that is immediately available.

        Args:
            deadline: Event loop time after which draining stops, even if the
                peer is still sending

        Returns:
            Number of bytes discarded
        """
        self._ensure_open()
        loop = asyncio_get_running_loop()
        discarded = 0
        while (deadline is None or loop.time() < deadline) and await self._fill(DRAIN_TIME_LIMIT):
            discarded += len(self._pending)
            self._pending.clear()
        if discarded:
            log.debug("Discarded %d trailing bytes from %s", discarded, self.address)
        return discarded

    async def write(self, data: bytes, time_limit: float) -> None:
        """Write data and wait until it has been flushed.

        Raises:
            TelnetWriteError: If the write fails or does not flush in time
        """
        self._ensure_open()
        try:
            async with asyncio_timeout(time_limit):
                self.writer.write(data)
                await self.writer.drain()
        except (TimeoutError, OSError) as exc:
            msg = f"Error writing to socket: {exc!s}"
            raise TelnetWriteError(msg) from exc

    async def close(self) -> None:
        """Close the stream; closing an already closed transport does nothing.

        Raises:
            TelnetConnectionError: If the operating system reports a close error
        """
        writer = self.writer
        if writer is None:
            return

        self.reader = None
        self.writer = None
        self._pending.clear()
        try:
            writer.close()
            await writer.wait_closed()
        except OSError as exc:
            msg = "Error while closing telnet socket"
            raise TelnetConnectionError(msg) from exc

    def release(self) -> None:
        """Close the stream without waiting, for use from finalisers."""
        writer = self.writer
        self.reader = None
        self.writer = None
        if writer is not None:
            writer.close()
