"""Command buffer and session transcript."""

from __future__ import annotations

from dataclasses import dataclass, field
from tempfile import SpooledTemporaryFile

from telnet_session.constants import TRANSCRIPT_SPOOL_SIZE


@dataclass(slots=True)
class CommandBuffer:
    """Bytes received since the buffer was last cleared."""

    _data: bytearray = field(default_factory=bytearray)

    def __len__(self) -> int:
        """Return the number of buffered bytes."""
        return len(self._data)

    @property
    def data(self) -> bytes:
        """Raw buffered bytes."""
        return bytes(self._data)

    @property
    def text(self) -> str:
        """Buffered bytes decoded as UTF-8, invalid sequences replaced."""
        return self._data.decode("utf-8", errors="replace")

    def tail(self, size: int) -> str:
        """Decode only the last ``size`` bytes.

        Prompt matching runs after every received byte, so it looks at a
        bounded tail rather than the whole buffer.
        """
        return self._data[-size:].decode("utf-8", errors="replace")

    def append(self, byte: int) -> None:
        """Append a single byte."""
        self._data.append(byte)

    def clear(self) -> None:
        """Discard all buffered bytes."""
        self._data.clear()


@dataclass(slots=True)
class Transcript:
    """Append-only log of every byte sent or received during a session.

    Held in memory and spilled to an anonymous temporary file once it grows
    past the spool size.
    """

    _file: SpooledTemporaryFile = field(
        default_factory=lambda: SpooledTemporaryFile(max_size=TRANSCRIPT_SPOOL_SIZE, mode="w+b")
    )

    def append(self, data: bytes) -> None:
        """Append bytes to the end of the transcript."""
        self._file.seek(0, 2)
        self._file.write(data)

    def getvalue(self) -> bytes:
        """Return the whole transcript."""
        self._file.seek(0)
        return self._file.read()

    @property
    def closed(self) -> bool:
        """Check if the backing storage has been released."""
        return self._file.closed

    def close(self) -> None:
        """Release the backing storage; safe to call more than once."""
        self._file.close()
