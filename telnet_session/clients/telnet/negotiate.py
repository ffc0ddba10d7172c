"""Telnet protocol negotiation helper class."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from telnet_session.cli.console import log
from telnet_session.exceptions import ProtocolError

from .types import ReadSignal, TelnetCommand, TelnetSequence

if TYPE_CHECKING:
    from .transport import TelnetTransport


@dataclass(slots=True)
class TelnetNegotiator:
    """Refuses every option the peer offers.

    The session only sends whole lines and reads visible text, so no option
    is ever enabled: DO/DONT are answered WONT and WILL/WONT are answered DONT.
    """

    # Sequences answered so far, as (verb, option) pairs
    refused: list[TelnetSequence] = field(default_factory=list)

    @staticmethod
    def refusal(command: int, option: int) -> bytes:
        """Build the refusal for a negotiation request.

        Args:
            command: The received command (DO, DONT, WILL, WONT)
            option: The option being negotiated

        Returns:
            IAC WONT option for DO/DONT, IAC DONT option for WILL/WONT

        Raises:
            ProtocolError: If the command is not a negotiation verb
        """
        if not TelnetCommand.is_negotiation(command):
            msg = f"Unexpected control sequence: IAC {command}"
            raise ProtocolError(msg)
        return TelnetSequence.create_command(TelnetCommand.get_refusal_command(command), option)

    async def negotiate(self, transport: TelnetTransport, time_limit: float) -> None:
        """Consume the rest of a control sequence and answer it.

        Called once the IAC byte itself has been read. Reads the verb and the
        option byte, then writes the refusal straight to the transport.

        Args:
            transport: The transport the IAC byte came from
            time_limit: Maximum time to wait for each byte

        Raises:
            ProtocolError: On a nested IAC, an unknown verb, or a truncated sequence
        """
        command = await self._read_control_byte(transport, time_limit)
        if command == TelnetCommand.IAC:
            msg = "Unexpected control sequence: IAC IAC"
            raise ProtocolError(msg)
        if not TelnetCommand.is_negotiation(command):
            msg = f"Unexpected control sequence: IAC {command}"
            raise ProtocolError(msg)

        option = await self._read_control_byte(transport, time_limit)
        response = self.refusal(command, option)
        log.debug("Refusing telnet option %d (%s)", option, TelnetCommand(command).name)
        await transport.write(response, time_limit)
        self.refused.append(TelnetSequence(command, option))

    @staticmethod
    async def _read_control_byte(transport: TelnetTransport, time_limit: float) -> int:
        """Read one byte that must be part of a control sequence.

        Raises:
            ProtocolError: If the stream ends or stalls mid-sequence
        """
        byte = await transport.read_byte(time_limit)
        if isinstance(byte, ReadSignal):
            msg = f"Truncated control sequence ({byte.value})"
            raise ProtocolError(msg)
        return byte
