"""Asynchronous telnet session implementation module.

This module provides the TelnetSession class, which drives an interactive
command line over a telnet connection: it logs in using a device profile,
sends commands one line at a time and reads each response up to the
device prompt.

Reads happen one byte at a time. Telnet option negotiation is answered in
band (every option is refused) and the prompt regex is checked against the
end of the collected output after each byte, so a response is complete as
soon as the prompt appears.
"""

from __future__ import annotations

from asyncio import get_running_loop as asyncio_get_running_loop, sleep as asyncio_sleep
from contextlib import suppress as contextlib_suppress
from dataclasses import dataclass, field
from re import compile as re_compile, error as re_error, escape as re_escape, sub as re_sub
from typing import TYPE_CHECKING, Any, Self

from telnet_session.cli.console import log
from telnet_session.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_EOL,
    DEFAULT_PORT,
    DEFAULT_PROFILE,
    DEFAULT_STREAM_TIMEOUT,
    PROMPT_SEARCH_WINDOW,
)
from telnet_session.exceptions import (
    ConfigurationError,
    LoginError,
    PromptTimeoutError,
    TelnetConnectionError,
    TelnetError,
)

from .buffers import CommandBuffer, Transcript
from .negotiate import TelnetNegotiator
from .profiles import get_profile
from .transport import TelnetTransport
from .types import ReadSignal, TelnetCommand

if TYPE_CHECKING:
    from re import Pattern


@dataclass(slots=True)
class TelnetSession:
    """Telnet session with prompt-based command execution.

    This class implements the async context manager protocol for easy use in
    async with statements.

    Examples:
        Logging in to a router and running a command:

        ```python
        async with TelnetSession("router.example.com") as session:
            await session.login("admin", "secret", "ios")
            output = await session.exec("show version")
        ```

        Manual connection management with a known prompt:

        ```python
        session = TelnetSession("192.0.2.10", stream_timeout=0.5)
        session.set_prompt("switch#")
        try:
            await session.connect()
            output = await session.exec("show vlan")
        finally:
            await session.disconnect()
        ```
    """

    host: str
    port: int = field(default=DEFAULT_PORT)
    connect_timeout: float = field(default=DEFAULT_CONNECT_TIMEOUT)
    stream_timeout: float = field(default=DEFAULT_STREAM_TIMEOUT)
    eol: str = field(default=DEFAULT_EOL)
    strip_prompt: bool = field(default=True)
    prompt: str | None = field(default=None)  # Regex matched at the end of the output
    delay: float = field(default=0.0)  # Pause before answering negotiations, for slow devices

    transport: TelnetTransport = field(default_factory=TelnetTransport, repr=False)
    negotiator: TelnetNegotiator = field(default_factory=TelnetNegotiator, repr=False)
    buffer: CommandBuffer = field(default_factory=CommandBuffer, repr=False)
    transcript: Transcript = field(default_factory=Transcript, repr=False)

    def __post_init__(self) -> None:
        """Validate a prompt given at construction."""
        if self.prompt is not None:
            self.set_regex_prompt(self.prompt)

    def __del__(self) -> None:
        """Release the transport if still open, and the transcript storage."""
        transport = getattr(self, "transport", None)
        if transport is not None and transport.is_open:
            # The event loop may already be closed during interpreter shutdown
            with contextlib_suppress(RuntimeError):
                transport.release()
        transcript = getattr(self, "transcript", None)
        if transcript is not None:
            transcript.close()

    @classmethod
    async def connect_to(cls, host: str, port: int = DEFAULT_PORT, **kwargs: Any) -> Self:
        """Create and connect to a telnet server in one step.

        Args:
            host: The hostname or IP address of the telnet server
            port: The port number of the telnet server
            **kwargs: Additional parameters to pass to the TelnetSession constructor

        Returns:
            A connected TelnetSession instance

        Raises:
            TelnetConnectionError: If the connection attempt fails
        """
        session = cls(host=host, port=port, **kwargs)
        await session.connect()
        return session

    async def __aenter__(self) -> Self:
        """Enter the async context manager, connecting if needed.

        Returns:
            The connected session instance
        """
        await self.connect()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Exit the async context manager, closing the connection."""
        await self.disconnect()

    @property
    def is_connected(self) -> bool:
        """Check if the session is currently connected."""
        return self.transport.is_open

    async def connect(self) -> None:
        """Establish the telnet connection.

        If a prompt has already been configured, waits for it before
        returning, so the session is ready for the first command.

        Raises:
            TelnetConnectionError: If the host cannot be resolved or reached
            PromptTimeoutError: If the configured prompt does not appear
        """
        if self.is_connected:
            return

        log.info("Connecting with telnet to %s:%d", self.host, self.port)
        await self.transport.open(self.host, self.port, self.connect_timeout)
        log.debug("Connected with telnet to %s:%d", self.host, self.port)

        if self.prompt:
            await self.wait_prompt()

    async def disconnect(self) -> None:
        """Close the telnet connection; safe to call more than once.

        Raises:
            TelnetConnectionError: If the operating system reports a close error
        """
        if not self.is_connected:
            return
        try:
            await self.transport.close()
        except TelnetConnectionError:
            log.exception("Error closing telnet connection to %s:%d", self.host, self.port)
            raise
        log.debug("Closed telnet connection to %s:%d", self.host, self.port)

    async def exec(self, command: str, add_newline: bool = True) -> str:
        """Run a command and return its output.

        Args:
            command: Command to execute
            add_newline: Append the end-of-line sequence to the command

        Returns:
            The command output, see get_buffer()
        """
        await self.write(command, add_newline)
        await self.wait_prompt()
        return self.get_buffer()

    async def login(self, username: str, password: str, host_profile: str = DEFAULT_PROFILE) -> None:
        """Log in using the prompts of a host profile.

        The username step is skipped when no username is given. Once the
        password is accepted the profile's prompt regex stays active for the
        following commands.

        Args:
            username: Username, may be empty
            password: Password
            host_profile: Name of the device profile, see HOST_PROFILES

        Raises:
            ConfigurationError: If the host profile is unknown
            LoginError: If any step of the login fails
        """
        profile = get_profile(host_profile)
        self.delay = profile.delay

        try:
            if username:
                self.set_prompt(profile.username_prompt)
                await self.wait_prompt()
                await self.write(username)

            self.set_prompt(profile.password_prompt)
            await self.wait_prompt()
            await self.write(password)

            if profile.delay:
                await asyncio_sleep(profile.delay)
            self.set_regex_prompt(profile.prompt_pattern)
            await self.wait_prompt()
        except TelnetError as exc:
            log.debug("Login to %s failed: %s", self.host, exc)
            msg = "Login failed"
            raise LoginError(msg) from exc

        log.info("Logged in to %s:%d as %s profile", self.host, self.port, host_profile)

    def set_prompt(self, prompt: str) -> None:
        """Set a literal prompt string to wait for."""
        self.set_regex_prompt(re_escape(prompt))

    def set_regex_prompt(self, pattern: str) -> None:
        """Set the prompt regex to wait for.

        The regex only has to match the end of the output, which usually
        means the last few characters of the device prompt.

        Raises:
            ConfigurationError: If the pattern is not a valid regex
        """
        self._compile_prompt(pattern)
        self.prompt = pattern

    def set_stream_timeout(self, seconds: float) -> None:
        """Set the maximum silence allowed between two received bytes."""
        self.stream_timeout = seconds

    def strip_prompt_from_buffer(self, strip: bool) -> None:
        """Choose whether get_buffer() drops the trailing prompt line."""
        self.strip_prompt = strip

    def clear_buffer(self) -> None:
        """Clear the command buffer."""
        self.buffer.clear()

    def get_buffer(self) -> str:
        """Return the output of the last command.

        Line endings are normalised to newlines, the last line (almost
        always the prompt) is dropped unless prompt stripping is disabled,
        and surrounding whitespace is trimmed.
        """
        text = re_sub(r"\r\n|\r", "\n", self.buffer.text)
        if self.strip_prompt:
            text = text.rpartition("\n")[0]
        return text.strip()

    def get_global_buffer(self) -> str:
        """Return everything sent and received since the session started."""
        return self.transcript.getvalue().decode("utf-8", errors="replace")

    async def write(self, command: str, add_newline: bool = True) -> None:
        """Send a command to the telnet device.

        Args:
            command: The command string to send
            add_newline: Append the end-of-line sequence to the command

        Raises:
            TelnetConnectionError: If the session is not connected
            TelnetWriteError: If the write fails
        """
        self.buffer.clear()
        if add_newline:
            command += self.eol

        data = command.encode()
        await self.transport.write(data, self.stream_timeout)
        self.transcript.append(data)

    async def wait_prompt(self) -> bytes:
        """Read until the current prompt appears.

        Returns:
            The raw bytes collected, see read_until()
        """
        return await self.read_until(self.prompt)

    async def read_until(self, prompt: str | None) -> bytes:
        """Read data until the prompt regex matches the end of the output.

        Without a prompt, reads until the device stops sending or closes the
        connection. Bytes that arrive straight after the prompt are discarded.

        Args:
            prompt: Prompt regex, or None to read whatever arrives

        Returns:
            All data read, including the prompt

        Raises:
            TelnetConnectionError: If the session is not connected
            PromptTimeoutError: If the prompt is not found in time or the
                connection closes first
            ProtocolError: If the device sends an unknown control sequence
        """
        pattern = self._compile_prompt(prompt) if prompt else None
        self.buffer.clear()

        await self.transport.wait_readable(self.stream_timeout)

        loop = asyncio_get_running_loop()
        deadline = loop.time() + self.connect_timeout

        while True:
            if loop.time() > deadline:
                msg = f"Couldn't find the requested '{prompt}' within {self.connect_timeout} seconds"
                raise PromptTimeoutError(msg, prompt, self.buffer.text)

            byte = await self.transport.read_byte(self.stream_timeout)
            match byte:
                case ReadSignal.EOF:
                    if pattern is None:
                        return self.buffer.data
                    log.warning("Connection to %s closed while waiting for '%s'", self.host, prompt)
                    msg = f"Connection closed before the requested '{prompt}' was found"
                    raise PromptTimeoutError(msg, prompt, self.buffer.text)
                case ReadSignal.TIMEOUT:
                    await self.transport.drain(deadline)
                    if pattern is None:
                        return self.buffer.data
                    msg = (
                        f"Couldn't find the requested '{prompt}', it was not in the data "
                        f"returned from server: {self.buffer.text!r}"
                    )
                    raise PromptTimeoutError(msg, prompt, self.buffer.text)
                case TelnetCommand.IAC:
                    if self.delay:
                        await asyncio_sleep(self.delay)
                    await self.negotiator.negotiate(self.transport, self.stream_timeout)
                    continue

            self.buffer.append(byte)
            self.transcript.append(bytes((byte,)))

            if pattern is not None and pattern.search(self.buffer.tail(PROMPT_SEARCH_WINDOW)):
                await self.transport.drain(deadline)
                return self.buffer.data

    @staticmethod
    def _compile_prompt(prompt: str) -> Pattern[str]:
        """Compile a prompt regex anchored to the end of the output.

        Raises:
            ConfigurationError: If the pattern is not a valid regex
        """
        try:
            return re_compile(f"(?:{prompt})\\Z")
        except re_error as exc:
            msg = f"Invalid prompt pattern: {prompt!r}"
            raise ConfigurationError(msg) from exc
