"""Telnet Session Module.

This module provides an asyncio-based telnet client for driving the command
line of remote shells and network devices: log in, run a command, read the
output up to the device prompt.

Example usage:
    ```python
    import asyncio
    from telnet_session.clients.telnet import TelnetSession

    async def main():
        async with TelnetSession("device.example.com") as session:
            await session.login("admin", "secret", host_profile="junos")
            print(await session.exec("show version"))

    asyncio.run(main())
    ```
"""

from __future__ import annotations

from .client import TelnetSession
from .profiles import HOST_PROFILES, HostProfile, get_profile

__all__ = ["HOST_PROFILES", "HostProfile", "TelnetSession", "get_profile"]
