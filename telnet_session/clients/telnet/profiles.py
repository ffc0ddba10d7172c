"""Login profiles for common device families.

Each profile names the username and password prompts a device shows at
login and the regex its command prompt ends with. Adding a device family
only means adding an entry here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType

from telnet_session.exceptions import ConfigurationError


@dataclass(slots=True, frozen=True)
class HostProfile:
    """Login prompts and timing for one device family."""

    username_prompt: str
    password_prompt: str
    prompt_pattern: str  # Regex, matched at the end of the output
    delay: float = field(default=0.0)  # Seconds, for devices that need pacing


HOST_PROFILES: MappingProxyType[str, HostProfile] = MappingProxyType({
    # General Linux/UNIX
    "linux": HostProfile("login:", "Password:", r"\$"),
    # Cisco IOS, IOS-XE, IOS-XR
    "ios": HostProfile("Username:", "Password:", r"[>#]"),
    # Ethernet over Coax master units
    "eoc-master": HostProfile("Login:", "Password:", r"(>|:|\)#)"),
    # Ethernet over Coax modems answer slowly
    "eoc-modem": HostProfile("login:", "Password:", r"#", delay=0.1),
    # Juniper Junos OS
    "junos": HostProfile("login:", "Password:", r"[%>#]"),
    # AlaxalA, HITACHI
    "alaxala": HostProfile("login:", "Password:", r"[>#]"),
})


def get_profile(name: str) -> HostProfile:
    """Look up a host profile by name.

    Returns:
        The matching HostProfile

    Raises:
        ConfigurationError: If no profile has that name
    """
    try:
        return HOST_PROFILES[name]
    except KeyError:
        msg = f"Host type is invalid: {name}"
        raise ConfigurationError(msg) from None
