"""``no_proxy`` exclusion matching.

Matching follows curl's behaviour (https://curl.se/libcurl/c/CURLOPT_NOPROXY.html):

- ``*`` excludes every host.
- A domain entry matches the host exactly or as a parent domain on a label
  boundary: ``repo.org`` matches ``other.repo.org`` but not ``myrepo.org``.
  Leading dots are ignored.
- An IP address or CIDR block matches IP hosts inside it.
- ``host:port`` entries only match requests to that port.

Comparison is case-insensitive.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlsplit

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

_DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass(frozen=True)
class NoProxyEntry:
    """One parsed ``no_proxy`` item."""

    text: str
    domain: Optional[str] = None
    network: Optional[IPNetwork] = None
    port: Optional[int] = None
    wildcard: bool = False

    def matches(self, host: str, port: Optional[int]) -> bool:
        if self.wildcard:
            return True
        if self.port is not None and self.port != port:
            return False
        if self.network is not None:
            try:
                return ipaddress.ip_address(host) in self.network
            except ValueError:
                return False
        if self.domain:
            return host == self.domain or host.endswith("." + self.domain)
        return False


def _parse_entry(text: str) -> Optional[NoProxyEntry]:
    value = text.strip().lower()
    if not value:
        return None
    if value == "*":
        return NoProxyEntry(text=value, wildcard=True)

    host, port_text = value, ""
    if value.startswith("["):
        host, _, rest = value[1:].partition("]")
        port_text = rest[1:] if rest.startswith(":") else ""
    elif value.count(":") == 1:
        host, _, port_text = value.partition(":")

    port: Optional[int] = None
    if port_text:
        if not port_text.isdigit():
            return None
        port = int(port_text)

    try:
        return NoProxyEntry(text=value, network=ipaddress.ip_network(host, strict=False), port=port)
    except ValueError:
        pass

    domain = host.lstrip(".")
    if not domain:
        return None
    return NoProxyEntry(text=value, domain=domain, port=port)


class NoProxyPattern:
    """Parsed ``no_proxy`` list.

    Args:
        value: Comma-separated entries, e.g. ``"localhost,.internal,10.0.0.0/8"``.

    Example::

        pattern = NoProxyPattern("other.repo.org")
        assert pattern.matches("https://other.repo.org/packages.json")
        assert not pattern.matches("https://repo.org/packages.json")
    """

    def __init__(self, value: str) -> None:
        self._entries: tuple[NoProxyEntry, ...] = tuple(
            entry for entry in (_parse_entry(item) for item in value.split(",")) if entry is not None
        )

    @property
    def entries(self) -> tuple[NoProxyEntry, ...]:
        return self._entries

    def __bool__(self) -> bool:
        return bool(self._entries)

    def matches(self, url: str) -> bool:
        """Return ``True`` if requests to *url* must bypass the proxy."""
        try:
            parts = urlsplit(url)
            host = parts.hostname
            port = parts.port
        except ValueError:
            return False
        if not host:
            return False
        if port is None:
            port = _DEFAULT_PORTS.get(parts.scheme.lower())
        host = host.rstrip(".")
        return any(entry.matches(host, port) for entry in self._entries)
