"""IP address and range matching.

A range specifier is one of:

* a single address (``10.0.0.1``, ``2001:db8::1``)
* an inclusive dash range (``10.0.0.0-10.0.0.255``)
* a CIDR block (``10.0.0.0/8``, ``2001:db8::/32``)

Anything that does not parse simply never matches.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True, slots=True)
class IPRange:
    """Inclusive address interval within one address family."""

    low: IPAddress
    high: IPAddress

    @property
    def version(self) -> int:
        return self.low.version

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
            return False
        if address.version != self.version:
            return False
        return self.low <= address <= self.high


def parse_address(text: Any) -> Optional[IPAddress]:
    if not isinstance(text, str):
        return None
    try:
        return ipaddress.ip_address(text.strip())
    except ValueError:
        return None


@lru_cache(maxsize=1024)
def _parse_range(spec: str) -> Optional[IPRange]:
    text = spec.strip()
    if "/" in text:
        try:
            network = ipaddress.ip_network(text, strict=False)
        except ValueError:
            return None
        return IPRange(network.network_address, network.broadcast_address)
    if "-" in text:
        low_text, _, high_text = text.partition("-")
        low = parse_address(low_text)
        high = parse_address(high_text)
        if low is None or high is None or low.version != high.version:
            return None
        if low > high:
            return None
        return IPRange(low, high)
    address = parse_address(text)
    if address is None:
        return None
    return IPRange(address, address)


def parse_range(spec: Any) -> Optional[IPRange]:
    """Parse a range specifier, returning None when it is malformed."""

    if not isinstance(spec, str):
        return None
    return _parse_range(spec)


def matches(address: str, ranges: Iterable[Any]) -> bool:
    """True iff ``address`` lies in at least one of ``ranges``."""

    parsed = parse_address(address)
    if parsed is None:
        return False
    for spec in ranges:
        ip_range = parse_range(spec)
        if ip_range is not None and parsed in ip_range:
            return True
    return False
