"""Addresses and configuration for TCP connections and their adapters."""

from __future__ import annotations

import socket
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from .ipv4 import format_ipv4_address


def _numeric_host(host: str) -> int:
    try:
        packed = socket.inet_aton(host)
    except OSError:
        try:
            packed = socket.inet_aton(socket.gethostbyname(host))
        except OSError as exc:
            raise ValueError(f"cannot resolve IPv4 address {host!r}") from exc
    return int.from_bytes(packed, "big")


@dataclass(frozen=True)
class Address:
    """An IPv4 address and a port; the host is kept in dotted-quad form."""

    host: str
    port: Union[int, str] = 0

    def __post_init__(self) -> None:
        port = int(self.port)
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        object.__setattr__(self, "port", port)
        object.__setattr__(self, "host", format_ipv4_address(_numeric_host(self.host)))

    def ipv4_numeric(self) -> int:
        """The address as a 32-bit integer."""
        return _numeric_host(self.host)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass
class TCPConfig:
    """Settings for a TCP sender and receiver."""

    DEFAULT_CAPACITY: ClassVar[int] = 64000
    MAX_PAYLOAD_SIZE: ClassVar[int] = 1000
    TIMEOUT_DFLT: ClassVar[int] = 1000
    MAX_RETX_ATTEMPTS: ClassVar[int] = 8

    rt_timeout: int = 1000
    recv_capacity: int = 64000
    send_capacity: int = 64000
    fixed_isn: Optional[int] = None


@dataclass
class FdAdapterConfig:
    """Settings for adapters that carry TCP segments over another layer."""

    source: Address = field(default_factory=lambda: Address("0", 0))
    destination: Address = field(default_factory=lambda: Address("0", 0))
    loss_rate_dn: int = 0
    loss_rate_up: int = 0