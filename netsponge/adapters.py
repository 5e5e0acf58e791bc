"""Adapters that carry TCP segments over UDP or inside IPv4 datagrams."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from .config import Address, FdAdapterConfig
from .errors import ParseError
from .ipv4 import IPv4Datagram, IPv4Header, format_ipv4_address
from .tcp import TCPSegment

_MAX_DATAGRAM = 65536


class SegmentAdapter(Protocol):
    config: FdAdapterConfig
    listening: bool

    def read(self) -> Optional[TCPSegment]: ...

    def write(self, seg: TCPSegment) -> None: ...

    def tick(self, ms_since_last_tick: int) -> None: ...


@dataclass
class FdAdapterBase:
    """Configuration and listening flag shared by all adapters."""

    config: FdAdapterConfig = field(default_factory=FdAdapterConfig)
    listening: bool = False
    elapsed_ms: int = 0

    def tick(self, ms_since_last_tick: int) -> None:
        """Record that time has passed; the base adapter keeps no timers."""
        if ms_since_last_tick < 0:
            raise ValueError("time cannot run backwards")
        self.elapsed_ms += ms_since_last_tick


class TCPOverUDPSocketAdapter(FdAdapterBase):
    """Reads and writes TCP segments as UDP payloads on a datagram socket."""

    def __init__(self, sock: Any) -> None:
        super().__init__()
        self.sock = sock

    def fileno(self) -> int:
        return self.sock.fileno()

    def read(self) -> Optional[TCPSegment]:
        """Receive one datagram; return its segment if it belongs to this connection."""
        data, (host, port) = self.sock.recvfrom(_MAX_DATAGRAM)[:2]
        source = Address(host, port)

        if not self.listening and source != self.config.destination:
            return None

        try:
            seg = TCPSegment.parse(data, 0)
        except ParseError:
            return None

        if self.listening:
            if seg.header.syn and not seg.header.rst:
                self.config.destination = source
                self.listening = False
            else:
                return None
        return seg

    def write(self, seg: TCPSegment) -> None:
        """Set the segment's ports and send it to the destination."""
        seg.header.sport = self.config.source.port
        seg.header.dport = self.config.destination.port
        destination = self.config.destination
        self.sock.sendto(seg.serialize(0), (destination.host, destination.port))


class LossyFdAdapter:
    """Wraps an adapter and drops reads and writes at the configured loss rates.

    Loss rates are out of 65536: a rate of ``n`` drops about ``n / 65536`` of segments.
    """

    def __init__(self, adapter: SegmentAdapter, rng: Optional[Any] = None) -> None:
        self.adapter = adapter
        self._rng = rng if rng is not None else random.Random()

    def _should_drop(self, uplink: bool) -> bool:
        cfg = self.adapter.config
        loss = cfg.loss_rate_up if uplink else cfg.loss_rate_dn
        return loss != 0 and self._rng.getrandbits(16) < loss

    def read(self) -> Optional[TCPSegment]:
        """Read from the wrapped adapter, possibly discarding the result."""
        seg = self.adapter.read()
        if self._should_drop(False):
            return None
        return seg

    def write(self, seg: TCPSegment) -> None:
        """Write through the wrapped adapter unless the segment is dropped."""
        if self._should_drop(True):
            return
        self.adapter.write(seg)

    def set_listening(self, listening: bool) -> None:
        self.adapter.listening = listening

    @property
    def config(self) -> FdAdapterConfig:
        return self.adapter.config

    @config.setter
    def config(self, value: FdAdapterConfig) -> None:
        self.adapter.config = value

    def tick(self, ms_since_last_tick: int) -> None:
        self.adapter.tick(ms_since_last_tick)


class TCPOverIPv4Adapter(FdAdapterBase):
    """Converts between TCP segments and IPv4 datagrams."""

    def unwrap_tcp_in_ip(self, datagram: IPv4Datagram) -> Optional[TCPSegment]:
        """Return the datagram's TCP segment if it belongs to this connection."""
        header = datagram.header
        cfg = self.config

        # Binding to 0.0.0.0 is allowed; the reply then comes from the address contacted.
        if not self.listening and header.dst != cfg.source.ipv4_numeric():
            return None
        if not self.listening and header.src != cfg.destination.ipv4_numeric():
            return None
        if header.proto != IPv4Header.PROTO_TCP:
            return None

        try:
            seg = TCPSegment.parse(datagram.payload, header.pseudo_cksum())
        except ParseError:
            return None

        if seg.header.dport != cfg.source.port:
            return None

        if self.listening:
            if seg.header.syn and not seg.header.rst:
                cfg.source = Address(format_ipv4_address(header.dst), cfg.source.port)
                cfg.destination = Address(format_ipv4_address(header.src), seg.header.sport)
                self.listening = False
            else:
                return None

        if seg.header.sport != cfg.destination.port:
            return None
        return seg

    def wrap_tcp_in_ip(self, seg: TCPSegment) -> IPv4Datagram:
        """Set the segment's ports and wrap it in an IPv4 datagram."""
        seg.header.sport = self.config.source.port
        seg.header.dport = self.config.destination.port

        datagram = IPv4Datagram()
        datagram.header.src = self.config.source.ipv4_numeric()
        datagram.header.dst = self.config.destination.ipv4_numeric()
        datagram.header.len = (
            datagram.header.hlen * 4 + seg.header.doff * 4 + len(seg.payload)
        )
        datagram.payload = seg.serialize(datagram.header.pseudo_cksum())
        return datagram