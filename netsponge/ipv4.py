"""IPv4 headers, datagrams and the Internet checksum."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass, field, replace
from typing import ClassVar

from .errors import ParseError, ParseResult

_HEADER_FORMAT = struct.Struct("!BBHHHBBHII")


def internet_checksum(data: bytes, initial: int = 0) -> int:
    """Return the one's-complement Internet checksum of ``data``.

    ``initial`` is added to the running sum, e.g. a pseudo-header sum.
    """
    data = bytes(data)
    if len(data) % 2:
        data += b"\x00"
    total = initial + sum(
        word for (word,) in struct.iter_unpack("!H", data)
    )
    while total > 0xFFFF:
        total = (total & 0xFFFF) + (total >> 16)
    return ~total & 0xFFFF


def format_ipv4_address(address: int) -> str:
    """Return a numeric IPv4 address in dotted-quad form."""
    return str(ipaddress.IPv4Address(address))


@dataclass
class IPv4Header:
    """IPv4 datagram header. Options are not supported."""

    LENGTH: ClassVar[int] = 20
    DEFAULT_TTL: ClassVar[int] = 128
    PROTO_TCP: ClassVar[int] = 6

    ver: int = 4
    hlen: int = 5
    tos: int = 0
    len: int = 0
    id: int = 0
    df: bool = True
    mf: bool = False
    offset: int = 0
    ttl: int = 128
    proto: int = 6
    cksum: int = 0
    src: int = 0
    dst: int = 0

    @classmethod
    def parse(cls, data: bytes) -> IPv4Header:
        """Parse and validate the header of the complete datagram ``data``."""
        data = bytes(data)
        data_size = len(data)
        if data_size < cls.LENGTH:
            raise ParseError(ParseResult.PACKET_TOO_SHORT)

        (first, tos, length, ident, fo_val, ttl, proto, cksum, src, dst) = (
            _HEADER_FORMAT.unpack_from(data)
        )
        header = cls(
            ver=first >> 4,
            hlen=first & 0x0F,
            tos=tos,
            len=length,
            id=ident,
            df=bool(fo_val & 0x4000),
            mf=bool(fo_val & 0x2000),
            offset=fo_val & 0x1FFF,
            ttl=ttl,
            proto=proto,
            cksum=cksum,
            src=src,
            dst=dst,
        )

        if data_size < 4 * header.hlen:
            raise ParseError(ParseResult.PACKET_TOO_SHORT)
        if header.ver != 4:
            raise ParseError(ParseResult.WRONG_IP_VERSION)
        if header.hlen < 5:
            raise ParseError(ParseResult.HEADER_TOO_SHORT)
        if data_size != header.len:
            raise ParseError(ParseResult.TRUNCATED_PACKET)
        if internet_checksum(data[: 4 * header.hlen]):
            raise ParseError(ParseResult.BAD_CHECKSUM)
        return header

    def serialize(self) -> bytes:
        """Return the header's wire bytes; the checksum is written as stored."""
        if self.ver != 4:
            raise ValueError("wrong IP version")
        if 4 * self.hlen < self.LENGTH:
            raise ValueError("IP header too short")
        fo_val = (0x4000 if self.df else 0) | (0x2000 if self.mf else 0) | (self.offset & 0x1FFF)
        wire = _HEADER_FORMAT.pack(
            ((self.ver << 4) | (self.hlen & 0x0F)) & 0xFF,
            self.tos,
            self.len,
            self.id,
            fo_val,
            self.ttl,
            self.proto,
            self.cksum,
            self.src,
            self.dst,
        )
        return wire.ljust(4 * self.hlen, b"\x00")

    def payload_length(self) -> int:
        """Length of the payload in bytes."""
        return (self.len - 4 * self.hlen) & 0xFFFF

    def pseudo_cksum(self) -> int:
        """The pseudo-header's contribution to a TCP checksum."""
        total = (self.src >> 16) + (self.src & 0xFFFF)
        total += (self.dst >> 16) + (self.dst & 0xFFFF)
        total += self.proto
        total += self.payload_length()
        return total & 0xFFFFFFFF

    def __str__(self) -> str:
        return (
            f"IP version: {self.ver:x}\n"
            f"IP hdr len: {self.hlen:x}\n"
            f"IP tos: {self.tos:x}\n"
            f"IP dgram len: {self.len:x}\n"
            f"IP id: {self.id:x}\n"
            f"Flags: df: {str(bool(self.df)).lower()} mf: {str(bool(self.mf)).lower()}\n"
            f"Offset: {self.offset:x}\n"
            f"TTL: {self.ttl:x}\n"
            f"Protocol: {self.proto:x}\n"
            f"Checksum: {self.cksum:x}\n"
            f"Src addr: {self.src:x}\n"
            f"Dst addr: {self.dst:x}\n"
        )

    def summary(self) -> str:
        """A one-line human-readable summary."""
        ttl_part = "" if self.ttl >= 10 else f"ttl={self.ttl}, "
        return (
            f"IPv{self.ver:x}, len={self.len:x}, protocol={self.proto:x}, {ttl_part}"
            f"src={format_ipv4_address(self.src)}, dst={format_ipv4_address(self.dst)}"
        )


@dataclass
class IPv4Datagram:
    """An IPv4 header followed by its payload."""

    header: IPv4Header = field(default_factory=IPv4Header)
    payload: bytes = b""

    @classmethod
    def parse(cls, data: bytes) -> IPv4Datagram:
        """Parse and validate a whole datagram."""
        data = bytes(data)
        header = IPv4Header.parse(data)
        payload = data[4 * header.hlen:]
        if len(payload) != header.payload_length():
            raise ParseError(ParseResult.PACKET_TOO_SHORT)
        return cls(header=header, payload=payload)

    def serialize(self) -> bytes:
        """Return the wire bytes, with the header checksum computed."""
        payload = bytes(self.payload)
        if len(payload) != self.header.payload_length():
            raise ValueError("IPv4Datagram.serialize: payload is wrong size")
        zeroed = replace(self.header, cksum=0)
        header_out = replace(self.header, cksum=internet_checksum(zeroed.serialize()))
        return header_out.serialize() + payload