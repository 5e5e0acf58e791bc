"""TCP headers and segments."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace
from typing import ClassVar

from .errors import ParseError, ParseResult
from .ipv4 import internet_checksum

_HEADER_FORMAT = struct.Struct("!HHIIBBHHH")

_URG = 0b0010_0000
_ACK = 0b0001_0000
_PSH = 0b0000_1000
_RST = 0b0000_0100
_SYN = 0b0000_0010
_FIN = 0b0000_0001


@dataclass(eq=False)
class TCPHeader:
    """TCP segment header. Options are skipped, not interpreted."""

    LENGTH: ClassVar[int] = 20

    sport: int = 0
    dport: int = 0
    seqno: int = 0
    ackno: int = 0
    doff: int = 5
    urg: bool = False
    ack: bool = False
    psh: bool = False
    rst: bool = False
    syn: bool = False
    fin: bool = False
    win: int = 0
    cksum: int = 0
    uptr: int = 0

    @classmethod
    def parse(cls, data: bytes) -> TCPHeader:
        """Parse a header from the start of ``data``."""
        data = bytes(data)
        if len(data) < cls.LENGTH:
            raise ParseError(ParseResult.PACKET_TOO_SHORT)
        (sport, dport, seqno, ackno, off_byte, flags, win, cksum, uptr) = (
            _HEADER_FORMAT.unpack_from(data)
        )
        header = cls(
            sport=sport,
            dport=dport,
            seqno=seqno,
            ackno=ackno,
            doff=off_byte >> 4,
            urg=bool(flags & _URG),
            ack=bool(flags & _ACK),
            psh=bool(flags & _PSH),
            rst=bool(flags & _RST),
            syn=bool(flags & _SYN),
            fin=bool(flags & _FIN),
            win=win,
            cksum=cksum,
            uptr=uptr,
        )
        if header.doff < 5:
            raise ParseError(ParseResult.HEADER_TOO_SHORT)
        if len(data) < 4 * header.doff:
            raise ParseError(ParseResult.PACKET_TOO_SHORT)
        return header

    def serialize(self) -> bytes:
        """Return the header's wire bytes; the checksum is written as stored."""
        if self.doff < 5:
            raise ValueError("TCP header too short")
        flags = (
            (_URG if self.urg else 0)
            | (_ACK if self.ack else 0)
            | (_PSH if self.psh else 0)
            | (_RST if self.rst else 0)
            | (_SYN if self.syn else 0)
            | (_FIN if self.fin else 0)
        )
        wire = _HEADER_FORMAT.pack(
            self.sport,
            self.dport,
            self.seqno & 0xFFFFFFFF,
            self.ackno & 0xFFFFFFFF,
            (self.doff << 4) & 0xFF,
            flags,
            self.win,
            self.cksum,
            self.uptr,
        )
        return wire.ljust(4 * self.doff, b"\x00")

    def __str__(self) -> str:
        flag_text = " ".join(
            f"{name}: {str(bool(value)).lower()}"
            for name, value in (
                ("urg", self.urg),
                ("ack", self.ack),
                ("psh", self.psh),
                ("rst", self.rst),
                ("syn", self.syn),
                ("fin", self.fin),
            )
        )
        return (
            f"TCP source port: {self.sport:x}\n"
            f"TCP dest port: {self.dport:x}\n"
            f"TCP seqno: {self.seqno:x}\n"
            f"TCP ackno: {self.ackno:x}\n"
            f"TCP doff: {self.doff:x}\n"
            f"Flags: {flag_text}\n"
            f"TCP winsize: {self.win:x}\n"
            f"TCP cksum: {self.cksum:x}\n"
            f"TCP uptr: {self.uptr:x}\n"
        )

    def summary(self) -> str:
        """A one-line human-readable summary."""
        flags = (
            ("S" if self.syn else "")
            + ("A" if self.ack else "")
            + ("R" if self.rst else "")
            + ("F" if self.fin else "")
        )
        return f"Header(flags={flags},seqno={self.seqno},ack={self.ackno},win={self.win})"

    def __eq__(self, other: object) -> bool:
        # Ports and checksum are deliberately not compared.
        if not isinstance(other, TCPHeader):
            return NotImplemented
        return (
            self.seqno == other.seqno
            and self.ackno == other.ackno
            and self.doff == other.doff
            and self.urg == other.urg
            and self.ack == other.ack
            and self.psh == other.psh
            and self.rst == other.rst
            and self.syn == other.syn
            and self.fin == other.fin
            and self.win == other.win
            and self.uptr == other.uptr
        )

    __hash__ = None  # type: ignore[assignment]


@dataclass
class TCPSegment:
    """A TCP header followed by its payload."""

    header: TCPHeader = field(default_factory=TCPHeader)
    payload: bytes = b""

    @classmethod
    def parse(cls, data: bytes, datagram_layer_checksum: int = 0) -> TCPSegment:
        """Verify the checksum and parse a whole segment.

        ``datagram_layer_checksum`` is the pseudo-header sum of the carrying datagram.
        """
        data = bytes(data)
        if internet_checksum(data, datagram_layer_checksum):
            raise ParseError(ParseResult.BAD_CHECKSUM)
        header = TCPHeader.parse(data)
        return cls(header=header, payload=data[4 * header.doff:])

    def serialize(self, datagram_layer_checksum: int = 0) -> bytes:
        """Return the wire bytes, with the checksum computed over the whole segment."""
        payload = bytes(self.payload)
        zeroed = replace(self.header, cksum=0)
        cksum = internet_checksum(zeroed.serialize() + payload, datagram_layer_checksum)
        return replace(self.header, cksum=cksum).serialize() + payload

    def length_in_sequence_space(self) -> int:
        """Payload length plus one for SYN and one for FIN."""
        return len(self.payload) + int(self.header.syn) + int(self.header.fin)