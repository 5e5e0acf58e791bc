"""Ethernet headers and frames."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from .errors import ParseError, ParseResult

ETHERNET_ADDRESS_LENGTH = 6
ETHERNET_BROADCAST = b"\xff" * ETHERNET_ADDRESS_LENGTH

_HEADER_FORMAT = struct.Struct("!6s6sH")


def format_ethernet_address(address: bytes) -> str:
    """Return the address as colon-separated lower-case hex pairs."""
    return ":".join(f"{byte:02x}" for byte in address)


def _check_address(name: str, address: bytes) -> bytes:
    address = bytes(address)
    if len(address) != ETHERNET_ADDRESS_LENGTH:
        raise ValueError(f"{name} must be {ETHERNET_ADDRESS_LENGTH} bytes, got {len(address)}")
    return address


@dataclass
class EthernetHeader:
    """Ethernet frame header: destination, source and type."""

    LENGTH: ClassVar[int] = 14
    TYPE_IPV4: ClassVar[int] = 0x800
    TYPE_ARP: ClassVar[int] = 0x806

    dst: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    src: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    type: int = 0

    def __post_init__(self) -> None:
        self.dst = _check_address("dst", self.dst)
        self.src = _check_address("src", self.src)

    @classmethod
    def parse(cls, data: bytes) -> EthernetHeader:
        """Parse a header from the start of ``data``."""
        if len(data) < cls.LENGTH:
            raise ParseError(ParseResult.PACKET_TOO_SHORT)
        dst, src, frame_type = _HEADER_FORMAT.unpack_from(data)
        return cls(dst=dst, src=src, type=frame_type)

    def serialize(self) -> bytes:
        """Return the header's wire bytes."""
        return _HEADER_FORMAT.pack(self.dst, self.src, self.type)

    def __str__(self) -> str:
        if self.type == self.TYPE_IPV4:
            type_name = "IPv4"
        elif self.type == self.TYPE_ARP:
            type_name = "ARP"
        else:
            type_name = f"[unknown type {self.type:x}!]"
        return (
            f"dst={format_ethernet_address(self.dst)}, "
            f"src={format_ethernet_address(self.src)}, type={type_name}"
        )


@dataclass
class EthernetFrame:
    """An Ethernet header followed by its payload."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: bytes = b""

    @classmethod
    def parse(cls, data: bytes) -> EthernetFrame:
        """Parse a whole frame."""
        data = bytes(data)
        header = EthernetHeader.parse(data)
        return cls(header=header, payload=data[EthernetHeader.LENGTH:])

    def serialize(self) -> bytes:
        """Return the frame's wire bytes."""
        return self.header.serialize() + bytes(self.payload)