"""ARP messages for resolving IPv4 addresses to Ethernet addresses."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from .errors import ParseError, ParseResult
from .ethernet import ETHERNET_ADDRESS_LENGTH, EthernetHeader, format_ethernet_address
from .ipv4 import format_ipv4_address

_IPV4_ADDRESS_LENGTH = 4
_PREAMBLE_FORMAT = struct.Struct("!HHBBH")
_MESSAGE_FORMAT = struct.Struct("!HHBBH6sI6sI")


def _check_address(name: str, address: bytes) -> bytes:
    address = bytes(address)
    if len(address) != ETHERNET_ADDRESS_LENGTH:
        raise ValueError(f"{name} must be {ETHERNET_ADDRESS_LENGTH} bytes, got {len(address)}")
    return address


@dataclass
class ARPMessage:
    """An ARP request or reply for Ethernet and IPv4."""

    LENGTH: ClassVar[int] = 28
    TYPE_ETHERNET: ClassVar[int] = 1
    OPCODE_REQUEST: ClassVar[int] = 1
    OPCODE_REPLY: ClassVar[int] = 2

    hardware_type: int = 1
    protocol_type: int = EthernetHeader.TYPE_IPV4
    hardware_address_size: int = ETHERNET_ADDRESS_LENGTH
    protocol_address_size: int = _IPV4_ADDRESS_LENGTH
    opcode: int = 0
    sender_ethernet_address: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    sender_ip_address: int = 0
    target_ethernet_address: bytes = bytes(ETHERNET_ADDRESS_LENGTH)
    target_ip_address: int = 0

    def __post_init__(self) -> None:
        self.sender_ethernet_address = _check_address(
            "sender_ethernet_address", self.sender_ethernet_address
        )
        self.target_ethernet_address = _check_address(
            "target_ethernet_address", self.target_ethernet_address
        )

    @classmethod
    def parse(cls, data: bytes) -> ARPMessage:
        """Parse an ARP message, raising ParseError if it is short or unsupported."""
        data = bytes(data)
        if len(data) < cls.LENGTH:
            raise ParseError(ParseResult.PACKET_TOO_SHORT)

        hw_type, proto_type, hw_size, proto_size, opcode = _PREAMBLE_FORMAT.unpack_from(data)
        preamble = cls(
            hardware_type=hw_type,
            protocol_type=proto_type,
            hardware_address_size=hw_size,
            protocol_address_size=proto_size,
            opcode=opcode,
        )
        if not preamble.supported():
            raise ParseError(ParseResult.UNSUPPORTED)

        (*_, sender_eth, sender_ip, target_eth, target_ip) = _MESSAGE_FORMAT.unpack_from(data)
        preamble.sender_ethernet_address = sender_eth
        preamble.sender_ip_address = sender_ip
        preamble.target_ethernet_address = target_eth
        preamble.target_ip_address = target_ip
        return preamble

    def supported(self) -> bool:
        """Whether this is an Ethernet/IPv4 request or reply."""
        return (
            self.hardware_type == self.TYPE_ETHERNET
            and self.protocol_type == EthernetHeader.TYPE_IPV4
            and self.hardware_address_size == ETHERNET_ADDRESS_LENGTH
            and self.protocol_address_size == _IPV4_ADDRESS_LENGTH
            and self.opcode in (self.OPCODE_REQUEST, self.OPCODE_REPLY)
        )

    def serialize(self) -> bytes:
        """Return the message's wire bytes."""
        if not self.supported():
            raise ValueError(
                "ARPMessage.serialize(): unsupported field combination "
                "(must be Ethernet/IP, and request or reply)"
            )
        return _MESSAGE_FORMAT.pack(
            self.hardware_type,
            self.protocol_type,
            self.hardware_address_size,
            self.protocol_address_size,
            self.opcode,
            self.sender_ethernet_address,
            self.sender_ip_address,
            self.target_ethernet_address,
            self.target_ip_address,
        )

    def __str__(self) -> str:
        if self.opcode == self.OPCODE_REQUEST:
            opcode_text = "REQUEST"
        elif self.opcode == self.OPCODE_REPLY:
            opcode_text = "REPLY"
        else:
            opcode_text = "(unknown type)"
        return (
            f"opcode={opcode_text}, "
            f"sender={format_ethernet_address(self.sender_ethernet_address)}"
            f"/{format_ipv4_address(self.sender_ip_address)}, "
            f"target={format_ethernet_address(self.target_ethernet_address)}"
            f"/{format_ipv4_address(self.target_ip_address)}"
        )