"""Errors raised when a packet cannot be parsed."""

from __future__ import annotations

from enum import Enum


class ParseResult(Enum):
    """Outcome of parsing a packet or header."""

    NO_ERROR = "no error"
    BAD_CHECKSUM = "bad checksum"
    PACKET_TOO_SHORT = "packet too short"
    WRONG_IP_VERSION = "wrong IP version"
    HEADER_TOO_SHORT = "header too short"
    TRUNCATED_PACKET = "truncated packet"
    UNSUPPORTED = "unsupported"


class ParseError(ValueError):
    """Raised when bytes do not hold a valid packet."""

    def __init__(self, result: ParseResult) -> None:
        if result is ParseResult.NO_ERROR:
            raise ValueError("ParseError requires a failure result")
        super().__init__(result.value)
        self.result = result