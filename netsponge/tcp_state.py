"""Summaries of a TCP connection's state, compared with the official TCP states."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Protocol


class ReceiverSummary(str, Enum):
    """Summary of a TCP receiver's state."""

    ERROR = "error (connection was reset)"
    LISTEN = "waiting for SYN: ackno is empty"
    SYN_RECV = "SYN received (ackno exists), and input to stream hasn't ended"
    FIN_RECV = "input to stream has ended"


class SenderSummary(str, Enum):
    """Summary of a TCP sender's state."""

    ERROR = "error (connection was reset)"
    CLOSED = "waiting for stream to begin (no SYN sent)"
    SYN_SENT = "stream started but nothing acknowledged"
    SYN_ACKED = "stream ongoing"
    FIN_SENT = "stream finished (FIN sent) but not fully acknowledged"
    FIN_ACKED = "stream finished and fully acknowledged"


class State(Enum):
    """Official state names from the TCP specification."""

    LISTEN = auto()
    SYN_RCVD = auto()
    SYN_SENT = auto()
    ESTABLISHED = auto()
    CLOSE_WAIT = auto()
    LAST_ACK = auto()
    FIN_WAIT_1 = auto()
    FIN_WAIT_2 = auto()
    CLOSING = auto()
    TIME_WAIT = auto()
    CLOSED = auto()
    RESET = auto()


class _OutboundStream(Protocol):
    error: bool
    eof: bool
    bytes_written: int


class _InboundStream(Protocol):
    error: bool
    input_ended: bool


class SenderLike(Protocol):
    stream_in: _OutboundStream
    next_seqno_absolute: int
    bytes_in_flight: int


class ReceiverLike(Protocol):
    stream_out: _InboundStream
    ackno: Optional[int]


# receiver, sender, active, linger_after_streams_finish
_OFFICIAL = {
    State.LISTEN: (ReceiverSummary.LISTEN, SenderSummary.CLOSED, True, True),
    State.SYN_RCVD: (ReceiverSummary.SYN_RECV, SenderSummary.SYN_SENT, True, True),
    State.SYN_SENT: (ReceiverSummary.LISTEN, SenderSummary.SYN_SENT, True, True),
    State.ESTABLISHED: (ReceiverSummary.SYN_RECV, SenderSummary.SYN_ACKED, True, True),
    State.CLOSE_WAIT: (ReceiverSummary.FIN_RECV, SenderSummary.SYN_ACKED, True, False),
    State.LAST_ACK: (ReceiverSummary.FIN_RECV, SenderSummary.FIN_SENT, True, False),
    State.CLOSING: (ReceiverSummary.FIN_RECV, SenderSummary.FIN_SENT, True, True),
    State.FIN_WAIT_1: (ReceiverSummary.SYN_RECV, SenderSummary.FIN_SENT, True, True),
    State.FIN_WAIT_2: (ReceiverSummary.SYN_RECV, SenderSummary.FIN_ACKED, True, True),
    State.TIME_WAIT: (ReceiverSummary.FIN_RECV, SenderSummary.FIN_ACKED, True, True),
    State.RESET: (ReceiverSummary.ERROR, SenderSummary.ERROR, False, False),
    State.CLOSED: (ReceiverSummary.FIN_RECV, SenderSummary.FIN_ACKED, False, False),
}


@dataclass(frozen=True)
class TCPState:
    """The sender and receiver summaries plus the connection's active and linger bits."""

    sender: SenderSummary = SenderSummary.CLOSED
    receiver: ReceiverSummary = ReceiverSummary.LISTEN
    active: bool = True
    linger_after_streams_finish: bool = True

    @classmethod
    def from_state(cls, state: State) -> TCPState:
        """The summary that corresponds to an official TCP state."""
        receiver, sender, active, linger = _OFFICIAL[state]
        return cls(sender=sender, receiver=receiver, active=active,
                   linger_after_streams_finish=linger)

    @classmethod
    def from_parts(cls, sender: SenderLike, receiver: ReceiverLike,
                   active: bool, linger: bool) -> TCPState:
        """Summarise a live sender and receiver with the connection's flags."""
        return cls(
            sender=cls.sender_summary(sender),
            receiver=cls.receiver_summary(receiver),
            active=active,
            linger_after_streams_finish=linger if active else False,
        )

    def name(self) -> str:
        """A one-line description of the state."""
        return (
            f"sender=`{self.sender.value}`, receiver=`{self.receiver.value}`, "
            f"active={int(self.active)}, "
            f"linger_after_streams_finish={int(self.linger_after_streams_finish)}"
        )

    @staticmethod
    def receiver_summary(receiver: ReceiverLike) -> ReceiverSummary:
        """Summarise a receiver's state."""
        if receiver.stream_out.error:
            return ReceiverSummary.ERROR
        if receiver.ackno is None:
            return ReceiverSummary.LISTEN
        if receiver.stream_out.input_ended:
            return ReceiverSummary.FIN_RECV
        return ReceiverSummary.SYN_RECV

    @staticmethod
    def sender_summary(sender: SenderLike) -> SenderSummary:
        """Summarise a sender's state."""
        stream = sender.stream_in
        if stream.error:
            return SenderSummary.ERROR
        if sender.next_seqno_absolute == 0:
            return SenderSummary.CLOSED
        if sender.next_seqno_absolute == sender.bytes_in_flight:
            return SenderSummary.SYN_SENT
        if not stream.eof:
            return SenderSummary.SYN_ACKED
        if sender.next_seqno_absolute < stream.bytes_written + 2:
            return SenderSummary.SYN_ACKED
        if sender.bytes_in_flight:
            return SenderSummary.FIN_SENT
        return SenderSummary.FIN_ACKED