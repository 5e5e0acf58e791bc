from types import SimpleNamespace

import pytest

from netsponge.tcp_state import ReceiverSummary, SenderSummary, State, TCPState


def make_sender(next_seqno=0, in_flight=0, eof=False, written=0, error=False):
    return SimpleNamespace(
        stream_in=SimpleNamespace(error=error, eof=eof, bytes_written=written),
        next_seqno_absolute=next_seqno,
        bytes_in_flight=in_flight,
    )


def make_receiver(ackno=None, ended=False, error=False):
    return SimpleNamespace(
        stream_out=SimpleNamespace(error=error, input_ended=ended), ackno=ackno
    )


def test_listen_state():
    state = TCPState.from_state(State.LISTEN)
    assert state.receiver is ReceiverSummary.LISTEN
    assert state.sender is SenderSummary.CLOSED
    assert state.active and state.linger_after_streams_finish


def test_reset_state_is_inactive():
    state = TCPState.from_state(State.RESET)
    assert state.receiver is ReceiverSummary.ERROR
    assert state.sender is SenderSummary.ERROR
    assert not state.active
    assert not state.linger_after_streams_finish


@pytest.mark.parametrize("state", [State.CLOSE_WAIT, State.LAST_ACK, State.CLOSED])
def test_states_without_linger(state):
    assert not TCPState.from_state(state).linger_after_streams_finish


def test_every_official_state_is_distinct_except_closed_variants():
    states = {s: TCPState.from_state(s) for s in State}
    assert len(set(states.values())) == len(State)


def test_summary_strings_match_source():
    established = TCPState.from_state(State.ESTABLISHED)
    assert established.sender.value == "stream ongoing"
    close_wait = TCPState.from_state(State.CLOSE_WAIT)
    assert close_wait.receiver.value == "input to stream has ended"


def test_name_format():
    state = TCPState.from_state(State.LISTEN)
    assert state.name() == (
        f"sender=`{SenderSummary.CLOSED.value}`, receiver=`{ReceiverSummary.LISTEN.value}`, "
        "active=1, linger_after_streams_finish=1"
    )


def test_name_of_closed_state_reports_zeros():
    assert TCPState.from_state(State.CLOSED).name().endswith(
        "active=0, linger_after_streams_finish=0"
    )


@pytest.mark.parametrize(
    "sender, expected",
    [
        (make_sender(error=True, next_seqno=5), SenderSummary.ERROR),
        (make_sender(), SenderSummary.CLOSED),
        (make_sender(next_seqno=1, in_flight=1), SenderSummary.SYN_SENT),
        (make_sender(next_seqno=5, in_flight=2), SenderSummary.SYN_ACKED),
        (make_sender(next_seqno=5, eof=True, written=4), SenderSummary.SYN_ACKED),
        (make_sender(next_seqno=6, in_flight=1, eof=True, written=4), SenderSummary.FIN_SENT),
        (make_sender(next_seqno=6, eof=True, written=4), SenderSummary.FIN_ACKED),
    ],
)
def test_sender_summary(sender, expected):
    assert TCPState.sender_summary(sender) is expected


@pytest.mark.parametrize(
    "receiver, expected",
    [
        (make_receiver(error=True, ackno=3), ReceiverSummary.ERROR),
        (make_receiver(), ReceiverSummary.LISTEN),
        (make_receiver(ackno=3, ended=True), ReceiverSummary.FIN_RECV),
        (make_receiver(ackno=3), ReceiverSummary.SYN_RECV),
    ],
)
def test_receiver_summary(receiver, expected):
    assert TCPState.receiver_summary(receiver) is expected


def test_from_parts_matches_official_listen():
    state = TCPState.from_parts(make_sender(), make_receiver(), True, True)
    assert state == TCPState.from_state(State.LISTEN)


def test_from_parts_matches_official_established():
    state = TCPState.from_parts(make_sender(next_seqno=5, in_flight=2), make_receiver(ackno=9), True, True)
    assert state == TCPState.from_state(State.ESTABLISHED)


def test_inactive_connection_never_lingers():
    state = TCPState.from_parts(
        make_sender(next_seqno=6, eof=True, written=4), make_receiver(ackno=2, ended=True), False, True
    )
    assert state == TCPState.from_state(State.CLOSED)


def test_linger_difference_breaks_equality():
    assert TCPState.from_state(State.TIME_WAIT) != TCPState.from_state(State.CLOSED)