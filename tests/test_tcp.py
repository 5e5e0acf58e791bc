import pytest

from netsponge.errors import ParseError, ParseResult
from netsponge.ipv4 import internet_checksum
from netsponge.tcp import TCPHeader, TCPSegment


def _segment(**header_fields) -> TCPSegment:
    fields = dict(sport=1234, dport=80, seqno=1000, ackno=2000, win=137)
    fields.update(header_fields)
    return TCPSegment(header=TCPHeader(**fields), payload=b"hello")


def test_header_serialize_length_and_offset_byte():
    wire = TCPHeader().serialize()
    assert len(wire) == TCPHeader.LENGTH
    assert wire[12] == 0x50


def test_header_flag_bits():
    assert TCPHeader(syn=True).serialize()[13] == 0x02
    assert TCPHeader(fin=True).serialize()[13] == 0x01
    assert TCPHeader(ack=True, urg=True).serialize()[13] == 0x30


def test_header_round_trip():
    header = TCPHeader(
        sport=5, dport=6, seqno=0xFFFFFFFF, ackno=7, urg=True, ack=True,
        psh=True, rst=True, syn=True, fin=True, win=0xFFFF, cksum=0xABCD, uptr=3,
    )
    parsed = TCPHeader.parse(header.serialize())
    assert parsed == header
    assert (parsed.sport, parsed.dport, parsed.cksum) == (5, 6, 0xABCD)


def test_header_options_padded():
    wire = TCPHeader(doff=6).serialize()
    assert len(wire) == 24
    assert wire[20:] == b"\x00" * 4


def test_header_serialize_too_short_doff():
    with pytest.raises(ValueError):
        TCPHeader(doff=4).serialize()


def test_header_parse_too_short():
    with pytest.raises(ParseError) as info:
        TCPHeader.parse(b"\x00" * 10)
    assert info.value.result is ParseResult.PACKET_TOO_SHORT


def test_header_parse_small_doff():
    wire = bytearray(TCPHeader().serialize())
    wire[12] = 0x40
    with pytest.raises(ParseError) as info:
        TCPHeader.parse(bytes(wire))
    assert info.value.result is ParseResult.HEADER_TOO_SHORT


def test_header_parse_doff_beyond_data():
    wire = TCPHeader(doff=6).serialize()
    with pytest.raises(ParseError) as info:
        TCPHeader.parse(wire[:20])
    assert info.value.result is ParseResult.PACKET_TOO_SHORT


def test_header_equality_ignores_ports_and_checksum():
    assert TCPHeader(sport=1, dport=2, cksum=3, seqno=9) == TCPHeader(seqno=9)
    assert not TCPHeader(syn=True) == TCPHeader()


def test_header_summary():
    header = TCPHeader(syn=True, ack=True, seqno=5, ackno=7, win=100)
    assert header.summary() == "Header(flags=SA,seqno=5,ack=7,win=100)"


def test_header_str_uses_hex_and_booleans():
    text = str(TCPHeader(sport=255, syn=True))
    assert text.startswith("TCP source port: ff\n")
    assert "syn: true fin: false\n" in text


@pytest.mark.parametrize("pseudo", [0, 0x12345])
def test_segment_checksum_verifies(pseudo):
    wire = _segment().serialize(pseudo)
    assert internet_checksum(wire, pseudo) == 0


@pytest.mark.parametrize("pseudo", [0, 0x12345])
def test_segment_round_trip(pseudo):
    segment = _segment(syn=True)
    parsed = TCPSegment.parse(segment.serialize(pseudo), pseudo)
    assert parsed.header == segment.header
    assert parsed.payload == b"hello"
    assert parsed.header.sport == 1234


def test_segment_wrong_pseudo_checksum():
    wire = _segment().serialize(0x100)
    with pytest.raises(ParseError) as info:
        TCPSegment.parse(wire, 0x200)
    assert info.value.result is ParseResult.BAD_CHECKSUM


def test_segment_corrupted_payload():
    wire = bytearray(_segment().serialize())
    wire[20] ^= 0xFF
    with pytest.raises(ParseError) as info:
        TCPSegment.parse(bytes(wire))
    assert info.value.result is ParseResult.BAD_CHECKSUM


def test_segment_skips_options():
    segment = _segment(doff=7)
    parsed = TCPSegment.parse(segment.serialize())
    assert parsed.payload == b"hello"
    assert parsed.header.doff == 7


def test_segment_serialize_keeps_stored_checksum():
    segment = _segment(cksum=0x1111)
    segment.serialize()
    assert segment.header.cksum == 0x1111


@pytest.mark.parametrize(
    "syn, fin, expected",
    [(False, False, 5), (True, False, 6), (False, True, 6), (True, True, 7)],
)
def test_length_in_sequence_space(syn, fin, expected):
    assert _segment(syn=syn, fin=fin).length_in_sequence_space() == expected