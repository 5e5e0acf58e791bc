# netsponge

Building blocks for a user-space TCP stack. The package parses and builds the
packets a small TCP implementation needs, and moves TCP segments in and out of
IPv4 datagrams and UDP payloads. It has no dependencies outside the standard
library.

## What is in it

- `netsponge.errors`: `ParseError`, raised whenever bytes do not hold a valid
  packet. Its `result` attribute is a `ParseResult` member saying what was
  wrong (`PACKET_TOO_SHORT`, `BAD_CHECKSUM`, `WRONG_IP_VERSION`,
  `HEADER_TOO_SHORT`, `TRUNCATED_PACKET`, `UNSUPPORTED`).
- `netsponge.ethernet`: `EthernetHeader` and `EthernetFrame`, the
  `ETHERNET_BROADCAST` address, and `format_ethernet_address`, which prints an
  address as colon-separated hex pairs.
- `netsponge.arp`: `ARPMessage` for Ethernet/IPv4 ARP requests and replies.
  `supported()` tells whether the fields describe such a message; parsing an
  unsupported one raises `ParseError` with `ParseResult.UNSUPPORTED`, and
  serializing one raises `ValueError`.
- `netsponge.ipv4`: `IPv4Header` and `IPv4Datagram`, the `internet_checksum`
  function and `format_ipv4_address`. Parsing checks the version, header length,
  total length and header checksum; `IPv4Datagram.serialize()` fills in the
  header checksum. `pseudo_cksum()` gives the pseudo-header sum used by TCP.
- `netsponge.tcp`: `TCPHeader` and `TCPSegment`. `TCPSegment.serialize()` and
  `TCPSegment.parse()` take the pseudo-header sum of the carrying datagram (0
  when there is none) and compute or verify the checksum over the whole
  segment. TCP options are skipped, not interpreted. Header equality ignores
  the ports and the checksum.
- `netsponge.config`: `Address` (an IPv4 host and port; host names are resolved
  to dotted-quad form), `TCPConfig` and `FdAdapterConfig`.
- `netsponge.tcp_state`: `TCPState`, which sums up a connection as a sender
  summary, a receiver summary and its active and linger flags.
  `TCPState.from_state()` gives the summary for one of the standard TCP state
  names in `State`; `TCPState.from_parts()` builds one from any sender and
  receiver objects that expose the attributes it reads. The texts are in
  `SenderSummary` and `ReceiverSummary`.
- `netsponge.adapters`:
  - `TCPOverUDPSocketAdapter` reads and writes TCP segments as UDP payloads on
    a datagram socket it is given. When listening, the first SYN (without RST)
    fixes the peer it talks to from then on.
  - `TCPOverIPv4Adapter` wraps TCP segments in IPv4 datagrams and unwraps them
    again, filtering out datagrams that do not belong to the connection.
  - `LossyFdAdapter` wraps another adapter and drops reads and writes at random,
    at the rates `loss_rate_dn` and `loss_rate_up` of the configuration (out of
    65536). A `random.Random` may be passed in for repeatable runs.

## Install

```
pip install .
```

Install with the `test` extra to run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Build a segment and read it back:

```python
from netsponge.tcp import TCPHeader, TCPSegment

segment = TCPSegment(header=TCPHeader(sport=1234, dport=80, syn=True), payload=b"hello")
wire = segment.serialize(0)

parsed = TCPSegment.parse(wire, 0)
assert parsed.header.syn
assert parsed.payload == b"hello"
assert parsed.length_in_sequence_space() == 6
```

A segment whose checksum does not match fails to parse:

```python
from netsponge.errors import ParseError, ParseResult

damaged = bytearray(wire)
damaged[-1] ^= 0xFF
try:
    TCPSegment.parse(bytes(damaged), 0)
except ParseError as exc:
    assert exc.result is ParseResult.BAD_CHECKSUM
```

Carry a segment inside an IPv4 datagram between two endpoints:

```python
from netsponge.adapters import TCPOverIPv4Adapter
from netsponge.config import Address, FdAdapterConfig
from netsponge.ipv4 import IPv4Datagram
from netsponge.tcp import TCPHeader, TCPSegment

client = TCPOverIPv4Adapter(config=FdAdapterConfig(
    source=Address("10.0.0.1", 5000), destination=Address("10.0.0.2", 80)))
server = TCPOverIPv4Adapter(config=FdAdapterConfig(
    source=Address("10.0.0.2", 80), destination=Address("10.0.0.1", 5000)))

datagram = client.wrap_tcp_in_ip(TCPSegment(header=TCPHeader(ack=True), payload=b"hi"))
received = server.unwrap_tcp_in_ip(IPv4Datagram.parse(datagram.serialize()))
assert received is not None and received.payload == b"hi"
```

## What it does not do

The package handles packets and their encapsulation only. It has no TCP
sender, receiver or connection logic of its own, no event loop or socket-like
front end that runs a connection, and no access to TUN or TAP devices or to an
Ethernet interface with an ARP cache. `TCPState.from_parts()` summarises sender
and receiver objects supplied by the caller.