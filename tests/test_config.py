import pytest

from netsponge.config import Address, FdAdapterConfig, TCPConfig
from netsponge.ipv4 import format_ipv4_address


def test_zero_address_is_any():
    address = Address("0", 0)
    assert address.ipv4_numeric() == 0
    assert address.host == "0.0.0.0"


def test_address_str_has_host_and_port():
    assert str(Address("10.0.0.1", 80)) == "10.0.0.1:80"


def test_string_port_is_converted():
    assert Address("192.168.1.5", "8080").port == 8080


def test_numeric_round_trip():
    address = Address("169.254.144.9", 7)
    assert format_ipv4_address(address.ipv4_numeric()) == "169.254.144.9"


def test_equal_addresses_compare_equal():
    assert Address("10.1.2.3", 9) == Address("10.1.2.3", "9")
    assert Address("10.1.2.3", 9) != Address("10.1.2.3", 10)


@pytest.mark.parametrize("port", [-1, 65536, "notaport"])
def test_bad_port_raises(port):
    with pytest.raises(ValueError):
        Address("10.0.0.1", port)


def test_tcp_config_defaults():
    cfg = TCPConfig()
    assert cfg.rt_timeout == TCPConfig.TIMEOUT_DFLT == 1000
    assert cfg.recv_capacity == cfg.send_capacity == TCPConfig.DEFAULT_CAPACITY == 64000
    assert cfg.fixed_isn is None
    assert TCPConfig.MAX_PAYLOAD_SIZE == 1000
    assert TCPConfig.MAX_RETX_ATTEMPTS == 8


def test_adapter_config_defaults():
    cfg = FdAdapterConfig()
    assert cfg.source == Address("0", 0)
    assert cfg.destination == Address("0", 0)
    assert (cfg.loss_rate_dn, cfg.loss_rate_up) == (0, 0)


def test_adapter_configs_do_not_share_state():
    first = FdAdapterConfig()
    second = FdAdapterConfig()
    first.source = Address("10.0.0.1", 5)
    assert second.source == Address("0", 0)