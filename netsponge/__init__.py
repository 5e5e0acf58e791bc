"""Ethernet, ARP, IPv4 and TCP packet handling and TCP encapsulation adapters for a user-space TCP stack."""

__version__ = "0.1.0"
__all__ = ["__version__"]