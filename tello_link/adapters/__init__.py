"""Adapter modules for external integrations."""

from .udp import Address, DatagramEndpoint, open_endpoint

__all__ = [
    "Address",
    "DatagramEndpoint",
    "open_endpoint",
]
