"""Protocol interfaces for txd_client components."""

from txd_client.interfaces.call_builder import CallBuilder
from txd_client.interfaces.relay import Relay

__all__ = ["CallBuilder", "Relay"]
