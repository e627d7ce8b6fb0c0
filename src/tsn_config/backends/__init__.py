"""Protocol backends and the backend registry."""
from .base import ProtocolBackend
from .netconf import NetconfBackend
from .registry import BackendRegistry

__all__ = ["ProtocolBackend", "NetconfBackend", "BackendRegistry"]
