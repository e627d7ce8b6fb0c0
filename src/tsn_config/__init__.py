"""TSN switch configuration service.

Translates protocol-neutral intent (gate-control schedules) into
schema-version-specific NETCONF payloads and pushes them to every managed
port of a topology.
"""
from .errors import (
    TSNConfigError,
    UnsupportedFeatureError,
    MappingError,
    ParseError,
    TransportError,
    StoreError,
    NotFoundError,
)

__version__ = "0.1.0"

__all__ = [
    "TSNConfigError",
    "UnsupportedFeatureError",
    "MappingError",
    "ParseError",
    "TransportError",
    "StoreError",
    "NotFoundError",
    "__version__",
]
