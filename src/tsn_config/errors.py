"""Error taxonomy for the TSN configuration service.

Every error carries optional ``plugin`` and ``target`` context so that the
orchestration report can say which adapter and which (node, port) failed.
"""
from typing import Optional


class TSNConfigError(Exception):
    """Base error for tsn_config."""

    retryable: bool = False

    def __init__(
        self,
        message: str = "",
        plugin: Optional[str] = None,
        target: Optional[str] = None,
    ):
        super().__init__(message)
        self.plugin = plugin
        self.target = target

    @property
    def kind(self) -> str:
        return type(self).__name__


class UnsupportedFeatureError(TSNConfigError):
    """No registered plugin maps the feature for the given device model."""


class MappingError(TSNConfigError):
    """The intent message cannot be represented in the target schema."""


class ParseError(MappingError):
    """An intent document could not be parsed into an intent message."""


class TransportError(TSNConfigError):
    """Session establishment or RPC failure (including timeouts)."""

    retryable = True


class StoreError(TSNConfigError):
    """Device model, topology or configuration could not be fetched."""

    retryable = True


class NotFoundError(StoreError):
    """The requested node or configuration does not exist in the store."""

    retryable = False
