"""Management-protocol transport sessions."""
from .netconf_session import NetconfSession, wrap_config

__all__ = ["NetconfSession", "wrap_config"]
