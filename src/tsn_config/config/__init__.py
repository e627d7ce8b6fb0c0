"""Runtime settings and the YAML store.

The store lives in ``tsn_config.config.inventory`` and is imported from there
directly; it depends on the plugin and engine models, which depend on
``settings``.
"""
from .settings import Settings, DEFAULT_NETCONF_PORT

__all__ = ["Settings", "DEFAULT_NETCONF_PORT"]
