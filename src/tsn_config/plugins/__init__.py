"""Feature plugins and the plugin factory."""
from typing import Any, Optional

from .base import (
    DeviceModel,
    DeviceTarget,
    ManagementInfo,
    Plugin,
    SchemaModule,
    SessionFactory,
)
from .qbv import GateParameterTable, GateSchedulePlugin, QbvNetconfPlugin
from .qbv_legacy import LegacyQbvNetconfPlugin

# Plugin registry, keyed by protocol then plugin name
PLUGIN_CLASSES: dict[str, dict[str, type[Plugin]]] = {
    "netconf": {
        QbvNetconfPlugin.name: QbvNetconfPlugin,
        LegacyQbvNetconfPlugin.name: LegacyQbvNetconfPlugin,
    },
}


def get_plugin_classes(protocol: str) -> list[type[Plugin]]:
    """Plugin classes available for a management protocol."""
    return list(PLUGIN_CLASSES.get(protocol.lower(), {}).values())


def create_plugins(
    protocol: str,
    session_factory: Optional[SessionFactory] = None,
    settings: Any = None,
) -> list[Plugin]:
    """Instantiate every plugin registered for a protocol."""
    return [
        cls(session_factory=session_factory, settings=settings)
        for cls in get_plugin_classes(protocol)
    ]


__all__ = [
    "DeviceModel",
    "DeviceTarget",
    "ManagementInfo",
    "Plugin",
    "SchemaModule",
    "SessionFactory",
    "GateParameterTable",
    "GateSchedulePlugin",
    "QbvNetconfPlugin",
    "LegacyQbvNetconfPlugin",
    "PLUGIN_CLASSES",
    "get_plugin_classes",
    "create_plugins",
]
