"""Protocol backend abstraction."""
from abc import ABC, abstractmethod
from typing import Any

from ..plugins.base import DeviceModel, DeviceTarget, Plugin


class ProtocolBackend(ABC):
    """Owns the plugins available for one management protocol."""

    protocol: str = ""

    @abstractmethod
    def add_plugin(self, plugin: Plugin) -> None:
        """Register a plugin under its feature name."""
        pass

    @abstractmethod
    def plugins_for(self, feature: str) -> list[Plugin]:
        """All registered variants for a feature."""
        pass

    @abstractmethod
    def supported_features(self) -> list[str]:
        """Names of the registered features."""
        pass

    @abstractmethod
    def select_plugin(self, feature: str, model: DeviceModel) -> Plugin:
        """Pick the one plugin that maps feature for this device model.

        Raises:
            UnsupportedFeatureError: No registered plugin matches
        """
        pass

    @abstractmethod
    def map_and_push(self, msg: Any, model: DeviceModel, target: DeviceTarget) -> Plugin:
        """Select, map and push one intent message to one target.

        Returns:
            The plugin that handled the push
        """
        pass

    @abstractmethod
    def render(self, msg: Any, model: DeviceModel, target: DeviceTarget) -> str:
        """Select, map and serialize without opening a session."""
        pass
