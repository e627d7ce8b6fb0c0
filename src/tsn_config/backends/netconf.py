"""NETCONF protocol backend.

Keeps the NETCONF plugins grouped by feature and drives select -> map -> push.
Registration may happen after start-up, so the plugin table is guarded by a
lock; lookups copy the variant list out of the lock before using it.
"""
import logging
import threading
from typing import Any, Iterable, Optional

from ..errors import TSNConfigError, UnsupportedFeatureError
from ..plugins.base import DeviceModel, DeviceTarget, Plugin
from .base import ProtocolBackend

logger = logging.getLogger(__name__)


def feature_of(msg: Any) -> Optional[str]:
    """Feature key of an intent message."""
    return getattr(msg, "feature", None) or getattr(msg, "FEATURE", None)


class NetconfBackend(ProtocolBackend):
    """Plugin dispatch for NETCONF-managed devices."""

    protocol = "netconf"

    def __init__(self, plugins: Optional[Iterable[Plugin]] = None):
        self._plugins: dict[str, list[Plugin]] = {}
        self._lock = threading.Lock()
        for plugin in plugins or ():
            self.add_plugin(plugin)

    def add_plugin(self, plugin: Plugin) -> None:
        with self._lock:
            variants = self._plugins.setdefault(plugin.feature_name, [])
            if any(p.name == plugin.name for p in variants):
                raise ValueError(
                    f"Plugin {plugin.name} already registered for feature {plugin.feature_name}"
                )
            variants.append(plugin)
        logger.debug(f"Registered {plugin!r} with {self.protocol} backend")

    def plugins_for(self, feature: str) -> list[Plugin]:
        with self._lock:
            return list(self._plugins.get(feature, ()))

    def supported_features(self) -> list[str]:
        with self._lock:
            return sorted(self._plugins)

    def select_plugin(self, feature: str, model: DeviceModel) -> Plugin:
        candidates = [p for p in self.plugins_for(feature) if p.supported_by_device(model)]
        if not candidates:
            raise UnsupportedFeatureError(
                f"No {self.protocol} plugin supports feature '{feature}' for this device model"
            )

        # Newest schema revision wins, then plugin name
        candidates.sort(key=lambda p: p.name)
        candidates.sort(key=lambda p: p.schema_revision, reverse=True)
        chosen = candidates[0]
        if len(candidates) > 1:
            logger.warning(
                f"Feature '{feature}': {len(candidates)} plugins match "
                f"({', '.join(p.name for p in candidates)}); using {chosen.name}"
            )
        return chosen

    def _select_for(self, msg: Any, model: DeviceModel) -> Plugin:
        feature = feature_of(msg)
        if feature is None:
            raise UnsupportedFeatureError(
                f"{type(msg).__name__} does not name a feature"
            )
        return self.select_plugin(feature, model)

    def map_and_push(self, msg: Any, model: DeviceModel, target: DeviceTarget) -> Plugin:
        plugin = self._select_for(msg, model)
        try:
            mapped = plugin.map(msg)
        except TSNConfigError as e:
            raise self._wrap(e, plugin, target, "mapping failed") from e

        try:
            plugin.push(mapped, target)
        except TSNConfigError as e:
            raise self._wrap(e, plugin, target, "push failed") from e
        return plugin

    def render(self, msg: Any, model: DeviceModel, target: DeviceTarget) -> str:
        plugin = self._select_for(msg, model)
        try:
            mapped = plugin.map(msg)
        except TSNConfigError as e:
            raise self._wrap(e, plugin, target, "mapping failed") from e
        return plugin.serialize(mapped, target)

    @staticmethod
    def _wrap(exc: TSNConfigError, plugin: Plugin, target: DeviceTarget, what: str) -> TSNConfigError:
        """Same error class, prefixed with the plugin name."""
        return type(exc)(
            f"plugin {plugin.name} {what}: {exc}",
            plugin=plugin.name,
            target=target.label,
        )
