"""Configuration service facade.

Resolves a stored configuration and the topology, runs the orchestration
engine and turns the result into a response. Store and parse failures become
a ``not_applied`` outcome instead of an exception.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .backends import BackendRegistry, NetconfBackend
from .config.inventory import DeviceStore, InventoryStore
from .config.settings import Settings
from .engine import ApplyOutcome, OrchestrationEngine, OutcomeStatus
from .errors import NotFoundError, TSNConfigError, UnsupportedFeatureError
from .intent import compute_checksum
from .plugins import SessionFactory, create_plugins
from .plugins.base import DeviceTarget

logger = logging.getLogger(__name__)


@dataclass
class ConfigurationResponse:
    """Response to an apply-configuration request."""
    success: bool
    message: str
    outcome: ApplyOutcome

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "outcome": self.outcome.to_dict(),
        }


def build_default_registry(
    settings: Optional[Settings] = None,
    session_factory: Optional[SessionFactory] = None,
) -> BackendRegistry:
    """Registry with the NETCONF backend and every NETCONF plugin."""
    registry = BackendRegistry()
    backend = NetconfBackend(
        create_plugins("netconf", session_factory=session_factory, settings=settings)
    )
    registry.register(backend.protocol, backend)
    return registry


class ConfigService:
    """Apply stored configurations across the stored topology."""

    def __init__(self, store: DeviceStore, engine: OrchestrationEngine):
        self.store = store
        self.engine = engine

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        session_factory: Optional[SessionFactory] = None,
    ) -> "ConfigService":
        """Wire store, registry and engine from settings."""
        settings = settings or Settings.from_env()
        store = InventoryStore(settings.inventory_path)
        registry = build_default_registry(settings, session_factory)
        return cls(store, OrchestrationEngine(registry, store, settings))

    async def apply_configuration(self, config_id: str, dry_run: bool = False) -> ConfigurationResponse:
        """Apply a stored configuration to every managed port."""
        try:
            intent = self.store.get_configuration(config_id)
            topology = self.store.get_topology()
        except TSNConfigError as e:
            logger.error(f"Cannot resolve configuration {config_id}: {e}")
            outcome = ApplyOutcome.unresolved(f"{e.kind}: {e}")
            return ConfigurationResponse(success=False, message=outcome.summary(), outcome=outcome)

        outcome = await self.engine.apply_topology_config(
            intent,
            topology,
            dry_run=dry_run,
            intent_checksum=self._checksum(config_id),
        )
        return ConfigurationResponse(
            success=outcome.status == OutcomeStatus.APPLIED,
            message=outcome.summary(),
            outcome=outcome,
        )

    def render_configuration(self, config_id: str, node_id: str, port: str) -> str:
        """Render the payload one target would receive.

        Raises:
            NotFoundError: Unknown configuration or node
            UnsupportedFeatureError: No plugin for this device
            MappingError: Intent not representable
        """
        intent = self.store.get_configuration(config_id)
        node = self.store.get_topology().get_node(node_id)
        if node is None:
            raise NotFoundError(f"Unknown node: {node_id}")
        backend = self.engine.registry.get(node.management.protocol)
        if backend is None:
            raise UnsupportedFeatureError(
                f"Node {node_id} uses unsupported protocol '{node.management.protocol}'"
            )
        target = DeviceTarget(
            management=node.management,
            secret="",
            interface_name=port,
            node_id=node_id,
        )
        return backend.render(intent, self.store.get_device_model(node_id), target)

    def supported_features(self) -> dict[str, dict[str, list[str]]]:
        """Plugins (name@revision) per feature per registered protocol."""
        registry = self.engine.registry
        catalog: dict[str, dict[str, list[str]]] = {}
        for protocol in registry.protocols():
            backend = registry.get(protocol)
            catalog[protocol] = {
                feature: [f"{p.name}@{p.schema_revision}" for p in backend.plugins_for(feature)]
                for feature in backend.supported_features()
            }
        return catalog

    def _checksum(self, config_id: str) -> Optional[str]:
        get_document = getattr(self.store, "get_configuration_document", None)
        if get_document is None:
            return None
        return compute_checksum(get_document(config_id))
