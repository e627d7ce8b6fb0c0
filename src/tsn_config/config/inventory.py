"""YAML-backed device, topology and configuration store.

```yaml
defaults:
  username: admin
  password_env: NETCONF_PASSWORD
  protocol: netconf
  port: 830

nodes:
  bridge-1:
    management:
      ip_address: 192.168.10.11
    ports: [sw0p2, sw0p3]
    modules:
      - name: ieee802-dot1q-sched.yang
        revision: 2021-02-08
      - name: ieee802-dot1q-sched-bridge.yang
        revision: 2021-02-08

configurations:
  cycle-500us:
    feature: qbv
    schedule_id: cycle-500us
    base_time_ns: 0
    cycle_time_ns: 500000
    entries:
      - {index: 0, time_interval_ns: 250000, gate_states: 0x01}
      - {index: 1, time_interval_ns: 250000, gate_states: 0xfe}
```
"""
import logging
import os
from pathlib import Path
from typing import Any, Optional, Protocol

import yaml

from ..engine.schema import Node, Port, Topology
from ..errors import NotFoundError, StoreError
from ..intent import GateControlSchedule, IntentParser
from ..plugins.base import DeviceModel, ManagementInfo

logger = logging.getLogger(__name__)

MANAGEMENT_FIELDS = ("ip_address", "port", "username", "protocol", "password", "password_env")


class DeviceStore(Protocol):
    """Read interface the service needs from a store."""

    def get_device_model(self, node_id: str) -> DeviceModel:
        ...

    def get_topology(self) -> Topology:
        ...

    def get_configuration(self, config_id: str) -> GateControlSchedule:
        ...


def find_inventory(explicit: Optional[str] = None) -> str:
    """Locate the inventory file."""
    if explicit:
        return explicit
    env_path = os.environ.get("TSNCONF_INVENTORY")
    if env_path:
        return env_path

    search_paths = [
        Path.cwd() / "configs" / "inventory.yaml",
        Path.cwd() / "inventory.yaml",
        Path.home() / ".config" / "tsn-config" / "inventory.yaml",
    ]
    for path in search_paths:
        if path.exists():
            return str(path)

    raise StoreError(
        "Could not find inventory.yaml. Create one in ./configs/inventory.yaml "
        "or set TSNCONF_INVENTORY"
    )


class InventoryStore:
    """Device models, topology and intent documents from one YAML file."""

    def __init__(self, config_path: Optional[str] = None, parser: Optional[IntentParser] = None):
        self.config_path = find_inventory(config_path)
        self.parser = parser or IntentParser()
        self._config: dict = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load the YAML inventory and merge defaults into each node."""
        try:
            with open(self.config_path) as f:
                config = yaml.safe_load(f) or {}
        except OSError as e:
            raise StoreError(f"Cannot read inventory {self.config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise StoreError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config, dict):
            raise StoreError(f"Inventory {self.config_path} must be a mapping")

        for section in ("defaults", "nodes", "configurations"):
            if config.get(section) is None:
                config[section] = {}
            elif not isinstance(config[section], dict):
                raise StoreError(f"'{section}' in {self.config_path} must be a mapping")

        defaults = config["defaults"]
        for node_id, node_config in config["nodes"].items():
            if not isinstance(node_config, dict):
                raise StoreError(f"Node '{node_id}' must be a mapping")
            if node_config.get("management") is None:
                node_config["management"] = {}
            management = node_config["management"]
            if not isinstance(management, dict):
                raise StoreError(f"Management block of node '{node_id}' must be a mapping")
            # Merge defaults
            for key, value in defaults.items():
                if key not in management:
                    management[key] = value

        self._config = config
        logger.debug(
            f"Loaded inventory {self.config_path}: {len(self.get_node_ids())} nodes, "
            f"{len(self.get_configuration_ids())} configurations"
        )

    def get_node_ids(self) -> list[str]:
        return list((self._config.get("nodes") or {}).keys())

    def get_configuration_ids(self) -> list[str]:
        return list((self._config.get("configurations") or {}).keys())

    def get_node_config(self, node_id: str) -> dict:
        """Get raw config for a node."""
        nodes = self._config.get("nodes") or {}
        if node_id not in nodes:
            raise NotFoundError(f"Unknown node: {node_id}")
        return nodes[node_id]

    def get_device_model(self, node_id: str) -> DeviceModel:
        modules = self.get_node_config(node_id).get("modules") or []
        try:
            return DeviceModel.from_modules(modules)
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Invalid module list for node {node_id}: {e}") from e

    def get_node(self, node_id: str) -> Node:
        node_config = self.get_node_config(node_id)
        ports = node_config.get("ports") or []
        if not isinstance(ports, list):
            raise StoreError(f"Ports of node {node_id} must be a list")
        return Node(
            id=node_id,
            management=self._management(node_id, node_config["management"]),
            ports=[self._port(node_id, p) for p in ports],
        )

    def get_topology(self) -> Topology:
        return Topology(nodes=[self.get_node(node_id) for node_id in self.get_node_ids()])

    def get_configuration_document(self, config_id: str) -> dict[str, Any]:
        """Get the raw intent document."""
        configurations = self._config.get("configurations") or {}
        if config_id not in configurations:
            raise NotFoundError(f"Unknown configuration: {config_id}")
        document = configurations[config_id]
        if not isinstance(document, dict):
            raise StoreError(f"Configuration '{config_id}' must be a mapping")
        return document

    def get_configuration(self, config_id: str) -> GateControlSchedule:
        """Get a configuration as an intent message.

        Raises:
            NotFoundError: Unknown configuration id
            ParseError: Malformed intent document
        """
        document = dict(self.get_configuration_document(config_id))
        document.setdefault("schedule_id", config_id)
        return self.parser.parse(document)

    def _management(self, node_id: str, raw: dict) -> ManagementInfo:
        values = {k: raw[k] for k in MANAGEMENT_FIELDS if k in raw}
        # "host" is accepted as an alias
        if "ip_address" not in values and "host" in raw:
            values["ip_address"] = raw["host"]
        if "ip_address" not in values:
            raise StoreError(f"Node {node_id} has no management ip_address")
        try:
            if "port" in values:
                values["port"] = int(values["port"])
        except (TypeError, ValueError) as e:
            raise StoreError(f"Invalid management port for node {node_id}: {e}") from e
        values["ip_address"] = str(values["ip_address"])
        return ManagementInfo(**values)

    @staticmethod
    def _port(node_id: str, raw: Any) -> Port:
        if isinstance(raw, dict):
            if "name" not in raw:
                raise StoreError(f"Port entry without name on node {node_id}")
            return Port(name=str(raw["name"]))
        return Port(name=str(raw))
