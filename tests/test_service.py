"""Tests for the configuration service facade."""
import pytest

from tsn_config.config.inventory import InventoryStore
from tsn_config.config.settings import Settings
from tsn_config.engine import OrchestrationEngine, OutcomeStatus
from tsn_config.errors import NotFoundError, UnsupportedFeatureError
from tsn_config.service import ConfigService, build_default_registry

INVENTORY = """
defaults:
  username: admin
  password: pw

nodes:
  bridge-1:
    management: {ip_address: 192.0.2.1}
    ports: [sw0p1, sw0p2]
    modules:
      - {name: ieee802-dot1q-sched, revision: 2021-02-08}
      - {name: ieee802-dot1q-sched-bridge, revision: 2021-02-08}
  bridge-2:
    management: {ip_address: 192.0.2.2}
    ports: [sw0p1]
    modules:
      - {name: ieee802-dot1q-sched, revision: 2021-02-08}
      - {name: ieee802-dot1q-sched-bridge, revision: 2021-02-08}
  gnmi-node:
    management: {ip_address: 192.0.2.3, protocol: gnmi}
    ports: [eth0]

configurations:
  cycle-500us:
    base_time_ns: 0
    cycle_time_ns: 500000
    entries:
      - {index: 0, time_interval_ns: 500000, gate_states: 0xff}
  bad:
    cycle_time_ns: 500000
"""


@pytest.fixture
def store(tmp_path):
    path = tmp_path / "inventory.yaml"
    path.write_text(INVENTORY)
    return InventoryStore(str(path))


@pytest.fixture(autouse=True)
def quiet_audit(monkeypatch):
    monkeypatch.setattr("tsn_config.engine.engine.record_push", lambda **kwargs: None)


def make_service(store, session_factory):
    settings = Settings(max_workers=2)
    registry = build_default_registry(settings, session_factory=session_factory)
    return ConfigService(store, OrchestrationEngine(registry, store, settings))


class TestConfigService:
    """Tests for ConfigService."""

    @pytest.mark.asyncio
    async def test_apply_configuration(self, store, session_factory):
        """A stored configuration reaches every NETCONF port."""
        response = await make_service(store, session_factory).apply_configuration("cycle-500us")

        assert response.success
        assert response.outcome.status == OutcomeStatus.APPLIED
        assert response.outcome.skipped_nodes == ["gnmi-node"]
        assert session_factory.pushed_labels == ["bridge-1/sw0p1", "bridge-1/sw0p2", "bridge-2/sw0p1"]
        assert response.message == "Applied to 3 target(s); skipped nodes: gnmi-node"

    @pytest.mark.asyncio
    async def test_partial_is_not_success(self, store, make_session_factory):
        """Partial application reports failure with per-target reasons."""
        factory = make_session_factory(failing={"bridge-2/sw0p1"})
        response = await make_service(store, factory).apply_configuration("cycle-500us")

        assert not response.success
        assert response.outcome.status == OutcomeStatus.PARTIALLY_APPLIED
        assert response.to_dict()["outcome"]["failed"] == 1

    @pytest.mark.asyncio
    async def test_unknown_configuration(self, store, session_factory):
        """Store lookups that fail yield a not-applied outcome."""
        response = await make_service(store, session_factory).apply_configuration("ghost")

        assert not response.success
        assert response.outcome.status == OutcomeStatus.NOT_APPLIED
        assert "NotFoundError" in response.message
        assert session_factory.sessions == []

    @pytest.mark.asyncio
    async def test_unparseable_configuration(self, store, session_factory):
        """Parse failures yield a not-applied outcome."""
        response = await make_service(store, session_factory).apply_configuration("bad")
        assert response.outcome.status == OutcomeStatus.NOT_APPLIED
        assert "ParseError" in response.outcome.error

    @pytest.mark.asyncio
    async def test_dry_run(self, store, session_factory):
        """Dry runs carry payloads and open nothing."""
        response = await make_service(store, session_factory).apply_configuration("cycle-500us", dry_run=True)
        assert response.success
        assert session_factory.sessions == []
        assert all(r.payload for r in response.outcome.results)

    def test_render_configuration(self, store, session_factory):
        """Rendering one port returns its payload."""
        xml = make_service(store, session_factory).render_configuration("cycle-500us", "bridge-1", "sw0p2")
        assert "<name>sw0p2</name>" in xml
        assert "<admin-gate-states>255</admin-gate-states>" in xml

    def test_render_errors(self, store, session_factory):
        """Unknown nodes and unsupported protocols are reported."""
        service = make_service(store, session_factory)
        with pytest.raises(NotFoundError):
            service.render_configuration("cycle-500us", "ghost", "p1")
        with pytest.raises(UnsupportedFeatureError):
            service.render_configuration("cycle-500us", "gnmi-node", "eth0")

    def test_supported_features(self, store, session_factory):
        """The feature catalog lists both variants."""
        catalog = make_service(store, session_factory).supported_features()
        assert catalog == {
            "netconf": {"qbv": ["qbv-netconf@2021-02-08", "qbv-netconf-legacy@2018-09-10"]},
        }

    def test_from_settings(self, tmp_path, monkeypatch):
        """The service can be wired from settings alone."""
        path = tmp_path / "inventory.yaml"
        path.write_text(INVENTORY)
        service = ConfigService.from_settings(Settings(inventory_path=str(path)))
        assert service.engine.registry.protocols() == ["netconf"]
        assert service.store.get_node_ids() == ["bridge-1", "bridge-2", "gnmi-node"]
