"""Shared fixtures: intent messages, device models and fake NETCONF sessions."""
import threading

import pytest

from tsn_config.errors import TransportError
from tsn_config.intent import GateControlEntry, GateControlSchedule
from tsn_config.plugins import DeviceModel, DeviceTarget, ManagementInfo, SchemaModule

STANDARD_MODULES = [
    SchemaModule("ieee802-dot1q-sched", "2021-02-08"),
    SchemaModule("ieee802-dot1q-sched-bridge", "2021-02-08"),
    SchemaModule("ietf-interfaces", "2018-02-20"),
]

LEGACY_MODULES = [
    SchemaModule("ieee802-dot1q-sched", "2018-09-10"),
    SchemaModule("ieee802-dot1q-sched-bridge", "2018-09-10"),
    SchemaModule("ietf-interfaces", "2014-05-08"),
]


class FakeSession:
    """Records edit-config payloads instead of talking to a device."""

    def __init__(self, target, log, fail=False):
        self.target = target
        self.log = log
        self.fail = fail
        self.closed = False

    def edit_config(self, payload, datastore="running", default_operation="merge"):
        if self.fail:
            raise TransportError(f"edit-config on {self.target.management.ip_address} timed out")
        self.log.append((self.target.label, payload))
        return "<ok/>"

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeSessionFactory:
    """Session factory that fails for selected target labels."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.pushes = []
        self.sessions = []
        self._lock = threading.Lock()

    def __call__(self, target, settings=None):
        session = FakeSession(target, self.pushes, fail=target.label in self.failing)
        with self._lock:
            self.sessions.append(session)
        return session

    @property
    def pushed_labels(self):
        return sorted(label for label, _ in self.pushes)


@pytest.fixture
def schedule():
    """Two-slot schedule with a 500us cycle."""
    return GateControlSchedule(
        schedule_id="cycle-500us",
        base_time_ns=1_700_000_000_123_456_789,
        cycle_time_ns=500_000,
        entries=(
            GateControlEntry(index=0, time_interval_ns=300_000, gate_states=b"\x01"),
            GateControlEntry(index=1, time_interval_ns=200_000, gate_states=b"\xfe"),
        ),
    )


@pytest.fixture
def standard_model():
    return DeviceModel.from_modules(STANDARD_MODULES)


@pytest.fixture
def legacy_model():
    return DeviceModel.from_modules(LEGACY_MODULES)


@pytest.fixture
def target():
    return DeviceTarget(
        management=ManagementInfo(ip_address="192.0.2.10", username="admin"),
        secret="secret",
        interface_name="sw0p2",
        node_id="bridge-1",
    )


@pytest.fixture
def session_factory():
    return FakeSessionFactory()


@pytest.fixture
def make_session_factory():
    """Build a session factory with failing targets."""
    return FakeSessionFactory
