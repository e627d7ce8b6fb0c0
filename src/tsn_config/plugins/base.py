"""Plugin abstraction: one feature, mapped for one schema version, over one protocol."""
import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from ..config.settings import DEFAULT_NETCONF_PORT
from ..encoding import encode_xml
from ..errors import MappingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaModule:
    """One installed YANG module (name + revision)."""
    name: str
    revision: str

    @classmethod
    def normalized(cls, name: str, revision: Any) -> "SchemaModule":
        """Build a module, stripping a trailing ``.yang`` and stringifying the revision."""
        name = str(name)
        if name.endswith(".yang"):
            name = name[: -len(".yang")]
        return cls(name=name, revision=str(revision))

    def __str__(self) -> str:
        return f"{self.name}@{self.revision}"


@dataclass(frozen=True)
class DeviceModel:
    """Snapshot of the schema modules installed on one device."""
    modules: frozenset[SchemaModule] = field(default_factory=frozenset)

    @classmethod
    def from_modules(cls, modules: Iterable[Any]) -> "DeviceModel":
        """Build from SchemaModule objects, ``{name, revision}`` dicts or ``(name, revision)`` pairs."""
        result = set()
        for module in modules:
            if isinstance(module, SchemaModule):
                result.add(SchemaModule.normalized(module.name, module.revision))
            elif isinstance(module, dict):
                result.add(SchemaModule.normalized(module["name"], module.get("revision", "")))
            else:
                name, revision = module
                result.add(SchemaModule.normalized(name, revision))
        return cls(modules=frozenset(result))

    def has(self, module: SchemaModule) -> bool:
        return module in self.modules


@dataclass
class ManagementInfo:
    """How to reach a device's management plane."""
    ip_address: str
    port: int = DEFAULT_NETCONF_PORT
    username: str = ""
    protocol: str = "netconf"
    password: Optional[str] = None
    password_env: str = "NETCONF_PASSWORD"

    def get_password(self) -> str:
        """Get password from config or environment variable."""
        if self.password:
            return self.password
        return os.environ.get(self.password_env, "")


@dataclass
class DeviceTarget:
    """One push destination: one device, one interface."""
    management: ManagementInfo
    secret: str
    interface_name: str
    node_id: str = ""

    @property
    def label(self) -> str:
        return f"{self.node_id or self.management.ip_address}/{self.interface_name}"


SessionFactory = Callable[..., Any]


class Plugin(ABC):
    """Adapter for one feature against one schema-version range.

    Subclasses declare ``name``, ``feature_name`` and ``required_modules`` and
    either build a module-qualified tree for the generic encoder
    (``uses_generic_encoder = True``) or hand-build their markup.
    """

    name: str = ""
    feature_name: str = ""
    required_modules: tuple[SchemaModule, ...] = ()

    # Selects build_tree + generic encoder over build_xml
    uses_generic_encoder: bool = True

    # Wire structure type produced by map(), checked before push
    mapped_type: Optional[type] = None

    def __init__(
        self,
        required_modules: Optional[Iterable[SchemaModule]] = None,
        session_factory: Optional[SessionFactory] = None,
        settings: Any = None,
    ):
        if required_modules is not None:
            self.required_modules = tuple(
                SchemaModule.normalized(m.name, m.revision) for m in required_modules
            )
        self._session_factory = session_factory
        self.settings = settings

    @property
    def schema_revision(self) -> str:
        """Newest revision among the required modules."""
        return max((m.revision for m in self.required_modules), default="")

    @property
    def session_factory(self) -> SessionFactory:
        if self._session_factory is None:
            from ..transport.netconf_session import NetconfSession
            self._session_factory = NetconfSession.connect
        return self._session_factory

    def supported_by_device(self, model: DeviceModel) -> bool:
        """True iff every required module (name and revision) is installed."""
        missing = [m for m in self.required_modules if not model.has(m)]
        if missing:
            logger.debug(
                f"{self.name}: device lacks {', '.join(str(m) for m in missing)}"
            )
            return False
        return True

    @abstractmethod
    def supports(self, msg: Any) -> bool:
        """True iff msg is the intent message kind this plugin maps."""
        pass

    @abstractmethod
    def map(self, msg: Any) -> Any:
        """Map an intent message to this plugin's wire structure.

        Raises:
            MappingError: Wrong message kind or unrepresentable value
        """
        pass

    def build_tree(self, mapped: Any, target: DeviceTarget) -> dict[str, Any]:
        """Module-qualified tree for the generic encoder."""
        raise NotImplementedError(f"{self.name} does not build an encoder tree")

    def build_xml(self, mapped: Any, target: DeviceTarget) -> str:
        """Hand-built markup for plugins that opt out of the generic encoder."""
        raise NotImplementedError(f"{self.name} does not build its own markup")

    def serialize(self, mapped: Any, target: DeviceTarget) -> str:
        """Render the wire payload for one target."""
        if self.uses_generic_encoder:
            return encode_xml(self.build_tree(mapped, target))
        return self.build_xml(mapped, target)

    def push(self, mapped: Any, target: DeviceTarget) -> None:
        """Serialize, open a session, edit the running datastore and close.

        Raises:
            MappingError: mapped is not this plugin's wire structure
            TransportError: Session or RPC failure
        """
        self.check_mapped(mapped)
        payload = self.serialize(mapped, target)
        logger.debug(f"{self.name}: pushing {len(payload)} bytes to {target.label}")
        with self.session_factory(target, self.settings) as session:
            session.edit_config(payload)
        logger.info(f"{self.name}: configured {target.label}")

    def check_mapped(self, mapped: Any) -> None:
        """Reject wire structures produced by another plugin."""
        if self.mapped_type is not None and not isinstance(mapped, self.mapped_type):
            raise MappingError(
                f"{self.name} cannot push {type(mapped).__name__}",
                plugin=self.name,
            )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} feature={self.feature_name} rev={self.schema_revision}>"
