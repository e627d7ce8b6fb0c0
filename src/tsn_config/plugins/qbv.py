"""Gate-control schedule (IEEE 802.1Qbv) mapping for NETCONF devices.

The mapped structure, ``GateParameterTable``, mirrors the scheduler YANG
gate-parameter table and is shared by every gate-schedule variant. Variants
differ in the required module revisions, the cycle-time denominator, the
admin-gate-states policy and the serializer.
"""
import logging
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import MappingError
from ..intent import GateControlEntry, GateControlSchedule, IntentValidator
from ..intent.schema import AdminState
from ..intent.validator import NS_PER_SECOND
from .base import DeviceTarget, Plugin, SchemaModule

logger = logging.getLogger(__name__)

SCHED_MODULE = "ieee802-dot1q-sched"
SCHED_BRIDGE_MODULE = "ieee802-dot1q-sched-bridge"


@dataclass(frozen=True)
class RationalInterval:
    """Cycle time as numerator/denominator seconds."""
    numerator: int
    denominator: int


@dataclass(frozen=True)
class PtpTime:
    """Base time split into whole seconds and nanoseconds."""
    seconds: int
    nanoseconds: int


@dataclass(frozen=True)
class GateControlListEntry:
    index: int
    operation_name: str
    time_interval_value: int
    # None when the intent entry carries no gate states
    gate_states_value: Optional[int] = None


@dataclass(frozen=True)
class GateParameterTable:
    """Scheduler gate-parameter table for one bridge port."""
    gate_enabled: bool
    admin_gate_states: Optional[int]
    admin_control_list: tuple[GateControlListEntry, ...]
    admin_cycle_time: RationalInterval
    admin_base_time: PtpTime
    admin_cycle_time_extension: int = 0
    config_change: bool = True


def split_base_time(base_time_ns: int) -> PtpTime:
    """Split nanoseconds into (seconds, nanoseconds) without rounding."""
    return PtpTime(
        seconds=base_time_ns // NS_PER_SECOND,
        nanoseconds=base_time_ns % NS_PER_SECOND,
    )


def first_gate_state(entry: GateControlEntry) -> Optional[int]:
    """First byte of the gate-state mask; wider masks are truncated."""
    if not entry.gate_states:
        return None
    return entry.gate_states[0]


class GateSchedulePlugin(Plugin):
    """Common mapping for gate-control schedule variants."""

    feature_name = GateControlSchedule.FEATURE
    mapped_type = GateParameterTable

    # Fixed cycle-time scale of the target schema
    cycle_time_denominator: int = NS_PER_SECOND

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.validator = IntentValidator(cycle_time_denominator=self.cycle_time_denominator)

    def supports(self, msg: Any) -> bool:
        return isinstance(msg, GateControlSchedule)

    @abstractmethod
    def admin_gate_states(self, entries: tuple[GateControlListEntry, ...]) -> Optional[int]:
        """Summary gate state required by the schema."""
        pass

    def map(self, msg: Any) -> GateParameterTable:
        if not self.supports(msg):
            raise MappingError(
                f"{self.name} maps {GateControlSchedule.__name__}, got {type(msg).__name__}",
                plugin=self.name,
            )

        result = self.validator.validate(msg)
        for warning in result.warnings:
            logger.warning(f"{self.name}: {warning}")
        if not result.valid:
            raise MappingError(
                f"Schedule {msg.schedule_id} not representable: " + "; ".join(result.errors),
                plugin=self.name,
            )

        self._log_unmapped(msg)

        entries = tuple(
            GateControlListEntry(
                index=entry.index,
                operation_name=entry.effective_operation.value,
                time_interval_value=entry.time_interval_ns,
                gate_states_value=first_gate_state(entry),
            )
            for entry in msg.entries
        )

        return GateParameterTable(
            gate_enabled=msg.admin_state == AdminState.ENABLED,
            admin_gate_states=self.admin_gate_states(entries),
            admin_control_list=entries,
            admin_cycle_time=RationalInterval(
                numerator=self.validator.cycle_time_numerator(msg.cycle_time_ns),
                denominator=self.cycle_time_denominator,
            ),
            admin_base_time=split_base_time(msg.base_time_ns),
        )

    def _log_unmapped(self, msg: GateControlSchedule) -> None:
        if msg.interface_time_offset_ns is None:
            logger.info(f"{self.name}: interface time offset not set, left unmapped")
        else:
            logger.info(
                f"{self.name}: interface time offset {msg.interface_time_offset_ns}ns "
                f"has no leaf in {SCHED_MODULE}, left unmapped"
            )
        described = [e.index for e in msg.entries if e.description]
        if described:
            logger.debug(f"{self.name}: entry descriptions not mapped (entries {described})")


class QbvNetconfPlugin(GateSchedulePlugin):
    """Gate-control schedule for the 2021 scheduler modules.

    Nanosecond-exact cycle time, admin-gate-states from the first entry that
    carries gate states, serialized through the generic encoder.
    """

    name = "qbv-netconf"
    required_modules = (
        SchemaModule(SCHED_MODULE, "2021-02-08"),
        SchemaModule(SCHED_BRIDGE_MODULE, "2021-02-08"),
    )
    uses_generic_encoder = True
    cycle_time_denominator = NS_PER_SECOND

    def admin_gate_states(self, entries):
        for entry in entries:
            if entry.gate_states_value is not None:
                return entry.gate_states_value
        return None

    def build_tree(self, mapped: GateParameterTable, target: DeviceTarget) -> dict[str, Any]:
        self.check_mapped(mapped)
        table: dict[str, Any] = {"gate-enabled": mapped.gate_enabled}
        if mapped.admin_gate_states is not None:
            table["admin-gate-states"] = mapped.admin_gate_states

        control_list = []
        for entry in mapped.admin_control_list:
            item: dict[str, Any] = {
                "index": entry.index,
                "operation-name": f"{SCHED_MODULE}:{entry.operation_name}",
                "time-interval-value": entry.time_interval_value,
            }
            if entry.gate_states_value is not None:
                item["gate-states-value"] = entry.gate_states_value
            control_list.append(item)
        table["admin-control-list"] = {"gate-control-entry": control_list}

        table["admin-cycle-time"] = {
            "numerator": mapped.admin_cycle_time.numerator,
            "denominator": mapped.admin_cycle_time.denominator,
        }
        table["admin-cycle-time-extension"] = mapped.admin_cycle_time_extension
        table["admin-base-time"] = {
            "seconds": mapped.admin_base_time.seconds,
            "nanoseconds": mapped.admin_base_time.nanoseconds,
        }
        table["config-change"] = mapped.config_change

        return {
            "ietf-interfaces:interfaces": {
                "interface": [
                    {
                        "name": target.interface_name,
                        "ieee802-dot1q-bridge:bridge-port": {
                            f"{SCHED_BRIDGE_MODULE}:gate-parameter-table": table,
                        },
                    }
                ]
            }
        }
