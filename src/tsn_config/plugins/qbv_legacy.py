"""Gate-control schedule for bridges running the 2018 scheduler modules.

These devices expect the pre-standard ``gate-parameters`` container with
operation-specific parameter sub-elements, a millisecond-scale cycle-time
denominator and admin-gate-states as the union of all entry gate states.
Markup is built by hand because the parameter element name depends on the
entry operation.
"""
import logging

from ..encoding import NAMESPACE_BY_MODULE, format_scalar, xml_escape
from ..intent.schema import OperationName
from .base import DeviceTarget, SchemaModule
from .qbv import (
    SCHED_BRIDGE_MODULE,
    SCHED_MODULE,
    GateControlListEntry,
    GateParameterTable,
    GateSchedulePlugin,
)

logger = logging.getLogger(__name__)

# Parameter sub-element per gate operation
PARAMS_TAG = {
    OperationName.SET_GATE_STATES.value: "sgs-params",
    OperationName.SET_AND_HOLD_MAC.value: "shm-params",
    OperationName.SET_AND_RELEASE_MAC.value: "srm-params",
}


class LegacyQbvNetconfPlugin(GateSchedulePlugin):
    """Gate-control schedule for the 2018-09-10 scheduler modules."""

    name = "qbv-netconf-legacy"
    required_modules = (
        SchemaModule(SCHED_MODULE, "2018-09-10"),
        SchemaModule(SCHED_BRIDGE_MODULE, "2018-09-10"),
    )
    uses_generic_encoder = False
    cycle_time_denominator = 1000

    def admin_gate_states(self, entries: tuple[GateControlListEntry, ...]) -> int:
        """OR of every entry's gate states; 0 (all closed) when none carry any."""
        combined = 0
        for entry in entries:
            if entry.gate_states_value is not None:
                combined |= entry.gate_states_value
        return combined

    def build_xml(self, mapped: GateParameterTable, target: DeviceTarget) -> str:
        self.check_mapped(mapped)
        parts: list[str] = []

        def leaf(tag: str, value) -> None:
            parts.append(f"<{tag}>{format_scalar(value)}</{tag}>")

        parts.append(f'<interfaces xmlns="{NAMESPACE_BY_MODULE["ietf-interfaces"]}">')
        parts.append("<interface>")
        parts.append(f"<name>{xml_escape(target.interface_name)}</name>")
        parts.append(f'<gate-parameters xmlns="{NAMESPACE_BY_MODULE[SCHED_MODULE]}">')

        leaf("gate-enabled", mapped.gate_enabled)
        if mapped.admin_gate_states is not None:
            leaf("admin-gate-states", mapped.admin_gate_states)
        leaf("admin-control-list-length", len(mapped.admin_control_list))

        for entry in sorted(mapped.admin_control_list, key=lambda e: e.index):
            params_tag = PARAMS_TAG.get(entry.operation_name, "sgs-params")
            parts.append("<admin-control-list>")
            leaf("index", entry.index)
            leaf("operation-name", entry.operation_name)
            parts.append(f"<{params_tag}>")
            if entry.gate_states_value is not None:
                leaf("gate-states-value", entry.gate_states_value)
            leaf("time-interval-value", entry.time_interval_value)
            parts.append(f"</{params_tag}>")
            parts.append("</admin-control-list>")

        parts.append("<admin-cycle-time>")
        leaf("numerator", mapped.admin_cycle_time.numerator)
        leaf("denominator", mapped.admin_cycle_time.denominator)
        parts.append("</admin-cycle-time>")
        leaf("admin-cycle-time-extension", mapped.admin_cycle_time_extension)
        parts.append("<admin-base-time>")
        leaf("seconds", mapped.admin_base_time.seconds)
        leaf("fractional-seconds", mapped.admin_base_time.nanoseconds)
        parts.append("</admin-base-time>")
        leaf("config-change", mapped.config_change)

        parts.append("</gate-parameters>")
        parts.append("</interface>")
        parts.append("</interfaces>")
        return "".join(parts)
