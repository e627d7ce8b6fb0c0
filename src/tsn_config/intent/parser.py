"""Parser for intent documents.

Converts dict/YAML input (as stored in the configuration store) to typed
intent messages.
"""
import hashlib
import json
from typing import Any

from ..errors import ParseError
from .schema import (
    AdminState,
    GateControlEntry,
    GateControlSchedule,
    OperationName,
)


class IntentParser:
    """Parse intent messages from dict/YAML format."""

    def parse(self, document: dict[str, Any]) -> GateControlSchedule:
        """
        Parse an intent document into an intent message.

        Args:
            document: Dict with feature, schedule_id, base_time, cycle_time, entries

        Returns:
            GateControlSchedule

        Raises:
            ParseError: If the document is invalid
        """
        if not isinstance(document, dict):
            raise ParseError(f"Intent document must be a mapping, got {type(document).__name__}")

        feature = document.get("feature", GateControlSchedule.FEATURE)
        if feature != GateControlSchedule.FEATURE:
            raise ParseError(f"Unsupported feature in intent document: {feature}")

        schedule_id = document.get("schedule_id") or document.get("id")
        if not schedule_id:
            raise ParseError("Missing required field: schedule_id")

        base_time = self._parse_int(document, "base_time_ns", aliases=("base_time",))
        cycle_time = self._parse_int(document, "cycle_time_ns", aliases=("cycle_time",))

        state_str = str(document.get("admin_state", "enabled")).lower()
        try:
            admin_state = AdminState(state_str)
        except ValueError:
            raise ParseError(
                f"Invalid admin_state: {state_str}. Must be 'enabled' or 'disabled'"
            )

        offset = document.get("interface_time_offset_ns")
        if offset is not None:
            offset = self._to_int(offset, "interface_time_offset_ns")

        entries = tuple(
            self._parse_entry(position, raw)
            for position, raw in enumerate(document.get("entries") or [])
        )

        return GateControlSchedule(
            schedule_id=str(schedule_id),
            base_time_ns=base_time,
            cycle_time_ns=cycle_time,
            admin_state=admin_state,
            entries=entries,
            interface_time_offset_ns=offset,
        )

    def _parse_entry(self, position: int, raw: Any) -> GateControlEntry:
        """Parse a single gate-control entry."""
        if not isinstance(raw, dict):
            raise ParseError(f"Entry #{position} must be a mapping")

        # Entries without an explicit index take their list position
        index = self._to_int(raw.get("index", position), f"entries[{position}].index")
        interval = raw.get("time_interval_ns", raw.get("time_interval"))
        if interval is None:
            raise ParseError(f"Missing time_interval_ns in entry #{position}")

        operation = None
        op_str = raw.get("operation")
        if op_str:
            try:
                operation = OperationName(op_str)
            except ValueError:
                valid = ", ".join(op.value for op in OperationName)
                raise ParseError(
                    f"Invalid operation for entry {index}: {op_str}. Valid: {valid}"
                )

        return GateControlEntry(
            index=index,
            time_interval_ns=self._to_int(interval, f"entries[{position}].time_interval_ns"),
            gate_states=self._parse_gate_states(raw.get("gate_states"), index),
            operation=operation,
            description=raw.get("description"),
        )

    def _parse_gate_states(self, value: Any, index: int) -> bytes:
        """
        Normalise gate states to bytes.

        Examples:
            0x0F -> b"\\x0f"
            [15, 3] -> b"\\x0f\\x03"
            "0f03" -> b"\\x0f\\x03"
            None -> b""
        """
        if value is None:
            return b""
        try:
            if isinstance(value, bool):
                raise ValueError("boolean gate states")
            if isinstance(value, int):
                return bytes([value])
            if isinstance(value, (list, tuple)):
                return bytes(value)
            if isinstance(value, str):
                return bytes.fromhex(value.strip().lower().replace("0x", ""))
            if isinstance(value, (bytes, bytearray)):
                return bytes(value)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Invalid gate_states for entry {index}: {e}")
        raise ParseError(
            f"Invalid gate_states for entry {index}: unsupported type {type(value).__name__}"
        )

    def _parse_int(self, document: dict, key: str, aliases: tuple[str, ...] = ()) -> int:
        for name in (key, *aliases):
            if name in document:
                return self._to_int(document[name], key)
        raise ParseError(f"Missing required field: {key}")

    @staticmethod
    def _to_int(value: Any, name: str) -> int:
        if isinstance(value, bool):
            raise ParseError(f"Invalid integer for {name}: {value}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ParseError(f"Invalid integer for {name}: {value}")


def compute_checksum(document: dict[str, Any]) -> str:
    """
    Compute a short SHA256 checksum of an intent document.

    Used to tie audit records to the exact document that was applied.
    """
    doc_copy = {k: v for k, v in document.items() if k != "checksum"}
    doc_str = json.dumps(doc_copy, sort_keys=True, separators=(",", ":"), default=str)
    hash_bytes = hashlib.sha256(doc_str.encode()).hexdigest()
    return f"sha256:{hash_bytes[:16]}"
