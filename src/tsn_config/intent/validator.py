"""Pre-flight validation for intent messages.

Catches values the wire schemas cannot represent before any device
communication. Plugins run it inside their mapping step.
"""
from dataclasses import dataclass, field

from .schema import GateControlSchedule

UINT32_MAX = 2**32 - 1
UINT64_MAX = 2**64 - 1
NS_PER_SECOND = 1_000_000_000

# Control lists longer than this are rejected by most bridge firmware
LARGE_CONTROL_LIST = 1024


@dataclass
class ValidationResult:
    """Result of intent validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class IntentValidator:
    """Validate gate-control schedules for representability."""

    def __init__(self, cycle_time_denominator: int = NS_PER_SECOND):
        """
        Initialize validator.

        Args:
            cycle_time_denominator: Fixed cycle-time scale of the target schema
        """
        self.cycle_time_denominator = cycle_time_denominator

    def validate(self, schedule: GateControlSchedule) -> ValidationResult:
        """
        Validate a gate-control schedule.

        Performs checks:
        - Base time and cycle time ranges
        - Cycle time representable with the schema denominator
        - Entry index uniqueness and uint32 ranges
        - Gate-state width

        Returns:
            ValidationResult with valid flag, errors, and warnings
        """
        errors: list[str] = []
        warnings: list[str] = []

        self._validate_times(schedule, errors)
        self._validate_entries(schedule, errors, warnings)
        self._check_cycle_coverage(schedule, warnings)

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def cycle_time_numerator(self, cycle_time_ns: int) -> int:
        """Numerator of the cycle time over the schema denominator."""
        scaled = cycle_time_ns * self.cycle_time_denominator
        if scaled % NS_PER_SECOND:
            raise ValueError(
                f"cycle time {cycle_time_ns}ns is not a multiple of "
                f"1/{self.cycle_time_denominator}s"
            )
        return scaled // NS_PER_SECOND

    def _validate_times(self, schedule: GateControlSchedule, errors: list[str]) -> None:
        if not 0 <= schedule.base_time_ns <= UINT64_MAX:
            errors.append(
                f"Invalid base time {schedule.base_time_ns}: must fit an unsigned 64-bit value"
            )

        if schedule.cycle_time_ns <= 0:
            errors.append(f"Invalid cycle time {schedule.cycle_time_ns}: must be positive")
            return

        try:
            numerator = self.cycle_time_numerator(schedule.cycle_time_ns)
        except ValueError as e:
            errors.append(f"Cycle time not representable: {e}")
            return

        if numerator > UINT32_MAX:
            errors.append(
                f"Cycle time {schedule.cycle_time_ns}ns overflows the 32-bit numerator "
                f"(denominator {self.cycle_time_denominator})"
            )

    def _validate_entries(
        self,
        schedule: GateControlSchedule,
        errors: list[str],
        warnings: list[str]
    ) -> None:
        if not schedule.entries:
            warnings.append(f"Schedule {schedule.schedule_id} has no gate-control entries")
            return

        if len(schedule.entries) > LARGE_CONTROL_LIST:
            warnings.append(
                f"Large control list ({len(schedule.entries)} entries) - verify device limits"
            )

        seen: set[int] = set()
        for entry in schedule.entries:
            if not 0 <= entry.index <= UINT32_MAX:
                errors.append(f"Invalid entry index {entry.index}: must fit uint32")
            elif entry.index in seen:
                errors.append(f"Duplicate entry index {entry.index}")
            seen.add(entry.index)

            if not 0 <= entry.time_interval_ns <= UINT32_MAX:
                errors.append(
                    f"Invalid time interval {entry.time_interval_ns} in entry {entry.index}: "
                    f"must fit uint32"
                )

            if len(entry.gate_states) > 1:
                warnings.append(
                    f"Entry {entry.index} has {len(entry.gate_states)} gate-state bytes; "
                    f"only the first is mapped"
                )

    def _check_cycle_coverage(self, schedule: GateControlSchedule, warnings: list[str]) -> None:
        if not schedule.entries or schedule.cycle_time_ns <= 0:
            return
        total = sum(e.time_interval_ns for e in schedule.entries)
        if total != schedule.cycle_time_ns:
            warnings.append(
                f"Entry intervals sum to {total}ns but cycle time is {schedule.cycle_time_ns}ns"
            )
