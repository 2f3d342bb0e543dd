# Copyright 2026 Dell Inc. or its subsidiaries. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Value objects for the batch audit domain.

All value objects are immutable and defined by their values, not identity.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple


@dataclass(frozen=True)
class CorrelationId:
    """Identifier grouping all checkpoint events of one pipeline run.

    Attributes:
        value: Canonical hyphenated UUID string, lower case.

    Raises:
        ValueError: If value is not a canonical UUID or exceeds length.
    """

    value: str

    UUID_PATTERN: ClassVar[str] = (
        r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$'
    )
    MAX_LENGTH: ClassVar[int] = 36

    def __post_init__(self) -> None:
        """Validate UUID format and length."""
        if not isinstance(self.value, str):
            raise ValueError(f"CorrelationId must be a string, got {type(self.value).__name__}")
        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(
                f"CorrelationId length cannot exceed {self.MAX_LENGTH} characters, "
                f"got {len(self.value)}"
            )
        if not re.match(self.UUID_PATTERN, self.value.lower()):
            raise ValueError(f"Invalid UUID format: {self.value}")
        object.__setattr__(self, "value", self.value.lower())

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


class AuditStatus(str, Enum):
    """Outcome of a single pipeline action."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    WARNING = "WARNING"

    def is_completed(self) -> bool:
        """Check if the action finished its work (with or without warnings).

        Returns:
            True if status is SUCCESS or WARNING.
        """
        return self in {AuditStatus.SUCCESS, AuditStatus.WARNING}

    @classmethod
    def from_value(cls, value: str) -> "AuditStatus":
        """Resolve a status from its stored string value, case-insensitively.

        Raises:
            ValueError: If value does not name a status.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ValueError(
                f"Invalid audit status: {value}. "
                f"Must be one of: {[status.value for status in cls]}"
            ) from exc


class CheckpointStage(str, Enum):
    """Pipeline checkpoints in their fixed processing order.

    RHEL_LANDING: files transferred from the mainframe to the landing area.
    SQLLOADER_START / SQLLOADER_COMPLETE: database load begins / completes.
    LOGIC_APPLIED: business rules applied by a module.
    FILE_GENERATED: output file produced (terminal checkpoint).
    """

    RHEL_LANDING = "RHEL_LANDING"
    SQLLOADER_START = "SQLLOADER_START"
    SQLLOADER_COMPLETE = "SQLLOADER_COMPLETE"
    LOGIC_APPLIED = "LOGIC_APPLIED"
    FILE_GENERATED = "FILE_GENERATED"

    @classmethod
    def ordered(cls) -> Tuple["CheckpointStage", ...]:
        """Return all stages in pipeline order."""
        return tuple(cls)

    @classmethod
    def terminal(cls) -> "CheckpointStage":
        """Return the checkpoint that marks a run as complete."""
        return cls.FILE_GENERATED

    @classmethod
    def from_value(cls, value: str) -> "CheckpointStage":
        """Resolve a stage from its stored string value.

        Raises:
            ValueError: If value does not name a checkpoint stage.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ValueError(
                f"Unknown checkpoint stage: {value}. "
                f"Must be one of: {[stage.value for stage in cls]}"
            ) from exc

    @property
    def order(self) -> int:
        """Zero-based position of this stage in the pipeline."""
        return CheckpointStage.ordered().index(self)

    def is_terminal(self) -> bool:
        """Check if this is the terminal checkpoint."""
        return self is CheckpointStage.FILE_GENERATED

    def is_required(self) -> bool:
        """Check if every complete run must pass through this stage.

        SQLLOADER_START only marks the beginning of a load; the
        SQLLOADER_COMPLETE event carries the load outcome.
        """
        return self is not CheckpointStage.SQLLOADER_START

    def next_stage(self) -> Optional["CheckpointStage"]:
        """Return the following stage, or None for the terminal stage."""
        stages = CheckpointStage.ordered()
        if self.order + 1 >= len(stages):
            return None
        return stages[self.order + 1]

    def expected_detail_fields(self) -> Tuple[str, ...]:
        """Detail fields this stage is documented to report (not enforced)."""
        return EXPECTED_DETAIL_FIELDS[self]


EXPECTED_DETAIL_FIELDS = {
    CheckpointStage.RHEL_LANDING: ("file_size_bytes", "file_hash_sha256"),
    CheckpointStage.SQLLOADER_START: ("rows_read", "rows_loaded", "rows_rejected"),
    CheckpointStage.SQLLOADER_COMPLETE: ("rows_read", "rows_loaded", "rows_rejected"),
    CheckpointStage.LOGIC_APPLIED: ("rule_input", "rule_output", "entity_identifier"),
    CheckpointStage.FILE_GENERATED: (
        "record_count",
        "control_total_debits",
        "control_total_credits",
        "control_total_amount",
    ),
}


class DiscrepancyType(str, Enum):
    """Kinds of data-integrity findings raised for a run."""

    RECORD_COUNT_MISMATCH = "RECORD_COUNT_MISMATCH"
    MISSING_CHECKPOINT = "MISSING_CHECKPOINT"
    CONTROL_TOTAL_MISMATCH = "CONTROL_TOTAL_MISMATCH"
    PROCESSING_TIMEOUT = "PROCESSING_TIMEOUT"
    STATUS_FAILURE_PRESENT = "STATUS_FAILURE_PRESENT"


class DiscrepancySeverity(str, Enum):
    """Severity levels for findings, lowest first."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        """Numeric rank used for ordering (LOW=0 .. CRITICAL=3)."""
        return list(DiscrepancySeverity).index(self)

    def is_at_least(self, other: "DiscrepancySeverity") -> bool:
        """Check if this severity is the same as or above other."""
        return self.rank >= other.rank


class DiscrepancyStatus(str, Enum):
    """Lifecycle of a finding, managed by an external workflow."""

    OPEN = "OPEN"
    INVESTIGATING = "INVESTIGATING"
    RESOLVED = "RESOLVED"
    FALSE_POSITIVE = "FALSE_POSITIVE"
    ACKNOWLEDGED = "ACKNOWLEDGED"


class ReportStatus(str, Enum):
    """Overall status of a pipeline run as seen by reconciliation."""

    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    FAILURE = "FAILURE"
    IN_PROGRESS = "IN_PROGRESS"


class DetailLevel(str, Enum):
    """Shape of reconciliation report to produce."""

    SUMMARY = "SUMMARY"
    STANDARD = "STANDARD"
    DETAILED = "DETAILED"
