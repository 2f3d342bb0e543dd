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

"""Audit event entity and its stage-specific details payload."""

import json
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from ..exceptions import InconsistentDataError
from ..value_objects import AuditStatus, CheckpointStage, CorrelationId

_INTEGER_FIELDS = (
    "file_size_bytes",
    "rows_read",
    "rows_loaded",
    "rows_rejected",
    "record_count",
    "record_count_before",
    "record_count_after",
)

CONTROL_TOTAL_FIELDS = (
    "control_total_debits",
    "control_total_credits",
    "control_total_amount",
)


def _to_int(name: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got bool")
    if isinstance(value, int):
        return value
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if not parsed.is_finite():
        raise ValueError(f"{name} must be finite, got {value!r}")
    if parsed != parsed.to_integral_value():
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return int(parsed)


def _to_decimal(name: str, value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a decimal, got bool")
    try:
        # str() first so floats keep their printed value, not their binary one
        parsed = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be a decimal, got {value!r}") from exc
    if not parsed.is_finite():
        raise ValueError(f"{name} must be finite, got {value!r}")
    return parsed


@dataclass(frozen=True)
class AuditDetails:
    """Stage-specific metrics attached to an audit event.

    Money-like control totals are kept as Decimal so reconciliation
    compares exact values.

    Attributes:
        file_size_bytes: Landed file size (RHEL_LANDING).
        file_hash_sha256: Landed file hash (RHEL_LANDING).
        rows_read: Rows read by the loader (SQLLOADER_*).
        rows_loaded: Rows loaded by the loader (SQLLOADER_*).
        rows_rejected: Rows rejected by the loader (SQLLOADER_*).
        record_count: Records in the produced or landed file.
        record_count_before: Records before a transformation.
        record_count_after: Records after a transformation.
        control_total_debits: Debit control total.
        control_total_credits: Credit control total.
        control_total_amount: Amount control total.
        rule_input: Business rule input (LOGIC_APPLIED).
        rule_output: Business rule output (LOGIC_APPLIED).
        rule_applied: Name of the applied rule.
        entity_identifier: Entity the rule acted on.
        transformation_details: Free-text transformation notes.
        extra: Any keys not modelled above, preserved as received.
    """

    file_size_bytes: Optional[int] = None
    file_hash_sha256: Optional[str] = None
    rows_read: Optional[int] = None
    rows_loaded: Optional[int] = None
    rows_rejected: Optional[int] = None
    record_count: Optional[int] = None
    record_count_before: Optional[int] = None
    record_count_after: Optional[int] = None
    control_total_debits: Optional[Decimal] = None
    control_total_credits: Optional[Decimal] = None
    control_total_amount: Optional[Decimal] = None
    rule_input: Optional[Dict[str, Any]] = None
    rule_output: Optional[Dict[str, Any]] = None
    rule_applied: Optional[str] = None
    entity_identifier: Optional[str] = None
    transformation_details: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Normalize numeric fields to int and Decimal."""
        for name in _INTEGER_FIELDS:
            object.__setattr__(self, name, _to_int(name, getattr(self, name)))
        for name in CONTROL_TOTAL_FIELDS:
            object.__setattr__(self, name, _to_decimal(name, getattr(self, name)))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "AuditDetails":
        """Build details from a schema-less mapping.

        Accepts snake_case keys and the camelCase keys emitted by
        upstream JSON producers. Unknown keys are kept in ``extra``.

        Raises:
            ValueError: If a numeric field cannot be parsed.
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)} - {"extra"}
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            name = _snake_case(str(key))
            if name in known:
                values[name] = value
            else:
                extra[key] = value
        return cls(extra=extra, **values)

    def effective_record_count(self) -> Optional[int]:
        """Record count this stage hands downstream.

        Preference: record_count, rows_loaded, record_count_after, rows_read.
        """
        for value in (
            self.record_count,
            self.rows_loaded,
            self.record_count_after,
            self.rows_read,
        ):
            if value is not None:
                return value
        return None

    def control_totals(self) -> Dict[str, Decimal]:
        """Return the control totals present on this payload."""
        return {
            name: getattr(self, name)
            for name in CONTROL_TOTAL_FIELDS
            if getattr(self, name) is not None
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize non-empty fields to JSON-ready primitives."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if value is None:
                continue
            result[f.name] = str(value) if isinstance(value, Decimal) else value
        result.update(self.extra)
        return result


def _snake_case(name: str) -> str:
    chars = []
    for char in name:
        if char.isupper():
            chars.append("_")
            chars.append(char.lower())
        else:
            chars.append(char)
    return "".join(chars).lstrip("_")


@dataclass(frozen=True)
class AuditEvent:
    """Immutable record of one pipeline action at a checkpoint.

    Attributes:
        event_id: Unique event identifier, never reused.
        correlation_id: Run the event belongs to.
        source_system: Originating mainframe or source feed.
        checkpoint_stage: Pipeline checkpoint that emitted the event.
        event_timestamp: UTC instant of the action.
        status: Outcome of the action.
        module_name: Executing component, if any.
        process_name: Descriptive process name.
        source_entity: Descriptive source entity.
        destination_entity: Descriptive destination entity.
        key_identifier: Business key of the processed item.
        message: Human-readable text.
        details: Stage-specific metrics.
    """

    event_id: str
    correlation_id: CorrelationId
    source_system: str
    checkpoint_stage: CheckpointStage
    event_timestamp: datetime
    status: AuditStatus
    module_name: Optional[str] = None
    process_name: Optional[str] = None
    source_entity: Optional[str] = None
    destination_entity: Optional[str] = None
    key_identifier: Optional[str] = None
    message: Optional[str] = None
    details: AuditDetails = field(default_factory=AuditDetails)

    def __post_init__(self) -> None:
        """Validate required fields."""
        if not self.event_id or not str(self.event_id).strip():
            raise ValueError("Event ID cannot be empty")
        if not self.source_system or not self.source_system.strip():
            raise ValueError("Source system cannot be empty")
        if self.event_timestamp.tzinfo is None:
            raise ValueError("Event timestamp must be timezone-aware")

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "AuditEvent":
        """Rehydrate an event from a stored row.

        Naive timestamps are read as UTC. ``details`` may be a mapping
        or a JSON string.

        Raises:
            InconsistentDataError: If any field cannot be parsed.
        """
        event_id = record.get("event_id")
        try:
            details_raw = record.get("details")
            if isinstance(details_raw, (str, bytes)):
                details_raw = json.loads(details_raw) if details_raw else None
            return cls(
                event_id=str(event_id) if event_id is not None else "",
                correlation_id=CorrelationId(str(record.get("correlation_id"))),
                source_system=record.get("source_system") or "",
                checkpoint_stage=CheckpointStage.from_value(record.get("checkpoint_stage")),
                event_timestamp=_parse_timestamp(record.get("event_timestamp")),
                status=AuditStatus.from_value(record.get("status")),
                module_name=record.get("module_name"),
                process_name=record.get("process_name"),
                source_entity=record.get("source_entity"),
                destination_entity=record.get("destination_entity"),
                key_identifier=record.get("key_identifier"),
                message=record.get("message"),
                details=AuditDetails.from_mapping(details_raw),
            )
        except (ValueError, TypeError, AttributeError, OverflowError) as exc:
            raise InconsistentDataError(
                event_id=str(event_id) if event_id is not None else None,
                reason=str(exc),
                correlation_id=_safe_str(record.get("correlation_id")),
            ) from exc

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the row shape handed to the event store."""
        return {
            "event_id": self.event_id,
            "correlation_id": str(self.correlation_id),
            "source_system": self.source_system,
            "module_name": self.module_name,
            "process_name": self.process_name,
            "source_entity": self.source_entity,
            "destination_entity": self.destination_entity,
            "key_identifier": self.key_identifier,
            "checkpoint_stage": self.checkpoint_stage.value,
            "event_timestamp": self.event_timestamp.isoformat(),
            "status": self.status.value,
            "message": self.message,
            "details": self.details.to_dict(),
        }


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid event timestamp: {value!r}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _safe_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
