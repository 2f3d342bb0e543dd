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

"""Port interfaces (Protocols) for the audit domain.

These define the contracts that infrastructure implementations must satisfy.
Using Protocol instead of ABC allows for structural subtyping (duck typing).

The event store hands back rows as plain mappings (``EventRecord``); the
engine rehydrates them so that one malformed row can be skipped instead of
failing a whole query.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol

from .exceptions import InvalidInputError
from .value_objects import AuditStatus, CheckpointStage, CorrelationId

EventRecord = Mapping[str, Any]

_FILTER_KEYS = {
    "sourcesystem": "source_system",
    "source_system": "source_system",
    "modulename": "module_name",
    "module_name": "module_name",
    "status": "status",
    "checkpointstage": "checkpoint_stage",
    "checkpoint_stage": "checkpoint_stage",
    "correlationid": "correlation_id",
    "correlation_id": "correlation_id",
    "startdate": "start",
    "start_date": "start",
    "enddate": "end",
    "end_date": "end",
}


@dataclass(frozen=True)
class EventFilter:
    """Optional filters over the event table; None means "any".

    Attributes:
        source_system: Exact source system.
        module_name: Exact module name.
        status: Event status.
        checkpoint_stage: Checkpoint stage.
        correlation_id: Single run.
        start: Inclusive lower bound on event timestamp.
        end: Inclusive upper bound on event timestamp.
    """

    source_system: Optional[str] = None
    module_name: Optional[str] = None
    status: Optional[AuditStatus] = None
    checkpoint_stage: Optional[CheckpointStage] = None
    correlation_id: Optional[CorrelationId] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Reject inverted ranges."""
        if self.start is not None and self.end is not None and self.start > self.end:
            raise InvalidInputError("Start date cannot be after end date", field="start")

    @classmethod
    def from_mapping(cls, filters: Optional[Mapping[str, str]]) -> "EventFilter":
        """Parse string filters as received from an API layer.

        Raises:
            InvalidInputError: On unknown keys or unparseable values.
        """
        if not filters:
            return cls()
        values: Dict[str, Any] = {}
        for key, raw in filters.items():
            name = _FILTER_KEYS.get(str(key).strip().lower())
            if name is None:
                raise InvalidInputError(f"Unknown filter: {key}", field=str(key))
            if raw is None or str(raw).strip() == "":
                continue
            values[name] = _parse_filter_value(name, str(raw).strip())
        return cls(**values)

    def matches(self, record: EventRecord) -> bool:
        """Check a stored row against this filter.

        Used by in-memory gateways; rows with unparseable timestamps
        never match a time-bounded filter.
        """
        if self.source_system is not None and record.get("source_system") != self.source_system:
            return False
        if self.module_name is not None and record.get("module_name") != self.module_name:
            return False
        if self.status is not None and record.get("status") != self.status.value:
            return False
        if (
            self.checkpoint_stage is not None
            and record.get("checkpoint_stage") != self.checkpoint_stage.value
        ):
            return False
        if (
            self.correlation_id is not None
            and str(record.get("correlation_id")).lower() != str(self.correlation_id).lower()
        ):
            return False
        if self.start is not None or self.end is not None:
            try:
                timestamp = _parse_datetime(record.get("event_timestamp"))
            except ValueError:
                return False
            if self.start is not None and timestamp < self.start:
                return False
            if self.end is not None and timestamp > self.end:
                return False
        return True


def _parse_filter_value(name: str, raw: str) -> Any:
    try:
        if name == "status":
            return AuditStatus.from_value(raw)
        if name == "checkpoint_stage":
            return CheckpointStage.from_value(raw)
        if name == "correlation_id":
            return CorrelationId(raw)
        if name in ("start", "end"):
            return _parse_datetime(raw)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid value for {name}: {raw}", field=name) from exc
    return raw


def _parse_datetime(raw: Any) -> datetime:
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    raw = str(raw)
    text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


class AuditEventGateway(Protocol):
    """Port for the durable event store (passive, no business logic)."""

    def insert(self, record: EventRecord) -> None:
        """Append one event row.

        Args:
            record: Row produced by ``AuditEvent.to_record``.
        """
        ...

    def find_by_correlation_id(self, correlation_id: CorrelationId) -> List[EventRecord]:
        """Return all rows of one run, timestamp ascending.

        Args:
            correlation_id: Run identifier.

        Returns:
            List of rows (may be empty).
        """
        ...

    def find_by_source_and_stage(
        self,
        source_system: str,
        checkpoint_stage: CheckpointStage
    ) -> List[EventRecord]:
        """Return rows for one source system at one checkpoint."""
        ...

    def find_by_module_and_status(
        self,
        module_name: str,
        status: AuditStatus
    ) -> List[EventRecord]:
        """Return rows for one module with one status."""
        ...

    def find_by_filter(
        self,
        event_filter: EventFilter,
        page: int,
        size: int
    ) -> List[EventRecord]:
        """Return one page of rows matching the filter.

        Args:
            event_filter: Filters to apply.
            page: Zero-based page number.
            size: Page size.

        Returns:
            List of rows, timestamp descending.
        """
        ...

    def count_by_filter(self, event_filter: EventFilter) -> int:
        """Count rows matching the filter."""
        ...

    def find_by_timestamp_range(self, start: datetime, end: datetime) -> List[EventRecord]:
        """Return rows with start <= event_timestamp <= end."""
        ...


class UUIDGenerator(Protocol):
    """Generator port for event and run identifiers."""

    def generate(self) -> uuid.UUID:
        """Generate a UUID object.

        Returns:
            uuid.UUID: A new random identifier.
        """
        ...
