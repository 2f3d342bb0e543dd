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

"""Shared pytest fixtures for batch audit tests.

Fakes are in-memory and deterministic: fixed timestamps, sequential ids
and no network.
"""

import itertools
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List

import pytest

# Add repository root to Python path for imports
REPO_ROOT = Path(__file__).parent.parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from batch_audit.core.audit.entities import AuditDetails, AuditEvent  # noqa: E402
from batch_audit.core.audit.repositories import EventFilter, UUIDGenerator  # noqa: E402
from batch_audit.core.audit.value_objects import (  # noqa: E402
    AuditStatus,
    CheckpointStage,
    CorrelationId,
)

RUN_ID = "018f3c4b-2d9e-4d1a-8a2b-111111111111"
OTHER_RUN_ID = "018f3c4b-2d9e-4d1a-8a2b-222222222222"
T0 = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


class FakeAuditEventGateway:
    """In-memory fake implementation of AuditEventGateway.

    Rows are stored exactly as inserted, so tests can seed malformed rows.
    """

    def __init__(self) -> None:
        """Initialize the fake gateway."""
        self.records: List[Dict[str, Any]] = []
        self.calls: List[str] = []

    def seed(self, *events: AuditEvent) -> None:
        """Store events as rows without recording a call."""
        for event in events:
            self.records.append(event.to_record())

    def insert(self, record) -> None:
        """Append a row."""
        self.calls.append("insert")
        self.records.append(dict(record))

    def find_by_correlation_id(self, correlation_id) -> List[Dict[str, Any]]:
        """Return rows of one run, timestamp ascending."""
        self.calls.append("find_by_correlation_id")
        rows = [
            row for row in self.records
            if str(row.get("correlation_id")).lower() == str(correlation_id).lower()
        ]
        return sorted(rows, key=lambda row: str(row.get("event_timestamp")))

    def find_by_source_and_stage(self, source_system, checkpoint_stage) -> List[Dict[str, Any]]:
        """Return rows for a source system at a stage."""
        self.calls.append("find_by_source_and_stage")
        return self._matching(
            EventFilter(source_system=source_system, checkpoint_stage=checkpoint_stage)
        )

    def find_by_module_and_status(self, module_name, status) -> List[Dict[str, Any]]:
        """Return rows for a module with a status."""
        self.calls.append("find_by_module_and_status")
        return self._matching(EventFilter(module_name=module_name, status=status))

    def find_by_filter(self, event_filter, page, size) -> List[Dict[str, Any]]:
        """Return one page of matching rows, timestamp descending."""
        self.calls.append("find_by_filter")
        rows = list(reversed(self._matching(event_filter)))
        return rows[page * size:(page + 1) * size]

    def count_by_filter(self, event_filter) -> int:
        """Count matching rows."""
        self.calls.append("count_by_filter")
        return len(self._matching(event_filter))

    def find_by_timestamp_range(self, start, end) -> List[Dict[str, Any]]:
        """Return rows inside the window."""
        self.calls.append("find_by_timestamp_range")
        return self._matching(EventFilter(start=start, end=end))

    def _matching(self, event_filter: EventFilter) -> List[Dict[str, Any]]:
        rows = [row for row in self.records if event_filter.matches(row)]
        return sorted(rows, key=lambda row: str(row.get("event_timestamp")))


class UnavailableAuditEventGateway:
    """Gateway whose every call fails like a dropped connection."""

    def __init__(self, error: Exception = None) -> None:
        """Initialize with the error to raise."""
        self.error = error or ConnectionError("connection refused")

    def _fail(self, *args, **kwargs):
        raise self.error

    insert = _fail
    find_by_correlation_id = _fail
    find_by_source_and_stage = _fail
    find_by_module_and_status = _fail
    find_by_filter = _fail
    count_by_filter = _fail
    find_by_timestamp_range = _fail


class FakeUUIDGenerator(UUIDGenerator):
    """Fake UUID generator for testing."""

    def __init__(self) -> None:
        """Initialize the fake generator."""
        self._counter = 1

    def generate(self) -> uuid.UUID:
        """Generate a predictable UUID for testing."""
        uuid_str = f"123e4567-e89b-42d3-a456-426614174{self._counter:03d}"
        self._counter += 1
        return uuid.UUID(uuid_str)


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime) -> None:
        """Initialize with the instant to return."""
        self.now = now

    def __call__(self) -> datetime:
        """Return the current fixed instant."""
        return self.now


@pytest.fixture
def run_id():
    """Correlation ID of the run most tests use."""
    return CorrelationId(RUN_ID)


@pytest.fixture
def other_run_id():
    """Correlation ID of a second, unrelated run."""
    return CorrelationId(OTHER_RUN_ID)


@pytest.fixture
def t0():
    """Start instant of the sample runs."""
    return T0


@pytest.fixture
def event_factory():
    """Build AuditEvents relative to T0.

    Keyword arguments not naming an event field are passed to AuditDetails.
    """
    counter = itertools.count(1)

    def _make(
        stage: CheckpointStage,
        status: AuditStatus = AuditStatus.SUCCESS,
        minutes: float = 0,
        correlation_id: str = RUN_ID,
        source_system: str = "MAINFRAME_A",
        module_name: str = None,
        message: str = None,
        event_id: str = None,
        **details: Any
    ) -> AuditEvent:
        return AuditEvent(
            event_id=event_id or f"evt-{next(counter):04d}",
            correlation_id=CorrelationId(correlation_id),
            source_system=source_system,
            checkpoint_stage=stage,
            event_timestamp=T0 + timedelta(minutes=minutes),
            status=status,
            module_name=module_name,
            message=message,
            details=AuditDetails(**details),
        )

    return _make


@pytest.fixture
def complete_run(event_factory):
    """Healthy run: 1000 records land, load, transform and ship."""
    return [
        event_factory(CheckpointStage.RHEL_LANDING, minutes=0, record_count=1000,
                      module_name="FILE_TRANSFER"),
        event_factory(CheckpointStage.SQLLOADER_COMPLETE, minutes=10, rows_loaded=1000,
                      module_name="SQL_LOADER"),
        event_factory(CheckpointStage.LOGIC_APPLIED, minutes=20, module_name="RULES"),
        event_factory(CheckpointStage.FILE_GENERATED, minutes=30, record_count=1000,
                      module_name="FILE_GENERATOR"),
    ]


@pytest.fixture
def short_output_run(event_factory):
    """Run whose output file holds 950 of 1000 loaded records."""
    return [
        event_factory(CheckpointStage.RHEL_LANDING, minutes=0, record_count=1000),
        event_factory(CheckpointStage.SQLLOADER_COMPLETE, minutes=10, rows_loaded=1000),
        event_factory(CheckpointStage.LOGIC_APPLIED, minutes=20),
        event_factory(CheckpointStage.FILE_GENERATED, minutes=30, record_count=950),
    ]


@pytest.fixture
def stalled_run(event_factory):
    """Run that stopped after the database load."""
    return [
        event_factory(CheckpointStage.RHEL_LANDING, minutes=0, record_count=1000),
        event_factory(CheckpointStage.SQLLOADER_COMPLETE, minutes=10, rows_loaded=1000),
    ]


@pytest.fixture
def gateway():
    """Provide fake event store gateway."""
    return FakeAuditEventGateway()


@pytest.fixture
def unavailable_gateway():
    """Provide a gateway that always fails."""
    return UnavailableAuditEventGateway()


@pytest.fixture
def uuid_generator():
    """Provide fake UUID generator."""
    return FakeUUIDGenerator()


@pytest.fixture
def fixed_clock():
    """Clock fixed at T0 + 1 hour."""
    return FixedClock(T0 + timedelta(hours=1))
