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

"""Aggregate statistics over a time-bounded set of audit events."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, Optional

from .entities import AuditEvent
from .exceptions import InvalidInputError
from .value_objects import AuditStatus


def percentage(part: int, total: int) -> float:
    """Return part as a percentage of total, 0.0 when total is 0."""
    if total <= 0:
        return 0.0
    return part * 100.0 / total


@dataclass(frozen=True)
class AuditStatistics:
    """Counts, rates and breakdowns for one window.

    Grouping maps only contain keys present in the input; there is no
    zero-filling. ``events_by_status`` always holds all three statuses.

    Attributes:
        start_date: Window start.
        end_date: Window end.
        total_events: Number of events aggregated.
        events_by_status: Count per status.
        success_rate: Percentage of SUCCESS events.
        failure_rate: Percentage of FAILURE events.
        warning_rate: Percentage of WARNING events.
        events_by_source_system: Count per source system.
        events_by_module: Count per module (events without a module excluded).
        events_by_checkpoint_stage: Count per checkpoint stage.
        average_events_per_day: total / max(1, whole days in window).
        peak_events_per_day: Highest count on one calendar day (UTC).
        peak_date: Earliest day reaching the peak, None when empty.
        records_skipped: Malformed rows excluded before aggregation.
    """

    start_date: datetime
    end_date: datetime
    total_events: int
    events_by_status: Dict[str, int]
    success_rate: float
    failure_rate: float
    warning_rate: float
    events_by_source_system: Dict[str, int] = field(default_factory=dict)
    events_by_module: Dict[str, int] = field(default_factory=dict)
    events_by_checkpoint_stage: Dict[str, int] = field(default_factory=dict)
    average_events_per_day: float = 0.0
    peak_events_per_day: int = 0
    peak_date: Optional[date] = None
    records_skipped: int = 0

    @property
    def successful_events(self) -> int:
        return self.events_by_status[AuditStatus.SUCCESS.value]

    @property
    def failed_events(self) -> int:
        return self.events_by_status[AuditStatus.FAILURE.value]

    @property
    def warning_events(self) -> int:
        return self.events_by_status[AuditStatus.WARNING.value]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-ready primitives."""
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "totalEvents": self.total_events,
            "successfulEvents": self.successful_events,
            "failedEvents": self.failed_events,
            "warningEvents": self.warning_events,
            "successRate": self.success_rate,
            "failureRate": self.failure_rate,
            "warningRate": self.warning_rate,
            "eventsByStatus": dict(self.events_by_status),
            "eventsBySourceSystem": dict(self.events_by_source_system),
            "eventsByModule": dict(self.events_by_module),
            "eventsByCheckpointStage": dict(self.events_by_checkpoint_stage),
            "averageEventsPerDay": self.average_events_per_day,
            "peakEventsPerDay": self.peak_events_per_day,
            "peakDate": self.peak_date.isoformat() if self.peak_date else None,
            "recordsSkipped": self.records_skipped,
        }


class StatisticsAggregator:
    """Derives statistics purely from the events it is given.

    Windowing is the caller's job; events outside ``[start, end]`` are
    counted like any other.
    """

    @staticmethod
    def validate_window(start: Optional[datetime], end: Optional[datetime]) -> None:
        """Reject missing or inverted windows.

        Raises:
            InvalidInputError: If either bound is missing or start > end.
        """
        if start is None or end is None:
            raise InvalidInputError("Start date and end date cannot be null", field="start")
        if _as_utc(start) > _as_utc(end):
            raise InvalidInputError("Start date cannot be after end date", field="start")

    def aggregate(
        self,
        events: Iterable[AuditEvent],
        start: datetime,
        end: datetime,
        records_skipped: int = 0,
    ) -> AuditStatistics:
        """Aggregate events in one linear pass.

        Args:
            events: Events already fetched for the window.
            start: Window start (inclusive).
            end: Window end (inclusive).
            records_skipped: Malformed rows dropped upstream, reported as-is.

        Returns:
            AuditStatistics for the window.

        Raises:
            InvalidInputError: If the window is missing or inverted.
        """
        self.validate_window(start, end)

        total = 0
        by_status: Counter = Counter()
        by_source: Counter = Counter()
        by_module: Counter = Counter()
        by_stage: Counter = Counter()
        by_day: Counter = Counter()

        for event in events:
            total += 1
            by_status[event.status.value] += 1
            by_source[event.source_system] += 1
            if event.module_name:
                by_module[event.module_name] += 1
            by_stage[event.checkpoint_stage.value] += 1
            by_day[_as_utc(event.event_timestamp).date()] += 1

        status_counts = {status.value: by_status.get(status.value, 0) for status in AuditStatus}

        peak_date: Optional[date] = None
        peak_count = 0
        for day in sorted(by_day):
            if by_day[day] > peak_count:
                peak_date, peak_count = day, by_day[day]

        days_in_window = (_as_utc(end) - _as_utc(start)).days

        return AuditStatistics(
            start_date=start,
            end_date=end,
            total_events=total,
            events_by_status=status_counts,
            success_rate=percentage(status_counts[AuditStatus.SUCCESS.value], total),
            failure_rate=percentage(status_counts[AuditStatus.FAILURE.value], total),
            warning_rate=percentage(status_counts[AuditStatus.WARNING.value], total),
            events_by_source_system=dict(by_source),
            events_by_module=dict(by_module),
            events_by_checkpoint_stage=dict(by_stage),
            average_events_per_day=total / max(1, days_in_window),
            peak_events_per_day=peak_count,
            peak_date=peak_date,
            records_skipped=records_skipped,
        )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
