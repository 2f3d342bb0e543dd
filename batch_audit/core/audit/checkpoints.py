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

"""Per-checkpoint view of one run's events."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .entities import AuditEvent
from .value_objects import AuditStatus, CheckpointStage


@dataclass
class StageSummary:
    """Figures for one checkpoint of one run.

    Several events may exist per stage (one per file, per module, per
    retry). Figures are last-writer-wins: the most recent event carrying a
    value is authoritative, since retries overwrite provisional figures.

    Attributes:
        stage: Checkpoint the summary is for.
        events: Events at this stage, timestamp ascending.
        record_count: Latest effective record count, if any event had one.
        record_count_event: Event that supplied ``record_count``.
        control_totals: Latest control totals, if any event had them.
    """

    stage: CheckpointStage
    events: List[AuditEvent] = field(default_factory=list)
    record_count: Optional[int] = None
    record_count_event: Optional[AuditEvent] = None
    control_totals: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def first_event_at(self) -> datetime:
        return self.events[0].event_timestamp

    @property
    def last_event_at(self) -> datetime:
        return self.events[-1].event_timestamp

    @property
    def latest_event(self) -> AuditEvent:
        return self.events[-1]

    @property
    def latest_status(self) -> AuditStatus:
        return self.latest_event.status

    @property
    def duration_seconds(self) -> float:
        return (self.last_event_at - self.first_event_at).total_seconds()

    def has_completed(self) -> bool:
        """Check if any event at this stage finished its work."""
        return any(event.status.is_completed() for event in self.events)

    def has_failure(self) -> bool:
        """Check if any event at this stage failed."""
        return any(event.status is AuditStatus.FAILURE for event in self.events)

    def add(self, event: AuditEvent) -> None:
        """Fold one event into the summary (events must arrive in time order)."""
        self.events.append(event)
        count = event.details.effective_record_count()
        if count is not None:
            self.record_count = count
            self.record_count_event = event
        totals = event.details.control_totals()
        if totals:
            self.control_totals = totals


def summarize_stages(events: Iterable[AuditEvent]) -> Dict[CheckpointStage, StageSummary]:
    """Build stage summaries for one run, keyed and ordered by pipeline order.

    Args:
        events: Events of a single run in any order.

    Returns:
        Mapping containing only the stages that have events.
    """
    ordered_events = sorted(events, key=lambda event: (event.event_timestamp, event.event_id))
    summaries: Dict[CheckpointStage, StageSummary] = {}
    for event in ordered_events:
        summary = summaries.get(event.checkpoint_stage)
        if summary is None:
            summary = StageSummary(stage=event.checkpoint_stage)
            summaries[event.checkpoint_stage] = summary
        summary.add(event)
    return {
        stage: summaries[stage]
        for stage in CheckpointStage.ordered()
        if stage in summaries
    }
