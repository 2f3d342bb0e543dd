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

"""Domain services for the audit domain."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from .entities import AuditEvent
from .exceptions import InconsistentDataError
from .repositories import EventRecord
from .value_objects import CorrelationId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RehydrationResult:
    """Events parsed from stored rows.

    Attributes:
        events: Successfully parsed events, timestamp ascending.
        skipped: Number of rows excluded as malformed.
    """

    events: Tuple[AuditEvent, ...]
    skipped: int = 0


class EventRehydrationService:
    """Turns stored rows into events, excluding malformed rows.

    One bad row must not blind the reconciliation of a whole run, so
    parse failures are logged and counted instead of raised.
    """

    @staticmethod
    def rehydrate(records: Iterable[EventRecord]) -> RehydrationResult:
        """Parse rows into events sorted by timestamp.

        Args:
            records: Rows as returned by the event store gateway.

        Returns:
            RehydrationResult with parsed events and the skipped count.
        """
        events: List[AuditEvent] = []
        skipped = 0
        for record in records:
            try:
                events.append(AuditEvent.from_record(record))
            except InconsistentDataError as exc:
                skipped += 1
                logger.warning(
                    "Skipping malformed audit event %s for correlation ID %s: %s",
                    exc.event_id, exc.correlation_id, exc.reason
                )
        events.sort(key=lambda event: (event.event_timestamp, event.event_id))
        return RehydrationResult(events=tuple(events), skipped=skipped)

    @staticmethod
    def group_by_run(events: Iterable[AuditEvent]) -> Dict[CorrelationId, List[AuditEvent]]:
        """Group events by run id, keeping each group timestamp ascending."""
        groups: Dict[CorrelationId, List[AuditEvent]] = {}
        for event in events:
            groups.setdefault(event.correlation_id, []).append(event)
        for group in groups.values():
            group.sort(key=lambda event: (event.event_timestamp, event.event_id))
        return groups
