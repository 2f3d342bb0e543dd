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

"""FindDiscrepancies use case implementation."""

import logging
from typing import Dict, List, Optional

from batch_audit.core.audit.discrepancies import DiscrepancyDetector, sort_findings
from batch_audit.core.audit.entities import Discrepancy
from batch_audit.core.audit.repositories import AuditEventGateway
from batch_audit.core.audit.value_objects import CorrelationId

from ..commands import DiscrepancyQuery
from .base import Clock, GatewayUseCase

logger = logging.getLogger(__name__)


class FindDiscrepanciesUseCase(GatewayUseCase):
    """Scans every run touched by the filtered events.

    Runs are always evaluated on their full event set, so a filter on
    status or stage selects runs without hiding their other checkpoints.
    """

    def __init__(
        self,
        gateway: AuditEventGateway,
        detector: Optional[DiscrepancyDetector] = None,
        clock: Optional[Clock] = None,
        page_size: int = 500,
    ) -> None:
        """Initialize use case.

        Args:
            gateway: Event store gateway implementation.
            detector: Discrepancy detector; default settings when omitted.
            clock: Source of the current UTC time, used when the query has no as_of.
            page_size: Rows fetched per page while collecting run ids.
        """
        super().__init__(gateway, clock)
        self._detector = detector or DiscrepancyDetector()
        self._page_size = page_size

    def execute(self, query: Optional[DiscrepancyQuery] = None) -> List[Discrepancy]:
        """Detect, filter and order findings.

        Returns:
            Findings severity descending, newest first, then by run id.

        Raises:
            UpstreamUnavailableError: If the event store fails.
        """
        query = query or DiscrepancyQuery()
        as_of = query.as_of or self._now_utc()

        findings: List[Discrepancy] = []
        run_ids = self._collect_run_ids(query)
        for correlation_id in run_ids:
            result = self._load_run(correlation_id)
            if not result.events:
                continue
            findings.extend(self._detector.detect_run(result.events, as_of=as_of))

        selected = [finding for finding in findings if self._wanted(query, finding)]
        logger.info(
            "Scanned %d runs: %d discrepancies, %d after filtering",
            len(run_ids), len(findings), len(selected)
        )
        return sort_findings(selected)

    def _collect_run_ids(self, query: DiscrepancyQuery) -> List[CorrelationId]:
        """Page through matching rows and return distinct run ids in first-seen order."""
        total = self._call_gateway(
            "count_by_filter", self._gateway.count_by_filter, query.event_filter
        )
        pages = (total + self._page_size - 1) // self._page_size
        seen: Dict[CorrelationId, None] = {}
        for page in range(pages):
            records = self._call_gateway(
                "find_by_filter",
                self._gateway.find_by_filter,
                query.event_filter,
                page,
                self._page_size,
            )
            for record in records:
                raw = record.get("correlation_id")
                try:
                    correlation_id = CorrelationId(str(raw))
                except ValueError:
                    logger.warning("Skipping row with malformed correlation ID %r", raw)
                    continue
                seen.setdefault(correlation_id, None)
        return list(seen)

    @staticmethod
    def _wanted(query: DiscrepancyQuery, finding: Discrepancy) -> bool:
        if (
            query.discrepancy_type is not None
            and finding.discrepancy_type is not query.discrepancy_type
        ):
            return False
        if (
            query.min_severity is not None
            and not finding.severity.is_at_least(query.min_severity)
        ):
            return False
        return True
