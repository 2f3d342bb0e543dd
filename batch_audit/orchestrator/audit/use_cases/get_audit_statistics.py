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

"""GetAuditStatistics use case implementation."""

import logging
from datetime import datetime

from batch_audit.core.audit.services import EventRehydrationService
from batch_audit.core.audit.statistics import AuditStatistics, StatisticsAggregator

from .base import GatewayUseCase

logger = logging.getLogger(__name__)


class GetAuditStatisticsUseCase(GatewayUseCase):
    """Aggregates the events of a time window."""

    def execute(self, start: datetime, end: datetime) -> AuditStatistics:
        """Compute statistics for ``[start, end]``.

        Raises:
            InvalidInputError: If either bound is missing or start > end.
            UpstreamUnavailableError: If the event store fails.
        """
        aggregator = StatisticsAggregator()
        aggregator.validate_window(start, end)

        records = self._call_gateway(
            "find_by_timestamp_range", self._gateway.find_by_timestamp_range, start, end
        )
        result = EventRehydrationService.rehydrate(records)
        statistics = aggregator.aggregate(
            result.events, start, end, records_skipped=result.skipped
        )
        logger.info(
            "Computed audit statistics for %s to %s: %d events, %d skipped",
            start.isoformat(), end.isoformat(), statistics.total_events, result.skipped
        )
        return statistics
