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

"""GenerateReconciliationReport use case implementation."""

import logging
from typing import Optional, Union

from batch_audit.core.audit.exceptions import InvalidInputError, RunNotFoundError
from batch_audit.core.audit.reconciliation import (
    ReconciliationReport,
    ReconciliationReportBuilder,
)
from batch_audit.core.audit.repositories import AuditEventGateway
from batch_audit.core.audit.value_objects import CorrelationId, DetailLevel

from .base import Clock, GatewayUseCase, to_correlation_id

logger = logging.getLogger(__name__)


class GenerateReconciliationReportUseCase(GatewayUseCase):
    """Builds the reconciliation report of one run.

    A run with no stored rows raises RunNotFoundError. A run whose rows
    are all malformed is found but empty and reported as such.
    """

    def __init__(
        self,
        gateway: AuditEventGateway,
        builder: Optional[ReconciliationReportBuilder] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """Initialize use case.

        Args:
            gateway: Event store gateway implementation.
            builder: Report builder; default detector settings when omitted.
            clock: Source of the current UTC time.
        """
        super().__init__(gateway, clock)
        self._builder = builder or ReconciliationReportBuilder()

    def execute(
        self,
        correlation_id: Union[CorrelationId, str],
        detail_level: Union[DetailLevel, str] = DetailLevel.STANDARD,
    ) -> ReconciliationReport:
        """Generate a report.

        Args:
            correlation_id: Run to reconcile.
            detail_level: SUMMARY, STANDARD or DETAILED.

        Returns:
            Report variant matching ``detail_level``.

        Raises:
            InvalidInputError: If the run id or detail level is invalid.
            RunNotFoundError: If the run has no events.
            UpstreamUnavailableError: If the event store fails.
        """
        run_id = to_correlation_id(correlation_id)
        level = self._parse_detail_level(detail_level)

        result = self._load_run(run_id)
        if not result.events and not result.skipped:
            logger.info("No audit events found for correlation ID %s", run_id)
            raise RunNotFoundError(str(run_id))

        now = self._now_utc()
        return self._builder.build(
            run_id,
            result.events,
            detail_level=level,
            as_of=now,
            records_skipped=result.skipped,
            generated_at=now,
        )

    def validate_data_integrity(self, correlation_id: Union[CorrelationId, str]) -> bool:
        """Check that a run has no record-count or control-total findings.

        Raises:
            RunNotFoundError: If the run has no events.
        """
        report = self.execute(correlation_id, DetailLevel.SUMMARY)
        return report.summary.data_integrity_verified

    @staticmethod
    def _parse_detail_level(value: Union[DetailLevel, str]) -> DetailLevel:
        if isinstance(value, DetailLevel):
            return value
        try:
            return DetailLevel(str(value).strip().upper())
        except ValueError as exc:
            raise InvalidInputError(
                f"Invalid detail level: {value}. "
                f"Must be one of: {[level.value for level in DetailLevel]}",
                field="detail_level",
            ) from exc
