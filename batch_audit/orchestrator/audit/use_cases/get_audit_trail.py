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

"""Audit trail and event lookup use cases."""

import logging
from typing import List, Union

from batch_audit.core.audit.exceptions import InvalidInputError
from batch_audit.core.audit.services import EventRehydrationService
from batch_audit.core.audit.value_objects import AuditStatus, CheckpointStage, CorrelationId

from ..dtos import AuditEventResponse
from .base import GatewayUseCase, to_correlation_id

logger = logging.getLogger(__name__)


class GetAuditTrailUseCase(GatewayUseCase):
    """Returns every event of one run, oldest first.

    An unknown run yields an empty list; reports are where "not found"
    is an error.
    """

    def execute(self, correlation_id: Union[CorrelationId, str]) -> List[AuditEventResponse]:
        """Fetch the audit trail of a run.

        Raises:
            InvalidInputError: If the run id is missing or malformed.
            UpstreamUnavailableError: If the event store fails.
        """
        run_id = to_correlation_id(correlation_id)
        result = self._load_run(run_id)
        logger.debug(
            "Retrieved %d audit events for correlation ID %s (%d skipped)",
            len(result.events), run_id, result.skipped
        )
        return [AuditEventResponse.from_entity(event) for event in result.events]

    def by_source_and_stage(
        self,
        source_system: str,
        checkpoint_stage: Union[CheckpointStage, str],
    ) -> List[AuditEventResponse]:
        """Events of one source system at one checkpoint, oldest first."""
        if not source_system or not source_system.strip():
            raise InvalidInputError("Source system cannot be null or empty", field="source_system")
        if checkpoint_stage is None:
            raise InvalidInputError("Checkpoint stage cannot be null", field="checkpoint_stage")
        stage = self._parse(CheckpointStage.from_value, checkpoint_stage, "checkpoint_stage")
        records = self._call_gateway(
            "find_by_source_and_stage",
            self._gateway.find_by_source_and_stage,
            source_system,
            stage,
        )
        result = EventRehydrationService.rehydrate(records)
        return [AuditEventResponse.from_entity(event) for event in result.events]

    def by_module_and_status(
        self,
        module_name: str,
        status: Union[AuditStatus, str],
    ) -> List[AuditEventResponse]:
        """Events of one module with one status, oldest first."""
        if not module_name or not module_name.strip():
            raise InvalidInputError("Module name cannot be null or empty", field="module_name")
        if status is None:
            raise InvalidInputError("Status cannot be null", field="status")
        parsed_status = self._parse(AuditStatus.from_value, status, "status")
        records = self._call_gateway(
            "find_by_module_and_status",
            self._gateway.find_by_module_and_status,
            module_name,
            parsed_status,
        )
        result = EventRehydrationService.rehydrate(records)
        return [AuditEventResponse.from_entity(event) for event in result.events]

    @staticmethod
    def _parse(parser, value, field_name: str):
        try:
            return parser(value)
        except ValueError as exc:
            raise InvalidInputError(str(exc), field=field_name) from exc
