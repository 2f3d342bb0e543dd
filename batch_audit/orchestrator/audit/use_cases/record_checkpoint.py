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

"""RecordCheckpoint use case implementation."""

import logging
from typing import Optional

from batch_audit.core.audit.correlation import CorrelationContext
from batch_audit.core.audit.entities import AuditEvent
from batch_audit.core.audit.exceptions import InvalidInputError
from batch_audit.core.audit.repositories import AuditEventGateway, UUIDGenerator
from batch_audit.core.audit.value_objects import CorrelationId

from ..commands import RecordCheckpointCommand
from ..dtos import AuditEventResponse
from .base import Clock, GatewayUseCase

logger = logging.getLogger(__name__)


class RecordCheckpointUseCase(GatewayUseCase):
    """Use case for appending one checkpoint event to the event store.

    The run id comes from the command or, failing that, from the run id
    bound to the caller's correlation context. Events are append-only;
    nothing is read back or merged.
    """

    def __init__(
        self,
        gateway: AuditEventGateway,
        uuid_generator: UUIDGenerator,
        correlation_context: Optional[CorrelationContext] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """Initialize use case with its dependencies.

        Args:
            gateway: Event store gateway implementation.
            uuid_generator: Generator for event identifiers.
            correlation_context: Context consulted when the command has no run id.
            clock: Source of the current UTC time.
        """
        super().__init__(gateway, clock)
        self._uuid_generator = uuid_generator
        self._correlation_context = correlation_context

    def execute(self, command: RecordCheckpointCommand) -> AuditEventResponse:
        """Record the checkpoint described by ``command``.

        Args:
            command: RecordCheckpoint command.

        Returns:
            AuditEventResponse DTO of the stored event.

        Raises:
            InvalidInputError: If no run id is available or a field is invalid.
            UpstreamUnavailableError: If the event store rejects the insert.
        """
        correlation_id = self._resolve_correlation_id(command)
        logger.debug(
            "Recording %s checkpoint for correlation ID %s, source system %s",
            command.checkpoint_stage.value, correlation_id, command.source_system
        )

        event = self._build_event(command, correlation_id)
        self._call_gateway(
            "insert",
            self._gateway.insert,
            event.to_record(),
            correlation_id=correlation_id,
        )

        logger.info(
            "Recorded audit event %s at %s with status %s",
            event.event_id, event.checkpoint_stage.value, event.status.value
        )
        return AuditEventResponse.from_entity(event)

    def _resolve_correlation_id(self, command: RecordCheckpointCommand) -> CorrelationId:
        """Return the command's run id, else the bound one."""
        if command.correlation_id is not None:
            return command.correlation_id
        if self._correlation_context is not None:
            bound = self._correlation_context.current()
            if bound is not None:
                return bound
        raise InvalidInputError("Correlation ID cannot be null", field="correlation_id")

    def _build_event(
        self,
        command: RecordCheckpointCommand,
        correlation_id: CorrelationId,
    ) -> AuditEvent:
        """Build the event entity, mapping validation failures to InvalidInputError."""
        try:
            return AuditEvent(
                event_id=str(self._uuid_generator.generate()),
                correlation_id=correlation_id,
                source_system=command.source_system,
                checkpoint_stage=command.checkpoint_stage,
                event_timestamp=self._now_utc(),
                status=command.status,
                module_name=command.module_name,
                process_name=command.process_name,
                source_entity=command.source_entity,
                destination_entity=command.destination_entity,
                key_identifier=command.key_identifier,
                message=command.message or command.default_message(),
                details=command.details,
            )
        except ValueError as exc:
            raise InvalidInputError(
                str(exc), correlation_id=str(correlation_id)
            ) from exc
