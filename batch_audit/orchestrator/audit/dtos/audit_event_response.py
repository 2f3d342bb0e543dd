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

"""Audit event response DTO."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AuditEventResponse:
    """Response DTO for audit event operations.

    Immutable data transfer object for returning event information to an
    API layer. Timestamps are ISO 8601 strings.
    """

    event_id: str
    correlation_id: str
    source_system: str
    checkpoint_stage: str
    event_timestamp: str
    status: str
    module_name: Optional[str] = None
    process_name: Optional[str] = None
    source_entity: Optional[str] = None
    destination_entity: Optional[str] = None
    key_identifier: Optional[str] = None
    message: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_entity(event) -> "AuditEventResponse":
        """Create response DTO from an AuditEvent entity.

        Args:
            event: AuditEvent domain entity.

        Returns:
            AuditEventResponse DTO with serialized values.
        """
        return AuditEventResponse(
            event_id=event.event_id,
            correlation_id=str(event.correlation_id),
            source_system=event.source_system,
            checkpoint_stage=event.checkpoint_stage.value,
            event_timestamp=event.event_timestamp.isoformat(),
            status=event.status.value,
            module_name=event.module_name,
            process_name=event.process_name,
            source_entity=event.source_entity,
            destination_entity=event.destination_entity,
            key_identifier=event.key_identifier,
            message=event.message,
            details=event.details.to_dict(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eventId": self.event_id,
            "correlationId": self.correlation_id,
            "sourceSystem": self.source_system,
            "moduleName": self.module_name,
            "processName": self.process_name,
            "sourceEntity": self.source_entity,
            "destinationEntity": self.destination_entity,
            "keyIdentifier": self.key_identifier,
            "checkpointStage": self.checkpoint_stage,
            "eventTimestamp": self.event_timestamp,
            "status": self.status,
            "message": self.message,
            "details": dict(self.details),
        }
