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

"""RecordCheckpoint command DTO."""

from dataclasses import dataclass, field
from typing import Optional

from batch_audit.core.audit.entities import AuditDetails
from batch_audit.core.audit.exceptions import InvalidInputError
from batch_audit.core.audit.value_objects import AuditStatus, CheckpointStage, CorrelationId

FILE_TRANSFER_MODULE = "FILE_TRANSFER"
SQL_LOADER_MODULE = "SQL_LOADER"
FILE_GENERATOR_MODULE = "FILE_GENERATOR"

_LOADER_START_HINTS = ("start", "begin", "init")
_LOADER_COMPLETE_HINTS = ("complete", "finish", "end", "done")


def loader_stage_for(process_name: Optional[str], status: AuditStatus) -> CheckpointStage:
    """Pick the SQL*Loader checkpoint from the process name.

    Start hints win over completion hints; without either, a SUCCESS is
    taken as completion and anything else as a start.
    """
    if process_name:
        lowered = process_name.lower()
        if any(hint in lowered for hint in _LOADER_START_HINTS):
            return CheckpointStage.SQLLOADER_START
        if any(hint in lowered for hint in _LOADER_COMPLETE_HINTS):
            return CheckpointStage.SQLLOADER_COMPLETE
    if status is AuditStatus.SUCCESS:
        return CheckpointStage.SQLLOADER_COMPLETE
    return CheckpointStage.SQLLOADER_START


def _require(value: Optional[str], name: str, label: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{label} cannot be null or empty", field=name)
    return value


@dataclass(frozen=True)
class RecordCheckpointCommand:
    """Command to record one checkpoint event.

    When ``correlation_id`` is None the use case falls back to the run id
    bound in the current correlation context.

    Attributes:
        source_system: Originating source feed.
        checkpoint_stage: Checkpoint being recorded.
        status: Outcome of the action.
        module_name: Executing component.
        process_name: Descriptive process name.
        source_entity: Descriptive source entity.
        destination_entity: Descriptive destination entity.
        key_identifier: Business key of the processed item.
        message: Human-readable text; a default is derived when omitted.
        details: Stage-specific metrics.
        correlation_id: Run identifier, if known to the caller.
        subject: File, table or module the default message refers to.
    """

    source_system: str
    checkpoint_stage: CheckpointStage
    status: AuditStatus
    module_name: Optional[str] = None
    process_name: Optional[str] = None
    source_entity: Optional[str] = None
    destination_entity: Optional[str] = None
    key_identifier: Optional[str] = None
    message: Optional[str] = None
    details: AuditDetails = field(default_factory=AuditDetails)
    correlation_id: Optional[CorrelationId] = None
    subject: Optional[str] = None

    @classmethod
    def for_file_transfer(
        cls,
        source_system: str,
        file_name: str,
        process_name: str,
        status: AuditStatus,
        correlation_id: Optional[CorrelationId] = None,
        source_entity: Optional[str] = None,
        destination_entity: Optional[str] = None,
        key_identifier: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[AuditDetails] = None,
    ) -> "RecordCheckpointCommand":
        """Record a file landing on the RHEL host."""
        _validate(source_system, file_name, process_name, status, "File name")
        return cls(
            source_system=source_system,
            checkpoint_stage=CheckpointStage.RHEL_LANDING,
            status=status,
            module_name=FILE_TRANSFER_MODULE,
            process_name=process_name,
            source_entity=source_entity,
            destination_entity=destination_entity,
            key_identifier=key_identifier,
            message=message,
            details=details or AuditDetails(),
            correlation_id=correlation_id,
            subject=file_name,
        )

    @classmethod
    def for_sql_loader(
        cls,
        source_system: str,
        table_name: str,
        process_name: str,
        status: AuditStatus,
        correlation_id: Optional[CorrelationId] = None,
        source_entity: Optional[str] = None,
        destination_entity: Optional[str] = None,
        key_identifier: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[AuditDetails] = None,
    ) -> "RecordCheckpointCommand":
        """Record a SQL*Loader start or completion; the table is the default destination."""
        _validate(source_system, table_name, process_name, status, "Table name")
        return cls(
            source_system=source_system,
            checkpoint_stage=loader_stage_for(process_name, status),
            status=status,
            module_name=SQL_LOADER_MODULE,
            process_name=process_name,
            source_entity=source_entity,
            destination_entity=destination_entity or table_name,
            key_identifier=key_identifier,
            message=message,
            details=details or AuditDetails(),
            correlation_id=correlation_id,
            subject=table_name,
        )

    @classmethod
    def for_business_rule(
        cls,
        source_system: str,
        module_name: str,
        process_name: str,
        status: AuditStatus,
        correlation_id: Optional[CorrelationId] = None,
        source_entity: Optional[str] = None,
        destination_entity: Optional[str] = None,
        key_identifier: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[AuditDetails] = None,
    ) -> "RecordCheckpointCommand":
        """Record business rules applied by a processing module."""
        _validate(source_system, module_name, process_name, status, "Module name")
        return cls(
            source_system=source_system,
            checkpoint_stage=CheckpointStage.LOGIC_APPLIED,
            status=status,
            module_name=module_name,
            process_name=process_name,
            source_entity=source_entity,
            destination_entity=destination_entity,
            key_identifier=key_identifier,
            message=message,
            details=details or AuditDetails(),
            correlation_id=correlation_id,
            subject=module_name,
        )

    @classmethod
    def for_file_generation(
        cls,
        source_system: str,
        file_name: str,
        process_name: str,
        status: AuditStatus,
        correlation_id: Optional[CorrelationId] = None,
        source_entity: Optional[str] = None,
        destination_entity: Optional[str] = None,
        key_identifier: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[AuditDetails] = None,
    ) -> "RecordCheckpointCommand":
        """Record generation of the final output file."""
        _validate(source_system, file_name, process_name, status, "File name")
        return cls(
            source_system=source_system,
            checkpoint_stage=CheckpointStage.FILE_GENERATED,
            status=status,
            module_name=FILE_GENERATOR_MODULE,
            process_name=process_name,
            source_entity=source_entity,
            destination_entity=destination_entity,
            key_identifier=key_identifier,
            message=message,
            details=details or AuditDetails(),
            correlation_id=correlation_id,
            subject=file_name,
        )

    def default_message(self) -> str:
        """Message used when the caller supplied none."""
        outcome = self.status.value.lower()
        subject = self.subject or self.module_name or self.checkpoint_stage.value
        if self.checkpoint_stage is CheckpointStage.RHEL_LANDING:
            return f"File transfer {outcome}: {subject}"
        if self.checkpoint_stage in (
            CheckpointStage.SQLLOADER_START,
            CheckpointStage.SQLLOADER_COMPLETE,
        ):
            return f"SQL*Loader operation {outcome} for table: {subject}"
        if self.checkpoint_stage is CheckpointStage.LOGIC_APPLIED:
            return f"Business rule application {outcome} in module: {subject}"
        return f"File generation {outcome}: {subject}"


def _validate(
    source_system: str,
    identifier: str,
    process_name: str,
    status: AuditStatus,
    identifier_label: str,
) -> None:
    _require(source_system, "source_system", "Source system")
    _require(identifier, "identifier", identifier_label)
    _require(process_name, "process_name", "Process name")
    if status is None:
        raise InvalidInputError("Status cannot be null", field="status")
