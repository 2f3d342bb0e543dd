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

"""Discrepancy finding entity."""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..value_objects import (
    CheckpointStage,
    CorrelationId,
    DiscrepancySeverity,
    DiscrepancyStatus,
    DiscrepancyType,
)

_DISCREPANCY_NAMESPACE = uuid.UUID("6f1c2a52-9d0e-4c5b-8a43-2b7f0e9d4c11")


@dataclass(frozen=True)
class Discrepancy:
    """Immutable data-integrity finding for one run.

    The lifecycle status is owned by an external workflow; detection
    always emits OPEN findings.

    Attributes:
        discrepancy_id: Deterministic identifier derived from the finding key.
        correlation_id: Run the finding belongs to.
        source_system: Source feed of the run.
        discrepancy_type: Kind of finding.
        severity: Severity level.
        expected_value: Value the run should have shown.
        actual_value: Value the run actually showed.
        description: Human-readable explanation.
        detected_at: Event time that triggered the finding.
        module_name: Executing component, if applicable.
        checkpoint_stage: Checkpoint the finding is attached to.
        difference: Absolute numeric difference, when numeric.
        status: Lifecycle status.
    """

    discrepancy_id: str
    correlation_id: CorrelationId
    source_system: str
    discrepancy_type: DiscrepancyType
    severity: DiscrepancySeverity
    expected_value: str
    actual_value: str
    description: str
    detected_at: datetime
    module_name: Optional[str] = None
    checkpoint_stage: Optional[CheckpointStage] = None
    difference: Optional[str] = None
    status: DiscrepancyStatus = DiscrepancyStatus.OPEN

    @staticmethod
    def make_id(correlation_id: CorrelationId, *key_parts: str) -> str:
        """Derive a stable finding id so repeated detection yields equal findings."""
        name = ":".join([str(correlation_id), *key_parts])
        return str(uuid.uuid5(_DISCREPANCY_NAMESPACE, name))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-ready primitives."""
        return {
            "discrepancyId": self.discrepancy_id,
            "correlationId": str(self.correlation_id),
            "sourceSystem": self.source_system,
            "moduleName": self.module_name,
            "discrepancyType": self.discrepancy_type.value,
            "severity": self.severity.value,
            "checkpointStage": (
                self.checkpoint_stage.value if self.checkpoint_stage else None
            ),
            "expectedValue": self.expected_value,
            "actualValue": self.actual_value,
            "difference": self.difference,
            "description": self.description,
            "detectedAt": self.detected_at.isoformat(),
            "status": self.status.value,
        }
