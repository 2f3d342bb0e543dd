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

"""Audit domain module for the batch audit engine."""

from .checkpoints import StageSummary, summarize_stages
from .correlation import CorrelationContext
from .discrepancies import DetectionSettings, DiscrepancyDetector, sort_findings
from .entities import AuditDetails, AuditEvent, Discrepancy
from .exceptions import (
    AuditConfigurationError,
    AuditDomainError,
    InconsistentDataError,
    InvalidInputError,
    RunNotFoundError,
    UpstreamUnavailableError,
)
from .reconciliation import (
    CheckpointDetail,
    DetailedReconciliationReport,
    PerformanceMetrics,
    ReconciliationReport,
    ReconciliationReportBuilder,
    RunSummary,
    StandardReconciliationReport,
    SummaryReconciliationReport,
    derive_overall_status,
)
from .repositories import AuditEventGateway, EventFilter, EventRecord, UUIDGenerator
from .services import EventRehydrationService, RehydrationResult
from .statistics import AuditStatistics, StatisticsAggregator
from .value_objects import (
    AuditStatus,
    CheckpointStage,
    CorrelationId,
    DetailLevel,
    DiscrepancySeverity,
    DiscrepancyStatus,
    DiscrepancyType,
    ReportStatus,
)

__all__ = [
    "StageSummary",
    "summarize_stages",
    "CorrelationContext",
    "DetectionSettings",
    "DiscrepancyDetector",
    "sort_findings",
    "AuditDetails",
    "AuditEvent",
    "Discrepancy",
    "AuditConfigurationError",
    "AuditDomainError",
    "InconsistentDataError",
    "InvalidInputError",
    "RunNotFoundError",
    "UpstreamUnavailableError",
    "CheckpointDetail",
    "DetailedReconciliationReport",
    "PerformanceMetrics",
    "ReconciliationReport",
    "ReconciliationReportBuilder",
    "RunSummary",
    "StandardReconciliationReport",
    "SummaryReconciliationReport",
    "derive_overall_status",
    "AuditEventGateway",
    "EventFilter",
    "EventRecord",
    "UUIDGenerator",
    "EventRehydrationService",
    "RehydrationResult",
    "AuditStatistics",
    "StatisticsAggregator",
    "AuditStatus",
    "CheckpointStage",
    "CorrelationId",
    "DetailLevel",
    "DiscrepancySeverity",
    "DiscrepancyStatus",
    "DiscrepancyType",
    "ReportStatus",
]
