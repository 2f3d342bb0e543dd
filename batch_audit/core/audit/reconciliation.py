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

"""Reconciliation reports for a single run.

All three report shapes share one computation; the requested detail level
only decides which variant is materialized.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple

from .checkpoints import StageSummary, summarize_stages
from .discrepancies import DiscrepancyDetector
from .entities import AuditEvent, Discrepancy
from .statistics import percentage
from .value_objects import (
    AuditStatus,
    CheckpointStage,
    CorrelationId,
    DetailLevel,
    DiscrepancySeverity,
    DiscrepancyType,
    ReportStatus,
)

logger = logging.getLogger(__name__)

_INTEGRITY_TYPES = (
    DiscrepancyType.RECORD_COUNT_MISMATCH,
    DiscrepancyType.CONTROL_TOTAL_MISMATCH,
)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _totals_to_dict(totals: Dict[str, Decimal]) -> Dict[str, str]:
    return {name: str(value) for name, value in totals.items()}


@dataclass(frozen=True)
class RunSummary:
    """High-level counters shared by every report shape.

    Attributes:
        total_events: Events considered.
        successful_events: SUCCESS events.
        failed_events: FAILURE events.
        warning_events: WARNING events.
        success_rate: Percentage of SUCCESS events.
        total_records_processed: Count at the furthest stage reporting one.
        critical_issue_count: HIGH and CRITICAL findings.
        data_integrity_verified: True when no count or control-total findings.
        total_processing_seconds: Span from first to last event.
    """

    total_events: int
    successful_events: int
    failed_events: int
    warning_events: int
    success_rate: float
    total_records_processed: Optional[int]
    critical_issue_count: int
    data_integrity_verified: bool
    total_processing_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalEvents": self.total_events,
            "successfulEvents": self.successful_events,
            "failedEvents": self.failed_events,
            "warningEvents": self.warning_events,
            "successRate": self.success_rate,
            "totalRecordsProcessed": self.total_records_processed,
            "criticalIssueCount": self.critical_issue_count,
            "dataIntegrityVerified": self.data_integrity_verified,
            "totalProcessingSeconds": self.total_processing_seconds,
        }


@dataclass(frozen=True)
class CheckpointDetail:
    """Per-checkpoint breakdown row of a detailed report."""

    checkpoint_stage: CheckpointStage
    event_count: int
    first_event_at: datetime
    last_event_at: datetime
    duration_seconds: float
    latest_status: AuditStatus
    record_count: Optional[int]
    control_totals: Dict[str, Decimal]

    @classmethod
    def from_summary(cls, summary: StageSummary) -> "CheckpointDetail":
        return cls(
            checkpoint_stage=summary.stage,
            event_count=summary.event_count,
            first_event_at=summary.first_event_at,
            last_event_at=summary.last_event_at,
            duration_seconds=summary.duration_seconds,
            latest_status=summary.latest_status,
            record_count=summary.record_count,
            control_totals=dict(summary.control_totals),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "checkpointStage": self.checkpoint_stage.value,
            "eventCount": self.event_count,
            "firstEventAt": self.first_event_at.isoformat(),
            "lastEventAt": self.last_event_at.isoformat(),
            "durationSeconds": self.duration_seconds,
            "latestStatus": self.latest_status.value,
            "recordCount": self.record_count,
            "controlTotals": _totals_to_dict(self.control_totals),
        }


@dataclass(frozen=True)
class PerformanceMetrics:
    """Derived throughput figures.

    Stage elapsed time runs from a stage's first event to the first event
    of the next observed stage; the last stage uses its own span.

    Attributes:
        records_per_second: Records processed over total processing time,
            None when either is unavailable or zero.
        average_stage_seconds: Mean elapsed time per observed stage.
        slowest_stage: Stage with the longest elapsed time.
        slowest_stage_seconds: Elapsed time of the slowest stage.
    """

    records_per_second: Optional[float]
    average_stage_seconds: float
    slowest_stage: Optional[CheckpointStage]
    slowest_stage_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recordsPerSecond": self.records_per_second,
            "averageStageSeconds": self.average_stage_seconds,
            "slowestStage": self.slowest_stage.value if self.slowest_stage else None,
            "slowestStageSeconds": self.slowest_stage_seconds,
        }


@dataclass(frozen=True)
class ReconciliationReport:
    """Fields common to every report shape.

    Attributes:
        correlation_id: Run the report describes.
        source_system: Source feed of the run, None if no event was readable.
        generated_at: Report generation instant.
        overall_status: Derived run status.
        pipeline_start: First event time.
        pipeline_end: Last event time.
        summary: High-level counters.
        records_skipped: Stored rows excluded as malformed.
    """

    REPORT_TYPE: ClassVar[DetailLevel] = DetailLevel.SUMMARY

    correlation_id: CorrelationId
    source_system: Optional[str]
    generated_at: datetime
    overall_status: ReportStatus
    pipeline_start: Optional[datetime]
    pipeline_end: Optional[datetime]
    summary: RunSummary
    records_skipped: int

    @property
    def report_type(self) -> DetailLevel:
        return self.REPORT_TYPE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-ready primitives tagged with ``reportType``."""
        return {
            "reportType": self.report_type.value,
            "correlationId": str(self.correlation_id),
            "sourceSystem": self.source_system,
            "generatedAt": self.generated_at.isoformat(),
            "overallStatus": self.overall_status.value,
            "pipelineStart": _iso(self.pipeline_start),
            "pipelineEnd": _iso(self.pipeline_end),
            "summary": self.summary.to_dict(),
            "recordsSkipped": self.records_skipped,
        }


@dataclass(frozen=True)
class SummaryReconciliationReport(ReconciliationReport):
    """Counters, success rate and critical issue count only."""

    REPORT_TYPE: ClassVar[DetailLevel] = DetailLevel.SUMMARY


@dataclass(frozen=True)
class StandardReconciliationReport(ReconciliationReport):
    """Adds per-checkpoint counts, control totals and the finding count."""

    REPORT_TYPE: ClassVar[DetailLevel] = DetailLevel.STANDARD

    checkpoint_counts: Dict[str, int]
    control_totals: Dict[str, Dict[str, Decimal]]
    discrepancy_count: int

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            "checkpointCounts": dict(self.checkpoint_counts),
            "controlTotals": {
                stage: _totals_to_dict(totals)
                for stage, totals in self.control_totals.items()
            },
            "discrepancyCount": self.discrepancy_count,
        })
        return result


@dataclass(frozen=True)
class DetailedReconciliationReport(StandardReconciliationReport):
    """Adds findings, per-checkpoint breakdown and throughput metrics."""

    REPORT_TYPE: ClassVar[DetailLevel] = DetailLevel.DETAILED

    discrepancies: Tuple[Discrepancy, ...]
    checkpoint_details: Tuple[CheckpointDetail, ...]
    performance: PerformanceMetrics

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            "discrepancies": [finding.to_dict() for finding in self.discrepancies],
            "checkpointDetails": [detail.to_dict() for detail in self.checkpoint_details],
            "performanceMetrics": self.performance.to_dict(),
        })
        return result


def derive_overall_status(
    events: Sequence[AuditEvent],
    findings: Sequence[Discrepancy],
    stalled: bool,
) -> ReportStatus:
    """Derive a run's status from its events and findings.

    A run with no terminal event that has not exceeded its timeout is
    IN_PROGRESS regardless of findings so far.
    """
    has_terminal = any(event.checkpoint_stage.is_terminal() for event in events)
    if not has_terminal and not stalled:
        return ReportStatus.IN_PROGRESS
    for finding in findings:
        if finding.discrepancy_type is DiscrepancyType.STATUS_FAILURE_PRESENT:
            return ReportStatus.FAILURE
        if finding.severity.is_at_least(DiscrepancySeverity.HIGH):
            return ReportStatus.FAILURE
    if findings:
        return ReportStatus.WARNING
    return ReportStatus.SUCCESS


class ReconciliationReportBuilder:
    """Composes one report for one run."""

    def __init__(self, detector: Optional[DiscrepancyDetector] = None) -> None:
        """Initialize builder.

        Args:
            detector: Detector to run; one with default settings if omitted.
        """
        self._detector = detector or DiscrepancyDetector()

    def build(
        self,
        correlation_id: CorrelationId,
        events: Sequence[AuditEvent],
        detail_level: DetailLevel = DetailLevel.STANDARD,
        as_of: Optional[datetime] = None,
        records_skipped: int = 0,
        generated_at: Optional[datetime] = None,
    ) -> ReconciliationReport:
        """Build the report variant for ``detail_level``.

        Args:
            correlation_id: Run the events belong to.
            events: Events of that run, any order.
            detail_level: Which report shape to produce.
            as_of: Evaluation instant for timeout rules.
            records_skipped: Malformed rows excluded before building.
            generated_at: Report timestamp; current UTC time if omitted.

        Returns:
            SummaryReconciliationReport, StandardReconciliationReport or
            DetailedReconciliationReport.

        Raises:
            InvalidInputError: If events span more than one run.
        """
        ordered = sorted(events, key=lambda event: (event.event_timestamp, event.event_id))
        findings = self._detector.detect_run(ordered, as_of=as_of)
        stalled = self._detector.is_stalled(ordered, as_of=as_of)
        stages = summarize_stages(ordered)
        overall_status = derive_overall_status(ordered, findings, stalled)

        common = dict(
            correlation_id=correlation_id,
            source_system=ordered[0].source_system if ordered else None,
            generated_at=generated_at or datetime.now(timezone.utc),
            overall_status=overall_status,
            pipeline_start=ordered[0].event_timestamp if ordered else None,
            pipeline_end=ordered[-1].event_timestamp if ordered else None,
            summary=self._summarize(ordered, stages, findings),
            records_skipped=records_skipped,
        )
        logger.info(
            "Built %s report for correlation ID %s: status=%s, discrepancies=%d",
            detail_level.value, correlation_id, overall_status.value, len(findings)
        )

        if detail_level is DetailLevel.SUMMARY:
            return SummaryReconciliationReport(**common)

        standard = dict(
            checkpoint_counts={
                stage.value: summary.record_count
                for stage, summary in stages.items()
                if summary.record_count is not None
            },
            control_totals={
                stage.value: dict(summary.control_totals)
                for stage, summary in stages.items()
                if summary.control_totals
            },
            discrepancy_count=len(findings),
        )
        if detail_level is DetailLevel.STANDARD:
            return StandardReconciliationReport(**common, **standard)

        return DetailedReconciliationReport(
            **common,
            **standard,
            discrepancies=tuple(findings),
            checkpoint_details=tuple(
                CheckpointDetail.from_summary(summary) for summary in stages.values()
            ),
            performance=self._performance(stages, common["summary"]),
        )

    @staticmethod
    def _summarize(
        events: Sequence[AuditEvent],
        stages: Dict[CheckpointStage, StageSummary],
        findings: Sequence[Discrepancy],
    ) -> RunSummary:
        total = len(events)
        successful = sum(1 for event in events if event.status is AuditStatus.SUCCESS)
        failed = sum(1 for event in events if event.status is AuditStatus.FAILURE)
        warnings = sum(1 for event in events if event.status is AuditStatus.WARNING)

        records_processed = None
        for summary in stages.values():
            if summary.record_count is not None:
                records_processed = summary.record_count

        processing_seconds = 0.0
        if events:
            processing_seconds = (
                events[-1].event_timestamp - events[0].event_timestamp
            ).total_seconds()

        return RunSummary(
            total_events=total,
            successful_events=successful,
            failed_events=failed,
            warning_events=warnings,
            success_rate=percentage(successful, total),
            total_records_processed=records_processed,
            critical_issue_count=sum(
                1 for finding in findings
                if finding.severity.is_at_least(DiscrepancySeverity.HIGH)
            ),
            data_integrity_verified=not any(
                finding.discrepancy_type in _INTEGRITY_TYPES for finding in findings
            ),
            total_processing_seconds=processing_seconds,
        )

    @staticmethod
    def _performance(
        stages: Dict[CheckpointStage, StageSummary],
        summary: RunSummary,
    ) -> PerformanceMetrics:
        observed: List[StageSummary] = list(stages.values())
        elapsed: List[Tuple[CheckpointStage, float]] = []
        for index, stage_summary in enumerate(observed):
            if index + 1 < len(observed):
                seconds = (
                    observed[index + 1].first_event_at - stage_summary.first_event_at
                ).total_seconds()
            else:
                seconds = stage_summary.duration_seconds
            elapsed.append((stage_summary.stage, seconds))

        records_per_second = None
        if summary.total_records_processed and summary.total_processing_seconds > 0:
            records_per_second = (
                summary.total_records_processed / summary.total_processing_seconds
            )

        slowest_stage = None
        slowest_seconds = 0.0
        for stage, seconds in elapsed:
            if slowest_stage is None or seconds > slowest_seconds:
                slowest_stage, slowest_seconds = stage, seconds

        return PerformanceMetrics(
            records_per_second=records_per_second,
            average_stage_seconds=(
                sum(seconds for _, seconds in elapsed) / len(elapsed) if elapsed else 0.0
            ),
            slowest_stage=slowest_stage,
            slowest_stage_seconds=slowest_seconds,
        )
