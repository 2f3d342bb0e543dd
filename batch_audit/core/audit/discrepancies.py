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

"""Discrepancy detection over the events of one or more runs.

Rules:
- RECORD_COUNT_MISMATCH: record counts differ between adjacent counted
  checkpoints; severity from the relative gap.
- CONTROL_TOTAL_MISMATCH: a control total differs between the earliest and
  latest checkpoints carrying control totals.
- PROCESSING_TIMEOUT: a run without a terminal event has been running
  longer than the configured timeout (or two observed checkpoints are
  further apart than the stage transition timeout).
- MISSING_CHECKPOINT: a required stage is absent before the furthest
  completed stage, or after it once the run has stalled.
- STATUS_FAILURE_PRESENT: any FAILURE event.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from .checkpoints import StageSummary, summarize_stages
from .entities import AuditEvent, Discrepancy
from .exceptions import AuditConfigurationError, InvalidInputError
from .services import EventRehydrationService
from .value_objects import (
    AuditStatus,
    CheckpointStage,
    DiscrepancySeverity,
    DiscrepancyType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionSettings:
    """Thresholds used by the detector.

    Attributes:
        processing_timeout: Longest a run may go without a terminal event.
        stage_transition_timeout: Longest gap allowed between two observed
            checkpoints; None disables the check.
        low_severity_pct: Relative gaps below this percentage are LOW.
        high_severity_pct: Relative gaps above this percentage are HIGH;
            gaps between the two bands (inclusive) are MEDIUM.
        timeout_escalation_factor: Timeouts beyond this multiple of the
            threshold are HIGH instead of MEDIUM.
    """

    processing_timeout: timedelta = timedelta(hours=4)
    stage_transition_timeout: Optional[timedelta] = None
    low_severity_pct: Decimal = Decimal("1")
    high_severity_pct: Decimal = Decimal("5")
    timeout_escalation_factor: Decimal = Decimal("2")

    def __post_init__(self) -> None:
        """Validate threshold ranges."""
        if self.processing_timeout <= timedelta(0):
            raise AuditConfigurationError("processing_timeout", "must be positive")
        if (
            self.stage_transition_timeout is not None
            and self.stage_transition_timeout <= timedelta(0)
        ):
            raise AuditConfigurationError("stage_transition_timeout", "must be positive")
        for name in ("low_severity_pct", "high_severity_pct", "timeout_escalation_factor"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, Decimal(str(value)))
        if self.low_severity_pct < 0:
            raise AuditConfigurationError("low_severity_pct", "must not be negative")
        if self.high_severity_pct < self.low_severity_pct:
            raise AuditConfigurationError(
                "high_severity_pct", "must not be below low_severity_pct"
            )
        if self.timeout_escalation_factor < 1:
            raise AuditConfigurationError("timeout_escalation_factor", "must be at least 1")

    def classify_gap(self, expected: Decimal, actual: Decimal) -> DiscrepancySeverity:
        """Rate a numeric gap by its size relative to the expected value.

        A drop to zero from a non-zero value is CRITICAL; any gap against
        an expected zero is HIGH.
        """
        if expected != 0 and actual == 0:
            return DiscrepancySeverity.CRITICAL
        if expected == 0:
            return DiscrepancySeverity.HIGH
        gap_pct = relative_gap_pct(expected, actual)
        if gap_pct < self.low_severity_pct:
            return DiscrepancySeverity.LOW
        if gap_pct <= self.high_severity_pct:
            return DiscrepancySeverity.MEDIUM
        return DiscrepancySeverity.HIGH

    def classify_timeout(self, elapsed: timedelta, threshold: timedelta) -> DiscrepancySeverity:
        """Rate an overrun: MEDIUM, or HIGH beyond the escalation multiple."""
        limit_seconds = Decimal(str(threshold.total_seconds())) * self.timeout_escalation_factor
        if Decimal(str(elapsed.total_seconds())) > limit_seconds:
            return DiscrepancySeverity.HIGH
        return DiscrepancySeverity.MEDIUM


def relative_gap_pct(expected: Decimal, actual: Decimal) -> Decimal:
    """Return |expected - actual| as a percentage of |expected|."""
    return abs(expected - actual) * 100 / abs(expected)


def sort_findings(findings: Iterable[Discrepancy]) -> List[Discrepancy]:
    """Order findings severity descending, then newest first, then by run id."""
    return sorted(
        findings,
        key=lambda finding: (
            -finding.severity.rank,
            -finding.detected_at.timestamp(),
            str(finding.correlation_id),
            finding.discrepancy_type.value,
            finding.checkpoint_stage.order if finding.checkpoint_stage else -1,
            finding.discrepancy_id,
        ),
    )


class DiscrepancyDetector:
    """Detects and classifies data-integrity findings.

    Detection is a pure function of the events and ``as_of``; calling it
    twice on the same input yields equal findings in the same order.
    """

    def __init__(self, settings: Optional[DetectionSettings] = None) -> None:
        """Initialize detector.

        Args:
            settings: Thresholds; defaults apply when omitted.
        """
        self._settings = settings or DetectionSettings()

    @property
    def settings(self) -> DetectionSettings:
        return self._settings

    def detect(
        self,
        events: Iterable[AuditEvent],
        as_of: Optional[datetime] = None,
    ) -> List[Discrepancy]:
        """Detect findings for every run present in ``events``.

        Args:
            events: Events of one or more runs.
            as_of: Evaluation instant for timeouts; defaults to each run's
                latest event time.

        Returns:
            Findings in deterministic order.
        """
        findings: List[Discrepancy] = []
        for run_events in EventRehydrationService.group_by_run(events).values():
            findings.extend(self._detect_run(run_events, as_of))
        return sort_findings(findings)

    def detect_run(
        self,
        events: Sequence[AuditEvent],
        as_of: Optional[datetime] = None,
    ) -> List[Discrepancy]:
        """Detect findings for a single run.

        Raises:
            InvalidInputError: If events belong to more than one run.
        """
        runs = EventRehydrationService.group_by_run(events)
        if len(runs) > 1:
            raise InvalidInputError(
                f"Expected events of one run, got {len(runs)} correlation IDs",
                field="correlation_id",
            )
        if not runs:
            return []
        return sort_findings(self._detect_run(next(iter(runs.values())), as_of))

    def is_stalled(self, events: Sequence[AuditEvent], as_of: Optional[datetime] = None) -> bool:
        """Check if a run without a terminal event exceeded the processing timeout."""
        elapsed = self._run_elapsed(events, as_of)
        if elapsed is None:
            return False
        return elapsed > self._settings.processing_timeout

    def _run_elapsed(
        self,
        events: Sequence[AuditEvent],
        as_of: Optional[datetime],
    ) -> Optional[timedelta]:
        """Elapsed time of an unfinished run, None when terminal or empty."""
        if not events:
            return None
        if any(event.checkpoint_stage.is_terminal() for event in events):
            return None
        earliest = min(event.event_timestamp for event in events)
        reference = max(event.event_timestamp for event in events)
        if as_of is not None and as_of > reference:
            reference = as_of
        return reference - earliest

    def _detect_run(
        self,
        events: Sequence[AuditEvent],
        as_of: Optional[datetime],
    ) -> List[Discrepancy]:
        stages = summarize_stages(events)
        context = _RunContext(events=list(events), stages=stages)
        stalled = self.is_stalled(events, as_of)

        findings: List[Discrepancy] = []
        findings.extend(self._record_count_mismatches(context))
        findings.extend(self._control_total_mismatches(context))
        findings.extend(self._processing_timeouts(context, as_of))
        findings.extend(self._missing_checkpoints(context, stalled))
        findings.extend(self._status_failures(context))

        logger.debug(
            "Detected %d discrepancies for correlation ID %s",
            len(findings), context.correlation_id
        )
        return findings

    def _record_count_mismatches(self, context: "_RunContext") -> List[Discrepancy]:
        counted = [
            summary for summary in context.stages.values()
            if summary.record_count is not None
        ]
        findings = []
        for upstream, downstream in zip(counted, counted[1:]):
            if upstream.record_count == downstream.record_count:
                continue
            expected = Decimal(upstream.record_count)
            actual = Decimal(downstream.record_count)
            severity = self._settings.classify_gap(expected, actual)
            source_event = downstream.record_count_event
            findings.append(context.finding(
                DiscrepancyType.RECORD_COUNT_MISMATCH,
                severity,
                key=(upstream.stage.value, downstream.stage.value),
                expected_value=str(upstream.record_count),
                actual_value=str(downstream.record_count),
                difference=str(abs(upstream.record_count - downstream.record_count)),
                description=(
                    f"Record count changed from {upstream.record_count} at "
                    f"{upstream.stage.value} to {downstream.record_count} at "
                    f"{downstream.stage.value}{_gap_suffix(expected, actual)}"
                ),
                detected_at=source_event.event_timestamp,
                module_name=source_event.module_name,
                checkpoint_stage=downstream.stage,
            ))
        return findings

    def _control_total_mismatches(self, context: "_RunContext") -> List[Discrepancy]:
        carrying = [summary for summary in context.stages.values() if summary.control_totals]
        if len(carrying) < 2:
            return []
        first, last = carrying[0], carrying[-1]
        findings = []
        for name, expected in first.control_totals.items():
            actual = last.control_totals.get(name)
            if actual is None or actual == expected:
                continue
            findings.append(context.finding(
                DiscrepancyType.CONTROL_TOTAL_MISMATCH,
                self._settings.classify_gap(expected, actual),
                key=(name, first.stage.value, last.stage.value),
                expected_value=str(expected),
                actual_value=str(actual),
                difference=str(abs(expected - actual)),
                description=(
                    f"Control total {name} changed from {expected} at "
                    f"{first.stage.value} to {actual} at "
                    f"{last.stage.value}{_gap_suffix(expected, actual)}"
                ),
                detected_at=last.last_event_at,
                module_name=last.latest_event.module_name,
                checkpoint_stage=last.stage,
            ))
        return findings

    def _processing_timeouts(
        self,
        context: "_RunContext",
        as_of: Optional[datetime],
    ) -> List[Discrepancy]:
        findings = []
        threshold = self._settings.processing_timeout
        elapsed = self._run_elapsed(context.events, as_of)
        if elapsed is not None and elapsed > threshold:
            last_stage = list(context.stages.values())[-1]
            findings.append(context.finding(
                DiscrepancyType.PROCESSING_TIMEOUT,
                self._settings.classify_timeout(elapsed, threshold),
                key=("run",),
                expected_value=f"<= {threshold}",
                actual_value=str(elapsed),
                difference=str(elapsed - threshold),
                description=(
                    f"Run has no {CheckpointStage.terminal().value} event after "
                    f"{elapsed}; last checkpoint reached was {last_stage.stage.value}"
                ),
                detected_at=context.events[0].event_timestamp + elapsed,
                module_name=last_stage.latest_event.module_name,
                checkpoint_stage=last_stage.stage,
            ))

        transition_threshold = self._settings.stage_transition_timeout
        if transition_threshold is None:
            return findings
        observed = list(context.stages.values())
        for previous, following in zip(observed, observed[1:]):
            gap = following.first_event_at - previous.last_event_at
            if gap <= transition_threshold:
                continue
            findings.append(context.finding(
                DiscrepancyType.PROCESSING_TIMEOUT,
                self._settings.classify_timeout(gap, transition_threshold),
                key=(previous.stage.value, following.stage.value),
                expected_value=f"<= {transition_threshold}",
                actual_value=str(gap),
                difference=str(gap - transition_threshold),
                description=(
                    f"{gap} elapsed between {previous.stage.value} and "
                    f"{following.stage.value}"
                ),
                detected_at=following.first_event_at,
                module_name=following.events[0].module_name,
                checkpoint_stage=following.stage,
            ))
        return findings

    def _missing_checkpoints(self, context: "_RunContext", stalled: bool) -> List[Discrepancy]:
        completed = [summary for summary in context.stages.values() if summary.has_completed()]
        if not completed:
            return []
        furthest = completed[-1]
        missing = [
            stage for stage in CheckpointStage.ordered()
            if stage.is_required()
            and stage not in context.stages
            and (stage.order < furthest.stage.order or stalled)
        ]
        if not missing:
            return []
        observed = [stage.value for stage in context.stages]
        return [context.finding(
            DiscrepancyType.MISSING_CHECKPOINT,
            DiscrepancySeverity.HIGH,
            key=tuple(stage.value for stage in missing),
            expected_value=", ".join(stage.value for stage in missing),
            actual_value=", ".join(observed),
            description=(
                f"No events for {', '.join(stage.value for stage in missing)} although "
                f"{furthest.stage.value} completed"
            ),
            detected_at=furthest.last_event_at,
            module_name=None,
            checkpoint_stage=missing[0],
        )]

    def _status_failures(self, context: "_RunContext") -> List[Discrepancy]:
        findings = []
        for event in context.events:
            if event.status is not AuditStatus.FAILURE:
                continue
            severity = (
                DiscrepancySeverity.HIGH
                if event.checkpoint_stage.is_terminal()
                else DiscrepancySeverity.MEDIUM
            )
            findings.append(context.finding(
                DiscrepancyType.STATUS_FAILURE_PRESENT,
                severity,
                key=(event.event_id,),
                expected_value=AuditStatus.SUCCESS.value,
                actual_value=AuditStatus.FAILURE.value,
                description=(
                    f"{event.checkpoint_stage.value} reported FAILURE"
                    + (f": {event.message}" if event.message else "")
                ),
                detected_at=event.event_timestamp,
                module_name=event.module_name,
                checkpoint_stage=event.checkpoint_stage,
            ))
        return findings


@dataclass
class _RunContext:
    events: List[AuditEvent]
    stages: Dict[CheckpointStage, StageSummary]

    @property
    def correlation_id(self):
        return self.events[0].correlation_id

    @property
    def source_system(self) -> str:
        return self.events[0].source_system

    def finding(
        self,
        discrepancy_type: DiscrepancyType,
        severity: DiscrepancySeverity,
        key: Sequence[str],
        **fields
    ) -> Discrepancy:
        return Discrepancy(
            discrepancy_id=Discrepancy.make_id(
                self.correlation_id, discrepancy_type.value, *key
            ),
            correlation_id=self.correlation_id,
            source_system=self.source_system,
            discrepancy_type=discrepancy_type,
            severity=severity,
            **fields,
        )


def _gap_suffix(expected: Decimal, actual: Decimal) -> str:
    if expected == 0:
        return ""
    return f" ({relative_gap_pct(expected, actual):.2f}% gap)"
