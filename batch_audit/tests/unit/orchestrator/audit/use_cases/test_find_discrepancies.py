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

"""Unit tests for FindDiscrepanciesUseCase."""

from datetime import timedelta

import pytest

from batch_audit.core.audit.discrepancies import DetectionSettings, DiscrepancyDetector
from batch_audit.core.audit.exceptions import UpstreamUnavailableError
from batch_audit.core.audit.repositories import EventFilter
from batch_audit.core.audit.value_objects import (
    CheckpointStage,
    DiscrepancySeverity,
    DiscrepancyType,
)
from batch_audit.orchestrator.audit.commands import DiscrepancyQuery
from batch_audit.orchestrator.audit.use_cases import FindDiscrepanciesUseCase


@pytest.fixture
def short_other_run(event_factory, other_run_id):
    """Finished run of another feed that lost 50 of 1000 records."""
    run = str(other_run_id)
    return [
        event_factory(CheckpointStage.RHEL_LANDING, minutes=0, record_count=1000,
                      correlation_id=run, source_system="MAINFRAME_B"),
        event_factory(CheckpointStage.SQLLOADER_COMPLETE, minutes=10, rows_loaded=1000,
                      correlation_id=run, source_system="MAINFRAME_B"),
        event_factory(CheckpointStage.LOGIC_APPLIED, minutes=20,
                      correlation_id=run, source_system="MAINFRAME_B"),
        event_factory(CheckpointStage.FILE_GENERATED, minutes=30, record_count=950,
                      correlation_id=run, source_system="MAINFRAME_B"),
    ]


class TestFindDiscrepanciesUseCase:
    """Tests for FindDiscrepanciesUseCase."""

    def test_scans_every_run(self, gateway, complete_run, short_other_run, fixed_clock,
                             other_run_id):
        """Each run is evaluated; healthy runs contribute nothing."""
        gateway.seed(*complete_run, *short_other_run)
        use_case = FindDiscrepanciesUseCase(gateway, clock=fixed_clock)

        findings = use_case.execute()

        assert len(findings) == 1
        assert findings[0].correlation_id == other_run_id
        assert findings[0].discrepancy_type is DiscrepancyType.RECORD_COUNT_MISMATCH
        assert findings[0].severity is DiscrepancySeverity.MEDIUM
        assert findings[0].source_system == "MAINFRAME_B"

    def test_stalled_run_uses_clock(self, gateway, stalled_run, fixed_clock, t0):
        """Timeouts are evaluated at the clock's instant when no as_of is given."""
        gateway.seed(*stalled_run)
        use_case = FindDiscrepanciesUseCase(gateway, clock=fixed_clock)

        assert use_case.execute() == []

        fixed_clock.now = t0 + timedelta(hours=5)
        findings = use_case.execute()

        assert [finding.discrepancy_type for finding in findings] == [
            DiscrepancyType.MISSING_CHECKPOINT,
            DiscrepancyType.PROCESSING_TIMEOUT,
        ]

    def test_query_as_of_wins_over_clock(self, gateway, stalled_run, fixed_clock, t0):
        """An explicit as_of replaces the clock."""
        gateway.seed(*stalled_run)
        use_case = FindDiscrepanciesUseCase(gateway, clock=fixed_clock)

        findings = use_case.execute(DiscrepancyQuery(as_of=t0 + timedelta(hours=9)))

        timeout = next(
            finding for finding in findings
            if finding.discrepancy_type is DiscrepancyType.PROCESSING_TIMEOUT
        )
        assert timeout.severity is DiscrepancySeverity.HIGH

    def test_type_and_severity_filters(self, gateway, stalled_run, short_other_run, t0):
        """Findings below the severity floor or of other types are dropped."""
        gateway.seed(*stalled_run, *short_other_run)
        use_case = FindDiscrepanciesUseCase(gateway)
        as_of = t0 + timedelta(hours=5)

        high = use_case.execute(DiscrepancyQuery(
            min_severity=DiscrepancySeverity.HIGH, as_of=as_of
        ))
        counts = use_case.execute(DiscrepancyQuery(
            discrepancy_type=DiscrepancyType.RECORD_COUNT_MISMATCH, as_of=as_of
        ))

        assert [finding.discrepancy_type for finding in high] == [
            DiscrepancyType.MISSING_CHECKPOINT
        ]
        assert len(counts) == 1
        assert counts[0].severity is DiscrepancySeverity.MEDIUM

    def test_filter_selects_runs_not_events(self, gateway, complete_run, short_other_run,
                                            fixed_clock, other_run_id):
        """A filter picks runs, which are then evaluated on all their events."""
        gateway.seed(*complete_run, *short_other_run)
        use_case = FindDiscrepanciesUseCase(gateway, clock=fixed_clock)

        findings = use_case.execute(DiscrepancyQuery(
            event_filter=EventFilter(source_system="MAINFRAME_B",
                                     checkpoint_stage=CheckpointStage.RHEL_LANDING)
        ))

        assert len(findings) == 1
        assert findings[0].correlation_id == other_run_id
        assert findings[0].checkpoint_stage is CheckpointStage.FILE_GENERATED

    def test_pages_through_rows(self, gateway, complete_run, short_other_run, fixed_clock):
        """Run ids are collected across every page."""
        gateway.seed(*complete_run, *short_other_run)
        use_case = FindDiscrepanciesUseCase(gateway, clock=fixed_clock, page_size=3)

        findings = use_case.execute()

        assert len(findings) == 1
        assert gateway.calls.count("find_by_filter") == 3
        assert gateway.calls.count("find_by_correlation_id") == 2

    def test_malformed_run_id_rows_ignored(self, gateway, complete_run, fixed_clock):
        """Rows whose run id cannot be parsed do not stop the scan."""
        gateway.seed(*complete_run)
        gateway.records.append({"event_id": "bad-1", "correlation_id": "garbage"})
        use_case = FindDiscrepanciesUseCase(gateway, clock=fixed_clock)

        assert use_case.execute() == []
        assert gateway.calls.count("find_by_correlation_id") == 1

    def test_custom_thresholds(self, gateway, short_other_run, fixed_clock):
        """Detector settings change severity classification."""
        gateway.seed(*short_other_run)
        detector = DiscrepancyDetector(DetectionSettings(high_severity_pct=4))
        use_case = FindDiscrepanciesUseCase(gateway, detector=detector, clock=fixed_clock)

        findings = use_case.execute()

        assert findings[0].severity is DiscrepancySeverity.HIGH

    def test_store_failure(self, unavailable_gateway):
        """Store failures surface as UpstreamUnavailableError."""
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            FindDiscrepanciesUseCase(unavailable_gateway).execute()

        assert exc_info.value.operation == "count_by_filter"
