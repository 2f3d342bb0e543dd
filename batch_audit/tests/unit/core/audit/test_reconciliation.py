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

"""Unit tests for ReconciliationReportBuilder and report variants."""

from datetime import timedelta
from decimal import Decimal

import pytest

from batch_audit.core.audit.reconciliation import (
    DetailedReconciliationReport,
    ReconciliationReport,
    ReconciliationReportBuilder,
    StandardReconciliationReport,
    SummaryReconciliationReport,
)
from batch_audit.core.audit.value_objects import (
    AuditStatus,
    CheckpointStage,
    DetailLevel,
    ReportStatus,
)


@pytest.fixture
def builder():
    """Report builder with default detection settings."""
    return ReconciliationReportBuilder()


class TestOverallStatus:
    """Tests for overall run status derivation."""

    def test_complete_run_is_success(self, builder, run_id, complete_run, t0):
        """A healthy run is SUCCESS with no discrepancies."""
        report = builder.build(run_id, complete_run, DetailLevel.STANDARD, as_of=t0)

        assert report.overall_status is ReportStatus.SUCCESS
        assert report.discrepancy_count == 0
        assert report.summary.data_integrity_verified

    def test_medium_mismatch_is_warning(self, builder, run_id, short_output_run):
        """A 5% record loss is a WARNING."""
        report = builder.build(run_id, short_output_run, DetailLevel.STANDARD)

        assert report.overall_status is ReportStatus.WARNING
        assert report.discrepancy_count == 1
        assert report.summary.critical_issue_count == 0
        assert not report.summary.data_integrity_verified

    def test_stalled_run_is_failure(self, builder, run_id, stalled_run, t0):
        """Past the timeout a run without FILE_GENERATED fails."""
        report = builder.build(
            run_id, stalled_run, DetailLevel.STANDARD, as_of=t0 + timedelta(hours=5)
        )

        assert report.overall_status is ReportStatus.FAILURE
        assert report.discrepancy_count == 2
        assert report.summary.critical_issue_count == 1

    def test_unfinished_run_within_timeout_is_in_progress(self, builder, run_id, stalled_run, t0):
        """A run still inside its timeout is IN_PROGRESS."""
        report = builder.build(
            run_id, stalled_run, DetailLevel.STANDARD, as_of=t0 + timedelta(hours=1)
        )

        assert report.overall_status is ReportStatus.IN_PROGRESS

    def test_failure_event_is_failure(self, builder, run_id, event_factory):
        """Any FAILURE event on a finished run fails it."""
        events = [
            event_factory(CheckpointStage.RHEL_LANDING, minutes=0),
            event_factory(CheckpointStage.SQLLOADER_COMPLETE, minutes=10),
            event_factory(CheckpointStage.LOGIC_APPLIED, status=AuditStatus.FAILURE, minutes=20),
            event_factory(CheckpointStage.LOGIC_APPLIED, minutes=25),
            event_factory(CheckpointStage.FILE_GENERATED, minutes=30),
        ]

        report = builder.build(run_id, events, DetailLevel.SUMMARY)

        assert report.overall_status is ReportStatus.FAILURE
        assert report.summary.failed_events == 1
        assert report.summary.critical_issue_count == 0

    def test_no_readable_events(self, builder, run_id):
        """A run whose rows were all skipped is reported, not raised."""
        report = builder.build(run_id, [], DetailLevel.DETAILED, records_skipped=3)

        assert report.overall_status is ReportStatus.IN_PROGRESS
        assert report.records_skipped == 3
        assert report.source_system is None
        assert report.summary.total_events == 0
        assert report.performance.slowest_stage is None


class TestReportVariants:
    """Tests for the three detail levels."""

    @pytest.mark.parametrize(
        "level, report_class",
        [
            (DetailLevel.SUMMARY, SummaryReconciliationReport),
            (DetailLevel.STANDARD, StandardReconciliationReport),
            (DetailLevel.DETAILED, DetailedReconciliationReport),
        ],
    )
    def test_variant_selected_by_level(self, builder, run_id, complete_run, level, report_class):
        """The detail level picks the report class; all share one base."""
        report = builder.build(run_id, complete_run, level)

        assert type(report) is report_class
        assert isinstance(report, ReconciliationReport)
        assert report.report_type is level
        assert report.to_dict()["reportType"] == level.value

    def test_summary_counters(self, builder, run_id, complete_run, t0):
        """Summary carries counters, success rate and processing time."""
        report = builder.build(run_id, complete_run, DetailLevel.SUMMARY, generated_at=t0)

        assert report.summary.total_events == 4
        assert report.summary.successful_events == 4
        assert report.summary.success_rate == 100.0
        assert report.summary.total_records_processed == 1000
        assert report.summary.total_processing_seconds == 1800.0
        assert report.pipeline_start == t0
        assert report.pipeline_end == t0 + timedelta(minutes=30)
        assert report.source_system == "MAINFRAME_A"
        assert "checkpointCounts" not in report.to_dict()

    def test_standard_checkpoint_figures(self, builder, run_id, event_factory):
        """Standard adds per-stage counts and control totals, last writer wins."""
        events = [
            event_factory(CheckpointStage.RHEL_LANDING, minutes=0, record_count=10,
                          control_total_amount="5.00"),
            event_factory(CheckpointStage.SQLLOADER_COMPLETE, minutes=10, rows_loaded=9),
            event_factory(CheckpointStage.SQLLOADER_COMPLETE, minutes=12, rows_loaded=10),
            event_factory(CheckpointStage.LOGIC_APPLIED, minutes=20),
            event_factory(CheckpointStage.FILE_GENERATED, minutes=30, record_count=10,
                          control_total_amount="5.00"),
        ]

        report = builder.build(run_id, events, DetailLevel.STANDARD)

        assert report.overall_status is ReportStatus.SUCCESS
        assert report.checkpoint_counts == {
            "RHEL_LANDING": 10,
            "SQLLOADER_COMPLETE": 10,
            "FILE_GENERATED": 10,
        }
        assert report.control_totals["FILE_GENERATED"] == {
            "control_total_amount": Decimal("5.00")
        }
        data = report.to_dict()
        assert data["controlTotals"]["RHEL_LANDING"] == {"control_total_amount": "5.00"}
        assert data["discrepancyCount"] == 0

    def test_detailed_breakdown(self, builder, run_id, short_output_run):
        """Detailed adds findings, stage rows and throughput."""
        report = builder.build(run_id, short_output_run, DetailLevel.DETAILED)

        assert len(report.discrepancies) == 1
        assert [detail.checkpoint_stage for detail in report.checkpoint_details] == [
            CheckpointStage.RHEL_LANDING,
            CheckpointStage.SQLLOADER_COMPLETE,
            CheckpointStage.LOGIC_APPLIED,
            CheckpointStage.FILE_GENERATED,
        ]
        assert report.performance.records_per_second == pytest.approx(950 / 1800)
        assert report.performance.average_stage_seconds == pytest.approx(450.0)
        assert report.performance.slowest_stage is CheckpointStage.RHEL_LANDING
        data = report.to_dict()
        assert data["discrepancies"][0]["discrepancyType"] == "RECORD_COUNT_MISMATCH"
        assert data["checkpointDetails"][0]["checkpointStage"] == "RHEL_LANDING"
        assert data["performanceMetrics"]["slowestStage"] == "RHEL_LANDING"
