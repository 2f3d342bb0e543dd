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

"""Audit use cases."""

from .find_discrepancies import FindDiscrepanciesUseCase
from .generate_reconciliation_report import GenerateReconciliationReportUseCase
from .get_audit_statistics import GetAuditStatisticsUseCase
from .get_audit_trail import GetAuditTrailUseCase
from .list_audit_events import ListAuditEventsUseCase
from .record_checkpoint import RecordCheckpointUseCase

__all__ = [
    "FindDiscrepanciesUseCase",
    "GenerateReconciliationReportUseCase",
    "GetAuditStatisticsUseCase",
    "GetAuditTrailUseCase",
    "ListAuditEventsUseCase",
    "RecordCheckpointUseCase",
]
