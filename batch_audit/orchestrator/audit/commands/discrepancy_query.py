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

"""Discrepancy query command DTO."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from batch_audit.core.audit.repositories import EventFilter
from batch_audit.core.audit.value_objects import DiscrepancySeverity, DiscrepancyType


@dataclass(frozen=True)
class DiscrepancyQuery:
    """Which runs to scan and which findings to keep.

    Attributes:
        event_filter: Selects the events whose runs are scanned.
        discrepancy_type: Keep only findings of this type.
        min_severity: Keep only findings at or above this severity.
        as_of: Evaluation instant for timeout rules; now when omitted.
    """

    event_filter: EventFilter = field(default_factory=EventFilter)
    discrepancy_type: Optional[DiscrepancyType] = None
    min_severity: Optional[DiscrepancySeverity] = None
    as_of: Optional[datetime] = None
