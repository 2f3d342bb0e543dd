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

"""ListAuditEvents use case implementation."""

import logging
from typing import Optional

from batch_audit.core.audit.exceptions import InvalidInputError
from batch_audit.core.audit.repositories import EventFilter
from batch_audit.core.audit.services import EventRehydrationService

from ..dtos import AuditEventResponse, PagedResponse
from .base import GatewayUseCase

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 1000
DEFAULT_PAGE_SIZE = 20


class ListAuditEventsUseCase(GatewayUseCase):
    """Returns one page of events matching a filter, newest first."""

    def execute(
        self,
        event_filter: Optional[EventFilter] = None,
        page: int = 0,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> PagedResponse[AuditEventResponse]:
        """Fetch a page of events.

        Args:
            event_filter: Filters; all events when omitted.
            page: Zero-based page number.
            size: Page size, 1 to 1000.

        Returns:
            PagedResponse of AuditEventResponse DTOs.

        Raises:
            InvalidInputError: If paging parameters are out of range.
            UpstreamUnavailableError: If the event store fails.
        """
        self._validate_paging(page, size)
        event_filter = event_filter or EventFilter()

        records = self._call_gateway(
            "find_by_filter", self._gateway.find_by_filter, event_filter, page, size
        )
        total = self._call_gateway(
            "count_by_filter", self._gateway.count_by_filter, event_filter
        )
        result = EventRehydrationService.rehydrate(records)

        # rehydration sorts ascending; pages are served newest first
        content = [
            AuditEventResponse.from_entity(event) for event in reversed(result.events)
        ]
        logger.debug(
            "Listed %d of %d audit events (page %d, size %d)",
            len(content), total, page, size
        )
        return PagedResponse(
            content=content,
            page=page,
            size=size,
            total_elements=total,
            records_skipped=result.skipped,
        )

    @staticmethod
    def _validate_paging(page: int, size: int) -> None:
        if page < 0:
            raise InvalidInputError("Page number cannot be negative", field="page")
        if size <= 0:
            raise InvalidInputError("Page size must be positive", field="size")
        if size > MAX_PAGE_SIZE:
            raise InvalidInputError(
                f"Page size cannot exceed {MAX_PAGE_SIZE}", field="size"
            )
