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

"""Shared plumbing for use cases that read or write through the gateway."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar, Union

from batch_audit.core.audit.exceptions import (
    AuditDomainError,
    InvalidInputError,
    UpstreamUnavailableError,
)
from batch_audit.core.audit.repositories import AuditEventGateway
from batch_audit.core.audit.services import EventRehydrationService, RehydrationResult
from batch_audit.core.audit.value_objects import CorrelationId

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return current UTC timestamp."""
    return datetime.now(timezone.utc)


def to_correlation_id(value: Union[CorrelationId, str, None]) -> CorrelationId:
    """Coerce caller input to a CorrelationId.

    Raises:
        InvalidInputError: If the value is missing or not a UUID.
    """
    if value is None:
        raise InvalidInputError("Correlation ID cannot be null", field="correlation_id")
    if isinstance(value, CorrelationId):
        return value
    try:
        return CorrelationId(str(value).strip())
    except ValueError as exc:
        raise InvalidInputError(str(exc), field="correlation_id") from exc


class GatewayUseCase:
    """Base for use cases backed by an AuditEventGateway.

    Attributes:
        gateway: Event store port.
    """

    def __init__(self, gateway: AuditEventGateway, clock: Optional[Clock] = None) -> None:
        """Initialize use case.

        Args:
            gateway: Event store gateway implementation.
            clock: Source of the current UTC time.
        """
        self._gateway = gateway
        self._clock = clock or utc_now

    def _now_utc(self) -> datetime:
        return self._clock()

    def _call_gateway(
        self,
        operation: str,
        func: Callable[..., T],
        *args: Any,
        correlation_id: Optional[CorrelationId] = None
    ) -> T:
        """Invoke a gateway operation, mapping infrastructure failures.

        Domain errors pass through unchanged; anything else becomes
        UpstreamUnavailableError so callers can tell it from NotFound.
        """
        try:
            return func(*args)
        except AuditDomainError:
            raise
        except Exception as exc:
            logger.error("Event store %s failed: %s", operation, exc)
            raise UpstreamUnavailableError(
                operation=operation,
                reason=str(exc),
                correlation_id=str(correlation_id) if correlation_id else None,
            ) from exc

    def _load_run(self, correlation_id: CorrelationId) -> RehydrationResult:
        """Fetch and rehydrate every event of one run."""
        records = self._call_gateway(
            "find_by_correlation_id",
            self._gateway.find_by_correlation_id,
            correlation_id,
            correlation_id=correlation_id,
        )
        return EventRehydrationService.rehydrate(records)
