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

"""Explicit retry policies for event store calls.

Writes and reads get separate policies; both use exponential backoff with
jitter and bounded attempts. Domain errors are never retried.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

from batch_audit.config import (
    READ_RETRY_DEFAULTS,
    WRITE_RETRY_DEFAULTS,
    AuditSettings,
    RetrySettings,
)
from batch_audit.core.audit.exceptions import AuditDomainError, UpstreamUnavailableError
from batch_audit.core.audit.repositories import AuditEventGateway, EventFilter, EventRecord
from batch_audit.core.audit.value_objects import AuditStatus, CheckpointStage, CorrelationId

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Bounded exponential backoff.

    Attributes:
        settings: Attempts and delay parameters.
        retryable: Exception types worth another attempt. ConnectionError
            and TimeoutError are OSError subclasses.
        jitter_ratio: Random extra delay as a fraction of the base delay.
        sleep: Sleep function, replaceable in tests.
        rng: Random source for jitter.
    """

    settings: RetrySettings = field(default_factory=RetrySettings)
    retryable: Tuple[Type[BaseException], ...] = (OSError,)
    jitter_ratio: float = 0.1
    sleep: Callable[[float], None] = time.sleep
    rng: random.Random = field(default_factory=random.Random)

    def delay_for(self, attempt: int) -> float:
        """Return the base delay after failed attempt number ``attempt`` (1-based)."""
        delay = self.settings.initial_delay_seconds * (
            self.settings.multiplier ** max(0, attempt - 1)
        )
        return min(self.settings.max_delay_seconds, delay)

    def call(self, operation: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Invoke ``func`` until it succeeds or attempts run out.

        Args:
            operation: Name used in logs and errors.
            func: Callable to invoke.

        Returns:
            Whatever ``func`` returns.

        Raises:
            UpstreamUnavailableError: When every attempt failed with a
                retryable error.
            Exception: Any non-retryable error, unchanged, on first occurrence.
        """
        max_attempts = self.settings.max_attempts
        attempt = 0
        while True:
            attempt += 1
            try:
                return func(*args, **kwargs)
            except AuditDomainError:
                raise
            except self.retryable as exc:
                if attempt >= max_attempts:
                    logger.error(
                        "Event store %s failed after %d attempt(s): %s",
                        operation, attempt, exc
                    )
                    raise UpstreamUnavailableError(
                        operation=operation,
                        reason=str(exc),
                        attempts=attempt,
                    ) from exc
                delay = self.delay_for(attempt)
                if delay > 0 and self.jitter_ratio > 0:
                    delay += self.rng.uniform(0.0, delay * self.jitter_ratio)
                logger.warning(
                    "Event store %s attempt %d/%d failed (%s); retrying in %.2fs",
                    operation, attempt, max_attempts, exc, delay
                )
                self.sleep(delay)


class RetryingAuditEventGateway(AuditEventGateway):
    """Gateway decorator applying the write policy to inserts and the read
    policy to every query."""

    def __init__(
        self,
        gateway: AuditEventGateway,
        write_policy: Optional[RetryPolicy] = None,
        read_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self._gateway = gateway
        self._write_policy = write_policy or RetryPolicy(settings=WRITE_RETRY_DEFAULTS)
        self._read_policy = read_policy or RetryPolicy(settings=READ_RETRY_DEFAULTS)

    @classmethod
    def from_settings(
        cls,
        gateway: AuditEventGateway,
        settings: AuditSettings,
    ) -> "RetryingAuditEventGateway":
        """Wrap ``gateway`` with the write and read policies from settings."""
        return cls(
            gateway,
            write_policy=RetryPolicy(settings=settings.write_retry),
            read_policy=RetryPolicy(settings=settings.read_retry),
        )

    def insert(self, record: EventRecord) -> None:
        self._write_policy.call("insert", self._gateway.insert, record)

    def find_by_correlation_id(self, correlation_id: CorrelationId) -> List[EventRecord]:
        return self._read_policy.call(
            "find_by_correlation_id", self._gateway.find_by_correlation_id, correlation_id
        )

    def find_by_source_and_stage(
        self,
        source_system: str,
        checkpoint_stage: CheckpointStage
    ) -> List[EventRecord]:
        return self._read_policy.call(
            "find_by_source_and_stage",
            self._gateway.find_by_source_and_stage,
            source_system,
            checkpoint_stage,
        )

    def find_by_module_and_status(
        self,
        module_name: str,
        status: AuditStatus
    ) -> List[EventRecord]:
        return self._read_policy.call(
            "find_by_module_and_status",
            self._gateway.find_by_module_and_status,
            module_name,
            status,
        )

    def find_by_filter(
        self,
        event_filter: EventFilter,
        page: int,
        size: int
    ) -> List[EventRecord]:
        return self._read_policy.call(
            "find_by_filter", self._gateway.find_by_filter, event_filter, page, size
        )

    def count_by_filter(self, event_filter: EventFilter) -> int:
        return self._read_policy.call(
            "count_by_filter", self._gateway.count_by_filter, event_filter
        )

    def find_by_timestamp_range(self, start: datetime, end: datetime) -> List[EventRecord]:
        return self._read_policy.call(
            "find_by_timestamp_range", self._gateway.find_by_timestamp_range, start, end
        )
