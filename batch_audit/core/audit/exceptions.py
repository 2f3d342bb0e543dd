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

"""Domain exceptions for the batch audit engine."""

from typing import Optional


class AuditDomainError(Exception):
    """Base exception for all audit domain errors."""

    def __init__(self, message: str, correlation_id: Optional[str] = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error description.
            correlation_id: Optional run identifier for tracing.
        """
        super().__init__(message)
        self.message = message
        self.correlation_id = correlation_id


class InvalidInputError(AuditDomainError):
    """Caller supplied a malformed filter, range or identifier.

    Always caller-correctable; never retried.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize invalid input error.

        Args:
            message: Description of what is wrong with the input.
            field: Name of the offending input, if known.
            correlation_id: Optional run identifier for tracing.
        """
        super().__init__(message, correlation_id=correlation_id)
        self.field = field


class RunNotFoundError(AuditDomainError):
    """No audit events exist for the requested run."""

    def __init__(self, correlation_id: str) -> None:
        """Initialize run not found error.

        Args:
            correlation_id: The run identifier that has no events.
        """
        super().__init__(
            f"No audit events found for correlation ID: {correlation_id}",
            correlation_id=correlation_id
        )


class UpstreamUnavailableError(AuditDomainError):
    """The event store gateway failed to answer."""

    def __init__(
        self,
        operation: str,
        reason: str,
        attempts: int = 1,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize upstream unavailable error.

        Args:
            operation: Gateway operation that failed.
            reason: Description of the last failure.
            attempts: Number of attempts made before giving up.
            correlation_id: Optional run identifier for tracing.
        """
        super().__init__(
            f"Event store unavailable during {operation} after {attempts} "
            f"attempt(s): {reason}",
            correlation_id=correlation_id
        )
        self.operation = operation
        self.reason = reason
        self.attempts = attempts


class InconsistentDataError(AuditDomainError):
    """A stored event could not be rehydrated."""

    def __init__(
        self,
        event_id: Optional[str],
        reason: str,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize inconsistent data error.

        Args:
            event_id: Identifier of the malformed record, if readable.
            reason: What could not be parsed.
            correlation_id: Optional run identifier for tracing.
        """
        super().__init__(
            f"Malformed audit event {event_id or '<unknown>'}: {reason}",
            correlation_id=correlation_id
        )
        self.event_id = event_id
        self.reason = reason


class AuditConfigurationError(AuditDomainError):
    """Engine settings are missing or invalid."""

    def __init__(self, setting: str, reason: str) -> None:
        """Initialize configuration error.

        Args:
            setting: Name of the offending setting.
            reason: Why the value was rejected.
        """
        super().__init__(f"Invalid audit setting {setting}: {reason}")
        self.setting = setting
        self.reason = reason
