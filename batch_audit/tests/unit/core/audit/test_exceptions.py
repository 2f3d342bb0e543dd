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

"""Unit tests for audit domain exceptions."""

from batch_audit.core.audit.exceptions import (
    AuditConfigurationError,
    AuditDomainError,
    InconsistentDataError,
    InvalidInputError,
    RunNotFoundError,
    UpstreamUnavailableError,
)


class TestAuditDomainError:
    """Tests for base AuditDomainError."""

    def test_basic_error(self):
        """Base error should store message."""
        error = AuditDomainError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.correlation_id is None

    def test_error_with_correlation_id(self):
        """Error should store correlation ID."""
        error = AuditDomainError("Test error", correlation_id="corr-123")
        assert error.correlation_id == "corr-123"


class TestInvalidInputError:
    """Tests for InvalidInputError."""

    def test_field_is_recorded(self):
        """The offending input name is kept for callers."""
        error = InvalidInputError("Page size must be positive", field="size")
        assert error.field == "size"
        assert isinstance(error, AuditDomainError)


class TestRunNotFoundError:
    """Tests for RunNotFoundError."""

    def test_error_message(self):
        """Message names the missing run."""
        error = RunNotFoundError("run-1")
        assert "No audit events found for correlation ID: run-1" in str(error)
        assert error.correlation_id == "run-1"


class TestUpstreamUnavailableError:
    """Tests for UpstreamUnavailableError."""

    def test_error_attributes(self):
        """Operation, reason and attempts are exposed."""
        error = UpstreamUnavailableError("find_by_filter", "timeout", attempts=5)
        assert error.operation == "find_by_filter"
        assert error.reason == "timeout"
        assert error.attempts == 5
        assert "after 5 attempt(s)" in str(error)

    def test_distinct_from_not_found(self):
        """Callers must be able to tell an outage from a missing run."""
        assert not issubclass(UpstreamUnavailableError, RunNotFoundError)
        assert not issubclass(RunNotFoundError, UpstreamUnavailableError)


class TestInconsistentDataError:
    """Tests for InconsistentDataError."""

    def test_unknown_event_id(self):
        """A row without a readable id is still described."""
        error = InconsistentDataError(None, "bad timestamp")
        assert "<unknown>" in str(error)
        assert error.reason == "bad timestamp"


class TestAuditConfigurationError:
    """Tests for AuditConfigurationError."""

    def test_error_message(self):
        """Message names the setting and the reason."""
        error = AuditConfigurationError("low_severity_pct", "must not be negative")
        assert error.setting == "low_severity_pct"
        assert "low_severity_pct" in str(error)
