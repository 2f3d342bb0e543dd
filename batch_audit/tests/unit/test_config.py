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

"""Unit tests for settings loading."""

from datetime import timedelta
from decimal import Decimal

import pytest

from batch_audit.config import (
    CONFIG_PATH_ENV,
    READ_RETRY_DEFAULTS,
    WRITE_RETRY_DEFAULTS,
    AuditSettings,
    RetrySettings,
    load_settings,
)
from batch_audit.core.audit.exceptions import AuditConfigurationError


class TestDefaults:
    """Tests for built-in defaults."""

    def test_no_file_no_environment(self):
        """Without a file or overrides every default applies."""
        settings = load_settings(environ={})

        assert settings.detection.processing_timeout == timedelta(hours=4)
        assert settings.detection.stage_transition_timeout is None
        assert settings.detection.low_severity_pct == Decimal("1")
        assert settings.detection.high_severity_pct == Decimal("5")
        assert settings.write_retry == WRITE_RETRY_DEFAULTS
        assert settings.read_retry == READ_RETRY_DEFAULTS
        assert settings.log_level == "INFO"

    def test_retry_defaults(self):
        """Writes retry 3 times from 1s; reads 5 times from 0.5s."""
        assert WRITE_RETRY_DEFAULTS == RetrySettings(3, 1.0, 2.0, 30.0)
        assert READ_RETRY_DEFAULTS == RetrySettings(5, 0.5, 1.5, 15.0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"initial_delay_seconds": -1},
            {"multiplier": 0.5},
            {"initial_delay_seconds": 10, "max_delay_seconds": 5},
        ],
    )
    def test_invalid_retry_settings(self, kwargs):
        """Out-of-range retry parameters are rejected."""
        with pytest.raises(AuditConfigurationError):
            RetrySettings(**kwargs)

    def test_log_level_normalized(self):
        """Log levels are case-insensitive."""
        assert AuditSettings(log_level="debug").log_level == "DEBUG"

        with pytest.raises(AuditConfigurationError):
            AuditSettings(log_level="LOUD")


class TestYamlFile:
    """Tests for settings read from YAML."""

    def test_file_values(self, tmp_path):
        """Every section of the file is applied."""
        path = tmp_path / "audit.yaml"
        path.write_text(
            "detection:\n"
            "  processing_timeout_minutes: 90\n"
            "  stage_transition_timeout_minutes: 30\n"
            "  low_severity_pct: 0.5\n"
            "  high_severity_pct: 2\n"
            "retry:\n"
            "  write: {max_attempts: 4}\n"
            "  read: {max_attempts: 2, initial_delay_seconds: 0.1, max_delay_seconds: 1}\n"
            "log_level: warning\n",
            encoding="utf-8",
        )

        settings = load_settings(path, environ={})

        assert settings.detection.processing_timeout == timedelta(minutes=90)
        assert settings.detection.stage_transition_timeout == timedelta(minutes=30)
        assert settings.detection.low_severity_pct == Decimal("0.5")
        assert settings.detection.high_severity_pct == Decimal("2")
        assert settings.write_retry.max_attempts == 4
        assert settings.write_retry.initial_delay_seconds == 1.0
        assert settings.read_retry == RetrySettings(
            max_attempts=2, initial_delay_seconds=0.1, multiplier=1.5, max_delay_seconds=1.0
        )
        assert settings.log_level == "WARNING"

    def test_path_from_environment(self, tmp_path):
        """The file location may come from the environment."""
        path = tmp_path / "audit.yaml"
        path.write_text("log_level: ERROR\n", encoding="utf-8")

        settings = load_settings(environ={CONFIG_PATH_ENV: str(path)})

        assert settings.log_level == "ERROR"

    def test_empty_file(self, tmp_path):
        """An empty file means defaults."""
        path = tmp_path / "audit.yaml"
        path.write_text("", encoding="utf-8")

        assert load_settings(path, environ={}) == AuditSettings()

    @pytest.mark.parametrize(
        "content",
        [
            "detection: [1, 2]\n",
            "- a\n- b\n",
            "detection:\n  timeout: 5\n",
            "retry:\n  read: {max_delay_seconds: .inf}\n",
            "detection:\n  processing_timeout_minutes: .nan\n",
            "retry:\n  write: {attempts: 2}\n",
            "detection:\n  low_severity_pct: lots\n",
            "detection: {low_severity_pct: 6, high_severity_pct: 5}\n",
            "detection: [unclosed\n",
        ],
    )
    def test_invalid_file(self, tmp_path, content):
        """Malformed files fail loudly."""
        path = tmp_path / "audit.yaml"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(AuditConfigurationError):
            load_settings(path, environ={})

    def test_missing_file(self, tmp_path):
        """An unreadable file is a configuration error."""
        with pytest.raises(AuditConfigurationError) as exc_info:
            load_settings(tmp_path / "absent.yaml", environ={})

        assert "cannot read file" in exc_info.value.reason


class TestEnvironmentOverrides:
    """Tests for environment variable overrides."""

    def test_environment_beats_file(self, tmp_path):
        """Environment values override the file."""
        path = tmp_path / "audit.yaml"
        path.write_text(
            "detection: {processing_timeout_minutes: 90}\nlog_level: ERROR\n",
            encoding="utf-8",
        )

        settings = load_settings(path, environ={
            "BATCH_AUDIT_PROCESSING_TIMEOUT_MINUTES": "120",
            "BATCH_AUDIT_TIMEOUT_ESCALATION_FACTOR": "3",
            "BATCH_AUDIT_LOG_LEVEL": "debug",
        })

        assert settings.detection.processing_timeout == timedelta(hours=2)
        assert settings.detection.timeout_escalation_factor == Decimal("3")
        assert settings.log_level == "DEBUG"

    def test_retry_attempts_apply_to_both_policies(self):
        """One variable sets attempts for reads and writes."""
        settings = load_settings(environ={"BATCH_AUDIT_RETRY_MAX_ATTEMPTS": "7"})

        assert settings.write_retry.max_attempts == 7
        assert settings.read_retry.max_attempts == 7
        assert settings.read_retry.initial_delay_seconds == 0.5

    def test_empty_variable_ignored(self):
        """Blank variables do not override anything."""
        settings = load_settings(environ={"BATCH_AUDIT_HIGH_SEVERITY_PCT": ""})

        assert settings.detection.high_severity_pct == Decimal("5")

    @pytest.mark.parametrize(
        "name, value",
        [
            ("BATCH_AUDIT_RETRY_MAX_ATTEMPTS", "three"),
            ("BATCH_AUDIT_PROCESSING_TIMEOUT_MINUTES", "soon"),
            ("BATCH_AUDIT_PROCESSING_TIMEOUT_MINUTES", "0"),
            ("BATCH_AUDIT_PROCESSING_TIMEOUT_MINUTES", "inf"),
            ("BATCH_AUDIT_PROCESSING_TIMEOUT_MINUTES", "nan"),
            ("BATCH_AUDIT_STAGE_TRANSITION_TIMEOUT_MINUTES", "-inf"),
            ("BATCH_AUDIT_LOW_SEVERITY_PCT", "NaN"),
            ("BATCH_AUDIT_LOG_LEVEL", "VERBOSE"),
        ],
    )
    def test_invalid_variable(self, name, value):
        """Unparseable overrides are configuration errors."""
        with pytest.raises(AuditConfigurationError):
            load_settings(environ={name: value})
