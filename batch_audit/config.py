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

"""Engine settings loaded from defaults, an optional YAML file and the environment.

Example file::

    detection:
      processing_timeout_minutes: 240
      stage_transition_timeout_minutes: 60
      low_severity_pct: 1
      high_severity_pct: 5
      timeout_escalation_factor: 2
    retry:
      write: {max_attempts: 3, initial_delay_seconds: 1, multiplier: 2, max_delay_seconds: 30}
      read: {max_attempts: 5, initial_delay_seconds: 0.5, multiplier: 1.5, max_delay_seconds: 15}
    log_level: INFO
"""

import logging
import math
import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from batch_audit.core.audit.discrepancies import DetectionSettings
from batch_audit.core.audit.exceptions import AuditConfigurationError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "BATCH_AUDIT_CONFIG"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class RetrySettings:
    """Backoff parameters for one class of gateway operation.

    Attributes:
        max_attempts: Total attempts including the first call.
        initial_delay_seconds: Delay before the second attempt.
        multiplier: Growth factor between consecutive delays.
        max_delay_seconds: Upper bound on any single delay.
    """

    max_attempts: int = 3
    initial_delay_seconds: float = 1.0
    multiplier: float = 2.0
    max_delay_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate ranges."""
        if self.max_attempts < 1:
            raise AuditConfigurationError("max_attempts", "must be at least 1")
        if self.initial_delay_seconds < 0:
            raise AuditConfigurationError("initial_delay_seconds", "must not be negative")
        if self.multiplier < 1:
            raise AuditConfigurationError("multiplier", "must be at least 1")
        if self.max_delay_seconds < self.initial_delay_seconds:
            raise AuditConfigurationError(
                "max_delay_seconds", "must not be below initial_delay_seconds"
            )


WRITE_RETRY_DEFAULTS = RetrySettings()
READ_RETRY_DEFAULTS = RetrySettings(
    max_attempts=5,
    initial_delay_seconds=0.5,
    multiplier=1.5,
    max_delay_seconds=15.0,
)


@dataclass(frozen=True)
class AuditSettings:
    """Complete engine configuration."""

    detection: DetectionSettings = field(default_factory=DetectionSettings)
    write_retry: RetrySettings = WRITE_RETRY_DEFAULTS
    read_retry: RetrySettings = READ_RETRY_DEFAULTS
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate log level."""
        level = str(self.log_level).strip().upper()
        if level not in _LOG_LEVELS:
            raise AuditConfigurationError("log_level", f"unknown level {self.log_level!r}")
        object.__setattr__(self, "log_level", level)


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AuditSettings:
    """Load engine settings.

    Precedence, lowest first: defaults, YAML file, environment variables.

    Args:
        path: YAML file; falls back to ``BATCH_AUDIT_CONFIG`` when omitted.
        environ: Environment mapping; ``os.environ`` when omitted.

    Returns:
        AuditSettings instance.

    Raises:
        AuditConfigurationError: If the file or any value is invalid.
    """
    env = os.environ if environ is None else environ
    config_path = path or env.get(CONFIG_PATH_ENV)

    payload: Dict[str, Any] = {}
    if config_path:
        payload = _read_yaml(Path(config_path))
        logger.info("Loaded audit settings from %s", config_path)

    detection_raw = dict(_section(payload, "detection"))
    retry_raw = _section(payload, "retry")
    write_raw = dict(_section(retry_raw, "write"))
    read_raw = dict(_section(retry_raw, "read"))
    log_level = payload.get("log_level", "INFO")

    env_detection = {
        "processing_timeout_minutes": "BATCH_AUDIT_PROCESSING_TIMEOUT_MINUTES",
        "stage_transition_timeout_minutes": "BATCH_AUDIT_STAGE_TRANSITION_TIMEOUT_MINUTES",
        "low_severity_pct": "BATCH_AUDIT_LOW_SEVERITY_PCT",
        "high_severity_pct": "BATCH_AUDIT_HIGH_SEVERITY_PCT",
        "timeout_escalation_factor": "BATCH_AUDIT_TIMEOUT_ESCALATION_FACTOR",
    }
    for key, env_name in env_detection.items():
        if env.get(env_name):
            detection_raw[key] = env[env_name]
    if env.get("BATCH_AUDIT_RETRY_MAX_ATTEMPTS"):
        write_raw["max_attempts"] = env["BATCH_AUDIT_RETRY_MAX_ATTEMPTS"]
        read_raw["max_attempts"] = env["BATCH_AUDIT_RETRY_MAX_ATTEMPTS"]
    if env.get("BATCH_AUDIT_LOG_LEVEL"):
        log_level = env["BATCH_AUDIT_LOG_LEVEL"]

    return AuditSettings(
        detection=_build_detection(detection_raw),
        write_retry=_build_retry(write_raw, WRITE_RETRY_DEFAULTS),
        read_retry=_build_retry(read_raw, READ_RETRY_DEFAULTS),
        log_level=str(log_level),
    )


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise AuditConfigurationError(str(path), f"cannot read file: {exc}") from exc
    except yaml.YAMLError as exc:
        raise AuditConfigurationError(str(path), f"invalid YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise AuditConfigurationError(str(path), "top level must be a mapping")
    return payload


def _section(payload: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = payload.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise AuditConfigurationError(name, "must be a mapping")
    return value


def _build_detection(raw: Mapping[str, Any]) -> DetectionSettings:
    defaults = DetectionSettings()
    values: Dict[str, Any] = {}
    if raw.get("processing_timeout_minutes") is not None:
        values["processing_timeout"] = timedelta(
            minutes=_to_float("processing_timeout_minutes", raw["processing_timeout_minutes"])
        )
    if raw.get("stage_transition_timeout_minutes") is not None:
        values["stage_transition_timeout"] = timedelta(
            minutes=_to_float(
                "stage_transition_timeout_minutes", raw["stage_transition_timeout_minutes"]
            )
        )
    for key in ("low_severity_pct", "high_severity_pct", "timeout_escalation_factor"):
        if raw.get(key) is not None:
            values[key] = _to_decimal(key, raw[key])
    unknown = set(raw) - {
        "processing_timeout_minutes",
        "stage_transition_timeout_minutes",
        "low_severity_pct",
        "high_severity_pct",
        "timeout_escalation_factor",
    }
    if unknown:
        raise AuditConfigurationError("detection", f"unknown keys {sorted(unknown)}")
    return replace(defaults, **values)


def _build_retry(raw: Mapping[str, Any], defaults: RetrySettings) -> RetrySettings:
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key == "max_attempts":
            values[key] = _to_int(key, value)
        elif key in ("initial_delay_seconds", "multiplier", "max_delay_seconds"):
            values[key] = _to_float(key, value)
        else:
            raise AuditConfigurationError("retry", f"unknown key {key!r}")
    return replace(defaults, **values)


def _to_int(name: str, value: Any) -> int:
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise AuditConfigurationError(name, f"expected an integer, got {value!r}") from exc


def _to_float(name: str, value: Any) -> float:
    try:
        parsed = float(str(value).strip())
    except ValueError as exc:
        raise AuditConfigurationError(name, f"expected a number, got {value!r}") from exc
    if not math.isfinite(parsed):
        raise AuditConfigurationError(name, f"expected a finite number, got {value!r}")
    return parsed


def _to_decimal(name: str, value: Any) -> Decimal:
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise AuditConfigurationError(name, f"expected a number, got {value!r}") from exc
    if not parsed.is_finite():
        raise AuditConfigurationError(name, f"expected a finite number, got {value!r}")
    return parsed
