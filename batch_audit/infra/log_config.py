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

"""Logging setup that stamps every record with the bound run id."""

import logging
from typing import Optional, TextIO

from batch_audit.core.audit.correlation import CorrelationContext

LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


class CorrelationIdLogFilter(logging.Filter):
    """Adds ``correlation_id`` to log records; ``-`` when no run id is bound."""

    def __init__(self, context: CorrelationContext) -> None:
        super().__init__()
        self._context = context

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = self._context.current()
        record.correlation_id = str(correlation_id) if correlation_id else "-"
        return True


def configure_logging(
    level: str = "INFO",
    context: Optional[CorrelationContext] = None,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Attach a correlation-aware handler to the ``batch_audit`` logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Log level name.
        context: Context to read run ids from; a fresh one if omitted.
        stream: Output stream; stderr if omitted.

    Returns:
        The installed handler.
    """
    package_logger = logging.getLogger("batch_audit")
    for existing in list(package_logger.handlers):
        if getattr(existing, "_batch_audit_handler", False):
            package_logger.removeHandler(existing)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdLogFilter(context or CorrelationContext()))
    handler._batch_audit_handler = True  # pylint: disable=protected-access

    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())
    return handler
