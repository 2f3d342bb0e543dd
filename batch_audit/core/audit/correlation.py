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

"""Run identifier binding scoped to one unit of work.

A binding lives in a ``ContextVar`` and records which unit of work
(asyncio task, or thread when no loop is running) created it. Child tasks
and ``asyncio.to_thread`` calls receive a copy of the context, but the
owner check makes ``current()`` return None there until they bind
explicitly, so a run id never leaks into independently scheduled work.
"""

import asyncio
import contextlib
import logging
import threading
import uuid
from contextvars import ContextVar
from typing import Any, Callable, Iterator, Optional, Tuple, TypeVar

from .repositories import UUIDGenerator
from .value_objects import CorrelationId

logger = logging.getLogger(__name__)

T = TypeVar("T")

_Binding = Tuple[object, CorrelationId]


def _current_unit() -> object:
    """Return an identity for the running task, or the running thread."""
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    if task is not None:
        return task
    return ("thread", threading.get_ident())


class CorrelationContext:
    """Binds a run id to the calling unit of work.

    Attributes:
        name: Name of the underlying context variable.
    """

    def __init__(
        self,
        uuid_generator: Optional[UUIDGenerator] = None,
        name: str = "batch_audit_correlation_id",
    ) -> None:
        """Initialize the context.

        Args:
            uuid_generator: Source of new run ids; random UUID v4 by default.
            name: Context variable name, useful when several contexts coexist.
        """
        self.name = name
        self._uuid_generator = uuid_generator
        self._var: ContextVar[Optional[_Binding]] = ContextVar(name, default=None)

    def generate(self) -> CorrelationId:
        """Create a fresh run id, bind it, and return it."""
        raw = self._uuid_generator.generate() if self._uuid_generator else uuid.uuid4()
        correlation_id = CorrelationId(str(raw))
        self.bind(correlation_id)
        logger.debug("Generated correlation ID %s", correlation_id)
        return correlation_id

    def current(self) -> Optional[CorrelationId]:
        """Return the run id bound to the calling unit of work, or None."""
        binding = self._var.get()
        if binding is None:
            return None
        owner, correlation_id = binding
        if owner != _current_unit():
            return None
        return correlation_id

    def has_current(self) -> bool:
        """Check whether a run id is bound to the calling unit of work."""
        return self.current() is not None

    def bind(self, correlation_id: Optional[CorrelationId]) -> None:
        """Associate a run id with the calling unit of work.

        Binding None is the same as ``clear()``.
        """
        if correlation_id is None:
            self.clear()
            return
        if not isinstance(correlation_id, CorrelationId):
            correlation_id = CorrelationId(str(correlation_id))
        self._var.set((_current_unit(), correlation_id))

    def clear(self) -> None:
        """Remove the binding for the calling unit of work."""
        self._var.set(None)

    @contextlib.contextmanager
    def scoped(self, correlation_id: Optional[CorrelationId] = None) -> Iterator[CorrelationId]:
        """Bind a run id for the duration of a ``with`` block.

        Generates a new id when none is given. The previous binding is
        restored (or cleared) on every exit path.
        """
        previous = self.current()
        if correlation_id is None:
            correlation_id = self.generate()
        else:
            self.bind(correlation_id)
        try:
            yield self.current()
        finally:
            if previous is not None:
                self.bind(previous)
            else:
                self.clear()

    def run_with(
        self,
        correlation_id: Optional[CorrelationId],
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any
    ) -> T:
        """Call ``func`` with ``correlation_id`` bound, then restore the prior id."""
        with self.scoped(correlation_id):
            return func(*args, **kwargs)
