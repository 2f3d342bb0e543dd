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

"""Identifier generation for audit events and runs."""

import uuid

from batch_audit.core.audit.repositories import UUIDGenerator


class UUIDv4Generator(UUIDGenerator):
    """Random UUID v4 generator.

    Used for event ids and for run ids created by CorrelationContext.
    128 random bits make collisions between generated ids negligible.
    """

    def generate(self) -> uuid.UUID:
        """Generate a new UUID v4.

        Returns:
            uuid.UUID: A new UUID v4 object.
        """
        return uuid.uuid4()
