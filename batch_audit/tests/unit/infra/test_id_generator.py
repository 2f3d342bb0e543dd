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

"""Unit tests for UUIDv4Generator infrastructure component."""

import re

from batch_audit.core.audit.value_objects import CorrelationId
from batch_audit.infra.id_generator import UUIDv4Generator


class TestUUIDv4Generator:
    """Tests covering UUIDv4Generator behavior."""

    def test_generate_returns_uuid_v4_format(self) -> None:
        """Generated ids conform to UUID v4 format."""
        generator = UUIDv4Generator()

        generated = str(generator.generate())

        assert re.match(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
            generated,
        )

    def test_generated_id_is_valid_correlation_id(self) -> None:
        """Generated ids can serve as run ids."""
        value = str(UUIDv4Generator().generate())

        assert CorrelationId(value).value == value

    def test_generate_is_unique(self) -> None:
        """Generator should yield unique IDs over multiple invocations."""
        generator = UUIDv4Generator()

        generated = {generator.generate() for _ in range(50)}

        assert len(generated) == 50
