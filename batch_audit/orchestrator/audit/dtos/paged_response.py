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

"""Paged response DTO."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PagedResponse(Generic[T]):
    """One page of results.

    Attributes:
        content: Items on this page.
        page: Zero-based page number.
        size: Requested page size.
        total_elements: Items across all pages.
        records_skipped: Malformed rows dropped from this page.
    """

    content: List[T]
    page: int
    size: int
    total_elements: int
    records_skipped: int = 0

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total_elements + self.size - 1) // self.size

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def is_first(self) -> bool:
        return self.page == 0

    @property
    def is_last(self) -> bool:
        return not self.has_next

    def to_dict(self, item_to_dict: Callable[[T], Any]) -> Dict[str, Any]:
        """Serialize, converting each item with ``item_to_dict``."""
        return {
            "content": [item_to_dict(item) for item in self.content],
            "page": self.page,
            "size": self.size,
            "totalElements": self.total_elements,
            "totalPages": self.total_pages,
            "first": self.is_first,
            "last": self.is_last,
            "hasNext": self.has_next,
            "hasPrevious": self.has_previous,
            "recordsSkipped": self.records_skipped,
        }
