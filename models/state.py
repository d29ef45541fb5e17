"""
Store state containers — filter, pagination and UI flags held by the client stores.
"""

from dataclasses import dataclass
from typing import Optional

from models.base import Record


@dataclass
class JobFilters:
    search: str = ""
    status: str = "all"
    type: str = "all"


@dataclass
class CandidateFilters:
    search: str = ""
    status: str = "all"


@dataclass
class UIState:
    """Process-wide flags shared by every store. Last writer wins."""

    is_global_loading: bool = False
    global_error: Optional[str] = None


class Pagination(Record):
    """Pagination metadata returned alongside a candidate page."""

    page: int
    limit: int
    total: int
    total_pages: int


@dataclass
class JobsPage:
    """Result of filtering and paginating the jobs snapshot."""

    jobs: list
    total_pages: int
    visible_count: int
