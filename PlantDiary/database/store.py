"""
The entry store contract consumed by the ingestion pipeline.

The pipeline only needs `create`, `is_processed`, `latest_created_at` and
`entries_in_range`. The remaining queries serve browsing surfaces (CLI listing,
search, month grouping).

The dedup check and the write are separate calls. With a single ingester this
is safe; a second concurrent ingester could generate twice before the unique
constraint rejects the later write.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime, tzinfo
from typing import List, Optional

from PlantDiary.core.timeutil import JST
from PlantDiary.models import DiaryEntry, YearMonth


class EntryStore(ABC):

    # --- Used by the ingestion pipeline ---

    @abstractmethod
    def create(self, image_path: str, content: str, created_at: datetime) -> DiaryEntry:
        """Persists a new entry. Raises DuplicatePathError if the path is already recorded."""

    @abstractmethod
    def is_processed(self, image_path: str) -> bool:
        ...

    @abstractmethod
    def latest_created_at(self) -> Optional[datetime]:
        """Greatest `created_at` over all entries, or None when empty."""

    @abstractmethod
    def entries_in_range(self, start: datetime, end: datetime) -> List[DiaryEntry]:
        """Entries with start <= created_at < end, oldest first."""

    # --- Browsing ---

    @abstractmethod
    def all_entries(self) -> List[DiaryEntry]:
        """Every entry, newest first."""

    @abstractmethod
    def get(self, entry_id: str) -> Optional[DiaryEntry]:
        ...

    @abstractmethod
    def search(self, keyword: str) -> List[DiaryEntry]:
        """Case-insensitive substring match on content, newest first."""

    @abstractmethod
    def entries_ascending(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[DiaryEntry]:
        """Entries oldest first; either bound may be None, bounds are inclusive."""

    @abstractmethod
    def available_year_months(self, tz: tzinfo = JST) -> List[YearMonth]:
        """Months in `tz` that contain entries, newest first."""
