import threading
import uuid
from datetime import datetime, tzinfo
from typing import Dict, List, Optional

from PlantDiary.core.timeutil import JST, ensure_utc, year_months
from PlantDiary.database.store import EntryStore
from PlantDiary.errors import DuplicatePathError
from PlantDiary.models import DiaryEntry, YearMonth


class InMemoryEntryStore(EntryStore):
    """Process-local store for tests and dry runs. Thread-safe, not durable."""

    def __init__(self):
        self._lock = threading.RLock()
        self._entries: Dict[str, DiaryEntry] = {}
        self._by_path: Dict[str, str] = {}

    def _sorted(self, entries, newest_first: bool = False) -> List[DiaryEntry]:
        return sorted(entries, key=lambda e: e.created_at, reverse=newest_first)

    def create(self, image_path: str, content: str, created_at: datetime) -> DiaryEntry:
        with self._lock:
            if image_path in self._by_path:
                raise DuplicatePathError(image_path)
            entry = DiaryEntry(id=str(uuid.uuid4()), image_path=image_path, content=content, created_at=created_at)
            self._entries[entry.id] = entry
            self._by_path[image_path] = entry.id
            return entry

    def is_processed(self, image_path: str) -> bool:
        with self._lock:
            return image_path in self._by_path

    def latest_created_at(self) -> Optional[datetime]:
        with self._lock:
            if not self._entries:
                return None
            return max(e.created_at for e in self._entries.values())

    def entries_in_range(self, start: datetime, end: datetime) -> List[DiaryEntry]:
        start, end = ensure_utc(start), ensure_utc(end)
        with self._lock:
            return self._sorted(e for e in self._entries.values() if start <= e.created_at < end)

    def all_entries(self) -> List[DiaryEntry]:
        with self._lock:
            return self._sorted(self._entries.values(), newest_first=True)

    def get(self, entry_id: str) -> Optional[DiaryEntry]:
        with self._lock:
            return self._entries.get(entry_id)

    def search(self, keyword: str) -> List[DiaryEntry]:
        needle = keyword.lower()
        with self._lock:
            return self._sorted(
                (e for e in self._entries.values() if needle in e.content.lower()),
                newest_first=True,
            )

    def entries_ascending(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[DiaryEntry]:
        start = ensure_utc(start) if start is not None else None
        end = ensure_utc(end) if end is not None else None
        with self._lock:
            return self._sorted(
                e for e in self._entries.values()
                if (start is None or e.created_at >= start) and (end is None or e.created_at <= end)
            )

    def available_year_months(self, tz: tzinfo = JST) -> List[YearMonth]:
        with self._lock:
            return year_months((e.created_at for e in self._entries.values()), tz)
