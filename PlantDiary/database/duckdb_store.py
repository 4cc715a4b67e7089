import logging
import uuid
from datetime import datetime, tzinfo
from pathlib import Path
from typing import List, Optional, Union

import duckdb

from PlantDiary.core.timeutil import JST, ensure_utc, to_naive_utc, year_months
from PlantDiary.database import get_connection, init_database
from PlantDiary.database.store import EntryStore
from PlantDiary.errors import DuplicatePathError, PersistError, StoreError
from PlantDiary.models import DiaryEntry, YearMonth

log = logging.getLogger(__name__)

_COLUMNS = "id, image_path, content, created_at"


def _row_to_entry(row) -> DiaryEntry:
    return DiaryEntry(id=str(row[0]), image_path=row[1], content=row[2], created_at=ensure_utc(row[3]))


class DuckDBEntryStore(EntryStore):
    """
    Entry store backed by a DuckDB file. Each call opens its own connection so
    the scheduler thread and CLI readers never share one.
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        init_database(self.db_path)

    def _query(self, sql: str, params=None) -> list:
        try:
            with get_connection(self.db_path) as conn:
                return conn.execute(sql, params or []).fetchall()
        except duckdb.Error as e:
            raise StoreError(f"Query failed against {self.db_path}: {e}") from e

    def _entries(self, sql: str, params=None) -> List[DiaryEntry]:
        return [_row_to_entry(row) for row in self._query(sql, params)]

    def create(self, image_path: str, content: str, created_at: datetime) -> DiaryEntry:
        entry = DiaryEntry(id=str(uuid.uuid4()), image_path=image_path, content=content, created_at=created_at)
        try:
            with get_connection(self.db_path) as conn:
                conn.execute(
                    f"INSERT INTO diary ({_COLUMNS}) VALUES (?, ?, ?, ?)",
                    [entry.id, entry.image_path, entry.content, to_naive_utc(entry.created_at)],
                )
        except duckdb.ConstraintException as e:
            raise DuplicatePathError(image_path, e) from e
        except duckdb.Error as e:
            raise PersistError(f"Failed to insert diary entry for {image_path}: {e}") from e
        log.debug(f"Inserted diary entry {entry.id} for {image_path}")
        return entry

    def is_processed(self, image_path: str) -> bool:
        rows = self._query("SELECT EXISTS(SELECT 1 FROM diary WHERE image_path = ?)", [image_path])
        return bool(rows[0][0])

    def latest_created_at(self) -> Optional[datetime]:
        rows = self._query("SELECT max(created_at) FROM diary")
        value = rows[0][0] if rows else None
        return ensure_utc(value) if value is not None else None

    def entries_in_range(self, start: datetime, end: datetime) -> List[DiaryEntry]:
        return self._entries(
            f"SELECT {_COLUMNS} FROM diary WHERE created_at >= ? AND created_at < ? ORDER BY created_at ASC",
            [to_naive_utc(start), to_naive_utc(end)],
        )

    def all_entries(self) -> List[DiaryEntry]:
        return self._entries(f"SELECT {_COLUMNS} FROM diary ORDER BY created_at DESC")

    def get(self, entry_id: str) -> Optional[DiaryEntry]:
        entries = self._entries(f"SELECT {_COLUMNS} FROM diary WHERE id = ?", [entry_id])
        return entries[0] if entries else None

    def search(self, keyword: str) -> List[DiaryEntry]:
        return self._entries(
            f"SELECT {_COLUMNS} FROM diary WHERE content ILIKE ? ORDER BY created_at DESC",
            [f"%{keyword}%"],
        )

    def entries_ascending(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[DiaryEntry]:
        clauses, params = [], []
        if start is not None:
            clauses.append("created_at >= ?")
            params.append(to_naive_utc(start))
        if end is not None:
            clauses.append("created_at <= ?")
            params.append(to_naive_utc(end))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return self._entries(f"SELECT {_COLUMNS} FROM diary{where} ORDER BY created_at ASC", params)

    def available_year_months(self, tz: tzinfo = JST) -> List[YearMonth]:
        rows = self._query("SELECT created_at FROM diary")
        return year_months((row[0] for row in rows), tz)
