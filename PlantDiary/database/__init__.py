# Database schema and connection helpers for PlantDiary

from pathlib import Path
from typing import Optional, Union

import duckdb

from PlantDiary.errors import InitializationError

DB_PATH = Path("data") / "plant_diary.db"

# created_at holds naive UTC readings; the store attaches the zone on read.
SCHEMA_QUERIES = [
    '''
    CREATE TABLE IF NOT EXISTS diary (
        id VARCHAR PRIMARY KEY,
        image_path VARCHAR NOT NULL UNIQUE,
        content TEXT NOT NULL,
        created_at TIMESTAMP NOT NULL
    );
    ''',
    'CREATE INDEX IF NOT EXISTS idx_diary_created_at ON diary(created_at);',
]


def get_connection(db_path: Optional[Union[str, Path]] = None) -> duckdb.DuckDBPyConnection:
    path = Path(db_path) if db_path is not None else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path))


def init_database(db_path: Optional[Union[str, Path]] = None) -> Path:
    path = Path(db_path) if db_path is not None else DB_PATH
    try:
        with get_connection(path) as conn:
            for query in SCHEMA_QUERIES:
                conn.execute(query)
    except (duckdb.Error, OSError) as e:
        raise InitializationError(f"Failed to initialize database at {path}: {e}") from e
    return path
