"""
Candidate discovery for one ingestion pass.

Turns the photos directory into an ordered work list: already-recorded paths
are dropped, unparsable names are skipped with a warning, and anything
captured at or before the watermark (the newest stored entry) is ignored so
an old backlog is never replayed behind newer entries.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from PlantDiary.core.timeutil import MIN_INSTANT
from PlantDiary.database.store import EntryStore
from PlantDiary.errors import FilenameFormatError
from PlantDiary.ingestion.filenames import parse_capture_time
from PlantDiary.models import WorkItem

log = logging.getLogger(__name__)


@dataclass
class ScanResult:
    candidates: int = 0
    already_processed: int = 0
    unparsable: int = 0
    superseded: int = 0
    check_failed: int = 0
    items: List[WorkItem] = field(default_factory=list)


def list_candidates(photos_dir: Union[str, Path], pattern: str = "*.jpg") -> List[str]:
    """Image files in `photos_dir` matching `pattern`, as path strings sorted by name."""
    photos_dir = Path(photos_dir)
    if not photos_dir.is_dir():
        raise FileNotFoundError(f"photos directory not found: {photos_dir}")
    return sorted(str(p) for p in photos_dir.glob(pattern) if p.is_file())


def read_watermark(store: EntryStore) -> datetime:
    latest = store.latest_created_at()
    return latest if latest is not None else MIN_INSTANT


def build_work_list(
    candidates: List[str],
    store: EntryStore,
    watermark: datetime,
    logger: Optional[logging.Logger] = None,
) -> ScanResult:
    """Filters `candidates` against the store and watermark; items come back oldest first."""
    logger = logger or log
    result = ScanResult(candidates=len(candidates))

    for path in candidates:
        try:
            if store.is_processed(path):
                result.already_processed += 1
                continue
        except Exception as e:
            logger.error(f"Failed to check processed state for {path}: {e}")
            result.check_failed += 1
            continue

        try:
            captured_at = parse_capture_time(path)
        except FilenameFormatError as e:
            logger.warning(f"Skipping {path}: {e}")
            result.unparsable += 1
            continue

        if captured_at <= watermark:
            logger.debug(f"Skipping {path}: captured at {captured_at.isoformat()} is not after watermark")
            result.superseded += 1
            continue

        result.items.append(WorkItem(image_path=path, captured_at=captured_at))

    result.items.sort(key=lambda item: item.captured_at)
    return result
