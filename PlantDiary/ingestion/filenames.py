"""
Capture-time parsing for photo filenames.

Current cameras write `YYYYMMDD_HHMM_UTC.jpg`. Older captures used
`YYYYMMDD_HHMM.jpg` without a zone suffix; those are read as the same clock
reading with no conversion so both forms order on one timeline.
"""
from __future__ import annotations
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from PlantDiary.errors import FilenameFormatError

PRIMARY_FORMAT = "%Y%m%d_%H%M_UTC"
LEGACY_FORMAT = "%Y%m%d_%H%M"

# strptime tolerates padded or short fields, so the shape is checked first.
_STEM_RE = re.compile(r"\d{8}_\d{4}(_UTC)?", re.ASCII)


def parse_capture_time(image_path: Union[str, Path]) -> datetime:
    """
    Returns the capture instant encoded in the file's basename as an aware
    UTC datetime. Raises FilenameFormatError for any other shape.
    """
    name = Path(image_path).name
    stem = Path(image_path).stem

    match = _STEM_RE.fullmatch(stem)
    if match is None:
        raise FilenameFormatError(f"failed to parse capture time from filename {name}")

    # Legacy names carry no zone; keep the naive reading as-is.
    fmt = PRIMARY_FORMAT if match.group(1) else LEGACY_FORMAT
    try:
        return datetime.strptime(stem, fmt).replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise FilenameFormatError(f"failed to parse capture time from filename {name}: {e}") from e
