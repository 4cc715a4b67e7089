from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


class DiaryEntry(BaseModel):
    """
    One generated diary entry. `image_path` is the dedup key and
    `created_at` is the photo's capture time, not the ingestion time.
    """
    id: str = Field(..., description="Opaque entry identifier")
    image_path: str = Field(..., description="Path of the source photo, unique per entry")
    content: str = Field(..., description="Generated diary text")
    created_at: datetime = Field(..., description="Capture time (UTC) parsed from the filename")

    @field_validator("created_at", mode="before")
    @classmethod
    def ensure_utc(cls, v):
        if isinstance(v, str):
            v = datetime.fromisoformat(v.replace("Z", "+00:00"))
        if isinstance(v, datetime):
            return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v.astimezone(timezone.utc)
        raise ValueError("Invalid datetime format")


class YearMonth(BaseModel):
    """A calendar month (presentation zone) that has at least one entry."""
    year: int
    month: int

    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class WorkItem:
    """A photo queued for generation during a single scan pass."""
    image_path: str
    captured_at: datetime
