from datetime import timedelta, timezone, tzinfo
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from PlantDiary.core.retry import RetryPolicy


class Settings(BaseSettings):
    # --- Core Paths ---
    photos_dir: Path = Path("data/photos")
    db_path: Path = Path("data/plant_diary.db")
    image_glob: str = "*.jpg"

    # --- Ingestion Scheduling ---
    poll_interval_s: float = 60.0  # One pass per minute
    retry_max_retries: int = 3
    retry_intervals_s: List[float] = [1.0, 2.0, 4.0]

    # --- Generation (Gemini) ---
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("PLANTDIARY_GEMINI_API_KEY", "GEMINI_API_KEY"),
    )
    model_name: str = "gemini-2.5-flash"
    generation_timeout_s: float = 30.0
    generation_temperature: float = 0.7
    use_mock_generator: bool = False  # Force the offline generator even if a key is set

    # --- Prompt Context ---
    prompt_max_entries: int = 30
    prompt_lookback_months: int = 1

    # --- Presentation ---
    presentation_utc_offset_h: int = 9  # JST

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PLANTDIARY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_retries=self.retry_max_retries, intervals=tuple(self.retry_intervals_s))

    def presentation_tz(self) -> tzinfo:
        return timezone(timedelta(hours=self.presentation_utc_offset_h))
