from datetime import timedelta
from pathlib import Path

import pytest

from PlantDiary.config import Settings
from PlantDiary.core.retry import RetryPolicy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("GEMINI_API_KEY", "PLANTDIARY_GEMINI_API_KEY", "PLANTDIARY_POLL_INTERVAL_S",
                 "PLANTDIARY_RETRY_INTERVALS_S", "PLANTDIARY_RETRY_MAX_RETRIES", "PLANTDIARY_PHOTOS_DIR"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.photos_dir == Path("data/photos")
    assert settings.poll_interval_s == 60.0
    assert settings.model_name == "gemini-2.5-flash"
    assert settings.generation_timeout_s == 30.0
    assert settings.prompt_max_entries == 30
    assert settings.gemini_api_key is None
    assert settings.retry_policy() == RetryPolicy(max_retries=3, intervals=(1.0, 2.0, 4.0))
    assert settings.presentation_tz().utcoffset(None) == timedelta(hours=9)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("PLANTDIARY_POLL_INTERVAL_S", "5")
    monkeypatch.setenv("PLANTDIARY_PHOTOS_DIR", "/srv/photos")
    monkeypatch.setenv("PLANTDIARY_RETRY_MAX_RETRIES", "2")
    monkeypatch.setenv("PLANTDIARY_RETRY_INTERVALS_S", "[0.5, 1.5]")

    settings = Settings(_env_file=None)

    assert settings.poll_interval_s == 5.0
    assert settings.photos_dir == Path("/srv/photos")
    assert settings.retry_policy() == RetryPolicy(max_retries=2, intervals=(0.5, 1.5))


def test_plain_gemini_key_is_accepted(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "abc123")
    assert Settings(_env_file=None).gemini_api_key == "abc123"


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("PLANTDIARY_MODEL_NAME=gemini-test\nUNRELATED=1\n")
    assert Settings().model_name == "gemini-test"
