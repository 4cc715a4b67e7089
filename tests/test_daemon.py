import signal
import threading
from unittest.mock import patch

import pytest

from PlantDiary import daemon
from PlantDiary.config import Settings
from PlantDiary.enrichment.generator import MockDiaryGenerator


@pytest.fixture
def settings(tmp_path, photos_dir, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("PLANTDIARY_GEMINI_API_KEY", raising=False)
    return Settings(_env_file=None, photos_dir=photos_dir, db_path=tmp_path / "diary.db")


def test_mock_generator_without_key(settings):
    assert isinstance(daemon.build_generator(settings), MockDiaryGenerator)


def test_mock_generator_when_forced(settings):
    settings.gemini_api_key = "abc"
    settings.use_mock_generator = True
    assert isinstance(daemon.build_generator(settings), MockDiaryGenerator)


def test_gemini_generator_with_key(settings):
    settings.gemini_api_key = "abc"
    sentinel = object()
    with patch("PlantDiary.enrichment.gemini.GeminiDiaryGenerator.from_settings", return_value=sentinel) as from_settings:
        assert daemon.build_generator(settings) is sentinel
    from_settings.assert_called_once_with(settings)


def test_signal_handler_sets_cancel():
    cancel = threading.Event()
    previous = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        daemon._install_signal_handlers(cancel)
        signal.getsignal(signal.SIGTERM)(signal.SIGTERM, None)
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    assert cancel.is_set()


def test_run_daemon_returns_after_cancel(settings, make_photo, monkeypatch):
    monkeypatch.setattr(daemon, "_install_signal_handlers", lambda cancel: None)
    make_photo("20260216_1110_UTC.jpg")
    cancel = threading.Event()
    cancel.set()

    finished = threading.Event()

    def _run():
        daemon.run_daemon(settings, cancel)
        finished.set()

    thread = threading.Thread(target=_run, daemon=True)
    thread.start()
    assert finished.wait(timeout=15)
