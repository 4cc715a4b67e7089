"""
Ingestion daemon for PlantDiary.
Opens the diary store, picks a generator and runs the ingestion scheduler
until SIGINT/SIGTERM.
"""
import logging
import signal
import threading
from typing import Optional

from PlantDiary.config import Settings
from PlantDiary.database.duckdb_store import DuckDBEntryStore
from PlantDiary.enrichment.generator import DiaryGenerator, MockDiaryGenerator
from PlantDiary.ingestion.scheduler import IngestionScheduler

log = logging.getLogger(__name__)


def build_store(settings: Settings) -> DuckDBEntryStore:
    store = DuckDBEntryStore(settings.db_path)
    log.info(f"Using DuckDBEntryStore at {settings.db_path}")
    return store


def build_generator(settings: Settings) -> DiaryGenerator:
    if settings.use_mock_generator or not settings.gemini_api_key:
        log.info("Using MockDiaryGenerator (GEMINI_API_KEY not set or mock forced)")
        return MockDiaryGenerator()
    # Imported lazily so offline runs never construct a Gemini client.
    from PlantDiary.enrichment.gemini import GeminiDiaryGenerator
    generator = GeminiDiaryGenerator.from_settings(settings)
    log.info("Using GeminiDiaryGenerator")
    return generator


def _install_signal_handlers(cancel: threading.Event) -> None:
    if threading.current_thread() is not threading.main_thread():
        return

    def _handle(signum, frame):
        log.info(f"Received signal {signum}; shutting down...")
        cancel.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def run_daemon(settings: Settings, cancel: Optional[threading.Event] = None) -> None:
    """Blocks until `cancel` is set (or a termination signal arrives) and the last pass ends."""
    log.info("--- Starting PlantDiary ingestion daemon ---")
    store = build_store(settings)
    generator = build_generator(settings)
    scheduler = IngestionScheduler.from_settings(settings, store, generator)

    cancel = cancel or threading.Event()
    _install_signal_handlers(cancel)

    task = scheduler.start(cancel)
    log.info("Startup complete. Daemon is now running.")
    while not task.wait(timeout=1.0):
        pass
    log.info("PlantDiary daemon stopped.")
