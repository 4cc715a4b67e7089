"""
Periodic ingestion of new photos into the diary.

One APScheduler job runs `run_pass` immediately and then every
`interval_s` seconds. Passes never overlap: the job is limited to a single
instance with coalescing, and `run_pass` itself refuses to start while
another pass holds the lock. Inside a pass images are processed one at a
time, oldest first, because each diary entry may quote the entries written
before it.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Callable, Optional, Union

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from PlantDiary.config import Settings
from PlantDiary.core.retry import BackoffExecutor, RetryPolicy
from PlantDiary.core.timeutil import JST
from PlantDiary.database.store import EntryStore
from PlantDiary.enrichment.generator import DiaryGenerator, check_image_readable, supports_prompt
from PlantDiary.enrichment.prompt_builder import MAX_PAST_ENTRIES_IN_PROMPT, build_diary_prompt, prompt_window
from PlantDiary.errors import (
    GenerationError,
    ImageAccessError,
    PersistError,
    RetryExhaustedError,
    RetryPolicyError,
)
from PlantDiary.ingestion.scanner import build_work_list, list_candidates, read_watermark
from PlantDiary.models import WorkItem

log = logging.getLogger(__name__)

JOB_ID = "diary_ingestion"
DEFAULT_INTERVAL_S = 60.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PassReport:
    started_at: datetime
    candidates: int = 0
    queued: int = 0
    created: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    ran: bool = True

    def summary(self) -> str:
        if not self.ran:
            return "pass skipped: another pass was running"
        if self.aborted:
            return "pass aborted before processing"
        return (
            f"{self.candidates} candidates, {self.queued} queued, {self.created} created, "
            f"{self.skipped} skipped, {self.failed} failed"
        )


class IngestionTask:
    """Handle for a running scheduler: set `cancel` to stop, wait on `done`."""

    def __init__(self, cancel: threading.Event, done: threading.Event, thread: threading.Thread):
        self.cancel = cancel
        self.done = done
        self._thread = thread

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Cancels and waits for the running pass to finish. Returns False on timeout."""
        self.cancel.set()
        if not self.done.wait(timeout):
            return False
        self._thread.join(timeout)
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self.done.wait(timeout)

    @property
    def running(self) -> bool:
        return not self.done.is_set()


class IngestionScheduler:
    def __init__(
        self,
        store: EntryStore,
        generator: DiaryGenerator,
        photos_dir: Union[str, Path],
        image_glob: str = "*.jpg",
        interval_s: float = DEFAULT_INTERVAL_S,
        retry_policy: Optional[RetryPolicy] = None,
        executor: Optional[BackoffExecutor] = None,
        max_prompt_entries: int = MAX_PAST_ENTRIES_IN_PROMPT,
        lookback_months: int = 1,
        tz: tzinfo = JST,
        clock: Callable[[], datetime] = _utc_now,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.generator = generator
        self.photos_dir = Path(photos_dir)
        self.image_glob = image_glob
        self.interval_s = interval_s
        self.retry_policy = retry_policy or RetryPolicy()
        self.log = logger or log
        self.executor = executor or BackoffExecutor(logger=self.log)
        self.max_prompt_entries = max_prompt_entries
        self.lookback_months = lookback_months
        self.tz = tz
        self.clock = clock
        self._pass_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, store: EntryStore, generator: DiaryGenerator, **kwargs) -> "IngestionScheduler":
        return cls(
            store=store,
            generator=generator,
            photos_dir=settings.photos_dir,
            image_glob=settings.image_glob,
            interval_s=settings.poll_interval_s,
            retry_policy=settings.retry_policy(),
            max_prompt_entries=settings.prompt_max_entries,
            lookback_months=settings.prompt_lookback_months,
            tz=settings.presentation_tz(),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Background task
    # ------------------------------------------------------------------

    def start(self, cancel: Optional[threading.Event] = None) -> IngestionTask:
        """Runs a pass now and every `interval_s` until `cancel` is set."""
        cancel = cancel or threading.Event()
        done = threading.Event()

        scheduler = BackgroundScheduler(timezone="UTC")
        scheduler.add_job(
            self.run_pass,
            trigger=IntervalTrigger(seconds=self.interval_s),
            id=JOB_ID,
            next_run_time=self.clock(),
            max_instances=1,  # A busy pass swallows the ticks that arrive meanwhile
            coalesce=True,
            misfire_grace_time=max(1, int(self.interval_s)),
        )
        scheduler.start()
        self.log.info(f"Ingestion scheduler started for {self.photos_dir} (every {self.interval_s:g}s)")

        thread = threading.Thread(
            target=self._supervise,
            args=(scheduler, cancel, done),
            name="IngestionSupervisor",
            daemon=True,
        )
        thread.start()
        return IngestionTask(cancel, done, thread)

    def _supervise(self, scheduler: BackgroundScheduler, cancel: threading.Event, done: threading.Event) -> None:
        try:
            cancel.wait()
            self.log.info("Stopping ingestion scheduler; waiting for the current pass to finish...")
            scheduler.shutdown(wait=True)
            self.log.info("Ingestion scheduler stopped")
        finally:
            done.set()

    # ------------------------------------------------------------------
    # One pass
    # ------------------------------------------------------------------

    def run_pass(self) -> PassReport:
        report = PassReport(started_at=self.clock())
        if not self._pass_lock.acquire(blocking=False):
            self.log.warning("Ingestion pass already running; skipping this run.")
            report.ran = False
            return report
        try:
            self._run_pass(report)
        finally:
            self._pass_lock.release()
        self.log.info(f"Ingestion pass started at {report.started_at.isoformat()}: {report.summary()}")
        return report

    def _run_pass(self, report: PassReport) -> None:
        try:
            watermark = read_watermark(self.store)
        except Exception as e:
            self.log.error(f"Failed to read latest diary created_at: {e}")
            report.aborted = True
            return

        try:
            candidates = list_candidates(self.photos_dir, self.image_glob)
        except OSError as e:
            self.log.error(f"Failed to list images in {self.photos_dir}: {e}")
            report.aborted = True
            return

        scan = build_work_list(candidates, self.store, watermark, logger=self.log)
        report.candidates = scan.candidates
        report.queued = len(scan.items)
        report.skipped = scan.already_processed + scan.unparsable + scan.superseded + scan.check_failed
        if scan.items:
            self.log.info(f"Found {len(scan.items)} new image(s) to process")

        for item in scan.items:
            try:
                created = self.process_item(item)
            except Exception as e:
                self.log.error(f"Unexpected error processing {item.image_path}: {e}", exc_info=True)
                created = False
            if created:
                report.created += 1
            else:
                report.failed += 1

    def process_item(self, item: WorkItem) -> bool:
        """Generates and stores the diary entry for one image. Returns False if it was skipped."""
        path = item.image_path

        try:
            check_image_readable(path)
        except ImageAccessError as e:
            self.log.error(f"Skipping image {path}: {e}")
            return False

        start, end = prompt_window(item.captured_at, self.lookback_months, self.tz)
        try:
            past_entries = self.store.entries_in_range(start, end)
        except Exception as e:
            self.log.error(f"Skipping image {path}: failed to load past entries: {e}")
            return False
        prompt = build_diary_prompt(past_entries, self.max_prompt_entries, self.tz)

        try:
            content = self.executor.execute(
                f"generate diary for {path}",
                lambda: self._generate(path, prompt),
                self.retry_policy,
            )
        except (RetryExhaustedError, RetryPolicyError) as e:
            self.log.error(f"Skipping image {path}: {e}")
            return False

        # A failed write drops the generated text; the image is retried from scratch next pass.
        try:
            self.store.create(path, content, item.captured_at)
        except PersistError as e:
            self.log.error(f"Failed to save diary for {path}: {e}")
            return False

        self.log.info(f"Diary created for {path}")
        return True

    def _generate(self, image_path: str, prompt: str) -> str:
        if supports_prompt(self.generator):
            text = self.generator.generate_with_prompt(image_path, prompt)
        else:
            text = self.generator.generate(image_path)
        if not text or not text.strip():
            raise GenerationError(f"generator returned an empty diary for {image_path}")
        return text
