import logging

import pytest

from PlantDiary.core.timeutil import MIN_INSTANT
from PlantDiary.database.memory import InMemoryEntryStore
from PlantDiary.errors import StoreError
from PlantDiary.ingestion.scanner import build_work_list, list_candidates, read_watermark

from helpers import utc


class BrokenLookupStore(InMemoryEntryStore):
    def __init__(self, broken_path):
        super().__init__()
        self.broken_path = broken_path

    def is_processed(self, image_path):
        if image_path == self.broken_path:
            raise StoreError("lookup failed")
        return super().is_processed(image_path)


def test_list_candidates_matches_pattern_and_sorts(photos_dir, make_photo):
    make_photo("20260216_1110_UTC.jpg")
    make_photo("20260215_0900_UTC.jpg")
    make_photo("notes.txt")
    (photos_dir / "nested.jpg").mkdir()

    candidates = list_candidates(photos_dir)

    assert candidates == [
        str(photos_dir / "20260215_0900_UTC.jpg"),
        str(photos_dir / "20260216_1110_UTC.jpg"),
    ]


def test_list_candidates_missing_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        list_candidates(tmp_path / "nope")


def test_watermark_defaults_to_min_instant(store):
    assert read_watermark(store) == MIN_INSTANT
    store.create("/p/a.jpg", "x", utc(2026, 2, 16, 11, 10))
    assert read_watermark(store) == utc(2026, 2, 16, 11, 10)


def test_work_list_filters_and_orders(store, caplog):
    store.create("/p/20260216_1200_UTC.jpg", "noon", utc(2026, 2, 16, 12, 0))
    candidates = [
        "/p/20260216_1200_UTC.jpg",   # already recorded
        "/p/20260216_1110_UTC.jpg",   # older than the newest entry
        "/p/20260217_0800.jpg",       # legacy name, newer
        "/p/20260216_1300_UTC.jpg",
        "/p/garden.jpg",
    ]

    with caplog.at_level(logging.WARNING):
        result = build_work_list(candidates, store, read_watermark(store))

    assert [item.image_path for item in result.items] == ["/p/20260216_1300_UTC.jpg", "/p/20260217_0800.jpg"]
    assert result.items[1].captured_at == utc(2026, 2, 17, 8, 0)
    assert result.candidates == 5
    assert result.already_processed == 1
    assert result.superseded == 1
    assert result.unparsable == 1
    assert any("garden.jpg" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)


def test_capture_equal_to_watermark_is_not_queued(store):
    store.create("/p/other.jpg", "x", utc(2026, 2, 16, 12, 0))
    result = build_work_list(["/p/20260216_1200.jpg"], store, read_watermark(store))
    assert result.items == []
    assert result.superseded == 1


def test_lookup_failure_skips_only_that_path():
    store = BrokenLookupStore("/p/20260216_1110_UTC.jpg")
    result = build_work_list(
        ["/p/20260216_1110_UTC.jpg", "/p/20260216_1120_UTC.jpg"], store, MIN_INSTANT
    )
    assert [item.image_path for item in result.items] == ["/p/20260216_1120_UTC.jpg"]
    assert result.check_failed == 1
