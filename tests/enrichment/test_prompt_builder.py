from datetime import timedelta

import pytest

from PlantDiary.enrichment import prompts
from PlantDiary.enrichment.prompt_builder import MAX_PAST_ENTRIES_IN_PROMPT, build_diary_prompt, prompt_window
from PlantDiary.models import DiaryEntry

from helpers import utc


def make_entries(count, start=utc(2026, 1, 1, 3, 0)):
    return [
        DiaryEntry(
            id=str(i),
            image_path=f"/p/{i}.jpg",
            content=f"diary #{i:02d}",
            created_at=start + timedelta(days=i),
        )
        for i in range(count)
    ]


def test_no_history_returns_base_prompt():
    assert build_diary_prompt([]) == prompts.DIARY_BASE_PROMPT


def test_zero_cap_returns_base_prompt():
    assert build_diary_prompt(make_entries(3), max_entries=0) == prompts.DIARY_BASE_PROMPT


def test_history_layout():
    prompt = build_diary_prompt(make_entries(2))
    assert prompt == "\n\n".join([
        prompts.DIARY_BASE_PROMPT,
        prompts.DIARY_HISTORY_INTRO,
        "[2026-01-01]\ndiary #00",
        "[2026-01-02]\ndiary #01",
        prompts.DIARY_CONTINUITY_INSTRUCTION,
    ])


def test_only_newest_entries_are_kept():
    prompt = build_diary_prompt(make_entries(40))

    assert MAX_PAST_ENTRIES_IN_PROMPT == 30
    for i in range(10):
        assert f"diary #{i:02d}" not in prompt
    for i in range(10, 40):
        assert f"diary #{i:02d}" in prompt
    assert prompt.index("diary #10") < prompt.index("diary #39")


def test_custom_cap():
    prompt = build_diary_prompt(make_entries(5), max_entries=2)
    assert "diary #02" not in prompt
    assert "diary #03" in prompt and "diary #04" in prompt


@pytest.mark.parametrize("created_at,header", [
    (utc(2026, 2, 15, 14, 59), "[2026-02-15]"),
    (utc(2026, 2, 15, 15, 0), "[2026-02-16]"),
])
def test_headers_use_jst_calendar_day(created_at, header):
    entry = DiaryEntry(id="1", image_path="/p/x.jpg", content="leaf", created_at=created_at)
    assert f"{header}\nleaf" in build_diary_prompt([entry])


def test_window_covers_previous_month_up_to_capture_day():
    start, end = prompt_window(utc(2026, 2, 16, 11, 10))   # 2026-02-16 20:10 JST
    assert end == utc(2026, 2, 15, 15, 0)                  # 2026-02-16 00:00 JST
    assert start == utc(2026, 1, 15, 15, 0)                # 2026-01-16 00:00 JST


def test_window_uses_jst_day_not_utc_day():
    start, end = prompt_window(utc(2026, 2, 15, 16, 0))    # already 2026-02-16 in JST
    assert end == utc(2026, 2, 15, 15, 0)


def test_window_clamps_short_months():
    start, end = prompt_window(utc(2026, 3, 31, 1, 0))     # 2026-03-31 10:00 JST
    assert end == utc(2026, 3, 30, 15, 0)
    assert start == utc(2026, 2, 27, 15, 0)                # 2026-02-28 00:00 JST
