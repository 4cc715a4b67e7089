from __future__ import annotations
from datetime import datetime, tzinfo
from typing import List, Sequence, Tuple

from PlantDiary.core.timeutil import JST, ensure_utc, local_day_start, subtract_months
from PlantDiary.enrichment import prompts
from PlantDiary.models import DiaryEntry

MAX_PAST_ENTRIES_IN_PROMPT = 30
DATE_HEADER_FORMAT = "%Y-%m-%d"


def prompt_window(captured_at: datetime, months: int = 1, tz: tzinfo = JST) -> Tuple[datetime, datetime]:
    """
    Lookback range for an image's prompt context: the `months` calendar months
    before the capture day, ending (exclusive) at midnight of that day in `tz`.
    """
    end = local_day_start(captured_at, tz)
    start_local = subtract_months(end.astimezone(tz), months)
    return ensure_utc(start_local), end


def build_diary_prompt(
    past_entries: Sequence[DiaryEntry],
    max_entries: int = MAX_PAST_ENTRIES_IN_PROMPT,
    tz: tzinfo = JST,
) -> str:
    """
    Composes the generation prompt. `past_entries` must already be sorted
    oldest first; only the newest `max_entries` are rendered, in that order.
    With no history the base instruction is returned unchanged.
    """
    included: List[DiaryEntry] = list(past_entries)
    if max_entries >= 0 and len(included) > max_entries:
        included = included[len(included) - max_entries:]
    if not included:
        return prompts.DIARY_BASE_PROMPT

    blocks = [prompts.DIARY_BASE_PROMPT, prompts.DIARY_HISTORY_INTRO]
    for entry in included:
        day = ensure_utc(entry.created_at).astimezone(tz).strftime(DATE_HEADER_FORMAT)
        blocks.append(prompts.DIARY_HISTORY_ENTRY.format(day=day, content=entry.content))
    blocks.append(prompts.DIARY_CONTINUITY_INSTRUCTION)
    return "\n\n".join(blocks)
