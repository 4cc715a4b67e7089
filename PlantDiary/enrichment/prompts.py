"""
This file contains all the LLM prompts used by PlantDiary.
"""

# --- Diary Generation Prompts ---

DIARY_BASE_PROMPT = (
    "Look at this photo of a plant and observe how it is growing and changing. "
    "Write a friendly observation diary entry of about 200 characters."
)

DIARY_HISTORY_INTRO = "For reference, here are the observation notes from the past month:"

DIARY_HISTORY_ENTRY = "[{day}]\n{content}"

DIARY_CONTINUITY_INSTRUCTION = (
    "Building on these earlier notes, describe the growth and changes you can see in this photo."
)
