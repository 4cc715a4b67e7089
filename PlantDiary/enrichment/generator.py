"""
Generation client interfaces.

Two capability shapes exist: every client can `generate(image_path)`; clients
that also accept a context prompt subclass `PromptAwareDiaryGenerator`. The
scheduler asks `supports_prompt()` at call time and falls back to the plain
shape otherwise.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from PlantDiary.errors import ImageAccessError

log = logging.getLogger(__name__)

MOCK_DIARY_TEXT = (
    "The plant is growing steadily. The leaves have a bright color and a few new buds are showing."
)


def read_image_file(path: Union[str, Path]) -> bytes:
    """Reads an image, raising ImageAccessError if it is missing, a directory or empty."""
    path = Path(path)
    try:
        st = path.stat()
    except OSError as e:
        raise ImageAccessError(f"failed to access image file {path}: {e}") from e
    if path.is_dir():
        raise ImageAccessError(f"path is a directory, not an image file: {path}")
    if st.st_size == 0:
        raise ImageAccessError(f"image file is empty: {path}")
    try:
        return path.read_bytes()
    except OSError as e:
        raise ImageAccessError(f"failed to read image file {path}: {e}") from e


def check_image_readable(path: Union[str, Path]) -> None:
    """Pre-flight check used before spending a generation call."""
    read_image_file(path)


class DiaryGenerator(ABC):
    """Turns a photo into diary text. Failures raise GenerationError."""

    @abstractmethod
    def generate(self, image_path: str) -> str:
        ...


class PromptAwareDiaryGenerator(DiaryGenerator):
    """A generator that can be steered with a caller-built prompt."""

    @abstractmethod
    def generate_with_prompt(self, image_path: str, prompt: str) -> str:
        ...


def supports_prompt(generator: DiaryGenerator) -> bool:
    return isinstance(generator, PromptAwareDiaryGenerator)


class MockDiaryGenerator(PromptAwareDiaryGenerator):
    """Offline generator used when no Gemini key is configured. Ignores the prompt."""

    def __init__(self, text: str = MOCK_DIARY_TEXT):
        self.text = text

    def generate(self, image_path: str) -> str:
        return self.text

    def generate_with_prompt(self, image_path: str, prompt: str) -> str:
        return self.text
