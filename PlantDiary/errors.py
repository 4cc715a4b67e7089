"""Exception hierarchy shared by the ingestion pipeline and its collaborators."""
from __future__ import annotations

from typing import Optional


class PlantDiaryError(Exception):
    """Base class for every error raised by PlantDiary."""


class InitializationError(PlantDiaryError):
    """A store or generation client could not be set up at startup."""


class ImageAccessError(PlantDiaryError):
    """The image file is missing, unreadable, a directory or empty."""


class FilenameFormatError(PlantDiaryError, ValueError):
    """The filename does not follow either capture-timestamp grammar."""


class GenerationError(PlantDiaryError):
    """The external generator failed, timed out or returned nothing usable."""


class RetryPolicyError(PlantDiaryError, ValueError):
    """A retry policy is malformed and cannot be executed."""


class RetryExhaustedError(PlantDiaryError):
    """Every attempt of a retried operation failed."""

    def __init__(self, operation: str, attempts: int, last_error: BaseException):
        super().__init__(f"{operation} failed after {attempts} attempts: {last_error}")
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


class StoreError(PlantDiaryError):
    """A read from the entry store failed."""


class PersistError(PlantDiaryError):
    """Writing a diary entry failed."""


class DuplicatePathError(PersistError):
    """An entry for this image path already exists."""

    def __init__(self, image_path: str, cause: Optional[BaseException] = None):
        super().__init__(f"diary entry already exists for {image_path}")
        self.image_path = image_path
        self.cause = cause
