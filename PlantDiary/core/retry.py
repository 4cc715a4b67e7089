"""
Fixed-schedule retry for unreliable calls.

The generator is rate limited and flaky, so each call runs under a
`RetryPolicy`: one first attempt, then up to `max_retries` more, sleeping
`intervals[i]` seconds before retry `i + 1`. The sleep function is injected so
tests can observe the exact schedule without waiting.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from PlantDiary.errors import RetryExhaustedError, RetryPolicyError

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    intervals: Tuple[float, ...] = (1.0, 2.0, 4.0)

    def validate(self) -> None:
        if self.max_retries < 0:
            raise RetryPolicyError(f"max_retries must be >= 0 (got {self.max_retries})")
        if len(self.intervals) < self.max_retries:
            raise RetryPolicyError(
                f"intervals length ({len(self.intervals)}) is less than max_retries ({self.max_retries})"
            )

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_intervals(cls, intervals: Sequence[float]) -> "RetryPolicy":
        return cls(max_retries=len(intervals), intervals=tuple(intervals))


class BackoffExecutor:
    """Runs a callable under a `RetryPolicy`, sleeping between failed attempts."""

    def __init__(self, sleep_fn: Callable[[float], None] = time.sleep, logger: Optional[logging.Logger] = None):
        self.sleep_fn = sleep_fn
        self.log = logger or log

    def execute(self, operation: str, fn: Callable[[], T], policy: RetryPolicy) -> T:
        """
        Call `fn` until it succeeds or the policy is exhausted.

        Raises RetryPolicyError before calling `fn` if the policy is invalid,
        and RetryExhaustedError (chained from the last failure) once every
        attempt has failed.
        """
        policy.validate()
        total = policy.total_attempts

        for attempt in range(1, total + 1):
            try:
                return fn()
            except Exception as e:
                if attempt < total:
                    interval = policy.intervals[attempt - 1]
                    self.log.warning(
                        f"{operation} failed (attempt {attempt}/{total}): {e}. Retrying in {interval}s..."
                    )
                    self.sleep_fn(interval)
                    continue
                self.log.error(f"{operation} failed (attempt {attempt}/{total}): {e}. No more retries.")
                raise RetryExhaustedError(operation, total, e) from e

        # Unreachable: the loop either returns or raises on the last attempt.
        raise RetryPolicyError(f"{operation}: retry loop exited without a result")
