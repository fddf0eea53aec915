"""Bounded retry with pluggable backoff and a run-wide deadline.

This module provides:
- linear_backoff, exponential_backoff: Delay as a pure function of attempt
- Deadline: A single deadline governing a whole transfer run
- RetryPolicy: Attempt bound, backoff and sleep bundled together
- retry_with_backoff: Execute a function under a RetryPolicy
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from chunkgate.client.transfer.types import DeadlineExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_UNIT = 1.0  # seconds
DEFAULT_MAX_BACKOFF = 60.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0

BackoffFunc = Callable[[int], float]


def linear_backoff(attempt: int, unit: float = DEFAULT_BACKOFF_UNIT) -> float:
    """Delay before retry number `attempt` (1-based): attempt * unit seconds."""
    return max(attempt, 0) * unit


def exponential_backoff(
    attempt: int,
    initial: float = DEFAULT_BACKOFF_UNIT,
    multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
    maximum: float = DEFAULT_MAX_BACKOFF,
) -> float:
    """Delay before retry number `attempt` (1-based), doubling each time."""
    if attempt <= 0:
        return 0.0
    return float(min(initial * multiplier ** (attempt - 1), maximum))


class Deadline:
    """Deadline shared by every request of one transfer run."""

    def __init__(
        self,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Start the deadline clock.

        Args:
            timeout: Seconds from now until the deadline.
            clock: Monotonic clock, replaceable in tests.
        """
        self._clock = clock
        self._timeout = timeout
        self._expires_at = clock() + timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(self._expires_at - self._clock(), 0.0)

    @property
    def expired(self) -> bool:
        return self._clock() >= self._expires_at

    def check(self, what: str) -> None:
        """Raise DeadlineExceededError if the deadline has passed.

        Args:
            what: Description of the step being abandoned, for the message.
        """
        if self.expired:
            raise DeadlineExceededError(
                f"Deadline of {self._timeout:.1f}s exceeded before {what}"
            )


@dataclass
class RetryPolicy:
    """How many times to retry, how long to wait, and how to wait.

    Attributes:
        max_retries: Retries after the first attempt.
        backoff: Delay in seconds as a function of the 1-based retry number.
        sleep: Blocking wait, replaceable in tests.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    backoff: BackoffFunc = linear_backoff
    sleep: Callable[[float], Any] = time.sleep

    def call(
        self,
        func: Callable[[], T],
        retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
        deadline: Deadline | None = None,
        description: str = "operation",
    ) -> T:
        """Execute func under this policy. See retry_with_backoff."""
        return retry_with_backoff(
            func,
            max_retries=self.max_retries,
            backoff=self.backoff,
            retryable_exceptions=retryable_exceptions,
            deadline=deadline,
            sleep=self.sleep,
            description=description,
        )


def retry_with_backoff(
    func: Callable[[], T],
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff: BackoffFunc = linear_backoff,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    deadline: Deadline | None = None,
    sleep: Callable[[float], Any] = time.sleep,
    description: str = "operation",
) -> T:
    """Execute a function with bounded retry.

    Exceptions outside retryable_exceptions propagate immediately. Once
    the deadline has expired no further attempt is started, even if
    retries remain.

    Args:
        func: Function to execute.
        max_retries: Maximum number of retry attempts.
        backoff: Delay in seconds before retry number N.
        retryable_exceptions: Tuple of exception types to retry on.
        deadline: Optional run-wide deadline.
        sleep: Function used to wait between attempts.
        description: Name of the operation, for log messages.

    Returns:
        Result of the function.

    Raises:
        DeadlineExceededError: If the deadline expires between attempts.
        The last exception if all retries fail.
    """
    for attempt in range(max_retries + 1):
        if deadline is not None:
            deadline.check(description)
        try:
            return func()
        except retryable_exceptions as e:
            if deadline is not None and deadline.expired:
                raise DeadlineExceededError(
                    f"Deadline of {deadline.timeout:.1f}s exceeded during "
                    f"{description}: {e}"
                ) from e
            if attempt == max_retries:
                logger.error(f"{description}: all {max_retries} retries failed: {e}")
                raise

            delay = backoff(attempt + 1)
            logger.warning(
                f"{description}: attempt {attempt + 1}/{max_retries + 1} failed: "
                f"{e}. Retrying in {delay:.1f}s..."
            )
            sleep(delay)

    # max_retries < 0 means no attempt at all
    raise ValueError("max_retries must be >= 0")
