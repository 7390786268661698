"""Retry policy for flaky remote calls.

A single configurable policy wraps the remote post listing and the
create/update calls.  Errors are not classified: any exception raised by
the wrapped operation is retried, and once the attempts are exhausted the
last exception propagates unchanged.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

LINEAR = "linear"
EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retries with a linear or exponential backoff schedule.

    Attributes:
        attempts: Total number of calls, including the first one.
        backoff: ``"linear"`` (``delay * n``) or ``"exponential"``
            (``initial_delay + delay * 2 ** (n - 1)``) for retry ``n``.
        delay: Base delay in seconds.
        initial_delay: Extra delay added to each exponential step.
        max_delay: Upper bound for a single sleep.
        sleep: Sleep function, replaceable in tests.
    """

    attempts: int = 5
    backoff: str = LINEAR
    delay: float = 0.5
    initial_delay: float = 0.0
    max_delay: float = 30.0
    sleep: Callable[[float], None] = field(
        default=time.sleep, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.backoff not in (LINEAR, EXPONENTIAL):
            raise ValueError(
                f"Invalid backoff '{self.backoff}': must be '{LINEAR}' or '{EXPONENTIAL}'"
            )

    def delay_for(self, retry: int) -> float:
        """Return the sleep before retry number ``retry`` (1-based)."""
        if self.backoff == EXPONENTIAL:
            wait = self.initial_delay + self.delay * 2 ** (retry - 1)
        else:
            wait = self.delay * retry
        return min(wait, self.max_delay)

    def call(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Call ``func(*args, **kwargs)``, retrying on any exception.

        Raises:
            Exception: The last exception raised by ``func`` once all
                attempts are used up.
        """
        for attempt in range(1, self.attempts + 1):
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                if attempt >= self.attempts:
                    logger.error(
                        "Giving up after %d attempts: %s", attempt, exc
                    )
                    raise
                wait = self.delay_for(attempt)
                logger.warning(
                    "Attempt %d/%d failed (%s), retrying in %.1fs",
                    attempt,
                    self.attempts,
                    exc,
                    wait,
                )
                self.sleep(wait)

        # Unreachable: the loop either returns or raises
        raise RuntimeError("retry loop exited without a result")
