"""Minimal synchronous retry with explicit error contracts.

Design goals:
- Explicit state (policy + attempt counters)
- Injected sleep so callers and tests control wall-clock delay
- No brittle substring matching for retry decisions
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import TYPE_CHECKING, TypeVar

from geminiapp.errors import APIError, RetryExhaustedError

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff.

    The delay before retry ``i`` (0-indexed) is
    ``initial_delay_s * backoff_multiplier ** i``, capped at ``max_delay_s``
    when set. Defaults give 1, 2, 4, 8 seconds across five attempts.
    """

    max_attempts: int = 5
    initial_delay_s: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay_s: float | None = None

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s is not None and self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0 or None")


def compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    """Return the delay in seconds before retry ``retry_index`` (0-indexed)."""
    delay = policy.initial_delay_s * (policy.backoff_multiplier ** max(0, retry_index))
    if policy.max_delay_s is not None:
        delay = min(policy.max_delay_s, delay)
    return max(0.0, delay)


def should_retry(exc: BaseException) -> bool:
    """Return True when the dispatcher marked *exc* as transient."""
    return isinstance(exc, APIError) and exc.retryable is True


def retry_call(
    factory: Callable[[], T],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = should_retry,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run *factory* with bounded retries.

    Non-retryable errors propagate unchanged on the attempt that raised them.
    When every attempt fails transiently, RetryExhaustedError is raised from
    the last failure. No sleep follows the final attempt.
    """
    last_exc: APIError | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return factory()
        except APIError as exc:
            if not should_retry(exc):
                raise
            last_exc = exc
            if attempt >= policy.max_attempts:
                break

            delay = compute_backoff_delay(policy, retry_index=attempt - 1)
            logger.warning(
                "Retrying after %s response from the server "
                "(attempt %d/%d, sleeping %.2fs)",
                exc.status_code if exc.status_code is not None else "transport",
                attempt,
                policy.max_attempts,
                delay,
            )
            if delay > 0:
                sleep(delay)

    if last_exc is None:  # pragma: no cover
        raise RuntimeError("retry_call exhausted without an exception")

    logger.error(
        "Giving up after %d attempts; last status was %s",
        policy.max_attempts,
        last_exc.status_code,
    )
    raise RetryExhaustedError(
        f"Failed to call API after {policy.max_attempts} attempts",
        hint="The service kept returning transient errors; try again later.",
        status_code=last_exc.status_code,
        body=last_exc.body,
        attempts=policy.max_attempts,
    ) from last_exc
