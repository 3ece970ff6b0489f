"""Bounded retry policy for balance feed reads.

The policy is data passed in by the caller; the loop always terminates
after max_attempts.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from src.mb_common.errors import BalanceUnavailableError
from src.mb_providers.domain.ports import BalanceFeed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    backoff_seconds: tuple[float, ...] = (1.0, 5.0, 15.0)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def delay_before(self, attempt: int) -> float:
        """Delay before retry number `attempt` (1-based); last entry repeats."""
        if not self.backoff_seconds:
            return 0.0
        index = min(attempt - 1, len(self.backoff_seconds) - 1)
        return self.backoff_seconds[index]


async def fetch_balance_with_retry(
    feed: BalanceFeed,
    account_id: str,
    policy: RetryPolicy,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int | None:
    """Fetch from the feed, retrying only BalanceUnavailableError."""
    attempt = 1
    while True:
        try:
            return await feed.fetch_balance(account_id)
        except BalanceUnavailableError:
            if attempt >= policy.max_attempts:
                logger.warning(
                    "Balance feed gave up: account=%s attempts=%d", account_id, attempt
                )
                raise
            delay = policy.delay_before(attempt)
            logger.info(
                "Balance feed retry: account=%s attempt=%d/%d delay=%.1fs",
                account_id,
                attempt + 1,
                policy.max_attempts,
                delay,
            )
            await sleep(delay)
            attempt += 1
