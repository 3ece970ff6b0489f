"""HTTP balance feed: reads balances pushed into an aggregator sync service.

GET {base_url}/accounts/{account_id}/balance -> {"balance_cents": int | null}
5xx / transport errors are transient (BalanceUnavailableError, retried by the
caller's RetryPolicy); 4xx is a hard ProviderError.
"""

import httpx

from src.mb_common.errors import BalanceUnavailableError, ProviderError


class HttpBalanceFeed:
    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def fetch_balance(self, account_id: str) -> int | None:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.get(f"/accounts/{account_id}/balance")
        except httpx.HTTPError as exc:
            raise BalanceUnavailableError(str(exc)) from exc

        if response.status_code >= 500:
            raise BalanceUnavailableError(f"feed returned HTTP {response.status_code}")
        if response.status_code >= 400:
            raise ProviderError(f"balance feed rejected account {account_id}: "
                                f"HTTP {response.status_code}")
        value = response.json().get("balance_cents")
        return None if value is None else int(value)
