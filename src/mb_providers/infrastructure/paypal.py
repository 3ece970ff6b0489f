"""PayPal adapter: implements PaymentCaptureProvider and PaymentPayoutProvider.

Endpoints used:
  POST /v1/oauth2/token                       client-credentials access token
  POST /v2/checkout/orders                    open a funding order (intent CAPTURE)
  POST /v2/checkout/orders/{id}/capture       capture an approved order
  POST /v1/payments/payouts                   single-item payout batch

Any transport failure or non-2xx response raises ProviderError. Nothing is retried
here; callers treat ProviderError as "no local state changed, safe to retry".

PayPal refuses a sender_batch_id it has already accepted. send_payout reports
that refusal as the earlier payout, so re-sending the same batch is safe.
"""

import logging
from typing import Any

import httpx

from src.mb_common.cents import cents_to_decimal_str
from src.mb_common.errors import ProviderError
from src.mb_providers.domain.ports import (
    DECLINED_CAPTURE_STATUSES,
    PAYOUT_ALREADY_SENT,
    CaptureResult,
    FundingOrder,
    PayoutResult,
)

logger = logging.getLogger(__name__)

_CURRENCY = "USD"


def _is_duplicate_batch(response: httpx.Response) -> bool:
    """PayPal answers a reused sender_batch_id with 400 USER_BUSINESS_ERROR on that field."""
    if response.status_code != 400:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    if not isinstance(body, dict) or body.get("name") != "USER_BUSINESS_ERROR":
        return False
    return any(
        str(detail.get("field", "")).upper() == "SENDER_BATCH_ID"
        for detail in body.get("details", [])
    )


class PayPalClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        api_url: str,
        return_base_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._api_url = api_url.rstrip("/")
        self._return_base_url = return_base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._api_url, timeout=self._timeout, transport=self._transport
        )

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        if not self.configured:
            raise ProviderError("PayPal credentials are not configured")
        response = await client.post(
            "/v1/oauth2/token",
            auth=(self._client_id, self._client_secret),
            data={"grant_type": "client_credentials"},
        )
        if response.status_code != 200:
            raise ProviderError(f"PayPal token request failed: HTTP {response.status_code}")
        return str(response.json()["access_token"])

    async def _send(self, path: str, payload: dict[str, Any] | None) -> httpx.Response:
        try:
            async with self._client() as client:
                token = await self._access_token(client)
                response = await client.post(
                    path,
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            logger.warning("PayPal transport error: path=%s error=%s", path, exc)
            raise ProviderError(f"PayPal unreachable: {exc}") from exc
        return response

    async def _post(self, path: str, payload: dict[str, Any] | None) -> dict[str, Any]:
        return self._json(path, await self._send(path, payload))

    @staticmethod
    def _json(path: str, response: httpx.Response) -> dict[str, Any]:
        if response.status_code >= 300:
            logger.warning(
                "PayPal rejected request: path=%s status=%d body=%s",
                path,
                response.status_code,
                response.text[:500],
            )
            raise ProviderError(f"PayPal {path} failed: HTTP {response.status_code}")
        body: dict[str, Any] = response.json()
        return body

    async def create_order(
        self, amount_cents: int, description: str, reference_id: str
    ) -> FundingOrder:
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": reference_id,
                    "amount": {
                        "currency_code": _CURRENCY,
                        "value": cents_to_decimal_str(amount_cents),
                    },
                    "description": description,
                }
            ],
            "application_context": {
                "return_url": f"{self._return_base_url}/lock-success",
                "cancel_url": f"{self._return_base_url}/lock-cancel",
            },
        }
        body = await self._post("/v2/checkout/orders", payload)
        approval = next(
            (link.get("href") for link in body.get("links", []) if link.get("rel") == "approve"),
            None,
        )
        logger.info("PayPal order created: order=%s ref=%s", body.get("id"), reference_id)
        return FundingOrder(order_ref=str(body["id"]), approval_url=approval)

    async def capture_order(self, order_ref: str) -> CaptureResult:
        body = await self._post(f"/v2/checkout/orders/{order_ref}/capture", None)
        status = str(body.get("status", "UNKNOWN"))
        captures = [
            capture
            for unit in body.get("purchase_units", [])
            for capture in unit.get("payments", {}).get("captures", [])
        ]
        # A completed order can still carry a declined capture.
        if captures and captures[0].get("status") in DECLINED_CAPTURE_STATUSES:
            status = str(captures[0]["status"])
        logger.info("PayPal order captured: order=%s status=%s", order_ref, status)
        return CaptureResult(order_ref=order_ref, status=status)

    async def send_payout(
        self, batch_ref: str, receiver: str, amount_cents: int, note: str
    ) -> PayoutResult:
        payload = {
            "sender_batch_header": {
                "sender_batch_id": batch_ref,
                "email_subject": "MoneyBuddy Withdrawal",
                "email_message": "Your locked savings withdrawal has been processed.",
            },
            "items": [
                {
                    "recipient_type": "EMAIL",
                    "amount": {
                        "value": cents_to_decimal_str(amount_cents),
                        "currency": _CURRENCY,
                    },
                    "receiver": receiver,
                    "note": note,
                    "sender_item_id": f"item_{batch_ref}",
                }
            ],
        }
        response = await self._send("/v1/payments/payouts", payload)
        if _is_duplicate_batch(response):
            logger.info("PayPal payout already accepted: batch=%s", batch_ref)
            return PayoutResult(payout_ref=batch_ref, status=PAYOUT_ALREADY_SENT)
        body = self._json("/v1/payments/payouts", response)
        header = body.get("batch_header", {})
        payout_ref = str(header.get("payout_batch_id", batch_ref))
        status = str(header.get("batch_status", "UNKNOWN"))
        logger.info("PayPal payout sent: batch=%s status=%s", payout_ref, status)
        return PayoutResult(payout_ref=payout_ref, status=status)
