"""WaafiPay mobile-money gateway client.

Wraps the WaafiPay purchase API (``POST /asm`` with the ``API_PURCHASE``
service envelope) used for EVC Plus, ZAAD and eDahab wallets.

- **Demo mode**: when ``PAYMENT_DEMO_MODE`` is on, or any merchant
  credential is missing, no request leaves the process.  A payer phone
  ending in ``0`` is declined for insufficient funds; everything else
  succeeds with a ``DEMO_TXN_`` transaction id.
- **Ownership**: the client is built once by the application lifespan via
  :meth:`WaafiPayClient.from_settings` and handed to request handlers
  through ``app.state``.  It owns an ``httpx.Client`` that is closed on
  shutdown.

Safety rule: payer phones are never logged.
"""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

import httpx

from coursehub.core.settings import Settings
from coursehub.payments.methods import PaymentMethod

logger = logging.getLogger(__name__)

WAAFI_SUCCESS_CODE = "2001"

# ---------------------------------------------------------------------------
# Custom exceptions
# ---------------------------------------------------------------------------


class PaymentGatewayError(ConnectionError):
    """Raised when the gateway is unreachable or its reply cannot be used."""


class PaymentGatewayTimeoutError(TimeoutError):
    """Raised when the gateway request exceeds the configured timeout."""


@dataclass(frozen=True, slots=True)
class GatewayResult:
    success: bool
    message: str
    transaction_id: str | None = None


# ---------------------------------------------------------------------------
# WaafiPayClient
# ---------------------------------------------------------------------------


class WaafiPayClient:
    """Synchronous client for the WaafiPay purchase API.

    Parameters
    ----------
    base_url:
        API root, e.g. ``"https://api.waafipay.net"``.
    merchant_uid, api_user_id, api_key:
        Merchant credentials.  When any is missing the client runs in demo
        mode regardless of *demo_mode*.
    timeout_s:
        Request timeout in seconds.
    demo_mode:
        Simulate payments instead of calling the API.
    demo_delay_s:
        Artificial processing delay applied to simulated payments.
    http_client:
        Optional pre-built ``httpx.Client`` (tests pass one backed by
        ``httpx.MockTransport``).
    """

    def __init__(
        self,
        *,
        base_url: str,
        merchant_uid: str | None = None,
        api_user_id: str | None = None,
        api_key: str | None = None,
        timeout_s: float = 30,
        demo_mode: bool = True,
        demo_delay_s: float = 0.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.merchant_uid = merchant_uid
        self.api_user_id = api_user_id
        self.api_key = api_key
        self.timeout_s = timeout_s
        self.demo_delay_s = demo_delay_s
        self.demo_mode = demo_mode or not self.has_credentials
        self._http = http_client or httpx.Client(timeout=timeout_s)

    @classmethod
    def from_settings(cls, settings: Settings, *, http_client: httpx.Client | None = None) -> WaafiPayClient:
        return cls(
            base_url=settings.waafi_base_url,
            merchant_uid=settings.waafi_merchant_uid,
            api_user_id=settings.waafi_api_user_id,
            api_key=settings.waafi_api_key,
            timeout_s=settings.waafi_timeout_s,
            demo_mode=settings.payment_demo_mode,
            demo_delay_s=settings.payment_demo_delay_s,
            http_client=http_client,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.merchant_uid and self.api_user_id and self.api_key)

    def close(self) -> None:
        self._http.close()

    # -- public API ---------------------------------------------------------

    def charge(
        self,
        *,
        phone: str,
        amount: Decimal,
        method: PaymentMethod,
        reference: str,
        description: str = "",
    ) -> GatewayResult:
        """Request *amount* USD from the wallet behind *phone*.

        Raises
        ------
        PaymentGatewayError
            If the gateway is unreachable, returns an HTTP error or answers
            with something other than a JSON object.
        PaymentGatewayTimeoutError
            If the request exceeds the configured timeout.
        """
        label = method.value.upper()
        if self.demo_mode:
            return self._simulate(phone=phone, amount=amount, label=label)

        logger.info("Processing %s payment reference=%s", label, reference)
        payload = self._purchase_payload(
            phone=phone, amount=amount, reference=reference, description=description
        )
        try:
            response = self._http.post(f"{self.base_url}/asm", json=payload, timeout=self.timeout_s)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise PaymentGatewayTimeoutError(
                f"WaafiPay request timed out after {self.timeout_s}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise PaymentGatewayError(f"WaafiPay HTTP error: {exc}") from exc
        except ValueError as exc:
            raise PaymentGatewayError("WaafiPay returned a non-JSON response") from exc

        if not isinstance(data, dict):
            raise PaymentGatewayError(
                f"WaafiPay returned unexpected payload type {type(data).__name__}"
            )
        code = str(data.get("responseCode", ""))
        params = data.get("params")
        if not isinstance(params, dict):
            params = {}
        transaction_id = params.get("transactionId") or f"TXN_{int(time.time() * 1000)}"

        if code == WAAFI_SUCCESS_CODE:
            return GatewayResult(
                success=True,
                transaction_id=transaction_id,
                message=f"{label} payment successful - ${amount}",
            )

        reason = data.get("responseMsg") or "Unknown error"
        logger.warning("WaafiPay declined reference=%s code=%s", reference, code)
        return GatewayResult(success=False, message=f"Payment failed: {reason}")

    # -- internals ----------------------------------------------------------

    def _simulate(self, *, phone: str, amount: Decimal, label: str) -> GatewayResult:
        logger.info("Demo mode: processing %s payment", label)
        if self.demo_delay_s > 0:
            time.sleep(self.demo_delay_s)

        if phone.endswith("0"):
            return GatewayResult(
                success=False,
                message=f"{label} payment failed - Insufficient funds (Demo Mode)",
            )
        return GatewayResult(
            success=True,
            transaction_id=f"DEMO_TXN_{int(time.time() * 1000)}_{label}",
            message=f"{label} payment successful - ${amount} (Demo Mode)",
        )

    def _purchase_payload(
        self,
        *,
        phone: str,
        amount: Decimal,
        reference: str,
        description: str,
    ) -> dict:
        now = datetime.now(timezone.utc)
        return {
            "schemaVersion": "1.0",
            "requestId": str(uuid.uuid4()),
            "timestamp": now.strftime("%Y-%m-%d %H:%M:%S"),
            "channelName": "WEB",
            "serviceName": "API_PURCHASE",
            "serviceParams": {
                "merchantUid": self.merchant_uid,
                "apiUserId": self.api_user_id,
                "apiKey": self.api_key,
                "paymentMethod": "MWALLET_ACCOUNT",
                "payerInfo": {"accountNo": phone},
                "transactionInfo": {
                    "referenceId": reference,
                    "invoiceId": f"CH_{int(now.timestamp() * 1000)}",
                    "amount": str(amount),
                    "currency": "USD",
                    "description": description,
                },
            },
        }
