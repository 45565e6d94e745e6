"""Payment facade over Razorpay, with a demo mode for unconfigured kiosks."""

import base64
import hashlib
import hmac
import time
from enum import StrEnum
from typing import Any

from cuid2 import cuid_wrapper

from kiosk.clients.razorpay import GatewayResponse, RazorpayClient
from kiosk.config import RazorpayConfig
from kiosk.errors import InputValidationError
from kiosk.utils.logging import get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()

MOCK_PAYMENT_LINK = "https://rzp.io/i/mock-payment-link"


class VerificationStatus(StrEnum):
    VERIFIED = "VERIFIED"
    VERIFIED_DEMO = "VERIFIED_DEMO"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


def to_paise(amount: float | int | str) -> int:
    """Convert a rupee amount to paise, rounding to the nearest paisa."""
    try:
        return round(float(amount) * 100)
    except (TypeError, ValueError) as e:
        raise InputValidationError(f"Invalid amount: {amount!r}") from e


def sign_payment(secret: str, order_id: str, payment_id: str) -> bytes:
    """HMAC-SHA256 digest Razorpay uses to sign a completed payment."""
    payload = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), payload, hashlib.sha256).digest()


def _now_millis() -> int:
    return int(time.time() * 1000)


class PaymentService:
    """Order creation, payment links, and signature verification.

    Without credentials every call is answered locally so the kiosk flow can
    be demonstrated end to end.
    """

    def __init__(self, config: RazorpayConfig, client: RazorpayClient | None = None):
        self.config = config
        self.client = client

    @property
    def demo_mode(self) -> bool:
        return not self.config.has_credentials or self.client is None

    async def create_order(
        self, amount: float | int | str, currency: str = "INR", receipt: str | None = None
    ) -> GatewayResponse:
        amount_paise = to_paise(amount)

        if self.demo_mode:
            logger.info(f"Demo mode: returning mock order for {amount_paise} paise")
            return GatewayResponse(
                status_code=200,
                body={
                    "id": f"order_mock_{_now_millis()}",
                    "amount": amount_paise,
                    "currency": currency,
                    "key": self.config.key_id,
                },
            )

        payload = {
            "amount": amount_paise,
            "currency": currency,
            "receipt": receipt or f"rcpt_{cuid()}",
            "payment_capture": 1,
        }
        return await self.client.create_order(payload)

    def public_key(self) -> dict[str, str]:
        return {"key": self.config.key_id.strip()}

    async def create_payment_link(
        self,
        amount: float | int | str,
        currency: str = "INR",
        customer: dict[str, Any] | None = None,
    ) -> GatewayResponse:
        if self.demo_mode:
            logger.info("Demo mode: returning mock payment link")
            return GatewayResponse(status_code=200, body={"short_url": MOCK_PAYMENT_LINK})

        details: dict[str, str] = {}
        if customer is not None:
            details = {key: str(customer.get(key) or "") for key in ("name", "email", "contact")}

        payload = {"amount": to_paise(amount), "currency": currency, "customer": details}
        return await self.client.create_payment_link(payload)

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> VerificationStatus:
        """Check a checkout signature against the configured secret.

        Razorpay sends hex; base64 is accepted too. Hex comparison ignores case.
        """
        secret = self.config.key_secret
        if not secret.strip():
            logger.info(f"Demo mode: accepting signature for order {order_id}")
            return VerificationStatus.VERIFIED_DEMO

        digest = sign_payment(secret, order_id, payment_id)
        expected_hex = digest.hex()
        expected_b64 = base64.b64encode(digest).decode()

        supplied = signature.encode()
        if hmac.compare_digest(expected_hex.encode(), supplied.lower()):
            return VerificationStatus.VERIFIED
        if hmac.compare_digest(expected_b64.encode(), supplied):
            return VerificationStatus.VERIFIED

        logger.warning(f"Signature mismatch for order {order_id}, payment {payment_id}")
        return VerificationStatus.INVALID_SIGNATURE
