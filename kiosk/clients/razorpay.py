"""Razorpay REST client with rate limiting and connection retries."""

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx
from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from kiosk.config import RazorpayConfig
from kiosk.errors import GatewayError
from kiosk.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class GatewayResponse:
    """Upstream status code and decoded body, passed through unchanged."""

    status_code: int
    body: Any


class RazorpayRateLimiter:
    """Client-side request limit so a busy kiosk cannot trip gateway throttling."""

    def __init__(self, requests_per_minute: int = 120):
        self.storage = MemoryStorage()
        self.limiter = MovingWindowRateLimiter(self.storage)
        self.request_limit = parse(f"{requests_per_minute}/minute")

    async def wait_for_slot(self, identifier: str = "razorpay") -> None:
        """Block until a request fits within the limit."""
        while not self.limiter.hit(self.request_limit, identifier):
            window_stats = self.limiter.get_window_stats(self.request_limit, identifier)
            wait_time = max(0.0, window_stats.reset_time - time.time())
            logger.warning(f"Gateway rate limit reached, waiting {wait_time:.2f}s")
            await asyncio.sleep(wait_time or 0.1)


class RazorpayClient:
    """Low-level Razorpay API client.

    Only connection failures are retried: once a request has reached the
    gateway, repeating it could create a second order.
    """

    def __init__(self, config: RazorpayConfig, transport: httpx.AsyncBaseTransport | None = None):
        """Initialize Razorpay client.

        Args:
            config: Gateway configuration with credentials
            transport: Optional httpx transport (tests inject a mock one)
        """
        self.config = config
        self.rate_limiter = RazorpayRateLimiter(config.requests_per_minute)
        self.client = httpx.AsyncClient(
            base_url=config.base_url,
            auth=(config.key_id, config.key_secret),
            timeout=config.timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def create_order(self, payload: dict[str, Any]) -> GatewayResponse:
        return await self._post("/orders", payload)

    async def create_payment_link(self, payload: dict[str, Any]) -> GatewayResponse:
        return await self._post("/payment_links", payload)

    async def close(self) -> None:
        await self.client.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> GatewayResponse:
        await self.rate_limiter.wait_for_slot()
        logger.debug(f"POST {path} to Razorpay")

        response = await self._request_with_retries(lambda: self.client.post(path, json=payload))
        logger.info(f"Razorpay {path} answered {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = {"raw": response.text}
        return GatewayResponse(status_code=response.status_code, body=body)

    async def _request_with_retries(self, call) -> httpx.Response:
        """Execute a request, retrying connection failures with backoff."""
        for attempt in range(self.config.max_retries):
            try:
                return await call()

            except (httpx.ConnectError, httpx.ConnectTimeout) as e:
                if attempt < self.config.max_retries - 1:
                    delay = self.config.retry_delay * (2**attempt)
                    logger.warning(f"Razorpay connection failed ({e}), retrying in {delay:.1f}s")
                    await asyncio.sleep(delay)
                    continue
                raise GatewayError(f"Payment gateway unreachable: {e}") from e

            except httpx.HTTPError as e:
                raise GatewayError(f"Payment gateway request failed: {e}") from e

        raise GatewayError(f"Failed to reach payment gateway after {self.config.max_retries} attempts")
