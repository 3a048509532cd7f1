"""Ledger webhook client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from typing import Dict, Any
from cashflow_gateway.config import settings
from cashflow_gateway.domain.exceptions import LedgerDeliveryError
from cashflow_gateway.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter


class LedgerClient:
    """Client for publishing settlement plans to the ledger service"""

    def __init__(self, webhook_url: str | None = None):
        self.webhook_url = webhook_url or settings.ledger_webhook_url
        self.timeout = settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_settlement_event(self, payload: Dict[str, Any]) -> None:
        """
        Send a settlement plan event to the ledger with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^(attempt-1))
        - Retries on 5xx/4xx responses and network failures
        - Tracks latency histogram and failure counter

        Raises:
            LedgerDeliveryError: when every attempt failed
        """
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                        return

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    if attempt >= self.max_retries:
                        logging.error(
                            f"Ledger webhook failed after {attempt} attempts: {e}",
                            extra={"run_id": payload.get("run_id")},
                        )
                        raise LedgerDeliveryError(f"Ledger webhook failed after {attempt} attempts") from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
