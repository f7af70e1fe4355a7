# app/core/notifier.py
"""
Outbound order notifications over the WhatsApp Cloud API.

Responsibilities:
  - Read WhatsApp credentials from settings.
  - Provide a single notify(message) call for services to use.
  - Apply an explicit timeout and a bounded retry with backoff.

Typical .env configuration:

    WHATSAPP_PHONE_NUMBER_ID=123456789012345
    WHATSAPP_TOKEN=EAAG...
    ADMIN_WHATSAPP_NUMBER=919999999999
"""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Callable, Protocol

import httpx

from app.core.config import Settings, get_settings
from app.core.exceptions import NotificationError

logger = logging.getLogger(__name__)

GRAPH_API_BASE = "https://graph.facebook.com"


class Notifier(Protocol):
    def notify(self, message: str) -> None:
        """Deliver `message` or raise NotificationError."""
        ...


class WhatsAppNotifier:
    """
    Sends a plain-text WhatsApp message to the shop admin.

    Retries:
      - Network errors, timeouts and non-2xx responses are retried up to
        `max_retries` extra times, sleeping `backoff`, `2 * backoff`, ...
      - Missing credentials fail immediately.
    """

    def __init__(
        self,
        phone_number_id: str | None,
        token: str | None,
        recipient: str | None,
        api_version: str = "v18.0",
        timeout: float = 10.0,
        max_retries: int = 2,
        backoff: float = 0.5,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.phone_number_id = phone_number_id
        self.token = token
        self.recipient = recipient
        self.api_version = api_version
        self.max_retries = max(0, max_retries)
        self.backoff = backoff
        self._client = client or httpx.Client(timeout=timeout)
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings) -> "WhatsAppNotifier":
        return cls(
            phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
            token=settings.WHATSAPP_TOKEN,
            recipient=settings.ADMIN_WHATSAPP_NUMBER,
            api_version=settings.WHATSAPP_API_VERSION,
            timeout=settings.OUTBOUND_TIMEOUT_SECONDS,
            max_retries=settings.NOTIFY_MAX_RETRIES,
            backoff=settings.NOTIFY_BACKOFF_SECONDS,
        )

    @property
    def url(self) -> str:
        return f"{GRAPH_API_BASE}/{self.api_version}/{self.phone_number_id}/messages"

    def _send_once(self, message: str) -> dict:
        payload = {
            "messaging_product": "whatsapp",
            "to": self.recipient,
            "type": "text",
            "text": {"body": message},
        }
        headers = {"Authorization": f"Bearer {self.token}"}
        response = self._client.post(self.url, json=payload, headers=headers)
        response.raise_for_status()
        return response.json() if response.content else {}

    def notify(self, message: str) -> None:
        """
        Send `message` to ADMIN_WHATSAPP_NUMBER.

        Raises:
            NotificationError: if credentials are missing or every attempt failed.
        """
        if not (self.phone_number_id and self.token and self.recipient):
            raise NotificationError(
                "WhatsApp is not configured. Please set WHATSAPP_PHONE_NUMBER_ID, "
                "WHATSAPP_TOKEN and ADMIN_WHATSAPP_NUMBER in .env."
            )

        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                data = self._send_once(message)
            except httpx.HTTPStatusError as e:
                reason = f"HTTP {e.response.status_code}: {e.response.text}"
            except httpx.HTTPError as e:
                reason = f"{type(e).__name__}: {e}"
            else:
                logger.info(f"✅ WhatsApp sent: {data}")
                return

            if attempt == attempts:
                logger.error(f"❌ WhatsApp failed after {attempts} attempt(s): {reason}")
                raise NotificationError()

            delay = self.backoff * (2 ** (attempt - 1))
            logger.warning(
                f"⚠️ WhatsApp attempt {attempt}/{attempts} failed ({reason}); "
                f"retrying in {delay:.1f}s"
            )
            self._sleep(delay)

    def close(self) -> None:
        self._client.close()


@lru_cache
def get_notifier() -> Notifier:
    """FastAPI dependency returning the process-wide notifier."""
    return WhatsAppNotifier.from_settings(get_settings())
