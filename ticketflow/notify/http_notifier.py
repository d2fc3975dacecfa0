"""HTTP notifier: POST the ticket as JSON to the notification service, once, with a bounded timeout."""
import logging

import httpx

from ticketflow.config import get_config
from ticketflow.notify.base import Delivered, DeliveryResult, Failed, NotifierAdapter
from ticketflow.triage.tickets import Ticket

logger = logging.getLogger(__name__)


class HttpNotifier(NotifierAdapter):
    """Single attempt per ticket. 2xx = Delivered; anything else (status, transport, timeout) = Failed."""

    def __init__(
        self,
        *,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        cfg = get_config()
        self._url = url or cfg.notify_url
        self._timeout = timeout if timeout is not None else cfg.notify_timeout_seconds
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout)
        return self._client

    def notify(self, ticket: Ticket) -> DeliveryResult:
        payload = ticket.model_dump(mode="json")
        try:
            resp = self._get_client().post(self._url, json=payload, timeout=self._timeout)
        except httpx.TimeoutException as e:
            return Failed(f"timeout after {self._timeout:g}s: {type(e).__name__}")
        except httpx.HTTPError as e:
            return Failed(f"{type(e).__name__}: {e}")
        if resp.is_success:
            logger.info("[notify] delivered %s to %s (HTTP %d)", ticket.ticket_id, self._url, resp.status_code)
            return Delivered(status_code=resp.status_code)
        return Failed(f"HTTP {resp.status_code}", status_code=resp.status_code)

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
