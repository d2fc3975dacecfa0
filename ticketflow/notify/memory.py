"""In-memory notifier for local dev and tests. Records delivered tickets; can be told to fail."""
import logging
import threading

from ticketflow.notify.base import Delivered, DeliveryResult, Failed, NotifierAdapter
from ticketflow.triage.tickets import Ticket

logger = logging.getLogger(__name__)


class MemoryNotifier(NotifierAdapter):
    """Keeps delivered tickets in a list. fail_with="..." makes every attempt return Failed(cause)."""

    def __init__(self, fail_with: str | None = None) -> None:
        self.fail_with = fail_with
        self._sent: list[Ticket] = []
        self._attempts = 0
        self._lock = threading.Lock()

    def notify(self, ticket: Ticket) -> DeliveryResult:
        with self._lock:
            self._attempts += 1
            if self.fail_with:
                return Failed(self.fail_with)
            self._sent.append(ticket)
        logger.info("[notify] memory: recorded %s (%s)", ticket.ticket_id, ticket.priority)
        return Delivered()

    @property
    def sent(self) -> list[Ticket]:
        with self._lock:
            return list(self._sent)

    @property
    def attempts(self) -> int:
        with self._lock:
            return self._attempts
