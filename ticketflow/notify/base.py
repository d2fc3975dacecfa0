"""Notifier abstraction: one best-effort delivery of a ticket to the notification service.

Flow:
  1. notifyTeam action calls notify(ticket) once per run
  2. The adapter attempts a single delivery (no retry)
  3. Outcome comes back as Delivered or Failed(cause); notify() never raises

Implementations: MemoryNotifier (local dev/tests), HttpNotifier (POST to NOTIFY_URL).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ticketflow.triage.tickets import Ticket


@dataclass(frozen=True)
class Delivered:
    status_code: int | None = None
    delivered: bool = field(default=True, init=False)

    def describe(self) -> str:
        return f"delivered (HTTP {self.status_code})" if self.status_code else "delivered"


@dataclass(frozen=True)
class Failed:
    cause: str
    status_code: int | None = None
    delivered: bool = field(default=False, init=False)

    def describe(self) -> str:
        return f"failed: {self.cause}"


DeliveryResult = Delivered | Failed


class NotifierAdapter(ABC):
    """Abstract notifier. Plug-and-play backend chosen by NOTIFIER_TYPE."""

    @abstractmethod
    def notify(self, ticket: Ticket) -> DeliveryResult:
        """Attempt one delivery. Transport errors, timeouts and non-success responses return Failed."""
        pass

    def close(self) -> None:
        """Release any held resources."""
        return None
