"""Triage: priority classification and ticket construction."""

from ticketflow.triage.classifier import PRIORITY_KEYWORDS, Priority, classify, load_priority_keywords
from ticketflow.triage.tickets import Ticket, TicketMetadata, build_ticket, new_ticket_id

__all__ = [
    "PRIORITY_KEYWORDS",
    "Priority",
    "classify",
    "load_priority_keywords",
    "Ticket",
    "TicketMetadata",
    "build_ticket",
    "new_ticket_id",
]
