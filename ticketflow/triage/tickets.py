"""Ticket model and factory: SLA and routing tables, unique ticket ids."""
import itertools
import secrets
import threading
import time
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ticketflow.triage.classifier import Priority

SLA_BY_PRIORITY: dict[str, str] = {
    "urgent": "30 minutes",
    "high": "2 hours",
    "medium": "4 hours",
    "low": "24 hours",
}

ON_CALL_TEAM = "on-call-team"
DEFAULT_TEAM = "support-team-1"

_id_counter = itertools.count(1)
_id_lock = threading.Lock()


def new_ticket_id() -> str:
    """T-<epoch ms>-<process counter>-<random>. Distinct within a process even for same-millisecond calls."""
    with _id_lock:
        seq = next(_id_counter)
    return f"T-{int(time.time() * 1000)}-{seq:06d}-{secrets.token_hex(3)}"


def route_for(priority: str) -> str:
    return ON_CALL_TEAM if priority == "urgent" else DEFAULT_TEAM


def sla_for(priority: str) -> str:
    return SLA_BY_PRIORITY[priority]


class TicketMetadata(BaseModel):
    """Provenance: when and where the ticket was created, and the customer's plan."""
    model_config = ConfigDict(frozen=True)

    created_at: datetime
    source: str = "ai-agent"
    plan: str = ""


class Ticket(BaseModel):
    """Support ticket. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    ticket_id: str = Field(..., description="Unique per ticket (T-<ms>-<seq>-<rand>)")
    status: Literal["created"] = "created"
    priority: Priority
    assigned_to: str = Field(..., description="on-call-team for urgent, support-team-1 otherwise")
    estimated_response: str = Field(..., description="SLA for the priority, e.g. '30 minutes'")
    customer_id: str
    description: str
    metadata: TicketMetadata


def build_ticket(
    description: str,
    priority: Priority,
    customer_id: str,
    plan_tier: str,
    *,
    source: str = "ai-agent",
    now: datetime | None = None,
) -> Ticket:
    """Combine a classified priority with account data into a Ticket."""
    return Ticket(
        ticket_id=new_ticket_id(),
        priority=priority,
        assigned_to=route_for(priority),
        estimated_response=sla_for(priority),
        customer_id=customer_id,
        description=description or "",
        metadata=TicketMetadata(
            created_at=now or datetime.now(timezone.utc),
            source=source,
            plan=plan_tier or "",
        ),
    )
