"""Support-triage actions and the pipeline that wires them together."""

from ticketflow.actions.accounts import AccountDirectory, MemoryAccountDirectory, UnknownCustomer
from ticketflow.actions.support import (
    CREATE_TICKET,
    GET_CUSTOMER_INFO,
    GET_SUBSCRIPTION_STATUS,
    NOTIFY_TEAM,
    build_support_pipeline,
    delivery_from,
    ticket_from,
    triage,
)

__all__ = [
    "AccountDirectory",
    "MemoryAccountDirectory",
    "UnknownCustomer",
    "CREATE_TICKET",
    "GET_CUSTOMER_INFO",
    "GET_SUBSCRIPTION_STATUS",
    "NOTIFY_TEAM",
    "build_support_pipeline",
    "delivery_from",
    "ticket_from",
    "triage",
]
