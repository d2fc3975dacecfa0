"""End-to-end tests for the support-triage pipeline: classification, routing, notification outcomes."""
import logging
import time

import pytest

from ticketflow.actions import (
    CREATE_TICKET,
    GET_CUSTOMER_INFO,
    GET_SUBSCRIPTION_STATUS,
    NOTIFY_TEAM,
    MemoryAccountDirectory,
    build_support_pipeline,
    delivery_from,
    ticket_from,
    triage,
)
from ticketflow.actions.accounts import UnknownCustomer, load_accounts
from ticketflow.actions.support import NOTIFY_GRACE_SECONDS, notify_team_action
from ticketflow.config import Config
from ticketflow.notify import Delivered, Failed, MemoryNotifier, NotifierAdapter
from ticketflow.pipeline.status import COMPLETED, PARTIALLY_COMPLETED
from ticketflow.triage.classifier import PRIORITY_KEYWORDS

ACCOUNTS = [
    {"customer_id": "C-PRO", "name": "Pro User", "email": "pro@example.com", "plan": "pro"},
    {"customer_id": "C-FREE", "name": "Free User", "email": "free@example.com", "plan": "free"},
    {"customer_id": "C-ENT", "name": "Ent User", "email": "ent@example.com", "plan": "enterprise"},
]


@pytest.fixture
def directory():
    return MemoryAccountDirectory(ACCOUNTS)


@pytest.fixture
def notifier():
    return MemoryNotifier()


def _pipeline(directory, notifier, **cfg):
    return build_support_pipeline(
        notifier=notifier,
        directory=directory,
        config=Config(action_timeout_seconds=5.0, **cfg),
        keywords=PRIORITY_KEYWORDS,
    )


def test_pipeline_order(directory, notifier):
    assert _pipeline(directory, notifier).execution_order() == [
        GET_CUSTOMER_INFO,
        GET_SUBSCRIPTION_STATUS,
        CREATE_TICKET,
        NOTIFY_TEAM,
    ]


def test_broken_dashboard_on_pro_is_urgent(directory, notifier):
    run = _pipeline(directory, notifier).run("the dashboard is broken", {"customer_id": "C-PRO"})
    assert run.status == COMPLETED
    ticket = ticket_from(run)
    assert ticket.priority == "urgent"
    assert ticket.assigned_to == "on-call-team"
    assert ticket.estimated_response == "30 minutes"
    assert ticket.customer_id == "C-PRO"
    assert ticket.metadata.plan == "pro"
    assert ticket.metadata.source == "ai-agent"
    assert delivery_from(run) == Delivered()
    assert notifier.sent == [ticket]


def test_how_to_on_free_is_low(directory, notifier):
    run = _pipeline(directory, notifier).run("how to change email", {"customer_id": "C-FREE"})
    ticket = ticket_from(run)
    assert ticket.priority == "low"
    assert ticket.estimated_response == "24 hours"
    assert ticket.assigned_to == "support-team-1"


@pytest.mark.parametrize("customer,expected", [("C-ENT", "high"), ("C-FREE", "medium")])
def test_no_keyword_falls_back_to_plan(directory, notifier, customer, expected):
    run = _pipeline(directory, notifier).run("general question", {"customer_id": customer})
    assert run.status == COMPLETED
    assert ticket_from(run).priority == expected


def test_lookup_by_email(directory, notifier):
    run = _pipeline(directory, notifier).run("an error occurred", {"email": "ENT@example.com"})
    assert run.results[GET_CUSTOMER_INFO]["customerId"] == "C-ENT"
    assert ticket_from(run).priority == "high"


def test_failing_notifier_still_completes_with_recorded_failure(directory, caplog):
    """Delivery failure is recorded and logged, the ticket stays, the run is completed."""
    notifier = MemoryNotifier(fail_with="endpoint unavailable")
    with caplog.at_level(logging.WARNING, logger="ticketflow.actions.support"):
        run = _pipeline(directory, notifier).run("the dashboard is broken", {"customer_id": "C-PRO"})
    assert run.status == COMPLETED
    assert run.error is None
    ticket = ticket_from(run)
    assert ticket is not None and ticket.priority == "urgent"
    delivery = delivery_from(run)
    assert isinstance(delivery, Failed)
    assert delivery.cause == "endpoint unavailable"
    assert any("not delivered" in r.getMessage() and ticket.ticket_id in r.getMessage() for r in caplog.records)
    payload = run.to_payload()
    assert payload["results"][NOTIFY_TEAM] == {"cause": "endpoint unavailable", "status_code": None, "delivered": False}
    assert any(e["kind"] == "action.message" and "failed" in e["message"] for e in payload["events"])


def test_raising_notifier_is_recorded_as_failed(directory):
    class Exploding(NotifierAdapter):
        def notify(self, ticket):
            raise RuntimeError("socket gone")

    run = _pipeline(directory, Exploding()).run("bug report", {"customer_id": "C-FREE"})
    assert run.status == COMPLETED
    assert isinstance(delivery_from(run), Failed)
    assert "socket gone" in delivery_from(run).cause
    assert ticket_from(run).priority == "medium"


def test_unknown_customer_is_partial_failure(directory, notifier):
    run = _pipeline(directory, notifier).run("help", {"customer_id": "C-NOPE"})
    assert run.status == PARTIALLY_COMPLETED
    assert run.failed_action == GET_CUSTOMER_INFO
    assert isinstance(run.error.cause, UnknownCustomer)
    assert run.skipped == [GET_SUBSCRIPTION_STATUS, CREATE_TICKET, NOTIFY_TEAM]
    assert ticket_from(run) is None
    assert notifier.attempts == 0


def test_missing_customer_identity_fails_lookup(directory, notifier):
    run = _pipeline(directory, notifier).run("help", {})
    assert run.failed_action == GET_CUSTOMER_INFO
    assert isinstance(run.error.cause, ValueError)


def test_missing_plan_fails_create_ticket(notifier):
    directory = MemoryAccountDirectory(ACCOUNTS)
    directory.subscription = lambda customer_id: {"status": "active"}  # no plan
    run = _pipeline(directory, notifier).run("help", {"customer_id": "C-PRO"})
    assert run.status == PARTIALLY_COMPLETED
    assert run.failed_action == CREATE_TICKET
    assert set(run.results) == {GET_CUSTOMER_INFO, GET_SUBSCRIPTION_STATUS}
    assert run.skipped == [NOTIFY_TEAM]


def test_all_or_nothing_from_config(notifier):
    directory = MemoryAccountDirectory(ACCOUNTS)
    directory.subscription = lambda customer_id: {"status": "active"}
    run = _pipeline(directory, notifier, all_or_nothing=True).run("help", {"customer_id": "C-PRO"})
    assert run.status == PARTIALLY_COMPLETED
    assert run.completed == [GET_CUSTOMER_INFO, GET_SUBSCRIPTION_STATUS]
    assert run.rolled_back
    assert run.results == {}
    assert notifier.attempts == 0


def test_ticket_source_from_config(directory, notifier):
    run = _pipeline(directory, notifier, ticket_source="web").run("help", {"customer_id": "C-PRO"})
    assert ticket_from(run).metadata.source == "web"


def test_triage_helper(directory, notifier):
    run = triage(
        "critical outage",
        {"customer_id": "C-FREE"},
        notifier=notifier,
        directory=directory,
        config=Config(),
        keywords=PRIORITY_KEYWORDS,
    )
    assert ticket_from(run).priority == "urgent"


def test_demo_accounts_default():
    d = MemoryAccountDirectory()
    assert d.subscription("C-1003")["plan"] == "enterprise"
    with pytest.raises(UnknownCustomer):
        d.find_customer(customer_id="missing")


def test_load_accounts_yaml(tmp_path):
    path = tmp_path / "accounts.yaml"
    path.write_text("accounts:\n  - customer_id: X-1\n    plan: Enterprise\n    email: x@example.com\n")
    accounts = load_accounts(path)
    d = MemoryAccountDirectory(accounts)
    assert d.find_customer(email="x@example.com")["customerId"] == "X-1"
    assert d.subscription("X-1")["plan"] == "enterprise"
    assert load_accounts(tmp_path / "missing.yaml") is None


class SlowNotifier(NotifierAdapter):
    def __init__(self, delay: float):
        self.delay = delay

    def notify(self, ticket):
        time.sleep(self.delay)
        return Delivered(status_code=202)


def test_slow_delivery_past_action_timeout_still_completes(directory):
    """notifyTeam has its own bound; the generic per-action timeout does not cut it short."""
    run = build_support_pipeline(
        notifier=SlowNotifier(0.5),
        directory=directory,
        config=Config(action_timeout_seconds=0.2),
        keywords=PRIORITY_KEYWORDS,
    ).run("the dashboard is broken", {"customer_id": "C-PRO"})
    assert run.status == COMPLETED
    assert run.error is None
    assert isinstance(delivery_from(run), Delivered)


def test_delivery_past_notify_deadline_is_recorded_as_failed(directory, caplog):
    with caplog.at_level(logging.WARNING, logger="ticketflow.actions.support"):
        run = build_support_pipeline(
            notifier=SlowNotifier(2.0),
            directory=directory,
            config=Config(notify_timeout_seconds=0.1, action_timeout_seconds=5.0),
            keywords=PRIORITY_KEYWORDS,
        ).run("the dashboard is broken", {"customer_id": "C-PRO"})
    assert run.status == COMPLETED
    delivery = delivery_from(run)
    assert isinstance(delivery, Failed)
    assert delivery.cause == "timeout after 0.1s"
    assert ticket_from(run).priority == "urgent"
    assert any("not delivered" in r.getMessage() for r in caplog.records)


def test_notify_team_timeout_sits_above_its_delivery_deadline():
    act = notify_team_action(MemoryNotifier(), deadline=3.0)
    assert act.timeout == 3.0 + NOTIFY_GRACE_SECONDS


def test_numeric_customer_id_from_yaml(tmp_path, notifier):
    """YAML turns `customer_id: 1001` into an int; lookups and the ticket still use the string id."""
    path = tmp_path / "accounts.yaml"
    path.write_text("accounts:\n  - customer_id: 1001\n    plan: pro\n    email: n@example.com\n")
    d = MemoryAccountDirectory(load_accounts(path))
    assert d.find_customer(customer_id=1001)["customerId"] == "1001"
    run = _pipeline(d, notifier).run("help", {"customer_id": "1001"})
    assert run.status == COMPLETED
    ticket = ticket_from(run)
    assert ticket.customer_id == "1001"
    assert ticket.priority == "low"
    assert run.results[GET_SUBSCRIPTION_STATUS]["plan"] == "pro"
