"""Support-triage actions: customer lookup, subscription lookup, ticket creation, team notification.

getCustomerInfo -> getSubscriptionStatus -> createTicket -> notifyTeam

createTicket depends on both lookups; notifyTeam only on createTicket. A failed
delivery is recorded as the notifyTeam result and logged; it never fails the run.
"""
import logging
from collections.abc import Mapping
from typing import Any

from ticketflow.actions.accounts import AccountDirectory, get_account_directory
from ticketflow.config import Config, get_config
from ticketflow.notify import DeliveryResult, Failed, NotifierAdapter, get_notifier
from ticketflow.pipeline import Action, ActionContext, Pipeline, PipelineRun
from ticketflow.pipeline.deadline import DeadlineExceeded, call_with_deadline
from ticketflow.trace_log import trace_log
from ticketflow.triage.classifier import KeywordTable, classify, load_priority_keywords
from ticketflow.triage.tickets import Ticket, build_ticket

logger = logging.getLogger(__name__)

GET_CUSTOMER_INFO = "getCustomerInfo"
GET_SUBSCRIPTION_STATUS = "getSubscriptionStatus"
CREATE_TICKET = "createTicket"
NOTIFY_TEAM = "notifyTeam"

NOTIFY_GRACE_SECONDS = 1.0


def customer_info_action(directory: AccountDirectory) -> Action:
    def run(ctx: ActionContext) -> dict[str, Any]:
        state = ctx.initial_state
        customer_id = str(state.get("customer_id") or state.get("customerId") or "").strip() or None
        email = str(state.get("email") or "").strip() or None
        if not customer_id and not email:
            raise ValueError("initial state needs customer_id or email")
        info = directory.find_customer(customer_id=customer_id, email=email)
        ctx.emit(f"Found customer {info['customerId']}")
        return info

    return Action(GET_CUSTOMER_INFO, run, description="Look up the customer profile")


def subscription_status_action(directory: AccountDirectory) -> Action:
    def run(ctx: ActionContext) -> dict[str, Any]:
        info = ctx.result(GET_CUSTOMER_INFO)
        return directory.subscription(info["customerId"])

    return Action(
        GET_SUBSCRIPTION_STATUS,
        run,
        depends_on=(GET_CUSTOMER_INFO,),
        description="Look up the customer's plan",
    )


def create_ticket_action(keywords: KeywordTable | None = None, source: str = "ai-agent") -> Action:
    def run(ctx: ActionContext) -> Ticket:
        info = ctx.result(GET_CUSTOMER_INFO)
        subscription = ctx.result(GET_SUBSCRIPTION_STATUS)
        customer_id = (info or {}).get("customerId")
        plan = (subscription or {}).get("plan")
        if not customer_id:
            raise ValueError(f"{GET_CUSTOMER_INFO} result has no customerId")
        if not plan:
            raise ValueError(f"{GET_SUBSCRIPTION_STATUS} result has no plan")
        priority = classify(ctx.input, plan, keywords)
        ticket = build_ticket(ctx.input, priority, customer_id, plan, source=source)
        ctx.emit(f"Created {ticket.ticket_id}: {priority}, {ticket.assigned_to}, {ticket.estimated_response}")
        return ticket

    return Action(
        CREATE_TICKET,
        run,
        depends_on=(GET_CUSTOMER_INFO, GET_SUBSCRIPTION_STATUS),
        description="Creates a new support ticket",
    )


def notify_team_action(notifier: NotifierAdapter, deadline: float | None = None) -> Action:
    """notifyTeam: one delivery attempt, cut off at deadline seconds (default NOTIFY_TIMEOUT_SECONDS).

    The action's own timeout sits NOTIFY_GRACE_SECONDS above the deadline, so an
    overrun is recorded as a Failed delivery rather than failing the run.
    """
    deadline = deadline if deadline is not None else get_config().notify_timeout_seconds

    def run(ctx: ActionContext) -> DeliveryResult:
        ticket: Ticket = ctx.result(CREATE_TICKET)
        try:
            result = call_with_deadline(notifier.notify, deadline, ticket, name=f"notify-{ticket.ticket_id}")
        except DeadlineExceeded:
            result = Failed(f"timeout after {deadline:g}s")
        except Exception as e:
            # Adapters should not raise; record it as a failed delivery all the same.
            logger.exception("Notifier %s raised for %s", type(notifier).__name__, ticket.ticket_id)
            result = Failed(f"{type(e).__name__}: {e}")
        if result.delivered:
            logger.info("Notification for %s %s", ticket.ticket_id, result.describe())
        else:
            logger.warning("Notification for %s not delivered: %s", ticket.ticket_id, result.cause)
        ctx.emit(f"Notification {result.describe()}")
        return result

    return Action(
        NOTIFY_TEAM,
        run,
        depends_on=(CREATE_TICKET,),
        description="Notify the routed team about the ticket",
        timeout=deadline + NOTIFY_GRACE_SECONDS,
    )


def build_support_pipeline(
    notifier: NotifierAdapter | None = None,
    directory: AccountDirectory | None = None,
    config: Config | None = None,
    keywords: KeywordTable | None = None,
) -> Pipeline:
    cfg = config or get_config()
    directory = directory or get_account_directory()
    notifier = notifier or get_notifier()
    trace_log(
        "support pipeline built",
        notifier=type(notifier).__name__,
        directory=type(directory).__name__,
        notify_deadline=cfg.notify_timeout_seconds,
    )
    return Pipeline(
        [
            customer_info_action(directory),
            subscription_status_action(directory),
            create_ticket_action(keywords if keywords is not None else load_priority_keywords(), cfg.ticket_source),
            notify_team_action(notifier, cfg.notify_timeout_seconds),
        ],
        all_or_nothing=cfg.all_or_nothing,
        action_timeout=cfg.action_timeout_seconds,
    )


def triage(message: str, initial_state: Mapping[str, Any] | None = None, **kwargs: Any) -> PipelineRun:
    """Run the support pipeline with default wiring. kwargs go to build_support_pipeline."""
    return build_support_pipeline(**kwargs).run(message, initial_state)


def ticket_from(run: PipelineRun) -> Ticket | None:
    return run.context.get(CREATE_TICKET)


def delivery_from(run: PipelineRun) -> DeliveryResult | None:
    return run.context.get(NOTIFY_TEAM)
