"""Action: a named unit of pipeline work with declared dependencies."""
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ticketflow.pipeline.context import ActionContext

ActionFn = Callable[[ActionContext], Any]


def _first_line(doc: str | None) -> str:
    lines = (doc or "").strip().splitlines()
    return lines[0] if lines else ""


@dataclass(frozen=True)
class Action:
    """Registered once per pipeline; invoked at most once per run.

    run receives an ActionContext and returns the action's result; the executor
    commits it under `name`. Raising fails the action.
    """

    name: str
    run: ActionFn
    depends_on: tuple[str, ...] = ()
    description: str = ""
    timeout: float | None = None
    """Per-action bound in seconds; None uses the pipeline default."""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Action name must be non-empty")
        # Keep declaration order, drop repeats
        deps = tuple(dict.fromkeys(self.depends_on or ()))
        object.__setattr__(self, "depends_on", deps)


def action(
    name: str,
    depends_on: Iterable[str] = (),
    description: str = "",
    timeout: float | None = None,
) -> Callable[[ActionFn], Action]:
    """Decorator: turn a run function into an Action.

    @action("createTicket", depends_on=["getCustomerInfo", "getSubscriptionStatus"])
    def create_ticket(ctx): ...
    """

    def decorator(fn: ActionFn) -> Action:
        return Action(
            name=name,
            run=fn,
            depends_on=tuple(depends_on),
            description=description or _first_line(fn.__doc__),
            timeout=timeout,
        )

    return decorator
