"""PipelineRun: what the executor hands back to the caller for one run."""
from dataclasses import dataclass, field
from typing import Any

from pydantic_core import to_jsonable_python

from ticketflow.emit.types import EmitEvent
from ticketflow.pipeline.context import ContextStore
from ticketflow.pipeline.errors import ActionFailure, ConfigurationError, PipelineError
from ticketflow.pipeline.status import COMPLETED, PENDING, RunStatus


@dataclass
class PipelineRun:
    """Outcome of Pipeline.run(). Config and action errors are carried in `error`, never raised."""

    run_id: str
    context: ContextStore
    status: RunStatus = PENDING
    error: PipelineError | None = None
    order: list[str] = field(default_factory=list)
    """Resolved execution order (empty when the graph was rejected)."""
    completed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    """Actions never invoked in this run."""
    rolled_back: bool = False
    """True when all-or-nothing discarded the results of completed actions."""
    events: list[EmitEvent] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status == COMPLETED

    @property
    def results(self) -> dict[str, Any]:
        return self.context.snapshot()

    @property
    def failed_action(self) -> str | None:
        return self.error.action if isinstance(self.error, ActionFailure) else None

    def raise_for_status(self) -> None:
        """Re-raise the run's error, if any."""
        if self.error is not None:
            raise self.error

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict for API responses and the CLI."""
        return {
            "run_id": self.run_id,
            "status": self.status,
            "input": self.context.input,
            "order": list(self.order),
            "completed": list(self.completed),
            "skipped": list(self.skipped),
            "rolled_back": self.rolled_back,
            "results": to_jsonable_python(self.results, fallback=str),
            "error": error_payload(self.error),
            "events": [e.to_dict() for e in self.events],
            "duration_ms": self.duration_ms,
        }


def error_payload(err: PipelineError | None) -> dict[str, Any] | None:
    if err is None:
        return None
    out: dict[str, Any] = {"type": type(err).__name__, "message": str(err)}
    if isinstance(err, ConfigurationError):
        out["kind"] = err.kind
        out["actions"] = list(err.actions)
    elif isinstance(err, ActionFailure):
        out["action"] = err.action
        out["cause"] = f"{type(err.cause).__name__}: {err.cause}"
    return out
