"""Emitter: collect structured events for one run and forward them to an optional listener."""
import logging
import threading
from collections.abc import Callable

from ticketflow.emit.types import EmitEvent

logger = logging.getLogger(__name__)


class PipelineEmitter:
    """Collects events for a single run. Forwards each to on_event; listener errors are logged, not raised."""

    def __init__(self, run_id: str, on_event: Callable[[EmitEvent], None] | None = None) -> None:
        self.run_id = run_id
        self._on_event = on_event
        self._events: list[EmitEvent] = []
        self._lock = threading.Lock()

    def emit(self, event: EmitEvent) -> None:
        with self._lock:
            self._events.append(event)
        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception as e:
            logger.warning("Event listener failed for %s/%s: %s", event.action, event.kind, e)

    @property
    def events(self) -> list[EmitEvent]:
        with self._lock:
            return list(self._events)


def create_pipeline_emitter(
    run_id: str,
    on_event: Callable[[EmitEvent], None] | None = None,
) -> PipelineEmitter:
    """Create emitter for one pipeline run."""
    return PipelineEmitter(run_id, on_event)
