"""Executor: validate the action graph, order it, run each action once, return a PipelineRun.

Order is a topological sort (Kahn) over depends_on; when several actions are
ready at once the one registered first runs first, so identical registrations
always give identical orders. Cycles, unknown dependencies and duplicate names
are ConfigurationErrors found before anything runs.
"""
import heapq
import logging
import threading
import time
import uuid
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ticketflow.emit import EmitEvent, create_pipeline_emitter
from ticketflow.emit.emitter import PipelineEmitter
from ticketflow.emit.types import (
    ACTION_COMPLETED,
    ACTION_FAILED,
    ACTION_MESSAGE,
    ACTION_SKIPPED,
    ACTION_STARTED,
)
from ticketflow.pipeline.action import Action
from ticketflow.pipeline.context import ActionContext, ContextStore
from ticketflow.pipeline.deadline import DeadlineExceeded, call_with_deadline
from ticketflow.pipeline.errors import (
    ActionFailure,
    ActionTimeout,
    ConfigurationError,
    RunCancelled,
)
from ticketflow.pipeline.result import PipelineRun
from ticketflow.pipeline.status import COMPLETED, CONFIG_INVALID, PARTIALLY_COMPLETED, RUNNING
from ticketflow.trace_log import trace_action, trace_log

logger = logging.getLogger(__name__)


def resolve_order(actions: Iterable[Action]) -> list[str]:
    """Topological order of action names. Raises ConfigurationError for an invalid graph."""
    actions = list(actions)
    index: dict[str, int] = {}
    dupes: list[str] = []
    for i, a in enumerate(actions):
        if a.name in index:
            dupes.append(a.name)
        else:
            index[a.name] = i
    if dupes:
        raise ConfigurationError(
            "duplicate_action", sorted(set(dupes)), f"Duplicate action name(s): {', '.join(sorted(set(dupes)))}"
        )

    for a in actions:
        missing = [d for d in a.depends_on if d not in index]
        if missing:
            raise ConfigurationError(
                "missing_dependency",
                [a.name, *missing],
                f"Action {a.name!r} depends on unregistered action(s): {', '.join(missing)}",
            )

    deps = {a.name: a.depends_on for a in actions}
    indegree = {a.name: len(a.depends_on) for a in actions}
    dependents: dict[str, list[str]] = {a.name: [] for a in actions}
    for a in actions:
        for d in a.depends_on:
            dependents[d].append(a.name)

    ready = [(index[name], name) for name, n in indegree.items() if n == 0]
    heapq.heapify(ready)
    order: list[str] = []
    while ready:
        _, name = heapq.heappop(ready)
        order.append(name)
        for child in dependents[name]:
            indegree[child] -= 1
            if indegree[child] == 0:
                heapq.heappush(ready, (index[child], child))

    if len(order) < len(actions):
        remaining = [a.name for a in actions if indegree[a.name] > 0]
        cycle = _find_cycle(remaining, deps)
        raise ConfigurationError(
            "cycle", cycle, f"Dependency cycle: {' -> '.join(cycle + cycle[:1])}"
        )
    return order


def _find_cycle(remaining: list[str], deps: Mapping[str, tuple[str, ...]]) -> list[str]:
    """DFS over the unsorted subgraph; returns the members of one cycle in dependency order."""
    pending = set(remaining)
    visiting: set[str] = set()
    done: set[str] = set()
    path: list[str] = []

    def visit(name: str) -> list[str] | None:
        visiting.add(name)
        path.append(name)
        for d in deps[name]:
            if d not in pending or d in done:
                continue
            if d in visiting:
                return path[path.index(d):]
            found = visit(d)
            if found:
                return found
        path.pop()
        visiting.discard(name)
        done.add(name)
        return None

    for name in remaining:
        if name not in done:
            found = visit(name)
            if found:
                return found
    return remaining


class Pipeline:
    """Dependency-ordered executor over a fixed set of actions.

    all_or_nothing: on failure, drop the results of actions that did complete.
    action_timeout: default bound (seconds) for each action; Action.timeout overrides it.
    on_event: listener for EmitEvents of every run (per-run listener can be passed to run()).
    """

    def __init__(
        self,
        actions: Iterable[Action],
        *,
        all_or_nothing: bool = False,
        action_timeout: float | None = None,
        on_event: Callable[[EmitEvent], None] | None = None,
    ) -> None:
        self._actions: tuple[Action, ...] = tuple(actions)
        self.all_or_nothing = all_or_nothing
        self.action_timeout = action_timeout
        self._on_event = on_event

    @property
    def actions(self) -> tuple[Action, ...]:
        return self._actions

    def execution_order(self) -> list[str]:
        return resolve_order(self._actions)

    def run(
        self,
        input: str,
        initial_state: Mapping[str, Any] | None = None,
        *,
        run_id: str | None = None,
        cancel: threading.Event | None = None,
        on_event: Callable[[EmitEvent], None] | None = None,
    ) -> PipelineRun:
        """Run every action once in dependency order. Errors are returned on the PipelineRun, not raised."""
        t0 = time.perf_counter()
        run_id = run_id or uuid.uuid4().hex
        emitter = create_pipeline_emitter(run_id, on_event or self._on_event)
        store = ContextStore(input, initial_state)
        out = PipelineRun(run_id=run_id, context=store)
        trace_log("pipeline entered", run_id=run_id, actions=len(self._actions))

        try:
            order = self.execution_order()
        except ConfigurationError as e:
            logger.error("Pipeline %s rejected: %s", run_id[:8], e)
            out.status = CONFIG_INVALID
            out.error = e
            out.skipped = [a.name for a in self._actions]
            return self._finish(out, emitter, t0)

        by_name = {a.name: a for a in self._actions}
        out.order = order
        out.status = RUNNING
        failure: ActionFailure | None = None
        for pos, name in enumerate(order):
            if cancel is not None and cancel.is_set():
                failure = ActionFailure(name, RunCancelled("run cancelled before this action started"))
                out.skipped = order[pos:]
                break
            act = by_name[name]
            emitter.emit(EmitEvent(run_id, name, ACTION_STARTED))
            try:
                value = self._invoke(act, store, run_id, emitter)
            except ActionFailure as e:
                failure = e
                out.skipped = order[pos + 1:]
                emitter.emit(EmitEvent(run_id, name, ACTION_FAILED, str(e.cause), level="error"))
                logger.warning("Pipeline %s: action %s failed: %s", run_id[:8], name, e.cause)
                break
            store.commit(name, value)
            out.completed.append(name)
            emitter.emit(EmitEvent(run_id, name, ACTION_COMPLETED))

        if failure is None:
            out.status = COMPLETED
        else:
            out.status = PARTIALLY_COMPLETED
            out.error = failure
            for name in out.skipped:
                emitter.emit(EmitEvent(run_id, name, ACTION_SKIPPED, f"not run: {failure.action} failed"))
            if self.all_or_nothing and out.completed:
                out.context = ContextStore(input, initial_state)
                out.rolled_back = True
        return self._finish(out, emitter, t0)

    def _invoke(self, act: Action, store: ContextStore, run_id: str, emitter: PipelineEmitter) -> Any:
        """Call act.run within its time bound. Any exception becomes ActionFailure."""

        def emit(message: str) -> None:
            emitter.emit(EmitEvent(run_id, act.name, ACTION_MESSAGE, message))

        ctx = ActionContext(store, act.name, act.depends_on, run_id=run_id, emit=emit)
        timeout = act.timeout if act.timeout is not None else self.action_timeout
        with trace_action(run_id, act.name):
            if timeout is None:
                try:
                    return act.run(ctx)
                except Exception as e:
                    raise ActionFailure(act.name, e) from e
            # Only this method commits, so a late return from the worker is dropped.
            try:
                return call_with_deadline(act.run, timeout, ctx, name=f"action-{act.name}")
            except DeadlineExceeded:
                raise ActionTimeout(act.name, timeout) from None
            except Exception as e:
                raise ActionFailure(act.name, e) from e

    def _finish(self, out: PipelineRun, emitter: PipelineEmitter, t0: float) -> PipelineRun:
        out.events = emitter.events
        out.duration_ms = int((time.perf_counter() - t0) * 1000)
        trace_log("pipeline exited", run_id=out.run_id, status=out.status, ms=out.duration_ms)
        logger.info(
            "Pipeline %s %s in %dms (completed=%d skipped=%d)",
            out.run_id[:8], out.status, out.duration_ms, len(out.completed), len(out.skipped),
        )
        return out


def run_pipeline(
    actions: Iterable[Action],
    input: str,
    initial_state: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> PipelineRun:
    """One-shot: build a Pipeline from actions and run it."""
    return Pipeline(actions).run(input, initial_state, **kwargs)
