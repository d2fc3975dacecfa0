"""Pipeline context: the per-run store of action results, and the scoped view actions see.

One ContextStore per run. Results are keyed by action name, written once by the
executor after the producing action completes, and never removed. Actions never
get the store itself: they get an ActionContext that only exposes the results
of the actions they declared in depends_on.
"""
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable

from ticketflow.pipeline.errors import ResultAlreadySet, UndeclaredDependency


class ContextStore:
    """Shared state for one pipeline run: the input, the caller's initial state, and committed results."""

    def __init__(self, input: str, initial_state: Mapping[str, Any] | None = None) -> None:
        self._input = input or ""
        self._initial_state = MappingProxyType(dict(initial_state or {}))
        self._results: dict[str, Any] = {}
        self._write_lock = threading.Lock()

    @property
    def input(self) -> str:
        """Original free-text request. Immutable for the run."""
        return self._input

    @property
    def initial_state(self) -> Mapping[str, Any]:
        return self._initial_state

    @property
    def results(self) -> Mapping[str, Any]:
        """Read-only view of committed results."""
        return MappingProxyType(self._results)

    def has_result(self, name: str) -> bool:
        return name in self._results

    def get(self, name: str, default: Any = None) -> Any:
        return self._results.get(name, default)

    def commit(self, name: str, value: Any) -> None:
        """Write an action's result. Each key is written at most once."""
        with self._write_lock:
            if name in self._results:
                raise ResultAlreadySet(f"Result for {name!r} is already set")
            self._results[name] = value

    def snapshot(self) -> dict[str, Any]:
        with self._write_lock:
            return dict(self._results)

    def __repr__(self) -> str:
        return f"ContextStore(input={self._input[:40]!r}, results={list(self._results)})"


class ActionContext:
    """What an action's run() receives: input, initial state, and its declared dependencies' results.

    This view is where the dependency capability is enforced. An action's reads
    are ordinary code and can't be inspected at registration, so registration
    only checks that every name in depends_on exists. Reading anything else
    through result() raises UndeclaredDependency, which fails the action. The
    full store is never handed to an action.
    """

    def __init__(
        self,
        store: ContextStore,
        action: str,
        depends_on: tuple[str, ...],
        run_id: str = "",
        emit: Callable[[str], None] | None = None,
    ) -> None:
        self._store = store
        self.action = action
        self._allowed = frozenset(depends_on)
        self.run_id = run_id
        self._emit = emit

    @property
    def input(self) -> str:
        return self._store.input

    @property
    def initial_state(self) -> Mapping[str, Any]:
        return self._store.initial_state

    def result(self, name: str) -> Any:
        """Committed result of a declared dependency. Raises UndeclaredDependency otherwise."""
        if name not in self._allowed:
            raise UndeclaredDependency(self.action, name)
        if not self._store.has_result(name):
            raise KeyError(f"Dependency {name!r} of {self.action!r} has no result")
        return self._store.get(name)

    @property
    def results(self) -> dict[str, Any]:
        """Results of declared dependencies only."""
        return {k: v for k, v in self._store.results.items() if k in self._allowed}

    def emit(self, message: str) -> None:
        """Publish a progress message for this action (no-op without an emitter)."""
        if self._emit and message and message.strip():
            self._emit(message.strip())
