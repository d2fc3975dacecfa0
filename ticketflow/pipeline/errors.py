"""Pipeline error taxonomy: configuration errors, action failures, capability violations."""
from typing import Literal

ConfigErrorKind = Literal["cycle", "missing_dependency", "duplicate_action"]


class PipelineError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(PipelineError):
    """Invalid action graph. Detected before any action runs; never retried."""

    def __init__(self, kind: ConfigErrorKind, actions: list[str], message: str = "") -> None:
        self.kind = kind
        self.actions = list(actions)
        super().__init__(message or f"{kind}: {', '.join(self.actions)}")


class ActionFailure(PipelineError):
    """An action raised (or timed out). Carries the action name and the underlying cause."""

    def __init__(self, action: str, cause: BaseException) -> None:
        self.action = action
        self.cause = cause
        super().__init__(f"Action {action!r} failed: {type(cause).__name__}: {cause}")


class ActionTimeout(ActionFailure):
    def __init__(self, action: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(action, TimeoutError(f"exceeded {timeout:g}s"))


class RunCancelled(PipelineError):
    """Run was cancelled by the caller before this action started."""


class UndeclaredDependency(PipelineError, KeyError):
    """Action tried to read a result it did not declare in depends_on."""

    def __init__(self, action: str, name: str) -> None:
        self.action = action
        self.name = name
        PipelineError.__init__(self, f"Action {action!r} read {name!r} without declaring it in depends_on")

    def __str__(self) -> str:
        return self.args[0]


class ResultAlreadySet(PipelineError):
    """A result key was written twice in one run."""
