"""Pipeline: actions, the per-run context store, and the dependency-ordered executor."""

from ticketflow.pipeline.action import Action, action
from ticketflow.pipeline.context import ActionContext, ContextStore
from ticketflow.pipeline.errors import (
    ActionFailure,
    ActionTimeout,
    ConfigurationError,
    PipelineError,
    RunCancelled,
    UndeclaredDependency,
)
from ticketflow.pipeline.executor import Pipeline, resolve_order, run_pipeline
from ticketflow.pipeline.result import PipelineRun

__all__ = [
    "Action",
    "action",
    "ActionContext",
    "ContextStore",
    "ActionFailure",
    "ActionTimeout",
    "ConfigurationError",
    "PipelineError",
    "RunCancelled",
    "UndeclaredDependency",
    "Pipeline",
    "PipelineRun",
    "resolve_order",
    "run_pipeline",
]
