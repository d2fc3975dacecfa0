"""Structured emits: EmitEvent and the per-run PipelineEmitter."""

from ticketflow.emit.types import EmitEvent, EmitLevel
from ticketflow.emit.emitter import PipelineEmitter, create_pipeline_emitter

__all__ = ["EmitEvent", "EmitLevel", "PipelineEmitter", "create_pipeline_emitter"]
