"""Emit event types for pipeline runs."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

EmitLevel = Literal["info", "warning", "error"]

ACTION_STARTED = "action.started"
ACTION_COMPLETED = "action.completed"
ACTION_FAILED = "action.failed"
ACTION_SKIPPED = "action.skipped"
ACTION_MESSAGE = "action.message"


@dataclass
class EmitEvent:
    """Structured emit: run, action, kind, message, level, timestamp."""

    run_id: str
    action: str
    kind: str
    message: str = ""
    level: EmitLevel = "info"
    ts: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.ts is None:
            self.ts = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "action": self.action,
            "kind": self.kind,
            "message": self.message,
            "level": self.level,
            "ts": self.ts.isoformat() if self.ts else None,
            "extra": dict(self.extra),
        }
