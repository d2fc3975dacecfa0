"""
Per-run debug trace. Off unless TICKETFLOW_DEBUG_TRACE (or DEBUG_TRACE) is 1/true/yes/on.

A triage run then logs one line per step, keyed by the short run id:

  [trace] run=ab12cd34 pipeline entered actions=4
  [trace] run=ab12cd34 action=getCustomerInfo entered
  [trace] run=ab12cd34 action=getCustomerInfo exited ms=2
  [trace] run=ab12cd34 action=notifyTeam failed ms=5003 error=ActionTimeout
  [trace] run=ab12cd34 pipeline exited status=partially_completed ms=5011
"""
import logging
import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)

TRACE_ENV_KEYS = ("TICKETFLOW_DEBUG_TRACE", "DEBUG_TRACE")
RUN_ID_CHARS = 8
_TRACE_ENABLED: bool | None = None


def is_trace_enabled() -> bool:
    """Cached; call reset_trace_cache() after changing env."""
    global _TRACE_ENABLED
    if _TRACE_ENABLED is None:
        _TRACE_ENABLED = any(
            (os.environ.get(key) or "").strip().lower() in ("1", "true", "yes", "on") for key in TRACE_ENV_KEYS
        )
    return _TRACE_ENABLED


def reset_trace_cache() -> None:
    global _TRACE_ENABLED
    _TRACE_ENABLED = None


def format_trace(event: str, *, run_id: str | None = None, action: str | None = None, **fields: Any) -> str:
    parts = ["[trace]"]
    if run_id:
        parts.append(f"run={run_id[:RUN_ID_CHARS]}")
    if action:
        parts.append(f"action={action}")
    parts.append(event)
    parts.extend(f"{k}={v}" for k, v in fields.items() if v is not None)
    return " ".join(parts)


def trace_log(event: str, *, run_id: str | None = None, action: str | None = None, **fields: Any) -> None:
    if is_trace_enabled():
        logger.info(format_trace(event, run_id=run_id, action=action, **fields))


@contextmanager
def trace_action(run_id: str, action: str) -> Iterator[None]:
    """Trace one action invocation: entered, then exited or failed with elapsed ms."""
    if not is_trace_enabled():
        yield
        return
    trace_log("entered", run_id=run_id, action=action)
    t0 = time.perf_counter()
    try:
        yield
    except Exception as e:
        trace_log("failed", run_id=run_id, action=action, ms=_elapsed_ms(t0), error=type(e).__name__)
        raise
    trace_log("exited", run_id=run_id, action=action, ms=_elapsed_ms(t0))


def _elapsed_ms(t0: float) -> int:
    return int((time.perf_counter() - t0) * 1000)
