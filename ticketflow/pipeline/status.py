"""Run statuses for a pipeline run. Used in PipelineRun, emit events, and API payloads.

pending -> running -> completed | partially_completed
pending -> config_invalid (graph rejected before any action runs)
"""
from typing import Literal

PENDING = "pending"
RUNNING = "running"
COMPLETED = "completed"
PARTIALLY_COMPLETED = "partially_completed"
CONFIG_INVALID = "config_invalid"

RunStatus = Literal["pending", "running", "completed", "partially_completed", "config_invalid"]

STATUSES = [PENDING, RUNNING, COMPLETED, PARTIALLY_COMPLETED, CONFIG_INVALID]
TERMINAL_STATUSES = frozenset({COMPLETED, PARTIALLY_COMPLETED, CONFIG_INVALID})
