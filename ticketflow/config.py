"""Config from environment. Single place for notifier, timeouts, and pipeline policy."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

_root = Path(__file__).resolve().parent.parent
_env_file = _root / ".env"
if _env_file.exists():
    load_dotenv(_env_file, override=False)

DEFAULT_NOTIFY_URL = "https://api.notification-service.com/notify"


@dataclass
class Config:
    """App config. Load from env or defaults."""
    notifier_type: Literal["memory", "http"] = "memory"
    notify_url: str = DEFAULT_NOTIFY_URL
    notify_timeout_seconds: float = 5.0
    action_timeout_seconds: float | None = 30.0
    all_or_nothing: bool = False
    ticket_source: str = "ai-agent"


def _env_bool(key: str, default: bool) -> bool:
    v = (os.getenv(key) or "").strip().lower()
    if not v:
        return default
    return v in ("1", "true", "yes", "on")


def _env_float(key: str, default: float | None) -> float | None:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    # 0 or negative disables the per-action bound
    return value if value > 0 else None


def get_config() -> Config:
    return Config(
        notifier_type=(os.getenv("NOTIFIER_TYPE") or "memory").strip().lower(),
        notify_url=(os.getenv("NOTIFY_URL") or DEFAULT_NOTIFY_URL).strip(),
        notify_timeout_seconds=_env_float("NOTIFY_TIMEOUT_SECONDS", 5.0) or 5.0,
        action_timeout_seconds=_env_float("ACTION_TIMEOUT_SECONDS", 30.0),
        all_or_nothing=_env_bool("PIPELINE_ALL_OR_NOTHING", False),
        ticket_source=(os.getenv("TICKET_SOURCE") or "ai-agent").strip() or "ai-agent",
    )


def validate_config(cfg: Config) -> list[str]:
    """Return a list of problems (empty when the config is usable)."""
    problems: list[str] = []
    if cfg.notifier_type not in ("memory", "http"):
        problems.append(f"Unsupported NOTIFIER_TYPE: {cfg.notifier_type}. Use memory or http.")
    if cfg.notifier_type == "http" and not cfg.notify_url.startswith(("http://", "https://")):
        problems.append(f"NOTIFY_URL must be an http(s) URL, got {cfg.notify_url!r}")
    if cfg.notify_timeout_seconds <= 0:
        problems.append("NOTIFY_TIMEOUT_SECONDS must be positive")
    elif cfg.action_timeout_seconds is not None and cfg.notify_timeout_seconds >= cfg.action_timeout_seconds:
        problems.append(
            f"NOTIFY_TIMEOUT_SECONDS ({cfg.notify_timeout_seconds:g}) must be below "
            f"ACTION_TIMEOUT_SECONDS ({cfg.action_timeout_seconds:g})"
        )
    return problems
