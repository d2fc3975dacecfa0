"""Priority classifier: keyword match over the ticket description, plan-tier fallback.

Precedence is the order of PRIORITY_KEYWORDS (urgent, high, medium, low), not
the position of a keyword in the text. Keyword sets can be overridden from
config/priority_keywords.yaml; the precedence order cannot.
"""
import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Literal

import yaml

logger = logging.getLogger(__name__)

Priority = Literal["low", "medium", "high", "urgent"]

PRIORITIES: tuple[Priority, ...] = ("urgent", "high", "medium", "low")
"""Highest precedence first."""

PRIORITY_KEYWORDS: tuple[tuple[Priority, tuple[str, ...]], ...] = (
    ("urgent", ("urgent", "emergency", "critical", "broken")),
    ("high", ("important", "error", "failed")),
    ("medium", ("issue", "problem", "bug")),
    ("low", ("help", "how to")),
)

KeywordTable = Sequence[tuple[str, Iterable[str]]]

_root = Path(__file__).resolve().parent.parent.parent
_DEFAULT_KEYWORDS_PATH = _root / "config" / "priority_keywords.yaml"


def fallback_priority(plan_tier: str | None) -> Priority:
    """Priority when no keyword matches: enterprise accounts get high, everyone else medium."""
    return "high" if (plan_tier or "").strip().lower() == "enterprise" else "medium"


def classify(description: str | None, plan_tier: str | None, keywords: KeywordTable | None = None) -> Priority:
    """Map a description and plan tier to a priority. Total and side-effect free."""
    text = (description or "").lower()
    table = keywords if keywords is not None else PRIORITY_KEYWORDS
    if text:
        for priority, words in table:
            if any(w and w.lower() in text for w in words):
                return priority  # type: ignore[return-value]
    return fallback_priority(plan_tier)


def load_priority_keywords(path: str | Path | None = None) -> tuple[tuple[Priority, tuple[str, ...]], ...]:
    """Keyword table with per-priority overrides from YAML. Returns defaults on missing/invalid file.

    File shape:
        priorities:
          urgent: [urgent, outage, ...]
          low: [question, ...]
    Priorities not listed keep their default keywords.
    """
    if path is None:
        env_path = os.environ.get("TICKETFLOW_PRIORITY_KEYWORDS", "").strip()
        path = Path(env_path) if env_path else _DEFAULT_KEYWORDS_PATH
    path = Path(path)
    if not path.is_file():
        logger.info("Priority keyword config not found at %s; using built-in keywords.", path)
        return PRIORITY_KEYWORDS
    try:
        raw = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load priority keywords from %s: %s", path, e)
        return PRIORITY_KEYWORDS
    overrides = raw.get("priorities") if isinstance(raw, dict) else None
    if not isinstance(overrides, dict):
        logger.warning("Priority keyword config %s has no 'priorities' mapping; using built-in keywords.", path)
        return PRIORITY_KEYWORDS

    unknown = sorted(set(overrides) - set(PRIORITIES))
    if unknown:
        logger.warning("Ignoring unknown priorities in %s: %s", path, ", ".join(map(str, unknown)))
    table = []
    for priority, defaults in PRIORITY_KEYWORDS:
        words = overrides.get(priority)
        if isinstance(words, list):
            cleaned = tuple(str(w).strip().lower() for w in words if str(w).strip())
            table.append((priority, cleaned))
        else:
            table.append((priority, defaults))
    logger.info("Loaded priority keywords from %s", path)
    return tuple(table)
