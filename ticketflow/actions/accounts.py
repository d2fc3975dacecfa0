"""Account directory port: customer and subscription lookups used by the upstream actions.

The real account system is an external collaborator; MemoryAccountDirectory is
the explicit no-backend mode, seeded with demo accounts or from a YAML file.
"""
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_root = Path(__file__).resolve().parent.parent.parent
_DEFAULT_ACCOUNTS_PATH = _root / "config" / "accounts.yaml"

DEMO_ACCOUNTS: list[dict[str, Any]] = [
    {"customer_id": "C-1001", "name": "Ada Park", "email": "ada@example.com", "plan": "pro", "next_billing": "2026-11-01"},
    {"customer_id": "C-1002", "name": "Sam Ortiz", "email": "sam@example.com", "plan": "free", "next_billing": None},
    {"customer_id": "C-1003", "name": "Globex Ops", "email": "ops@globex.example", "plan": "enterprise", "next_billing": "2027-01-15"},
]


class UnknownCustomer(LookupError):
    pass


class AccountDirectory(ABC):
    """Abstract lookup for customer profile and subscription."""

    @abstractmethod
    def find_customer(self, *, customer_id: str | None = None, email: str | None = None) -> dict[str, Any]:
        """Return {customerId, name, email}. Raises UnknownCustomer."""

    @abstractmethod
    def subscription(self, customer_id: str) -> dict[str, Any]:
        """Return {plan, nextBilling, status}. Raises UnknownCustomer."""


class MemoryAccountDirectory(AccountDirectory):
    """Accounts held in a dict keyed by customer_id."""

    def __init__(self, accounts: list[dict[str, Any]] | None = None) -> None:
        self._by_id: dict[str, dict[str, Any]] = {}
        for acct in DEMO_ACCOUNTS if accounts is None else accounts:
            cid = str(acct.get("customer_id") or "").strip()
            if cid:
                self._by_id[cid] = dict(acct)

    def _get(self, customer_id: Any, email: str | None) -> dict[str, Any]:
        if customer_id is not None:
            acct = self._by_id.get(str(customer_id).strip())
            if acct:
                return acct
        if email:
            needle = email.strip().lower()
            for acct in self._by_id.values():
                if str(acct.get("email") or "").lower() == needle:
                    return acct
        raise UnknownCustomer(f"No account for customer_id={customer_id!r} email={email!r}")

    def find_customer(self, *, customer_id: str | None = None, email: str | None = None) -> dict[str, Any]:
        acct = self._get(customer_id, email)
        return {
            "customerId": str(acct["customer_id"]).strip(),
            "name": str(acct.get("name") or ""),
            "email": str(acct.get("email") or ""),
        }

    def subscription(self, customer_id: str) -> dict[str, Any]:
        acct = self._get(customer_id, None)
        plan = str(acct.get("plan") or "free").strip().lower()
        return {
            "plan": plan,
            "nextBilling": acct.get("next_billing"),
            "status": acct.get("status") or "active",
        }


def load_accounts(path: str | Path | None = None) -> list[dict[str, Any]] | None:
    """Accounts from YAML (`accounts: [...]`), or None when no file is configured."""
    if path is None:
        env_path = os.environ.get("TICKETFLOW_ACCOUNTS", "").strip()
        path = Path(env_path) if env_path else _DEFAULT_ACCOUNTS_PATH
    path = Path(path)
    if not path.is_file():
        return None
    try:
        raw = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load accounts from %s: %s", path, e)
        return None
    accounts = raw.get("accounts") if isinstance(raw, dict) else None
    if not isinstance(accounts, list):
        logger.warning("Accounts file %s has no 'accounts' list", path)
        return None
    out = [a for a in accounts if isinstance(a, dict)]
    logger.info("Loaded %d account(s) from %s", len(out), path)
    return out


_directory: AccountDirectory | None = None


def get_account_directory() -> AccountDirectory:
    global _directory
    if _directory is None:
        _directory = MemoryAccountDirectory(load_accounts())
    return _directory
