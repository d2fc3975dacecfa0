"""CLI tests: python -m ticketflow."""
import json
from unittest.mock import patch

from ticketflow import __main__ as cli
from ticketflow.actions import MemoryAccountDirectory, build_support_pipeline
from ticketflow.config import Config
from ticketflow.notify import MemoryNotifier
from ticketflow.triage.classifier import PRIORITY_KEYWORDS


def _pipeline():
    return build_support_pipeline(
        notifier=MemoryNotifier(),
        directory=MemoryAccountDirectory(),
        config=Config(),
        keywords=PRIORITY_KEYWORDS,
    )


def test_cli_completed(capsys):
    with patch.object(cli, "build_support_pipeline", _pipeline):
        code = cli.main(["how to change email", "--customer-id", "C-1002"])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["results"]["createTicket"]["priority"] == "low"


def test_cli_partial_exit_code(capsys):
    with patch.object(cli, "build_support_pipeline", _pipeline):
        code = cli.main(["help"])
    assert code == 1
    assert json.loads(capsys.readouterr().out)["status"] == "partially_completed"
