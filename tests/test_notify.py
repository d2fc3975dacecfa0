"""Unit tests for notifiers: HTTP delivery outcomes (via httpx.MockTransport) and the memory notifier."""
import json
from unittest.mock import patch

import httpx
import pytest

from ticketflow.config import Config
from ticketflow.notify import (
    Delivered,
    Failed,
    HttpNotifier,
    MemoryNotifier,
    get_notifier,
    reset_notifier,
)
from ticketflow.triage.tickets import build_ticket

URL = "https://notify.test/notify"


@pytest.fixture
def ticket():
    return build_ticket("the dashboard is broken", "urgent", "C-1001", "pro")


def _notifier(handler) -> HttpNotifier:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpNotifier(url=URL, timeout=1.0, client=client)


def test_http_delivered_on_2xx(ticket):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(202)

    result = _notifier(handler).notify(ticket)
    assert result == Delivered(status_code=202)
    assert result.delivered
    assert seen["method"] == "POST"
    assert seen["url"] == URL
    assert seen["body"]["ticket_id"] == ticket.ticket_id
    assert seen["body"]["priority"] == "urgent"
    assert seen["body"]["assigned_to"] == "on-call-team"


def test_http_failed_on_non_success_status(ticket):
    result = _notifier(lambda r: httpx.Response(503)).notify(ticket)
    assert isinstance(result, Failed)
    assert not result.delivered
    assert result.status_code == 503
    assert "503" in result.cause


def test_http_failed_on_transport_error(ticket):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = _notifier(handler).notify(ticket)
    assert isinstance(result, Failed)
    assert "ConnectError" in result.cause


def test_http_failed_on_timeout(ticket):
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    result = _notifier(handler).notify(ticket)
    assert isinstance(result, Failed)
    assert result.cause.startswith("timeout")


def test_http_single_attempt(ticket):
    attempts = []

    def handler(request):
        attempts.append(1)
        return httpx.Response(500)

    _notifier(handler).notify(ticket)
    assert len(attempts) == 1


def test_http_defaults_come_from_config():
    cfg = Config(notifier_type="http", notify_url="https://cfg.test/n", notify_timeout_seconds=2.5)
    with patch("ticketflow.notify.http_notifier.get_config", return_value=cfg):
        n = HttpNotifier()
    assert n._url == "https://cfg.test/n"
    assert n._timeout == 2.5


def test_memory_notifier_records(ticket):
    n = MemoryNotifier()
    assert n.notify(ticket) == Delivered()
    assert n.sent == [ticket]
    assert n.attempts == 1


def test_memory_notifier_fail_mode(ticket):
    n = MemoryNotifier(fail_with="endpoint unavailable")
    result = n.notify(ticket)
    assert result == Failed("endpoint unavailable")
    assert n.sent == []
    assert n.attempts == 1


def test_get_notifier_by_config():
    reset_notifier()
    try:
        with patch("ticketflow.notify.get_config", return_value=Config(notifier_type="memory")):
            assert isinstance(get_notifier(), MemoryNotifier)
        reset_notifier()
        with patch("ticketflow.notify.get_config", return_value=Config(notifier_type="http")):
            assert isinstance(get_notifier(), HttpNotifier)
        reset_notifier()
        with patch("ticketflow.notify.get_config", return_value=Config(notifier_type="carrier-pigeon")):
            with pytest.raises(ValueError):
                get_notifier()
    finally:
        reset_notifier()
