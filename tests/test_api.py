"""Tests for the webhook and health routes."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from ghagent.handlers import GitHubEventHandlers
from ghagent.main import create_app
from ghagent.service import GitHubAgentService
from ghagent.webhooks.events import IssueOpenedEvent

from tests.conftest import issue_opened_payload


@pytest.fixture
def service(settings, monkeypatch):
    monkeypatch.setattr(GitHubEventHandlers, "handle_issue_opened", AsyncMock())
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
    return GitHubAgentService(MagicMock(), settings, http=http)


def post_webhook(client, service, event, payload, signature=None, path="/api/github/webhooks"):
    body = json.dumps(payload).encode()
    headers = {
        "X-GitHub-Event": event,
        "X-GitHub-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
        "Content-Type": "application/json",
    }
    if signature is not False:
        headers["X-Hub-Signature-256"] = signature or service.webhooks.sign(body)
    return client.post(path, content=body, headers=headers)


def test_signed_issue_opened_is_accepted_and_dispatched(service):
    client = TestClient(create_app(service=service))

    response = post_webhook(client, service, "issues", issue_opened_payload())

    assert response.status_code == 202
    service.handlers.handle_issue_opened.assert_awaited_once()
    assert isinstance(service.handlers.handle_issue_opened.await_args.args[0], IssueOpenedEvent)


def test_invalid_signature_is_rejected(service):
    client = TestClient(create_app(service=service))

    response = post_webhook(client, service, "issues", issue_opened_payload(), signature="sha256=00")

    assert response.status_code == 401
    service.handlers.handle_issue_opened.assert_not_awaited()


def test_missing_signature_is_rejected(service):
    client = TestClient(create_app(service=service))

    response = post_webhook(client, service, "issues", issue_opened_payload(), signature=False)

    assert response.status_code == 401


def test_ping_is_answered(service):
    client = TestClient(create_app(service=service))

    response = post_webhook(client, service, "ping", {"zen": "Keep it logically awesome."})

    assert response.status_code == 200
    assert response.json() == {"message": "pong"}


def test_unhandled_event_is_acknowledged(service):
    client = TestClient(create_app(service=service))

    response = post_webhook(client, service, "issues", issue_opened_payload(action="closed"))

    assert response.status_code == 200
    assert "issues.closed" in response.json()["message"]
    service.handlers.handle_issue_opened.assert_not_awaited()


def test_webhook_returns_503_before_start(settings):
    client = TestClient(create_app(settings=settings))

    response = client.post("/api/github/webhooks", content=b"{}", headers={"X-GitHub-Event": "ping"})

    assert response.status_code == 503


def test_readiness_reports_cached_installations(service, settings):
    ready = TestClient(create_app(service=service)).get("/health/ready")
    assert ready.status_code == 200
    assert ready.json()["checks"]["installations"] == 0

    not_ready = TestClient(create_app(settings=settings)).get("/health/ready")
    assert not_ready.status_code == 503
    assert not_ready.json()["status"] == "not_ready"


def test_liveness(settings):
    response = TestClient(create_app(settings=settings)).get("/health/live")
    assert response.json() == {"status": "alive"}


def test_service_middleware_serves_webhook_route(service):
    client = TestClient(service.create_middleware())

    response = post_webhook(client, service, "issues", issue_opened_payload())

    assert response.status_code == 202
    service.handlers.handle_issue_opened.assert_awaited_once()
