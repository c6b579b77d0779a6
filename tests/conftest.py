"""Shared fixtures for ghagent tests."""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ghagent.config import Settings
from ghagent.github.client import InstallationClient
from ghagent.llm.model import ModelClass


WEBHOOK_SECRET = "It's a Secret to Everybody"


@pytest.fixture(scope="session")
def private_key() -> str:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def settings(private_key) -> Settings:
    return Settings(
        GITHUB_APP_ID="12345",
        GITHUB_PRIVATE_KEY=private_key,
        GITHUB_WEBHOOK_SECRET=WEBHOOK_SECRET,
        GITHUB_API_URL="https://api.github.test",
        AGENT_NAME="Triager",
        AGENT_BIO="Product manager for open-source projects.",
    )


class FakeClock:
    """Settable epoch-millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeAuth:
    """Stands in for GitHubAppAuth; counts token exchanges."""

    def __init__(self, installations: Optional[List[Dict[str, Any]]] = None, fail_on: Optional[int] = None):
        self.installations = installations or []
        self.fail_on = fail_on
        self.issued = 0
        self.get_installation_client = AsyncMock(side_effect=self._issue)

    async def _issue(self, installation_id: int) -> InstallationClient:
        if installation_id == self.fail_on:
            raise RuntimeError(f"token request failed for {installation_id}")
        self.issued += 1
        return InstallationClient(
            installation_id=installation_id,
            token=f"ghs_{installation_id}_{self.issued}",
            http=None,
        )

    async def iter_installations(self):
        for installation in self.installations:
            yield installation


class FakeLLM:
    """LLM stub returning a canned response."""

    def __init__(self, response: str):
        self.response = response
        self.prompts: List[str] = []
        self.model_classes: List[ModelClass] = []

    async def generate_text(self, prompt, model_class=ModelClass.MEDIUM, system_prompt=None):
        self.prompts.append(prompt)
        self.model_classes.append(model_class)
        return self.response


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def issue_opened_payload(**overrides) -> Dict[str, Any]:
    payload = {
        "action": "opened",
        "issue": {
            "id": 1001,
            "node_id": "I_kwDOA",
            "number": 7,
            "title": "Bug: crash on save",
            "body": "Steps...",
            "url": "https://api.github.com/repos/acme/widgets/issues/7",
            "html_url": "https://github.com/acme/widgets/issues/7",
            "user": {"id": 555, "login": "octocat"},
            "labels": [],
        },
        "repository": {
            "id": 99,
            "name": "widgets",
            "full_name": "acme/widgets",
            "owner": {"login": "acme"},
        },
        "installation": {"id": 42, "node_id": "MDIzOk"},
    }
    payload.update(overrides)
    return payload


def discussion_created_payload(**overrides) -> Dict[str, Any]:
    payload = {
        "action": "created",
        "discussion": {
            "id": 2002,
            "node_id": "D_kwDOB",
            "number": 3,
            "title": "Roadmap",
            "body": "What next?",
            "user": {"id": 556, "login": "hubot"},
        },
        "repository": {
            "id": 99,
            "name": "widgets",
            "full_name": "acme/widgets",
            "owner": {"login": "acme"},
        },
        "installation": {"id": 42},
    }
    payload.update(overrides)
    return payload
