"""Tests for the issues.opened and discussion.created handlers."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from ghagent.github.resources import Label
from ghagent.handlers import GitHubEventHandlers
from ghagent.llm.model import ModelClass
from ghagent.llm.prompts import DISCUSSION_CREATED_BODY, render_labels
from ghagent.runtime.agent import LLMAgentRuntime
from ghagent.runtime.base import Character, string_to_uuid
from ghagent.webhooks.events import MissingInstallationError, decode_event

from tests.conftest import FakeLLM, discussion_created_payload, issue_opened_payload


REPO_LABELS = [Label("bug", "Something broken"), Label("enhancement")]


def make_handlers(response='```json\n{ "priority": "high", "type": "bug" }\n```'):
    llm = FakeLLM(response)
    runtime = LLMAgentRuntime(Character(name="Triager", bio="PM"), llm)

    issues = MagicMock()
    issues.get_labels = AsyncMock(return_value=REPO_LABELS)
    issues.add_labels = AsyncMock(return_value=[])

    discussions = MagicMock()
    discussions.update_body = AsyncMock(return_value={})

    return GitHubEventHandlers(runtime, issues, discussions), runtime, llm


def test_render_labels_lists_names_with_optional_descriptions():
    assert render_labels(REPO_LABELS) == "- bug: Something broken\n- enhancement\n"


def test_render_labels_of_empty_repository_is_empty():
    assert render_labels([]) == ""


@pytest.mark.asyncio
async def test_issue_opened_applies_priority_then_type():
    handlers, _, _ = make_handlers()
    event = decode_event("issues.opened", issue_opened_payload())

    applied = await handlers.handle_issue_opened(event)

    assert applied == ["high", "bug"]
    handlers.issues.add_labels.assert_awaited_once_with(42, "acme", "widgets", 7, ["high", "bug"])
    handlers.issues.get_labels.assert_awaited_once_with(42, "acme", "widgets")


@pytest.mark.asyncio
async def test_issue_opened_prompt_contains_issue_and_labels():
    handlers, _, llm = make_handlers()
    event = decode_event("issues.opened", issue_opened_payload())

    await handlers.handle_issue_opened(event)

    prompt = llm.prompts[0]
    assert "Bug: crash on save" in prompt
    assert "Steps..." in prompt
    assert "- bug: Something broken\n- enhancement\n" in prompt
    assert "About Triager:" in prompt
    assert "{{" not in prompt
    assert llm.model_classes == [ModelClass.LARGE]


@pytest.mark.asyncio
async def test_issue_opened_uses_deterministic_room_and_user():
    handlers, runtime, _ = make_handlers()
    event = decode_event("issues.opened", issue_opened_payload())

    await handlers.handle_issue_opened(event)
    await handlers.handle_issue_opened(event)

    room_id = string_to_uuid("github-issue-1001-room")
    user_id = string_to_uuid("555")
    assert runtime.participants[room_id] == {user_id, runtime.agent_id}
    assert runtime.accounts[user_id]["name"] == "octocat"

    # Redelivery overwrites the same inbound and response memories
    memories = await runtime.message_manager.get_memories(room_id)
    assert len(memories) == 2
    assert memories[0].content.text == "Bug: crash on save\nSteps..."
    assert memories[0].content.source == "github"


@pytest.mark.asyncio
async def test_issue_without_installation_fails_before_any_call():
    handlers, _, llm = make_handlers()
    payload = issue_opened_payload()
    del payload["installation"]
    event = decode_event("issues.opened", payload)

    with pytest.raises(MissingInstallationError):
        await handlers.handle_issue_opened(event)

    handlers.issues.get_labels.assert_not_awaited()
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_incomplete_decision_applies_no_labels():
    handlers, _, _ = make_handlers(response='{"priority": "high"}')
    event = decode_event("issues.opened", issue_opened_payload())

    with pytest.raises(ValidationError):
        await handlers.handle_issue_opened(event)

    handlers.issues.add_labels.assert_not_awaited()


@pytest.mark.asyncio
async def test_label_apply_failure_propagates():
    handlers, _, _ = make_handlers()
    handlers.issues.add_labels.side_effect = RuntimeError("403 Forbidden")
    event = decode_event("issues.opened", issue_opened_payload())

    with pytest.raises(RuntimeError, match="403"):
        await handlers.handle_issue_opened(event)


@pytest.mark.asyncio
async def test_discussion_created_replaces_body():
    handlers, _, _ = make_handlers()
    event = decode_event("discussion.created", discussion_created_payload())

    await handlers.handle_discussion_created(event)

    handlers.discussions.update_body.assert_awaited_once_with(42, "D_kwDOB", DISCUSSION_CREATED_BODY)


@pytest.mark.asyncio
async def test_discussion_without_installation_makes_no_update():
    handlers, _, _ = make_handlers()
    payload = discussion_created_payload()
    del payload["installation"]
    event = decode_event("discussion.created", payload)

    with pytest.raises(MissingInstallationError):
        await handlers.handle_discussion_created(event)

    handlers.discussions.update_body.assert_not_awaited()


@pytest.mark.asyncio
async def test_runtime_state_stays_bounded_across_many_issues():
    llm = FakeLLM('{ "priority": "low", "type": "question" }')
    runtime = LLMAgentRuntime(Character(name="Triager"), llm, max_rooms=10, max_accounts=10)
    issues = MagicMock()
    issues.get_labels = AsyncMock(return_value=[])
    issues.add_labels = AsyncMock(return_value=[])
    handlers = GitHubEventHandlers(runtime, issues, MagicMock())

    for n in range(50):
        issue = dict(issue_opened_payload()["issue"], id=5000 + n, user={"id": 9000 + n, "login": f"user{n}"})
        await handlers.handle_issue_opened(decode_event("issues.opened", issue_opened_payload(issue=issue)))

    assert runtime.message_manager.room_count == 10
    assert len(runtime.message_manager) == 20
    assert len(runtime.participants) == 10
    assert len(runtime.accounts) == 11
