"""
Webhook event handlers.

- issues.opened: ask the agent to triage the issue and apply the
  priority and type labels it picks.
- discussion.created: replace the discussion body with the vote template.
"""

import logging
import time
from typing import List

from ghagent.github.resources import DiscussionsClient, IssuesClient
from ghagent.llm.model import ModelClass
from ghagent.llm.prompts import DISCUSSION_CREATED_BODY, ISSUE_OPENED_TEMPLATE, render_labels
from ghagent.llm.schemas import LabelDecision
from ghagent.runtime.base import AgentRuntime, Content, Memory, compose_context, string_to_uuid
from ghagent.runtime.memory import zero_embedding
from ghagent.webhooks.events import DiscussionCreatedEvent, IssueOpenedEvent, require_installation

logger = logging.getLogger(__name__)

SOURCE = "github"


def _now_ms() -> int:
    return int(time.time() * 1000)


class GitHubEventHandlers:
    """
    Handlers registered with the webhook transport.

    Both handlers let every exception propagate; the transport reports
    them to its error callback.
    """

    def __init__(
        self,
        runtime: AgentRuntime,
        issues: IssuesClient,
        discussions: DiscussionsClient,
    ):
        """
        Args:
            runtime: Agent runtime used to triage issues
            issues: Issues API facade
            discussions: Discussions API facade
        """
        self.runtime = runtime
        self.issues = issues
        self.discussions = discussions

    async def handle_issue_opened(self, event: IssueOpenedEvent) -> List[str]:
        """
        Triage a newly opened issue.

        Args:
            event: Decoded issues.opened payload

        Returns:
            List[str]: The labels applied, priority first

        Raises:
            MissingInstallationError: If the payload has no installation
        """
        installation = require_installation(event)
        issue = event.issue
        owner = event.repository.owner.login
        repo = event.repository.name

        logger.info(
            "Triaging opened issue",
            extra={"repository": f"{owner}/{repo}", "issue_number": issue.number},
        )

        labels = render_labels(await self.issues.get_labels(installation.id, owner, repo))

        runtime = self.runtime
        room_id = string_to_uuid(f"github-issue-{issue.id}-room")
        user_id = string_to_uuid(issue.user.id)

        await runtime.ensure_connection(
            user_id,
            room_id,
            issue.user.display_name,
            issue.user.display_name,
            SOURCE,
        )

        message_id = string_to_uuid(f"issues-opened-{issue.id}")
        body = issue.body or ""

        memory = Memory(
            id=string_to_uuid(f"{message_id}-{user_id}"),
            user_id=user_id,
            agent_id=runtime.agent_id,
            room_id=room_id,
            content=Content(text=f"{issue.title}\n{body}", source=SOURCE, url=issue.url),
            created_at=_now_ms(),
        )

        await runtime.message_manager.add_embedding_to_memory(memory)
        await runtime.message_manager.create_memory(memory)

        state = await runtime.compose_state(
            memory,
            {
                "agentName": runtime.character.name,
                "title": issue.title,
                "body": body,
                "labels": labels,
            },
        )

        context = compose_context(state, ISSUE_OPENED_TEMPLATE)
        response = await runtime.generate_response(context, ModelClass.LARGE)

        response_memory = Memory(
            id=string_to_uuid(f"{message_id}-{runtime.agent_id}"),
            user_id=runtime.agent_id,
            agent_id=runtime.agent_id,
            room_id=room_id,
            content=response,
            embedding=zero_embedding(),
            created_at=_now_ms(),
        )
        await runtime.message_manager.create_memory(response_memory)

        state = await runtime.update_recent_message_state(state)
        await runtime.evaluate(memory, state)

        decision = LabelDecision.model_validate(response.model_dump())
        issue_labels = decision.as_labels()

        await self.issues.add_labels(installation.id, owner, repo, issue.number, issue_labels)
        return issue_labels

    async def handle_discussion_created(self, event: DiscussionCreatedEvent) -> None:
        """
        Replace a new discussion's body with the vote template.

        Raises:
            MissingInstallationError: If the payload has no installation
        """
        installation = require_installation(event)

        await self.discussions.update_body(
            installation.id,
            event.discussion.node_id,
            DISCUSSION_CREATED_BODY,
        )
