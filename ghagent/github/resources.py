"""
Per-resource GitHub API facades.

Each call obtains a handle for the installation from the cache and
issues exactly one upstream request (label listing follows pagination).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ghagent.github.cache import InstallationClientCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Label:
    """Repository label."""

    name: str
    description: Optional[str] = None


class ResourceClient:
    """Base class for stateless resource facades."""

    def __init__(self, cache: InstallationClientCache):
        self.cache = cache


class IssuesClient(ResourceClient):
    """Issue and label operations."""

    async def add_labels(
        self,
        installation_id: int,
        owner: str,
        repo: str,
        issue_number: int,
        labels: Sequence[str],
    ) -> List[Dict[str, Any]]:
        """
        Add labels to an issue.

        Args:
            installation_id: GitHub App installation ID
            owner: Repository owner
            repo: Repository name
            issue_number: Issue number
            labels: Label names to add

        Returns:
            List[Dict]: Labels now set on the issue
        """
        client = await self.cache.get_client(installation_id)

        logger.info(
            "Adding labels to issue",
            extra={"repository": f"{owner}/{repo}", "issue_number": issue_number, "labels": list(labels)},
        )

        response = await client.request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/labels",
            json={"labels": list(labels)},
        )
        return response.json()

    async def get_labels(
        self,
        installation_id: int,
        owner: str,
        repo: str,
        per_page: int = 100,
    ) -> List[Label]:
        """
        List the labels defined on a repository, in GitHub's order.

        Args:
            installation_id: GitHub App installation ID
            owner: Repository owner
            repo: Repository name
            per_page: Page size

        Returns:
            List[Label]: Repository labels
        """
        client = await self.cache.get_client(installation_id)

        labels: List[Label] = []
        page = 1

        while True:
            response = await client.request(
                "GET",
                f"/repos/{owner}/{repo}/labels",
                params={"per_page": per_page, "page": page},
            )
            data = response.json()

            labels.extend(
                Label(name=item["name"], description=item.get("description"))
                for item in data
            )

            if len(data) < per_page:
                break
            page += 1

        return labels


class DiscussionsClient(ResourceClient):
    """Discussion operations (GraphQL only)."""

    UPDATE_BODY_MUTATION = """
        mutation UpdateDiscussionBody($discussionId: ID!, $body: String!) {
            updateDiscussion(input: {discussionId: $discussionId, body: $body}) {
                discussion {
                    id
                }
            }
        }
    """

    async def update_body(self, installation_id: int, discussion_id: str, body: str) -> Dict[str, Any]:
        """
        Replace the body of a discussion.

        Args:
            installation_id: GitHub App installation ID
            discussion_id: Discussion GraphQL node id
            body: New Markdown body

        Returns:
            Dict: GraphQL ``data`` payload
        """
        client = await self.cache.get_client(installation_id)

        logger.info("Updating discussion body", extra={"discussion_id": discussion_id})

        return await client.graphql(
            self.UPDATE_BODY_MUTATION,
            {"discussionId": discussion_id, "body": body},
        )
