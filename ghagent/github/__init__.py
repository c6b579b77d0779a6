"""
GitHub integration package.

This package handles all GitHub API interactions including:
- GitHub App authentication
- Per-installation client caching
- Issue and discussion API facades
"""

from ghagent.github.auth import GitHubAppAuth, GitHubAuthError
from ghagent.github.cache import InstallationClientCache, NotFoundError
from ghagent.github.client import GitHubGraphQLError, InstallationClient
from ghagent.github.resources import DiscussionsClient, IssuesClient, Label

__all__ = [
    "GitHubAppAuth",
    "GitHubAuthError",
    "InstallationClientCache",
    "NotFoundError",
    "InstallationClient",
    "GitHubGraphQLError",
    "IssuesClient",
    "DiscussionsClient",
    "Label",
]
