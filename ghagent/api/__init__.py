"""
API package.

This package contains all API route handlers.
"""

from ghagent.api import webhooks, health

__all__ = ["webhooks", "health"]
