"""
Observability module.

This module provides:
- Structured logging setup
- Per-delivery log context
"""

from ghagent.observability.logging import setup_logging, LogContext, get_log_context

__all__ = [
    "setup_logging",
    "LogContext",
    "get_log_context",
]
