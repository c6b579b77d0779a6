"""
GitHub App webhook bridge to a conversational agent runtime.
"""

__version__ = "0.1.0"
