"""Automerge — policy-driven approval and merge of pull requests."""

__version__ = "0.3.0"
