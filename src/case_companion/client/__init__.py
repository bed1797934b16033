"""Completion endpoint client."""

from .completion import CompletionClient, parse_completion_body

__all__ = ["CompletionClient", "parse_completion_body"]
