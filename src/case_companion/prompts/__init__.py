"""Prompt assembly for the case analysis flows.

This package provides the ``PromptProfile`` data model and the pure functions
that turn case facts, documents and chat history into request messages.
"""

from .context_builder import (
    PromptProfile,
    build_messages,
    build_user_content,
    compact_history,
    render_document,
    render_documents,
    truncate_snippet,
)

__all__ = [
    "PromptProfile",
    "build_messages",
    "build_user_content",
    "compact_history",
    "render_document",
    "render_documents",
    "truncate_snippet",
]
