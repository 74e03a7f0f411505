"""Codebase context extraction."""

from agent_resolver.context.analyzer import MAX_SCANNED_FILES, ContextAnalyzer, cache_key
from agent_resolver.context.reader import ReadFn, read_text_file

__all__ = [
    "MAX_SCANNED_FILES",
    "ContextAnalyzer",
    "ReadFn",
    "cache_key",
    "read_text_file",
]
