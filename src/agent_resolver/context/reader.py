"""File reading collaborator for the context analyzer."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

# Async reader: (path) -> file text. Raises OSError on a missing/unreadable file.
ReadFn = Callable[[str], Awaitable[str]]


async def read_text_file(path: str) -> str:
    """Read a file as UTF-8 text without blocking the event loop."""
    return await asyncio.to_thread(Path(path).read_text, encoding="utf-8", errors="replace")
