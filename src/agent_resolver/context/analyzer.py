"""
Context Analyzer - extracts a CodebaseContext from the files a task touches.

File types, architectural patterns, technology stack and infrastructure
components come from path strings alone. Import patterns come from reading
at most MAX_SCANNED_FILES files through the injected reader; a file that
cannot be read contributes no imports.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import Final

from agent_resolver.models import CodebaseContext, TaskContext

from . import rules
from .reader import ReadFn, read_text_file

logger = logging.getLogger(__name__)

MAX_SCANNED_FILES: Final[int] = 10


def _detached(context: CodebaseContext) -> CodebaseContext:
    """Copy with fresh lists, so callers never share the cached record's lists."""
    return replace(
        context,
        affected_file_types=list(context.affected_file_types),
        import_patterns=list(context.import_patterns),
        architectural_patterns=list(context.architectural_patterns),
        technology_stack=list(context.technology_stack),
        infrastructure_components=list(context.infrastructure_components),
    )


def cache_key(affected_files: Sequence[str]) -> str:
    """Order-preserving digest of a file list."""
    digest = hashlib.sha256()
    for file_path in affected_files:
        digest.update(file_path.encode("utf-8"))
        digest.update(b"\x00")
    return digest.hexdigest()


class ContextAnalyzer:
    """Builds and caches CodebaseContext records."""

    def __init__(self, reader: ReadFn | None = None) -> None:
        self._read = reader or read_text_file
        self._cache: dict[str, CodebaseContext] = {}

    async def analyze_context(self, affected_files: Sequence[str]) -> CodebaseContext:
        """
        Analyze a list of affected files.

        Results are cached by the exact ordered file list; a repeated call
        with the same list performs no reads.
        """
        files = list(affected_files or [])
        key = cache_key(files)

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Returning cached context analysis", extra={"file_count": len(files)})
            return _detached(cached)

        logger.debug("Analyzing codebase context", extra={"file_count": len(files), "files": files[:5]})

        import_patterns = await self._extract_import_patterns(files)
        context = CodebaseContext(
            affected_file_types=rules.extract_file_types(files),
            import_patterns=import_patterns,
            architectural_patterns=rules.detect_architectural_patterns(files, import_patterns),
            technology_stack=rules.detect_technology_stack(files, import_patterns),
            infrastructure_components=rules.detect_infrastructure_components(files),
        )

        # Whole-entry insert; concurrent readers see either no entry or a complete one
        self._cache[key] = context

        logger.debug(
            "Context analysis complete",
            extra={
                "file_types": len(context.affected_file_types),
                "import_patterns": len(context.import_patterns),
                "architectural_patterns": len(context.architectural_patterns),
                "technology_stack": len(context.technology_stack),
                "infrastructure_components": len(context.infrastructure_components),
            },
        )
        return _detached(context)

    async def analyze_task_context(self, task_context: TaskContext) -> CodebaseContext:
        """Analyze the affected files of a full task context."""
        return await self.analyze_context(task_context.affected_files)

    async def _extract_import_patterns(self, files: list[str]) -> list[str]:
        scanned = [f for f in files[:MAX_SCANNED_FILES] if rules.is_scannable(f)]
        if not scanned:
            return []

        results = await asyncio.gather(*(self._imports_for(f) for f in scanned))
        return sorted({package for found in results for package in found})

    async def _imports_for(self, file_path: str) -> list[str]:
        try:
            content = await self._read(file_path)
        except Exception as exc:
            # A single unreadable file must not abort the analysis
            logger.debug(
                "Could not read file for import analysis",
                extra={"path": file_path, "error": str(exc)},
            )
            return []
        return rules.extract_imports(content, file_path)

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("Context analysis cache cleared")

    def get_cache_size(self) -> int:
        return len(self._cache)
