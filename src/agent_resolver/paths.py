"""Path tokenising helpers shared by the path-driven heuristics."""

from __future__ import annotations

import posixpath
import re

# Extensionless files recognised by basename
SPECIAL_BASENAMES: frozenset[str] = frozenset(
    {"dockerfile", "makefile", "jenkinsfile", "vagrantfile", "procfile", "gemfile"}
)

_SPLIT = re.compile(r"[/\\._\-\s]+")


def normalize(path: str) -> str:
    """Lower-case a path and use forward slashes."""
    return path.replace("\\", "/").lower()


def basename(path: str) -> str:
    return posixpath.basename(normalize(path))


def extension(path: str) -> str:
    """Lower-cased extension, with `.d.ts` kept whole and `.yml` folded to `.yaml`."""
    name = basename(path)
    if name.endswith(".d.ts"):
        return ".d.ts"
    ext = posixpath.splitext(name)[1]
    if ext == ".yml":
        return ".yaml"
    return ext


def tokens(path: str) -> set[str]:
    """Every word in a path: segments further split on dots, dashes and underscores."""
    return {tok for tok in _SPLIT.split(normalize(path)) if tok}


def has_token(path: str, candidates: frozenset[str] | set[str]) -> bool:
    return not tokens(path).isdisjoint(candidates)
