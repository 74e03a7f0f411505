"""File-pattern fallback: picks an agent from affected file paths alone."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Final

from agent_resolver import paths

INFRASTRUCTURE_AGENT: Final[str] = "platform-engineer"
FRAMEWORK_FRONTEND_AGENT: Final[str] = "frontend-framework-engineer"
BACKEND_AGENT: Final[str] = "backend-engineer"

INFRASTRUCTURE_EXTENSIONS: Final[frozenset[str]] = frozenset({".tf", ".tfvars", ".hcl", ".yaml"})
INFRASTRUCTURE_BASENAMES: Final[frozenset[str]] = frozenset(
    {"dockerfile", "docker-compose.yaml", "docker-compose.yml", "compose.yaml", "compose.yml"}
)
INFRASTRUCTURE_WORDS: Final[frozenset[str]] = frozenset(
    {"infra", "infrastructure", "terraform", "docker", "k8s", "kubernetes", "helm"}
)

FRAMEWORK_EXTENSIONS: Final[frozenset[str]] = frozenset({".tsx", ".jsx", ".vue", ".svelte"})
FRAMEWORK_WORDS: Final[frozenset[str]] = frozenset({"component", "components", "hook", "hooks"})

BACKEND_WORDS: Final[frozenset[str]] = frozenset(
    {
        "controller",
        "controllers",
        "service",
        "services",
        "model",
        "models",
        "route",
        "routes",
        "database",
        "db",
    }
)


def _is_infrastructure(path: str) -> bool:
    return (
        paths.extension(path) in INFRASTRUCTURE_EXTENSIONS
        or paths.basename(path) in INFRASTRUCTURE_BASENAMES
        or paths.has_token(path, INFRASTRUCTURE_WORDS)
    )


def _is_framework_frontend(path: str) -> bool:
    return paths.extension(path) in FRAMEWORK_EXTENSIONS or paths.has_token(path, FRAMEWORK_WORDS)


def _is_backend(path: str) -> bool:
    return paths.has_token(path, BACKEND_WORDS)


# Fixed precedence; first rule matching any file wins
FALLBACK_RULES: Final[tuple[tuple[str, Callable[[str], bool]], ...]] = (
    (INFRASTRUCTURE_AGENT, _is_infrastructure),
    (FRAMEWORK_FRONTEND_AGENT, _is_framework_frontend),
    (BACKEND_AGENT, _is_backend),
)


def determine_fallback_agent(affected_files: Sequence[str]) -> str:
    """Role for a file list; never empty, never reads file contents."""
    files = list(affected_files or [])
    for role, matches in FALLBACK_RULES:
        if any(matches(f) for f in files):
            return role
    return BACKEND_AGENT
