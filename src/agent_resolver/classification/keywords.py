"""Domain Keyword Registry - runtime-extensible keyword table for task classification."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

DEFAULT_DOMAIN_KEYWORDS: Final[dict[str, list[str]]] = {
    "infrastructure": [
        "terraform",
        "kubernetes",
        "docker",
        "aws",
        "gcp",
        "azure",
        "infrastructure",
        "deployment",
        "ci/cd",
        "pipeline",
        "container",
        "k8s",
        "helm",
        "argo",
        "monitoring",
        "logging",
        "metrics",
        "prometheus",
        "grafana",
    ],
    "security": [
        "security",
        "auth",
        "authentication",
        "authorization",
        "oauth",
        "jwt",
        "encryption",
        "ssl",
        "tls",
        "vulnerability",
        "threat",
        "compliance",
        "owasp",
        "gdpr",
        "hipaa",
        "penetration",
        "audit",
    ],
    "backend": [
        "api",
        "backend",
        "server",
        "database",
        "sql",
        "nosql",
        "mongodb",
        "postgresql",
        "mysql",
        "redis",
        "rest",
        "graphql",
        "express",
        "nestjs",
        "fastapi",
        "django",
        "flask",
        "middleware",
        "routes",
        "controllers",
        "services",
        "orm",
        "prisma",
        "sqlalchemy",
        "migration",
        "dto",
        "validation",
    ],
    "core-language": [
        "typescript",
        "python",
        "type",
        "interface",
        "generic",
        "utility",
        "decorator",
        "module",
        "compiler",
        "strict",
        "config",
        "build",
        "bundle",
        "transpile",
        "lint",
        "eslint",
        "prettier",
        "mypy",
    ],
    "frontend-general": [
        "frontend",
        "ui",
        "html",
        "css",
        "javascript",
        "dom",
        "responsive",
        "accessibility",
        "aria",
        "wcag",
        "svelte",
        "vue",
        "angular",
        "web components",
    ],
    "frontend-framework": [
        "react",
        "next.js",
        "component",
        "hook",
        "state",
        "props",
        "jsx",
        "tsx",
        "redux",
        "zustand",
        "context",
        "router",
        "navigation",
        "form",
        "react-hook-form",
        "tanstack query",
    ],
    "design": [
        "design",
        "ux",
        "mockup",
        "wireframe",
        "prototype",
        "figma",
        "sketch",
        "user experience",
        "usability",
        "interaction",
        "visual design",
        "branding",
        "color",
        "typography",
    ],
}


class KeywordRegistry:
    """
    Mapping of domain tag to lowercase keywords.

    Seeded from DEFAULT_DOMAIN_KEYWORDS and open for runtime extension.
    Construct one per pipeline and inject it; call reset() to restore
    the defaults between tests.
    """

    def __init__(self, defaults: dict[str, list[str]] | None = None) -> None:
        self._defaults = defaults if defaults is not None else DEFAULT_DOMAIN_KEYWORDS
        self._keywords: dict[str, set[str]] = {}
        self.reset()

    def get_keywords(self, domain: str) -> list[str]:
        """Keywords registered for a domain (empty for unknown domains)."""
        return sorted(self._keywords.get(domain, set()))

    def get_all_keywords(self) -> dict[str, list[str]]:
        return {domain: sorted(words) for domain, words in self._keywords.items()}

    def get_domains(self) -> list[str]:
        return list(self._keywords)

    def register_keywords(self, domain: str, words: Iterable[str]) -> None:
        """Add keywords to a domain without removing existing ones."""
        existing = self._keywords.setdefault(domain, set())
        existing.update(word.lower() for word in words)

    def set_keywords(self, domain: str, words: Iterable[str]) -> None:
        """Replace all keywords for a domain."""
        self._keywords[domain] = {word.lower() for word in words}

    def find_domains_for_keyword(self, word: str) -> list[str]:
        lowered = word.lower()
        return [domain for domain, words in self._keywords.items() if lowered in words]

    def reset(self) -> None:
        """Restore the default keyword table."""
        self._keywords = {domain: {w.lower() for w in words} for domain, words in self._defaults.items()}
