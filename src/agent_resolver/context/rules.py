"""
Context Detection Rules

Rule tables turning (import name, path segment, file extension) signals into
architectural patterns, technology stack entries and infrastructure
components, plus the import extraction patterns.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Final

from agent_resolver import paths

# ═══════════════════════════════════════════════════════════════════════════
# IMPORT EXTRACTION
# ═══════════════════════════════════════════════════════════════════════════

PYTHON_EXTENSIONS: Final[frozenset[str]] = frozenset({".py", ".pyi"})

SCRIPT_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {".ts", ".tsx", ".d.ts", ".js", ".jsx", ".mts", ".mjs", ".cts", ".cjs", ".vue", ".svelte"}
)

SCANNABLE_EXTENSIONS: Final[frozenset[str]] = PYTHON_EXTENSIONS | SCRIPT_EXTENSIONS


def _script_package(specifier: str) -> str | None:
    """`@scope/pkg/sub` -> `@scope/pkg`, `lodash/fp` -> `lodash`; relative -> None."""
    if specifier.startswith((".", "/")):
        return None
    specifier = specifier.removeprefix("node:")
    parts = specifier.split("/")
    if specifier.startswith("@") and len(parts) >= 2:
        return f"{parts[0]}/{parts[1]}"
    return parts[0] or None


def _python_package(specifier: str) -> str | None:
    """`fastapi.responses` -> `fastapi`; relative (`.models`) -> None."""
    if specifier.startswith("."):
        return None
    return specifier.split(".")[0] or None


@dataclass(frozen=True)
class ImportPattern:
    """One regex whose first group is a module specifier."""

    regex: re.Pattern[str]
    python: bool = False

    def extract(self, content: str) -> list[str]:
        normalize: Callable[[str], str | None] = _python_package if self.python else _script_package
        found: list[str] = []
        for match in self.regex.finditer(content):
            # Python `import a, b as c` lists several modules in one group
            raw = match.group(1)
            specifiers = raw.split(",") if self.python else [raw]
            for spec in specifiers:
                spec = spec.strip().split(" ")[0]
                package = normalize(spec) if spec else None
                if package:
                    found.append(package)
        return found


IMPORT_RULES: Final[dict[str, tuple[ImportPattern, ...]]] = {
    "static": (
        ImportPattern(re.compile(r"""\bimport\s+(?:[\w*{}\s,]+?\s+from\s+)?['"]([^'"]+)['"]""")),
        ImportPattern(re.compile(r"""\bexport\s+[\w*{}\s,]+?\s+from\s+['"]([^'"]+)['"]""")),
        ImportPattern(re.compile(r"^[ \t]*from[ \t]+([.\w]+)[ \t]+import\b", re.MULTILINE), python=True),
        ImportPattern(
            re.compile(
                r"^[ \t]*import[ \t]+([\w.]+(?:[ \t]+as[ \t]+\w+)?(?:[ \t]*,[ \t]*[\w.]+(?:[ \t]+as[ \t]+\w+)?)*)[ \t]*(?:#.*)?$",
                re.MULTILINE,
            ),
            python=True,
        ),
    ),
    "dynamic": (
        ImportPattern(re.compile(r"""\bimport\s*\(\s*['"]([^'"]+)['"]\s*\)""")),
        ImportPattern(re.compile(r"""\bimportlib\.import_module\(\s*['"]([^'"]+)['"]"""), python=True),
        ImportPattern(re.compile(r"""\b__import__\(\s*['"]([^'"]+)['"]"""), python=True),
    ),
    "require": (ImportPattern(re.compile(r"""\brequire\s*\(\s*['"]([^'"]+)['"]\s*\)""")),),
}


def is_scannable(path: str) -> bool:
    return paths.extension(path) in SCANNABLE_EXTENSIONS


def extract_imports(content: str, path: str) -> list[str]:
    """External module names referenced by a file, in first-seen order."""
    is_python = paths.extension(path) in PYTHON_EXTENSIONS
    found: list[str] = []
    for patterns in IMPORT_RULES.values():
        for pattern in patterns:
            if pattern.python != is_python:
                continue
            for package in pattern.extract(content):
                if package not in found:
                    found.append(package)
    return found


# ═══════════════════════════════════════════════════════════════════════════
# FILE TYPES
# ═══════════════════════════════════════════════════════════════════════════


def extract_file_types(file_paths: Iterable[str]) -> list[str]:
    types: set[str] = set()
    for file_path in file_paths:
        ext = paths.extension(file_path)
        if ext:
            types.add(ext)
        name = paths.basename(file_path)
        if name in paths.SPECIAL_BASENAMES:
            types.add(name)
    return sorted(types)


# ═══════════════════════════════════════════════════════════════════════════
# ARCHITECTURAL PATTERNS
# ═══════════════════════════════════════════════════════════════════════════

FRAMEWORK_IMPORTS: Final[dict[str, frozenset[str]]] = {
    "angular": frozenset({"@angular/core", "@angular/common"}),
    "express": frozenset({"express"}),
    "fastify": frozenset({"fastify"}),
    "koa": frozenset({"koa"}),
    "nestjs": frozenset({"@nestjs/core", "@nestjs/common"}),
    "react": frozenset({"react", "react-dom", "next"}),
    "svelte": frozenset({"svelte"}),
    "vue": frozenset({"vue", "nuxt"}),
    "django": frozenset({"django"}),
    "flask": frozenset({"flask"}),
    "fastapi": frozenset({"fastapi"}),
}

# Every group must be matched by at least one file
ARCHITECTURE_PATHS: Final[dict[str, tuple[frozenset[str], ...]]] = {
    "clean-architecture": (frozenset({"usecase", "usecases", "interactor", "interactors"}),),
    "cqrs": (frozenset({"command", "commands"}), frozenset({"query", "queries"})),
    "layered-architecture": (
        frozenset({"domain", "entity", "entities", "aggregate", "aggregates", "repository", "repositories"}),
    ),
    "event-driven": (frozenset({"event", "events", "pubsub", "consumer", "consumers"}),),
    "hexagonal": (frozenset({"adapter", "adapters", "port", "ports"}),),
    "microservices": (frozenset({"microservice", "microservices"}),),
    "mvc": (frozenset({"controller", "controllers"}), frozenset({"model", "models", "view", "views"})),
}


def _matches_imports(imports: set[str], packages: frozenset[str]) -> bool:
    return not imports.isdisjoint(packages)


def detect_architectural_patterns(file_paths: Sequence[str], import_patterns: Iterable[str]) -> list[str]:
    imports = set(import_patterns)
    patterns = [name for name, pkgs in FRAMEWORK_IMPORTS.items() if _matches_imports(imports, pkgs)]

    file_tokens = [paths.tokens(f) for f in file_paths]
    for name, groups in ARCHITECTURE_PATHS.items():
        if all(any(not toks.isdisjoint(group) for toks in file_tokens) for group in groups):
            patterns.append(name)
    return patterns


# ═══════════════════════════════════════════════════════════════════════════
# TECHNOLOGY STACK
# ═══════════════════════════════════════════════════════════════════════════

LANGUAGE_EXTENSIONS: Final[dict[str, frozenset[str]]] = {
    "typescript": frozenset({".ts", ".tsx", ".d.ts", ".mts", ".cts"}),
    "javascript": frozenset({".js", ".jsx", ".mjs", ".cjs"}),
    "python": PYTHON_EXTENSIONS,
    "go": frozenset({".go"}),
    "rust": frozenset({".rs"}),
    "java": frozenset({".java"}),
    "ruby": frozenset({".rb"}),
    "sql": frozenset({".sql"}),
}

DATABASE_IMPORTS: Final[dict[str, frozenset[str]]] = {
    "mongodb": frozenset({"mongodb", "mongoose", "pymongo", "motor"}),
    "mysql": frozenset({"mysql", "mysql2", "pymysql"}),
    "postgresql": frozenset({"pg", "postgres", "postgresql", "psycopg", "psycopg2", "asyncpg"}),
    "prisma": frozenset({"@prisma/client"}),
    "redis": frozenset({"redis", "ioredis"}),
    "typeorm": frozenset({"typeorm"}),
    "sqlalchemy": frozenset({"sqlalchemy"}),
    "sqlite": frozenset({"sqlite3", "aiosqlite", "better-sqlite3"}),
}

WEB_FRAMEWORK_IMPORTS: Final[dict[str, frozenset[str]]] = {
    **FRAMEWORK_IMPORTS,
    "hapi": frozenset({"@hapi/hapi", "hapi"}),
    "meteor": frozenset({"meteor"}),
}

TESTING_IMPORTS: Final[dict[str, frozenset[str]]] = {
    "cypress": frozenset({"cypress"}),
    "jest": frozenset({"jest", "@jest/globals", "@types/jest"}),
    "playwright": frozenset({"@playwright/test", "playwright"}),
    "vitest": frozenset({"vitest"}),
    "pytest": frozenset({"pytest"}),
}

BUILD_IMPORTS: Final[dict[str, frozenset[str]]] = {
    "esbuild": frozenset({"esbuild"}),
    "swc": frozenset({"@swc/core"}),
    "tsup": frozenset({"tsup"}),
    "vite": frozenset({"vite"}),
    "webpack": frozenset({"webpack"}),
}

TESTING_FRAMEWORKS: Final[frozenset[str]] = frozenset(TESTING_IMPORTS)


def detect_technology_stack(file_paths: Sequence[str], import_patterns: Iterable[str]) -> list[str]:
    extensions = {paths.extension(f) for f in file_paths}
    stack = [lang for lang, exts in LANGUAGE_EXTENSIONS.items() if not extensions.isdisjoint(exts)]

    imports = set(import_patterns)
    for table in (DATABASE_IMPORTS, WEB_FRAMEWORK_IMPORTS, TESTING_IMPORTS, BUILD_IMPORTS):
        for tech, packages in table.items():
            if tech not in stack and _matches_imports(imports, packages):
                stack.append(tech)
    return stack


# ═══════════════════════════════════════════════════════════════════════════
# INFRASTRUCTURE COMPONENTS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PathRule:
    """A file matches on any of: path word, extension, or exact basename."""

    words: frozenset[str] = frozenset()
    extensions: frozenset[str] = frozenset()
    basenames: frozenset[str] = frozenset()

    def matches(self, path: str) -> bool:
        return (
            paths.has_token(path, self.words)
            or paths.extension(path) in self.extensions
            or paths.basename(path) in self.basenames
        )


INFRASTRUCTURE_RULES: Final[dict[str, PathRule]] = {
    "aws": PathRule(words=frozenset({"aws", "ec2", "s3", "lambda", "cloudformation"})),
    "azure": PathRule(words=frozenset({"azure", "azurerm"})),
    "gcp": PathRule(words=frozenset({"gcp", "google", "gke"})),
    "ci": PathRule(
        words=frozenset({"workflows", "ci", "pipeline", "pipelines", "jenkins"}),
        basenames=frozenset({"jenkinsfile", ".gitlab-ci.yml", ".gitlab-ci.yaml"}),
    ),
    "docker": PathRule(words=frozenset({"docker", "dockerfile", "compose"})),
    "kubernetes": PathRule(
        words=frozenset({"k8s", "kubernetes", "helm", "charts", "manifests", "kustomization"})
    ),
    "logging": PathRule(words=frozenset({"elk", "elasticsearch", "logstash", "kibana", "fluentd"})),
    "monitoring": PathRule(words=frozenset({"prometheus", "grafana", "alertmanager", "datadog"})),
    "terraform": PathRule(words=frozenset({"terraform"}), extensions=frozenset({".tf", ".tfvars"})),
}


def detect_infrastructure_components(file_paths: Sequence[str]) -> list[str]:
    return [
        component
        for component, rule in INFRASTRUCTURE_RULES.items()
        if any(rule.matches(f) for f in file_paths)
    ]
