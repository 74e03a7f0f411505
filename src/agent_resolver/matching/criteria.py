"""
Context Selection Criteria

Derives the selection-criterion tags a CodebaseContext satisfies. Agents list
the criteria they are suited for in their registry record; the matcher counts
the overlap.
"""

from __future__ import annotations

from typing import Final

from agent_resolver.context.rules import PYTHON_EXTENSIONS, SCRIPT_EXTENSIONS, TESTING_FRAMEWORKS
from agent_resolver.models import CodebaseContext

TYPESCRIPT_EXTENSIONS: Final[frozenset[str]] = frozenset({".ts", ".tsx", ".d.ts", ".mts", ".cts"})

CODE_EXTENSIONS: Final[frozenset[str]] = (
    SCRIPT_EXTENSIONS | PYTHON_EXTENSIONS | frozenset({".go", ".rs", ".java", ".rb", ".sql"})
)

CONFIG_EXTENSIONS: Final[frozenset[str]] = frozenset({".json", ".toml", ".ini", ".cfg", ".env"})
DOCUMENTATION_EXTENSIONS: Final[frozenset[str]] = frozenset({".md", ".rst"})
DESIGN_EXTENSIONS: Final[frozenset[str]] = frozenset({".fig", ".sketch", ".xd"})

CLOUD_COMPONENTS: Final[frozenset[str]] = frozenset({"aws", "azure", "gcp"})

AUTH_IMPORTS: Final[frozenset[str]] = frozenset(
    {"jsonwebtoken", "passport", "bcrypt", "jwt", "pyjwt", "oauthlib", "authlib"}
)
CRYPTO_IMPORTS: Final[frozenset[str]] = frozenset({"cryptography", "crypto-js", "nacl"})
REACT_IMPORTS: Final[frozenset[str]] = frozenset({"react", "react-dom"})


def context_criteria(context: CodebaseContext) -> list[str]:
    """Criteria satisfied by a context, in first-derived order without duplicates."""
    file_types = set(context.affected_file_types)
    imports = set(context.import_patterns)
    stack = set(context.technology_stack)
    components = set(context.infrastructure_components)

    criteria: list[str] = []

    def add(*names: str) -> None:
        for name in names:
            if name not in criteria:
                criteria.append(name)

    # File based
    if not file_types.isdisjoint(TYPESCRIPT_EXTENSIONS):
        add("typescript-files")
    if not file_types.isdisjoint(PYTHON_EXTENSIONS):
        add("python-files")
    if not file_types.isdisjoint(CODE_EXTENSIONS):
        add("code-files")
    if ".d.ts" in file_types:
        add("type-definitions")
    if ".tf" in file_types or ".tfvars" in file_types:
        add("terraform-files", "infrastructure-files")
    if ".yaml" in file_types or "kubernetes" in components:
        add("kubernetes-manifests")
    if "dockerfile" in file_types or "docker" in components:
        add("docker-files", "infrastructure-files")
    if not file_types.isdisjoint(CONFIG_EXTENSIONS):
        add("config-files")
    if not file_types.isdisjoint(DOCUMENTATION_EXTENSIONS):
        add("documentation-files")
    if not file_types.isdisjoint(DESIGN_EXTENSIONS):
        add("design-files", "ui-mockups")

    # Import based
    if not imports.isdisjoint(REACT_IMPORTS):
        add("react-imports")
    if not imports.isdisjoint(AUTH_IMPORTS):
        add("authentication-code")
    if not imports.isdisjoint(CRYPTO_IMPORTS):
        add("encryption-code")

    # Stack and infrastructure based
    if not stack.isdisjoint(TESTING_FRAMEWORKS):
        add("test-files", "testing-config")
    if not components.isdisjoint(CLOUD_COMPONENTS):
        add("cloud-config")
    if "ci" in components or "terraform" in components:
        add("infrastructure-files")
    if "monitoring" in components:
        add("policy-files")

    return criteria
