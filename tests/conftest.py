"""Shared fixtures: in-memory file reader and registry loader."""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

import pytest

REGISTRY_DOC: dict[str, Any] = {
    "capabilities": {
        "lead": {
            "domains": ["core-language", "backend", "infrastructure", "frontend-framework"],
            "expertise": ["architecture", "code review"],
            "priority": 100,
            "selectionCriteria": ["code-files"],
        },
        "platform-engineer": {
            "domains": ["infrastructure"],
            "expertise": ["terraform", "kubernetes", "docker", "aws"],
            "priority": 90,
            "selectionCriteria": [
                "terraform-files",
                "kubernetes-manifests",
                "docker-files",
                "infrastructure-files",
            ],
        },
        "backend-engineer": {
            "domains": ["backend"],
            "expertise": ["express", "postgresql", "rest api"],
            "priority": 80,
            "selectionCriteria": ["typescript-files", "code-files"],
        },
        "frontend-framework-engineer": {
            "domains": ["frontend-framework"],
            "expertise": ["react", "next"],
            "priority": 80,
            "selectionCriteria": ["react-imports", "typescript-files"],
        },
        "software-engineer": {
            "domains": ["core-language"],
            "expertise": ["typescript", "python"],
            "priority": 75,
            "selectionCriteria": ["typescript-files", "python-files", "code-files"],
        },
    },
    "selectionCriteria": {
        "code-files": "Source code",
        "typescript-files": "TypeScript sources",
        "terraform-files": "Terraform configuration",
    },
    "taskDomains": {
        "infrastructure": "Cloud and delivery",
        "backend": "Server-side services",
        "core-language": "Language work",
    },
}


class FakeReader:
    """Async file reader over an in-memory mapping; records every read."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files = files or {}
        self.calls: list[str] = []

    async def __call__(self, path: str) -> str:
        self.calls.append(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]


class FakeLoader:
    """Async registry loader returning a fixed document; counts loads."""

    def __init__(self, document: Any = None, error: Exception | None = None) -> None:
        self.document = document
        self.error = error
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.document


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def registry_doc() -> dict[str, Any]:
    return copy.deepcopy(REGISTRY_DOC)


@pytest.fixture
def make_loader() -> Callable[..., FakeLoader]:
    return FakeLoader


@pytest.fixture
def make_reader() -> Callable[..., FakeReader]:
    return FakeReader
