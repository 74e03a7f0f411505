"""
Agent Resolution Data Models

Core dataclasses shared by the classifier, context analyzer, capability
registry, matcher and resolver.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, Literal

Complexity = Literal["low", "medium", "high"]

COMPLEXITY_LEVELS: tuple[Complexity, ...] = ("low", "medium", "high")


def _as_list(value: Any) -> list[str]:
    """Coerce a possibly-None or scalar value into a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


@dataclass(frozen=True)
class TaskContext:
    """A unit of work to be assigned to an agent."""

    description: str = ""
    affected_files: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    complexity: Complexity | None = None
    primary_domain: str | None = None
    secondary_domains: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Frozen: normalise through object.__setattr__
        object.__setattr__(self, "description", self.description or "")
        object.__setattr__(self, "affected_files", _as_list(self.affected_files))
        object.__setattr__(self, "dependencies", _as_list(self.dependencies))
        object.__setattr__(self, "secondary_domains", _as_list(self.secondary_domains))
        object.__setattr__(self, "metadata", dict(self.metadata or {}))
        if self.complexity is not None and self.complexity not in COMPLEXITY_LEVELS:
            raise ValueError(
                f"complexity must be one of {COMPLEXITY_LEVELS}, got {self.complexity!r}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TaskContext:
        """Build a TaskContext from camelCase or snake_case keys."""

        def pick(snake: str, camel: str) -> Any:
            return data.get(snake, data.get(camel))

        return cls(
            description=data.get("description") or "",
            affected_files=_as_list(pick("affected_files", "affectedFiles")),
            dependencies=_as_list(data.get("dependencies")),
            complexity=data.get("complexity"),
            primary_domain=pick("primary_domain", "primaryDomain"),
            secondary_domains=_as_list(pick("secondary_domains", "secondaryDomains")),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass(frozen=True)
class TaskClassification:
    """Result of classifying a task into a domain."""

    primary_domain: str
    confidence: float
    complexity: Complexity
    reasons: list[str] = field(default_factory=list)
    suggested_agents: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0.0, 1.0], got {self.confidence}")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CodebaseContext:
    """Signals extracted from the files a task touches."""

    affected_file_types: list[str] = field(default_factory=list)
    import_patterns: list[str] = field(default_factory=list)
    architectural_patterns: list[str] = field(default_factory=list)
    technology_stack: list[str] = field(default_factory=list)
    infrastructure_components: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class AgentCapability:
    """Capability record for one agent role."""

    role: str
    priority: int = 0
    domains: list[str] = field(default_factory=list)
    expertise: list[str] = field(default_factory=list)
    selection_criteria: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "priority": self.priority,
            "domains": list(self.domains),
            "expertise": list(self.expertise),
            "selectionCriteria": list(self.selection_criteria),
        }


@dataclass(frozen=True)
class AgentScore:
    """Score of one agent against a classification and context."""

    role: str
    score: float
    reasons: list[str]
    capability: AgentCapability

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"score must be in [0.0, 1.0], got {self.score}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "score": round(self.score, 3),
            "reasons": list(self.reasons),
        }


@dataclass(frozen=True)
class AgentSelection:
    """Final resolver decision."""

    selected_agent: str
    confidence: float
    reasons: list[str]
    fallback_agent: str
    alternatives: list[AgentScore] = field(default_factory=list)
    fallback: bool = False

    def __post_init__(self) -> None:
        if not self.selected_agent:
            raise ValueError("selected_agent cannot be empty")
        if not self.fallback_agent:
            raise ValueError("fallback_agent cannot be empty")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0.0, 1.0], got {self.confidence}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "selectedAgent": self.selected_agent,
            "confidence": round(self.confidence, 3),
            "reasons": list(self.reasons),
            "alternatives": [alt.to_dict() for alt in self.alternatives],
            "fallbackAgent": self.fallback_agent,
            "fallback": self.fallback,
        }


@dataclass(frozen=True)
class DetailedAnalysis:
    """Every intermediate stage of one resolution, for diagnostics."""

    classification: TaskClassification
    context: CodebaseContext
    scores: list[AgentScore]
    selection: AgentSelection

    def to_dict(self) -> dict[str, Any]:
        return {
            "classification": self.classification.to_dict(),
            "context": self.context.to_dict(),
            "scores": [s.to_dict() for s in self.scores],
            "selection": self.selection.to_dict(),
        }
