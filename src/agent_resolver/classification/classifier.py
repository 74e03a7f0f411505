"""
Task Classifier - domain, confidence and complexity for a task.

Combines two independent signals per domain:
    signal = keyword_signal * 0.6 + file_signal * 0.4

The keyword signal counts word-boundary occurrences of the keyword registry's
terms in the description; the file signal applies path heuristics to the
affected files.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass, field
from typing import Final

from agent_resolver import paths
from agent_resolver.models import Complexity, TaskClassification, TaskContext

from .keywords import KeywordRegistry

logger = logging.getLogger(__name__)

EXPLICIT_DOMAIN_CONFIDENCE: Final[float] = 0.95
MIN_CLASSIFICATION_CONFIDENCE: Final[float] = 0.3
DEFAULT_DOMAIN: Final[str] = "core-language"

KEYWORD_WEIGHT: Final[float] = 0.6
FILE_WEIGHT: Final[float] = 0.4
KEYWORD_SATURATION: Final[int] = 5

# Highest first; decides ties between equal signals
DOMAIN_PRIORITY: Final[tuple[str, ...]] = (
    "infrastructure",
    "security",
    "backend",
    "frontend-framework",
    "frontend-general",
    "core-language",
    "design",
)

LEAD_ROLE: Final[str] = "lead"
DEFAULT_AGENT: Final[str] = "software-engineer"

DOMAIN_AGENTS: Final[dict[str, list[str]]] = {
    "infrastructure": ["platform-engineer"],
    "security": ["security-engineer"],
    "backend": ["backend-engineer"],
    "frontend-framework": ["frontend-framework-engineer"],
    "frontend-general": ["frontend-engineer"],
    "core-language": ["software-engineer"],
    "design": ["ui-ux-designer"],
}

# Complexity factors: (saturation point, weight)
FILES_FACTOR: Final[tuple[int, float]] = (10, 0.3)
DOMAINS_FACTOR: Final[tuple[int, float]] = (3, 0.3)
DESCRIPTION_FACTOR: Final[tuple[int, float]] = (1000, 0.2)
DEPENDENCIES_FACTOR: Final[tuple[int, float]] = (5, 0.2)
LOW_COMPLEXITY_BELOW: Final[float] = 0.3
HIGH_COMPLEXITY_FROM: Final[float] = 0.7


@dataclass(frozen=True)
class FileHeuristic:
    """Path signals for one domain."""

    weight: float
    extensions: frozenset[str] = frozenset()
    basenames: frozenset[str] = frozenset()
    words: frozenset[str] = frozenset()

    def matches(self, path: str) -> bool:
        return (
            paths.extension(path) in self.extensions
            or paths.basename(path) in self.basenames
            or paths.has_token(path, self.words)
        )


FILE_HEURISTICS: Final[dict[str, FileHeuristic]] = {
    "infrastructure": FileHeuristic(
        weight=1.0,
        extensions=frozenset({".tf", ".tfvars", ".hcl", ".yaml", ".sh", ".bash"}),
        basenames=frozenset({"dockerfile", "docker-compose.yaml", "docker-compose.yml"}),
        words=frozenset(
            {"docker", "terraform", "k8s", "kubernetes", "helm", "infra", "infrastructure", "ansible"}
        ),
    ),
    "security": FileHeuristic(
        weight=0.8,
        words=frozenset(
            {"security", "auth", "jwt", "oauth", "encryption", "ssl", "tls", "crypto", "permissions"}
        ),
    ),
    "backend": FileHeuristic(
        weight=0.7,
        extensions=frozenset({".sql"}),
        words=frozenset(
            {
                "api",
                "server",
                "backend",
                "database",
                "db",
                "sql",
                "controller",
                "controllers",
                "service",
                "services",
                "models",
                "routes",
                "migrations",
                "repositories",
            }
        ),
    ),
    "core-language": FileHeuristic(
        weight=0.5,
        extensions=frozenset({".py", ".ts", ".js", ".mjs", ".cjs", ".d.ts"}),
        basenames=frozenset({"package.json", "tsconfig.json", "pyproject.toml", "setup.cfg"}),
        words=frozenset({"config", "build", "utils", "lib"}),
    ),
    "frontend-general": FileHeuristic(
        weight=0.6,
        extensions=frozenset({".html", ".css", ".scss", ".sass", ".less"}),
        words=frozenset({"frontend", "ui", "styles", "public"}),
    ),
    "frontend-framework": FileHeuristic(
        weight=0.9,
        extensions=frozenset({".tsx", ".jsx", ".vue", ".svelte"}),
        words=frozenset({"component", "components", "hook", "hooks", "pages", "store"}),
    ),
    "design": FileHeuristic(
        weight=0.8,
        extensions=frozenset({".fig", ".sketch", ".xd"}),
        words=frozenset({"design", "mockup", "mockups", "wireframe", "wireframes"}),
    ),
}


@dataclass
class _DomainSignal:
    score: float = 0.0
    reasons: list[str] = field(default_factory=list)


@functools.lru_cache(maxsize=1024)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)")


class TaskClassifier:
    """Classifies task contexts into a primary domain."""

    def __init__(self, keyword_registry: KeywordRegistry | None = None) -> None:
        self.keyword_registry = keyword_registry if keyword_registry is not None else KeywordRegistry()

    def classify_task(self, task_context: TaskContext) -> TaskClassification:
        """
        Classify a task.

        An explicit primary_domain short-circuits the keyword scan. Otherwise
        the highest combined signal wins, ties broken by DOMAIN_PRIORITY.
        """
        logger.debug(
            "Classifying task",
            extra={
                "affected_files": len(task_context.affected_files),
                "complexity": task_context.complexity,
                "description": task_context.description[:100],
            },
        )

        if task_context.primary_domain:
            primary = task_context.primary_domain
            implicated = 1 + len(self._secondary_domains(task_context, primary))
            complexity = task_context.complexity or self._calculate_complexity(task_context, implicated)
            return TaskClassification(
                primary_domain=primary,
                confidence=EXPLICIT_DOMAIN_CONFIDENCE,
                complexity=complexity,
                reasons=[f"Primary domain explicitly set to {primary}"],
                suggested_agents=self._suggest_agents(primary, task_context, complexity),
            )

        keyword_counts = self._count_keywords(task_context.description)
        signals = self._combine_signals(keyword_counts, task_context.affected_files)

        if signals:
            primary, best = min(
                signals.items(),
                key=lambda item: (-item[1].score, _domain_rank(item[0]), item[0]),
            )
            confidence = max(best.score, MIN_CLASSIFICATION_CONFIDENCE)
            reasons = best.reasons
        else:
            primary = DEFAULT_DOMAIN
            confidence = MIN_CLASSIFICATION_CONFIDENCE
            reasons = ["No domain signals found, using default domain"]

        complexity = task_context.complexity or self._calculate_complexity(
            task_context, len(keyword_counts)
        )

        return TaskClassification(
            primary_domain=primary,
            confidence=round(min(confidence, 1.0), 3),
            complexity=complexity,
            reasons=list(reasons),
            suggested_agents=self._suggest_agents(primary, task_context, complexity),
        )

    def _count_keywords(self, description: str) -> dict[str, dict[str, int]]:
        """Keyword occurrences per domain: {domain: {keyword: count}}."""
        text = description.lower()
        if not text.strip():
            return {}

        counts: dict[str, dict[str, int]] = {}
        for domain, keywords in self.keyword_registry.get_all_keywords().items():
            for keyword in keywords:
                hits = len(_keyword_pattern(keyword).findall(text))
                if hits:
                    counts.setdefault(domain, {})[keyword] = hits
        return counts

    def _combine_signals(
        self, keyword_counts: dict[str, dict[str, int]], affected_files: list[str]
    ) -> dict[str, _DomainSignal]:
        signals: dict[str, _DomainSignal] = {}

        for domain, hits in keyword_counts.items():
            total = sum(hits.values())
            signal = signals.setdefault(domain, _DomainSignal())
            signal.score += min(total / KEYWORD_SATURATION, 1.0) * KEYWORD_WEIGHT
            signal.reasons.append(f"Found {total} {domain} keywords: {', '.join(sorted(hits))}")

        file_scores: dict[str, _DomainSignal] = {}
        for file_path in affected_files:
            for domain, heuristic in FILE_HEURISTICS.items():
                if heuristic.matches(file_path):
                    file_signal = file_scores.setdefault(domain, _DomainSignal())
                    file_signal.score = min(file_signal.score + heuristic.weight, 1.0)
                    file_signal.reasons.append(f"File {file_path} matches {domain} pattern")

        for domain, file_signal in file_scores.items():
            signal = signals.setdefault(domain, _DomainSignal())
            signal.score = min(signal.score + file_signal.score * FILE_WEIGHT, 1.0)
            signal.reasons.extend(file_signal.reasons)

        return {domain: s for domain, s in signals.items() if s.score > 0}

    def _calculate_complexity(self, task_context: TaskContext, domain_count: int) -> Complexity:
        size_factors = [
            (len(task_context.affected_files), FILES_FACTOR),
            (len(task_context.description), DESCRIPTION_FACTOR),
            (len(task_context.dependencies), DEPENDENCIES_FACTOR),
        ]
        factors = [*size_factors, (domain_count, DOMAINS_FACTOR)]

        score = sum(min(value / limit, 1.0) * weight for value, (limit, weight) in factors)

        # A long description, many files or many dependencies is high on its own
        saturated = any(value >= limit for value, (limit, _) in size_factors)
        if saturated or score >= HIGH_COMPLEXITY_FROM:
            return "high"
        if score < LOW_COMPLEXITY_BELOW:
            return "low"
        return "medium"

    def _secondary_domains(self, task_context: TaskContext, primary: str) -> list[str]:
        seen: list[str] = []
        for domain in task_context.secondary_domains:
            if domain != primary and domain not in seen:
                seen.append(domain)
        return seen

    def _suggest_agents(
        self, primary: str, task_context: TaskContext, complexity: Complexity
    ) -> list[str]:
        secondary = self._secondary_domains(task_context, primary)

        agents: list[str] = []
        for domain in [primary, *secondary]:
            for role in DOMAIN_AGENTS.get(domain, [DEFAULT_AGENT]):
                if role not in agents:
                    agents.append(role)

        if complexity == "high" or secondary:
            agents.insert(0, LEAD_ROLE)
        return agents


def _domain_rank(domain: str) -> int:
    """Position in DOMAIN_PRIORITY; unknown domains rank after all known ones."""
    try:
        return DOMAIN_PRIORITY.index(domain)
    except ValueError:
        return len(DOMAIN_PRIORITY)
