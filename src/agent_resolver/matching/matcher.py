"""
Capability Matcher - scores every registered agent against a task.

Scoring formula:
    raw = domain * 0.45 + expertise * 0.30 + criteria * 0.20 + priority * 0.05
    score = clamp(raw * classification.confidence, 0, 1)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Final

from agent_resolver.models import AgentCapability, AgentScore, CodebaseContext, TaskClassification
from agent_resolver.registry import CapabilityRegistry

from .criteria import context_criteria

logger = logging.getLogger(__name__)

# Contribution weights (sum to 1.0)
DOMAIN_WEIGHT: Final[float] = 0.45
EXPERTISE_WEIGHT: Final[float] = 0.30
CRITERIA_WEIGHT: Final[float] = 0.20
PRIORITY_WEIGHT: Final[float] = 0.05

PRIMARY_DOMAIN_CREDIT: Final[float] = 1.0
RELATED_DOMAIN_CREDIT: Final[float] = 0.3

EXACT_EXPERTISE_CREDIT: Final[float] = 1.0
PARTIAL_EXPERTISE_CREDIT: Final[float] = 0.5
EXPERTISE_SATURATION: Final[float] = 3.0

MAX_PRIORITY: Final[int] = 100
DEFAULT_MIN_SCORE: Final[float] = 0.3

_WORD_SPLIT = re.compile(r"[\s/_\-.]+")


@dataclass
class _Breakdown:
    domain: float = 0.0
    expertise: float = 0.0
    criteria: float = 0.0
    priority: float = 0.0
    reasons: list[str] = field(default_factory=list)

    @property
    def raw(self) -> float:
        return (
            self.domain * DOMAIN_WEIGHT
            + self.expertise * EXPERTISE_WEIGHT
            + self.criteria * CRITERIA_WEIGHT
            + self.priority * PRIORITY_WEIGHT
        )


def _context_terms(context: CodebaseContext) -> set[str]:
    return {
        term.lower()
        for term in (
            *context.technology_stack,
            *context.import_patterns,
            *context.architectural_patterns,
            *context.infrastructure_components,
        )
    }


class CapabilityMatcher:
    """Ranks registered agents for a classified task."""

    def __init__(self, registry: CapabilityRegistry) -> None:
        self.registry = registry

    def score_agents(
        self, classification: TaskClassification, context: CodebaseContext
    ) -> list[AgentScore]:
        """
        Score every registered agent, best first.

        Equal scores keep registry order. Registry errors (e.g. not
        initialized) propagate to the caller.
        """
        capabilities = self.registry.get_all_capabilities()
        if not capabilities:
            logger.debug("No registered agents to score")
            return []

        related = set(self.registry.get_related_domains(classification.primary_domain))
        terms = _context_terms(context)
        criteria = set(context_criteria(context))

        scores = []
        for capability in capabilities.values():
            breakdown = self._score_capability(capability, classification, related, terms, criteria)
            score = min(max(breakdown.raw * classification.confidence, 0.0), 1.0)
            scores.append(
                AgentScore(
                    role=capability.role,
                    score=score,
                    reasons=breakdown.reasons,
                    capability=capability,
                )
            )

        scores.sort(key=lambda s: s.score, reverse=True)

        logger.debug(
            "Scored agents",
            extra={
                "primary_domain": classification.primary_domain,
                "agent_count": len(scores),
                "top_agent": scores[0].role,
                "top_score": round(scores[0].score, 3),
            },
        )
        return scores

    def find_best_agent(
        self, classification: TaskClassification, context: CodebaseContext
    ) -> AgentScore | None:
        scores = self.score_agents(classification, context)
        return scores[0] if scores else None

    def get_qualified_agents(
        self,
        classification: TaskClassification,
        context: CodebaseContext,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> list[AgentScore]:
        return [s for s in self.score_agents(classification, context) if s.score >= min_score]

    # ═══════════════════════════════════════════════════════════════════
    # CONTRIBUTIONS
    # ═══════════════════════════════════════════════════════════════════

    def _score_capability(
        self,
        capability: AgentCapability,
        classification: TaskClassification,
        related: set[str],
        terms: set[str],
        criteria: set[str],
    ) -> _Breakdown:
        breakdown = _Breakdown()
        domains = capability.domains or []

        primary = classification.primary_domain
        if primary in domains:
            breakdown.domain = PRIMARY_DOMAIN_CREDIT
            breakdown.reasons.append(f"Primary domain match: {primary}")
        else:
            related_hit = next((d for d in domains if d in related), None)
            if related_hit is not None:
                breakdown.domain = RELATED_DOMAIN_CREDIT
                breakdown.reasons.append(f"Related domain match: {related_hit}")

        breakdown.expertise, aligned = self._expertise_alignment(capability.expertise or [], terms)
        if aligned:
            breakdown.reasons.append(f"Technology alignment: {', '.join(aligned)}")

        matched = [c for c in capability.selection_criteria or [] if c in criteria]
        if matched:
            breakdown.criteria = 1.0 - 0.5 ** len(matched)
            breakdown.reasons.append(f"Selection criteria matched: {', '.join(matched)}")

        priority = min(max(capability.priority, 0), MAX_PRIORITY)
        if priority > 0:
            breakdown.priority = priority / MAX_PRIORITY
            breakdown.reasons.append(f"Priority bonus: {priority}")

        if not breakdown.reasons:
            breakdown.reasons.append("No capability alignment")
        return breakdown

    @staticmethod
    def _expertise_alignment(expertise: list[str], terms: set[str]) -> tuple[float, list[str]]:
        """Exact term hits count fully, word-level hits count half."""
        if not terms:
            return 0.0, []

        total = 0.0
        aligned: list[str] = []
        for entry in expertise:
            name = entry.lower().strip()
            if not name:
                continue
            if name in terms:
                total += EXACT_EXPERTISE_CREDIT
                aligned.append(entry)
            elif any(word in terms for word in _WORD_SPLIT.split(name) if word):
                total += PARTIAL_EXPERTISE_CREDIT
                aligned.append(entry)

        return min(total / EXPERTISE_SATURATION, 1.0), aligned
