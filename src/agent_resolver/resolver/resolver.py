"""
Agent Resolver - the top-level decision pipeline.

    classify -> analyze context -> score agents -> select + calibrate

Any failure inside the pipeline collapses to a low-confidence fallback
selection; resolve_agent() never raises.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Final

from agent_resolver.classification import KeywordRegistry, TaskClassifier
from agent_resolver.context import ContextAnalyzer, ReadFn
from agent_resolver.matching import CapabilityMatcher
from agent_resolver.models import AgentScore, AgentSelection, DetailedAnalysis, TaskContext
from agent_resolver.registry import CapabilityRegistry, LoadFn

from .fallback import determine_fallback_agent

logger = logging.getLogger(__name__)

MIN_CONFIDENCE_THRESHOLD: Final[float] = 0.3
HIGH_CONFIDENCE_THRESHOLD: Final[float] = 0.75

# Top two scores closer than this are an ambiguous decision
CLOSENESS_THRESHOLD: Final[float] = 0.2
AMBIGUITY_DISCOUNT_BASE: Final[float] = 0.6

FALLBACK_CONFIDENCE: Final[float] = 0.1


def calibrate_confidence(scores: list[AgentScore]) -> float:
    """
    Reported confidence for the top score.

    Scores at or above HIGH_CONFIDENCE_THRESHOLD are reported unchanged. Below
    it, a runner-up within CLOSENESS_THRESHOLD discounts the top score to
    top * (0.6 + gap), e.g. 0.65 vs 0.63 -> 0.403.
    """
    top = scores[0].score
    if top >= HIGH_CONFIDENCE_THRESHOLD or len(scores) < 2:
        return top

    gap = top - scores[1].score
    if gap < CLOSENESS_THRESHOLD:
        return round(top * (AMBIGUITY_DISCOUNT_BASE + gap), 3)
    return top


class AgentResolver:
    """Selects an agent for a task context."""

    def __init__(
        self,
        classifier: TaskClassifier,
        context_analyzer: ContextAnalyzer,
        registry: CapabilityRegistry,
        matcher: CapabilityMatcher | None = None,
    ) -> None:
        self.classifier = classifier
        self.context_analyzer = context_analyzer
        self.registry = registry
        self.matcher = matcher or CapabilityMatcher(registry)

    async def resolve_agent(self, task_context: TaskContext) -> AgentSelection:
        """Resolve the best agent; degrades to a fallback selection instead of raising."""
        fallback_agent = determine_fallback_agent(getattr(task_context, "affected_files", None) or [])

        try:
            await self.registry.initialize()
            classification = self.classifier.classify_task(task_context)
            context = await self.context_analyzer.analyze_task_context(task_context)
            scores = self.matcher.score_agents(classification, context)
            selection = self._select(scores, fallback_agent)
        except Exception:
            logger.exception(
                "Automatic agent selection failed, using fallback agent",
                extra={"fallback_agent": fallback_agent},
            )
            return AgentSelection(
                selected_agent=fallback_agent,
                confidence=FALLBACK_CONFIDENCE,
                reasons=["Automatic agent selection failed", f"Using fallback agent: {fallback_agent}"],
                fallback_agent=fallback_agent,
                fallback=True,
            )

        logger.info(
            "Agent resolved",
            extra={
                "selected_agent": selection.selected_agent,
                "confidence": selection.confidence,
                "primary_domain": classification.primary_domain,
                "fallback": selection.fallback,
            },
        )
        return selection

    async def get_detailed_analysis(self, task_context: TaskContext) -> DetailedAnalysis:
        """Every stage of one resolution. Stage errors propagate."""
        await self.registry.initialize()
        classification = self.classifier.classify_task(task_context)
        context = await self.context_analyzer.analyze_task_context(task_context)
        scores = self.matcher.score_agents(classification, context)
        selection = self._select(scores, determine_fallback_agent(task_context.affected_files))
        return DetailedAnalysis(
            classification=classification,
            context=context,
            scores=scores,
            selection=selection,
        )

    def _select(self, scores: list[AgentScore], fallback_agent: str) -> AgentSelection:
        if not scores:
            logger.warning("No agent scores available", extra={"fallback_agent": fallback_agent})
            return AgentSelection(
                selected_agent=fallback_agent,
                confidence=FALLBACK_CONFIDENCE,
                reasons=["No agent scores available", f"Using fallback agent: {fallback_agent}"],
                fallback_agent=fallback_agent,
                fallback=True,
            )

        top = scores[0]
        reasons = list(top.reasons)
        if top.score < MIN_CONFIDENCE_THRESHOLD:
            reasons.append("Low confidence in agent selection")

        confidence = calibrate_confidence(scores)
        if confidence < top.score:
            logger.warning(
                "Close contest between top agents",
                extra={
                    "selected_agent": top.role,
                    "runner_up": scores[1].role,
                    "raw_score": round(top.score, 3),
                    "confidence": confidence,
                },
            )

        return AgentSelection(
            selected_agent=top.role,
            confidence=confidence,
            reasons=reasons,
            fallback_agent=fallback_agent,
            alternatives=scores[1:],
        )

    async def validate_services(self) -> dict[str, Any]:
        """Check that the capability registry loads; report issues instead of raising."""
        issues: list[str] = []
        try:
            await self.registry.initialize()
        except Exception as exc:
            issues.append(f"Registry initialization failed: {exc}")

        stats: dict[str, Any] = {
            "analyzer_cache_size": self.context_analyzer.get_cache_size(),
            "registry_agents": 0,
            "registry_domains": 0,
        }
        if self.registry.initialized:
            registry_stats = self.registry.get_stats()
            stats["registry_agents"] = registry_stats["total_agents"]
            stats["registry_domains"] = registry_stats["total_domains"]

        return {"valid": not issues, "issues": issues, "stats": stats}

    def clear_caches(self) -> None:
        self.context_analyzer.clear_cache()

    def get_stats(self) -> dict[str, Any]:
        return {
            "cache_sizes": {"context_analyzer": self.context_analyzer.get_cache_size()},
            "thresholds": {
                "min_confidence": MIN_CONFIDENCE_THRESHOLD,
                "high_confidence": HIGH_CONFIDENCE_THRESHOLD,
            },
        }


def build_resolver(
    registry_path: Path | None = None,
    loader: LoadFn | None = None,
    reader: ReadFn | None = None,
    keyword_registry: KeywordRegistry | None = None,
) -> AgentResolver:
    """Wire a resolver with fresh components."""
    registry = CapabilityRegistry(registry_path=registry_path, loader=loader)
    return AgentResolver(
        classifier=TaskClassifier(keyword_registry=keyword_registry),
        context_analyzer=ContextAnalyzer(reader=reader),
        registry=registry,
        matcher=CapabilityMatcher(registry),
    )
