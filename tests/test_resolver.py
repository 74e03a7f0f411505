"""Tests for the top-level agent resolver."""

from __future__ import annotations

import asyncio

import pytest

from agent_resolver.classification import TaskClassifier
from agent_resolver.context import ContextAnalyzer
from agent_resolver.errors import RegistryLoadError
from agent_resolver.models import AgentCapability, AgentScore, TaskClassification, TaskContext
from agent_resolver.registry import CapabilityRegistry
from agent_resolver.resolver import (
    BACKEND_AGENT,
    FRAMEWORK_FRONTEND_AGENT,
    INFRASTRUCTURE_AGENT,
    AgentResolver,
    build_resolver,
    calibrate_confidence,
    determine_fallback_agent,
)

pytestmark = pytest.mark.anyio

INFRA_FILES = ["infra/main.tf", "k8s/deploy.yaml", "Dockerfile"]
BACKEND_FILES = ["src/controllers/api.ts", "src/services/db.ts"]


def _score(role: str, score: float, *reasons: str) -> AgentScore:
    return AgentScore(
        role=role,
        score=score,
        reasons=list(reasons) or [f"{role} reason"],
        capability=AgentCapability(role=role),
    )


class _FailingClassifier:
    def classify_task(self, task_context):
        raise RuntimeError("classifier down")


class _FixedClassifier:
    def __init__(self, confidence: float) -> None:
        self.confidence = confidence

    def classify_task(self, task_context):
        return TaskClassification(
            primary_domain="infrastructure", confidence=self.confidence, complexity="medium"
        )


class _FixedMatcher:
    def __init__(self, scores: list[AgentScore]) -> None:
        self.scores = scores

    def score_agents(self, classification, context):
        return list(self.scores)


def _resolver(loader, reader, classifier=None, matcher=None) -> AgentResolver:
    return AgentResolver(
        classifier=classifier or TaskClassifier(),
        context_analyzer=ContextAnalyzer(reader=reader),
        registry=CapabilityRegistry(loader=loader),
        matcher=matcher,
    )


# ═══════════════════════════════════════════════════════════════════════════
# FILE-PATTERN FALLBACK
# ═══════════════════════════════════════════════════════════════════════════


class TestFallbackHeuristic:
    def test_infrastructure(self):
        assert determine_fallback_agent(INFRA_FILES) == INFRASTRUCTURE_AGENT

    def test_backend(self):
        assert determine_fallback_agent(BACKEND_FILES) == BACKEND_AGENT

    def test_framework_frontend(self):
        assert determine_fallback_agent(["src/components/Button.tsx"]) == FRAMEWORK_FRONTEND_AGENT
        assert determine_fallback_agent(["src/hooks/useAuth.ts"]) == FRAMEWORK_FRONTEND_AGENT

    def test_precedence(self):
        assert determine_fallback_agent(["src/components/Button.tsx", "infra/main.tf"]) == INFRASTRUCTURE_AGENT
        assert (
            determine_fallback_agent(["src/services/api.ts", "src/components/Button.tsx"])
            == FRAMEWORK_FRONTEND_AGENT
        )

    def test_default(self):
        assert determine_fallback_agent([]) == BACKEND_AGENT
        assert determine_fallback_agent(["README.md"]) == BACKEND_AGENT


# ═══════════════════════════════════════════════════════════════════════════
# CONFIDENCE CALIBRATION
# ═══════════════════════════════════════════════════════════════════════════


class TestCalibration:
    def test_close_contest_discounted(self):
        assert calibrate_confidence([_score("a", 0.65), _score("b", 0.63)]) == 0.403

    def test_high_confidence_unchanged(self):
        assert calibrate_confidence([_score("a", 0.8), _score("b", 0.79)]) == 0.8
        assert calibrate_confidence([_score("a", 0.75), _score("b", 0.74)]) == 0.75

    def test_clear_winner_unchanged(self):
        assert calibrate_confidence([_score("a", 0.65), _score("b", 0.3)]) == 0.65

    def test_single_score_unchanged(self):
        assert calibrate_confidence([_score("a", 0.5)]) == 0.5

    def test_zero_stays_zero(self):
        assert calibrate_confidence([_score("a", 0.0), _score("b", 0.0)]) == 0.0


# ═══════════════════════════════════════════════════════════════════════════
# RESOLVE AGENT
# ═══════════════════════════════════════════════════════════════════════════


class TestResolveAgent:
    async def test_infrastructure_task(self, registry_doc, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader(registry_doc), reader=make_reader())

        selection = await resolver.resolve_agent(
            TaskContext(
                description="Provision terraform and kubernetes resources",
                affected_files=INFRA_FILES,
            )
        )

        assert selection.selected_agent == "platform-engineer"
        assert selection.fallback_agent == "platform-engineer"
        assert selection.confidence == pytest.approx(0.9825 * 0.64)
        assert selection.fallback is False
        assert [a.role for a in selection.alternatives] == [
            "lead",
            "backend-engineer",
            "frontend-framework-engineer",
            "software-engineer",
        ]
        assert "Low confidence in agent selection" not in selection.reasons

    async def test_close_contest_discounted(self, registry_doc, make_loader, make_reader):
        matcher = _FixedMatcher([_score("a", 0.65, "A wins"), _score("b", 0.63)])
        resolver = _resolver(make_loader(registry_doc), make_reader(), matcher=matcher)

        selection = await resolver.resolve_agent(TaskContext(description="anything"))

        assert selection.selected_agent == "a"
        assert selection.confidence == 0.403
        assert selection.reasons == ["A wins"]

    async def test_low_confidence_reason(self, registry_doc, make_loader, make_reader):
        matcher = _FixedMatcher([_score("a", 0.25, "weak")])
        resolver = _resolver(make_loader(registry_doc), make_reader(), matcher=matcher)

        selection = await resolver.resolve_agent(TaskContext(description="anything"))

        assert selection.confidence == 0.25
        assert selection.reasons == ["weak", "Low confidence in agent selection"]

    async def test_zero_confidence_classification(self, registry_doc, make_loader, make_reader):
        resolver = _resolver(make_loader(registry_doc), make_reader(), classifier=_FixedClassifier(0.0))

        selection = await resolver.resolve_agent(TaskContext(affected_files=INFRA_FILES))

        assert selection.confidence == 0.0
        assert all(alt.score == 0.0 for alt in selection.alternatives)
        assert selection.reasons[-1] == "Low confidence in agent selection"

    async def test_deterministic(self, registry_doc, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader(registry_doc), reader=make_reader())
        task = TaskContext(description="Add a REST api endpoint", affected_files=BACKEND_FILES)

        first = await resolver.resolve_agent(task)
        second = await resolver.resolve_agent(task)

        assert first.to_dict() == second.to_dict()

    async def test_concurrent_calls(self, registry_doc, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader(registry_doc), reader=make_reader())
        tasks = [
            TaskContext(description="terraform module", affected_files=INFRA_FILES),
            TaskContext(description="api endpoint", affected_files=BACKEND_FILES),
            TaskContext(description="react component", affected_files=["src/components/Nav.tsx"]),
        ]

        selections = await asyncio.gather(*(resolver.resolve_agent(t) for t in tasks))

        assert all(s.selected_agent and s.fallback_agent for s in selections)
        assert [s.fallback_agent for s in selections] == [
            INFRASTRUCTURE_AGENT,
            BACKEND_AGENT,
            FRAMEWORK_FRONTEND_AGENT,
        ]


class TestFallbackPaths:
    async def test_scenario_a_infrastructure_files(self, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader({"capabilities": {}}), reader=make_reader())

        selection = await resolver.resolve_agent(TaskContext(affected_files=INFRA_FILES))

        assert selection.fallback_agent == INFRASTRUCTURE_AGENT
        assert selection.selected_agent == INFRASTRUCTURE_AGENT
        assert selection.confidence == 0.1
        assert selection.reasons == [
            "No agent scores available",
            f"Using fallback agent: {INFRASTRUCTURE_AGENT}",
        ]
        assert selection.fallback is True

    async def test_scenario_b_backend_files(self, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader({"capabilities": {}}), reader=make_reader())
        selection = await resolver.resolve_agent(TaskContext(affected_files=BACKEND_FILES))
        assert selection.fallback_agent == BACKEND_AGENT

    async def test_scenario_e_empty_registry(self, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader({"capabilities": {}}), reader=make_reader())
        selection = await resolver.resolve_agent(TaskContext(description="do something"))
        assert selection.selected_agent == BACKEND_AGENT
        assert selection.fallback_agent == BACKEND_AGENT
        assert selection.alternatives == []

    async def test_registry_failure_hard_fallback(self, make_loader, make_reader):
        loader = make_loader(error=RegistryLoadError("bad registry"))
        resolver = build_resolver(loader=loader, reader=make_reader())

        selection = await resolver.resolve_agent(TaskContext(affected_files=INFRA_FILES))

        assert selection.selected_agent == INFRASTRUCTURE_AGENT
        assert selection.confidence == 0.1
        assert selection.reasons == [
            "Automatic agent selection failed",
            f"Using fallback agent: {INFRASTRUCTURE_AGENT}",
        ]
        assert selection.fallback is True

    async def test_classifier_failure_hard_fallback(self, registry_doc, make_loader, make_reader):
        resolver = _resolver(make_loader(registry_doc), make_reader(), classifier=_FailingClassifier())
        selection = await resolver.resolve_agent(TaskContext(affected_files=BACKEND_FILES))
        assert selection.selected_agent == BACKEND_AGENT
        assert selection.reasons[0] == "Automatic agent selection failed"

    async def test_matcher_failure_hard_fallback(self, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader({"capabilities": {}}), reader=make_reader())
        resolver.matcher.registry = CapabilityRegistry(loader=make_loader({"capabilities": {}}))

        selection = await resolver.resolve_agent(TaskContext(affected_files=BACKEND_FILES))

        assert selection.fallback is True
        assert selection.reasons[0] == "Automatic agent selection failed"

    async def test_unreadable_files_degrade_only(self, registry_doc, make_loader, make_reader):
        reader = make_reader()
        resolver = build_resolver(loader=make_loader(registry_doc), reader=reader)

        selection = await resolver.resolve_agent(TaskContext(affected_files=BACKEND_FILES))

        assert len(reader.calls) == 2
        assert selection.fallback is False

    async def test_never_raises_on_bad_input(self, registry_doc, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader(registry_doc), reader=make_reader())
        selection = await resolver.resolve_agent(None)  # type: ignore[arg-type]
        assert selection.selected_agent == BACKEND_AGENT
        assert selection.fallback is True


# ═══════════════════════════════════════════════════════════════════════════
# SUPPORTING OPERATIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestSupportingOperations:
    async def test_detailed_analysis(self, registry_doc, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader(registry_doc), reader=make_reader())
        task = TaskContext(description="Provision terraform", affected_files=INFRA_FILES)

        analysis = await resolver.get_detailed_analysis(task)

        assert analysis.classification.primary_domain == "infrastructure"
        assert "terraform" in analysis.context.infrastructure_components
        assert len(analysis.scores) == 5
        assert analysis.selection.to_dict() == (await resolver.resolve_agent(task)).to_dict()

    async def test_detailed_analysis_propagates_errors(self, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader(error=RegistryLoadError("nope")), reader=make_reader())
        with pytest.raises(RegistryLoadError):
            await resolver.get_detailed_analysis(TaskContext())

    async def test_validate_services(self, registry_doc, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader(registry_doc), reader=make_reader())
        report = await resolver.validate_services()
        assert report == {
            "valid": True,
            "issues": [],
            "stats": {"analyzer_cache_size": 0, "registry_agents": 5, "registry_domains": 3},
        }

    async def test_validate_services_reports_failure(self, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader(error=RegistryLoadError("bad file")), reader=make_reader())
        report = await resolver.validate_services()
        assert report["valid"] is False
        assert report["issues"] == ["Registry initialization failed: bad file"]
        assert report["stats"]["registry_agents"] == 0

    async def test_stats_and_clear_caches(self, registry_doc, make_loader, make_reader):
        resolver = build_resolver(loader=make_loader(registry_doc), reader=make_reader())
        await resolver.resolve_agent(TaskContext(affected_files=BACKEND_FILES))

        assert resolver.get_stats() == {
            "cache_sizes": {"context_analyzer": 1},
            "thresholds": {"min_confidence": 0.3, "high_confidence": 0.75},
        }

        resolver.clear_caches()
        assert resolver.get_stats()["cache_sizes"]["context_analyzer"] == 0
