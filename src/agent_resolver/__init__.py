"""Capability-based agent selection for described tasks."""

__version__ = "0.1.0"

from agent_resolver.classification import KeywordRegistry, TaskClassifier
from agent_resolver.context import ContextAnalyzer
from agent_resolver.errors import AgentResolverError, RegistryLoadError, RegistryNotInitializedError
from agent_resolver.matching import CapabilityMatcher
from agent_resolver.models import (
    AgentCapability,
    AgentScore,
    AgentSelection,
    CodebaseContext,
    DetailedAnalysis,
    TaskClassification,
    TaskContext,
)
from agent_resolver.registry import CapabilityRegistry
from agent_resolver.resolver import AgentResolver, build_resolver

__all__ = [
    "AgentCapability",
    "AgentResolver",
    "AgentResolverError",
    "AgentScore",
    "AgentSelection",
    "CapabilityMatcher",
    "CapabilityRegistry",
    "CodebaseContext",
    "ContextAnalyzer",
    "DetailedAnalysis",
    "KeywordRegistry",
    "RegistryLoadError",
    "RegistryNotInitializedError",
    "TaskClassification",
    "TaskClassifier",
    "TaskContext",
    "build_resolver",
]
