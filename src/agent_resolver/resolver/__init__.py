"""Top-level agent resolution."""

from agent_resolver.resolver.fallback import (
    BACKEND_AGENT,
    FRAMEWORK_FRONTEND_AGENT,
    INFRASTRUCTURE_AGENT,
    determine_fallback_agent,
)
from agent_resolver.resolver.resolver import (
    HIGH_CONFIDENCE_THRESHOLD,
    MIN_CONFIDENCE_THRESHOLD,
    AgentResolver,
    build_resolver,
    calibrate_confidence,
)

__all__ = [
    "BACKEND_AGENT",
    "FRAMEWORK_FRONTEND_AGENT",
    "HIGH_CONFIDENCE_THRESHOLD",
    "INFRASTRUCTURE_AGENT",
    "MIN_CONFIDENCE_THRESHOLD",
    "AgentResolver",
    "build_resolver",
    "calibrate_confidence",
    "determine_fallback_agent",
]
