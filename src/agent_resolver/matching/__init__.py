"""Agent scoring against classified tasks."""

from agent_resolver.matching.criteria import context_criteria
from agent_resolver.matching.matcher import (
    CRITERIA_WEIGHT,
    DOMAIN_WEIGHT,
    EXPERTISE_WEIGHT,
    PRIORITY_WEIGHT,
    CapabilityMatcher,
)

__all__ = [
    "CRITERIA_WEIGHT",
    "DOMAIN_WEIGHT",
    "EXPERTISE_WEIGHT",
    "PRIORITY_WEIGHT",
    "CapabilityMatcher",
    "context_criteria",
]
