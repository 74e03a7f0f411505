"""Task classification: domain keywords and the task classifier."""

from agent_resolver.classification.classifier import (
    DOMAIN_AGENTS,
    DOMAIN_PRIORITY,
    EXPLICIT_DOMAIN_CONFIDENCE,
    LEAD_ROLE,
    TaskClassifier,
)
from agent_resolver.classification.keywords import DEFAULT_DOMAIN_KEYWORDS, KeywordRegistry

__all__ = [
    "DEFAULT_DOMAIN_KEYWORDS",
    "DOMAIN_AGENTS",
    "DOMAIN_PRIORITY",
    "EXPLICIT_DOMAIN_CONFIDENCE",
    "KeywordRegistry",
    "LEAD_ROLE",
    "TaskClassifier",
]
