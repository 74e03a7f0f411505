"""
Agent Capability Registry

Loads agent capability records, selection-criteria descriptions and task
domain descriptions from a JSON registry and indexes them for lookup.

Registry file layout:
    {
        "capabilities": {"<role>": {"domains": [...], "expertise": [...],
                                    "priority": 80, "selectionCriteria": [...]}},
        "selectionCriteria": {"<criterion>": "<description>"},
        "taskDomains": {"<domain>": "<description>"},
        "relatedDomains": {"<domain>": ["<domain>", ...]}      (optional)
    }
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from agent_resolver.errors import RegistryLoadError, RegistryNotInitializedError
from agent_resolver.models import AgentCapability

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH: Final[Path] = Path(__file__).parent / "default_registry.json"

DEFAULT_RELATED_DOMAINS: Final[dict[str, list[str]]] = {
    "infrastructure": ["backend"],
    "security": ["backend", "core-language"],
    "backend": ["core-language", "infrastructure"],
    "core-language": ["backend", "frontend-general", "frontend-framework"],
    "frontend-general": ["core-language"],
    "frontend-framework": ["frontend-general", "core-language"],
    "design": ["frontend-general"],
}

# Async loader: () -> parsed registry document
LoadFn = Callable[[], Awaitable[Any]]


def json_file_loader(path: Path) -> LoadFn:
    """Loader reading a JSON registry file off the event loop."""

    async def load() -> Any:
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as exc:
            raise RegistryLoadError(f"Cannot read agent registry {path}: {exc}") from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise RegistryLoadError(f"Invalid JSON in agent registry {path}: {exc}") from exc

    return load


@dataclass(frozen=True)
class RegistrySnapshot:
    """Fully built registry indexes; replaced as a whole on reload."""

    capabilities: dict[str, AgentCapability] = field(default_factory=dict)
    selection_criteria: dict[str, str] = field(default_factory=dict)
    task_domains: dict[str, str] = field(default_factory=dict)
    related_domains: dict[str, list[str]] = field(default_factory=dict)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise RegistryLoadError(f"Registry section '{name}' must be an object")
    return value


def _string_list(role: str, record: Mapping[str, Any], key: str) -> list[str]:
    value = record.get(key)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    logger.warning("Ignoring malformed capability field", extra={"role": role, "field": key})
    return []


def _priority(role: str, record: Mapping[str, Any]) -> int:
    value = record.get("priority")
    if isinstance(value, bool) or value is None:
        logger.warning("Capability has no priority, defaulting to 0", extra={"role": role})
        return 0
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning(
            "Capability priority is not a finite number, defaulting to 0", extra={"role": role}
        )
        return 0


def parse_capability(role: str, record: Any) -> AgentCapability:
    """Build a capability, keeping partial records rather than dropping them."""
    if not isinstance(record, Mapping):
        logger.warning("Capability record is not an object, keeping role only", extra={"role": role})
        return AgentCapability(role=role)

    return AgentCapability(
        role=role,
        priority=_priority(role, record),
        domains=_string_list(role, record, "domains"),
        expertise=_string_list(role, record, "expertise"),
        selection_criteria=_string_list(role, record, "selectionCriteria"),
    )


def parse_registry(data: Any) -> RegistrySnapshot:
    """
    Build a snapshot from a registry document.

    Raises:
        RegistryLoadError: the document or one of its sections has the wrong shape
    """
    if not isinstance(data, Mapping):
        raise RegistryLoadError("Agent registry must be a JSON object")

    capabilities = data.get("capabilities")
    if not isinstance(capabilities, Mapping):
        raise RegistryLoadError("Agent registry 'capabilities' section must be an object")

    related = {
        str(domain): [str(d) for d in targets] if isinstance(targets, (list, tuple)) else []
        for domain, targets in _section(data, "relatedDomains").items()
    }

    return RegistrySnapshot(
        capabilities={str(role): parse_capability(str(role), rec) for role, rec in capabilities.items()},
        selection_criteria={str(k): str(v) for k, v in _section(data, "selectionCriteria").items()},
        task_domains={str(k): str(v) for k, v in _section(data, "taskDomains").items()},
        related_domains=related or dict(DEFAULT_RELATED_DOMAINS),
    )


class CapabilityRegistry:
    """
    Indexed agent capabilities.

    Lifecycle: constructed empty -> initialize() -> ready. Accessors raise
    RegistryNotInitializedError until initialize() has completed.
    """

    def __init__(self, registry_path: Path | None = None, loader: LoadFn | None = None) -> None:
        self.registry_path = registry_path or DEFAULT_REGISTRY_PATH
        self._load = loader or json_file_loader(self.registry_path)
        self._snapshot: RegistrySnapshot | None = None

    @property
    def initialized(self) -> bool:
        return self._snapshot is not None

    async def initialize(self) -> None:
        """Load the registry. Does nothing when already initialized."""
        if self._snapshot is not None:
            logger.debug("Registry already initialized")
            return
        await self._load_snapshot()

    async def reload(self) -> None:
        """Re-read the registry and swap in the new indexes; keeps the old ones on failure."""
        await self._load_snapshot()

    async def _load_snapshot(self) -> None:
        try:
            snapshot = parse_registry(await self._load())
        except RegistryLoadError:
            logger.error("Failed to load agent capability registry", extra={"path": str(self.registry_path)})
            raise
        except Exception as exc:
            logger.error("Failed to load agent capability registry", extra={"path": str(self.registry_path)})
            raise RegistryLoadError(f"Failed to load agent registry: {exc}") from exc

        self._snapshot = snapshot
        logger.info(
            "Agent capability registry initialized",
            extra={
                "agent_count": len(snapshot.capabilities),
                "criteria_count": len(snapshot.selection_criteria),
                "domain_count": len(snapshot.task_domains),
            },
        )

    def _ready(self) -> RegistrySnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise RegistryNotInitializedError()
        return snapshot

    # ═══════════════════════════════════════════════════════════════════
    # LOOKUPS
    # ═══════════════════════════════════════════════════════════════════

    def get_capability(self, role: str) -> AgentCapability | None:
        return self._ready().capabilities.get(role)

    def has_agent(self, role: str) -> bool:
        return role in self._ready().capabilities

    def get_all_capabilities(self) -> dict[str, AgentCapability]:
        """All capabilities in registry order (a copy)."""
        return dict(self._ready().capabilities)

    def find_agents_by_domain(self, domain: str) -> list[str]:
        """Roles covering a domain, highest priority first."""
        matching = [cap for cap in self._ready().capabilities.values() if domain in cap.domains]
        matching.sort(key=lambda cap: cap.priority, reverse=True)
        return [cap.role for cap in matching]

    def find_agents_by_criteria(self, criteria: Iterable[str]) -> list[str]:
        """Roles matching any criterion, by (match count, priority) descending."""
        wanted = set(criteria)
        if not wanted:
            return []

        ranked: list[tuple[int, int, str]] = []
        for cap in self._ready().capabilities.values():
            match_count = len(wanted.intersection(cap.selection_criteria))
            if match_count > 0:
                ranked.append((match_count, cap.priority, cap.role))

        ranked.sort(key=lambda item: (item[0], item[1]), reverse=True)
        return [role for _, _, role in ranked]

    def find_best_agent(self, domain: str, criteria: Iterable[str] = ()) -> str | None:
        """
        Best role for a domain, preferring one that also matches the criteria.

        Falls back to the highest-priority domain role; None for unknown domains.
        """
        domain_agents = self.find_agents_by_domain(domain)
        if not domain_agents:
            return None

        criteria = list(criteria)
        if not criteria:
            return domain_agents[0]

        criteria_agents = set(self.find_agents_by_criteria(criteria))
        for role in domain_agents:
            if role in criteria_agents:
                return role
        return domain_agents[0]

    def get_related_domains(self, domain: str) -> list[str]:
        return list(self._ready().related_domains.get(domain, []))

    def get_selection_criterion_description(self, criterion: str) -> str | None:
        return self._ready().selection_criteria.get(criterion)

    def get_task_domain_description(self, domain: str) -> str | None:
        return self._ready().task_domains.get(domain)

    def get_all_selection_criteria(self) -> list[str]:
        return list(self._ready().selection_criteria)

    def get_all_task_domains(self) -> list[str]:
        return list(self._ready().task_domains)

    def get_stats(self) -> dict[str, Any]:
        snapshot = self._ready()

        agents_by_domain: dict[str, int] = {}
        total_agent_criteria = 0
        for cap in snapshot.capabilities.values():
            for domain in cap.domains:
                agents_by_domain[domain] = agents_by_domain.get(domain, 0) + 1
            total_agent_criteria += len(cap.selection_criteria)

        agent_count = len(snapshot.capabilities)
        return {
            "total_agents": agent_count,
            "total_domains": len(snapshot.task_domains),
            "total_criteria": len(snapshot.selection_criteria),
            "agents_by_domain": agents_by_domain,
            "average_criteria_per_agent": total_agent_criteria / agent_count if agent_count else 0.0,
        }
