"""Agent capability registry."""

from agent_resolver.registry.capability_registry import (
    DEFAULT_REGISTRY_PATH,
    DEFAULT_RELATED_DOMAINS,
    CapabilityRegistry,
    LoadFn,
    RegistrySnapshot,
    json_file_loader,
    parse_registry,
)

__all__ = [
    "DEFAULT_REGISTRY_PATH",
    "DEFAULT_RELATED_DOMAINS",
    "CapabilityRegistry",
    "LoadFn",
    "RegistrySnapshot",
    "json_file_loader",
    "parse_registry",
]
