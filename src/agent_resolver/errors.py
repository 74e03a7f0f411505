"""Exceptions raised by the agent resolver."""

from __future__ import annotations


class AgentResolverError(Exception):
    """Base class for agent resolver errors."""


class RegistryNotInitializedError(AgentResolverError, RuntimeError):
    """A capability registry accessor was called before initialize()."""

    def __init__(self) -> None:
        super().__init__("Agent capability registry not initialized. Call initialize() first.")


class RegistryLoadError(AgentResolverError):
    """The capability registry configuration could not be loaded."""
