"""FastAPI server for programmatic agent resolution."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import click
from fastapi import Depends, FastAPI

from agent_resolver import __version__
from agent_resolver.errors import AgentResolverError
from agent_resolver.models import TaskContext
from agent_resolver.resolver import AgentResolver, build_resolver

app = FastAPI(
    title="Agent Resolver API",
    version=__version__,
    description="Capability-based agent selection API",
)

_start_time = time.monotonic()
_resolver = build_resolver()


def get_resolver() -> AgentResolver:
    return _resolver


def _parse_task(request: dict[str, Any]) -> TaskContext:
    return TaskContext.from_dict(request)


@app.get("/api/health")
async def health() -> dict[str, Any]:
    """Health check."""
    uptime = time.monotonic() - _start_time
    return {"status": "ok", "version": __version__, "uptime_seconds": round(uptime, 1)}


@app.post("/api/resolve")
async def resolve(
    request: dict[str, Any], resolver: AgentResolver = Depends(get_resolver)
) -> dict[str, Any]:
    """Resolve the best agent for a task context."""
    try:
        task_context = _parse_task(request)
    except (TypeError, ValueError) as exc:
        return {"error": str(exc)}
    selection = await resolver.resolve_agent(task_context)
    return selection.to_dict()


@app.post("/api/analysis")
async def analysis(
    request: dict[str, Any], resolver: AgentResolver = Depends(get_resolver)
) -> dict[str, Any]:
    """Full pipeline state for a task context."""
    try:
        task_context = _parse_task(request)
        detailed = await resolver.get_detailed_analysis(task_context)
    except (AgentResolverError, TypeError, ValueError) as exc:
        return {"error": str(exc)}
    return detailed.to_dict()


@app.get("/api/validate")
async def validate(resolver: AgentResolver = Depends(get_resolver)) -> dict[str, Any]:
    """Check that the agent registry loads."""
    return await resolver.validate_services()


@app.get("/api/stats")
async def stats(resolver: AgentResolver = Depends(get_resolver)) -> dict[str, Any]:
    """Resolver cache sizes and thresholds, plus registry statistics."""
    data: dict[str, Any] = {"resolver": resolver.get_stats()}
    try:
        await resolver.registry.initialize()
        data["registry"] = resolver.registry.get_stats()
    except AgentResolverError as exc:
        data["registry"] = {"error": str(exc)}
    return data


@app.get("/api/agents")
async def agents(
    domain: str | None = None, resolver: AgentResolver = Depends(get_resolver)
) -> dict[str, Any]:
    """Registered agents, optionally limited to one domain."""
    try:
        await resolver.registry.initialize()
    except AgentResolverError as exc:
        return {"error": str(exc)}

    capabilities = resolver.registry.get_all_capabilities()
    roles = resolver.registry.find_agents_by_domain(domain) if domain else list(capabilities)
    return {"agents": [capabilities[role].to_dict() for role in roles], "count": len(roles)}


@click.command()
@click.option("--port", default=3849, help="Port to listen on")
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option(
    "--registry",
    "registry_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Agent registry JSON file",
)
def main(port: int, host: str, registry_path: Path | None) -> None:
    """Start the Agent Resolver API server."""
    import uvicorn

    global _resolver
    if registry_path is not None:
        _resolver = build_resolver(registry_path=registry_path)

    uvicorn.run(app, host=host, port=port)
