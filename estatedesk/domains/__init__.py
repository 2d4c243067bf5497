"""Search domains: agents, campaigns, tasks and leads."""

from types import ModuleType
from typing import Any

from estatedesk.domains import agents, campaigns, leads, tasks
from estatedesk.search.orchestrator import SearchDomain

DOMAINS: dict[str, ModuleType] = {
    agents.NAME: agents,
    campaigns.NAME: campaigns,
    tasks.NAME: tasks,
    leads.NAME: leads,
}


def get_domain(name: str, settings: dict[str, Any] | None = None) -> SearchDomain:
    """SearchDomain for name. Raises ValueError for unknown domains."""
    module = DOMAINS.get(name)
    if module is None:
        raise ValueError(f"Unknown search domain: {name!r} (expected one of {', '.join(DOMAINS)})")
    return module.build_domain(settings)


__all__ = ["DOMAINS", "agents", "campaigns", "get_domain", "leads", "tasks"]
